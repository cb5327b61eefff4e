"""Tests for the Typer CLI."""

from __future__ import annotations

from unittest.mock import patch

from typer.testing import CliRunner

from wxwarn import __version__
from wxwarn.cli import app
from wxwarn.errors import UnexpectedEof
from wxwarn.models import AttributeRecord, FieldValue, MatchResult

runner = CliRunner()


def _match(index: int, event: str) -> MatchResult:
    values = {
        "PROD_TYPE": event,
        "ISSUANCE": "202307221851",
        "EXPIRATION": "202307250000",
        "WFO": "GYX",
        "AREA_DESC": "Strafford",
    }
    record = AttributeRecord(
        index=index, values={k: FieldValue("text", v) for k, v in values.items()}
    )
    return MatchResult(index=index, record=record)


class TestCli:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_prints_alerts(self):
        matches = [_match(0, "Heat Advisory"), _match(4, "Air Quality Alert")]
        with patch("wxwarn.cli.lookup_alerts", return_value=matches) as lookup:
            result = runner.invoke(app, ["--lat", "43.2683199", "--lon", "-70.8635506"])
        assert result.exit_code == 0
        assert "Heat Advisory issued 202307221851" in result.output
        assert "Air Quality Alert issued" in result.output
        assert result.output.index("Heat Advisory") < result.output.index("Air Quality")
        config, lat, lon = lookup.call_args.args
        assert (lat, lon) == (43.2683199, -70.8635506)
        assert config.fetch_details is True
        assert config.cache_enabled is True

    def test_flags_reach_config(self):
        with patch("wxwarn.cli.lookup_alerts", return_value=[]) as lookup:
            result = runner.invoke(app, ["--no-details", "--no-cache"])
        assert result.exit_code == 0
        config = lookup.call_args.args[0]
        assert config.fetch_details is False
        assert config.cache_enabled is False

    def test_no_alerts_message(self):
        with patch("wxwarn.cli.lookup_alerts", return_value=[]):
            result = runner.invoke(app, ["--lat", "0", "--lon", "0"])
        assert result.exit_code == 0
        assert "No active alerts" in result.output

    def test_json_output(self):
        with patch("wxwarn.cli.lookup_alerts", return_value=[_match(2, "Heat Advisory")]):
            result = runner.invoke(app, ["--json"])
        assert result.exit_code == 0
        assert '"index": 2' in result.output
        assert '"PROD_TYPE": "Heat Advisory"' in result.output

    def test_corrupt_data_exits_nonzero(self):
        error = UnexpectedEof("needed 8 bytes, 3 available", payload="shp", offset=236)
        with patch("wxwarn.cli.lookup_alerts", side_effect=error):
            result = runner.invoke(app, [])
        assert result.exit_code == 1
        assert "Alert data is unusable" in result.output

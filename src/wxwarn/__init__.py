"""wxwarn: display NOAA weather alerts in force at a latitude/longitude."""

from wxwarn.alerts import find_alerts, format_alert, load_dataset, match_alerts
from wxwarn.errors import DataIntegrityError, FormatError, WxWarnError
from wxwarn.geo import contains
from wxwarn.models import Point
from wxwarn.readers import parse_attributes, parse_shapes

__version__ = "0.1.0"

__all__ = [
    "DataIntegrityError",
    "FormatError",
    "Point",
    "WxWarnError",
    "__version__",
    "contains",
    "find_alerts",
    "format_alert",
    "load_dataset",
    "match_alerts",
    "parse_attributes",
    "parse_shapes",
]

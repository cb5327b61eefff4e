"""Binary readers for the shapefile pair (.shp geometry, .dbf attributes)."""

from wxwarn.readers.dbf import parse_attributes
from wxwarn.readers.shp import parse_shapes

__all__ = ["parse_attributes", "parse_shapes"]

from .connection import SpatialiteConnection, quote_identifier, spatialite_available
from .metadata import add_geometry_column, has_table, initialize, is_initialized

__all__ = [
    "SpatialiteConnection", "quote_identifier", "spatialite_available",
    "add_geometry_column", "has_table", "initialize", "is_initialized",
]

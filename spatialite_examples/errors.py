"""
errors.py - Exception hierarchy for the SpatiaLite examples.

Every failure a run can hit maps to one subclass, so the CLI can report it
and exit non-zero without knowing which step raised it.
"""


class SpatialiteExampleError(Exception):
    """Base class for all handled errors."""


class UsageError(SpatialiteExampleError):
    """Bad command-line arguments."""


class ConfigError(SpatialiteExampleError):
    """Invalid run configuration or sample data."""


class ConnectionOpenError(SpatialiteExampleError):
    """The database file could not be opened or created."""


class ExtensionLoadError(SpatialiteExampleError):
    """The SpatiaLite extension could not be loaded into the connection."""


class MetadataCheckError(SpatialiteExampleError):
    """The catalog lookup for spatial metadata failed."""


class MetadataInitError(SpatialiteExampleError):
    """InitSpatialMetaData() failed."""


class SchemaError(SpatialiteExampleError):
    """Table creation or geometry column registration failed."""


class TransactionError(SpatialiteExampleError):
    """BEGIN/COMMIT failed or a statement inside the transaction failed."""


class ShapefileImportError(SpatialiteExampleError):
    """The shapefile is missing, unreadable, or ImportSHP() failed."""


class ShapefileFetchError(SpatialiteExampleError):
    """The shapefile archive could not be downloaded or extracted."""


class QueryError(SpatialiteExampleError):
    """A containment query could not be prepared or executed."""

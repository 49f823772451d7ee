"""
metadata.py
SpatiaLite metadata bootstrap and geometry column registration.
"""

import sqlite3

from spatialite_examples.config import GeometryColumn
from spatialite_examples.errors import MetadataCheckError, MetadataInitError, SchemaError
from spatialite_examples.utils.logger import get_logger
from .connection import SpatialiteConnection

logger = get_logger("db")

# Reserved table created by InitSpatialMetaData(); stores the supported reference systems
SPATIAL_REF_SYS = "spatial_ref_sys"


def has_table(db: SpatialiteConnection, name: str) -> bool:
    row = db.fetch_one("SELECT name FROM sqlite_master WHERE type='table' AND name=?", (name,))
    return row is not None


def is_initialized(db: SpatialiteConnection) -> bool:
    """Return True if the spatial_ref_sys table exists in the database."""
    try:
        return has_table(db, SPATIAL_REF_SYS)
    except sqlite3.Error as e:
        raise MetadataCheckError(f"Error checking if {SPATIAL_REF_SYS} table exists: {e}") from e


def initialize(db: SpatialiteConnection) -> bool:
    """
    Create the SpatiaLite metadata tables unless they already exist.
    Returns True if InitSpatialMetaData() was run, False if there was nothing to do.
    """
    if is_initialized(db):
        logger.debug("Spatial metadata already present")
        return False
    logger.info("Initializing Spatialite...")
    try:
        # 1 = run the whole initialization inside a single transaction
        row = db.fetch_one("SELECT InitSpatialMetaData(1)")
    except sqlite3.Error as e:
        raise MetadataInitError(f"Error initializing Spatialite: {e}") from e
    if not row or not row[0]:
        raise MetadataInitError("Error initializing Spatialite: InitSpatialMetaData() returned 0")
    return True


def geometry_column_exists(db: SpatialiteConnection, column: GeometryColumn) -> bool:
    row = db.fetch_one(
        "SELECT 1 FROM geometry_columns "
        "WHERE Lower(f_table_name) = Lower(?) AND Lower(f_geometry_column) = Lower(?)",
        (column.table, column.column),
    )
    return row is not None


def add_geometry_column(db: SpatialiteConnection, column: GeometryColumn) -> bool:
    """
    Register a geometry column with AddGeometryColumn() unless it is already registered.
    The table must exist. Returns True if the column was added.
    """
    try:
        if geometry_column_exists(db, column):
            logger.info(f"Geometry column {column.table}.{column.column} already registered")
            return False
        logger.info(f"Adding geometry column to table: {column.table}")
        row = db.fetch_one(
            "SELECT AddGeometryColumn(?, ?, ?, ?, ?)",
            (column.table, column.column, column.srid, column.geometry_type, column.dimension),
        )
    except sqlite3.Error as e:
        raise SchemaError(f"Error adding geometry column: {e}") from e
    if not row or not row[0]:
        raise SchemaError(
            f"Error adding geometry column: AddGeometryColumn('{column.table}', '{column.column}', "
            f"{column.srid}, '{column.geometry_type}', '{column.dimension}') returned 0"
        )
    return True

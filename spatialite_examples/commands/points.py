"""
Example 1: Creating a new SpatiaLite database and adding some tourist
places in Brazil to it.

Bootstraps the spatial metadata, creates a table of points, registers a
POINT geometry column on it and inserts the places in a single transaction.
"""

import sqlite3
from typing import Sequence

from spatialite_examples.config import (
    DEFAULT_SRID, POINTS_GEOMETRY_COLUMN, POINTS_TABLE, TOURIST_PLACES, GeometryColumn, NamedPoint, RunConfig,
)
from spatialite_examples.db import SpatialiteConnection, add_geometry_column, initialize, quote_identifier
from spatialite_examples.errors import SchemaError, TransactionError
from spatialite_examples.utils.logger import get_logger

logger = get_logger()


def create_points_table(db: SpatialiteConnection, table_name: str = POINTS_TABLE) -> None:
    logger.info(f"Creating table: {table_name}")
    try:
        db.execute(
            f"CREATE TABLE IF NOT EXISTS {quote_identifier(table_name)} "
            "(id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL)"
        )
    except sqlite3.Error as e:
        raise SchemaError(f"Error creating table: {e}") from e


def insert_places(db: SpatialiteConnection, column: GeometryColumn, places: Sequence[NamedPoint]) -> int:
    """
    Insert one row per place, in order, inside a single transaction.
    A failing insert rolls the whole batch back.
    """
    sql = (
        f"INSERT INTO {quote_identifier(column.table)} ({quote_identifier(column.column)}) "
        "VALUES (GeomFromText(?, ?))"
    )
    inserted = 0
    with db.transaction() as conn:
        for place in places:
            logger.info(f"Adding {place.name}: {place.wkt}")
            try:
                conn.execute(sql, (place.wkt, column.srid))
            except sqlite3.Error as e:
                raise TransactionError(f"Error adding {place.name}: {e}") from e
            inserted += 1
        logger.info("Committing transaction...")
    return inserted


def run_points_example(config: RunConfig, places: Sequence[NamedPoint] = TOURIST_PLACES) -> int:
    """
    Run example 1 against config.db_name.
    Returns the number of places inserted; raises SpatialiteExampleError on failure.
    """
    column = GeometryColumn(POINTS_TABLE, POINTS_GEOMETRY_COLUMN, DEFAULT_SRID, "POINT", "XY")
    with SpatialiteConnection(config.db_name) as db:
        sqlite_version, spatialite_version = db.versions()
        logger.info(f"SQLite version: {sqlite_version}")
        logger.info(f"Spatialite version: {spatialite_version}")

        initialize(db)
        create_points_table(db, column.table)
        add_geometry_column(db, column)

        logger.info("Adding some tourist places in Brazil...")
        inserted = insert_places(db, column, places)

    logger.info("Example 1 Done.")
    return inserted

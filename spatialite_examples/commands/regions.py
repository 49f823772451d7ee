"""
Example 2: Importing a shapefile and performing a spatial query.

Imports the Brazilian states shapefile with ImportSHP() and finds the
state each sample point falls in with ST_Within().
"""

import sqlite3
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from spatialite_examples.config import (
    BR_UF_2022_URL, DEFAULT_SRID, NOT_FOUND, QUERY_PLACES, REGION_NAME_FIELD, REGIONS_GEOMETRY_COLUMN,
    REGIONS_TABLE, NamedPoint, RunConfig,
)
from spatialite_examples.db import SpatialiteConnection, has_table, initialize, quote_identifier
from spatialite_examples.errors import QueryError, ShapefileImportError
from spatialite_examples.shp import describe_shapefile, fetch_shapefile, shapefile_base
from spatialite_examples.utils.logger import get_logger

logger = get_logger()


def import_shapefile(
    db: SpatialiteConnection,
    shapefile: Path,
    table_name: str = REGIONS_TABLE,
    encoding: str = "UTF-8",
    srid: Optional[int] = None,
) -> int:
    """
    Import a shapefile into a new table with ImportSHP().
    SpatiaLite infers the columns and the geometry column from the file.
    Returns the number of rows imported, or 0 if the table was already there.
    """
    if has_table(db, table_name):
        logger.info(f"Table {table_name} already exists, skipping import")
        return 0
    base = str(shapefile_base(shapefile))
    args: Tuple = (base, table_name, encoding)
    if srid is not None:
        args += (srid,)
    sql = f"SELECT ImportSHP({', '.join('?' * len(args))})"
    logger.info(f"Importing shapefile: {base}")
    logger.debug(f"{sql} {args}")
    try:
        row = db.fetch_one(sql, args)
    except sqlite3.Error as e:
        raise ShapefileImportError(f"Error importing shapefile: {e}") from e
    rows = row[0] if row else None
    if not rows or rows < 0:
        raise ShapefileImportError(f"Error importing shapefile: ImportSHP() imported no rows from {base}")
    logger.info(f"Imported {rows} rows into {table_name}")
    return rows


def find_region(
    db: SpatialiteConnection,
    place: NamedPoint,
    table_name: str = REGIONS_TABLE,
    name_field: str = REGION_NAME_FIELD,
    geometry_column: str = REGIONS_GEOMETRY_COLUMN,
    srid: int = DEFAULT_SRID,
) -> Optional[str]:
    """Return the name of the first region containing place, or None."""
    sql = (
        f"SELECT {quote_identifier(name_field)} FROM {quote_identifier(table_name)} "
        f"WHERE ST_Within(GeomFromText(?, ?), {quote_identifier(geometry_column)}) = 1"
    )
    try:
        row = db.fetch_one(sql, (place.wkt, srid))
    except sqlite3.Error as e:
        raise QueryError(f"Error preparing statement: {e}") from e
    if row is None:
        return None
    return row[0]


def run_regions_example(
    config: RunConfig, places: Sequence[NamedPoint] = QUERY_PLACES
) -> List[Tuple[NamedPoint, Optional[str]]]:
    """
    Run example 2 against config.db_name.
    Returns (place, region name or None) for each place, in order.
    """
    if config.fetch_shapefile:
        fetch_shapefile(BR_UF_2022_URL, shapefile_base(config.shapefile))
    info = describe_shapefile(config.shapefile, required_field=REGION_NAME_FIELD)
    logger.info(f"Shapefile {info.path}: {info.feature_count} {info.geometry_type} features, CRS {info.crs}")

    results = []
    with SpatialiteConnection(config.db_name, relaxed_security=config.relaxed_security) as db:
        initialize(db)
        import_shapefile(db, config.shapefile, REGIONS_TABLE, config.encoding, config.shapefile_srid)

        logger.info("Checking what are the corresponding State names for the following points:")
        for place in places:
            region = find_region(db, place)
            print(f"{place.name} ---> {region if region is not None else NOT_FOUND}")
            results.append((place, region))

    logger.info("Example 2 Done.")
    return results

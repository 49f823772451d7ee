"""
config.py - Defaults, run configuration and the sample data both examples use.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import shapely.wkt
from shapely.errors import ShapelyError

from spatialite_examples.errors import ConfigError

MEMORY_DB = ":memory:"

# 4326 = WGS84 lat/long
DEFAULT_SRID = 4326
DEFAULT_ENCODING = "UTF-8"

# Base path without the .shp suffix, the way ImportSHP() expects it
DEFAULT_SHAPEFILE = Path(os.environ.get("SPATIALITE_EXAMPLES_SHAPEFILE", Path("shp") / "BR_UF_2022"))

# IBGE 2022 state boundaries (SIRGAS 2000)
BR_UF_2022_URL = (
    "https://geoftp.ibge.gov.br/organizacao_do_territorio/malhas_territoriais/"
    "malhas_municipais/municipio_2022/Brasil/BR/BR_UF_2022.zip"
)

POINTS_TABLE = "points"
POINTS_GEOMETRY_COLUMN = "geom"
REGIONS_TABLE = "location"
REGIONS_GEOMETRY_COLUMN = "geometry"
REGION_NAME_FIELD = "NM_UF"
NOT_FOUND = "Not found"

# Tried in order by SpatialiteConnection
SPATIALITE_LIBRARIES: Tuple[str, ...] = tuple(
    name for name in (os.environ.get("SPATIALITE_LIBRARY"), "mod_spatialite", "libspatialite") if name
)


@dataclass(frozen=True)
class NamedPoint:
    """A display name and the WKT literal of its location."""
    name: str
    wkt: str

    def __post_init__(self):
        try:
            shapely.wkt.loads(self.wkt)
        except (ShapelyError, TypeError) as e:
            raise ConfigError(f"Invalid WKT for {self.name!r}: {self.wkt!r} ({e})") from e


TOURIST_PLACES: Tuple[NamedPoint, ...] = (
    NamedPoint("Rio de Janeiro", "POINT(-43.1729 -22.9068)"),
    NamedPoint("Foz do Iguacu", "POINT(-54.5854 -25.5165)"),
    NamedPoint("Fernando de Noronha", "POINT(-32.423786 -3.853808)"),
)

QUERY_PLACES: Tuple[NamedPoint, ...] = TOURIST_PLACES + (
    NamedPoint("Null Island", "POINT(0 0)"),
    NamedPoint("New York", "POINT(-74.0060 40.7128)"),
)


@dataclass(frozen=True)
class GeometryColumn:
    """
    A geometry column as registered with AddGeometryColumn().

    geometry_type: POINT, LINESTRING, POLYGON, MULTIPOINT, MULTILINESTRING, MULTIPOLYGON
    dimension: XY, XYZ, XYM or XYZM
    """
    table: str
    column: str
    srid: int = DEFAULT_SRID
    geometry_type: str = "POINT"
    dimension: str = "XY"


@dataclass(frozen=True)
class RunConfig:
    """Everything a single run needs, built once from the command line."""
    example_id: int
    db_name: str = MEMORY_DB
    shapefile: Path = DEFAULT_SHAPEFILE
    encoding: str = DEFAULT_ENCODING
    shapefile_srid: Optional[int] = None
    relaxed_security: bool = True
    fetch_shapefile: bool = False
    log_file: Optional[str] = None

    @property
    def in_memory(self) -> bool:
        return self.db_name == MEMORY_DB

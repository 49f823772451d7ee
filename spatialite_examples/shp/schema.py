"""
schema.py
Reads a shapefile's header with fiona so problems show up before ImportSHP() runs.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

import fiona
from fiona.errors import FionaError

from spatialite_examples.errors import ShapefileImportError


@dataclass
class ShapefileInfo:
    path: Path
    geometry_type: str
    crs: Optional[str]
    feature_count: int
    fields: Dict[str, str] = field(default_factory=dict)


def shapefile_base(path: Union[str, Path]) -> Path:
    """ImportSHP() takes the path without the .shp suffix."""
    path = Path(path)
    if path.suffix.lower() == ".shp":
        return path.with_suffix("")
    return path


def shapefile_path(path: Union[str, Path]) -> Path:
    return Path(f"{shapefile_base(path)}.shp")


def describe_shapefile(path: Union[str, Path], required_field: Optional[str] = None) -> ShapefileInfo:
    """
    Open the shapefile and report its schema.
    Raises ShapefileImportError if it is missing, unreadable, or lacks required_field.
    """
    shp = shapefile_path(path)
    if not shp.exists():
        raise ShapefileImportError(f"Shapefile not found: {shp}")
    try:
        with fiona.open(shp) as src:
            crs = src.crs.to_string() if src.crs else None
            info = ShapefileInfo(
                path=shp,
                geometry_type=src.schema["geometry"],
                crs=crs or None,
                feature_count=len(src),
                fields=dict(src.schema["properties"]),
            )
    except FionaError as e:
        raise ShapefileImportError(f"Could not read shapefile {shp}: {e}") from e
    if required_field and required_field not in info.fields:
        raise ShapefileImportError(
            f"Shapefile {shp} has no '{required_field}' field (fields: {', '.join(info.fields) or 'none'})"
        )
    return info

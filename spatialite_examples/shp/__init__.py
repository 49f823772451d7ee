from .fetch import download_file, fetch_shapefile
from .schema import ShapefileInfo, describe_shapefile, shapefile_base, shapefile_path

__all__ = [
    "download_file", "fetch_shapefile",
    "ShapefileInfo", "describe_shapefile", "shapefile_base", "shapefile_path",
]

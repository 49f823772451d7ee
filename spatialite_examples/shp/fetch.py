"""
fetch.py - Download and unpack the sample shapefile archive
"""

import time
import zipfile
from pathlib import Path

import requests

from spatialite_examples.errors import ShapefileFetchError
from spatialite_examples.utils.logger import get_logger
from .schema import shapefile_path

logger = get_logger("shp")


def download_file(url: str, output_path: Path, retries: int = 4, timeout: int = 60) -> Path:
    """
    Download url to output_path via a .tmp file, retrying with exponential backoff.
    Skips the download if output_path already exists.
    """
    base_delay = 2
    max_delay = 60
    if output_path.exists():
        logger.info(f"File already exists: {output_path}")
        return output_path
    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.with_suffix('.tmp')
    last_exception = None
    for attempt in range(retries):
        logger.info(f"Attempt {attempt+1}/{retries} for {url}")
        try:
            with requests.get(url, stream=True, timeout=timeout) as r:
                r.raise_for_status()
                with open(temp_path, 'wb') as f:
                    for chunk in r.iter_content(chunk_size=8192):
                        if chunk:
                            f.write(chunk)
            temp_path.rename(output_path)
            logger.info(f"Downloaded: {output_path}")
            return output_path
        # RequestException is an OSError, so it has to be caught first
        except requests.RequestException as e:
            last_exception = e
            logger.warning(f"Download failed (attempt {attempt+1}/{retries}) for {url}: {e}")
            if attempt + 1 < retries:
                time.sleep(min(base_delay * (2 ** attempt), max_delay))
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ShapefileFetchError(f"Could not write {output_path}: {e}") from e
    if temp_path.exists():
        temp_path.unlink()
    raise ShapefileFetchError(f"Failed to download {url} after {retries} attempts: {last_exception}")


def fetch_shapefile(url: str, base_path: Path, retries: int = 4, timeout: int = 60) -> Path:
    """
    Make sure base_path.shp exists, downloading and extracting url into its directory if not.
    Returns the shapefile base path (no suffix).
    """
    shp = shapefile_path(base_path)
    if shp.exists():
        logger.info(f"Shapefile already present: {shp}")
        return base_path
    dest_dir = shp.parent
    archive = dest_dir / Path(url).name
    download_file(url, archive, retries=retries, timeout=timeout)
    try:
        with zipfile.ZipFile(archive, 'r') as zf:
            zf.extractall(dest_dir)
    except zipfile.BadZipFile as e:
        raise ShapefileFetchError(f"{archive} is not a valid zip file") from e
    logger.info(f"Unzipped {archive} to {dest_dir}")
    if not shp.exists():
        raise ShapefileFetchError(f"{archive} does not contain {shp.name}")
    return base_path

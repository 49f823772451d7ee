"""
Tests for the shapefile helpers: schema inspection (fiona) and archive download (requests).
"""
import io
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest import mock

import requests

from shapefile_fixtures import write_regions_shapefile

from spatialite_examples.errors import ShapefileFetchError, ShapefileImportError
from spatialite_examples.shp import describe_shapefile, fetch_shapefile, shapefile_base, shapefile_path
from spatialite_examples.shp import fetch


class TestShapefilePaths(unittest.TestCase):
    def test_base_and_path(self):
        self.assertEqual(shapefile_base("shp/BR_UF_2022.shp"), Path("shp/BR_UF_2022"))
        self.assertEqual(shapefile_base("shp/BR_UF_2022"), Path("shp/BR_UF_2022"))
        self.assertEqual(shapefile_path("shp/BR_UF_2022"), Path("shp/BR_UF_2022.shp"))


class TestDescribeShapefile(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_describe(self):
        base = write_regions_shapefile(self.temp_dir.name)
        info = describe_shapefile(base, required_field="NM_UF")
        self.assertEqual(info.feature_count, 3)
        self.assertEqual(info.geometry_type, "Polygon")
        self.assertIn("NM_UF", info.fields)
        self.assertIsNotNone(info.crs)

    def test_missing(self):
        with self.assertRaises(ShapefileImportError):
            describe_shapefile(Path(self.temp_dir.name) / "absent")

    def test_missing_required_field(self):
        base = write_regions_shapefile(self.temp_dir.name)
        with self.assertRaises(ShapefileImportError):
            describe_shapefile(base, required_field="NM_MUN")


def _zip_bytes(names):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name in names:
            zf.writestr(name, b"stub")
    return buf.getvalue()


def _response(payload):
    response = mock.MagicMock()
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    response.raise_for_status.return_value = None
    response.iter_content.return_value = [payload[:10], payload[10:]]
    return response


class TestFetchShapefile(unittest.TestCase):
    URL = "https://example.invalid/BR_UF_2022.zip"

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name) / "shp" / "BR_UF_2022"

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_downloads_and_extracts(self):
        payload = _zip_bytes(["BR_UF_2022.shp", "BR_UF_2022.dbf", "BR_UF_2022.shx", "BR_UF_2022.prj"])
        with mock.patch.object(fetch.requests, "get", return_value=_response(payload)) as get:
            result = fetch_shapefile(self.URL, self.base)
        get.assert_called_once()
        self.assertEqual(result, self.base)
        self.assertTrue(shapefile_path(self.base).exists())
        self.assertTrue((self.base.parent / "BR_UF_2022.zip").exists())

    def test_response_is_closed(self):
        response = _response(_zip_bytes(["BR_UF_2022.shp"]))
        with mock.patch.object(fetch.requests, "get", return_value=response):
            fetch_shapefile(self.URL, self.base)
        response.__exit__.assert_called_once()

    def test_write_failure_removes_partial_file(self):
        response = _response(_zip_bytes(["BR_UF_2022.shp"]))
        archive = self.base.parent / "BR_UF_2022.zip"
        real_open = open

        def failing_open(path, mode="r", *args, **kwargs):
            handle = real_open(path, mode, *args, **kwargs)
            if "w" in mode:
                handle.write(b"partial")
                handle.close()
                raise OSError("No space left on device")
            return handle

        with mock.patch.object(fetch.requests, "get", return_value=response), \
                mock.patch("builtins.open", side_effect=failing_open):
            with self.assertRaises(ShapefileFetchError) as ctx:
                fetch.download_file(self.URL, archive)
        self.assertIn("No space left on device", str(ctx.exception))
        self.assertFalse(archive.with_suffix(".tmp").exists())
        self.assertFalse(archive.exists())
        response.__exit__.assert_called_once()

    def test_skips_when_present(self):
        self.base.parent.mkdir(parents=True)
        shapefile_path(self.base).write_bytes(b"stub")
        with mock.patch.object(fetch.requests, "get") as get:
            fetch_shapefile(self.URL, self.base)
        get.assert_not_called()

    def test_archive_without_shapefile(self):
        payload = _zip_bytes(["README.txt"])
        with mock.patch.object(fetch.requests, "get", return_value=_response(payload)):
            with self.assertRaises(ShapefileFetchError):
                fetch_shapefile(self.URL, self.base)

    def test_network_failure_after_retries(self):
        with mock.patch.object(fetch.requests, "get", side_effect=requests.ConnectionError("down")) as get, \
                mock.patch.object(fetch.time, "sleep") as sleep:
            with self.assertRaises(ShapefileFetchError):
                fetch_shapefile(self.URL, self.base, retries=3)
        self.assertEqual(get.call_count, 3)
        self.assertEqual(sleep.call_count, 2)
        self.assertFalse((self.base.parent / "BR_UF_2022.zip").exists())


if __name__ == "__main__":
    unittest.main()

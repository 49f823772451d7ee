"""
Tests for example 2 (shapefile import and containment queries).
"""
import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import mock

from shapefile_fixtures import write_regions_shapefile

from spatialite_examples.commands import regions
from spatialite_examples.commands.regions import find_region, import_shapefile, run_regions_example
from spatialite_examples.config import QUERY_PLACES, NamedPoint, RunConfig
from spatialite_examples.db import SpatialiteConnection, initialize, spatialite_available
from spatialite_examples.errors import QueryError, ShapefileImportError

SPATIALITE = spatialite_available()


class TestShapefileChecks(unittest.TestCase):
    """Problems with the shapefile are caught before any database is opened."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_missing_shapefile(self):
        config = RunConfig(example_id=2, shapefile=os.path.join(self.temp_dir.name, "BR_UF_2022"))
        with mock.patch.object(regions, "SpatialiteConnection") as connection:
            with self.assertRaises(ShapefileImportError):
                run_regions_example(config)
        connection.assert_not_called()

    def test_shapefile_without_name_field(self):
        schema = {"geometry": "Polygon", "properties": {"SIGLA_UF": "str:2"}}
        base = write_regions_shapefile(self.temp_dir.name, schema=schema)
        config = RunConfig(example_id=2, shapefile=base)
        with mock.patch.object(regions, "SpatialiteConnection") as connection:
            with self.assertRaises(ShapefileImportError) as ctx:
                run_regions_example(config)
        self.assertIn("NM_UF", str(ctx.exception))
        connection.assert_not_called()


@unittest.skipUnless(SPATIALITE, "mod_spatialite not available")
class TestRegionsExample(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.shapefile = write_regions_shapefile(self.temp_dir.name)
        self.config = RunConfig(example_id=2, shapefile=self.shapefile, shapefile_srid=4326)

    def tearDown(self):
        self.temp_dir.cleanup()

    def run_example(self, config=None):
        out = io.StringIO()
        with redirect_stdout(out):
            results = run_regions_example(config or self.config)
        return results, out.getvalue()

    def test_query_results_in_order(self):
        results, out = self.run_example()
        self.assertEqual([place for place, _ in results], list(QUERY_PLACES))
        self.assertEqual(
            [region for _, region in results],
            ["Rio de Janeiro", "Parana", "Pernambuco", None, None],
        )
        lines = [line for line in out.splitlines() if "--->" in line]
        self.assertEqual(lines, [
            "Rio de Janeiro ---> Rio de Janeiro",
            "Foz do Iguacu ---> Parana",
            "Fernando de Noronha ---> Pernambuco",
            "Null Island ---> Not found",
            "New York ---> Not found",
        ])

    def test_shapefile_path_with_suffix(self):
        config = RunConfig(example_id=2, shapefile=f"{self.shapefile}.shp", shapefile_srid=4326)
        results, _ = self.run_example(config)
        self.assertEqual(results[0][1], "Rio de Janeiro")

    def test_security_setting_does_not_leak(self):
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("SPATIALITE_SECURITY", None)
            self.run_example()
            self.assertNotIn("SPATIALITE_SECURITY", os.environ)

    def test_rerun_on_file_database_skips_import(self):
        db_path = os.path.join(self.temp_dir.name, "states.db")
        config = RunConfig(example_id=2, db_name=db_path, shapefile=self.shapefile, shapefile_srid=4326)
        self.run_example(config)
        results, _ = self.run_example(config)
        self.assertEqual(results[2][1], "Pernambuco")
        with SpatialiteConnection(db_path) as db:
            self.assertEqual(db.fetch_one("SELECT COUNT(*) FROM location")[0], 3)

    def test_import_shapefile_counts_rows(self):
        with SpatialiteConnection(relaxed_security=True) as db:
            initialize(db)
            self.assertEqual(import_shapefile(db, self.shapefile, "states", srid=4326), 3)
            self.assertEqual(import_shapefile(db, self.shapefile, "states", srid=4326), 0)

    def test_import_without_relaxed_security_fails(self):
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("SPATIALITE_SECURITY", None)
            with SpatialiteConnection() as db:
                initialize(db)
                with self.assertRaises(ShapefileImportError):
                    import_shapefile(db, self.shapefile, "states", srid=4326)

    def test_find_region_not_found_is_not_an_error(self):
        with SpatialiteConnection(relaxed_security=True) as db:
            initialize(db)
            import_shapefile(db, self.shapefile, "location", srid=4326)
            self.assertIsNone(find_region(db, NamedPoint("South Pole", "POINT(0 -90)")))

    def test_query_against_missing_table(self):
        with SpatialiteConnection() as db:
            with self.assertRaises(QueryError):
                find_region(db, QUERY_PLACES[0], table_name="no_such_table")


if __name__ == "__main__":
    unittest.main()

"""
spatialite_examples: SQLite + SpatiaLite command-line examples.

Example 1 builds a small point catalog; example 2 imports a shapefile of
Brazilian states and runs containment queries against it.

For CLI usage, run:
	python -m spatialite_examples --help
"""

__version__ = "0.1.0"

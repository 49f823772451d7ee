"""
Example runners for the spatialite_examples CLI
"""

from spatialite_examples.commands.points import run_points_example
from spatialite_examples.commands.regions import run_regions_example

EXAMPLES = {
    1: run_points_example,
    2: run_regions_example,
}

__all__ = [
    'EXAMPLES',
    'run_points_example',
    'run_regions_example',
]

"""
Shared test fixtures for the material properties predictor.

A small hand-built catalog keeps the filter and cascade tests readable;
the bundled CSV is exercised separately.
"""

import numpy as np
import pytest

from matprops.catalog import MaterialRecord

# =============================================================================
# IN-MEMORY CATALOG
# =============================================================================

@pytest.fixture
def small_catalog():
    """
    Formula A offers {X, Y}, formula B offers {Y, Z}; names are real crystal
    systems so the records would also pass the CSV loader.
      A: cubic, hexagonal      B: hexagonal, tetragonal
    """
    return (
        MaterialRecord("A", "cubic", "Fm-3m", 0.0, 1.2, False, 0.0),
        MaterialRecord("A", "cubic", "Fd-3m", 0.05, 0.8, False, 0.0),
        MaterialRecord("A", "hexagonal", "P6_3/mmc", 0.02, 0.0, True, 1.5),
        MaterialRecord("B", "hexagonal", "P6_3mc", 0.0, 3.1, False, 0.0),
        MaterialRecord("B", "tetragonal", "I4_1/amd", 0.11, 2.4, False, 2.0),
        MaterialRecord("B", "hexagonal", "P6_3/mmc", 0.07, 0.0, True, 4.2),
    )


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


# =============================================================================
# CSV FIXTURES
# =============================================================================

CSV_HEADER = "formula,crystal_system,space_group,energy_above_hull,band_gap,is_metal,total_magnetization\n"


@pytest.fixture
def write_csv(tmp_path):
    """Write catalog rows under tmp_path and return the file path."""
    def _write(rows, header=CSV_HEADER, name="catalog.csv"):
        path = tmp_path / name
        path.write_text(header + "".join(r + "\n" for r in rows), encoding="utf-8")
        return path
    return _write

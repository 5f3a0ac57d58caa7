# matprops/predictor.py
import logging
from dataclasses import replace
from typing import Optional

import numpy as np

from matprops.catalog import Catalog, MaterialRecord

logger = logging.getLogger(__name__)

# "85% to 90% accuracy": predicted = actual * U[0.85, 0.90)
ACCURACY_RANGE = (0.85, 0.90)
PERTURBED_FIELDS = ("energy_above_hull", "band_gap", "total_magnetization")

_default_rng = np.random.default_rng()


class LookupFailure(LookupError):
    """No catalog record matches the requested (formula, crystal system, space group)."""

    def __init__(self, formula: str, crystal_system: str, space_group: str):
        self.formula = formula
        self.crystal_system = crystal_system
        self.space_group = space_group
        super().__init__(f"No material {formula} / {crystal_system} / {space_group} in catalog")


# -------------------------
# Lookup
# -------------------------
def predict(catalog: Catalog, formula: str, crystal_system: str, space_group: str) -> MaterialRecord:
    """Return the record matching all three fields exactly."""
    if not (formula and crystal_system and space_group):
        raise ValueError("formula, crystal_system and space_group must all be selected")
    for record in catalog:
        if record.key == (formula, crystal_system, space_group):
            return record
    raise LookupFailure(formula, crystal_system, space_group)


# -------------------------
# Noise injector
# -------------------------
def perturb(value: float, rng: Optional[np.random.Generator] = None) -> float:
    """Scale value by a random factor in [0.85, 0.90) and round to 2 decimals."""
    rng = rng if rng is not None else _default_rng
    accuracy = rng.uniform(*ACCURACY_RANGE)
    return round(float(value) * float(accuracy), 2)


def simulate_prediction(record: MaterialRecord, rng: Optional[np.random.Generator] = None) -> MaterialRecord:
    """
    Build the "predicted" counterpart of a record.

    Each numeric property gets its own random factor; is_metal and the
    identifying triple are copied as-is.
    """
    changes = {name: perturb(getattr(record, name), rng) for name in PERTURBED_FIELDS}
    predicted = replace(record, **changes)
    logger.debug("Simulated prediction for %s: %s", record.key, changes)
    return predicted

# matprops/catalog.py
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple, Union

import pandas as pd

logger = logging.getLogger(__name__)


# -------------------------
# Catalog location & schema
# -------------------------
DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "materials.csv"

CRYSTAL_SYSTEMS = (
    "triclinic", "monoclinic", "orthorhombic", "tetragonal",
    "trigonal", "hexagonal", "cubic",
)

REQUIRED_COLUMNS = [
    "formula", "crystal_system", "space_group",
    "energy_above_hull", "band_gap", "is_metal", "total_magnetization",
]
NUMERIC_COLUMNS = ["energy_above_hull", "band_gap", "total_magnetization"]

_TRUTHY = {"true", "yes", "y", "1"}
_FALSY = {"false", "no", "n", "0"}


class CatalogError(ValueError):
    """The catalog file is missing or does not satisfy the schema."""


@dataclass(frozen=True)
class MaterialRecord:
    """One catalog entry: the identifying triple plus its measured properties."""
    formula: str
    crystal_system: str
    space_group: str
    energy_above_hull: float  # eV
    band_gap: float  # eV
    is_metal: bool
    total_magnetization: float  # µB

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.formula, self.crystal_system, self.space_group)


Catalog = Tuple[MaterialRecord, ...]


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise CatalogError(f"Cannot read is_metal value {value!r} as a boolean.")


# -------------------------
# Loading
# -------------------------
def load_catalog(path: Union[str, Path] = DEFAULT_CATALOG_PATH) -> Catalog:
    """
    Read the materials table and return it as a tuple of MaterialRecord.

    Rows keep their file order, which is the display order of every
    dropdown built from the catalog.
    Raises CatalogError when the file is missing or unreadable, a column is absent, a
    number cannot be parsed, a crystal system is unknown, or a
    (formula, crystal_system, space_group) triple appears twice.
    """
    p = Path(path)
    if not p.exists():
        raise CatalogError(f"Catalog file not found: {p}")

    try:
        df = pd.read_csv(p, dtype={"formula": str, "crystal_system": str, "space_group": str})
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise CatalogError(f"Failed to read catalog {p.name}: {e}") from e
    df.columns = [c.strip() for c in df.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise CatalogError(f"Catalog {p.name} is missing columns: {', '.join(missing)}")

    for col in ("formula", "crystal_system", "space_group"):
        df[col] = df[col].fillna("").astype(str).str.strip()
    df["crystal_system"] = df["crystal_system"].str.lower()

    for col in NUMERIC_COLUMNS:
        values = pd.to_numeric(df[col], errors="coerce")
        bad = values.isna()
        if bad.any():
            row = int(bad.idxmax())
            raise CatalogError(f"Non-numeric {col} in row {row + 1}: {df.at[row, col]!r}")
        df[col] = values.astype(float)

    unknown = sorted(set(df["crystal_system"]) - set(CRYSTAL_SYSTEMS))
    if unknown:
        raise CatalogError(f"Unknown crystal systems: {', '.join(unknown)}")

    empty = (df["formula"] == "") | (df["space_group"] == "")
    if empty.any():
        raise CatalogError(f"Empty formula or space group in row {int(empty.idxmax()) + 1}")

    dupes = df.duplicated(subset=["formula", "crystal_system", "space_group"], keep=False)
    if dupes.any():
        first = df[dupes].iloc[0]
        raise CatalogError(
            f"Duplicate entry {first['formula']} / {first['crystal_system']} / {first['space_group']}"
        )

    records = tuple(
        MaterialRecord(
            formula=row.formula,
            crystal_system=row.crystal_system,
            space_group=row.space_group,
            energy_above_hull=float(row.energy_above_hull),
            band_gap=float(row.band_gap),
            is_metal=_parse_bool(row.is_metal),
            total_magnetization=float(row.total_magnetization),
        )
        for row in df.itertuples(index=False)
    )
    logger.info("Loaded %d material records from %s", len(records), p)
    return records


# -------------------------
# Distinct-value helpers
# -------------------------
def distinct(values: Iterable[str]) -> List[str]:
    """Distinct values in first-seen order."""
    return list(dict.fromkeys(values))


def unique_formulas(catalog: Catalog) -> List[str]:
    return distinct(r.formula for r in catalog)


def unique_crystal_systems(catalog: Catalog) -> List[str]:
    return distinct(r.crystal_system for r in catalog)


def unique_space_groups(catalog: Catalog) -> List[str]:
    return distinct(r.space_group for r in catalog)

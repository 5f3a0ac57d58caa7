# matprops/options.py
from dataclasses import dataclass, field, replace
from typing import List, Tuple

from matprops.catalog import Catalog, distinct


@dataclass
class Selection:
    """Current dropdown values; an empty string means unselected."""
    formula: str = ""
    crystal_system: str = ""
    space_group: str = ""

    def is_complete(self) -> bool:
        return bool(self.formula and self.crystal_system and self.space_group)

    def chosen_count(self) -> int:
        return sum(1 for v in (self.formula, self.crystal_system, self.space_group) if v)


@dataclass
class OptionSet:
    crystal_systems: List[str] = field(default_factory=list)
    space_groups: List[str] = field(default_factory=list)


def filter_options(catalog: Catalog, selected_formula: str = "", selected_crystal_system: str = "") -> OptionSet:
    """
    Crystal systems and space groups still consistent with a partial selection.

    The crystal system list depends on the formula only; the space group list
    on both. An empty argument places no constraint on its field.
    """
    by_formula = [r for r in catalog if not selected_formula or r.formula == selected_formula]
    crystal_systems = distinct(r.crystal_system for r in by_formula)
    space_groups = distinct(
        r.space_group for r in by_formula
        if not selected_crystal_system or r.crystal_system == selected_crystal_system
    )
    return OptionSet(crystal_systems=crystal_systems, space_groups=space_groups)


def reconcile_selection(catalog: Catalog, selection: Selection) -> Tuple[Selection, OptionSet]:
    """
    Apply the cascading reset and return the new selection with its options.

    A crystal system that the formula no longer offers is cleared, the
    options are recomputed, then a space group that is no longer offered is
    cleared. The input selection is left untouched.
    """
    current = replace(selection)
    while True:
        options = filter_options(catalog, current.formula, current.crystal_system)
        if current.crystal_system and current.crystal_system not in options.crystal_systems:
            current.crystal_system = ""
            continue
        if current.space_group and current.space_group not in options.space_groups:
            current.space_group = ""
            continue
        return current, options

# matprops/session.py
"""
Per-session UI state and the handlers that move it through the
Idle -> Selecting -> Ready -> Predicting -> Resolved | Failed cycle.

The Streamlit app keeps one SessionState in st.session_state and passes it
to these functions on every event; nothing here touches Streamlit.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from matprops.catalog import Catalog, MaterialRecord
from matprops.options import OptionSet, Selection, filter_options, reconcile_selection
from matprops.predictor import LookupFailure, predict, simulate_prediction

logger = logging.getLogger(__name__)

FIELDS = ("formula", "crystal_system", "space_group")
PREDICTION_ERROR = "Failed to fetch prediction. Please try again."


class Phase(Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    READY = "ready"
    PREDICTING = "predicting"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class SessionState:
    selection: Selection = field(default_factory=Selection)
    options: OptionSet = field(default_factory=OptionSet)
    phase: Phase = Phase.IDLE
    actual: Optional[MaterialRecord] = None
    predicted: Optional[MaterialRecord] = None
    error: Optional[str] = None
    theme: str = "light"


def _selection_phase(selection: Selection) -> Phase:
    if selection.is_complete():
        return Phase.READY
    if selection.chosen_count() == 0:
        return Phase.IDLE
    return Phase.SELECTING


def new_session(catalog: Catalog) -> SessionState:
    return SessionState(options=filter_options(catalog, "", ""))


def select_field(state: SessionState, catalog: Catalog, name: str, value: Optional[str]) -> SessionState:
    """Set one dropdown value, cascade the reset to dependent fields and drop stale results."""
    if name not in FIELDS:
        raise ValueError(f"Unknown selection field: {name}")
    if state.phase is Phase.PREDICTING:
        raise RuntimeError("Selection is locked while a prediction is running")

    setattr(state.selection, name, value or "")
    state.selection, state.options = reconcile_selection(catalog, state.selection)
    state.actual = None
    state.predicted = None
    state.error = None
    state.phase = _selection_phase(state.selection)
    return state


def can_predict(state: SessionState) -> bool:
    """All three fields chosen and nothing running; a finished or failed run may be repeated."""
    return state.selection.is_complete() and state.phase is not Phase.PREDICTING


def start_prediction(state: SessionState) -> SessionState:
    if not can_predict(state):
        raise RuntimeError(f"Cannot start a prediction from phase {state.phase.value}")
    state.phase = Phase.PREDICTING
    state.actual = None
    state.predicted = None
    state.error = None
    return state


def _fail(state: SessionState) -> SessionState:
    state.actual = None
    state.predicted = None
    state.error = PREDICTION_ERROR
    state.phase = Phase.FAILED
    return state


def resolve_prediction(state: SessionState, catalog: Catalog,
                       rng: Optional[np.random.Generator] = None) -> SessionState:
    """Finish a running prediction: look up the record, perturb it, or record the failure."""
    if state.phase is not Phase.PREDICTING:
        raise RuntimeError(f"No prediction running (phase {state.phase.value})")
    sel = state.selection
    try:
        actual = predict(catalog, sel.formula, sel.crystal_system, sel.space_group)
    except LookupFailure as e:
        logger.warning("Prediction failed: %s", e)
        return _fail(state)

    state.actual = actual
    state.predicted = simulate_prediction(actual, rng)
    state.error = None
    state.phase = Phase.RESOLVED
    return state


@contextmanager
def prediction_run(state: SessionState):
    """
    Start a prediction and guarantee it leaves PREDICTING.

    The body is expected to call resolve_prediction; if it exits without
    doing so (an exception, or the script being stopped) the run is marked
    FAILED so the selection is not left locked.
    """
    start_prediction(state)
    try:
        yield state
    finally:
        if state.phase is Phase.PREDICTING:
            logger.error("Prediction for %s did not complete", state.selection)
            _fail(state)


def toggle_theme(state: SessionState) -> SessionState:
    state.theme = "dark" if state.theme == "light" else "light"
    return state

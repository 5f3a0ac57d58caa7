import json
import logging
import os
import time

import matplotlib.pyplot as plt
import numpy as np
import streamlit as st

from matprops.catalog import DEFAULT_CATALOG_PATH, CatalogError, load_catalog, unique_formulas
from matprops.cards import comparison_figure, render_result_cards, results_report
from matprops.session import (
    FIELDS, Phase, can_predict, new_session, prediction_run,
    resolve_prediction, select_field, toggle_theme,
)

# ----------------- CONFIG  -----------------
CATALOG_CSV = os.getenv("MATPROPS_CATALOG", str(DEFAULT_CATALOG_PATH))
PREDICTION_DELAY_S = float(os.getenv("MATPROPS_PREDICTION_DELAY", "0.5"))
LOG_LEVEL = os.getenv("MATPROPS_LOG_LEVEL", "INFO").upper()
SEED = os.getenv("MATPROPS_SEED")
# ---------------------------------------------

# getLevelName maps a known name to its int, anything else to a "Level x" string
_level_ok = isinstance(logging.getLevelName(LOG_LEVEL), int)
logging.basicConfig(level=LOG_LEVEL if _level_ok else logging.INFO,
                    format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger("matprops.app")
if not _level_ok:
    logger.warning("Unknown MATPROPS_LOG_LEVEL %r, using INFO", LOG_LEVEL)


def parse_seed(raw):
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer MATPROPS_SEED %r", raw)
        return None


THEME_CSS = {
    "light": "linear-gradient(90deg, #fbcfe8 0%, #dbeafe 50%, #c7d2fe 100%)",
    "dark": "linear-gradient(90deg, #581c87 0%, #1f2937 50%, #134e4a 100%)",
}
PLACEHOLDERS = {
    "formula": "Select formula",
    "crystal_system": "Select crystal system",
    "space_group": "Select space group",
}
LABELS = {
    "formula": "Formula",
    "crystal_system": "Crystal System",
    "space_group": "Space Group",
}

# --- Page config ---
st.set_page_config(page_title="Material Properties Predictor",
                   page_icon="⚛️",
                   layout="centered")


@st.cache_data
def get_catalog(path: str):
    return load_catalog(path)


try:
    catalog = get_catalog(CATALOG_CSV)
except CatalogError as e:
    logger.error("Could not load catalog: %s", e)
    st.error(f"Failed to load material catalog: {e}")
    st.stop()

if "session" not in st.session_state:
    st.session_state["session"] = new_session(catalog)
    st.session_state["rng"] = np.random.default_rng(parse_seed(SEED))
session = st.session_state["session"]


def _widget_key(name: str) -> str:
    return f"select_{name}"


def _on_select(name: str, catalog):
    # callbacks run before the widgets are drawn, so the cascaded values can be written back
    state = st.session_state["session"]
    select_field(state, catalog, name, st.session_state[_widget_key(name)])
    for other in FIELDS:
        st.session_state[_widget_key(other)] = getattr(state.selection, other) or None


# --- Theme ---
st.markdown(f"<style>.stApp {{ background: {THEME_CSS[session.theme]}; }}</style>",
            unsafe_allow_html=True)
_, theme_col = st.columns([8, 1])
with theme_col:
    st.button("🌙" if session.theme == "light" else "☀️", key="theme_toggle",
              help="Toggle theme", on_click=toggle_theme, args=(session,))

# Header area
st.title("⚛️ Material Properties Predictor")

# --- Selection controls ---
choices = {
    "formula": unique_formulas(catalog),
    "crystal_system": session.options.crystal_systems,
    "space_group": session.options.space_groups,
}
cols = st.columns(3)
for col, name in zip(cols, FIELDS):
    with col:
        st.selectbox(LABELS[name], options=choices[name], index=None,
                     placeholder=PLACEHOLDERS[name], key=_widget_key(name),
                     on_change=_on_select, args=(name, catalog))

predict_clicked = st.button("Predict Properties", key="predict", type="primary",
                            width="stretch", disabled=not can_predict(session))

if predict_clicked:
    with prediction_run(session), st.spinner("Predicting..."):
        time.sleep(PREDICTION_DELAY_S)
        resolve_prediction(session, catalog, st.session_state.get("rng"))

if session.phase is Phase.FAILED and session.error:
    st.error(session.error)

# Results Section
if session.phase is Phase.RESOLVED and session.actual and session.predicted:
    st.markdown("---")
    render_result_cards(session.actual, session.predicted)

    fig = comparison_figure(session.actual, session.predicted)
    st.pyplot(fig)
    plt.close(fig)

    report = results_report(session.actual, session.predicted)
    st.download_button("Download results (JSON)", json.dumps(report, indent=2, ensure_ascii=False),
                       file_name=f"prediction_{session.actual.formula}.json",
                       mime="application/json")
elif session.phase is Phase.IDLE:
    st.info("Choose a formula, crystal system and space group to predict its properties.")

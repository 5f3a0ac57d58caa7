# matprops/cards.py
from typing import Any, Dict, List, Optional, Union

import matplotlib.pyplot as plt
import numpy as np
import streamlit as st

from matprops.catalog import MaterialRecord
from matprops.predictor import PERTURBED_FIELDS

# (label, attribute, unit)
CARD_SPECS = [
    ("Energy Above Hull", "energy_above_hull", "eV"),
    ("Band Gap", "band_gap", "eV"),
    ("Is Metal", "is_metal", None),
    ("Total Magnetization", "total_magnetization", "µB"),
]


def format_value(value: Union[float, bool, str], unit: Optional[str] = None) -> str:
    if isinstance(value, bool):
        text = "Yes" if value else "No"
    else:
        text = f"{value}"
    return f"{text} {unit}" if unit else text


def prediction_card(label: str, value, predicted_value=None, unit: Optional[str] = None):
    """Render one result card: the actual value and, if given, the predicted one."""
    with st.container(border=True):
        st.markdown(f"**{label}**")
        st.markdown(f"**Actual:** {format_value(value, unit)}")
        if predicted_value is not None:
            st.markdown(f"**Predicted:** {format_value(predicted_value, unit)}")


def render_result_cards(actual: MaterialRecord, predicted: MaterialRecord):
    st.subheader("Prediction Results")
    cols = st.columns(2)
    for i, (label, attr, unit) in enumerate(CARD_SPECS):
        with cols[i % 2]:
            prediction_card(label, getattr(actual, attr), getattr(predicted, attr), unit)


# -------------------------
# Chart & report
# -------------------------
def comparison_figure(actual: MaterialRecord, predicted: MaterialRecord):
    """Grouped bar chart of actual vs predicted for the numeric properties."""
    numeric = [(label, attr) for label, attr, _ in CARD_SPECS if attr in PERTURBED_FIELDS]
    labels = [label for label, _ in numeric]
    actual_vals = [getattr(actual, attr) for _, attr in numeric]
    predicted_vals = [getattr(predicted, attr) for _, attr in numeric]

    x = np.arange(len(labels))
    width = 0.38
    fig, ax = plt.subplots(figsize=(6, 3.2))
    ax.bar(x - width / 2, actual_vals, width, label="Actual")
    ax.bar(x + width / 2, predicted_vals, width, label="Predicted")
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel("eV / µB")
    ax.set_title(f"{actual.formula} ({actual.crystal_system}, {actual.space_group})")
    ax.legend()
    fig.tight_layout()
    return fig


def results_report(actual: MaterialRecord, predicted: MaterialRecord) -> Dict[str, Any]:
    """JSON-serialisable summary used for the download button."""
    properties: List[Dict[str, Any]] = []
    for label, attr, unit in CARD_SPECS:
        properties.append({
            "property": label,
            "unit": unit,
            "actual": getattr(actual, attr),
            "predicted": getattr(predicted, attr),
        })
    return {
        "formula": actual.formula,
        "crystal_system": actual.crystal_system,
        "space_group": actual.space_group,
        "properties": properties,
    }

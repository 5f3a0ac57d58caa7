"""
End-to-end checks of the Streamlit page using streamlit's AppTest harness.
The simulated latency is switched off through the environment.
"""

from unittest.mock import patch

import pytest
from streamlit.testing.v1 import AppTest

from matprops.predictor import LookupFailure

APP = "../streamlit_app.py"


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("MATPROPS_PREDICTION_DELAY", "0")
    monkeypatch.setenv("MATPROPS_SEED", "42")
    at = AppTest.from_file(APP, default_timeout=30)
    at.run()
    assert not at.exception
    return at


def _choose(at, name, value):
    at.selectbox(key=f"select_{name}").select(value).run()
    assert not at.exception


def test_initial_page(app):
    assert app.title[0].value.endswith("Material Properties Predictor")
    assert app.button(key="predict").disabled
    formulas = app.selectbox(key="select_formula").options
    assert "TiO2" in formulas and "Fe" in formulas
    assert app.session_state["session"].phase.name == "IDLE"


def test_formula_narrows_crystal_systems(app):
    _choose(app, "formula", "TiO2")
    assert app.selectbox(key="select_crystal_system").options == ["tetragonal", "orthorhombic"]
    assert app.button(key="predict").disabled


def test_full_prediction_flow(app):
    _choose(app, "formula", "Fe")
    _choose(app, "crystal_system", "cubic")
    assert app.selectbox(key="select_space_group").options == ["Im-3m", "Fm-3m"]
    _choose(app, "space_group", "Im-3m")
    assert not app.button(key="predict").disabled

    app.button(key="predict").click().run()
    assert not app.exception
    state = app.session_state["session"]
    assert state.phase.name == "RESOLVED"
    assert state.actual.total_magnetization == pytest.approx(2.31)
    assert 0.85 * 2.31 - 0.005 <= state.predicted.total_magnetization <= 0.90 * 2.31 + 0.005
    assert app.subheader[0].value == "Prediction Results"
    assert any("µB" in m.value for m in app.markdown)


def test_switching_formula_clears_dependent_fields(app):
    _choose(app, "formula", "ZnS")
    _choose(app, "crystal_system", "cubic")
    _choose(app, "space_group", "F-43m")
    # TiO2 has no cubic polymorph
    _choose(app, "formula", "TiO2")
    assert app.selectbox(key="select_crystal_system").value is None
    assert app.selectbox(key="select_space_group").value is None
    assert app.session_state["session"].selection.crystal_system == ""
    assert app.button(key="predict").disabled


def test_theme_toggle(app):
    app.button(key="theme_toggle").click().run()
    assert app.session_state["session"].theme == "dark"


def _choose_fe(at):
    _choose(at, "formula", "Fe")
    _choose(at, "crystal_system", "cubic")
    _choose(at, "space_group", "Im-3m")


def test_predict_again_after_result(app):
    _choose_fe(app)
    app.button(key="predict").click().run()
    assert app.session_state["session"].phase.name == "RESOLVED"
    assert not app.button(key="predict").disabled

    app.button(key="predict").click().run()
    assert not app.exception
    assert app.session_state["session"].phase.name == "RESOLVED"


def test_retry_after_lookup_failure(app):
    _choose_fe(app)
    with patch("matprops.session.predict", side_effect=LookupFailure("Fe", "cubic", "Im-3m")):
        app.button(key="predict").click().run()
    assert app.session_state["session"].phase.name == "FAILED"
    assert app.error[0].value == "Failed to fetch prediction. Please try again."
    assert not app.button(key="predict").disabled

    app.button(key="predict").click().run()
    assert not app.exception
    assert app.session_state["session"].phase.name == "RESOLVED"


def test_unexpected_error_does_not_lock_the_page(app):
    _choose_fe(app)
    with patch("matprops.session.predict", side_effect=RuntimeError("catalog unavailable")):
        app.button(key="predict").click().run()
    assert app.exception
    assert app.session_state["session"].phase.name == "FAILED"

    _choose(app, "formula", "TiO2")
    assert app.session_state["session"].selection.formula == "TiO2"


def test_bad_seed_and_log_level_fall_back(monkeypatch):
    monkeypatch.setenv("MATPROPS_PREDICTION_DELAY", "0")
    monkeypatch.setenv("MATPROPS_SEED", "not-a-number")
    monkeypatch.setenv("MATPROPS_LOG_LEVEL", "chatty")
    at = AppTest.from_file(APP, default_timeout=30)
    at.run()
    assert not at.exception
    _choose_fe(at)
    at.button(key="predict").click().run()
    assert at.session_state["session"].phase.name == "RESOLVED"


def test_unreadable_catalog_shows_error(monkeypatch, tmp_path):
    empty = tmp_path / "empty.csv"
    empty.write_text("", encoding="utf-8")
    monkeypatch.setenv("MATPROPS_CATALOG", str(empty))
    at = AppTest.from_file(APP, default_timeout=30)
    at.run()
    assert not at.exception
    assert "Failed to load material catalog" in at.error[0].value

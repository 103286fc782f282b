import math

import pytest

from sales_dashboard.utils.dataset import Dataset, Observation, get_dataset
from sales_dashboard.utils.insights import PredictionInputError, parse_prediction_inputs
from sales_dashboard.utils.views import (
    MODEL_UNAVAILABLE,
    assumptions_view,
    descriptive_view,
    load_model,
    prediction_view,
    regression_view,
)

DEFAULT_INPUTS = {"x1": 200000, "x2": 10000, "x3": 5, "x4": 8, "x5": 30000}
CFG = {"charts": {"prediction_y_domain": [-250, 350]}}


@pytest.fixture
def broken_dataset():
    base = get_dataset().observations
    return Dataset(tuple(
        Observation(o.month, o.x1, o.x1 * 0.05, o.x3, o.x4, o.x5, o.y) for o in base
    ))


# ---------- input validation ----------

def test_parse_prediction_inputs_accepts_numeric_strings():
    req = parse_prediction_inputs({**DEFAULT_INPUTS, "x3": "5.5"})
    assert req.x3 == 5.5
    assert req.as_dict() == {**{k: float(v) for k, v in DEFAULT_INPUTS.items()}, "x3": 5.5}


@pytest.mark.parametrize(
    "override, match",
    [
        ({"x2": None}, "Missing"),
        ({"x2": "  "}, "Missing"),
        ({"x1": "lots"}, "numeric"),
        ({"x5": True}, "numeric"),
        ({"x3": math.nan}, "finite"),
        ({"x4": 0.5}, "between"),
        ({"x4": 10.5}, "between"),
    ],
)
def test_parse_prediction_inputs_rejects_bad_values(override, match):
    with pytest.raises(PredictionInputError, match=match):
        parse_prediction_inputs({**DEFAULT_INPUTS, **override})


def test_parse_prediction_inputs_rejects_missing_key():
    raw = dict(DEFAULT_INPUTS)
    del raw["x5"]
    with pytest.raises(PredictionInputError, match="x5"):
        parse_prediction_inputs(raw)


# ---------- handlers ----------

def test_model_is_cached_per_dataset():
    a = load_model(get_dataset())
    b = load_model(get_dataset())
    assert a.available and b.available
    assert a.model is b.model


def test_descriptive_view():
    view = descriptive_view(get_dataset())
    assert len(view.table) == 12
    assert view.summary.shape == (6, 6)
    assert list(view.histograms) == ["x1", "x2", "x3", "x4", "x5"]


def test_descriptive_view_summarizes_the_given_dataset():
    base = get_dataset().observations
    scaled = Dataset(tuple(
        Observation(o.month, o.x1, o.x2, o.x3, o.x4, o.x5, o.y * 10) for o in base
    ))
    view = descriptive_view(scaled)

    assert view.summary.loc["Mean", "y"] == pytest.approx(view.table["y"].mean())
    assert view.summary.loc["Mean", "y"] == pytest.approx(2062.5)
    assert view.summary.loc["Median", "y"] == pytest.approx(1850.0)
    assert view.summary["x1"].tolist() == pytest.approx([150000, 177500, 205000, 205000, 232500, 260000])
    # the shared table is untouched
    assert descriptive_view(get_dataset()).summary.loc["Mean", "y"] == pytest.approx(206.25)


def test_regression_view():
    ds = get_dataset()
    view = regression_view(ds, load_model(ds))
    assert view.error is None
    assert view.equation.startswith("Model Equation: y = -138.2188")
    assert list(view.pairs.columns) == ["x1", "x2", "x3", "x4", "x5", "y"]
    assert view.summary.r2 == pytest.approx(0.990960905127, rel=1e-8)


def test_prediction_view_plots_prediction_after_history():
    ds = get_dataset()
    view = prediction_view(ds, load_model(ds), DEFAULT_INPUTS, CFG)
    assert view.error is None
    assert view.text == "Predicted Sales: 146.16"
    assert len(view.history) == 13
    last = view.history.iloc[-1]
    assert last["index"] == 13 and last["series"] == "Predicted"
    assert last["sales"] == pytest.approx(view.predicted)
    assert view.y_domain == (-250.0, 350.0)


def test_prediction_view_extends_domain_for_extrapolation():
    ds = get_dataset()
    view = prediction_view(ds, load_model(ds), {**DEFAULT_INPUTS, "x5": 500000}, CFG)
    assert view.predicted > 350
    assert view.y_domain[1] == pytest.approx(view.predicted)


def test_prediction_view_reports_input_errors():
    ds = get_dataset()
    view = prediction_view(ds, load_model(ds), {**DEFAULT_INPUTS, "x1": "abc"}, CFG)
    assert view.predicted is None
    assert "numeric" in view.error
    assert len(view.history) == 12


def test_assumptions_view():
    view = assumptions_view(load_model(get_dataset()), cfg={})
    assert view.error is None
    assert len(view.results) == 4


def test_failed_fit_degrades_every_view(broken_dataset):
    state = load_model(broken_dataset)
    assert not state.available
    assert "rank-deficient" in state.error

    assert regression_view(broken_dataset, state).error == state.error
    assert prediction_view(broken_dataset, state, DEFAULT_INPUTS, CFG).error == state.error

    checks = assumptions_view(state, cfg={})
    assert checks.error == MODEL_UNAVAILABLE
    assert checks.results == ()

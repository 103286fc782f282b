"""
One handler per dashboard view. Each takes the dataset / model state / user
input and returns a render-ready value; pages only draw what comes back.
The model is fitted once per dataset value and passed in explicitly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

import pandas as pd

from sales_dashboard.utils.config import load_cfg
from sales_dashboard.utils.dataset import PREDICTORS, Dataset, histogram_table
from sales_dashboard.utils.db import summary_stats
from sales_dashboard.utils.diagnostics import DiagnosticResult, run_diagnostics
from sales_dashboard.utils.insights import (
    FittedModel,
    ModelFitError,
    PredictionInputError,
    RegressionSummary,
    equation_string,
    fit_cached,
    parse_prediction_inputs,
    predict,
    summarize,
)

logger = logging.getLogger(__name__)

MODEL_UNAVAILABLE = "Model unavailable: the regression could not be fitted."


@dataclass(frozen=True, eq=False)
class ModelState:
    model: Optional[FittedModel]
    error: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.model is not None


def load_model(dataset: Dataset) -> ModelState:
    try:
        return ModelState(model=fit_cached(dataset))
    except ModelFitError as exc:
        logger.warning("Model fit failed: %s", exc)
        return ModelState(model=None, error=str(exc))


# ---- Descriptive Statistics ----

@dataclass(frozen=True, eq=False)
class DescriptiveView:
    table: pd.DataFrame
    summary: pd.DataFrame
    histograms: dict[str, pd.DataFrame]


def descriptive_view(dataset: Dataset) -> DescriptiveView:
    frame = dataset.to_frame()
    return DescriptiveView(
        table=frame,
        summary=summary_stats(dataset),
        histograms={c: histogram_table(frame[c].to_numpy()) for c in PREDICTORS},
    )


# ---- Regression ----

@dataclass(frozen=True, eq=False)
class RegressionView:
    pairs: pd.DataFrame
    summary: Optional[RegressionSummary] = None
    equation: Optional[str] = None
    error: Optional[str] = None


def regression_view(dataset: Dataset, state: ModelState) -> RegressionView:
    pairs = dataset.model_frame()
    if not state.available:
        return RegressionView(pairs=pairs, error=state.error or MODEL_UNAVAILABLE)
    return RegressionView(
        pairs=pairs,
        summary=summarize(state.model),
        equation=equation_string(state.model),
    )


# ---- Prediction ----

@dataclass(frozen=True, eq=False)
class PredictionView:
    history: pd.DataFrame  # index, sales, series
    predicted: Optional[float] = None
    text: str = ""
    y_domain: tuple[float, float] = (-250.0, 350.0)
    error: Optional[str] = None


def _history(dataset: Dataset, predicted: Optional[float]) -> pd.DataFrame:
    actual = dataset.outcome
    rows = [{"index": i + 1, "sales": float(v), "series": "Actual"} for i, v in enumerate(actual)]
    if predicted is not None:
        rows.append({"index": len(actual) + 1, "sales": predicted, "series": "Predicted"})
    return pd.DataFrame(rows, columns=["index", "sales", "series"])


def prediction_view(
    dataset: Dataset,
    state: ModelState,
    raw_inputs: Mapping[str, object],
    cfg: dict | None = None,
) -> PredictionView:
    cfg = load_cfg() if cfg is None else cfg
    lo, hi = (cfg.get("charts", {}) or {}).get("prediction_y_domain", [-250, 350])

    if not state.available:
        return PredictionView(history=_history(dataset, None), error=state.error or MODEL_UNAVAILABLE)
    try:
        request = parse_prediction_inputs(raw_inputs)
    except PredictionInputError as exc:
        return PredictionView(history=_history(dataset, None), error=str(exc))

    value = predict(state.model, request.as_dict())
    history = _history(dataset, value)
    domain = (min(float(lo), float(history["sales"].min())), max(float(hi), float(history["sales"].max())))
    return PredictionView(
        history=history,
        predicted=value,
        text=f"Predicted Sales: {round(value, 2)}",
        y_domain=domain,
    )


# ---- Assumptions ----

@dataclass(frozen=True, eq=False)
class AssumptionsView:
    results: tuple[DiagnosticResult, ...] = field(default_factory=tuple)
    error: Optional[str] = None


def assumptions_view(state: ModelState, cfg: dict | None = None) -> AssumptionsView:
    if not state.available:
        return AssumptionsView(error=MODEL_UNAVAILABLE)
    return AssumptionsView(results=run_diagnostics(state.model, cfg))

"""
Regression helpers used by the app and unit tests.

Fits the sales model by ordinary least squares (NumPy), renders the fitted
equation and an R-style summary, and evaluates point predictions.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from sales_dashboard.utils.dataset import PREDICTORS, Dataset

logger = logging.getLogger(__name__)

X4_RANGE = (1.0, 10.0)


class ModelFitError(ValueError):
    """The design matrix cannot support a unique least-squares solution."""


class PredictionInputError(ValueError):
    """User-supplied predictor values are missing or malformed."""


@dataclass(frozen=True, eq=False)
class FittedModel:
    names: tuple[str, ...]  # predictor names, intercept excluded
    beta: np.ndarray        # [intercept, b1..bk]
    y_hat: np.ndarray
    resid: np.ndarray
    r2: float
    sigma: float            # residual standard error, sqrt(SSR / (n - p))
    z: np.ndarray           # standardized residuals
    exog: np.ndarray        # design matrix incl. intercept column
    endog: np.ndarray
    xtx_inv: np.ndarray

    @property
    def intercept(self) -> float:
        return float(self.beta[0])

    @property
    def coefficients(self) -> dict[str, float]:
        return {n: float(b) for n, b in zip(self.names, self.beta[1:])}

    @property
    def nobs(self) -> int:
        return int(self.exog.shape[0])

    @property
    def df_resid(self) -> int:
        return self.nobs - int(self.exog.shape[1])

    @property
    def ssr(self) -> float:
        return float(np.sum(self.resid ** 2))


def _frozen(a: np.ndarray) -> np.ndarray:
    a = np.array(a, dtype=float)
    a.setflags(write=False)
    return a


def ols_fit(x: np.ndarray, y: np.ndarray, names: Sequence[str] | None = None) -> FittedModel:
    """
    Fit y = b0 + b1*x1 + ... + bk*xk via ordinary least squares.
    Returns coefficients, predictions, residuals, R^2, residual sigma, and z-residuals.

    - Adds intercept automatically.
    - Raises ModelFitError on non-finite input, too few rows, or a
      rank-deficient design.
    """
    x = np.asarray(x, dtype=float)
    if x.ndim == 1:
        x = x.reshape(-1, 1)
    y = np.asarray(y, dtype=float).reshape(-1)
    if x.shape[0] != y.size:
        raise ModelFitError(f"x has {x.shape[0]} rows but y has {y.size}")
    if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
        raise ModelFitError("Design matrix or outcome contains non-finite values")

    names = tuple(names) if names is not None else tuple(f"x{i + 1}" for i in range(x.shape[1]))
    X = np.c_[np.ones(x.shape[0]), x]
    n, p = X.shape
    if n <= p:
        raise ModelFitError(f"Need more than {p} observations to fit {p} parameters (have {n})")

    rank = np.linalg.matrix_rank(X)
    if rank < p:
        raise ModelFitError(f"Design matrix is rank-deficient (rank {rank} < {p} columns)")

    beta, *_ = np.linalg.lstsq(X, y, rcond=None)
    y_hat = X @ beta
    resid = y - y_hat

    ss_res = float(np.sum(resid ** 2))
    ss_tot = float(np.sum((y - np.mean(y)) ** 2))
    r2 = 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0
    sigma = math.sqrt(ss_res / (n - p))
    z = resid / (sigma if sigma > 0 else 1.0)
    xtx_inv = np.linalg.inv(X.T @ X)

    if not np.all(np.isfinite(beta)):
        raise ModelFitError("Least-squares solution is not finite")

    logger.debug("OLS fit n=%d p=%d r2=%.6f", n, p, r2)
    return FittedModel(
        names=names,
        beta=_frozen(beta),
        y_hat=_frozen(y_hat),
        resid=_frozen(resid),
        r2=r2,
        sigma=sigma,
        z=_frozen(z),
        exog=_frozen(X),
        endog=_frozen(y),
        xtx_inv=_frozen(xtx_inv),
    )


def fit(dataset: Dataset) -> FittedModel:
    """Regress the outcome on all five predictors."""
    return ols_fit(dataset.predictors, dataset.outcome, names=PREDICTORS)


@lru_cache(maxsize=4)
def fit_cached(dataset: Dataset) -> FittedModel:
    logger.info("Fitting sales model on %d observations", len(dataset))
    return fit(dataset)


def predict(model: FittedModel, values: Mapping[str, float] | Sequence[float]) -> float:
    """b0 + sum(bi * xi). No range checks; extrapolation is allowed."""
    if isinstance(values, Mapping):
        x = [float(values[n]) for n in model.names]
    else:
        x = [float(v) for v in values]
    if len(x) != len(model.names):
        raise ValueError(f"Expected {len(model.names)} predictor values, got {len(x)}")
    return float(model.beta[0] + np.dot(model.beta[1:], np.asarray(x, dtype=float)))


def equation_string(model: FittedModel) -> str:
    """
    e.g. 'Model Equation: y = -138.2188 - 0.0005 x1 + 0.0111 x2 ...'
    Coefficients are rounded to 4 decimals, intercept first.
    """
    b = [round(float(v), 4) for v in model.beta]
    parts = [f"{b[0]:.4f}"]
    for coef, name in zip(b[1:], model.names):
        sign = "-" if coef < 0 else "+"
        parts.append(f"{sign} {abs(coef):.4f} {name}")
    return "Model Equation: y = " + " ".join(parts)


# ---------- Summary (lm-style) ----------

@dataclass(frozen=True, eq=False)
class RegressionSummary:
    residual_quantiles: pd.Series
    coefficients: pd.DataFrame  # Estimate, Std. Error, t value, Pr(>|t|)
    sigma: float
    df_resid: int
    r2: float
    adj_r2: float
    f_stat: float
    f_df: tuple[int, int]
    f_pvalue: float

    def to_text(self) -> str:
        q = self.residual_quantiles
        lines = ["Residuals:"]
        lines.append("    " + "  ".join(f"{k:>9}" for k in q.index))
        lines.append("    " + "  ".join(f"{v:>9.4f}" for v in q.values))
        lines.append("")
        lines.append("Coefficients:")
        lines.append(self.coefficients.to_string(float_format=lambda v: f"{v:.6g}"))
        lines.append("")
        lines.append(f"Residual standard error: {self.sigma:.4g} on {self.df_resid} degrees of freedom")
        lines.append(f"Multiple R-squared: {self.r2:.4f},\tAdjusted R-squared: {self.adj_r2:.4f}")
        lines.append(
            f"F-statistic: {self.f_stat:.4g} on {self.f_df[0]} and {self.f_df[1]} DF,  "
            f"p-value: {self.f_pvalue:.4g}"
        )
        return "\n".join(lines)


def summarize(model: FittedModel) -> RegressionSummary:
    n, p = model.exog.shape
    df_resid = n - p
    se = np.sqrt(np.diag(model.xtx_inv) * model.sigma ** 2)
    t_vals = model.beta / se
    p_vals = 2.0 * stats.t.sf(np.abs(t_vals), df_resid)

    index = ["(Intercept)", *model.names]
    coef_df = pd.DataFrame(
        {
            "Estimate": model.beta,
            "Std. Error": se,
            "t value": t_vals,
            "Pr(>|t|)": p_vals,
        },
        index=index,
    )

    q = np.quantile(model.resid, [0.0, 0.25, 0.5, 0.75, 1.0])
    quantiles = pd.Series(q, index=["Min", "1Q", "Median", "3Q", "Max"], name="residual")

    adj_r2 = 1.0 - (1.0 - model.r2) * (n - 1) / df_resid
    df_model = p - 1
    f_stat = (model.r2 / df_model) / ((1.0 - model.r2) / df_resid) if model.r2 < 1 else float("inf")
    f_pvalue = float(stats.f.sf(f_stat, df_model, df_resid))

    return RegressionSummary(
        residual_quantiles=quantiles,
        coefficients=coef_df,
        sigma=model.sigma,
        df_resid=df_resid,
        r2=model.r2,
        adj_r2=adj_r2,
        f_stat=float(f_stat),
        f_df=(df_model, df_resid),
        f_pvalue=f_pvalue,
    )


# ---------- Prediction requests ----------

@dataclass(frozen=True)
class PredictionRequest:
    x1: float
    x2: float
    x3: float
    x4: float
    x5: float

    def as_dict(self) -> dict[str, float]:
        return {n: getattr(self, n) for n in PREDICTORS}


def parse_prediction_inputs(raw: Mapping[str, object]) -> PredictionRequest:
    """Validate widget values before they reach the model."""
    values: dict[str, float] = {}
    for name in PREDICTORS:
        if name not in raw or raw[name] is None or (isinstance(raw[name], str) and not raw[name].strip()):
            raise PredictionInputError(f"Missing value for {name}")
        value = raw[name]
        if isinstance(value, bool):
            raise PredictionInputError(f"{name} must be numeric, got {value!r}")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise PredictionInputError(f"{name} must be numeric, got {value!r}") from None
        if not math.isfinite(number):
            raise PredictionInputError(f"{name} must be a finite number")
        values[name] = number

    lo, hi = X4_RANGE
    if not lo <= values["x4"] <= hi:
        raise PredictionInputError(f"x4 must be between {lo:g} and {hi:g}, got {values['x4']:g}")
    return PredictionRequest(**values)

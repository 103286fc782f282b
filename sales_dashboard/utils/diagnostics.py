"""
Assumption tests for the fitted sales model.

- Durbin-Watson: autocorrelation of residuals, exact p-value (Imhof).
- Breusch-Pagan (studentized): heteroscedasticity.
- Lilliefors: normality of residuals.
- VIF: multicollinearity, one value per predictor.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np
from scipy import integrate
from statsmodels.stats.diagnostic import het_breuschpagan, lilliefors
from statsmodels.stats.outliers_influence import variance_inflation_factor
from statsmodels.stats.stattools import durbin_watson

from sales_dashboard.utils.config import load_cfg, thresholds
from sales_dashboard.utils.insights import FittedModel

logger = logging.getLogger(__name__)

ALTERNATIVES = ("greater", "less", "two-sided")


@dataclass(frozen=True, eq=False)
class DiagnosticResult:
    name: str
    statistic: float
    p_value: float | None
    verdict: str
    flagged: bool  # assumption looks violated at the configured threshold
    details: dict = field(default_factory=dict)

    def to_text(self) -> str:
        lines = [self.name]
        if self.p_value is None:
            lines.append(f"statistic = {self.statistic:.4f}")
        else:
            lines.append(f"statistic = {self.statistic:.4f}, p-value = {self.p_value:.4g}")
        for key, value in self.details.items():
            if isinstance(value, float):
                lines.append(f"{key}: {value:.4f}")
            else:
                lines.append(f"{key}: {value}")
        lines.append(f"Verdict: {self.verdict}")
        return "\n".join(lines)


# ---------- Durbin-Watson ----------

def _imhof_lower_tail(weights: np.ndarray) -> float:
    """P(sum_i w_i * chi2_1 < 0) by numerical inversion of the characteristic function."""
    weights = np.asarray(weights, dtype=float)

    def integrand(u: float) -> float:
        if u == 0.0:
            return 0.5 * float(weights.sum())
        theta = 0.5 * np.arctan(weights * u).sum()
        rho = math.exp(0.25 * np.log1p((weights * u) ** 2).sum())
        return math.sin(theta) / (u * rho)

    value, _ = integrate.quad(integrand, 0.0, np.inf, limit=200)
    return float(np.clip(0.5 - value / math.pi, 0.0, 1.0))


def dw_eigenvalues(exog: np.ndarray) -> np.ndarray:
    """Non-zero eigenvalues of M A M: A the first-difference form, M the residual maker."""
    exog = np.asarray(exog, dtype=float)
    n, k = exog.shape
    q, _ = np.linalg.qr(exog, mode="complete")
    basis = q[:, k:]
    diff = np.diff(np.eye(n), axis=0)
    a = diff.T @ diff
    return np.linalg.eigvalsh(basis.T @ a @ basis)


def dw_pvalue(statistic: float, exog: np.ndarray, alternative: str = "greater") -> float:
    """
    Exact p-value of the Durbin-Watson statistic for the given design.

    'greater' tests for positive autocorrelation (small DW), 'less' for
    negative autocorrelation, 'two-sided' for either.
    """
    if alternative not in ALTERNATIVES:
        raise ValueError(f"alternative must be one of {ALTERNATIVES}, got {alternative!r}")
    nu = dw_eigenvalues(exog)
    lower = _imhof_lower_tail(nu - statistic)
    if alternative == "greater":
        return lower
    if alternative == "less":
        return 1.0 - lower
    return float(min(1.0, 2.0 * min(lower, 1.0 - lower)))


def durbin_watson_test(
    model: FittedModel,
    alternative: str = "greater",
    lower: float | None = None,
    upper: float | None = None,
    alpha: float | None = None,
) -> DiagnosticResult:
    th = thresholds()
    lower = th["dw_lower"] if lower is None else lower
    upper = th["dw_upper"] if upper is None else upper
    alpha = th["alpha"] if alpha is None else alpha

    stat = float(durbin_watson(model.resid))
    p = dw_pvalue(stat, model.exog, alternative)

    if stat < lower:
        verdict = "positive autocorrelation in residuals"
    elif stat > upper:
        verdict = "negative autocorrelation in residuals"
    else:
        verdict = "no autocorrelation in residuals"
    significant = p < alpha
    if not significant and not lower <= stat <= upper:
        verdict += f" (statistic outside {lower:g}-{upper:g}, but not significant at alpha={alpha:g})"

    target = {"greater": "greater than 0", "less": "less than 0", "two-sided": "not 0"}[alternative]
    return DiagnosticResult(
        name="Durbin-Watson test",
        statistic=stat,
        p_value=p,
        verdict=verdict,
        flagged=significant or not lower <= stat <= upper,
        details={"alternative hypothesis": f"true autocorrelation is {target}"},
    )


# ---------- Breusch-Pagan ----------

def breusch_pagan_test(model: FittedModel, alpha: float | None = None) -> DiagnosticResult:
    alpha = thresholds()["alpha"] if alpha is None else alpha
    lm, lm_pvalue, _, _ = het_breuschpagan(np.asarray(model.resid), np.asarray(model.exog), robust=True)
    df = int(model.exog.shape[1] - 1)
    flagged = float(lm_pvalue) < alpha
    verdict = (
        "heteroscedasticity detected (residual variance depends on the predictors)"
        if flagged
        else "no evidence of heteroscedasticity"
    )
    return DiagnosticResult(
        name="studentized Breusch-Pagan test",
        statistic=float(lm),
        p_value=float(lm_pvalue),
        verdict=verdict,
        flagged=flagged,
        details={"df": df},
    )


# ---------- Lilliefors ----------

def lilliefors_test(model: FittedModel, alpha: float | None = None) -> DiagnosticResult:
    alpha = thresholds()["alpha"] if alpha is None else alpha
    ksstat, pvalue = lilliefors(np.asarray(model.resid), dist="norm", pvalmethod="approx")
    flagged = float(pvalue) < alpha
    verdict = "residuals deviate from normality" if flagged else "residuals are consistent with normality"
    return DiagnosticResult(
        name="Lilliefors (Kolmogorov-Smirnov) normality test",
        statistic=float(ksstat),
        p_value=float(pvalue),
        verdict=verdict,
        flagged=flagged,
    )


# ---------- VIF ----------

def variance_inflation_factors(model: FittedModel) -> dict[str, float]:
    """VIF per predictor; column 0 of the design is the intercept and is skipped."""
    exog = np.asarray(model.exog)
    with np.errstate(divide="ignore"):
        return {
            name: float(variance_inflation_factor(exog, i + 1))
            for i, name in enumerate(model.names)
        }


def vif_test(model: FittedModel, warn: float | None = None, severe: float | None = None) -> DiagnosticResult:
    th = thresholds()
    warn = th["vif_warn"] if warn is None else warn
    severe = th["vif_severe"] if severe is None else severe

    vifs = variance_inflation_factors(model)
    worst = max(vifs, key=vifs.get)
    top = vifs[worst]
    if top > severe:
        verdict = f"severe multicollinearity (max VIF {top:.2f} on {worst})"
    elif top > warn:
        verdict = f"moderate multicollinearity (max VIF {top:.2f} on {worst})"
    else:
        verdict = "no serious multicollinearity"
    return DiagnosticResult(
        name="Variance Inflation Factors",
        statistic=top,
        p_value=None,
        verdict=verdict,
        flagged=top > severe,
        details=dict(vifs),
    )


def run_diagnostics(model: FittedModel, cfg: dict | None = None) -> tuple[DiagnosticResult, ...]:
    """All four tests, in display order."""
    cfg = load_cfg() if cfg is None else cfg
    th = thresholds(cfg)
    alternative = (cfg.get("durbin_watson", {}) or {}).get("alternative", "greater")
    results = (
        durbin_watson_test(model, alternative, th["dw_lower"], th["dw_upper"], th["alpha"]),
        breusch_pagan_test(model, th["alpha"]),
        lilliefors_test(model, th["alpha"]),
        vif_test(model, th["vif_warn"], th["vif_severe"]),
    )
    for r in results:
        logger.debug("%s: stat=%.4f p=%s", r.name, r.statistic, r.p_value)
    return results

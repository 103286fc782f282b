import numpy as np
import pytest

from sales_dashboard.utils.dataset import Dataset, Observation, get_dataset
from sales_dashboard.utils.insights import (
    ModelFitError,
    equation_string,
    fit,
    ols_fit,
    predict,
    summarize,
)

# Reference OLS solution for the compiled-in dataset (Householder QR).
REF_BETA = [
    -138.218817468,
    -0.00049141824383,
    0.0111245055107,
    -44.6894793479,
    42.4147454151,
    0.00518473377205,
]
REF_R2 = 0.990960905127
REF_SSR = 439.808459907


def test_ols_fit_recovers_plane_with_noise():
    """
    Generate synthetic linear data with small Gaussian noise and confirm:
    - R^2 is high (> 0.9)
    - Residuals are zero-mean-ish
    - Z-residuals have ~unit scale
    """
    rng = np.random.default_rng(42)
    n = 500
    true_beta = np.array([0.5, 0.002, -1.5, 3.0])
    x = np.c_[
        rng.uniform(0, 1000, size=n),
        rng.uniform(0, 1, size=n),
        rng.normal(5, 2, size=n),
    ]
    noise = rng.normal(0, 0.02, size=n)
    y = true_beta[0] + x @ true_beta[1:] + noise

    res = ols_fit(x, y)

    assert res.r2 > 0.9, f"Low R^2: {res.r2}"
    assert abs(res.resid.mean()) < 1e-3, f"Residual mean too large: {res.resid.mean()}"
    z_std = float(np.std(res.z, ddof=4))
    assert 0.8 < z_std < 1.2, f"Unexpected z-residual std: {z_std}"

    np.testing.assert_allclose(res.beta, true_beta, atol=0.01)


def test_fit_matches_reference_coefficients():
    model = fit(get_dataset())
    assert model.names == ("x1", "x2", "x3", "x4", "x5")
    np.testing.assert_allclose(model.beta, REF_BETA, rtol=1e-6)
    assert model.r2 == pytest.approx(REF_R2, rel=1e-8)
    assert model.ssr == pytest.approx(REF_SSR, rel=1e-6)
    assert model.intercept == pytest.approx(REF_BETA[0], rel=1e-6)
    assert list(model.coefficients) == ["x1", "x2", "x3", "x4", "x5"]


def test_residuals_are_orthogonal_to_design():
    model = fit(get_dataset())
    assert model.resid.shape == (12,)
    np.testing.assert_allclose(model.exog.T @ model.resid, 0.0, atol=1e-4)
    np.testing.assert_allclose(model.y_hat + model.resid, model.endog)


def test_refit_is_deterministic():
    a = fit(get_dataset())
    b = fit(get_dataset())
    assert np.array_equal(a.beta, b.beta)
    assert np.array_equal(a.resid, b.resid)


def test_fitted_arrays_are_read_only():
    model = fit(get_dataset())
    with pytest.raises(ValueError):
        model.beta[0] = 0.0


def test_rank_deficient_design_raises():
    rng = np.random.default_rng(7)
    x1 = rng.normal(size=20)
    x = np.c_[x1, 2.0 * x1, rng.normal(size=20)]
    y = rng.normal(size=20)
    with pytest.raises(ModelFitError, match="rank-deficient"):
        ols_fit(x, y)


def test_rank_deficient_dataset_raises():
    base = get_dataset().observations
    collinear = Dataset(tuple(
        Observation(o.month, o.x1, 2 * o.x1, o.x3, o.x4, o.x5, o.y) for o in base
    ))
    with pytest.raises(ModelFitError):
        fit(collinear)


def test_non_finite_and_underdetermined_inputs_raise():
    with pytest.raises(ModelFitError, match="non-finite"):
        ols_fit(np.array([[1.0], [np.nan], [3.0], [4.0]]), np.array([1.0, 2.0, 3.0, 4.0]))
    with pytest.raises(ModelFitError, match="observations"):
        ols_fit(np.array([[1.0, 2.0], [2.0, 1.0], [3.0, 5.0]]), np.array([1.0, 2.0, 3.0]))


@pytest.mark.parametrize(
    "values",
    [
        [200000, 10000, 5, 8, 30000],
        [0, 0, 0, 1, 0],
        [-5e6, 3e5, 120.5, 10, -1],  # far outside the observed range
    ],
)
def test_predict_is_linear_evaluation(values):
    model = fit(get_dataset())
    expected = model.beta[0] + sum(b * v for b, v in zip(model.beta[1:], values))
    assert predict(model, values) == pytest.approx(expected, rel=1e-10)
    assert predict(model, dict(zip(model.names, values))) == pytest.approx(expected, rel=1e-10)


def test_predict_rejects_wrong_arity():
    model = fit(get_dataset())
    with pytest.raises(ValueError):
        predict(model, [1, 2, 3])


def test_equation_string_rounds_to_four_places():
    model = fit(get_dataset())
    assert equation_string(model) == (
        "Model Equation: y = -138.2188 - 0.0005 x1 + 0.0111 x2 "
        "- 44.6895 x3 + 42.4147 x4 + 0.0052 x5"
    )


def test_summary_matches_lm_quantities():
    model = fit(get_dataset())
    s = summarize(model)

    assert list(s.coefficients.index) == ["(Intercept)", "x1", "x2", "x3", "x4", "x5"]
    assert list(s.coefficients.columns) == ["Estimate", "Std. Error", "t value", "Pr(>|t|)"]
    np.testing.assert_allclose(s.coefficients["Estimate"], REF_BETA, rtol=1e-6)
    assert (s.coefficients["Std. Error"] > 0).all()
    assert s.coefficients["Pr(>|t|)"].between(0, 1).all()

    assert s.df_resid == 6
    assert s.f_df == (5, 6)
    assert s.sigma == pytest.approx(np.sqrt(REF_SSR / 6), rel=1e-6)
    assert s.adj_r2 == pytest.approx(1 - (1 - REF_R2) * 11 / 6, rel=1e-6)
    assert s.f_stat == pytest.approx((REF_R2 / 5) / ((1 - REF_R2) / 6), rel=1e-6)
    assert 0 < s.f_pvalue < 1e-4

    assert s.residual_quantiles["Min"] == pytest.approx(-12.67275449, rel=1e-6)
    assert s.residual_quantiles["Max"] == pytest.approx(9.925566957, rel=1e-6)

    text = s.to_text()
    assert "Residual standard error" in text
    assert "on 5 and 6 DF" in text

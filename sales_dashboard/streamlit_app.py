import streamlit as st

from sales_dashboard.utils.config import setup_logging
from sales_dashboard.utils.dataset import get_dataset
from sales_dashboard.utils.db import SALES_TABLE, month_count, table_exists
from sales_dashboard.utils.views import load_model

setup_logging()

APP_TITLE = "Sales Dashboard"

st.set_page_config(page_title=APP_TITLE, layout="wide")

# ---- Header / status ----
with st.sidebar:
    st.markdown(f"### {APP_TITLE}")
    st.caption("OLS regression + assumption tests on 12 months of sales")
    run_checks = st.checkbox("Run quick health checks", value=True)
    if st.button("Refresh"):
        st.rerun()

st.title(APP_TITLE)
st.write(
    "Use the left sidebar to switch pages: Descriptive Statistics, Regression, "
    "Prediction and Assumptions Tests. This home view shows a quick status summary."
)

dataset = get_dataset()
state = load_model(dataset)


# ---- Health checks ----
def health() -> dict:
    checks = {}
    checks["observations"] = len(dataset)
    checks["sales_table_loaded"] = table_exists(SALES_TABLE)
    checks["distinct_months"] = month_count() if checks["sales_table_loaded"] else 0
    checks["model_fitted"] = state.available
    return checks


if run_checks:
    with st.expander("Health checks", expanded=True):
        h = health()
        st.write(f"Observations: **{h['observations']}**")
        st.write(f"Distinct months in `{SALES_TABLE}`: **{h['distinct_months']}**")
        st.json(h)

# ---- Model snapshot ----
if not state.available:
    st.error(f"Regression results unavailable: {state.error}")
    st.stop()

model = state.model
cols = st.columns(3)
cols[0].metric("Observations", f"{model.nobs}")
cols[1].metric("R²", f"{model.r2:.4f}")
cols[2].metric("Residual std. error", f"{model.sigma:.3f}")

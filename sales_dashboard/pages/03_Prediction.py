import altair as alt
import streamlit as st

from sales_dashboard.utils.config import load_cfg
from sales_dashboard.utils.dataset import get_dataset
from sales_dashboard.utils.glossary import VARIABLE_LABELS
from sales_dashboard.utils.views import load_model, prediction_view

st.set_page_config(page_title="Model Prediction", layout="wide")
st.title("Model Prediction")

CFG = load_cfg()
DEFAULTS = {"x1": 200000, "x2": 10000, "x3": 5, "x4": 8, "x5": 30000}
DEFAULTS.update((CFG.get("prediction", {}) or {}).get("defaults", {}) or {})

dataset = get_dataset()

# -------- Controls --------
left, right = st.columns(2)
with left:
    inputs = {
        "x1": st.number_input(VARIABLE_LABELS["x1"], value=float(DEFAULTS["x1"]), step=1000.0),
        "x2": st.number_input(VARIABLE_LABELS["x2"], value=float(DEFAULTS["x2"]), step=100.0),
        "x3": st.number_input(VARIABLE_LABELS["x3"], value=float(DEFAULTS["x3"]), step=0.1),
        "x4": st.slider(VARIABLE_LABELS["x4"], min_value=1.0, max_value=10.0, value=float(DEFAULTS["x4"]), step=0.1),
        "x5": st.number_input(VARIABLE_LABELS["x5"], value=float(DEFAULTS["x5"]), step=1000.0),
    }

view = prediction_view(dataset, load_model(dataset), inputs, CFG)

with right:
    if view.error:
        st.error(view.error)
    else:
        st.metric("Predicted Sales", f"{view.predicted:,.2f}")
        st.code(view.text, language=None)

if view.error:
    st.stop()

# -------- Plot --------
actual = alt.Chart(view.history[view.history["series"] == "Actual"]).mark_line(
    point=True, color="red"
).encode(
    x=alt.X("index:Q", title="Index", scale=alt.Scale(domain=[1, 14])),
    y=alt.Y("sales:Q", title="Sales", scale=alt.Scale(domain=list(view.y_domain))),
    tooltip=["index:Q", alt.Tooltip("sales:Q", format=",.2f")],
)
predicted = alt.Chart(view.history[view.history["series"] == "Predicted"]).mark_circle(
    size=120, color="blue"
).encode(
    x="index:Q",
    y="sales:Q",
    tooltip=["index:Q", alt.Tooltip("sales:Q", format=",.2f", title="predicted")],
)

st.subheader("Predicted vs Actual Sales")
st.altair_chart((actual + predicted).interactive(), use_container_width=True)
st.caption("Red: the 12 observed months. Blue: the prediction for the values entered above.")

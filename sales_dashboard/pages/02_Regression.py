import altair as alt
import streamlit as st

from sales_dashboard.utils.dataset import get_dataset
from sales_dashboard.utils.views import load_model, regression_view

st.set_page_config(page_title="Regression", layout="wide")
st.title("Fitting Model (Regression)")

dataset = get_dataset()
view = regression_view(dataset, load_model(dataset))

# -------- Scatterplot matrix --------
st.subheader("Scatterplot matrix")
variables = list(view.pairs.columns)
matrix = alt.Chart(view.pairs).mark_circle(size=45, opacity=0.8).encode(
    x=alt.X(alt.repeat("column"), type="quantitative", scale=alt.Scale(zero=False)),
    y=alt.Y(alt.repeat("row"), type="quantitative", scale=alt.Scale(zero=False)),
).properties(width=110, height=110).repeat(row=variables, column=variables)
st.altair_chart(matrix)

if view.error:
    st.error(f"Regression results unavailable: {view.error}")
    st.stop()

# -------- Summary --------
st.subheader("Regression summary")
st.code(view.summary.to_text(), language=None)

k1, k2, k3 = st.columns(3)
k1.metric("R²", f"{view.summary.r2:.4f}")
k2.metric("Adjusted R²", f"{view.summary.adj_r2:.4f}")
k3.metric("F-statistic", f"{view.summary.f_stat:,.2f}", help=f"p-value {view.summary.f_pvalue:.3g}")

st.subheader("Model equation")
st.code(view.equation, language=None)

import altair as alt
import streamlit as st

from sales_dashboard.utils.dataset import get_dataset
from sales_dashboard.utils.glossary import VARIABLE_LABELS
from sales_dashboard.utils.views import descriptive_view

st.set_page_config(page_title="Descriptive Statistics", layout="wide")
st.title("Descriptive Statistics")

view = descriptive_view(get_dataset())

# -------- Raw data --------
st.subheader("Data")
st.dataframe(view.table, use_container_width=True, hide_index=True)

# -------- Summary --------
st.subheader("Summary")
st.dataframe(view.summary.style.format("{:,.3f}"), use_container_width=True)

# -------- Histograms --------
st.subheader("Distributions")
cols = st.columns(len(view.histograms))
for col, (name, bins) in zip(cols, view.histograms.items()):
    chart = alt.Chart(bins).mark_bar(color="skyblue", stroke="black").encode(
        x=alt.X("bin_start:Q", bin="binned", title=VARIABLE_LABELS.get(name, name)),
        x2="bin_end:Q",
        y=alt.Y("count:Q", title="Frequency"),
        tooltip=[
            alt.Tooltip("bin_start:Q", format=",.2f", title="from"),
            alt.Tooltip("bin_end:Q", format=",.2f", title="to"),
            "count:Q",
        ],
    ).properties(title=name, height=220)
    with col:
        st.altair_chart(chart, use_container_width=True)

import logging
from functools import lru_cache
from typing import Any

import duckdb
import pandas as pd
import streamlit as st

from sales_dashboard.utils.dataset import LABEL_COLUMN, OUTCOME, PREDICTORS, Dataset, get_dataset

logger = logging.getLogger(__name__)

SALES_TABLE = "sales_monthly"
SUMMARY_ROWS = ["Min.", "1st Qu.", "Median", "Mean", "3rd Qu.", "Max."]


@lru_cache(maxsize=1)
def _connect() -> duckdb.DuckDBPyConnection:
    # In-memory only; the dataset is compiled in and nothing is persisted.
    con = duckdb.connect(":memory:")
    ensure_sales_table(con)
    return con


def get_con() -> duckdb.DuckDBPyConnection:
    return _connect()


@st.cache_data(show_spinner=False)
def query_df(sql: str, params: tuple[Any, ...] = ()) -> pd.DataFrame:
    cur = get_con().cursor()
    try:
        return cur.execute(sql, params).fetchdf()
    finally:
        cur.close()


def table_exists(name: str) -> bool:
    cur = get_con().cursor()
    try:
        cur.execute(f"SELECT 1 FROM {name} LIMIT 1")
        return True
    except duckdb.Error:
        return False
    finally:
        cur.close()


def ensure_sales_table(con: duckdb.DuckDBPyConnection) -> None:
    """
    Register the fixed sales dataset as a DuckDB table so summaries and
    data contracts can be written as SQL. Idempotent.
    """
    frame = get_dataset().to_frame()
    con.register("df_sales", frame)
    con.execute(f"CREATE OR REPLACE TABLE {SALES_TABLE} AS SELECT * FROM df_sales")
    con.unregister("df_sales")
    logger.info("Registered %s with %d rows", SALES_TABLE, len(frame))


def _summary_sql(table: str) -> str:
    selects = []
    for col in (*PREDICTORS, OUTCOME):
        selects.append(f"""
            SELECT '{col}' AS variable,
                   min({col}) AS "Min.",
                   quantile_cont({col}, 0.25) AS "1st Qu.",
                   median({col}) AS "Median",
                   avg({col}) AS "Mean",
                   quantile_cont({col}, 0.75) AS "3rd Qu.",
                   max({col}) AS "Max."
            FROM {table}
        """)
    return " UNION ALL ".join(selects)


def summary_stats(dataset: Dataset | None = None) -> pd.DataFrame:
    """
    Per-column Min / quartiles / Median / Mean / Max, one column per variable.
    quantile_cont interpolates linearly, matching R's summary().
    Without a dataset the registered sales table is queried; otherwise the
    given dataset is registered on a private cursor and summarized.
    """
    if dataset is None:
        df = query_df(_summary_sql(SALES_TABLE))
    else:
        cur = get_con().cursor()
        try:
            cur.register("df_summary", dataset.to_frame())
            df = cur.execute(_summary_sql("df_summary")).fetchdf()
        finally:
            cur.close()
    out = df.set_index("variable")[SUMMARY_ROWS].T.astype(float)
    out.columns.name = None
    return out[list((*PREDICTORS, OUTCOME))]


def month_count(table: str = SALES_TABLE) -> int:
    df = query_df(f"SELECT COUNT(DISTINCT {LABEL_COLUMN}) AS n FROM {table}")
    return int(df["n"].iloc[0])

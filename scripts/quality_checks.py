#!/usr/bin/env python3
"""
Fast-fail data contracts & sanity checks on the compiled-in sales dataset.

Usage:
  python scripts/quality_checks.py
  python scripts/quality_checks.py --expected-rows 12
"""
from __future__ import annotations

import argparse
import sys

import duckdb
import numpy as np

from sales_dashboard.utils.dataset import OUTCOME, PREDICTORS, get_dataset
from sales_dashboard.utils.db import SALES_TABLE, get_con
from sales_dashboard.utils.insights import X4_RANGE


def _run_count(con: duckdb.DuckDBPyConnection, sql: str) -> int:
    return int(con.execute(sql).fetchone()[0])


def _assert_zero(con: duckdb.DuckDBPyConnection, sql: str, msg: str, failures: list[str]) -> None:
    cnt = _run_count(con, sql)
    if cnt != 0:
        failures.append(f"{msg} (violations={cnt})")


def _assert_equal(con: duckdb.DuckDBPyConnection, sql: str, expected: int, msg: str, failures: list[str]) -> None:
    cnt = _run_count(con, sql)
    if cnt != expected:
        failures.append(f"{msg} (count={cnt}, expected={expected})")


def check_sales(con: duckdb.DuckDBPyConnection, expected_rows: int) -> list[str]:
    """Contracts for the sales_monthly table."""
    failures: list[str] = []
    cols = (*PREDICTORS, OUTCOME)

    # ---------- presence ----------
    _assert_equal(con, f"SELECT COUNT(*) FROM {SALES_TABLE}", expected_rows,
                  f"Unexpected row count in {SALES_TABLE}", failures)

    # ---------- key uniqueness ----------
    _assert_zero(
        con,
        f"""
        WITH a AS (
          SELECT Month, COUNT(*) c
          FROM {SALES_TABLE}
          GROUP BY Month
        )
        SELECT COUNT(*) FROM a WHERE c>1
        """,
        f"Month not unique on {SALES_TABLE}",
        failures,
    )

    # ---------- completeness ----------
    _assert_zero(
        con,
        f"SELECT COUNT(*) FROM {SALES_TABLE} WHERE Month IS NULL OR { ' OR '.join(c + ' IS NULL' for c in cols) }",
        f"NULLs in {SALES_TABLE}",
        failures,
    )

    # ---------- value constraints ----------
    _assert_zero(
        con,
        f"SELECT COUNT(*) FROM {SALES_TABLE} WHERE { ' OR '.join(c + ' < 0' for c in cols) }",
        f"Negative values in {SALES_TABLE}",
        failures,
    )
    lo, hi = X4_RANGE
    _assert_zero(
        con,
        f"SELECT COUNT(*) FROM {SALES_TABLE} WHERE x4 < {lo} OR x4 > {hi}",
        f"Customer satisfaction (x4) outside [{lo:g}, {hi:g}]",
        failures,
    )

    return failures


def check_design(failures: list[str]) -> None:
    """The regression needs a full-rank design with spare degrees of freedom."""
    ds = get_dataset()
    X = np.c_[np.ones(len(ds)), ds.predictors]
    rank = int(np.linalg.matrix_rank(X))
    if rank < X.shape[1]:
        failures.append(f"Design matrix is rank-deficient (rank={rank}, columns={X.shape[1]})")
    if X.shape[0] <= X.shape[1]:
        failures.append(f"Not enough observations for {X.shape[1]} parameters (rows={X.shape[0]})")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Sales dataset quality checks")
    p.add_argument("--expected-rows", type=int, default=12)
    return p.parse_args()


def main():
    args = parse_args()
    con = get_con().cursor()

    print(f"[quality] TABLE={SALES_TABLE} EXPECTED_ROWS={args.expected_rows}")

    failures = check_sales(con, args.expected_rows)
    check_design(failures)

    if failures:
        print("\n[QUALITY FAIL] One or more data contracts were violated:")
        for i, f in enumerate(failures, 1):
            print(f" {i:02d}. {f}")
        print("\nFix the dataset and rerun.")
        sys.exit(2)

    print("[quality] All checks passed ✔")
    con.close()


if __name__ == "__main__":
    try:
        main()
    except duckdb.Error as e:
        print(f"[FATAL][DuckDB] {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"[FATAL] {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)

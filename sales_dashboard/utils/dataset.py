"""
The fixed monthly sales table the whole dashboard is built on.
Twelve observations, compiled in, never mutated.
"""
from __future__ import annotations

from dataclasses import dataclass, fields

import numpy as np
import pandas as pd

PREDICTORS: tuple[str, ...] = ("x1", "x2", "x3", "x4", "x5")
OUTCOME = "y"
LABEL_COLUMN = "Month"


@dataclass(frozen=True)
class Observation:
    month: str
    x1: float
    x2: float
    x3: float
    x4: float
    x5: float
    y: float


@dataclass(frozen=True)
class Dataset:
    observations: tuple[Observation, ...]

    def __len__(self) -> int:
        return len(self.observations)

    def to_frame(self) -> pd.DataFrame:
        """Full table for display (Month first)."""
        rows = [
            {LABEL_COLUMN: o.month, **{c: float(getattr(o, c)) for c in PREDICTORS + (OUTCOME,)}}
            for o in self.observations
        ]
        return pd.DataFrame(rows, columns=[LABEL_COLUMN, *PREDICTORS, OUTCOME])

    def model_frame(self) -> pd.DataFrame:
        """Predictors + outcome only; the Month label never enters a fit."""
        return self.to_frame().drop(columns=[LABEL_COLUMN])

    @property
    def predictors(self) -> np.ndarray:
        return self.model_frame()[list(PREDICTORS)].to_numpy(dtype=float)

    @property
    def outcome(self) -> np.ndarray:
        return self.model_frame()[OUTCOME].to_numpy(dtype=float)


def _build(rows: list[tuple]) -> Dataset:
    names = [f.name for f in fields(Observation)]
    return Dataset(tuple(Observation(**dict(zip(names, r))) for r in rows))


# month, visitors, transactions, items/txn, satisfaction, ads, sales
SALES_DATA = _build([
    ("Jan", 150000, 8000, 5.0, 8.5, 20000, 120),
    ("Feb", 160000, 9500, 4.5, 8.2, 22000, 150),
    ("Mar", 170000, 10000, 4.8, 8.4, 25000, 160),
    ("Apr", 180000, 10500, 4.6, 8.5, 23000, 165),
    ("May", 190000, 11000, 5.1, 8.6, 30000, 180),
    ("Jun", 200000, 9000, 4.7, 8.7, 28000, 170),
    ("Jul", 210000, 11500, 4.9, 8.8, 27000, 190),
    ("Aug", 220000, 12000, 5.0, 8.9, 35000, 210),
    ("Sep", 230000, 12500, 5.2, 8.7, 40000, 230),
    ("Oct", 240000, 13000, 5.3, 8.8, 45000, 250),
    ("Nov", 250000, 14000, 5.4, 8.9, 50000, 300),
    ("Dec", 260000, 15000, 5.5, 9.0, 60000, 350),
])


def get_dataset() -> Dataset:
    return SALES_DATA


def histogram_table(values: np.ndarray) -> pd.DataFrame:
    """
    Bin a column into Sturges' number of bins (ceil(log2(n)) + 1, the count
    R's hist() starts from). Edges are equal-width over [min, max]; unlike
    R there is no pretty() rounding of the break points.
    Returns one row per bin: bin_start, bin_end, count.
    """
    values = np.asarray(values, dtype=float)
    counts, edges = np.histogram(values, bins="sturges")
    return pd.DataFrame({
        "bin_start": edges[:-1],
        "bin_end": edges[1:],
        "count": counts.astype(int),
    })

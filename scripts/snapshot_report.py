#!/usr/bin/env python3
"""
Create lightweight dashboard snapshots as CI artifacts (no browser needed).
Outputs:
  artifacts/histograms.png
  artifacts/predicted_vs_actual.png
  artifacts/model_report.md
"""
from __future__ import annotations

import os
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from sales_dashboard.utils.config import load_cfg  # noqa: E402
from sales_dashboard.utils.dataset import PREDICTORS, get_dataset  # noqa: E402
from sales_dashboard.utils.views import (  # noqa: E402
    assumptions_view,
    load_model,
    prediction_view,
    regression_view,
)

ART = Path(os.environ.get("ARTIFACTS_DIR", "artifacts"))


def histograms(out_dir: Path) -> Path:
    df = get_dataset().to_frame()
    cols = list(PREDICTORS)
    fig, axes = plt.subplots(1, len(cols), figsize=(3 * len(cols), 3.2))
    for ax, col in zip(axes, cols):
        ax.hist(df[col], bins="sturges", color="skyblue", edgecolor="black")
        ax.set_title(col)
        ax.set_xlabel(col)
    out = out_dir / "histograms.png"
    fig.tight_layout()
    fig.savefig(out)
    plt.close(fig)
    print(f"[snapshot] Wrote {out}")
    return out


def predicted_vs_actual(out_dir: Path, cfg: dict) -> Path | None:
    dataset = get_dataset()
    defaults = (cfg.get("prediction", {}) or {}).get(
        "defaults", {"x1": 200000, "x2": 10000, "x3": 5, "x4": 8, "x5": 30000}
    )
    view = prediction_view(dataset, load_model(dataset), defaults, cfg)
    if view.error:
        print(f"[snapshot] Prediction unavailable ({view.error}); skipping predicted_vs_actual.png")
        return None

    hist = view.history
    actual = hist[hist["series"] == "Actual"]
    plt.figure(figsize=(8, 4.5))
    plt.plot(actual["index"], actual["sales"], "o-", color="red", label="Actual")
    plt.scatter([len(actual) + 1], [view.predicted], color="blue", zorder=3, label="Predicted")
    plt.xlim(1, 14)
    plt.ylim(*view.y_domain)
    plt.title("Predicted vs Actual Sales")
    plt.xlabel("Index")
    plt.ylabel("Sales")
    plt.legend(loc="upper left")
    out = out_dir / "predicted_vs_actual.png"
    plt.tight_layout()
    plt.savefig(out)
    plt.close()
    print(f"[snapshot] Wrote {out}")
    return out


def model_report(out_dir: Path, cfg: dict) -> Path:
    dataset = get_dataset()
    state = load_model(dataset)
    reg = regression_view(dataset, state)
    checks = assumptions_view(state, cfg)

    lines = ["# Sales model report", ""]
    if reg.error:
        lines += [f"Regression unavailable: {reg.error}", ""]
    else:
        lines += ["## Regression", "", "```", reg.summary.to_text(), "", reg.equation, "```", ""]
    lines += ["## Assumption tests", ""]
    if checks.error:
        lines.append(checks.error)
    for result in checks.results:
        lines += [f"### {result.name}", "", "```", result.to_text(), "```", ""]

    out = out_dir / "model_report.md"
    out.write_text("\n".join(lines), encoding="utf-8")
    print(f"[snapshot] Wrote {out}")
    return out


def main():
    ART.mkdir(parents=True, exist_ok=True)
    cfg = load_cfg()
    histograms(ART)
    predicted_vs_actual(ART, cfg)
    model_report(ART, cfg)


if __name__ == "__main__":
    main()

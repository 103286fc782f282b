import logging
import os
import sys
from pathlib import Path

import yaml

CONFIG_PATH = Path(
    os.environ.get(
        "SALES_DASHBOARD_CONFIG",
        Path(__file__).resolve().parents[2] / "config" / "config.yaml",
    )
)


def load_cfg(path: Path | None = None) -> dict:
    path = Path(path) if path is not None else CONFIG_PATH
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def thresholds(cfg: dict | None = None) -> dict:
    cfg = load_cfg() if cfg is None else cfg
    th = cfg.get("thresholds", {}) or {}
    return {
        "alpha": float(th.get("alpha", 0.05)),
        "dw_lower": float(th.get("dw_lower", 1.5)),
        "dw_upper": float(th.get("dw_upper", 2.5)),
        "vif_warn": float(th.get("vif_warn", 5.0)),
        "vif_severe": float(th.get("vif_severe", 10.0)),
    }


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the app process."""
    level = level or os.environ.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

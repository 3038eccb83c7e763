from __future__ import annotations

import logging
import os
from pathlib import Path

import pandas as pd

from ..hotels.models import Destination

logger = logging.getLogger(__name__)

_DEFAULT_PATH = Path(__file__).resolve().parent.parent / "data" / "destinations.json"

_destinations: list[Destination] | None = None
_by_uid: dict[str, Destination] = {}


def _catalog_path() -> Path:
    return Path(os.getenv("DESTINATIONS_PATH", str(_DEFAULT_PATH)))


def _load(path: Path) -> list[Destination]:
    df = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    if df.empty:
        logger.warning("Destination catalog %s is empty", path)
        return []

    for column in ("uid", "term"):
        if column not in df.columns:
            raise ValueError(f"Destination catalog {path} has no '{column}' column")

    df = df.dropna(subset=["uid", "term"]).copy()
    df["uid"] = df["uid"].astype(str).str.strip()
    df["term"] = df["term"].astype(str).str.strip()
    df = df[(df["uid"] != "") & (df["term"] != "")]
    df = df.drop_duplicates(subset="uid", keep="first").copy()

    df["state"] = df["state"].fillna("") if "state" in df.columns else ""
    df["type"] = df["type"].fillna("city") if "type" in df.columns else "city"

    records = []
    for row in df.to_dict(orient="records"):
        records.append(Destination(
            uid=row["uid"],
            term=row["term"],
            state=str(row["state"]),
            type=str(row["type"]),
            lat=row.get("lat") if pd.notna(row.get("lat")) else None,
            lng=row.get("lng") if pd.notna(row.get("lng")) else None,
        ))

    logger.info("Loaded %d destinations from %s", len(records), path)
    return records


def get_destinations() -> list[Destination]:
    """Return the destination catalog, loading it on first call."""
    global _destinations
    if _destinations is None:
        _destinations = _load(_catalog_path())
        _by_uid.clear()
        _by_uid.update({d.uid: d for d in _destinations})
    return _destinations


def get_destination(uid: str) -> Destination | None:
    get_destinations()
    return _by_uid.get(uid)


def reset_catalog() -> None:
    """Forget the loaded catalog so the next call reloads it."""
    global _destinations
    _destinations = None
    _by_uid.clear()

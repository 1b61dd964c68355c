"""File helpers shared by the installation tools (run dirs, JSON in/out)."""

from __future__ import annotations

import hashlib
import json
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

PathLike = str | os.PathLike[str]


def canonical_json(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def config_sha256(config: Mapping[str, Any]) -> str:
    """Fingerprint of a configuration, independent of key order and whitespace."""
    return hashlib.sha256(canonical_json(config).encode("utf-8")).hexdigest()


def make_run_id(short_len: int = 8, now: datetime | None = None) -> str:
    """Directory-safe run name, e.g. ``run_20240131_174501_1a2b3c4d``."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d_%H%M%S")
    suffix = uuid.uuid4().hex[: max(4, int(short_len))]
    return f"run_{stamp}_{suffix}"


def save_json(path: PathLike, payload: Mapping[str, Any]) -> str:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return str(target)


def load_json(path: PathLike) -> dict[str, Any]:
    """Read a configuration file; the top level must be a JSON object."""
    with Path(path).open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level JSON value must be an object, got {type(data).__name__}")
    return data

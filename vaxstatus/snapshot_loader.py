from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from .errors import SnapshotError
from .repository import Repository


logger = logging.getLogger(__name__)

SNAPSHOT_KINDS = (
    "programmes",
    "vaccines",
    "sessions",
    "patients",
    "replies",
    "audit_events",
    "vaccinations",
    "patient_sessions",
)


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotError(f"cannot read {path}: {e}") from e


def _keyed(kind: str, data: Any) -> Dict[str, Any]:
    # Directory files may hold a plain list of records or a map keyed by id
    if isinstance(data, dict):
        data = data.get(kind, data)
    if isinstance(data, dict):
        return data
    if not isinstance(data, list):
        raise SnapshotError(f"{kind}: expected a list of records")
    keyed: Dict[str, Any] = {}
    for record in data:
        if not isinstance(record, dict) or "id" not in record:
            raise SnapshotError(f"{kind}: every record needs an id")
        keyed[str(record["id"])] = record
    return keyed


def load_snapshot_dir(snapshot_dir: str | Path) -> Repository:
    snapshot_path = Path(snapshot_dir)
    raw: Dict[str, Dict[str, Any]] = {}
    for p in sorted(snapshot_path.glob("*.json")):
        if p.stem not in SNAPSHOT_KINDS:
            logger.warning("ignoring unknown snapshot file: %s", p.name)
            continue
        raw[p.stem] = _keyed(p.stem, _read_json(p))
    return _validate(raw, snapshot_path)


def load_snapshot(path: str | Path) -> Repository:
    """Load a repository from one JSON file or a directory of `<kind>.json` files."""
    snapshot_path = Path(path)
    if not snapshot_path.exists():
        raise SnapshotError(f"snapshot not found: {path}")
    if snapshot_path.is_dir():
        return load_snapshot_dir(snapshot_path)
    data = _read_json(snapshot_path)
    if not isinstance(data, dict):
        raise SnapshotError(f"{path}: expected a JSON object")
    raw = {kind: _keyed(kind, data.get(kind, {})) for kind in SNAPSHOT_KINDS}
    unknown = sorted(set(data) - set(SNAPSHOT_KINDS))
    if unknown:
        raise SnapshotError(f"{path}: unknown keys {unknown}")
    return _validate(raw, snapshot_path)


def _validate(raw: Dict[str, Dict[str, Any]], source: Path) -> Repository:
    try:
        repo = Repository.model_validate(raw)
    except ValidationError as e:
        raise SnapshotError(f"invalid snapshot {source}: {e}") from e
    logger.info(
        "loaded snapshot %s: %d patient sessions", source, len(repo.patient_sessions)
    )
    return repo


def dump_snapshot(repo: Repository, out_path: str | Path) -> Path:
    out = Path(out_path)
    out.write_text(repo.model_dump_json(indent=2), encoding="utf-8")
    return out

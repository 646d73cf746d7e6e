from __future__ import annotations

import csv
from enum import Enum
from typing import Any, Dict, Iterable

from .schema import PatientSessionStatus


CSV_HEADERS = [
    "patient_session_id",
    "patient_id",
    "programme_id",
    "session_id",
    "consent",
    "screen",
    "triage",
    "instruct",
    "register",
    "record",
    "outcome",
    "report",
    "next_activity",
    "vaccine_id",
    "vaccine_criteria",
    "trace_rules",
]


def _cell(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return "" if value is None else value


def _row(status: PatientSessionStatus) -> Dict[str, Any]:
    return {
        "patient_session_id": status.patient_session_id,
        "patient_id": status.patient_id,
        "programme_id": status.programme_id,
        "session_id": status.session_id,
        "consent": _cell(status.consent),
        "screen": _cell(status.screen),
        "triage": _cell(status.triage),
        "instruct": _cell(status.instruct),
        "register": _cell(status.registration),
        "record": _cell(status.record),
        "outcome": status.outcome,
        "report": _cell(status.report),
        "next_activity": _cell(status.next_activity),
        "vaccine_id": _cell(status.vaccine_id),
        "vaccine_criteria": _cell(status.vaccine_criteria),
        "trace_rules": "|".join(t.rule_id for t in status.trace),
    }


def export_csv(statuses: Iterable[PatientSessionStatus], out_path: str) -> None:
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_HEADERS)
        w.writeheader()
        for status in statuses:
            w.writerow(_row(status))

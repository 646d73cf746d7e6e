import csv
import json
from pathlib import Path

from typer.testing import CliRunner

from vaxstatus.cli import app
from vaxstatus.csv_export import CSV_HEADERS


def _init(runner: CliRunner, tmp_path: Path) -> str:
    out = tmp_path / "snapshot.json"
    res = runner.invoke(app, ["init", "--out", str(out)])
    assert res.exit_code == 0
    assert Path(res.stdout.strip()).exists()
    return str(out)


def test_cli_end_to_end(tmp_path: Path):
    runner = CliRunner()
    snapshot = _init(runner, tmp_path)

    res = runner.invoke(app, ["decide", "--snapshot", snapshot, "--patient-session", "ps-1"])
    assert res.exit_code == 0
    status = json.loads(res.stdout)
    assert status["consent"] == "Consent given"
    assert status["next_activity"] == "Record vaccination"
    assert status["record"] == "Register attendance"

    out = tmp_path / "ps-2.json"
    res = runner.invoke(
        app, ["decide", "--snapshot", snapshot, "--patient-session", "ps-2", "--out", str(out)]
    )
    assert res.exit_code == 0
    assert json.loads(out.read_text(encoding="utf-8"))["report"] == "Vaccinated"

    csv_path = tmp_path / "statuses.csv"
    res = runner.invoke(app, ["export-csv", "--snapshot", snapshot, "--out", str(csv_path)])
    assert res.exit_code == 0
    assert Path(res.stdout.strip()) == csv_path
    header_line = csv_path.read_text(encoding="utf-8").splitlines()[0]
    assert header_line == "patient_session_id,patient_id,programme_id,session_id,consent,screen,triage,instruct,register,record,outcome,report,next_activity,vaccine_id,vaccine_criteria,trace_rules"
    with csv_path.open(newline="", encoding="utf-8") as f:
        rows = {row["patient_session_id"]: row for row in csv.DictReader(f)}
    assert set(rows) == {"ps-1", "ps-2", "ps-3", "ps-4", "ps-5"}
    assert rows["ps-3"]["next_activity"] == "Do not record vaccination"
    assert rows["ps-3"]["screen"] == ""
    assert rows["ps-4"]["triage"] == "Triage needed"
    assert rows["ps-2"]["register"] == "Completed session"
    assert rows["ps-1"]["trace_rules"].split("|")[0] == "CON-03"
    assert list(rows["ps-1"]) == CSV_HEADERS


def test_session_status(tmp_path: Path):
    runner = CliRunner()
    snapshot = _init(runner, tmp_path)
    res = runner.invoke(app, ["session-status", "--snapshot", snapshot, "--session", "school-1", "--today", "2025-10-06"])
    assert res.exit_code == 0
    overview = json.loads(res.stdout)
    assert overview["status"] == "Scheduled session dates"
    assert overview["consent_window"] == "Open"
    assert overview["active"] is True
    assert overview["activity"] == {"get_consent": 1, "instruct": 2, "still_to_vaccinate": 1}
    assert overview["closing"]["no_consent_response"] == ["pupil-4"]
    assert "patient_sessions" not in overview


def test_unknown_ids_exit_with_error(tmp_path: Path):
    runner = CliRunner()
    snapshot = _init(runner, tmp_path)
    res = runner.invoke(app, ["decide", "--snapshot", snapshot, "--patient-session", "nope"])
    assert res.exit_code == 1
    res = runner.invoke(app, ["session-status", "--snapshot", snapshot, "--session", "nope"])
    assert res.exit_code == 1


def test_unreadable_snapshot(tmp_path: Path):
    runner = CliRunner()
    res = runner.invoke(app, ["export-csv", "--snapshot", str(tmp_path / "missing.json"), "--out", str(tmp_path / "x.csv")])
    assert res.exit_code == 1
    assert not (tmp_path / "x.csv").exists()


def test_version():
    res = CliRunner().invoke(app, ["version"])
    assert res.exit_code == 0
    assert res.stdout.strip()

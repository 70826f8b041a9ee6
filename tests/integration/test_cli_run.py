from __future__ import annotations

import json
from pathlib import Path

from funnel_engine.cli import main as cli_main
from funnel_engine.logging.init import reset_logging


def test_cli_clean_payload(write_payload: Path, capsys):
    reset_logging()
    code = cli_main([str(write_payload)])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO Normalized payload.json" in out
    assert "SUMMARY rows=3 columns=9 warnings=0 date_column=dia spec=inferred" in out


def test_cli_payload_with_warnings(temp_workdir: Path, capsys):
    reset_logging()
    path = temp_workdir / "data" / "bad.json"
    path.write_text(json.dumps({"rows": [{"dia": "nope", "leads_total": "abc"}]}), encoding="utf-8")
    code = cli_main([str(path), "--warnings-log"])
    out = capsys.readouterr().out
    assert code == 2
    assert "WARN INVALID_DATE x1" in out
    assert "warnings written to" in out
    logs = list((temp_workdir / "logs").glob("warnings-*.log"))
    assert len(logs) == 1
    assert len(logs[0].read_text(encoding="utf-8").splitlines()) == 3


def test_cli_missing_payload(temp_workdir: Path, capsys):
    reset_logging()
    code = cli_main([str(temp_workdir / "missing.json")])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR source: payload file not found" in out


def test_cli_bad_config(write_payload: Path, temp_workdir: Path, capsys):
    reset_logging()
    cfg = temp_workdir / "config" / "bad.yml"
    cfg.write_text("nonsense_key: 1\n", encoding="utf-8")
    code = cli_main([str(write_payload), "--config", str(cfg)])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config validation failed" in out


def test_cli_with_spec_file(write_payload: Path, temp_workdir: Path, capsys):
    reset_logging()
    spec = temp_workdir / "data" / "spec.json"
    spec.write_text(json.dumps({
        "version": 1,
        "time": {"column": "dia"},
        "kpis": [{"label": "Leads", "column": "leads_total"}],
        "ui": {"tabs": ["Executivo"], "defaultTab": "Executivo"},
    }), encoding="utf-8")
    code = cli_main([str(write_payload), "--spec", str(spec)])
    out = capsys.readouterr().out
    assert code == 0
    assert "spec=parsed" in out


def test_cli_invalid_spec_falls_back_to_inference(write_payload: Path, temp_workdir: Path, capsys):
    reset_logging()
    spec = temp_workdir / "data" / "spec.json"
    spec.write_text("{broken", encoding="utf-8")
    code = cli_main([str(write_payload), "--spec", str(spec)])
    out = capsys.readouterr().out
    assert code == 0
    assert "WARN spec:" in out
    assert "spec=inferred" in out


def test_cli_inspect_prints_json(write_payload: Path, capsys):
    reset_logging()
    code = cli_main([str(write_payload), "--inspect"])
    out = capsys.readouterr().out
    assert code == 0
    doc = json.loads(out)
    assert doc["columns"][0] == {"name": "dia", "type": "date"}
    assert doc["sample_rows"][0]["dia"] == "2024-03-01T00:00:00"
    assert len(doc["spec"]["funnel"]["steps"]) == 5


def test_cli_debug_mode(write_payload: Path, capsys):
    reset_logging()
    code = cli_main([str(write_payload), "--debug"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out

from __future__ import annotations

import argparse
import json
import sys
from collections import Counter
from pathlib import Path

from dotenv import load_dotenv

from funnel_engine.config.loader import ConfigError, resolve_config
from funnel_engine.logging.init import log_summary, setup_logging
from funnel_engine.logging.warning_log import WarningLogBuffer
from funnel_engine.models.dataset import NormalizedDataset
from funnel_engine.models.spec import DashboardSpec
from funnel_engine.services.inference import generate_spec_from_data
from funnel_engine.services.normalizer import normalize_dataset
from funnel_engine.services.quality import analyze_data_quality
from funnel_engine.services.spec_parser import validate_spec_json
from funnel_engine.services.spec_repair import validate_spec_against_data
from funnel_engine.services.summary import render_summary_line
from funnel_engine.sources.reader import SourceError, read_payload_file

"""Diagnostic CLI: normalize a payload file and resolve its dashboard spec.

Flow:
- load .env, resolve the engine config (--config > $FUNNEL_ENGINE_CONFIG > defaults)
- read the payload (.json / .csv / .xlsx) and normalize it
- use the --spec document when valid (repaired against the data), otherwise
  infer a spec from the dataset's columns
- log warnings, a data quality digest and one SUMMARY line

Exit codes: 0 clean, 2 completed with warnings, 1 fatal.
"""

EXIT_SUCCESS = 0
EXIT_WITH_WARNINGS = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv; a failure is reported and ignored."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="funnel_engine", description="Normalize a funnel dataset payload and resolve its dashboard spec"
    )
    p.add_argument("payload", type=Path, help="Payload file (.json, .csv or .xlsx)")
    p.add_argument("--spec", type=Path, help="Dashboard spec JSON file")
    p.add_argument("--config", type=Path, help="Engine config YAML file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect", action="store_true", help="Print columns, spec and first rows as JSON then exit")
    p.add_argument("--warnings-log", action="store_true", help="Write warnings to logs/warnings-*.log")
    return p.parse_args(argv)


def _read_spec(path: Path, logger) -> DashboardSpec | None:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"spec: cannot read {path}: {e}")
        return None
    result = validate_spec_json(text)
    if not result.valid:
        logger.warning(f"spec: {result.error}; falling back to inference")
        return None
    return result.spec


def _resolve_spec(dataset: NormalizedDataset, declared: DashboardSpec | None, logger) -> tuple[DashboardSpec, str]:
    if declared is None:
        sample = dataset.rows[0] if dataset.rows else None
        return generate_spec_from_data(dataset.column_names, sample), "inferred"
    check = validate_spec_against_data(declared, dataset.rows, declared.title)
    for msg in check.warnings:
        logger.warning(f"spec: {msg}")
    for msg in check.errors:
        logger.error(f"spec: {msg}")
    if check.compatibility_mode:
        return check.fixed_spec, "inferred"
    return check.fixed_spec, "repaired" if check.warnings else "parsed"


def _inspect(dataset: NormalizedDataset, spec: DashboardSpec) -> int:
    doc = {
        "columns": [c.to_dict() for c in dataset.columns],
        "stats": {name: s.to_dict() for name, s in dataset.stats.items()},
        "warnings": [w.to_dict() for w in dataset.warnings],
        "spec": spec.to_dict(),
        "sample_rows": dataset.rows[:INSPECT_SAMPLE_ROWS],
    }
    # datetimes are not JSON serializable; ISO strings are fine for inspection
    print(json.dumps(doc, ensure_ascii=False, indent=2, default=lambda v: v.isoformat() if hasattr(v, "isoformat") else str(v)))
    return EXIT_SUCCESS


def _log_quality(dataset: NormalizedDataset, spec: DashboardSpec, logger) -> None:
    stages = [s.column for s in spec.funnel.steps] if spec.funnel else []
    report = analyze_data_quality(dataset.rows, dataset.date_column, stages)
    for w in report.warnings:
        logger.info(f"quality: {w.code} {w.message}")
    if report.degraded_mode:
        logger.warning("quality: degraded mode (time column mostly unparseable)")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # argv=[] must not fall back to sys.argv (pytest arguments would leak in)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    try:
        cfg = resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    level = "DEBUG" if args.debug else cfg.log_level
    for h in logger.handlers:
        h.setLevel(level)
    logger.setLevel(level)
    logger.debug("debug mode enabled")

    try:
        raw = read_payload_file(args.payload)
    except SourceError as e:
        logger.error(f"source: {e}")
        return EXIT_FATAL

    declared = _read_spec(args.spec, logger) if args.spec else None
    dataset = normalize_dataset(raw, declared.columns if declared else None, cfg)
    spec, spec_source = _resolve_spec(dataset, declared, logger)

    if args.inspect:
        return _inspect(dataset, spec)

    logger.info(f"Normalized {args.payload.name}")
    for code, count in sorted(Counter(dataset.warning_codes()).items()):
        logger.warning(f"{code} x{count}")
    for w in dataset.warnings:
        logger.debug(f"{w.code} column={w.column} row={w.row}: {w.message}")

    if args.warnings_log and dataset.warnings:
        buffer = WarningLogBuffer()
        buffer.extend(dataset.warnings)
        logger.info(f"warnings written to {buffer.flush()}")

    if dataset.rows:
        _log_quality(dataset, spec, logger)

    summary_line = render_summary_line(dataset, spec_source)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])

    return EXIT_WITH_WARNINGS if dataset.warnings else EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

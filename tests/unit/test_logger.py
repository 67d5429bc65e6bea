"""Structured logging configuration."""

import json

from tiermatch.observability.logger import APP_NAME, get_logger, setup_logging


def test_json_lines_written_to_log_file(tmp_path):
    log_file = tmp_path / "logs" / "tiermatch.log"
    setup_logging(log_level="DEBUG", log_format="json", log_file=log_file)
    try:
        get_logger("tests.logging").info("scan_started", job_id="job-1", budget=3)

        record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    finally:
        setup_logging()

    assert record["event"] == "scan_started"
    assert record["job_id"] == "job-1"
    assert record["app"] == APP_NAME
    assert record["level"] == "info"

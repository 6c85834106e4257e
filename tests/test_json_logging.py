import json
import logging
import subprocess
import sys

from test_cli_json_output import _cli_env

from dubai_unit_finder.__main__ import JsonLogFormatter


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("duf.pipeline", logging.INFO, __file__, 1, "extraction finished", (), None)
    record.source = "bayut"
    record.seconds = 0.25
    payload = json.loads(JsonLogFormatter().format(record))
    assert payload["logger"] == "duf.pipeline"
    assert payload["level"] == "INFO"
    assert payload["message"] == "extraction finished"
    assert payload["source"] == "bayut"
    assert payload["seconds"] == 0.25


def test_json_logging_from_cli():
    cmd = [
        sys.executable,
        "-m",
        "dubai_unit_finder",
        "--url",
        "https://example.com/secret-listing",
        "--log-json",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True, check=False, env=_cli_env())
    assert proc.returncode == 1
    lines = [line for line in proc.stderr.splitlines() if line.startswith("{")]
    payloads = [json.loads(line) for line in lines]
    finished = [p for p in payloads if p.get("message") == "extraction finished"]
    assert finished
    assert finished[0]["status"] == "failed"
    assert finished[0]["error"] == "unsupported URL"
    assert finished[0]["source"] is None

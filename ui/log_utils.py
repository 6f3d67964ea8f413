"""Shared logging utilities."""

import json
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"

BODY_PREVIEW_CHARS = 100

_SENSITIVE_MARKERS = ("key", "token", "authorization")


def body_preview(body: bytes, limit: int = BODY_PREVIEW_CHARS) -> str:
    """Decode the start of a response body for log lines."""
    text = body[:limit * 4].decode("utf-8", errors="replace")
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def write_request_log(
    method: str,
    path: str,
    upstream_path: str,
    headers: dict[str, str],
    *,
    credential: str,
    user: str | None = None,
    log_root: Path | None = None,
) -> Path:
    """Write a single forwarded request log entry."""
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "path": path,
        "upstream_path": upstream_path,
        "credential": credential,
        "user": user,
        "headers": redact_headers(headers),
    }
    return _write_json((log_root or LOG_ROOT) / "requests", payload)


def write_cli_log(
    level: str,
    message: str,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    CLI_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with CLI_LOG_FILE.open("a") as f:
        f.write(line)


def clear_logs(log_root: Path | None = None) -> None:
    """Remove per-request logs from a previous run."""
    shutil.rmtree((log_root or LOG_ROOT) / "requests", ignore_errors=True)


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if any(marker in key.lower() for marker in _SENSITIVE_MARKERS):
            redacted[key] = mask(value)
        else:
            redacted[key] = value
    return redacted


def mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:5] + "..." + value[-4:]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()

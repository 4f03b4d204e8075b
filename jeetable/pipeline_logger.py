"""
Pipeline Logger

Tracks each assistant request through the router stages. Every request gets a
trace_id that follows it through:
1. Normalize → 2. Classify → 3. Session → 4. Resolve → 5. Normalize (reply)

Optionally forwards records to Logfire when USE_LOGFIRE=true is set in the
environment.
"""

import json
import logging
import os
import re
import sys
import time
import uuid
from contextvars import ContextVar
from contextlib import contextmanager
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

# ============================================================================
# Environment
# ============================================================================

def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _slugify(value: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9._-]+", "-", value.strip())
    return cleaned or "jeetable-assistant"


PIPELINE_SERVICE_NAME = _slugify(
    os.environ.get("PIPELINE_SERVICE_NAME")
    or os.environ.get("LOGFIRE_SERVICE_NAME", "jeetable-assistant")
)
DEBUG_LOG = _env_bool("DEBUG_LOG", _env_bool("DEBUG_MODE", False))
PIPELINE_LOG_LEVEL = os.environ.get(
    "PIPELINE_LOG_LEVEL",
    "DEBUG" if DEBUG_LOG else "INFO",
).upper()
PIPELINE_LOG_TO_FILE = _env_bool("PIPELINE_LOG_TO_FILE", True)
PIPELINE_LOG_MAX_BYTES = _env_int("PIPELINE_LOG_MAX_BYTES", 5_000_000)
PIPELINE_LOG_BACKUP_COUNT = _env_int("PIPELINE_LOG_BACKUP_COUNT", 3)
PIPELINE_LOG_DIR = Path(
    os.environ.get("PIPELINE_LOG_DIR", str(Path(__file__).parent.parent / "logs"))
)
PIPELINE_LOG_FILE = PIPELINE_LOG_DIR / os.environ.get(
    "PIPELINE_LOG_FILE_NAME",
    f"pipeline-{PIPELINE_SERVICE_NAME}.log",
)
USE_LOGFIRE = _env_bool("USE_LOGFIRE", False)

# Messages that survive the non-debug filter
SUMMARY_MESSAGES = ("USER_REQUEST", "INTENT_SUMMARY", "LATENCY_SUMMARY")


# ============================================================================
# Pipeline Logger Setup
# ============================================================================

class PipelineFormatter(logging.Formatter):
    """Single-line formatter: time │ trace │ stage │ message."""

    ICONS = {
        'ASSISTANT': '🤖',
        'NORMALIZE': '🌐',
        'CLASSIFY': '🎯',
        'SESSION': '💾',
        'RESOLVE': '🧭',
        'ERROR': '❌',
    }

    def format(self, record):
        stage = getattr(record, 'stage', 'ASSISTANT')
        icon = self.ICONS.get(stage, '📋')
        timestamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S.%f')[:-3]
        trace_id = getattr(record, 'trace_id', '--------')[:8]

        msg = f"{timestamp} │ {trace_id} │ {icon} {stage:10} │ {record.getMessage()}"
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        return msg


def setup_pipeline_logger() -> logging.Logger:
    """Setup dedicated pipeline logger."""
    logger = logging.getLogger("pipeline")
    if logger.handlers:
        return logger

    level = getattr(logging, PIPELINE_LOG_LEVEL, logging.INFO)
    logger.setLevel(level)
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(PipelineFormatter())
    logger.addHandler(console_handler)

    # Optional file handler (avoid shared-file writes in multi-process deployments)
    if PIPELINE_LOG_TO_FILE:
        PIPELINE_LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            PIPELINE_LOG_FILE,
            maxBytes=PIPELINE_LOG_MAX_BYTES,
            backupCount=PIPELINE_LOG_BACKUP_COUNT,
            encoding="utf-8",
            delay=True,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(PipelineFormatter())
        logger.addHandler(file_handler)

    if USE_LOGFIRE:
        import logfire

        logfire_handler = logfire.LogfireLoggingHandler()
        logfire_handler.setLevel(logging.INFO)
        logger.addHandler(logfire_handler)

    return logger


pipeline_logger = setup_pipeline_logger()


# ============================================================================
# Trace Context
# ============================================================================

class TraceContext:
    """Context for tracking a single request through the router."""

    def __init__(self, query: str, session_id: str = ""):
        self.trace_id = str(uuid.uuid4())
        self.query = query
        self.session_id = session_id
        self.start_time = time.time()
        self.stages: list[dict] = []

    def elapsed_ms(self) -> int:
        return int((time.time() - self.start_time) * 1000)

    def to_dict(self) -> dict:
        return {
            "trace_id": self.trace_id,
            "query": self.query,
            "session_id": self.session_id,
            "total_ms": self.elapsed_ms(),
            "stages": self.stages,
        }


# Context-local storage for trace context (safe for async concurrency)
_current_trace: ContextVar[Optional[TraceContext]] = ContextVar(
    "pipeline_current_trace",
    default=None,
)


def get_current_trace() -> Optional[TraceContext]:
    return _current_trace.get()


# ============================================================================
# Logging Functions
# ============================================================================

def log_pipeline(
    stage: str,
    message: str,
    data: Optional[dict] = None,
    level: int = logging.INFO,
    trace_id: Optional[str] = None,
    exc_info: Any = None,
):
    """
    Log a pipeline event.

    Args:
        stage: Pipeline stage (ASSISTANT, NORMALIZE, CLASSIFY, SESSION, RESOLVE)
        message: Log message
        data: Optional structured data
        level: Log level
        trace_id: Optional trace ID (uses current trace if not provided)
    """
    trace = get_current_trace()
    tid = trace_id or (trace.trace_id if trace else "no-trace")

    # In non-debug mode keep only request/summary lines and errors.
    if not DEBUG_LOG:
        if level < logging.ERROR and not message.startswith(SUMMARY_MESSAGES):
            return

    extra = {
        'stage': stage,
        'trace_id': tid,
    }

    if data:
        truncated_data = _truncate_data(data)
        message = f"{message} | {json.dumps(truncated_data, ensure_ascii=False, default=str)}"

    pipeline_logger.log(level, message, extra=extra, exc_info=exc_info)


def _truncate_data(data: dict, max_len: int = 100) -> dict:
    """Truncate long string values and redact secrets."""
    redacted_keys = {"token", "api_key", "authorization", "password", "secret"}
    result = {}
    for k, v in data.items():
        if str(k).lower() in redacted_keys:
            result[k] = "***REDACTED***"
        elif isinstance(v, str) and len(v) > max_len:
            result[k] = v[:max_len] + "..."
        elif isinstance(v, list) and len(v) > 5:
            result[k] = f"[{len(v)} items]"
        elif isinstance(v, dict):
            result[k] = _truncate_data(v, max_len)
        else:
            result[k] = v
    return result


# ============================================================================
# Trace Managers
# ============================================================================

@contextmanager
def trace_query(query: str, session_id: str = "", variant: str = "assistant"):
    """
    Trace one assistant request.

    Usage:
        with trace_query("open jobs", "session123") as trace:
            ...
    """
    trace = TraceContext(query, session_id)
    token = _current_trace.set(trace)

    log_pipeline(
        "ASSISTANT",
        "USER_REQUEST",
        {"query": query, "session": session_id, "variant": variant},
    )

    try:
        yield trace
    finally:
        if DEBUG_LOG:
            log_pipeline(
                "ASSISTANT",
                f"═══ REQUEST COMPLETE ({trace.elapsed_ms()}ms) ═══",
                {"total_stages": len(trace.stages), "trace": trace.to_dict()},
            )
        _current_trace.reset(token)


@contextmanager
def trace_stage(stage: str, description: str = ""):
    """
    Trace one router stage and record it on the current trace.

    Usage:
        with trace_stage("CLASSIFY", "assistant-1"):
            ...
    """
    trace = get_current_trace()
    start_time = time.perf_counter()

    log_pipeline(stage, f"▶ START: {description}", level=logging.DEBUG)

    stage_data = {
        "stage": stage,
        "description": description,
        "start_time": datetime.now().isoformat(),
    }

    try:
        yield stage_data
        elapsed = int((time.perf_counter() - start_time) * 1000)
        stage_data["elapsed_ms"] = elapsed
        stage_data["success"] = True
        log_pipeline(stage, f"✓ END: {description} ({elapsed}ms)", level=logging.DEBUG)

    except Exception as e:
        elapsed = int((time.perf_counter() - start_time) * 1000)
        stage_data["elapsed_ms"] = elapsed
        stage_data["success"] = False
        stage_data["error"] = str(e)
        log_pipeline(stage, f"✗ FAILED: {description} - {e}", level=logging.ERROR, exc_info=e)
        raise

    finally:
        if trace:
            trace.stages.append(stage_data)


# ============================================================================
# Convenience Functions
# ============================================================================

def log_session(message: str, data: Optional[dict] = None):
    """Log session store event."""
    log_pipeline("SESSION", message, data, level=logging.DEBUG)


def log_error(stage: str, message: str, error: Optional[Exception] = None):
    """Log an error."""
    data = (
        {"error": str(error), "error_type": error.__class__.__name__}
        if error
        else None
    )
    log_pipeline(stage, f"❌ {message}", data, level=logging.ERROR, exc_info=error)


def log_intent_summary(
    variant: str,
    intent: str,
    action: Optional[str],
    language: str,
    utterance: str,
    rule_index: Optional[int] = None,
):
    """One line per resolved request, consumed by scripts/analyze_intent_logs.py."""
    log_pipeline(
        "RESOLVE",
        "INTENT_SUMMARY",
        {
            "variant": variant,
            "intent": intent,
            "rule": rule_index,
            "action": action,
            "language": language,
            "utterance": utterance,
        },
    )


def log_latency_summary(
    stage: str,
    component: str,
    total_ms: int,
    breakdown_ms: Optional[dict[str, int]] = None,
    meta: Optional[dict[str, Any]] = None,
):
    """Log one compact latency summary event."""
    payload: dict[str, Any] = {
        "component": component,
        "total_ms": int(total_ms),
    }
    if breakdown_ms:
        payload["breakdown_ms"] = {
            key: int(value) for key, value in breakdown_ms.items()
        }
    if meta:
        payload["meta"] = meta

    log_pipeline(stage, "LATENCY_SUMMARY", payload)

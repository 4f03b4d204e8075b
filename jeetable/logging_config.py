"""
Centralized Logging Configuration using Logfire
The backend, the session stores and the CLI use this configuration.

Features:
- Structured logging with spans
- Console and optional cloud logging
- stdlib logging bridged into Logfire
"""

import os
import time
from contextlib import contextmanager
from logging import basicConfig, getLogger, getLevelName, DEBUG, INFO

import logfire

# ═══════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════
DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() == "true"
SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "jeetable-assistant")
_send = os.getenv("SEND_TO_LOGFIRE", "if-token-present").strip().lower()
SEND_TO_LOGFIRE = {"true": True, "1": True, "false": False, "0": False}.get(_send, "if-token-present")
LOG_LEVEL = DEBUG if DEBUG_MODE else INFO

EMOJI = {
    "start": "🚀",
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "debug": "🔍",
    "session": "💾",
    "http": "🌐",
}


# ═══════════════════════════════════════════════════════════════
# Logfire Configuration
# ═══════════════════════════════════════════════════════════════
_configured = False


def setup_logging(service_name: str = None, level: str = None) -> "logfire":
    """
    Configure Logfire and route stdlib logging through it.

    Args:
        service_name: Optional service name override (e.g., "jeetable-backend")
        level: Optional minimum level name ("DEBUG", "INFO", "ERROR", ...)

    Returns:
        Configured logfire instance
    """
    global _configured

    if _configured:
        return logfire

    final_service_name = service_name or SERVICE_NAME
    final_level = (level or getLevelName(LOG_LEVEL)).upper()

    logfire.configure(
        service_name=final_service_name,
        send_to_logfire=SEND_TO_LOGFIRE,
        console=logfire.ConsoleOptions(
            colors='auto',
            span_style='show-parents' if DEBUG_MODE else 'simple',
            include_timestamps=True,
            verbose=DEBUG_MODE,
            min_log_level=final_level.lower(),
        ),
    )

    basicConfig(
        level=final_level,
        handlers=[logfire.LogfireLoggingHandler()],
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    _configured = True
    logfire.info(f"{EMOJI['start']} Logging configured for {final_service_name}")

    return logfire


# ═══════════════════════════════════════════════════════════════
# Logger Factory
# ═══════════════════════════════════════════════════════════════
class AssistantLogger:
    """Named logger with structured fields and spans."""

    def __init__(self, name: str):
        self.name = name
        self._logger = getLogger(name)
        self._logger.setLevel(LOG_LEVEL)

    def info(self, message: str, **kwargs):
        logfire.info(f"{EMOJI['info']} [{self.name}] {message}", **kwargs)

    def debug(self, message: str, **kwargs):
        if DEBUG_MODE:
            logfire.debug(f"{EMOJI['debug']} [{self.name}] {message}", **kwargs)

    def warning(self, message: str, **kwargs):
        logfire.warn(f"{EMOJI['warning']} [{self.name}] {message}", **kwargs)

    def error(self, message: str, error: Exception = None, **kwargs):
        """Log error with optional exception details."""
        if error:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_message'] = str(error)
        logfire.error(f"{EMOJI['error']} [{self.name}] {message}", **kwargs)

    def success(self, message: str, **kwargs):
        logfire.info(f"{EMOJI['success']} [{self.name}] {message}", **kwargs)

    @contextmanager
    def span(self, operation: str, **attributes):
        """Create a span for tracking an operation."""
        with logfire.span(f"{self.name}.{operation}", **attributes) as span:
            yield span

    @contextmanager
    def session_span(self, operation: str, **attributes):
        """Create a span for a session store operation."""
        start_time = time.time()
        logfire.debug(f"{EMOJI['session']} [{self.name}] Session: {operation}", **attributes)

        try:
            with logfire.span(f"session.{operation}", **attributes) as span:
                yield span
                logfire.debug(
                    f"{EMOJI['success']} [{self.name}] Session operation completed",
                    operation=operation,
                    duration_ms=round((time.time() - start_time) * 1000, 2)
                )
        except Exception as e:
            logfire.error(
                f"{EMOJI['error']} [{self.name}] Session operation failed: {e}",
                operation=operation,
                duration_ms=round((time.time() - start_time) * 1000, 2),
                error_type=type(e).__name__
            )
            raise


def get_logger(name: str) -> AssistantLogger:
    """Get an AssistantLogger instance for the given name."""
    return AssistantLogger(name)

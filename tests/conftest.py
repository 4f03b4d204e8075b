"""Pytest bootstrap: keep pipeline logs on the console during tests."""

import os

os.environ.setdefault("PIPELINE_LOG_TO_FILE", "false")
os.environ.setdefault("SEND_TO_LOGFIRE", "false")
os.environ.setdefault("SESSION_BACKEND", "memory")

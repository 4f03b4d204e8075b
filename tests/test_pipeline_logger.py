import importlib
import json
import logging


def _reload_pipeline_logger(monkeypatch, debug_log: bool):
    monkeypatch.setenv("DEBUG_LOG", "true" if debug_log else "false")
    monkeypatch.setenv("DEBUG_MODE", "false")
    monkeypatch.setenv("PIPELINE_LOG_TO_FILE", "false")

    import jeetable.pipeline_logger as pipeline_logger

    return importlib.reload(pipeline_logger)


def _capture(monkeypatch, pl):
    events = []

    def fake_log(level, message, extra=None, exc_info=None):
        events.append((level, message, extra))

    monkeypatch.setattr(pl.pipeline_logger, "log", fake_log)
    return events


def test_non_debug_mode_keeps_only_summaries_and_errors(monkeypatch):
    pl = _reload_pipeline_logger(monkeypatch, debug_log=False)
    events = _capture(monkeypatch, pl)

    pl.log_pipeline("CLASSIFY", "normal info", level=logging.INFO)
    pl.log_pipeline("ASSISTANT", "USER_REQUEST", level=logging.INFO)
    pl.log_intent_summary("assistant", "navigate_jobs", "navigate", "hi", "नौकरी खोलो", 1)
    pl.log_session("appended entry")
    pl.log_pipeline("RESOLVE", "something failed", level=logging.ERROR)

    assert len(events) == 3
    assert events[0][1].startswith("USER_REQUEST")
    assert events[1][1].startswith("INTENT_SUMMARY")
    assert "नौकरी खोलो" in events[1][1]
    assert events[2][0] == logging.ERROR


def test_debug_mode_logs_normal_events(monkeypatch):
    pl = _reload_pipeline_logger(monkeypatch, debug_log=True)
    events = _capture(monkeypatch, pl)

    pl.log_pipeline("CLASSIFY", "normal info", level=logging.INFO)
    assert len(events) == 1
    assert events[0][2]["stage"] == "CLASSIFY"


def test_truncate_data_redacts_sensitive_keys_and_long_values(monkeypatch):
    pl = _reload_pipeline_logger(monkeypatch, debug_log=True)

    data = {
        "token": "secret-token",
        "utterance": "x" * 200,
        "nested": {"password": "p", "ok": "yes"},
        "history": list(range(10)),
    }
    out = pl._truncate_data(data, max_len=20)

    assert out["token"] == "***REDACTED***"
    assert out["utterance"].endswith("...")
    assert out["nested"]["password"] == "***REDACTED***"
    assert out["nested"]["ok"] == "yes"
    assert out["history"] == "[10 items]"


def test_trace_stage_appends_stage_result(monkeypatch):
    pl = _reload_pipeline_logger(monkeypatch, debug_log=True)

    with pl.trace_query("नमस्ते", "sess-1", "assistant") as trace:
        assert pl.get_current_trace() is trace
        with pl.trace_stage("CLASSIFY", "assistant-1"):
            pass

    assert pl.get_current_trace() is None
    assert len(trace.stages) == 1
    assert trace.stages[0]["stage"] == "CLASSIFY"
    assert trace.stages[0]["success"] is True


def test_trace_stage_records_failure(monkeypatch):
    pl = _reload_pipeline_logger(monkeypatch, debug_log=False)
    _capture(monkeypatch, pl)

    try:
        with pl.trace_query("open jobs") as trace:
            with pl.trace_stage("SESSION", "append"):
                raise ConnectionError("store down")
    except ConnectionError:
        pass

    assert trace.stages[0]["success"] is False
    assert trace.stages[0]["error"] == "store down"


def test_request_complete_carries_trace_snapshot(monkeypatch):
    pl = _reload_pipeline_logger(monkeypatch, debug_log=True)
    events = _capture(monkeypatch, pl)

    with pl.trace_query("open jobs", "sess-1") as trace:
        with pl.trace_stage("CLASSIFY", "assistant-1"):
            pass

    complete = [m for _, m, _ in events if "REQUEST COMPLETE" in m]
    assert len(complete) == 1
    payload = json.loads(complete[0].partition(" | ")[2])
    assert payload["total_stages"] == 1
    assert payload["trace"]["trace_id"] == trace.trace_id
    assert payload["trace"]["session_id"] == "sess-1"
    assert payload["trace"]["stages"][0]["stage"] == "CLASSIFY"



def test_formatter_includes_stage_and_trace():
    from jeetable.pipeline_logger import PipelineFormatter

    record = logging.LogRecord("pipeline", logging.INFO, __file__, 1, "INTENT_SUMMARY", None, None)
    record.stage = "RESOLVE"
    record.trace_id = "abcdef1234567890"
    line = PipelineFormatter().format(record)

    assert "abcdef12" in line
    assert "RESOLVE" in line
    assert line.endswith("INTENT_SUMMARY")

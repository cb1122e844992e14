import json

from ilm.outcome import StepOutcome
from ilm.util.events import EventLog


def test_emit_appends_json_lines(tmp_path):
    log = EventLog(tmp_path / "logs" / "events.jsonl", run_id="r1")
    log.emit(event="a", n=1)
    log.emit(event="b", run_id="other")
    lines = [json.loads(l) for l in (tmp_path / "logs" / "events.jsonl").read_text().splitlines()]
    assert [l["event"] for l in lines] == ["a", "b"]
    assert lines[0]["run_id"] == "r1"
    assert lines[1]["run_id"] == "other"
    assert all("ts_ms" in l for l in lines)


def test_outcomes_replay_in_order(tmp_path):
    log = EventLog(tmp_path / "events.jsonl", run_id="r1")
    first = StepOutcome(key="hot/rollover/rollover", index="logs-000001", status="INCOMPLETE",
                        next_step_key="hot/rollover/rollover", retryable=True)
    second = StepOutcome(key="warm/shrink/shrink", index="logs-000001", status="FAILED",
                         retryable=True, error="ResourceAlreadyExistsError: shrink-logs-000001")
    log.emit_outcome(first)
    log.emit(event="note", text="between outcomes")
    log.emit_outcome(second)

    assert list(log.outcomes()) == [first, second]
    record = json.loads((tmp_path / "events.jsonl").read_text().splitlines()[0])
    assert record["event"] == "step_outcome"
    assert record["run_id"] == "r1"


def test_outcomes_of_missing_journal(tmp_path):
    assert list(EventLog(tmp_path / "absent.jsonl").outcomes()) == []

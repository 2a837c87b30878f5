"""Tests for the background analysis worker lifecycle."""

from __future__ import annotations

import threading

import pytest

from domain.config import WorkerSettings
from domain.errors import ProviderError, RateLimitedError
from domain.log_stream import LogType
from domain.worker import AnalysisWorker, Progress, follow_run
from models import TrackedTeam

SETTINGS = WorkerSettings(season_id=197, cooldown_seconds=2.0, rate_limit_backoff_seconds=60.0)
JOIN_TIMEOUT = 5.0


class _FakeSyncer:
    def __init__(self, failures: dict[str, Exception] | None = None) -> None:
        self.failures = failures or {}
        self.calls: list[tuple[str, int, bool]] = []
        self.on_call = None

    def sync_team(self, team_number, season_id, *, force=False, echo=None):
        self.calls.append((team_number, season_id, force))
        if echo is not None:
            echo(f"syncing {team_number}")
        if self.on_call is not None:
            self.on_call(team_number)
        if team_number in self.failures:
            raise self.failures[team_number]
        return None


def _worker(syncer, roster, sleeps: list[float]) -> AnalysisWorker:
    return AnalysisWorker(
        team_sync=syncer,
        settings=SETTINGS,
        roster_loader=lambda: list(roster),
        sleep=sleeps.append,
    )


def _run(worker: AnalysisWorker, **kwargs) -> list:
    subscription = worker.logs.subscribe()
    assert worker.start(**kwargs) is True
    assert worker.join(JOIN_TIMEOUT)
    records = subscription.drain()
    subscription.close()
    return records


def _types(records) -> list[LogType]:
    return [record.type for record in records]


def test_run_processes_every_team_then_completes() -> None:
    syncer = _FakeSyncer()
    sleeps: list[float] = []
    worker = _worker(syncer, ["1A", "2B"], sleeps)

    records = _run(worker, force=True)

    assert syncer.calls == [("1A", 197, True), ("2B", 197, True)]
    assert sleeps == [2.0, 2.0]
    types = _types(records)
    assert types[0] == LogType.INFO
    assert types.count(LogType.PROCESS) == 2
    assert types.count(LogType.SUCCESS) == 2
    assert types[-2:] == [LogType.COMPLETE, LogType.STOP]
    assert any(record.message == "[2/2] Analyzing team 2B..." for record in records)
    assert any(record.message == "  > syncing 1A" for record in records)

    status = worker.status()
    assert status.running is False
    assert status.current_team is None
    assert status.progress == Progress(current=2, total=2)


def test_season_override_is_passed_to_each_sync() -> None:
    syncer = _FakeSyncer()
    worker = _worker(syncer, ["1A"], [])

    _run(worker, season_id=190)

    assert syncer.calls == [("1A", 190, False)]


def test_start_while_running_is_rejected_without_side_effects() -> None:
    syncer = _FakeSyncer()
    entered = threading.Event()
    release = threading.Event()

    def block(team_number: str) -> None:
        entered.set()
        assert release.wait(JOIN_TIMEOUT)

    syncer.on_call = block
    worker = _worker(syncer, ["1A", "2B"], [])
    subscription = worker.logs.subscribe()

    assert worker.start() is True
    assert entered.wait(JOIN_TIMEOUT)
    before = worker.status()
    queued_before = len(subscription.drain())

    assert worker.start(force=True) is False
    assert worker.status() == before
    assert worker.status().progress == Progress(current=1, total=2)
    assert subscription.drain() == []

    release.set()
    assert worker.join(JOIN_TIMEOUT)
    assert queued_before > 0
    assert [call[0] for call in syncer.calls] == ["1A", "2B"]
    subscription.close()


def test_stop_request_finishes_current_team_only() -> None:
    syncer = _FakeSyncer()
    worker = _worker(syncer, ["1A", "2B", "3C"], [])
    statuses = worker.statuses.subscribe()
    syncer.on_call = lambda team_number: worker.request_stop()

    records = _run(worker)

    assert [call[0] for call in syncer.calls] == ["1A"]
    types = _types(records)
    assert types.count(LogType.STOP) == 1
    assert types[-1] == LogType.STOP
    assert LogType.COMPLETE not in types
    assert LogType.SUCCESS in types

    final = worker.status()
    assert final.running is False
    assert final.stop_requested is False
    published = statuses.drain()
    assert published[-1].running is False
    assert sum(1 for status in published if not status.running) == 1


def test_rate_limited_team_triggers_backoff_and_run_continues() -> None:
    syncer = _FakeSyncer(failures={"1A": RateLimitedError("RobotEvents API Error: 429")})
    sleeps: list[float] = []
    worker = _worker(syncer, ["1A", "2B"], sleeps)

    records = _run(worker)

    assert [call[0] for call in syncer.calls] == ["1A", "2B"]
    assert sleeps == [60.0, 2.0, 2.0]
    types = _types(records)
    assert LogType.ERROR in types
    assert LogType.WARN in types
    assert types[-2:] == [LogType.COMPLETE, LogType.STOP]


@pytest.mark.parametrize(
    "error",
    [
        ProviderError("upstream throttled", status_code=429),
        ProviderError("RobotEvents API Error: 429"),
    ],
)
def test_rate_limit_detected_from_status_or_message(error: Exception) -> None:
    sleeps: list[float] = []
    worker = _worker(_FakeSyncer(failures={"1A": error}), ["1A"], sleeps)

    _run(worker)

    assert sleeps == [60.0, 2.0]


@pytest.mark.parametrize(
    "error",
    [
        ProviderError(
            "RobotEvents API Error: 500 Internal Server Error "
            "(https://www.robotevents.com/api/v2/teams/142937/events)",
            status_code=500,
        ),
        ProviderError("RobotEvents API Error: 404 Not Found (https://re.test/api/v2/events/4290)", status_code=404),
        ProviderError("RobotEvents request failed for https://re.test/api/v2/teams/429/events: timed out"),
    ],
)
def test_ids_containing_429_do_not_trigger_backoff(error: Exception) -> None:
    sleeps: list[float] = []
    worker = _worker(_FakeSyncer(failures={"1A": error}), ["1A"], sleeps)

    records = _run(worker)

    assert sleeps == [2.0]
    assert LogType.WARN not in _types(records)


def test_ordinary_team_failure_logs_error_without_backoff() -> None:
    sleeps: list[float] = []
    worker = _worker(_FakeSyncer(failures={"1A": ValueError("bad payload")}), ["1A", "2B"], sleeps)

    records = _run(worker)

    assert sleeps == [2.0, 2.0]
    assert any(record.message == "Failed 1A: bad payload" for record in records)
    assert _types(records)[-2:] == [LogType.COMPLETE, LogType.STOP]


def test_empty_roster_warns_and_stops() -> None:
    syncer = _FakeSyncer()
    sleeps: list[float] = []
    worker = _worker(syncer, [], sleeps)

    records = _run(worker)

    assert syncer.calls == []
    assert sleeps == []
    assert _types(records) == [LogType.INFO, LogType.WARN, LogType.STOP]
    assert worker.status().running is False


def test_roster_failure_still_returns_to_idle() -> None:
    def broken_roster() -> list[str]:
        raise RuntimeError("database unavailable")

    worker = AnalysisWorker(team_sync=_FakeSyncer(), roster_loader=broken_roster, sleep=lambda _: None)

    records = _run(worker)

    assert _types(records)[-2:] == [LogType.ERROR, LogType.STOP]
    assert records[-2].message == "Fatal error: database unavailable"
    assert worker.status().running is False
    assert worker.start() is True
    assert worker.join(JOIN_TIMEOUT)


def test_request_stop_when_idle_is_rejected() -> None:
    worker = _worker(_FakeSyncer(), ["1A"], [])

    assert worker.request_stop() is False
    assert worker.status().stop_requested is False


def test_roster_defaults_to_tracked_teams(session_factory) -> None:
    with session_factory() as session:
        session.add(TrackedTeam(team_number="1A"))
        session.commit()
    syncer = _FakeSyncer()
    worker = AnalysisWorker(
        team_sync=syncer,
        session_factory=session_factory,
        settings=SETTINGS,
        sleep=lambda _: None,
    )

    _run(worker)

    assert [call[0] for call in syncer.calls] == ["1A"]


def test_worker_requires_a_roster_source() -> None:
    with pytest.raises(ValueError):
        AnalysisWorker(team_sync=_FakeSyncer())


def test_stop_record_is_emitted_before_worker_goes_idle() -> None:
    worker = _worker(_FakeSyncer(), ["1A"], [])
    running_at_stop: list[bool] = []
    publish = worker.logs.publish

    def recording_publish(record) -> None:
        if record.type is LogType.STOP:
            running_at_stop.append(worker.status().running)
        publish(record)

    worker.logs.publish = recording_publish  # type: ignore[method-assign]

    _run(worker)

    assert running_at_stop == [True]
    assert worker.status().running is False


def test_follow_run_keeps_relaying_after_interrupt() -> None:
    syncer = _FakeSyncer()
    release = threading.Event()
    syncer.on_call = lambda team_number: release.wait(JOIN_TIMEOUT)
    worker = _worker(syncer, ["1A", "2B"], [])
    lines: list[str] = []
    interrupted: list[bool] = []

    def write(line: str) -> None:
        if line.startswith("[process]") and not interrupted:
            interrupted.append(True)
            raise KeyboardInterrupt
        lines.append(line)
        if line.startswith("stop requested"):
            release.set()

    subscription = worker.logs.subscribe()
    assert worker.start() is True
    follow_run(worker, subscription, write)
    assert worker.join(JOIN_TIMEOUT)
    subscription.close()

    assert [call[0] for call in syncer.calls] == ["1A"]
    assert "stop requested; waiting for current team to finish" in lines
    assert "[success] Team 1A processed." in lines
    assert lines[-1] == "[stop] Analysis stopped."

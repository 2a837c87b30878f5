"""Background job that keeps every tracked team's event stats up to date."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Protocol

from domain.config import WorkerSettings
from domain.errors import is_rate_limited
from domain.log_stream import Broadcaster, LogEntry, LogType, Subscription
from repositories.tracked_team_repository import fetch_tracked_team_numbers

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    LogType.ERROR: logging.ERROR,
    LogType.WARN: logging.WARNING,
    LogType.DEBUG: logging.DEBUG,
}


class TeamSyncer(Protocol):
    def sync_team(
        self,
        team_number: str,
        season_id: int,
        *,
        force: bool = False,
        echo: Callable[[str], None] | None = None,
    ) -> object: ...


@dataclass(frozen=True)
class Progress:
    current: int = 0
    total: int = 0


@dataclass(frozen=True)
class WorkerStatus:
    """Snapshot of the worker state."""

    running: bool = False
    stop_requested: bool = False
    current_team: str | None = None
    progress: Progress = Progress()
    force_refresh: bool = False


class AnalysisWorker:
    """Singleton-per-instance, cooperatively cancellable team analysis loop.

    Construct once per process and hand the instance to whatever exposes
    start/stop/status. At most one run is active at a time; a stop request is
    honoured before the next team starts, never mid-team.
    """

    def __init__(
        self,
        *,
        team_sync: TeamSyncer,
        session_factory=None,
        settings: WorkerSettings | None = None,
        roster_loader: Callable[[], list[str]] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if roster_loader is None and session_factory is None:
            raise ValueError("Either session_factory or roster_loader is required")
        self.team_sync = team_sync
        self.session_factory = session_factory
        self.settings = settings or WorkerSettings()
        self.roster_loader = roster_loader or self._load_roster
        self.sleep = sleep

        self.logs: Broadcaster[LogEntry] = Broadcaster()
        self.statuses: Broadcaster[WorkerStatus] = Broadcaster()

        self._lock = threading.Lock()
        self._state = WorkerStatus()
        self._thread: threading.Thread | None = None

    def _load_roster(self) -> list[str]:
        with self.session_factory() as session:
            return fetch_tracked_team_numbers(session)

    def status(self) -> WorkerStatus:
        with self._lock:
            return self._state

    def _update(self, **changes: object) -> WorkerStatus:
        with self._lock:
            self._state = replace(self._state, **changes)
            return self._state

    def _emit(self, log_type: LogType, message: str) -> None:
        logger.log(_LOG_LEVELS.get(log_type, logging.INFO), message)
        self.logs.publish(LogEntry(type=log_type, message=message))

    def _publish_status(self) -> None:
        self.statuses.publish(self.status())

    def start(self, season_id: int | None = None, force: bool = False) -> bool:
        """Begin a run on a background thread; False if one is already running."""
        with self._lock:
            if self._state.running:
                return False
            self._state = WorkerStatus(running=True, force_refresh=force)

        resolved_season = season_id if season_id is not None else self.settings.season_id
        thread = threading.Thread(
            target=self._run,
            args=(resolved_season, force),
            name="analysis-worker",
            daemon=True,
        )
        self._thread = thread
        thread.start()
        return True

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the current run; True once the worker is idle."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
            return not thread.is_alive()
        return True

    def request_stop(self) -> bool:
        """Ask the loop to halt before the next team. False when idle."""
        with self._lock:
            if not self._state.running:
                return False
            self._state = replace(self._state, stop_requested=True)
        self._emit(LogType.INFO, "Stop request received; finishing current team.")
        return True

    def _run(self, season_id: int, force: bool) -> None:
        try:
            self._emit(
                LogType.INFO,
                f"Starting analysis worker (season {season_id}, force refresh: {force}).",
            )
            teams = self.roster_loader()
            self._update(progress=Progress(current=0, total=len(teams)))
            self._publish_status()

            if not teams:
                self._emit(LogType.WARN, "No tracked teams found.")
                return

            self._emit(LogType.INFO, f"Found {len(teams)} teams to process.")

            stopped = False
            for index, team_number in enumerate(teams, start=1):
                if self.status().stop_requested:
                    self._emit(LogType.INFO, "Stop requested; halting before next team.")
                    stopped = True
                    break

                self._update(current_team=team_number, progress=Progress(current=index, total=len(teams)))
                self._publish_status()
                self._emit(LogType.PROCESS, f"[{index}/{len(teams)}] Analyzing team {team_number}...")

                self._process_team(team_number, season_id, force)

                self._emit(
                    LogType.DEBUG,
                    f"Cooling down ({self.settings.cooldown_seconds:g}s)...",
                )
                self.sleep(self.settings.cooldown_seconds)

            if not stopped:
                self._emit(LogType.COMPLETE, "Analysis complete.")
        except Exception as exc:  # the run must always end idle
            logger.exception("Analysis worker crashed")
            self._emit(LogType.ERROR, f"Fatal error: {exc}")
        finally:
            self._finish()

    def _process_team(self, team_number: str, season_id: int, force: bool) -> None:
        try:
            self.team_sync.sync_team(
                team_number,
                season_id,
                force=force,
                echo=lambda message: self._emit(LogType.DEBUG, f"  > {message}"),
            )
            self._emit(LogType.SUCCESS, f"Team {team_number} processed.")
        except Exception as exc:  # one team's failure never ends the run
            self._emit(LogType.ERROR, f"Failed {team_number}: {exc}")
            if is_rate_limited(exc):
                backoff = self.settings.rate_limit_backoff_seconds
                self._emit(LogType.WARN, f"Rate limited! Pausing {backoff:g}s...")
                self.sleep(backoff)

    def _finish(self) -> None:
        # The stop record precedes the idle flip so a new run cannot log ahead of it.
        self._emit(LogType.STOP, "Analysis stopped.")
        self._update(running=False, stop_requested=False, current_team=None)
        self._publish_status()


def _relay_until_stop(subscription: Subscription[LogEntry], write: Callable[[str], None]) -> None:
    for entry in subscription:
        write(f"[{entry.type.value}] {entry.message}")
        if entry.type is LogType.STOP:
            return


def follow_run(
    worker: AnalysisWorker,
    subscription: Subscription[LogEntry],
    write: Callable[[str], None],
) -> None:
    """Relay a run's log records through its terminal stop record.

    Ctrl-C asks the worker to stop and keeps relaying, so the current team's
    records and the stop record are still written.
    """
    try:
        _relay_until_stop(subscription, write)
    except KeyboardInterrupt:
        if worker.request_stop():
            write("stop requested; waiting for current team to finish")
        _relay_until_stop(subscription, write)


__all__ = ["AnalysisWorker", "Progress", "WorkerStatus", "follow_run"]

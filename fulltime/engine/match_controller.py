# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Match lifecycle, clock scheduling and per-minute orchestration.

A :class:`MatchController` owns one :class:`MatchSession`. Every mutation of the
session happens under the controller's re-entrant lock. Event observers and
completion callbacks always run outside that lock.
"""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from fulltime.engine.clock import BatchClock, FrameClock, MatchClock, RenderSurface
from fulltime.engine.config import ENGINE_CONFIG, EngineConfig
from fulltime.engine.errors import (
    ConfigurationError,
    InvariantViolation,
    MatchStateError,
    PersistenceError,
    RuntimeEventError,
)
from fulltime.engine.event_generator import EventGenerator, EventSource, MatchContext
from fulltime.engine.events import EventKind, MatchEvent, Side
from fulltime.engine.results import MatchResult, ResultRecorder, ResultSynthesizer
from fulltime.engine.statistics import StatisticsAggregator, StatsSnapshot
from fulltime.models.player import Player
from fulltime.models.team import Team
from fulltime.utils.debug import MatchDebugger

EventObserver = Callable[[MatchEvent, int, Tuple[int, int]], None]
CompletionObserver = Callable[[MatchResult], None]


class MatchStatus(str, Enum):
    """Lifecycle states of a match session."""

    IDLE = "idle"
    PREPARING = "preparing"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class MatchMode(str, Enum):
    """Clock discipline used to play a match."""

    VISUAL = "visual"
    SIMULATED = "simulated"


@dataclass
class MatchSession:
    """Mutable state of one match, owned by its controller.

    Parameters
    ----------
    home_team : Team
        Home side.
    away_team : Team
        Away side.
    minute : int, default=0
        Last minute processed; never decreases.
    status : MatchStatus, default=MatchStatus.IDLE
        Current lifecycle state.
    mode : MatchMode | None, optional
        Clock discipline, set on start.
    score : List[int], optional
        ``[home, away]`` goals.
    speed_multiplier : float, default=1.0
        Playback speed.
    event_log : List[MatchEvent], optional
        Append-only event history.
    lineups : Dict[Side, List[Player]], optional
        Players currently on the pitch.
    benches : Dict[Side, List[Player]], optional
        Unused substitutes.
    early_terminated : bool, default=False
        Set when the match is stopped before full time.
    home_possession : bool, default=True
        Whether the home side had the ball in the last processed minute.
    """

    home_team: Team
    away_team: Team
    minute: int = 0
    status: MatchStatus = MatchStatus.IDLE
    mode: Optional[MatchMode] = None
    score: List[int] = field(default_factory=lambda: [0, 0])
    speed_multiplier: float = 1.0
    event_log: List[MatchEvent] = field(default_factory=list)
    lineups: Dict[Side, List[Player]] = field(default_factory=dict)
    benches: Dict[Side, List[Player]] = field(default_factory=dict)
    early_terminated: bool = False
    home_possession: bool = True


@dataclass(frozen=True)
class MatchSnapshot:
    """Read-only view of a session for displays and tests.

    Parameters
    ----------
    status : MatchStatus
        Lifecycle state.
    mode : MatchMode | None
        Clock discipline, once started.
    minute : int
        Last minute processed.
    score : Tuple[int, int]
        ``(home, away)`` goals.
    events : Tuple[MatchEvent, ...]
        Event log so far.
    stats : StatsSnapshot
        Live statistics.
    speed_multiplier : float
        Playback speed.
    home_possession : bool
        Whether the home side had the ball in the last processed minute.
    """

    status: MatchStatus
    mode: Optional[MatchMode]
    minute: int
    score: Tuple[int, int]
    events: Tuple[MatchEvent, ...]
    stats: StatsSnapshot
    speed_multiplier: float
    home_possession: bool


class MatchController:
    """Drives a single match from kick-off to result.

    Parameters
    ----------
    home_team : Team
        Home side.
    away_team : Team
        Away side.
    config : EngineConfig, optional
        Engine tuning; defaults to ``ENGINE_CONFIG``.
    rng : random.Random | None, optional
        Shared source of randomness for possession, events and result details.
    event_generator : EventSource | None, optional
        Supplies events per minute; defaults to an :class:`EventGenerator`.
    render_surface : RenderSurface | None, optional
        Drawing collaborator required for visual mode.
    result_synthesizer : ResultSynthesizer | None, optional
        Builds the final result.
    recorder : ResultRecorder | None, optional
        External store that receives the result.
    debugger : MatchDebugger | None, optional
        Telemetry writer; one is created from ``config.logging`` when omitted.
    time_source : Callable[[], float], optional
        Monotonic clock used by the visual frame clock.
    """

    def __init__(
        self,
        home_team: Team,
        away_team: Team,
        config: EngineConfig = ENGINE_CONFIG,
        *,
        rng: Optional[random.Random] = None,
        event_generator: Optional[EventSource] = None,
        render_surface: Optional[RenderSurface] = None,
        result_synthesizer: Optional[ResultSynthesizer] = None,
        recorder: Optional[ResultRecorder] = None,
        debugger: Optional[MatchDebugger] = None,
        time_source: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.config = config
        self.rng = rng or random.Random()
        self.session = MatchSession(home_team, away_team, speed_multiplier=config.simulation.default_speed)
        self.stats = StatisticsAggregator()
        self.event_generator = event_generator or EventGenerator(home_team, away_team, config, self.rng)
        self.render_surface = render_surface
        self.result_synthesizer = result_synthesizer or ResultSynthesizer(config, rng=self.rng)
        self.recorder = recorder
        self.debugger = debugger or MatchDebugger(config.logging.output_dir, config.logging.recent_buffer)
        self.time_source = time_source

        self.clock: Optional[MatchClock] = None
        self.result: Optional[MatchResult] = None
        self.observer_errors: List[RuntimeEventError] = []
        self.persistence_error: Optional[PersistenceError] = None
        self.clock_error: Optional[Exception] = None
        self.strength_difference = 0.0

        self._observers: List[EventObserver] = []
        self._completion_observers: List[CompletionObserver] = []
        self._lock = threading.RLock()
        self._done = threading.Event()
        self._ticking = False
        self._kicked_off = False
        self._last_checked_minute = 0

    # --- lifecycle ------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        """Return ``True`` while the clock is producing minutes."""
        return self.session.status is MatchStatus.RUNNING

    def attach_render_surface(self, surface: RenderSurface) -> None:
        """Provide the drawing collaborator for visual mode.

        Parameters
        ----------
        surface : RenderSurface
            Surface receiving ``update`` and ``draw`` calls.

        Raises
        ------
        MatchStateError
            If the match has already started.
        """
        with self._lock:
            if self.session.status is not MatchStatus.IDLE:
                raise MatchStateError("Render surface must be attached before the match starts")
            self.render_surface = surface

    def start(
        self,
        mode: Union[MatchMode, str] = MatchMode.SIMULATED,
        speed_multiplier: Optional[float] = None,
        on_event: Optional[EventObserver] = None,
    ) -> None:
        """Kick off the match.

        Parameters
        ----------
        mode : MatchMode | str, default=MatchMode.SIMULATED
            ``"visual"`` for frame-driven play or ``"simulated"`` for headless batches.
        speed_multiplier : float | None, optional
            Initial playback speed; clamped to the configured range.
        on_event : Callable[[MatchEvent, int, Tuple[int, int]], None] | None, optional
            Observer called outside the session lock with each event, the
            minute it happened in and the score after it.

        Raises
        ------
        MatchStateError
            If the session has already been started or stopped.
        ConfigurationError
            If visual mode has no render surface or a side lacks eligible players.
            The session returns to ``IDLE``.
        """
        mode = MatchMode(mode)
        with self._lock:
            if self.session.status is not MatchStatus.IDLE:
                raise MatchStateError(f"Cannot start a match that is {self.session.status.value}")
            self._transition(MatchStatus.PREPARING)
            try:
                self._validate(mode)
            except ConfigurationError as exc:
                self.debugger.log_error("CONFIGURATION", str(exc))
                self._transition(MatchStatus.IDLE)
                raise

            home, away = self.session.home_team, self.session.away_team
            self.session.mode = mode
            self.session.lineups = {Side.HOME: home.starting_eleven(), Side.AWAY: away.starting_eleven()}
            self.session.benches = {Side.HOME: home.bench(), Side.AWAY: away.bench()}
            self.strength_difference = home.get_team_rating() - away.get_team_rating()
            if on_event is not None:
                self._observers.append(on_event)
            if speed_multiplier is not None:
                self.set_speed(speed_multiplier)

            if mode is MatchMode.VISUAL:
                self.clock = FrameClock(self._advance, self.render_surface, self.config.simulation, self.time_source)
            else:
                self.clock = BatchClock(
                    self._advance,
                    self.config.simulation,
                    on_error=self._on_clock_error,
                    name=f"fulltime-{home.team_id}-{away.team_id}",
                )
            self.clock.set_speed(self.session.speed_multiplier)
            self._kicked_off = True
            self._transition(MatchStatus.RUNNING)
            self.clock.start()

    def pause(self) -> None:
        """Pause a running match; a no-op in any other state."""
        with self._lock:
            if self.session.status is not MatchStatus.RUNNING:
                return
            if self.clock is not None:
                self.clock.pause()
            self._transition(MatchStatus.PAUSED)

    def resume(self) -> None:
        """Resume a paused match; a no-op in any other state."""
        with self._lock:
            if self.session.status is not MatchStatus.PAUSED:
                return
            if self.clock is not None:
                self.clock.resume()
            self._transition(MatchStatus.RUNNING)

    def stop(self) -> MatchResult:
        """End the match now and return its result.

        Stopping before full time marks the result early-terminated with the
        current minute as its duration. Calling ``stop`` on a completed match
        returns the existing result.

        Returns
        -------
        MatchResult
            The one result of this session.

        Raises
        ------
        PersistenceError
            If this call completed the match and the recorder failed.
        """
        result, error, completed_here = self._finish(early=True)
        clock = self.clock
        if isinstance(clock, BatchClock):
            clock.join(self.config.simulation.join_timeout)
        if completed_here and error is not None:
            raise error
        return result

    def wait(self, timeout: Optional[float] = None) -> MatchResult:
        """Block until the match completes.

        Parameters
        ----------
        timeout : float | None, optional
            Maximum seconds to wait.

        Returns
        -------
        MatchResult
            The final result.

        Raises
        ------
        TimeoutError
            If the match did not finish in time.
        Exception
            The failure that stopped the clock, if any.
        PersistenceError
            If recording the result failed.
        """
        if not self._done.wait(timeout):
            raise TimeoutError(f"Match still {self.session.status.value} after {timeout}s")
        if self.clock_error is not None:
            raise self.clock_error
        if self.persistence_error is not None:
            raise self.persistence_error
        return self.result

    def set_speed(self, multiplier: float) -> float:
        """Change the playback speed; allowed in any state.

        Parameters
        ----------
        multiplier : float
            Requested speed; clamped to the configured bounds.

        Returns
        -------
        float
            The multiplier actually applied.
        """
        sim = self.config.simulation
        applied = max(sim.min_speed, min(sim.max_speed, float(multiplier)))
        with self._lock:
            self.session.speed_multiplier = applied
            if self.clock is not None:
                self.clock.set_speed(applied)
        return applied

    def frame(self, now: Optional[float] = None) -> int:
        """Host hook for visual mode, called once per rendered frame.

        Parameters
        ----------
        now : float | None, optional
            Current wall time in seconds.

        Returns
        -------
        int
            Number of match minutes processed during the frame.
        """
        clock = self.clock
        if not isinstance(clock, FrameClock):
            return 0
        return clock.frame(now)

    def on_complete(self, callback: CompletionObserver) -> None:
        """Register a completion observer.

        Parameters
        ----------
        callback : Callable[[MatchResult], None]
            Called once with the result; runs immediately if the match is already over.
        """
        with self._lock:
            result = self.result
            if result is None:
                self._completion_observers.append(callback)
                return
        self._notify_completion([callback], result)

    def get_state(self) -> MatchSnapshot:
        """Return a consistent snapshot of the session.

        Returns
        -------
        MatchSnapshot
            Status, minute, score, events and statistics.
        """
        with self._lock:
            session = self.session
            return MatchSnapshot(
                status=session.status,
                mode=session.mode,
                minute=session.minute,
                score=(session.score[0], session.score[1]),
                events=tuple(session.event_log),
                stats=self.stats.get_snapshot(),
                speed_multiplier=session.speed_multiplier,
                home_possession=session.home_possession,
            )

    # --- minute processing ----------------------------------------------------
    def tick(self) -> Optional[MatchEvent]:
        """Process the next match minute.

        Returns
        -------
        MatchEvent | None
            Event generated for the minute, if any.

        Raises
        ------
        MatchStateError
            If called re-entrantly while a tick is in progress.
        InvariantViolation
            If a consistency check fails after the minute.
        """
        with self._lock:
            if self._ticking:
                raise MatchStateError("tick() is already in progress")
            if self.session.status is not MatchStatus.RUNNING:
                return None
            if self.session.minute >= self.config.simulation.match_minutes:
                return None
            self._ticking = True
            try:
                event = self._process_minute()
            finally:
                self._ticking = False
            minute = self.session.minute
            score = (self.session.score[0], self.session.score[1])
            finished = minute >= self.config.simulation.match_minutes

        if event is not None:
            self._dispatch(event, minute, score)
        if finished:
            self._finish(early=False)
        return event

    def _advance(self) -> bool:
        """Clock callback that processes one minute when the match is running.

        Returns
        -------
        bool
            ``True`` while the match still has minutes to play.
        """
        with self._lock:
            status = self.session.status
        if status is MatchStatus.PAUSED:
            return True
        if status is not MatchStatus.RUNNING:
            return False
        self.tick()
        with self._lock:
            return self.session.status in (MatchStatus.RUNNING, MatchStatus.PAUSED)

    def _process_minute(self) -> Optional[MatchEvent]:
        """Sample possession, query the generator and apply the result.

        Must be called with the session lock held.

        Returns
        -------
        MatchEvent | None
            Event generated for the minute, if any.
        """
        session = self.session
        minute = session.minute + 1

        home_possession = self.rng.random() < self._possession_probability()
        self.stats.sample_minute(minute, home_possession)
        session.minute = minute
        session.home_possession = home_possession

        context = MatchContext(
            score_difference=session.score[0] - session.score[1],
            strength_difference=self.strength_difference,
            home_possession=home_possession,
            lineups={side: tuple(players) for side, players in session.lineups.items()},
            benches={side: tuple(players) for side, players in session.benches.items()},
        )
        event = self.event_generator.generate(minute, context)
        if event is not None:
            self._apply_event(event)

        if self.config.logging.log_minutes:
            possession = session.home_team.name if home_possession else session.away_team.name
            self.debugger.log_minute(minute, (session.score[0], session.score[1]), possession)
        if self.config.simulation.check_invariants:
            self._check_invariants(minute)
        return event

    def _apply_event(self, event: MatchEvent) -> None:
        """Append an event and update score, statistics and lineups.

        Parameters
        ----------
        event : MatchEvent
            Event produced for the current minute.
        """
        session = self.session
        session.event_log.append(event)
        if event.is_goal:
            session.score[event.side.index] += 1
        self.stats.record(event)

        lineup = session.lineups.get(event.side, [])
        bench = session.benches.get(event.side, [])
        if event.kind is EventKind.SUBSTITUTION:
            off = next((i for i, p in enumerate(lineup) if p.player_id == event.player_id), None)
            on = next((i for i, p in enumerate(bench) if p.player_id == event.payload.player_on_id), None)
            if off is not None and on is not None:
                lineup[off] = bench.pop(on)
        elif event.kind is EventKind.RED_CARD:
            lineup[:] = [p for p in lineup if p.player_id != event.player_id]

        self.debugger.log_match_event(event.minute, event.kind.value.upper(), event.description)

    def _check_invariants(self, minute: int) -> None:
        """Verify minute progression, score and statistics consistency.

        Parameters
        ----------
        minute : int
            Minute just processed.

        Raises
        ------
        InvariantViolation
            If any check fails.
        """
        if minute <= self._last_checked_minute:
            raise InvariantViolation(f"Minute went from {self._last_checked_minute} to {minute}")
        self._last_checked_minute = minute

        goals = [0, 0]
        for event in self.session.event_log:
            if event.is_goal:
                goals[event.side.index] += 1
        if goals != self.session.score:
            raise InvariantViolation(f"Score {self.session.score} does not match goal events {goals}")
        self.stats.check_against_score(self.session.score)

    def _possession_probability(self) -> float:
        """Return the chance that the home side has the ball this minute.

        Returns
        -------
        float
            Probability tilted by the strength gap and clamped to the configured bounds.
        """
        sel = self.config.selection
        low, high = sel.possession_bounds
        return max(low, min(high, 0.5 + self.strength_difference * sel.possession_strength_factor))

    def _dispatch(self, event: MatchEvent, minute: int, score: Tuple[int, int]) -> None:
        """Call every event observer, collecting their failures.

        Parameters
        ----------
        event : MatchEvent
            Event to announce.
        minute : int
            Match minute the event belongs to.
        score : Tuple[int, int]
            Home and away score once the event has been applied.
        """
        for observer in list(self._observers):
            try:
                observer(event, minute, score)
            except Exception as exc:
                error = RuntimeEventError(event.minute, exc)
                with self._lock:
                    self.observer_errors.append(error)
                self.debugger.log_error("OBSERVER", str(error))

    # --- completion -----------------------------------------------------------
    def _finish(self, early: bool) -> Tuple[MatchResult, Optional[PersistenceError], bool]:
        """Complete the match exactly once.

        Parameters
        ----------
        early : bool
            ``True`` when completion was requested by :meth:`stop`.

        Returns
        -------
        Tuple[MatchResult, PersistenceError | None, bool]
            The result, any recording failure, and whether this call completed the match.
        """
        with self._lock:
            if self.session.status is MatchStatus.COMPLETED:
                return self.result, self.persistence_error, False
            if self.clock is not None:
                self.clock.cancel()

            session = self.session
            session.early_terminated = early and session.minute < self.config.simulation.match_minutes
            result = self.result_synthesizer.build(
                session.home_team,
                session.away_team,
                session.score,
                self.stats.get_final_snapshot(),
                session.event_log,
                early_terminated=session.early_terminated,
            )
            self.result = result
            self._transition(MatchStatus.COMPLETED)
            self.debugger.log_result(result.scoreline, result.duration, result.early_terminated)
            callbacks = list(self._completion_observers)
            self._completion_observers.clear()
            kicked_off = self._kicked_off

        errors: List[Exception] = []
        if self.recorder is not None and kicked_off:
            errors = self.result_synthesizer.record(result, session.home_team, session.away_team, self.recorder)
            for err in errors:
                self.debugger.log_error("PERSISTENCE", repr(err))

        self._notify_completion(callbacks, result)
        error = PersistenceError(result, errors) if errors else None
        self.persistence_error = error
        self._done.set()
        return result, error, True

    def _notify_completion(self, callbacks: List[CompletionObserver], result: MatchResult) -> None:
        """Run completion observers, logging their failures.

        Parameters
        ----------
        callbacks : List[CompletionObserver]
            Observers to call.
        result : MatchResult
            Result handed to each observer.
        """
        for callback in callbacks:
            try:
                callback(result)
            except Exception as exc:
                self.debugger.log_error("COMPLETION_OBSERVER", repr(exc))

    def _on_clock_error(self, exc: Exception) -> None:
        """Store a failure raised on the clock thread so :meth:`wait` can re-raise it.

        Parameters
        ----------
        exc : Exception
            Exception that stopped the clock.
        """
        self.clock_error = exc
        self.debugger.log_error(type(exc).__name__, str(exc))
        self._done.set()

    # --- helpers --------------------------------------------------------------
    def _validate(self, mode: MatchMode) -> None:
        """Check that the session can start in ``mode``.

        Parameters
        ----------
        mode : MatchMode
            Requested clock discipline.

        Raises
        ------
        ConfigurationError
            If visual mode lacks a surface or a side lacks eligible players.
        """
        if mode is MatchMode.VISUAL and self.render_surface is None:
            raise ConfigurationError("Visual mode requires a render surface")
        required = self.config.simulation.min_eligible_players
        for team in (self.session.home_team, self.session.away_team):
            eligible = len(team.eligible_players())
            if eligible < required:
                raise ConfigurationError(f"{team.name} has {eligible} eligible players; {required} are required")

    def _transition(self, status: MatchStatus) -> None:
        """Move the session to ``status`` and log the change.

        Parameters
        ----------
        status : MatchStatus
            New lifecycle state.
        """
        previous = self.session.status
        self.session.status = status
        self.debugger.log_state_change(self.session.minute, previous.value, status.value)


def create(
    home_team: Team,
    away_team: Team,
    config: EngineConfig = ENGINE_CONFIG,
    *,
    rng: Optional[random.Random] = None,
    event_generator: Optional[EventSource] = None,
    render_surface: Optional[RenderSurface] = None,
    result_synthesizer: Optional[ResultSynthesizer] = None,
    recorder: Optional[ResultRecorder] = None,
    debugger: Optional[MatchDebugger] = None,
    time_source: Callable[[], float] = time.perf_counter,
) -> MatchController:
    """Create an idle match session between two teams.

    Parameters
    ----------
    home_team : Team
        Home side.
    away_team : Team
        Away side.
    config : EngineConfig, optional
        Engine tuning; defaults to ``ENGINE_CONFIG``.
    rng : random.Random | None, optional
        Seeded source of randomness for reproducible matches.
    event_generator : EventSource | None, optional
        Replacement event source, for example a scripted one.
    render_surface : RenderSurface | None, optional
        Drawing collaborator for visual mode.
    result_synthesizer : ResultSynthesizer | None, optional
        Replacement result builder.
    recorder : ResultRecorder | None, optional
        Store that receives the result.
    debugger : MatchDebugger | None, optional
        Telemetry writer.
    time_source : Callable[[], float], optional
        Monotonic clock for visual frames.

    Returns
    -------
    MatchController
        Controller in the ``IDLE`` state.
    """
    return MatchController(
        home_team,
        away_team,
        config,
        rng=rng,
        event_generator=event_generator,
        render_surface=render_surface,
        result_synthesizer=result_synthesizer,
        recorder=recorder,
        debugger=debugger,
        time_source=time_source,
    )

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
"""Final match results and the calls that push them to external stores."""

from __future__ import annotations

import random
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from fulltime.engine.config import ENGINE_CONFIG, EngineConfig
from fulltime.engine.events import (
    EventKind,
    GoalPayload,
    Importance,
    MatchEvent,
    Side,
    SubstitutionPayload,
)
from fulltime.engine.statistics import FinalStats
from fulltime.models.team import Team

HOME_WIN = "home_win"
AWAY_WIN = "away_win"
DRAW = "draw"


@dataclass(frozen=True, slots=True)
class Weather:
    """Conditions reported with a result.

    Parameters
    ----------
    condition : str
        Sky condition, for example ``"Light Rain"``.
    temperature : int
        Temperature in degrees Celsius.
    """

    condition: str
    temperature: int

    @property
    def description(self) -> str:
        """Return a short human-readable weather line."""
        return f"{self.temperature}°C, {self.condition}"


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Immutable record of a finished (or stopped) match.

    Parameters
    ----------
    match_id : str
        Identifier unique to this result.
    home_team_id : int
        Home team identifier.
    home_team_name : str
        Home team name.
    away_team_id : int
        Away team identifier.
    away_team_name : str
        Away team name.
    home_score : int
        Goals scored by the home side.
    away_score : int
        Goals scored by the away side.
    outcome : str
        ``"home_win"``, ``"away_win"`` or ``"draw"``.
    result_for_home : str
        ``"win"``, ``"draw"`` or ``"loss"`` from the home side's perspective.
    result_for_away : str
        The same from the away side's perspective.
    duration : int
        Minutes played.
    early_terminated : bool
        ``True`` when the match was stopped before full time.
    events : Tuple[MatchEvent, ...]
        Complete event log.
    key_events : Tuple[MatchEvent, ...]
        Events of high importance.
    final_stats : FinalStats
        Statistics at the final whistle.
    attendance : int
        Reported crowd.
    weather : Weather
        Reported conditions.
    played_at : datetime
        When the result was built.
    """

    match_id: str
    home_team_id: int
    home_team_name: str
    away_team_id: int
    away_team_name: str
    home_score: int
    away_score: int
    outcome: str
    result_for_home: str
    result_for_away: str
    duration: int
    early_terminated: bool
    events: Tuple[MatchEvent, ...]
    key_events: Tuple[MatchEvent, ...]
    final_stats: FinalStats
    attendance: int
    weather: Weather
    played_at: datetime

    @property
    def scoreline(self) -> str:
        """Return the result as ``"Home 2 - 1 Away"``."""
        return f"{self.home_team_name} {self.home_score} - {self.away_score} {self.away_team_name}"

    def result_for(self, team_id: int) -> str:
        """Return the result from one team's perspective.

        Parameters
        ----------
        team_id : int
            Either participant's identifier.

        Returns
        -------
        str
            ``"win"``, ``"draw"`` or ``"loss"``.

        Raises
        ------
        KeyError
            If ``team_id`` did not take part in the match.
        """
        if team_id == self.home_team_id:
            return self.result_for_home
        if team_id == self.away_team_id:
            return self.result_for_away
        raise KeyError(team_id)


class ResultRecorder(Protocol):
    """External store that receives finished results.

    A recorder may also provide ``match_transaction()``, a context manager that
    holds back every update of one match and applies them together on exit.
    :meth:`ResultSynthesizer.record` uses it when present.
    """

    def record_result(self, result: MatchResult) -> None:
        """Store the match result and update team records.

        Parameters
        ----------
        result : MatchResult
            Finished match.
        """
        ...

    def record_player_goal(self, team_id: int, player_id: int, minute: int, assist_id: Optional[int]) -> None:
        """Credit a goal and its optional assist.

        Parameters
        ----------
        team_id : int
            Scoring team.
        player_id : int
            Scorer.
        minute : int
            Minute of the goal.
        assist_id : int | None
            Assisting teammate, if any.
        """
        ...

    def record_player_card(self, team_id: int, player_id: int, kind: EventKind) -> None:
        """Record a yellow or red card.

        Parameters
        ----------
        team_id : int
            Player's team.
        player_id : int
            Booked player.
        kind : EventKind
            ``YELLOW_CARD`` or ``RED_CARD``.
        """
        ...

    def record_player_appearance(self, team_id: int, player_id: int, minutes: int) -> None:
        """Record that a player featured.

        Parameters
        ----------
        team_id : int
            Player's team.
        player_id : int
            Player who featured.
        minutes : int
            Minutes on the pitch.
        """
        ...


def outcome_for(home_score: int, away_score: int) -> str:
    """Classify a scoreline.

    Parameters
    ----------
    home_score : int
        Home goals.
    away_score : int
        Away goals.

    Returns
    -------
    str
        ``"home_win"``, ``"away_win"`` or ``"draw"``.
    """
    if home_score > away_score:
        return HOME_WIN
    if home_score < away_score:
        return AWAY_WIN
    return DRAW


def minutes_played(
    starters: Sequence[int],
    events: Sequence[MatchEvent],
    side: Side,
    duration: int,
) -> Dict[int, int]:
    """Work out how long each player of one side was on the pitch.

    Parameters
    ----------
    starters : Sequence[int]
        Identifiers of the side's starting eleven.
    events : Sequence[MatchEvent]
        Event log of the match.
    side : Side
        Side to compute minutes for.
    duration : int
        Minutes played in the match.

    Returns
    -------
    Dict[int, int]
        Minutes per player who featured, in order of first appearance.
    """
    came_on: Dict[int, int] = {pid: 0 for pid in starters}
    went_off: Dict[int, int] = {}
    for event in events:
        if event.side is not side:
            continue
        if event.kind is EventKind.SUBSTITUTION:
            went_off.setdefault(event.player_id, event.minute)
            came_on.setdefault(event.payload.player_on_id, event.minute)
        elif event.kind is EventKind.RED_CARD:
            went_off.setdefault(event.player_id, event.minute)
    return {pid: max(0, went_off.get(pid, duration) - start) for pid, start in came_on.items()}


class ResultSynthesizer:
    """Builds :class:`MatchResult` objects and pushes them to a recorder.

    Parameters
    ----------
    config : EngineConfig, optional
        Result settings; defaults to ``ENGINE_CONFIG``.
    rng : random.Random | None, optional
        Source for attendance and weather.
    now : Callable[[], datetime] | None, optional
        Timestamp source; defaults to :meth:`datetime.now`.
    """

    def __init__(
        self,
        config: EngineConfig = ENGINE_CONFIG,
        rng: Optional[random.Random] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config
        self.rng = rng or random.Random()
        self.now = now or datetime.now

    def build(
        self,
        home: Team,
        away: Team,
        score: Sequence[int],
        final_stats: FinalStats,
        event_log: Sequence[MatchEvent],
        early_terminated: bool = False,
    ) -> MatchResult:
        """Freeze a finished match into a result.

        Parameters
        ----------
        home : Team
            Home side.
        away : Team
            Away side.
        score : Sequence[int]
            ``[home, away]`` goals.
        final_stats : FinalStats
            Statistics from the aggregator.
        event_log : Sequence[MatchEvent]
            Events in the order they happened.
        early_terminated : bool, default=False
            Whether the match was stopped before full time.

        Returns
        -------
        MatchResult
            The immutable result.
        """
        home_score, away_score = int(score[0]), int(score[1])
        outcome = outcome_for(home_score, away_score)
        perspective = {HOME_WIN: ("win", "loss"), AWAY_WIN: ("loss", "win"), DRAW: ("draw", "draw")}
        for_home, for_away = perspective[outcome]
        events = tuple(event_log)
        played_at = self.now()
        return MatchResult(
            match_id=f"match_{played_at:%Y%m%d%H%M%S%f}_{home.team_id}_{away.team_id}",
            home_team_id=home.team_id,
            home_team_name=home.name,
            away_team_id=away.team_id,
            away_team_name=away.name,
            home_score=home_score,
            away_score=away_score,
            outcome=outcome,
            result_for_home=for_home,
            result_for_away=for_away,
            duration=final_stats.duration,
            early_terminated=early_terminated,
            events=events,
            key_events=tuple(e for e in events if e.importance is Importance.HIGH),
            final_stats=final_stats,
            attendance=self._attendance(),
            weather=self._weather(),
            played_at=played_at,
        )

    def record(self, result: MatchResult, home: Team, away: Team, recorder: ResultRecorder) -> List[Exception]:
        """Push a result and its player updates to ``recorder``.

        Every call is attempted even when earlier ones fail. When the recorder
        offers ``match_transaction()`` all calls run inside it, so the match is
        applied as one update.

        Parameters
        ----------
        result : MatchResult
            Result to record.
        home : Team
            Home side, used for the starting eleven.
        away : Team
            Away side.
        recorder : ResultRecorder
            Destination store.

        Returns
        -------
        List[Exception]
            Failures raised by the recorder, in call order.
        """
        errors: List[Exception] = []

        def attempt(call: Callable[..., None], *args: object) -> None:
            try:
                call(*args)
            except Exception as exc:
                errors.append(exc)

        transaction = getattr(recorder, "match_transaction", None)
        with transaction() if transaction is not None else nullcontext():
            attempt(recorder.record_result, result)
            team_ids = {Side.HOME: result.home_team_id, Side.AWAY: result.away_team_id}
            for event in result.events:
                team_id = team_ids[event.side]
                if isinstance(event.payload, GoalPayload):
                    attempt(
                        recorder.record_player_goal, team_id, event.player_id, event.minute, event.payload.assist_id
                    )
                elif event.kind in (EventKind.YELLOW_CARD, EventKind.RED_CARD):
                    attempt(recorder.record_player_card, team_id, event.player_id, event.kind)

            for side, team in ((Side.HOME, home), (Side.AWAY, away)):
                starters = [p.player_id for p in team.starting_eleven()]
                for player_id, minutes in minutes_played(starters, result.events, side, result.duration).items():
                    attempt(recorder.record_player_appearance, team_ids[side], player_id, minutes)
        return errors

    def _attendance(self) -> int:
        """Draw the reported crowd.

        Returns
        -------
        int
            Attendance within ``ResultConfig.attendance_range``.
        """
        low, high = self.config.results.attendance_range
        return self.rng.randint(low, high)

    def _weather(self) -> Weather:
        """Draw the reported conditions.

        Returns
        -------
        Weather
            Condition and temperature for the match report.
        """
        low, high = self.config.results.temperature_range
        return Weather(
            condition=self.rng.choice(self.config.results.weather_conditions),
            temperature=self.rng.randint(low, high),
        )


def substitutions_for(result: MatchResult, side: Side) -> List[Tuple[int, SubstitutionPayload]]:
    """List the changes one side made as ``(minute, payload)`` pairs.

    Parameters
    ----------
    result : MatchResult
        Finished match.
    side : Side
        Side whose substitutions are wanted.

    Returns
    -------
    List[Tuple[int, SubstitutionPayload]]
        Substitutions in the order they were made.
    """
    return [
        (event.minute, event.payload)
        for event in result.events
        if event.side is side and isinstance(event.payload, SubstitutionPayload)
    ]

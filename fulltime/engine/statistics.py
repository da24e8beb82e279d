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
"""Live per-team match statistics built from the event stream."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict, List, Sequence, Tuple

from fulltime.engine.errors import InvariantViolation
from fulltime.engine.events import EventKind, MatchEvent, Side

_COUNTER_FOR_KIND: Dict[EventKind, str] = {
    EventKind.FOUL: "fouls",
    EventKind.YELLOW_CARD: "yellow_cards",
    EventKind.RED_CARD: "red_cards",
    EventKind.CORNER: "corners",
    EventKind.OFFSIDE: "offsides",
    EventKind.SUBSTITUTION: "substitutions",
    EventKind.INJURY: "injuries",
}


@dataclass(slots=True)
class StatAccumulator:
    """Mutable counters for one side; only the aggregator writes to it.

    Parameters
    ----------
    goals : int, default=0
        Goals scored.
    shots : int, default=0
        Attempts at goal, including goals.
    shots_on_target : int, default=0
        Attempts on target, including goals.
    fouls : int, default=0
        Fouls committed.
    corners : int, default=0
        Corners won.
    yellow_cards : int, default=0
        Cautions received.
    red_cards : int, default=0
        Dismissals received.
    offsides : int, default=0
        Times caught offside.
    substitutions : int, default=0
        Changes made.
    injuries : int, default=0
        Injuries suffered.
    possession_minutes : int, default=0
        Sampled minutes in which this side had the ball.
    """

    goals: int = 0
    shots: int = 0
    shots_on_target: int = 0
    fouls: int = 0
    corners: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    offsides: int = 0
    substitutions: int = 0
    injuries: int = 0
    possession_minutes: int = 0


@dataclass(frozen=True, slots=True)
class TeamStatLine:
    """Immutable copy of one side's counters with derived ratios.

    Parameters
    ----------
    goals : int
        Goals scored.
    shots : int
        Attempts at goal, including goals.
    shots_on_target : int
        Attempts on target, including goals.
    fouls : int
        Fouls committed.
    corners : int
        Corners won.
    yellow_cards : int
        Cautions received.
    red_cards : int
        Dismissals received.
    offsides : int
        Times caught offside.
    substitutions : int
        Changes made.
    injuries : int
        Injuries suffered.
    possession : int
        Possession share in percent.
    """

    goals: int
    shots: int
    shots_on_target: int
    fouls: int
    corners: int
    yellow_cards: int
    red_cards: int
    offsides: int
    substitutions: int
    injuries: int
    possession: int

    @property
    def shot_accuracy(self) -> float:
        """Return the percentage of shots that were on target."""
        return self.shots_on_target / self.shots * 100 if self.shots else 0.0

    @property
    def conversion_rate(self) -> float:
        """Return the percentage of shots that were scored."""
        return self.goals / self.shots * 100 if self.shots else 0.0


@dataclass(frozen=True, slots=True)
class StatsSnapshot:
    """Point-in-time statistics for both sides.

    Parameters
    ----------
    minute : int
        Last minute that was sampled.
    home : TeamStatLine
        Home side counters.
    away : TeamStatLine
        Away side counters.
    """

    minute: int
    home: TeamStatLine
    away: TeamStatLine

    @property
    def possession_home(self) -> int:
        """Return the home possession percentage."""
        return self.home.possession

    @property
    def possession_away(self) -> int:
        """Return the away possession percentage."""
        return self.away.possession

    def for_side(self, side: Side) -> TeamStatLine:
        """Return the stat line for ``side``.

        Parameters
        ----------
        side : Side
            Side to look up.

        Returns
        -------
        TeamStatLine
            Counters for that side.
        """
        return self.home if side is Side.HOME else self.away


@dataclass(frozen=True, slots=True)
class FinalStats:
    """Statistics handed to the result synthesiser when a match ends.

    Parameters
    ----------
    snapshot : StatsSnapshot
        Final counters for both sides.
    events : Tuple[MatchEvent, ...]
        Every recorded event in order.
    duration : int
        Minutes actually played.
    """

    snapshot: StatsSnapshot
    events: Tuple[MatchEvent, ...]
    duration: int


class StatisticsAggregator:
    """Accumulates counters and possession samples for a single match."""

    def __init__(self) -> None:
        self.counters: Dict[Side, StatAccumulator] = {Side.HOME: StatAccumulator(), Side.AWAY: StatAccumulator()}
        self.events: List[MatchEvent] = []
        self.last_minute = 0

    def record(self, event: MatchEvent) -> None:
        """Update the counters of the event's side.

        A goal counts as a shot on target as well as a goal.

        Parameters
        ----------
        event : MatchEvent
            Event to account for.
        """
        acc = self.counters[event.side]
        self.events.append(event)
        if event.kind is EventKind.GOAL:
            acc.goals += 1
            acc.shots += 1
            acc.shots_on_target += 1
        elif event.kind is EventKind.SHOT:
            acc.shots += 1
            if event.payload.on_target:
                acc.shots_on_target += 1
        else:
            name = _COUNTER_FOR_KIND[event.kind]
            setattr(acc, name, getattr(acc, name) + 1)

    def sample_minute(self, minute: int, home_possession: bool) -> None:
        """Attribute one minute of possession to exactly one side.

        Parameters
        ----------
        minute : int
            Minute being sampled.
        home_possession : bool
            ``True`` when the home side had the ball.
        """
        side = Side.HOME if home_possession else Side.AWAY
        self.counters[side].possession_minutes += 1
        self.last_minute = minute

    def possession_split(self) -> Tuple[int, int]:
        """Return the possession percentages as ``(home, away)``.

        Returns
        -------
        Tuple[int, int]
            Integer percentages that always sum to 100; ``(50, 50)`` before any sample.
        """
        home = self.counters[Side.HOME].possession_minutes
        total = home + self.counters[Side.AWAY].possession_minutes
        if total == 0:
            return 50, 50
        home_pct = round(home / total * 100)
        return home_pct, 100 - home_pct

    def get_snapshot(self) -> StatsSnapshot:
        """Copy the counters into an immutable snapshot.

        Returns
        -------
        StatsSnapshot
            Current statistics for both sides.
        """
        home_pct, away_pct = self.possession_split()
        return StatsSnapshot(
            minute=self.last_minute,
            home=self._line(Side.HOME, home_pct),
            away=self._line(Side.AWAY, away_pct),
        )

    def get_final_snapshot(self) -> FinalStats:
        """Freeze the statistics at the end of a match.

        Returns
        -------
        FinalStats
            Snapshot, event list and duration in minutes.
        """
        snapshot = self.get_snapshot()
        return FinalStats(snapshot=snapshot, events=tuple(self.events), duration=self.last_minute)

    def recent_events(self, count: int = 5) -> List[MatchEvent]:
        """Return the latest events, newest first.

        Parameters
        ----------
        count : int, default=5
            Maximum number of events to return.

        Returns
        -------
        List[MatchEvent]
            Up to ``count`` events.
        """
        if count <= 0:
            return []
        return list(reversed(self.events[-count:]))

    def check_against_score(self, score: Sequence[int]) -> None:
        """Verify that recorded goals match the scoreline.

        Parameters
        ----------
        score : Sequence[int]
            ``[home, away]`` goals held by the session.

        Raises
        ------
        InvariantViolation
            If goal counters and score disagree, or possession does not sum to 100.
        """
        goals = (self.counters[Side.HOME].goals, self.counters[Side.AWAY].goals)
        if tuple(score) != goals:
            raise InvariantViolation(f"Score {tuple(score)} does not match recorded goals {goals}")
        if sum(self.possession_split()) != 100:
            raise InvariantViolation("Possession percentages do not sum to 100")

    def _line(self, side: Side, possession: int) -> TeamStatLine:
        """Freeze one side's counters.

        Parameters
        ----------
        side : Side
            Side to copy.
        possession : int
            Possession percentage already computed for that side.

        Returns
        -------
        TeamStatLine
            Immutable stat line.
        """
        acc = self.counters[side]
        values = {f.name: getattr(acc, f.name) for f in fields(StatAccumulator) if f.name != "possession_minutes"}
        return TeamStatLine(possession=possession, **values)

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
"""In-memory league store that records finished matches.

:class:`SeasonLedger` satisfies the ``ResultRecorder`` protocol. Team and
player season records are frozen values. Inside
:meth:`SeasonLedger.match_transaction` every update of a match is staged and
then applied under the ledger's lock in one step, so readers never see a
half-applied match.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock, local
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from fulltime.engine.config import ENGINE_CONFIG, EngineConfig
from fulltime.engine.events import EventKind
from fulltime.engine.results import MatchResult
from fulltime.models.player import Player, PlayerSeasonStats
from fulltime.models.team import Team, TeamSeasonRecord


@dataclass(frozen=True)
class MatchRecord:
    """One match as seen from a single team's perspective.

    Parameters
    ----------
    match_id : str
        Identifier of the result.
    opponent_id : int
        Identifier of the other team.
    opponent_name : str
        Name of the other team.
    home : bool
        Whether this team played at home.
    goals_for : int
        Goals this team scored.
    goals_against : int
        Goals this team conceded.
    result : str
        ``"win"``, ``"draw"`` or ``"loss"``.
    """

    match_id: str
    opponent_id: int
    opponent_name: str
    home: bool
    goals_for: int
    goals_against: int
    result: str


class SeasonLedger:
    """League table, match history and player totals for a set of teams.

    Parameters
    ----------
    teams : Iterable[Team]
        Participating teams; their ``season`` fields are updated in place.
    config : EngineConfig, optional
        Supplies the points awarded per result.
    """

    def __init__(self, teams: Iterable[Team], config: EngineConfig = ENGINE_CONFIG) -> None:
        self.teams: Dict[int, Team] = {team.team_id: team for team in teams}
        self.config = config
        self.history: Dict[int, List[MatchRecord]] = {team_id: [] for team_id in self.teams}
        self.results: List[MatchResult] = []
        self._lock = Lock()
        self._staging = local()

    @contextmanager
    def match_transaction(self) -> Iterator[None]:
        """Stage every update made in the block and apply them together.

        Updates are applied under the ledger's lock when the block exits
        normally and discarded when it raises. Transactions are per thread
        and do not nest.

        Yields
        ------
        None
            Control returns to the caller with staging active.

        Raises
        ------
        RuntimeError
            If a transaction is already open on this thread.
        """
        if getattr(self._staging, "pending", None) is not None:
            raise RuntimeError("A match transaction is already open")
        pending: List[Callable[[], None]] = []
        self._staging.pending = pending
        try:
            yield
        finally:
            self._staging.pending = None
        with self._lock:
            for apply in pending:
                apply()

    def record_result(self, result: MatchResult) -> None:
        """Update both teams' records and match histories.

        Parameters
        ----------
        result : MatchResult
            Finished match.

        Raises
        ------
        KeyError
            If either team is not part of this ledger.
        """
        home = self._team(result.home_team_id)
        away = self._team(result.away_team_id)
        points = self.config.results

        def apply() -> None:
            home.season = home.season.with_result(
                result.home_score, result.away_score, points.points_for_win, points.points_for_draw
            )
            away.season = away.season.with_result(
                result.away_score, result.home_score, points.points_for_win, points.points_for_draw
            )
            self.history[home.team_id].append(
                MatchRecord(
                    match_id=result.match_id,
                    opponent_id=away.team_id,
                    opponent_name=away.name,
                    home=True,
                    goals_for=result.home_score,
                    goals_against=result.away_score,
                    result=result.result_for_home,
                )
            )
            self.history[away.team_id].append(
                MatchRecord(
                    match_id=result.match_id,
                    opponent_id=home.team_id,
                    opponent_name=home.name,
                    home=False,
                    goals_for=result.away_score,
                    goals_against=result.home_score,
                    result=result.result_for_away,
                )
            )
            self.results.append(result)

        self._submit(apply)

    def record_player_goal(self, team_id: int, player_id: int, minute: int, assist_id: Optional[int]) -> None:
        """Credit a goal and, when present, its assist.

        Parameters
        ----------
        team_id : int
            Scoring team.
        player_id : int
            Scorer.
        minute : int
            Minute of the goal.
        assist_id : int | None
            Provider of the assist, if any.
        """
        team = self._team(team_id)
        scorer = self._player(team, player_id)
        provider = self._player(team, assist_id) if assist_id is not None else None

        def apply() -> None:
            scorer.season = scorer.season.plus(goals=1)
            if provider is not None:
                provider.season = provider.season.plus(assists=1)

        self._submit(apply)

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

        Raises
        ------
        ValueError
            If ``kind`` is not a card.
        """
        counters = {EventKind.YELLOW_CARD: "yellow_cards", EventKind.RED_CARD: "red_cards"}
        if kind not in counters:
            raise ValueError(f"Not a card event: {kind!r}")
        player = self._player(self._team(team_id), player_id)
        counter = counters[kind]

        def apply() -> None:
            player.season = player.season.plus(**{counter: 1})

        self._submit(apply)

    def record_player_appearance(self, team_id: int, player_id: int, minutes: int) -> None:
        """Record an appearance and the minutes played.

        Parameters
        ----------
        team_id : int
            Player's team.
        player_id : int
            Player who featured.
        minutes : int
            Minutes on the pitch.
        """
        player = self._player(self._team(team_id), player_id)

        def apply() -> None:
            player.season = player.season.plus(appearances=1, minutes_played=minutes)

        self._submit(apply)

    def team_snapshot(self, team_id: int) -> Tuple[TeamSeasonRecord, Dict[int, PlayerSeasonStats]]:
        """Read a team's record and its players' totals consistently.

        Parameters
        ----------
        team_id : int
            Team to read.

        Returns
        -------
        Tuple[TeamSeasonRecord, Dict[int, PlayerSeasonStats]]
            The team record and season stats keyed by player id.
        """
        team = self._team(team_id)
        with self._lock:
            return team.season, {p.player_id: p.season for p in team.players}

    def standings(self) -> List[Team]:
        """Return teams ordered by points, goal difference, then goals scored.

        Returns
        -------
        List[Team]
            League table from first to last.
        """
        with self._lock:
            rows = [(team, team.season) for team in self.teams.values()]
        rows.sort(key=lambda row: (row[1].points, row[1].goal_difference, row[1].goals_for), reverse=True)
        return [team for team, _ in rows]

    def match_history(self, team_id: int, limit: int = 10) -> List[MatchRecord]:
        """Return a team's most recent matches, newest first.

        Parameters
        ----------
        team_id : int
            Team to look up.
        limit : int, default=10
            Maximum number of records.

        Returns
        -------
        List[MatchRecord]
            Up to ``limit`` records.
        """
        with self._lock:
            records = list(self.history[team_id])
        return list(reversed(records[-limit:])) if limit > 0 else []

    def _submit(self, apply: Callable[[], None]) -> None:
        pending = getattr(self._staging, "pending", None)
        if pending is not None:
            pending.append(apply)
            return
        with self._lock:
            apply()

    def _team(self, team_id: int) -> Team:
        try:
            return self.teams[team_id]
        except KeyError:
            raise KeyError(f"Team {team_id} is not part of this league") from None

    def _player(self, team: Team, player_id: int) -> Player:
        player = team.get_player(player_id)
        if player is None:
            raise KeyError(f"Player {player_id} is not registered with {team.name}")
        return player

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
"""Team, formation and season record domain models."""
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from fulltime.models.player import Player, find_player, normalise_role


@dataclass
class Formation:
    """Description of an outfield tactical shape excluding the goalkeeper.

    Parameters
    ----------
    name : str
        Human-readable name of the formation (for example ``"4-4-2"``).
    role_counts : Dict[str, int]
        Mapping of role codes to the number of players required in that role.
    """

    name: str  # e.g., "4-4-2", "4-3-3"
    role_counts: Dict[str, int]  # e.g., {"RD": 1, "CD": 2, "LD": 1, "RM": 1, ...}

    def __post_init__(self) -> None:
        """Ensure the formation defines ten outfield players."""
        self.role_counts = {normalise_role(role): count for role, count in self.role_counts.items()}
        if sum(self.role_counts.values()) != 10:
            raise ValueError("Formation must have exactly 10 outfield players")


@dataclass(frozen=True)
class TeamSeasonRecord:
    """League record for a team; replaced wholesale after each match.

    Parameters
    ----------
    played : int, default=0
        Matches completed.
    won : int, default=0
        Matches won.
    drawn : int, default=0
        Matches drawn.
    lost : int, default=0
        Matches lost.
    goals_for : int, default=0
        Goals scored.
    goals_against : int, default=0
        Goals conceded.
    points : int, default=0
        League points accumulated.
    """

    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        """Return goals scored minus goals conceded."""
        return self.goals_for - self.goals_against

    def with_result(
        self,
        goals_for: int,
        goals_against: int,
        points_for_win: int = 3,
        points_for_draw: int = 1,
    ) -> "TeamSeasonRecord":
        """Return the record updated with one more completed match.

        Parameters
        ----------
        goals_for : int
            Goals this team scored in the match.
        goals_against : int
            Goals this team conceded in the match.
        points_for_win : int, default=3
            Points awarded for a win.
        points_for_draw : int, default=1
            Points awarded for a draw.

        Returns
        -------
        TeamSeasonRecord
            A new record; ``self`` is left untouched.
        """
        won = int(goals_for > goals_against)
        drawn = int(goals_for == goals_against)
        lost = int(goals_for < goals_against)
        return replace(
            self,
            played=self.played + 1,
            won=self.won + won,
            drawn=self.drawn + drawn,
            lost=self.lost + lost,
            goals_for=self.goals_for + goals_for,
            goals_against=self.goals_against + goals_against,
            points=self.points + won * points_for_win + drawn * points_for_draw,
        )


@dataclass
class Team:
    """Read-only team view supplied to the match pipeline.

    Parameters
    ----------
    team_id : int
        Unique identifier for the team.
    name : str
        Display name for the squad.
    players : List[Player]
        Ordered roster; the first eleven eligible players start.
    formation : Formation | None, optional
        Tactical formation the roster was built for.
    season : TeamSeasonRecord, optional
        League record maintained by the result recorder.
    """

    team_id: int
    name: str
    players: List[Player]
    formation: Optional[Formation] = None
    season: TeamSeasonRecord = field(default_factory=TeamSeasonRecord)

    def eligible_players(self) -> List[Player]:
        """Return available players with a recognised role, in roster order.

        Returns
        -------
        List[Player]
            Players who may take part in a match.
        """
        return [p for p in self.players if p.is_eligible]

    def starting_eleven(self) -> List[Player]:
        """Return the players who kick off the match.

        Returns
        -------
        List[Player]
            The first eleven eligible players.
        """
        return self.eligible_players()[:11]

    def bench(self) -> List[Player]:
        """Return eligible players not in the starting eleven.

        Returns
        -------
        List[Player]
            Substitutes in roster order.
        """
        return self.eligible_players()[11:]

    def get_team_rating(self) -> float:
        """Average the overall rating of the starting eleven.

        Returns
        -------
        float
            Mean overall rating on a 1-100 scale, or ``0.0`` for an empty side.
        """
        starters = self.starting_eleven()
        if not starters:
            return 0.0
        return sum(p.overall_rating for p in starters) / len(starters)

    def get_player(self, player_id: int) -> Optional[Player]:
        """Find a rostered player by identifier.

        Parameters
        ----------
        player_id : int
            Identifier to look up.

        Returns
        -------
        Player | None
            The matching player, or ``None`` when not on this roster.
        """
        return find_player(self.players, player_id)

    def get_players_by_role(self, role: str) -> List[Player]:
        """Get all players who can play in a given role.

        Parameters
        ----------
        role : str
            Role code to filter by (for example ``"CM"``).

        Returns
        -------
        List[Player]
            Players on the roster whose primary role matches ``role``.
        """
        role = normalise_role(role)
        return [p for p in self.players if p.role == role]

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
"""Domain models representing football players, their attributes and season totals."""
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

ROLE_CODES = ("GK", "RD", "CD", "LD", "RM", "CM", "LM", "CF", "RCF", "LCF")

ROLE_ALIASES: Dict[str, str] = {
    "G": "GK",
    "GOALKEEPER": "GK",
    "RB": "RD",
    "RWB": "RD",
    "LB": "LD",
    "LWB": "LD",
    "CB": "CD",
    "DEF": "CD",
    "D": "CD",
    "CDM": "CM",
    "DM": "CM",
    "CAM": "CM",
    "AM": "CM",
    "MID": "CM",
    "M": "CM",
    "RW": "RCF",
    "LW": "LCF",
    "ST": "CF",
    "FW": "CF",
    "FWD": "CF",
    "F": "CF",
}


def normalise_role(role: str) -> str:
    """Map a position label onto one of the engine's role codes.

    Parameters
    ----------
    role : str
        Role code or common alias such as ``"ST"`` or ``"cb"``.

    Returns
    -------
    str
        Canonical role code, or the upper-cased input when it is not recognised.
    """
    key = role.strip().upper()
    return ROLE_ALIASES.get(key, key)


@dataclass
class PlayerAttributes:
    """Collection of technical, physical, and mental attribute ratings.

    Parameters
    ----------
    passing : int
        Accuracy and vision of ground passes.
    shooting : int
        Finishing ability and shot power.
    dribbling : int
        Close control and ability to beat opponents off the dribble.
    tackling : int
        Success rate of standing and sliding tackles.
    heading : int
        Strength in aerial duels.
    speed : int
        Top sprint velocity.
    stamina : int
        Resistance to fatigue over the match.
    strength : int
        Physical power during challenges.
    vision : int
        Awareness of teammates and space.
    positioning : int
        Off-ball movement intelligence.
    decisions : int
        Speed and quality of in-match decision making.
    aggression : int, default=50
        Appetite for physical confrontation; scales foul and card likelihood.
    """

    # Technical
    passing: int
    shooting: int
    dribbling: int
    tackling: int
    heading: int

    # Physical
    speed: int
    stamina: int
    strength: int

    # Mental
    vision: int
    positioning: int
    decisions: int
    aggression: int = 50

    def __post_init__(self) -> None:
        """Validate that all attributes fall within the 1-100 rating scale."""
        for attr, value in self.__dict__.items():
            if not 1 <= value <= 100:
                raise ValueError(f"{attr} must be between 1 and 100")


@dataclass(frozen=True)
class PlayerSeasonStats:
    """Running season totals for a player; replaced wholesale on every update.

    Parameters
    ----------
    appearances : int, default=0
        Matches in which the player featured.
    minutes_played : int, default=0
        Total minutes on the pitch.
    goals : int, default=0
        Goals scored.
    assists : int, default=0
        Goals set up.
    yellow_cards : int, default=0
        Cautions received.
    red_cards : int, default=0
        Dismissals received.
    """

    appearances: int = 0
    minutes_played: int = 0
    goals: int = 0
    assists: int = 0
    yellow_cards: int = 0
    red_cards: int = 0

    def plus(self, **increments: int) -> "PlayerSeasonStats":
        """Return a copy with the given counters increased.

        Returns
        -------
        PlayerSeasonStats
            New totals; ``self`` is left untouched.
        """
        return replace(self, **{name: getattr(self, name) + value for name, value in increments.items()})

    def per_90(self, stat: str) -> float:
        """Normalise a counted stat to a per-90-minutes rate.

        Parameters
        ----------
        stat : str
            Name of a counter on this object, for example ``"goals"``.

        Returns
        -------
        float
            ``value * 90 / minutes_played``, or ``0.0`` before any minutes are played.
        """
        if self.minutes_played <= 0:
            return 0.0
        return getattr(self, stat) * 90 / self.minutes_played


@dataclass
class Player:
    """Player view consumed by the match pipeline.

    Parameters
    ----------
    player_id : int
        Unique identifier for the player; events refer to players by this id.
    name : str
        Human-readable player name. Names need not be unique.
    age : int
        Player age in years.
    role : str
        Preferred tactical role, for example ``"CM"``; aliases are normalised.
    attributes : PlayerAttributes
        Structured attribute ratings attached to the player.
    available : bool, default=True
        ``False`` for injured or suspended players, who are not eligible to play.
    season : PlayerSeasonStats, optional
        Season totals maintained by the result recorder.
    """

    player_id: int
    name: str
    age: int
    role: str  # GK, RD, CD, LD, RM, CM, LM, CF, LCF, RCF
    attributes: PlayerAttributes
    available: bool = True
    season: PlayerSeasonStats = field(default_factory=PlayerSeasonStats)

    def __post_init__(self) -> None:
        self.role = normalise_role(self.role)

    @property
    def is_eligible(self) -> bool:
        """Return ``True`` when the player is available and has a known role."""
        return self.available and self.role in ROLE_CODES

    @property
    def overall_rating(self) -> int:
        """Rate the player in their own role on a 1-100 scale.

        Returns
        -------
        int
            Rounded role rating; unknown roles fall back to the central midfield formula.
        """
        ratings = self.get_role_rating()
        return max(1, round(ratings.get(self.role, ratings["CM"]) * 100))

    def get_role_rating(self) -> Dict[str, float]:
        """Compute role-specific effectiveness scores derived from attributes.

        Returns
        -------
        Dict[str, float]
            Mapping from role code to a normalised suitability rating.
        """
        attrs = self.attributes
        goalkeeper = (attrs.positioning * 0.3 + attrs.decisions * 0.2 + attrs.speed * 0.2 + attrs.strength * 0.3) / 100
        centre_back = (attrs.tackling * 0.3 + attrs.heading * 0.2 + attrs.strength * 0.2 + attrs.positioning * 0.3) / 100
        full_back = (
            attrs.tackling * 0.25
            + attrs.speed * 0.25
            + attrs.stamina * 0.2
            + attrs.passing * 0.15
            + attrs.positioning * 0.15
        ) / 100
        central_mid = (
            attrs.passing * 0.3
            + attrs.vision * 0.2
            + attrs.stamina * 0.2
            + attrs.decisions * 0.15
            + attrs.tackling * 0.15
        ) / 100
        wide_mid = (
            attrs.dribbling * 0.3 + attrs.speed * 0.25 + attrs.passing * 0.2 + attrs.stamina * 0.15 + attrs.vision * 0.1
        ) / 100
        striker = (attrs.shooting * 0.3 + attrs.dribbling * 0.2 + attrs.speed * 0.2 + attrs.positioning * 0.3) / 100
        wide_forward = (
            attrs.shooting * 0.25
            + attrs.dribbling * 0.25
            + attrs.speed * 0.2
            + attrs.passing * 0.15
            + attrs.vision * 0.15
        ) / 100

        return {
            "GK": goalkeeper,
            "RD": full_back,
            "CD": centre_back,
            "LD": full_back,
            "RM": wide_mid,
            "CM": central_mid,
            "LM": wide_mid,
            "CF": striker,
            "RCF": wide_forward,
            "LCF": wide_forward,
        }


def find_player(players: "list[Player]", player_id: int) -> Optional[Player]:
    """Look a player up by identifier.

    Parameters
    ----------
    players : list[Player]
        Roster to search.
    player_id : int
        Identifier to match.

    Returns
    -------
    Player | None
        The matching player, or ``None`` when absent.
    """
    return next((p for p in players if p.player_id == player_id), None)

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
"""Event domain models for the match engine.

Every in-match event is a :class:`MatchEvent` carrying one of nine
:class:`EventKind` values and the payload type registered for that kind in
:data:`PAYLOAD_TYPES`. The declaration order of :class:`EventKind` is the order
in which the event generator walks the cumulative probability table.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Literal, Optional, Type, Union


class EventKind(str, Enum):
    """Closed set of discrete events the generator can produce."""

    GOAL = "goal"
    SHOT = "shot"
    FOUL = "foul"
    YELLOW_CARD = "yellow_card"
    RED_CARD = "red_card"
    CORNER = "corner"
    OFFSIDE = "offside"
    SUBSTITUTION = "substitution"
    INJURY = "injury"


class Side(str, Enum):
    """Which team an event or statistic belongs to."""

    HOME = "home"
    AWAY = "away"

    @property
    def index(self) -> int:
        """Return the position of this side in a ``[home, away]`` score list.

        Returns
        -------
        int
            ``0`` for the home side and ``1`` for the away side.
        """
        return 0 if self is Side.HOME else 1

    @property
    def opponent(self) -> "Side":
        """Return the other side.

        Returns
        -------
        Side
            ``AWAY`` for ``HOME`` and vice versa.
        """
        return Side.AWAY if self is Side.HOME else Side.HOME


class Importance(str, Enum):
    """Tier used to pick out key events for result summaries."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class GoalPayload:
    """Goal details.

    Parameters
    ----------
    assist_id : int | None, optional
        Identifier of the teammate credited with the assist.
    assist_name : str | None, optional
        Display name of the assisting player.
    """

    assist_id: Optional[int] = None
    assist_name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ShotPayload:
    """Shot details.

    Parameters
    ----------
    on_target : bool
        Whether the attempt forced a save.
    """

    on_target: bool


@dataclass(frozen=True, slots=True)
class FoulPayload:
    """Foul details.

    Parameters
    ----------
    fouled_player_id : int | None, optional
        Opponent who was fouled, when one could be identified.
    """

    fouled_player_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class CardPayload:
    """Disciplinary details shared by yellow and red cards.

    Parameters
    ----------
    reason : str
        Short label for the offence, for example ``"reckless challenge"``.
    """

    reason: str


@dataclass(frozen=True, slots=True)
class CornerPayload:
    """Corner details.

    Parameters
    ----------
    flank : {"left", "right"}
        Corner flag the kick is taken from.
    """

    flank: Literal["left", "right"]


@dataclass(frozen=True, slots=True)
class OffsidePayload:
    """Offside carries no extra detail beyond the flagged player."""


@dataclass(frozen=True, slots=True)
class SubstitutionPayload:
    """Substitution details; the event's player is the one leaving the pitch.

    Parameters
    ----------
    player_on_id : int
        Identifier of the replacement.
    player_on_name : str
        Display name of the replacement.
    """

    player_on_id: int
    player_on_name: str


@dataclass(frozen=True, slots=True)
class InjuryPayload:
    """Injury details.

    Parameters
    ----------
    severity : {"minor", "serious"}
        How badly the player is hurt.
    """

    severity: Literal["minor", "serious"]


EventPayload = Union[
    GoalPayload,
    ShotPayload,
    FoulPayload,
    CardPayload,
    CornerPayload,
    OffsidePayload,
    SubstitutionPayload,
    InjuryPayload,
]

PAYLOAD_TYPES: Dict[EventKind, Type] = {
    EventKind.GOAL: GoalPayload,
    EventKind.SHOT: ShotPayload,
    EventKind.FOUL: FoulPayload,
    EventKind.YELLOW_CARD: CardPayload,
    EventKind.RED_CARD: CardPayload,
    EventKind.CORNER: CornerPayload,
    EventKind.OFFSIDE: OffsidePayload,
    EventKind.SUBSTITUTION: SubstitutionPayload,
    EventKind.INJURY: InjuryPayload,
}
"""Payload type each event kind must carry."""


@dataclass(frozen=True, slots=True)
class MatchEvent:
    """Snapshot of a noteworthy moment during a simulation.

    Parameters
    ----------
    kind : EventKind
        Category of event.
    minute : int
        Match minute (1-90) in which the event happened.
    side : Side
        Team the event is attributed to.
    player_id : int
        Identifier of the player involved (the player leaving for substitutions).
    player_name : str
        Display name of that player.
    payload : EventPayload
        Kind-specific details; must be an instance of ``PAYLOAD_TYPES[kind]``.
    importance : Importance
        Tier used to build key-event summaries.
    description : str, optional
        Human-readable summary of what happened.
    """

    kind: EventKind
    minute: int
    side: Side
    player_id: int
    player_name: str
    payload: EventPayload
    importance: Importance
    description: str = ""

    def __post_init__(self) -> None:
        """Reject payloads that do not belong to the event kind."""
        expected = PAYLOAD_TYPES[self.kind]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.kind.value} events carry {expected.__name__}, got {type(self.payload).__name__}"
            )

    @property
    def is_goal(self) -> bool:
        """Return ``True`` when the event changes the score."""
        return self.kind is EventKind.GOAL


def importance_for(kind: EventKind, payload: EventPayload) -> Importance:
    """Classify an event into its importance tier.

    Parameters
    ----------
    kind : EventKind
        Category of the event.
    payload : EventPayload
        Kind-specific details, consulted for shots and injuries.

    Returns
    -------
    Importance
        ``HIGH`` for goals, red cards and serious injuries, ``MEDIUM`` for yellow
        cards, minor injuries and shots on target, ``LOW`` otherwise.
    """
    if kind in (EventKind.GOAL, EventKind.RED_CARD):
        return Importance.HIGH
    if kind is EventKind.YELLOW_CARD:
        return Importance.MEDIUM
    if kind is EventKind.INJURY:
        return Importance.HIGH if getattr(payload, "severity", "minor") == "serious" else Importance.MEDIUM
    if kind is EventKind.SHOT and getattr(payload, "on_target", False):
        return Importance.MEDIUM
    return Importance.LOW


def describe_event(
    kind: EventKind,
    player_name: str,
    team_name: str,
    payload: EventPayload,
) -> str:
    """Build the commentary line shown in event feeds and logs.

    Parameters
    ----------
    kind : EventKind
        Category of the event.
    player_name : str
        Display name of the player involved.
    team_name : str
        Name of the team the event is attributed to.
    payload : EventPayload
        Kind-specific details used to enrich the text.

    Returns
    -------
    str
        One-line description of the event.
    """
    if isinstance(payload, GoalPayload):
        assist = f" (assist {payload.assist_name})" if payload.assist_name else ""
        return f"GOAL! {player_name} scores for {team_name}{assist}"
    if isinstance(payload, ShotPayload):
        target = "on target" if payload.on_target else "off target"
        return f"Shot {target} by {player_name} ({team_name})"
    if isinstance(payload, FoulPayload):
        return f"Foul by {player_name} ({team_name})"
    if isinstance(payload, CardPayload):
        colour = "YELLOW" if kind is EventKind.YELLOW_CARD else "RED"
        return f"{colour} CARD for {player_name} ({team_name}) - {payload.reason}"
    if isinstance(payload, CornerPayload):
        return f"Corner from the {payload.flank} for {team_name}, taken by {player_name}"
    if isinstance(payload, OffsidePayload):
        return f"Offside! {player_name} ({team_name})"
    if isinstance(payload, SubstitutionPayload):
        return f"SUB: {payload.player_on_name} replaces {player_name} ({team_name})"
    if isinstance(payload, InjuryPayload):
        return f"{player_name} is injured ({payload.severity}) - {team_name}"
    raise TypeError(f"Unhandled payload type {type(payload).__name__}")

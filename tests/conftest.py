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
"""Shared fixtures: deterministic squads, events and fast engine settings."""

from dataclasses import replace
from typing import Callable, Iterable, List, Optional

import pytest

from fulltime.engine.config import ENGINE_CONFIG, EngineConfig
from fulltime.engine.events import (
    CardPayload,
    CornerPayload,
    EventKind,
    EventPayload,
    FoulPayload,
    GoalPayload,
    InjuryPayload,
    MatchEvent,
    OffsidePayload,
    ShotPayload,
    Side,
    SubstitutionPayload,
    describe_event,
    importance_for,
)
from fulltime.models.player import Player, PlayerAttributes
from fulltime.models.team import Formation, Team

STARTING_ROLES = ["GK", "RD", "CD", "CD", "LD", "RM", "CM", "CM", "LM", "RCF", "LCF"]
BENCH_ROLES = ["GK", "CD", "RD", "CM", "LM", "CF", "RCF"]
FORMATION_442 = {"RD": 1, "CD": 2, "LD": 1, "RM": 1, "CM": 2, "LM": 1, "RCF": 1, "LCF": 1}


def build_player(
    player_id: int,
    role: str,
    name: Optional[str] = None,
    rating: int = 70,
    aggression: int = 50,
    available: bool = True,
) -> Player:
    attrs = PlayerAttributes(
        passing=rating,
        shooting=rating,
        dribbling=rating,
        tackling=rating,
        heading=rating,
        speed=rating,
        stamina=rating,
        strength=rating,
        vision=rating,
        positioning=rating,
        decisions=rating,
        aggression=aggression,
    )
    return Player(
        player_id=player_id,
        name=name or f"Player {player_id}",
        age=25,
        role=role,
        attributes=attrs,
        available=available,
    )


def build_team(
    team_id: int,
    name: str,
    first_id: int = 1,
    bench: int = 7,
    unavailable: Iterable[int] = (),
) -> Team:
    """Build a 4-4-2 squad whose first eleven player ids run from ``first_id``."""
    blocked = set(unavailable)
    roles = STARTING_ROLES + BENCH_ROLES[:bench]
    players: List[Player] = []
    for offset, role in enumerate(roles):
        pid = first_id + offset
        players.append(build_player(pid, role, available=pid not in blocked))
    return Team(
        team_id=team_id,
        name=name,
        players=players,
        formation=Formation(name="4-4-2", role_counts=FORMATION_442),
    )


def default_payload(kind: EventKind) -> EventPayload:
    payloads = {
        EventKind.GOAL: GoalPayload(),
        EventKind.SHOT: ShotPayload(on_target=True),
        EventKind.FOUL: FoulPayload(),
        EventKind.YELLOW_CARD: CardPayload(reason="tactical foul"),
        EventKind.RED_CARD: CardPayload(reason="reckless challenge"),
        EventKind.CORNER: CornerPayload(flank="left"),
        EventKind.OFFSIDE: OffsidePayload(),
        EventKind.INJURY: InjuryPayload(severity="minor"),
    }
    return payloads[kind]


def build_event(
    kind: EventKind,
    minute: int,
    side: Side = Side.HOME,
    player_id: int = 10,
    payload: Optional[EventPayload] = None,
    player_name: Optional[str] = None,
) -> MatchEvent:
    """Create a valid event with sensible defaults for the payload."""
    if payload is None:
        if kind is EventKind.SUBSTITUTION:
            raise ValueError("Substitutions need an explicit SubstitutionPayload")
        payload = default_payload(kind)
    name = player_name or f"Player {player_id}"
    return MatchEvent(
        kind=kind,
        minute=minute,
        side=side,
        player_id=player_id,
        player_name=name,
        payload=payload,
        importance=importance_for(kind, payload),
        description=describe_event(kind, name, side.value, payload),
    )


def build_substitution(minute: int, side: Side, off_id: int, on_id: int) -> MatchEvent:
    return build_event(
        EventKind.SUBSTITUTION,
        minute,
        side,
        player_id=off_id,
        payload=SubstitutionPayload(player_on_id=on_id, player_on_name=f"Player {on_id}"),
    )


def fast_config(**simulation_overrides: object) -> EngineConfig:
    """Engine settings with no batch sleeps and invariant checks switched on."""
    simulation = replace(
        ENGINE_CONFIG.simulation,
        batch_delay=0.0,
        check_invariants=True,
        max_frame_dt=0.5,
        visual_minutes_per_second=1.0,
    )
    if simulation_overrides:
        simulation = replace(simulation, **simulation_overrides)
    return replace(ENGINE_CONFIG, simulation=simulation)


class FakeSurface:
    """Render surface that records calls instead of drawing."""

    def __init__(self) -> None:
        self.updates: List[float] = []
        self.draws = 0

    def update(self, dt: float) -> None:
        self.updates.append(dt)

    def draw(self) -> None:
        self.draws += 1


@pytest.fixture
def home_team() -> Team:
    return build_team(1, "Home FC", first_id=1)


@pytest.fixture
def away_team() -> Team:
    return build_team(2, "Away FC", first_id=101)


@pytest.fixture
def make_team() -> Callable[..., Team]:
    return build_team


@pytest.fixture
def make_player() -> Callable[..., Player]:
    return build_player


@pytest.fixture
def make_event() -> Callable[..., MatchEvent]:
    return build_event


@pytest.fixture
def make_substitution() -> Callable[..., MatchEvent]:
    return build_substitution


@pytest.fixture
def config() -> EngineConfig:
    return fast_config()


@pytest.fixture
def make_config() -> Callable[..., EngineConfig]:
    return fast_config


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()

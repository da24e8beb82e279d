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
"""Utilities for constructing team rosters from serialized data sources.

Plain dictionaries or JSON payloads are translated into the ``Player`` and
``Team`` objects the match pipeline consumes. Missing attribute values default
to 50 so that sparse squad files remain usable, and common position labels
such as ``"ST"`` or ``"CB"`` are mapped onto the engine's role codes.
"""
import json
from pathlib import Path
from typing import Any, Dict, Tuple

from fulltime.models.player import Player, PlayerAttributes
from fulltime.models.team import Formation, Team

ATTRIBUTE_NAMES = (
    "passing",
    "shooting",
    "dribbling",
    "tackling",
    "heading",
    "speed",
    "stamina",
    "strength",
    "vision",
    "positioning",
    "decisions",
    "aggression",
)

DEFAULT_ROLE_COUNTS = {"RD": 1, "CD": 2, "LD": 1, "RM": 1, "CM": 2, "LM": 1, "RCF": 1, "LCF": 1}


def player_from_dict(d: Dict[str, Any]) -> Player:
    """Build a ``Player`` from a plain dictionary payload.

    Parameters
    ----------
    d
        A mapping containing the serialized player information. Supported keys
        include ``id``, ``name``, ``age``, ``role`` (or legacy ``position``),
        ``available`` and an ``attributes`` mapping of ratings.

    Returns
    -------
    Player
        A fully initialised player instance with sane defaults for any missing
        attribute values.

    """
    attrs = d.get("attributes", {}) or {}
    pa = PlayerAttributes(**{name: attrs.get(name, 50) for name in ATTRIBUTE_NAMES})

    role_value = d.get("role") or d.get("position", "CM")

    return Player(
        player_id=d.get("id", 0),
        name=d.get("name", f"player_{d.get('id', 0)}"),
        age=d.get("age", 25),
        role=role_value,
        attributes=pa,
        available=bool(d.get("available", True)),
    )


def team_from_dict(d: Dict[str, Any], default_name: str = "Team") -> Team:
    """Build a ``Team`` from a plain dictionary payload.

    Parameters
    ----------
    d
        Mapping with ``id``, ``name``, ``players`` and an optional ``formation``
        holding ``name`` and ``roles`` (or legacy ``positions``).
    default_name
        Name used when the payload has none.

    Returns
    -------
    Team
        Team with players in payload order; the first eleven eligible players start.
    """
    players = [player_from_dict(pl) for pl in d.get("players", [])]
    formation_data = d.get("formation", {}) or {}
    role_counts = formation_data.get("roles") or formation_data.get("positions") or DEFAULT_ROLE_COUNTS
    formation = Formation(name=formation_data.get("name", "custom"), role_counts=dict(role_counts))
    return Team(
        team_id=d.get("id", 0),
        name=d.get("name", default_name),
        players=players,
        formation=formation,
    )


def load_teams_from_json(path: str) -> Tuple[Team, Team]:
    """Load home and away teams from a squad JSON document.

    Parameters
    ----------
    path
        The filesystem path to a JSON document with ``home`` and ``away``
        sections, each following the :func:`team_from_dict` schema.

    Returns
    -------
    tuple[Team, Team]
        A pair of ``Team`` objects in ``(home, away)`` order that are ready for
        simulation.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    KeyError
        Raised when the JSON payload is missing required top-level sections.

    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Players JSON not found: {path}")

    with p.open("r", encoding="utf-8") as fh:
        data = json.load(fh)

    home = team_from_dict(data["home"], default_name="Team_home")
    away = team_from_dict(data["away"], default_name="Team_away")
    return home, away

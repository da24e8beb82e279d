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
"""Utilities that synthesise players and teams for quick simulations."""
import random
from typing import Dict, List, Optional

from fulltime.models.player import ROLE_CODES, Player, PlayerAttributes
from fulltime.models.team import Formation, Team

ROLE_IMPORTANT_ATTRIBUTES = {
    "GK": ["positioning", "decisions", "strength"],
    "RD": ["tackling", "speed", "stamina", "passing"],
    "CD": ["tackling", "heading", "strength", "positioning"],
    "LD": ["tackling", "speed", "stamina", "passing"],
    "RM": ["dribbling", "speed", "passing", "vision"],
    "CM": ["passing", "vision", "decisions", "stamina"],
    "LM": ["dribbling", "speed", "passing", "vision"],
    "CF": ["shooting", "positioning", "strength", "dribbling"],
    "RCF": ["shooting", "dribbling", "speed", "vision"],
    "LCF": ["shooting", "dribbling", "speed", "vision"],
}

FORMATIONS: Dict[str, Dict[str, int]] = {
    "4-4-2": {"RD": 1, "CD": 2, "LD": 1, "RM": 1, "CM": 2, "LM": 1, "RCF": 1, "LCF": 1},
    "4-3-3": {"RD": 1, "CD": 2, "LD": 1, "RM": 1, "CM": 1, "LM": 1, "RCF": 1, "CF": 1, "LCF": 1},
    "3-5-2": {"RD": 1, "CD": 1, "LD": 1, "RM": 1, "CM": 3, "LM": 1, "RCF": 1, "LCF": 1},
}

# Substitute bench: a keeper plus cover across the pitch.
BENCH_ROLES = ("GK", "CD", "RD", "CM", "LM", "CF", "RCF")

FIRST_NAMES = ["John", "James", "David", "Michael", "Robert", "Carlos", "Juan", "Luis", "Kai", "Mateo", "Owen"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Rodriguez", "Evans", "Silva", "Morgan"]


def generate_random_player(
    id: int,
    name: Optional[str] = None,
    role: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> Player:
    """Generate a player with random attributes.

    Parameters
    ----------
    id : int
        Unique identifier assigned to the created player.
    name : Optional[str]
        Human-readable name to apply; a pseudo-random name is chosen when omitted.
    role : Optional[str]
        Preferred positional role influencing attribute weighting; random when ``None``.
    rng : Optional[random.Random]
        Source of randomness; an unseeded generator is used when omitted.

    Returns
    -------
    Player
        A newly constructed player instance with stochastic attribute scores.
    """
    rng = rng or random.Random()
    if name is None:
        name = f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"

    if role is None:
        role = rng.choice(ROLE_CODES)

    # Generate random attributes with role-specific weighting
    base_range = (40, 80)
    boost_range = (60, 90)

    def get_attribute(is_important: bool) -> int:
        if is_important:
            return rng.randint(*boost_range)
        return rng.randint(*base_range)

    important_attrs = ROLE_IMPORTANT_ATTRIBUTES.get(role, ["passing", "vision", "stamina"])

    attributes = PlayerAttributes(
        # Technical
        passing=get_attribute("passing" in important_attrs),
        shooting=get_attribute("shooting" in important_attrs),
        dribbling=get_attribute("dribbling" in important_attrs),
        tackling=get_attribute("tackling" in important_attrs),
        heading=get_attribute("heading" in important_attrs),
        # Physical
        speed=get_attribute("speed" in important_attrs),
        stamina=get_attribute("stamina" in important_attrs),
        strength=get_attribute("strength" in important_attrs),
        # Mental
        vision=get_attribute("vision" in important_attrs),
        positioning=get_attribute("positioning" in important_attrs),
        decisions=get_attribute("decisions" in important_attrs),
        aggression=rng.randint(20, 80),
    )

    return Player(player_id=id, name=name, age=rng.randint(18, 35), role=role, attributes=attributes)


def generate_team(
    id: int,
    name: Optional[str] = None,
    formation_name: str = "4-4-2",
    starting_player_id: int = 1,
    rng: Optional[random.Random] = None,
) -> Team:
    """Generate a team with random players using specified formation.

    Parameters
    ----------
    id : int
        Unique identifier assigned to the generated team.
    name : Optional[str]
        Squad name to apply; synthesised when ``None``.
    formation_name : str
        Tactical formation blueprint to instantiate (for example ``"4-4-2"``).
    starting_player_id : int
        Identifier to use for the first generated player; increments for each additional player.
    rng : Optional[random.Random]
        Source of randomness; pass a seeded instance for reproducible squads.

    Returns
    -------
    Team
        Team object populated with a starting XI followed by seven substitutes.

    Raises
    ------
    ValueError
        If ``formation_name`` is not one of :data:`FORMATIONS`.
    """
    rng = rng or random.Random()
    if name is None:
        prefixes = ["FC", "United", "City", "Athletic", "Sporting"]
        cities = ["London", "Madrid", "Paris", "Milan", "Munich"]
        name = f"{rng.choice(cities)} {rng.choice(prefixes)}"

    if formation_name not in FORMATIONS:
        raise ValueError(f"Unsupported formation: {formation_name}")

    formation = Formation(name=formation_name, role_counts=FORMATIONS[formation_name])

    players: List[Player] = []
    player_id = starting_player_id

    players.append(generate_random_player(player_id, role="GK", rng=rng))
    player_id += 1

    for role_name, count in formation.role_counts.items():
        for _ in range(count):
            players.append(generate_random_player(player_id, role=role_name, rng=rng))
            player_id += 1

    for role_name in BENCH_ROLES:
        players.append(generate_random_player(player_id, role=role_name, rng=rng))
        player_id += 1

    return Team(team_id=id, name=name, players=players, formation=formation)

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
"""Tests for utility modules (generator, roster, debug)."""

import json
import random
import re
from pathlib import Path

import pytest

from fulltime.models.team import Formation
from fulltime.utils.debug import MatchDebugger
from fulltime.utils.generator import BENCH_ROLES, generate_random_player, generate_team
from fulltime.utils.roster import load_teams_from_json, player_from_dict, team_from_dict


class TestGenerator:
    """Tests for generator utility functions."""

    def test_generate_random_player(self) -> None:
        """Test generating a random player."""
        player = generate_random_player(id=1)
        assert isinstance(player.player_id, int)
        assert isinstance(player.name, str)
        assert isinstance(player.age, int)
        assert len(player.name) > 0
        assert player.role in {"GK", "RD", "CD", "LD", "RM", "CM", "LM", "CF", "RCF", "LCF"}
        assert 1 <= player.attributes.speed <= 100
        assert 20 <= player.attributes.aggression <= 80
        assert 18 <= player.age <= 35

    def test_generate_random_player_with_role(self) -> None:
        """Test generating a random player with a specific role."""
        player = generate_random_player(id=1, role="RCF")
        assert player.role == "RCF"
        assert player.player_id == 1
        # Forwards should have decent shooting
        assert player.attributes.shooting >= 50

    def test_generate_team(self) -> None:
        """Test generating a complete team."""
        team = generate_team(id=1, name="Test FC")
        assert team.team_id == 1
        assert team.name == "Test FC"
        assert len(team.players) == 18
        assert isinstance(team.formation, Formation)
        assert team.players[0].role == "GK"
        assert [p.role for p in team.bench()] == list(BENCH_ROLES)

    def test_player_ids_are_sequential(self) -> None:
        team = generate_team(id=2, name="Away", formation_name="4-3-3", starting_player_id=100)
        assert [p.player_id for p in team.players] == list(range(100, 118))

    def test_seeded_generation_is_reproducible(self) -> None:
        first = generate_team(id=1, formation_name="3-5-2", rng=random.Random(9))
        second = generate_team(id=1, formation_name="3-5-2", rng=random.Random(9))
        assert first.name == second.name
        assert [(p.name, p.role, p.attributes) for p in first.players] == [
            (p.name, p.role, p.attributes) for p in second.players
        ]

    def test_unknown_formation(self) -> None:
        with pytest.raises(ValueError):
            generate_team(id=1, formation_name="5-5-0")


class TestRoster:
    """Tests for roster loading utility functions."""

    def test_player_from_dict(self) -> None:
        """Test loading a player from dictionary."""
        player_data = {
            "id": 1,
            "name": "Test Player",
            "age": 25,
            "position": "ST",
            "attributes": {"speed": 80, "shooting": 75, "aggression": 65},
        }
        player = player_from_dict(player_data)
        assert player.player_id == 1
        assert player.name == "Test Player"
        assert player.age == 25
        assert player.role == "CF"
        assert player.attributes.speed == 80
        assert player.attributes.aggression == 65
        assert player.attributes.passing == 50
        assert player.available is True

    def test_unavailable_flag(self) -> None:
        player = player_from_dict({"id": 4, "role": "CB", "available": False})
        assert player.role == "CD"
        assert not player.is_eligible

    def test_team_from_dict_defaults(self) -> None:
        team = team_from_dict({"id": 3, "players": [{"id": 1, "role": "GK"}]}, default_name="Fallback")
        assert team.name == "Fallback"
        assert team.formation.name == "custom"
        assert sum(team.formation.role_counts.values()) == 10

    def test_load_teams_from_json(self, tmp_path: Path) -> None:
        """Test loading teams from JSON file."""
        squad = [{"id": i, "name": f"P{i}", "role": "CM"} for i in range(1, 15)]
        payload = {
            "home": {"id": 1, "name": "Home", "players": squad, "formation": {"name": "4-4-2", "roles": {"CM": 10}}},
            "away": {"id": 2, "players": squad},
        }
        path = tmp_path / "teams.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        home, away = load_teams_from_json(str(path))
        assert home.name == "Home"
        assert away.name == "Team_away"
        assert len(home.starting_eleven()) == 11
        assert len(away.bench()) == 3

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_teams_from_json(str(tmp_path / "missing.json"))

    def test_missing_section(self, tmp_path: Path) -> None:
        path = tmp_path / "teams.json"
        path.write_text(json.dumps({"home": {"id": 1}}), encoding="utf-8")
        with pytest.raises(KeyError):
            load_teams_from_json(str(path))


class TestMatchDebugger:
    """Tests for the match telemetry writer."""

    def test_memory_only(self) -> None:
        debugger = MatchDebugger()
        debugger.log_state_change(0, "idle", "preparing")
        debugger.log_match_event(12, "GOAL", "GOAL! Player 9 scores")

        assert debugger.log_path is None
        recent = debugger.get_recent_events()
        assert len(recent) == 2
        assert re.match(r"^00002 \[\d\d:\d\d:\d\d\] MATCH_EVENT: Minute: 12 \| Event: GOAL", recent[-1])

    def test_recent_buffer_is_bounded(self) -> None:
        debugger = MatchDebugger(recent_buffer=3)
        for minute in range(1, 6):
            debugger.log_minute(minute, (0, 0), "Home")

        recent = debugger.get_recent_events()
        assert len(recent) == 3
        assert "Minute: 5 " in recent[-1]
        assert debugger.get_recent_events(limit=1) == recent[-1:]

    def test_writes_session_file(self, tmp_path: Path) -> None:
        debugger = MatchDebugger(str(tmp_path / "logs"), label="cup")
        debugger.log_result("Home 1 - 0 Away", 90, False)
        debugger.log_error("PERSISTENCE", "store offline")
        path = debugger.log_path
        debugger.close()

        assert path is not None and path.parent == tmp_path / "logs"
        assert path.name.startswith("cup_debug_")
        content = path.read_text(encoding="utf-8")
        assert "RESULT: Home 1 - 0 Away | Duration: 90" in content
        assert "ERROR: Type: PERSISTENCE | Details: store offline" in content
        assert debugger.log_path is None

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
"""Tests for player, formation, and team models."""

from dataclasses import FrozenInstanceError

import pytest

from fulltime.models.player import Player, PlayerAttributes, PlayerSeasonStats, normalise_role
from fulltime.models.team import Formation, Team, TeamSeasonRecord


def _attributes(**overrides: int) -> PlayerAttributes:
    values = dict(
        passing=70,
        shooting=75,
        dribbling=85,
        tackling=60,
        heading=65,
        speed=80,
        stamina=80,
        strength=75,
        vision=72,
        positioning=68,
        decisions=70,
    )
    values.update(overrides)
    return PlayerAttributes(**values)


class TestPlayerAttributes:
    """Tests for PlayerAttributes class."""

    def test_create_player_attributes(self) -> None:
        """Test creating player attributes."""
        attrs = _attributes()
        assert attrs.speed == 80
        assert attrs.shooting == 75
        assert attrs.passing == 70
        assert attrs.tackling == 60
        assert attrs.dribbling == 85
        assert attrs.strength == 75
        assert attrs.stamina == 80

    def test_aggression_defaults_to_neutral(self) -> None:
        """Aggression is optional and sits at the neutral baseline."""
        assert _attributes().aggression == 50
        assert _attributes(aggression=90).aggression == 90

    def test_player_attributes_validation_range(self) -> None:
        """Test attributes must be within 1..100."""
        with pytest.raises(ValueError):
            _attributes(passing=0)
        with pytest.raises(ValueError):
            _attributes(aggression=101)


class TestPlayer:
    """Tests for Player class."""

    def test_create_player(self) -> None:
        player = Player(player_id=1, name="Test Player", age=25, role="CF", attributes=_attributes())

        assert player.player_id == 1
        assert player.name == "Test Player"
        assert player.age == 25
        assert player.role == "CF"
        assert player.available is True
        assert player.season == PlayerSeasonStats()

    def test_role_aliases_are_normalised(self) -> None:
        """Common position labels map onto engine role codes."""
        assert Player(1, "A", 20, "ST", _attributes()).role == "CF"
        assert Player(2, "B", 20, "cb", _attributes()).role == "CD"
        assert normalise_role(" lw ") == "LCF"
        assert normalise_role("XYZ") == "XYZ"

    def test_eligibility(self) -> None:
        """Unavailable players and unknown roles cannot take part."""
        assert Player(1, "A", 20, "GK", _attributes()).is_eligible
        assert not Player(2, "B", 20, "GK", _attributes(), available=False).is_eligible
        assert not Player(3, "C", 20, "SWEEPER", _attributes()).is_eligible

    def test_overall_rating_uses_own_role(self) -> None:
        player = Player(1, "A", 20, "CD", _attributes())
        ratings = player.get_role_rating()

        assert set(ratings) == {"GK", "RD", "CD", "LD", "RM", "CM", "LM", "CF", "RCF", "LCF"}
        assert player.overall_rating == round(ratings["CD"] * 100)
        assert 1 <= player.overall_rating <= 100


class TestPlayerSeasonStats:
    """Tests for the frozen player season totals."""

    def test_plus_returns_new_value(self) -> None:
        stats = PlayerSeasonStats()
        updated = stats.plus(goals=2, minutes_played=90)

        assert updated.goals == 2
        assert updated.minutes_played == 90
        assert stats.goals == 0
        with pytest.raises(FrozenInstanceError):
            stats.goals = 5  # type: ignore[misc]

    def test_per_90(self) -> None:
        stats = PlayerSeasonStats(appearances=3, minutes_played=270, goals=3, assists=1)

        assert stats.per_90("goals") == pytest.approx(1.0)
        assert stats.per_90("assists") == pytest.approx(1 / 3)
        assert PlayerSeasonStats(goals=2).per_90("goals") == 0.0


class TestFormation:
    """Tests for Formation class."""

    def test_create_formation(self) -> None:
        formation = Formation(
            name="4-4-2",
            role_counts={"RD": 1, "CD": 2, "LD": 1, "RM": 1, "CM": 2, "LM": 1, "RCF": 1, "LCF": 1},
        )
        assert formation.name == "4-4-2"
        assert sum(formation.role_counts.values()) == 10

    def test_aliases_are_normalised(self) -> None:
        formation = Formation(name="4-3-3", role_counts={"RB": 1, "CB": 2, "LB": 1, "CM": 3, "RW": 1, "ST": 1, "LW": 1})
        assert formation.role_counts["CD"] == 2
        assert formation.role_counts["CF"] == 1

    def test_invalid_formation_size(self) -> None:
        with pytest.raises(ValueError):
            Formation(name="4-4-1", role_counts={"RD": 1, "CD": 2, "LD": 1, "CM": 4, "CF": 1})


class TestTeam:
    """Tests for Team class."""

    def _create_test_players(self, count: int = 18) -> list:
        roles = ["GK", "RD", "CD", "CD", "LD", "RM", "CM", "CM", "LM", "RCF", "LCF"]
        roles += ["GK", "CD", "RD", "CM", "LM", "CF", "RCF"]
        return [
            Player(player_id=i + 1, name=f"Player {i + 1}", age=25, role=roles[i % len(roles)], attributes=_attributes())
            for i in range(count)
        ]

    def test_create_team(self) -> None:
        team = Team(team_id=1, name="Test FC", players=self._create_test_players())

        assert team.team_id == 1
        assert team.name == "Test FC"
        assert len(team.players) == 18
        assert team.season == TeamSeasonRecord()

    def test_starting_eleven_and_bench(self) -> None:
        team = Team(team_id=1, name="Test FC", players=self._create_test_players())

        assert [p.player_id for p in team.starting_eleven()] == list(range(1, 12))
        assert [p.player_id for p in team.bench()] == list(range(12, 19))

    def test_unavailable_players_are_skipped(self) -> None:
        players = self._create_test_players()
        players[3].available = False
        team = Team(team_id=1, name="Test FC", players=players)

        starters = [p.player_id for p in team.starting_eleven()]
        assert 4 not in starters
        assert starters[-1] == 12
        assert len(team.eligible_players()) == 17

    def test_small_squad_is_allowed(self) -> None:
        team = Team(team_id=1, name="Short FC", players=self._create_test_players(9))

        assert len(team.starting_eleven()) == 9
        assert team.bench() == []

    def test_team_rating(self) -> None:
        team = Team(team_id=1, name="Test FC", players=self._create_test_players())

        assert 1 <= team.get_team_rating() <= 100
        assert Team(team_id=2, name="Empty", players=[]).get_team_rating() == 0.0

    def test_player_lookup(self) -> None:
        team = Team(team_id=1, name="Test FC", players=self._create_test_players())

        assert team.get_player(5).role == "LD"
        assert team.get_player(99) is None
        assert {p.player_id for p in team.get_players_by_role("CB")} == {3, 4, 13}


class TestTeamSeasonRecord:
    """Tests for the frozen league record."""

    def test_win_draw_loss(self) -> None:
        record = TeamSeasonRecord()
        record = record.with_result(2, 1)
        record = record.with_result(0, 0)
        record = record.with_result(1, 3)

        assert (record.played, record.won, record.drawn, record.lost) == (3, 1, 1, 1)
        assert (record.goals_for, record.goals_against) == (3, 4)
        assert record.goal_difference == -1
        assert record.points == 4

    def test_custom_points(self) -> None:
        record = TeamSeasonRecord().with_result(1, 0, points_for_win=2)
        assert record.points == 2

    def test_original_is_unchanged(self) -> None:
        record = TeamSeasonRecord()
        record.with_result(3, 0)
        assert record.played == 0

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
"""Tests for per-minute event generation."""

import random
from collections import Counter
from dataclasses import replace
from typing import List, Optional

import pytest

from fulltime.engine.config import ENGINE_CONFIG, EngineConfig, EventRateConfig, PositionWeightConfig
from fulltime.engine.event_generator import EventGenerator, MatchContext, ScriptedEventGenerator
from fulltime.engine.events import EventKind, MatchEvent, Side


class ConstantRandom(random.Random):
    """Random source whose uniform draw always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def _only(kind: EventKind) -> EngineConfig:
    rates = EventRateConfig(**{k.value: (1.0 if k is kind else 0.0) for k in EventKind})
    return replace(ENGINE_CONFIG, rates=rates)


def _draw(
    generator: EventGenerator, count: int, minute: int = 30, context: Optional[MatchContext] = None
) -> List[MatchEvent]:
    events = [generator.generate(minute, context) for _ in range(count)]
    return [e for e in events if e is not None]


class TestProbabilities:
    """Tests for phase and context adjusted probabilities."""

    def test_base_rates_in_walk_order(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team)
        probs = generator.adjusted_probabilities(30, MatchContext())

        assert list(probs) == list(EventKind)
        assert probs[EventKind.GOAL] == pytest.approx(0.033)
        assert sum(probs.values()) == pytest.approx(0.823)

    def test_opening_phase(self, home_team, away_team) -> None:
        probs = EventGenerator(home_team, away_team).adjusted_probabilities(10, MatchContext())

        assert probs[EventKind.GOAL] == pytest.approx(0.033 * 0.6)
        assert probs[EventKind.YELLOW_CARD] == pytest.approx(0.033 * 0.5)
        assert probs[EventKind.SUBSTITUTION] == 0.0

    def test_half_time_window_and_late_phase(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team)
        window = generator.adjusted_probabilities(50, MatchContext())
        late = generator.adjusted_probabilities(76, MatchContext())

        assert window[EventKind.SUBSTITUTION] == pytest.approx(0.067 * 3.0)
        assert late[EventKind.GOAL] == pytest.approx(0.033 * 1.5)
        assert late[EventKind.INJURY] == pytest.approx(0.017 * 1.5)

    def test_context_modifiers(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team)
        settled = generator.adjusted_probabilities(30, MatchContext(score_difference=-2))
        mismatch = generator.adjusted_probabilities(30, MatchContext(strength_difference=20.0))

        assert settled[EventKind.GOAL] == pytest.approx(0.033 * 0.7)
        assert mismatch[EventKind.GOAL] == pytest.approx(0.033 * 1.4)
        assert mismatch[EventKind.FOUL] == pytest.approx(0.233 * 1.2)

    def test_total_is_normalised(self, home_team, away_team) -> None:
        rates = EventRateConfig(**{k.value: 0.5 for k in EventKind})
        generator = EventGenerator(home_team, away_team, replace(ENGINE_CONFIG, rates=rates))
        probs = generator.adjusted_probabilities(30, MatchContext())

        assert sum(probs.values()) == pytest.approx(1.0)
        assert list(probs) == list(EventKind)
        assert probs[EventKind.GOAL] == pytest.approx(1 / 9)

    def test_rates_must_be_non_negative(self) -> None:
        with pytest.raises(ValueError):
            EventRateConfig(goal=-0.1)
        with pytest.raises(ValueError):
            PositionWeightConfig(goal={})


class TestKindSelection:
    """Tests for the single cumulative draw."""

    def test_walks_in_declaration_order(self, home_team, away_team) -> None:
        low = EventGenerator(home_team, away_team, rng=ConstantRandom(0.0))
        middle = EventGenerator(home_team, away_team, rng=ConstantRandom(0.04))

        assert low.select_kind(30, MatchContext()) is EventKind.GOAL
        assert middle.select_kind(30, MatchContext()) is EventKind.SHOT

    def test_high_roll_produces_nothing(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team, rng=ConstantRandom(0.999))
        assert generator.generate(30) is None

    def test_no_substitution_before_half_time(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team, _only(EventKind.SUBSTITUTION), random.Random(3))
        assert _draw(generator, 50, minute=30) == []
        assert len(_draw(generator, 50, minute=50)) == 50

    def test_seeded_matches_are_reproducible(self, home_team, away_team) -> None:
        def run(seed: int) -> list:
            generator = EventGenerator(home_team, away_team, rng=random.Random(seed))
            return [generator.generate(minute) for minute in range(1, 91)]

        assert run(42) == run(42)
        assert run(42) != run(43)


class TestSideAndPlayerSelection:
    """Tests for the side, player and payload draws."""

    def test_attacking_events_favour_possession(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team, _only(EventKind.GOAL), random.Random(11))
        events = _draw(generator, 2000, context=MatchContext(home_possession=True))

        home_share = sum(e.side is Side.HOME for e in events) / len(events)
        assert 0.57 < home_share < 0.67

    def test_fouls_favour_defending_side(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team, _only(EventKind.FOUL), random.Random(12))
        events = _draw(generator, 2000, context=MatchContext(home_possession=True))

        home_share = sum(e.side is Side.HOME for e in events) / len(events)
        assert 0.33 < home_share < 0.43

    def test_scorers_are_mostly_forwards(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team, _only(EventKind.GOAL), random.Random(5))
        lookup = {p.player_id: p.role for p in home_team.players + away_team.players}
        roles = Counter(lookup[e.player_id] for e in _draw(generator, 1000))

        assert roles["RCF"] + roles["LCF"] > 400
        assert roles["GK"] < 10

    def test_player_comes_from_lineup(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team, rng=random.Random(8))
        starters = {
            Side.HOME: {p.player_id for p in home_team.starting_eleven()},
            Side.AWAY: {p.player_id for p in away_team.starting_eleven()},
        }
        for minute in range(1, 91):
            event = generator.generate(minute)
            if event is not None:
                assert event.player_id in starters[event.side]

    def test_offside_only_for_attackers(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team, _only(EventKind.OFFSIDE), random.Random(2))
        lookup = {p.player_id: p.role for p in home_team.players + away_team.players}

        for event in _draw(generator, 200):
            assert lookup[event.player_id] in ENGINE_CONFIG.selection.attacking_roles

    def test_offside_falls_back_without_attackers(self, make_player, home_team, away_team) -> None:
        defenders = tuple(make_player(200 + i, "CD") for i in range(4))
        context = MatchContext(lineups={Side.HOME: defenders, Side.AWAY: defenders})
        generator = EventGenerator(home_team, away_team, _only(EventKind.OFFSIDE), random.Random(4))

        events = _draw(generator, 50, context=context)
        assert len(events) == 50
        assert {e.player_id for e in events} <= {p.player_id for p in defenders}

    def test_aggression_drives_fouls(self, make_player, home_team, away_team) -> None:
        hothead = make_player(300, "CD", aggression=100)
        calm = make_player(301, "CD", aggression=1)
        context = MatchContext(lineups={Side.HOME: (hothead, calm), Side.AWAY: (hothead, calm)})
        generator = EventGenerator(home_team, away_team, _only(EventKind.FOUL), random.Random(6))

        counts = Counter(e.player_id for e in _draw(generator, 1000, context=context))
        assert counts[300] > 900

    def test_empty_lineup_yields_nothing(self, home_team, away_team) -> None:
        context = MatchContext(lineups={Side.HOME: (), Side.AWAY: ()})
        generator = EventGenerator(home_team, away_team, _only(EventKind.SHOT), random.Random(1))
        assert _draw(generator, 20, context=context) == []

    def test_substitute_comes_from_bench(self, home_team, away_team) -> None:
        generator = EventGenerator(home_team, away_team, _only(EventKind.SUBSTITUTION), random.Random(10))
        teams = {Side.HOME: home_team, Side.AWAY: away_team}

        for event in _draw(generator, 100, minute=55):
            team = teams[event.side]
            bench = {p.player_id: p.role for p in team.bench()}
            off = team.get_player(event.player_id)
            assert off in team.starting_eleven()
            assert event.payload.player_on_id in bench
            if off.role in bench.values():
                assert bench[event.payload.player_on_id] == off.role

    def test_empty_bench_blocks_substitution(self, make_team) -> None:
        home = make_team(1, "Home", first_id=1, bench=0)
        away = make_team(2, "Away", first_id=101, bench=0)
        generator = EventGenerator(home, away, _only(EventKind.SUBSTITUTION), random.Random(10))
        assert _draw(generator, 30, minute=55) == []

    def test_payload_details(self, home_team, away_team) -> None:
        goals = _draw(EventGenerator(home_team, away_team, _only(EventKind.GOAL), random.Random(21)), 200)
        assert any(e.payload.assist_id is not None for e in goals)
        assert all(e.payload.assist_id != e.player_id for e in goals)

        fouls = _draw(EventGenerator(home_team, away_team, _only(EventKind.FOUL), random.Random(22)), 50)
        for event in fouls:
            opponents = home_team if event.side is Side.AWAY else away_team
            assert event.payload.fouled_player_id in {p.player_id for p in opponents.starting_eleven()}

        cards = _draw(EventGenerator(home_team, away_team, _only(EventKind.YELLOW_CARD), random.Random(23)), 50)
        assert {e.payload.reason for e in cards} <= set(ENGINE_CONFIG.selection.card_reasons)


class TestScriptedEventGenerator:
    """Tests for the replay generator."""

    def test_replays_first_event_per_minute(self, make_event) -> None:
        first = make_event(EventKind.GOAL, 10)
        duplicate = make_event(EventKind.CORNER, 10)
        later = make_event(EventKind.SHOT, 20, Side.AWAY, player_id=105)
        generator = ScriptedEventGenerator([first, duplicate, later])

        assert generator.generate(10, MatchContext()) is first
        assert generator.generate(20) is later
        assert generator.generate(11) is None

    def test_rejects_first_half_substitutions(self, make_substitution) -> None:
        with pytest.raises(ValueError, match="minute 30"):
            ScriptedEventGenerator([make_substitution(30, Side.HOME, 10, 15)])

        generator = ScriptedEventGenerator([make_substitution(45, Side.HOME, 10, 15)])
        assert generator.generate(45).kind is EventKind.SUBSTITUTION

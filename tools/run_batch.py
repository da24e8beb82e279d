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
"""Play many headless matches and report per-90 event frequencies."""
import argparse
import random
from collections import Counter
from dataclasses import replace

from fulltime.engine.config import ENGINE_CONFIG
from fulltime.engine.events import EventKind
from fulltime.engine.match_controller import MatchMode, create
from fulltime.models.league import SeasonLedger
from fulltime.utils.generator import generate_team


def run_batch(matches: int = 200, seed: int = 1) -> Counter:
    """Simulate ``matches`` full games and count events by kind.

    Parameters
    ----------
    matches : int
        Number of matches to play.
    seed : int
        Seed for squads and match randomness.

    Returns
    -------
    Counter
        Total events per ``EventKind`` across all matches.
    """
    rng = random.Random(seed)
    config = replace(
        ENGINE_CONFIG,
        simulation=replace(ENGINE_CONFIG.simulation, batch_delay=0.0, check_invariants=True),
        logging=replace(ENGINE_CONFIG.logging, log_minutes=False),
    )
    home = generate_team(1, "Home XI", "4-4-2", starting_player_id=1, rng=rng)
    away = generate_team(2, "Away XI", "4-3-3", starting_player_id=100, rng=rng)
    ledger = SeasonLedger([home, away], config)

    totals: Counter = Counter()
    for _ in range(matches):
        controller = create(home, away, config, rng=rng, recorder=ledger)
        controller.start(MatchMode.SIMULATED)
        result = controller.wait(timeout=30.0)
        totals.update(event.kind for event in result.events)

    print(f"{matches} matches played")
    print(f"{'event':<14}{'per 90':>10}{'base rate x 90':>16}")
    for kind in EventKind:
        per_90 = totals[kind] / matches
        expected = getattr(config.rates, kind.value) * 90
        print(f"{kind.value:<14}{per_90:>10.2f}{expected:>16.2f}")

    print("\nStandings:")
    for team in ledger.standings():
        season = team.season
        print(f"{team.name:<10} W{season.won} D{season.drawn} L{season.lost} GD{season.goal_difference:+d} Pts {season.points}")
    return totals


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--matches", type=int, default=200)
    parser.add_argument("--seed", type=int, default=1)
    args = parser.parse_args()
    run_batch(args.matches, args.seed)

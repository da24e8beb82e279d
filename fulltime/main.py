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
"""Entry point for demo match simulations and the optional visualiser."""
import argparse
import random
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from fulltime.engine.config import ENGINE_CONFIG
from fulltime.engine.events import Importance, MatchEvent, Side
from fulltime.engine.match_controller import MatchMode, create
from fulltime.engine.results import MatchResult, substitutions_for
from fulltime.models.league import SeasonLedger
from fulltime.models.team import Team
from fulltime.utils.debug import MatchDebugger
from fulltime.utils.generator import generate_team
from fulltime.utils.roster import load_teams_from_json


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser.

    Returns
    -------
    argparse.ArgumentParser
        Parser for the demo options.
    """
    parser = argparse.ArgumentParser(description="Play a simulated football match.")
    parser.add_argument("--teams", type=Path, help="JSON file with 'home' and 'away' squads")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible match")
    parser.add_argument("--visual", action="store_true", help="Watch the match in a pygame window")
    parser.add_argument("--speed", type=float, default=10.0, help="Playback speed multiplier (0.1-10)")
    parser.add_argument("--log-dir", help="Directory for match debug logs")
    parser.add_argument("--all-events", action="store_true", help="Print every event, not only important ones")
    return parser


def load_teams(path: Optional[Path], rng: random.Random) -> Tuple[Team, Team]:
    """Load squads from ``path`` or generate two random ones.

    Parameters
    ----------
    path : Path | None
        Squad file; generated teams are used when ``None`` or unreadable.
    rng : random.Random
        Source for generated squads.

    Returns
    -------
    Tuple[Team, Team]
        ``(home, away)`` teams.
    """
    if path is not None:
        try:
            return load_teams_from_json(str(path))
        except (OSError, KeyError, ValueError) as e:
            print(f"Error loading teams from {path}: {e}")
            print("Falling back to generated teams...")
    home = generate_team(1, "Manchester United", "4-3-3", starting_player_id=1, rng=rng)
    away = generate_team(2, "Liverpool FC", "4-4-2", starting_player_id=100, rng=rng)
    return home, away


def print_event(event: MatchEvent, minute: int, score: Tuple[int, int], show_all: bool) -> None:
    """Print an event as it happens.

    Parameters
    ----------
    event : MatchEvent
        Event to print.
    minute : int
        Minute the event happened in.
    score : Tuple[int, int]
        Home and away score after the event.
    show_all : bool
        Print low-importance events too.
    """
    if show_all or event.importance is not Importance.LOW:
        print(f"{minute:>2}' [{score[0]}-{score[1]}]: {event.description}")


def print_summary(result: MatchResult) -> None:
    """Print the final score and match statistics.

    Parameters
    ----------
    result : MatchResult
        Finished match.
    """
    stats = result.final_stats.snapshot
    suffix = f" (stopped at {result.duration}')" if result.early_terminated else ""
    print(f"\nFinal Score: {result.scoreline}{suffix}")
    print(f"Attendance: {result.attendance:,} | Weather: {result.weather.description}")

    rows: List[Tuple[str, str, str]] = [
        ("Possession", f"{stats.home.possession}%", f"{stats.away.possession}%"),
        ("Shots", str(stats.home.shots), str(stats.away.shots)),
        ("On target", str(stats.home.shots_on_target), str(stats.away.shots_on_target)),
        ("Shot accuracy", f"{stats.home.shot_accuracy:.0f}%", f"{stats.away.shot_accuracy:.0f}%"),
        ("Corners", str(stats.home.corners), str(stats.away.corners)),
        ("Fouls", str(stats.home.fouls), str(stats.away.fouls)),
        ("Yellow cards", str(stats.home.yellow_cards), str(stats.away.yellow_cards)),
        ("Red cards", str(stats.home.red_cards), str(stats.away.red_cards)),
        ("Offsides", str(stats.home.offsides), str(stats.away.offsides)),
    ]
    print("\nMatch Statistics:")
    print(f"{'':<14}{result.home_team_name:>20}{result.away_team_name:>20}")
    for label, home, away in rows:
        print(f"{label:<14}{home:>20}{away:>20}")

    for side, name in ((Side.HOME, result.home_team_name), (Side.AWAY, result.away_team_name)):
        changes = substitutions_for(result, side)
        if changes:
            print(f"\n{name} substitutions:")
            for minute, payload in changes:
                print(f"  {minute}': {payload.player_on_name} on")


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Play a demo match, headless or in the visualiser.

    Parameters
    ----------
    argv : Sequence[str] | None, optional
        Command line arguments; ``sys.argv`` is used when omitted.
    """
    args = build_parser().parse_args(argv)
    rng = random.Random(args.seed)
    home_team, away_team = load_teams(args.teams, rng)

    config = ENGINE_CONFIG
    if args.log_dir:
        config = replace(config, logging=replace(config.logging, output_dir=args.log_dir))
    debugger = MatchDebugger(config.logging.output_dir, config.logging.recent_buffer)
    ledger = SeasonLedger([home_team, away_team], config)
    controller = create(home_team, away_team, config, rng=rng, recorder=ledger, debugger=debugger)

    print(f"{home_team.name} vs {away_team.name}")
    try:
        if args.visual:
            from fulltime.visualizer.visualizer import run_visualizer

            result = run_visualizer(controller, speed=args.speed)
            if result is None:
                print("pygame is not installed; playing headless instead.")
        else:
            result = None
        if result is None:
            controller.start(
                MatchMode.SIMULATED,
                args.speed,
                on_event=lambda event, minute, score: print_event(event, minute, score, args.all_events),
            )
            try:
                result = controller.wait()
            except KeyboardInterrupt:
                print("\nMatch simulation interrupted.")
                result = controller.stop()
    finally:
        debugger.close()

    print_summary(result)


if __name__ == "__main__":
    main()

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
"""Central configuration for engine tuning parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

from fulltime.engine.events import EventKind


@dataclass(slots=True)
class SimulationConfig:
    """Timing, speed and safety controls for the match clocks.

    Parameters
    ----------
    match_minutes : int, default=90
        Length of a full match in simulated minutes.
    min_eligible_players : int, default=11
        Eligible players each side needs before a match may start.
    batch_minutes : int, default=5
        Minutes advanced per batch by the headless clock.
    batch_delay : float, default=0.1
        Seconds the headless clock sleeps between batches at 1x speed.
    max_frame_dt : float, default=0.1
        Upper clamp on the wall-time a single visual frame may account for.
    visual_minutes_per_second : float, default=1.0
        Match minutes that elapse per wall-clock second at 1x speed in visual mode.
    default_speed : float, default=1.0
        Default playback speed multiplier.
    min_speed : float, default=0.1
        Lowest speed multiplier accepted by ``set_speed``.
    max_speed : float, default=10.0
        Highest speed multiplier accepted by ``set_speed``.
    join_timeout : float, default=2.0
        Seconds to wait for the headless clock thread when a match is stopped.
    check_invariants : bool, default=__debug__
        Verify score, statistics and clock consistency after every tick.
    """

    match_minutes: int = 90
    min_eligible_players: int = 11
    batch_minutes: int = 5
    batch_delay: float = 0.1
    max_frame_dt: float = 0.1
    visual_minutes_per_second: float = 1.0
    default_speed: float = 1.0
    min_speed: float = 0.1
    max_speed: float = 10.0
    join_timeout: float = 2.0
    check_invariants: bool = __debug__


@dataclass(slots=True)
class EventRateConfig:
    """Base per-minute probability for every event kind.

    Calibrated against typical per-90 frequencies (three goals, 24 shots, 21
    fouls and ten corners a match). Field names match ``EventKind`` values.

    Parameters
    ----------
    goal : float, default=0.033
        Goal probability per minute.
    shot : float, default=0.267
        Shot (not scored) probability per minute.
    foul : float, default=0.233
        Foul probability per minute.
    yellow_card : float, default=0.033
        Yellow card probability per minute.
    red_card : float, default=0.006
        Red card probability per minute.
    corner : float, default=0.111
        Corner probability per minute.
    offside : float, default=0.056
        Offside probability per minute.
    substitution : float, default=0.067
        Substitution probability per minute.
    injury : float, default=0.017
        Injury probability per minute.
    """

    goal: float = 0.033
    shot: float = 0.267
    foul: float = 0.233
    yellow_card: float = 0.033
    red_card: float = 0.006
    corner: float = 0.111
    offside: float = 0.056
    substitution: float = 0.067
    injury: float = 0.017

    def __post_init__(self) -> None:
        """Reject negative probabilities."""
        for kind in EventKind:
            if getattr(self, kind.value) < 0:
                raise ValueError(f"{kind.value} probability must be non-negative")

    def as_table(self) -> Dict[EventKind, float]:
        """Return the rates keyed by event kind in generator walk order.

        Returns
        -------
        Dict[EventKind, float]
            One entry per ``EventKind``, ordered as the enum is declared.
        """
        return {kind: getattr(self, kind.value) for kind in EventKind}


@dataclass(slots=True)
class PhaseModifierConfig:
    """Multipliers applied by match phase.

    Parameters
    ----------
    early_phase_end : int, default=15
        Last minute treated as the opening phase.
    early_goal_factor : float, default=0.6
        Goal multiplier in the opening phase.
    early_card_factor : float, default=0.5
        Yellow and red card multiplier in the opening phase.
    early_substitution_factor : float, default=0.0
        Substitution multiplier in the opening phase.
    late_phase_start : int, default=75
        First minute treated as the closing phase.
    late_goal_factor : float, default=1.5
        Goal multiplier in the closing phase.
    late_card_factor : float, default=1.4
        Card multiplier in the closing phase.
    late_substitution_factor : float, default=2.0
        Substitution multiplier in the closing phase.
    late_injury_factor : float, default=1.5
        Injury multiplier in the closing phase.
    substitution_window : Tuple[int, int], default=(45, 60)
        Inclusive minute range around half time when changes are common.
    substitution_window_factor : float, default=3.0
        Substitution multiplier inside ``substitution_window``.
    """

    early_phase_end: int = 15
    early_goal_factor: float = 0.6
    early_card_factor: float = 0.5
    early_substitution_factor: float = 0.0
    late_phase_start: int = 75
    late_goal_factor: float = 1.5
    late_card_factor: float = 1.4
    late_substitution_factor: float = 2.0
    late_injury_factor: float = 1.5
    substitution_window: Tuple[int, int] = (45, 60)
    substitution_window_factor: float = 3.0


@dataclass(slots=True)
class ContextModifierConfig:
    """Multipliers driven by the scoreline and the gap in team strength.

    Parameters
    ----------
    comfortable_margin : int, default=2
        Goal difference at which the game is considered settled.
    comfortable_goal_factor : float, default=0.7
        Goal multiplier once the margin is reached.
    comfortable_substitution_factor : float, default=1.5
        Substitution multiplier once the margin is reached.
    close_game_minute : int, default=80
        Minute from which a level game pushes for a winner.
    close_goal_factor : float, default=1.3
        Goal multiplier in a level game late on.
    close_shot_factor : float, default=1.25
        Shot multiplier in a level game late on.
    close_foul_factor : float, default=1.2
        Foul multiplier in a level game late on.
    strength_threshold : float, default=10.0
        Rating gap (in overall rating points) above which strength matters.
    strength_goal_factor : float, default=0.02
        Extra goal probability per rating point of gap.
    strength_foul_factor : float, default=0.01
        Extra foul probability per rating point of gap.
    strength_max_boost : float, default=0.6
        Cap on the proportional boost from strength.
    """

    comfortable_margin: int = 2
    comfortable_goal_factor: float = 0.7
    comfortable_substitution_factor: float = 1.5
    close_game_minute: int = 80
    close_goal_factor: float = 1.3
    close_shot_factor: float = 1.25
    close_foul_factor: float = 1.2
    strength_threshold: float = 10.0
    strength_goal_factor: float = 0.02
    strength_foul_factor: float = 0.01
    strength_max_boost: float = 0.6


def _weights(gk: float, fb: float, cd: float, cm: float, wm: float, wf: float, cf: float) -> Dict[str, float]:
    """Expand per-line weights into a per-role table.

    Parameters
    ----------
    gk : float
        Goalkeeper weight.
    fb : float
        Full-back weight (``RD`` and ``LD``).
    cd : float
        Centre-back weight.
    cm : float
        Central midfielder weight.
    wm : float
        Wide midfielder weight (``RM`` and ``LM``).
    wf : float
        Wide forward weight (``RCF`` and ``LCF``).
    cf : float
        Centre forward weight.

    Returns
    -------
    Dict[str, float]
        Weight for every role code.
    """
    return {
        "GK": gk,
        "RD": fb,
        "LD": fb,
        "CD": cd,
        "CM": cm,
        "RM": wm,
        "LM": wm,
        "RCF": wf,
        "LCF": wf,
        "CF": cf,
    }


@dataclass(slots=True)
class PositionWeightConfig:
    """Relative likelihood of each role being involved in an event kind.

    Field names match ``EventKind`` values; ``assist`` weights pick the
    provider of a goal. Weights are per player, so a centre forward is 450
    times likelier than a goalkeeper to score.

    Parameters
    ----------
    goal : Dict[str, float]
        Goal scorer weights.
    shot : Dict[str, float]
        Shooter weights.
    foul : Dict[str, float]
        Weights for the player committing a foul.
    yellow_card : Dict[str, float]
        Weights for the booked player.
    red_card : Dict[str, float]
        Weights for the dismissed player.
    corner : Dict[str, float]
        Corner taker weights.
    offside : Dict[str, float]
        Weights for the flagged attacker.
    substitution : Dict[str, float]
        Weights for the player being replaced.
    injury : Dict[str, float]
        Weights for the injured player.
    assist : Dict[str, float]
        Weights for the assisting teammate.
    """

    goal: Dict[str, float] = field(default_factory=lambda: _weights(0.1, 3.0, 3.0, 8.0, 8.0, 22.0, 45.0))
    shot: Dict[str, float] = field(default_factory=lambda: _weights(0.1, 4.0, 4.0, 12.0, 12.0, 25.0, 35.0))
    foul: Dict[str, float] = field(default_factory=lambda: _weights(1.0, 20.0, 25.0, 22.0, 12.0, 8.0, 8.0))
    yellow_card: Dict[str, float] = field(default_factory=lambda: _weights(1.0, 20.0, 25.0, 22.0, 12.0, 8.0, 8.0))
    red_card: Dict[str, float] = field(default_factory=lambda: _weights(2.0, 20.0, 30.0, 20.0, 10.0, 8.0, 8.0))
    corner: Dict[str, float] = field(default_factory=lambda: _weights(0.0, 10.0, 1.0, 25.0, 35.0, 15.0, 2.0))
    offside: Dict[str, float] = field(default_factory=lambda: _weights(0.0, 0.0, 0.0, 5.0, 15.0, 35.0, 45.0))
    substitution: Dict[str, float] = field(
        default_factory=lambda: _weights(1.0, 10.0, 8.0, 18.0, 20.0, 22.0, 22.0)
    )
    injury: Dict[str, float] = field(default_factory=lambda: _weights(5.0, 10.0, 10.0, 10.0, 10.0, 10.0, 10.0))
    assist: Dict[str, float] = field(default_factory=lambda: _weights(0.5, 10.0, 3.0, 25.0, 25.0, 20.0, 15.0))

    def __post_init__(self) -> None:
        """Ensure every event kind has a weight table."""
        for kind in EventKind:
            if not getattr(self, kind.value):
                raise ValueError(f"Missing position weights for {kind.value}")

    def table(self, kind: EventKind) -> Dict[str, float]:
        """Return the role weights for an event kind.

        Parameters
        ----------
        kind : EventKind
            Event whose participant is being selected.

        Returns
        -------
        Dict[str, float]
            Mapping from role code to relative weight.
        """
        return getattr(self, kind.value)


@dataclass(slots=True)
class SelectionConfig:
    """Knobs for side, player and payload draws.

    Parameters
    ----------
    attacking_bias : float, default=0.62
        Chance an attacking event goes to the side in possession.
    strength_side_factor : float, default=0.005
        Shift in that chance per rating point of strength gap.
    side_probability_bounds : Tuple[float, float], default=(0.15, 0.85)
        Clamp applied to the home side's chance after all shifts.
    possession_strength_factor : float, default=0.01
        Shift in home possession chance per rating point of strength gap.
    possession_bounds : Tuple[float, float], default=(0.3, 0.7)
        Clamp applied to the home possession chance.
    shot_on_target_probability : float, default=0.4
        Chance that a shot is on target.
    serious_injury_probability : float, default=0.3
        Chance that an injury is serious.
    assist_probability : float, default=0.7
        Chance that a goal has an assist.
    aggression_baseline : float, default=50.0
        Aggression rating that leaves foul and card weights unchanged.
    attacking_roles : FrozenSet[str]
        Roles allowed to be flagged offside.
    card_reasons : Tuple[str, ...]
        Offences drawn for card events.
    """

    attacking_bias: float = 0.62
    strength_side_factor: float = 0.005
    side_probability_bounds: Tuple[float, float] = (0.15, 0.85)
    possession_strength_factor: float = 0.01
    possession_bounds: Tuple[float, float] = (0.3, 0.7)
    shot_on_target_probability: float = 0.4
    serious_injury_probability: float = 0.3
    assist_probability: float = 0.7
    aggression_baseline: float = 50.0
    attacking_roles: FrozenSet[str] = frozenset({"CF", "RCF", "LCF", "RM", "LM"})
    card_reasons: Tuple[str, ...] = (
        "reckless challenge",
        "tactical foul",
        "dissent",
        "time wasting",
        "shirt pulling",
    )


@dataclass(slots=True)
class ResultConfig:
    """Parameters used when synthesising and recording results.

    Parameters
    ----------
    points_for_win : int, default=3
        League points awarded for a win.
    points_for_draw : int, default=1
        League points awarded for a draw.
    attendance_range : Tuple[int, int], default=(10000, 40000)
        Inclusive bounds for the generated attendance.
    temperature_range : Tuple[int, int], default=(5, 30)
        Inclusive bounds for the generated temperature in Celsius.
    weather_conditions : Tuple[str, ...]
        Conditions drawn for the match report.
    """

    points_for_win: int = 3
    points_for_draw: int = 1
    attendance_range: Tuple[int, int] = (10000, 40000)
    temperature_range: Tuple[int, int] = (5, 30)
    weather_conditions: Tuple[str, ...] = ("Clear", "Partly Cloudy", "Overcast", "Light Rain", "Sunny")


@dataclass(slots=True)
class LoggingConfig:
    """Where match telemetry is written.

    Parameters
    ----------
    output_dir : str | None, default=None
        Directory for session log files; ``None`` keeps telemetry in memory only.
    recent_buffer : int, default=200
        Number of recent log lines kept for live displays.
    log_minutes : bool, default=True
        Emit one line per simulated minute with score and possession.
    """

    output_dir: Optional[str] = None
    recent_buffer: int = 200
    log_minutes: bool = True


@dataclass(slots=True)
class EngineConfig:
    """Top-level container for all engine tuning structures.

    Parameters
    ----------
    simulation : SimulationConfig, default=SimulationConfig()
        Clock and safety settings.
    rates : EventRateConfig, default=EventRateConfig()
        Base per-minute event probabilities.
    phase : PhaseModifierConfig, default=PhaseModifierConfig()
        Time-phase multipliers.
    context : ContextModifierConfig, default=ContextModifierConfig()
        Scoreline and strength multipliers.
    positions : PositionWeightConfig, default=PositionWeightConfig()
        Player selection weights per event kind.
    selection : SelectionConfig, default=SelectionConfig()
        Side, possession and payload draw settings.
    results : ResultConfig, default=ResultConfig()
        Result synthesis settings.
    logging : LoggingConfig, default=LoggingConfig()
        Telemetry settings.
    """

    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    rates: EventRateConfig = field(default_factory=EventRateConfig)
    phase: PhaseModifierConfig = field(default_factory=PhaseModifierConfig)
    context: ContextModifierConfig = field(default_factory=ContextModifierConfig)
    positions: PositionWeightConfig = field(default_factory=PositionWeightConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    results: ResultConfig = field(default_factory=ResultConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


ENGINE_CONFIG = EngineConfig()
"""Singleton-style access to the engine configuration."""

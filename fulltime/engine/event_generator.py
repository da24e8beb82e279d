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
"""Minute-by-minute probabilistic event generation.

Each call to :meth:`EventGenerator.generate` performs a single multi-outcome
trial: one uniform draw is compared against the cumulative, phase- and
context-adjusted probabilities walked in ``EventKind`` declaration order. Side,
player and payload details are separate draws made afterwards, always in the
same order, so a seeded ``random.Random`` reproduces a match exactly.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

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
from fulltime.models.player import Player
from fulltime.models.team import Team

ATTACKING_KINDS = frozenset({EventKind.GOAL, EventKind.SHOT, EventKind.CORNER, EventKind.OFFSIDE})
DISCIPLINARY_KINDS = frozenset({EventKind.FOUL, EventKind.YELLOW_CARD, EventKind.RED_CARD})
CARD_KINDS = frozenset({EventKind.YELLOW_CARD, EventKind.RED_CARD})
EARLIEST_SUBSTITUTION_MINUTE = 45


@dataclass(frozen=True)
class MatchContext:
    """Match situation the generator conditions on.

    Parameters
    ----------
    score_difference : int, default=0
        Home goals minus away goals.
    strength_difference : float, default=0.0
        Home team rating minus away team rating.
    home_possession : bool, default=True
        Whether the home side has the ball this minute.
    lineups : Mapping[Side, Sequence[Player]] | None, optional
        Players currently on the pitch; defaults to each team's starting eleven.
    benches : Mapping[Side, Sequence[Player]] | None, optional
        Unused substitutes; defaults to each team's bench.
    """

    score_difference: int = 0
    strength_difference: float = 0.0
    home_possession: bool = True
    lineups: Optional[Mapping[Side, Sequence[Player]]] = None
    benches: Optional[Mapping[Side, Sequence[Player]]] = None


class EventSource(Protocol):
    """Anything that can supply the event for a match minute."""

    def generate(self, minute: int, context: MatchContext) -> Optional[MatchEvent]:
        """Return the event for ``minute`` or ``None``.

        Parameters
        ----------
        minute : int
            Minute being simulated.
        context : MatchContext
            Current match situation.

        Returns
        -------
        MatchEvent | None
            Event that happened this minute, if any.
        """
        ...


class EventGenerator:
    """Draws at most one event per simulated minute.

    Parameters
    ----------
    home_team : Team
        Home side; supplies default lineups and names for descriptions.
    away_team : Team
        Away side.
    config : EngineConfig, optional
        Tuning tables; defaults to ``ENGINE_CONFIG``.
    rng : random.Random | None, optional
        Source of randomness. Inject a seeded instance for reproducible matches.
    """

    def __init__(
        self,
        home_team: Team,
        away_team: Team,
        config: EngineConfig = ENGINE_CONFIG,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.teams = {Side.HOME: home_team, Side.AWAY: away_team}
        self.config = config
        self.rng = rng or random.Random()

    def adjusted_probabilities(self, minute: int, context: MatchContext) -> Dict[EventKind, float]:
        """Apply phase and context multipliers to the base rates.

        Parameters
        ----------
        minute : int
            Minute being simulated.
        context : MatchContext
            Current match situation.

        Returns
        -------
        Dict[EventKind, float]
            Per-kind probabilities in walk order, scaled down to sum to at most 1.
        """
        probs = self.config.rates.as_table()
        phase = self.config.phase
        ctx = self.config.context

        if minute <= phase.early_phase_end:
            probs[EventKind.GOAL] *= phase.early_goal_factor
            probs[EventKind.YELLOW_CARD] *= phase.early_card_factor
            probs[EventKind.RED_CARD] *= phase.early_card_factor
            probs[EventKind.SUBSTITUTION] *= phase.early_substitution_factor
        if minute >= phase.late_phase_start:
            probs[EventKind.GOAL] *= phase.late_goal_factor
            probs[EventKind.YELLOW_CARD] *= phase.late_card_factor
            probs[EventKind.RED_CARD] *= phase.late_card_factor
            probs[EventKind.SUBSTITUTION] *= phase.late_substitution_factor
            probs[EventKind.INJURY] *= phase.late_injury_factor
        window_start, window_end = phase.substitution_window
        if window_start <= minute <= window_end:
            probs[EventKind.SUBSTITUTION] *= phase.substitution_window_factor

        if abs(context.score_difference) >= ctx.comfortable_margin:
            probs[EventKind.GOAL] *= ctx.comfortable_goal_factor
            probs[EventKind.SUBSTITUTION] *= ctx.comfortable_substitution_factor
        if minute >= ctx.close_game_minute and context.score_difference == 0:
            probs[EventKind.GOAL] *= ctx.close_goal_factor
            probs[EventKind.SHOT] *= ctx.close_shot_factor
            probs[EventKind.FOUL] *= ctx.close_foul_factor

        gap = abs(context.strength_difference)
        if gap >= ctx.strength_threshold:
            probs[EventKind.GOAL] *= 1 + min(gap * ctx.strength_goal_factor, ctx.strength_max_boost)
            probs[EventKind.FOUL] *= 1 + min(gap * ctx.strength_foul_factor, ctx.strength_max_boost)

        total = sum(probs.values())
        if total > 1.0:
            probs = {kind: p / total for kind, p in probs.items()}
        return probs

    def select_kind(self, minute: int, context: MatchContext) -> Optional[EventKind]:
        """Run the single cumulative draw that decides what, if anything, happens.

        Parameters
        ----------
        minute : int
            Minute being simulated.
        context : MatchContext
            Current match situation.

        Returns
        -------
        EventKind | None
            The first kind whose cumulative probability exceeds the draw.
        """
        roll = self.rng.random()
        cumulative = 0.0
        for kind, probability in self.adjusted_probabilities(minute, context).items():
            cumulative += probability
            if roll < cumulative:
                return kind
        return None

    def generate(self, minute: int, context: Optional[MatchContext] = None) -> Optional[MatchEvent]:
        """Produce the event for a minute, or ``None`` when nothing notable happens.

        Parameters
        ----------
        minute : int
            Minute being simulated.
        context : MatchContext | None, optional
            Current match situation; a neutral context is used when omitted.

        Returns
        -------
        MatchEvent | None
            The generated event.
        """
        context = context or MatchContext()
        kind = self.select_kind(minute, context)
        if kind is None:
            return None
        # Early substitutions are suppressed rather than re-drawn.
        if kind is EventKind.SUBSTITUTION and minute < EARLIEST_SUBSTITUTION_MINUTE:
            return None

        side = self._select_side(kind, context)
        lineup = self._lineup(side, context)
        bench = self._bench(side, context)
        if not lineup or (kind is EventKind.SUBSTITUTION and not bench):
            return None

        player = self._select_player(kind, lineup)
        payload = self._build_payload(kind, player, lineup, bench, self._lineup(side.opponent, context))
        team = self.teams[side]
        return MatchEvent(
            kind=kind,
            minute=minute,
            side=side,
            player_id=player.player_id,
            player_name=player.name,
            payload=payload,
            importance=importance_for(kind, payload),
            description=describe_event(kind, player.name, team.name, payload),
        )

    def _select_side(self, kind: EventKind, context: MatchContext) -> Side:
        """Draw which team the event belongs to.

        Parameters
        ----------
        kind : EventKind
            Event that fired.
        context : MatchContext
            Current match situation.

        Returns
        -------
        Side
            Side credited with the event.
        """
        sel = self.config.selection
        attack_home = sel.attacking_bias if context.home_possession else 1.0 - sel.attacking_bias
        shift = context.strength_difference * sel.strength_side_factor

        if kind in ATTACKING_KINDS:
            p_home = attack_home + shift
        elif kind in DISCIPLINARY_KINDS:
            p_home = (1.0 - attack_home) - shift
        else:
            p_home = 0.5

        low, high = sel.side_probability_bounds
        p_home = max(low, min(high, p_home))
        return Side.HOME if self.rng.random() < p_home else Side.AWAY

    def _select_player(self, kind: EventKind, lineup: Sequence[Player]) -> Player:
        """Draw the player involved using the role weights for ``kind``.

        Parameters
        ----------
        kind : EventKind
            Event that fired.
        lineup : Sequence[Player]
            Players on the pitch for the chosen side.

        Returns
        -------
        Player
            Player credited with the event.
        """
        sel = self.config.selection
        candidates: Sequence[Player] = lineup
        if kind is EventKind.OFFSIDE:
            attackers = [p for p in lineup if p.role in sel.attacking_roles]
            if not attackers:
                return self._uniform(lineup)
            candidates = attackers

        table = self.config.positions.table(kind)
        weights: List[float] = []
        for player in candidates:
            weight = table.get(player.role, 0.0)
            if kind in DISCIPLINARY_KINDS:
                weight *= player.attributes.aggression / sel.aggression_baseline
            weights.append(weight)
        return self._weighted(candidates, weights)

    def _build_payload(
        self,
        kind: EventKind,
        player: Player,
        lineup: Sequence[Player],
        bench: Sequence[Player],
        opponents: Sequence[Player],
    ) -> EventPayload:
        """Draw the kind-specific details of an event.

        Parameters
        ----------
        kind : EventKind
            Event that fired.
        player : Player
            Player credited with the event.
        lineup : Sequence[Player]
            That player's teammates on the pitch, including the player.
        bench : Sequence[Player]
            That side's unused substitutes.
        opponents : Sequence[Player]
            Opposing players on the pitch.

        Returns
        -------
        EventPayload
            Payload of the type registered for ``kind``.
        """
        sel = self.config.selection

        if kind is EventKind.GOAL:
            teammates = [p for p in lineup if p.player_id != player.player_id]
            if teammates and self.rng.random() < sel.assist_probability:
                table = self.config.positions.assist
                provider = self._weighted(teammates, [table.get(p.role, 0.0) for p in teammates])
                return GoalPayload(assist_id=provider.player_id, assist_name=provider.name)
            return GoalPayload()
        if kind is EventKind.SHOT:
            return ShotPayload(on_target=self.rng.random() < sel.shot_on_target_probability)
        if kind is EventKind.FOUL:
            victim = self._uniform(opponents) if opponents else None
            return FoulPayload(fouled_player_id=victim.player_id if victim else None)
        if kind in CARD_KINDS:
            return CardPayload(reason=self.rng.choices(sel.card_reasons)[0])
        if kind is EventKind.CORNER:
            return CornerPayload(flank="left" if self.rng.random() < 0.5 else "right")
        if kind is EventKind.OFFSIDE:
            return OffsidePayload()
        if kind is EventKind.SUBSTITUTION:
            like_for_like = [p for p in bench if p.role == player.role]
            replacement = self._uniform(like_for_like or bench)
            return SubstitutionPayload(player_on_id=replacement.player_id, player_on_name=replacement.name)
        if kind is EventKind.INJURY:
            serious = self.rng.random() < sel.serious_injury_probability
            return InjuryPayload(severity="serious" if serious else "minor")
        raise ValueError(f"Unknown event kind: {kind!r}")

    def _weighted(self, players: Sequence[Player], weights: Sequence[float]) -> Player:
        """Pick one player proportionally to ``weights``.

        Parameters
        ----------
        players : Sequence[Player]
            Candidates.
        weights : Sequence[float]
            Relative weight per candidate; all zero falls back to a uniform pick.

        Returns
        -------
        Player
            The chosen player.
        """
        if sum(weights) <= 0:
            return self._uniform(players)
        return self.rng.choices(players, weights=weights)[0]

    def _uniform(self, players: Sequence[Player]) -> Player:
        """Pick one player with equal probability.

        Parameters
        ----------
        players : Sequence[Player]
            Non-empty candidates.

        Returns
        -------
        Player
            The chosen player.
        """
        return self.rng.choices(players)[0]

    def _lineup(self, side: Side, context: MatchContext) -> Sequence[Player]:
        """Return the players on the pitch for ``side``.

        Parameters
        ----------
        side : Side
            Side to look up.
        context : MatchContext
            Supplies live lineups when the controller tracks them.

        Returns
        -------
        Sequence[Player]
            Current lineup.
        """
        if context.lineups is not None:
            return context.lineups[side]
        return self.teams[side].starting_eleven()

    def _bench(self, side: Side, context: MatchContext) -> Sequence[Player]:
        """Return the unused substitutes for ``side``.

        Parameters
        ----------
        side : Side
            Side to look up.
        context : MatchContext
            Supplies live benches when the controller tracks them.

        Returns
        -------
        Sequence[Player]
            Current bench.
        """
        if context.benches is not None:
            return context.benches[side]
        return self.teams[side].bench()


class ScriptedEventGenerator:
    """Replays a fixed list of events, one per minute at most.

    Useful for replaying a recorded match or driving deterministic tests.

    Parameters
    ----------
    events : Iterable[MatchEvent]
        Events to replay; later entries for an already scripted minute are ignored.

    Raises
    ------
    ValueError
        If a substitution is scripted before the second half.
    """

    def __init__(self, events: Iterable[MatchEvent]) -> None:
        self.script: Dict[int, MatchEvent] = {}
        for event in events:
            if event.kind is EventKind.SUBSTITUTION and event.minute < EARLIEST_SUBSTITUTION_MINUTE:
                raise ValueError(
                    f"Substitution scripted at minute {event.minute}, before minute {EARLIEST_SUBSTITUTION_MINUTE}"
                )
            self.script.setdefault(event.minute, event)

    def generate(self, minute: int, context: Optional[MatchContext] = None) -> Optional[MatchEvent]:
        """Return the scripted event for ``minute``.

        Parameters
        ----------
        minute : int
            Minute being simulated.
        context : MatchContext | None, optional
            Ignored; accepted for interface compatibility.

        Returns
        -------
        MatchEvent | None
            The scripted event, if one exists for this minute.
        """
        return self.script.get(minute)

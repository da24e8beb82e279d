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
"""Display-free tests for the pygame render surface."""

import pytest

from fulltime.engine.match_controller import MatchStatus, create
from fulltime.visualizer import visualizer
from fulltime.visualizer.visualizer import PygameMatchSurface


class TestPygameMatchSurface:
    """Tests for the animation state of the surface."""

    def test_ball_drifts_towards_possession(self, home_team, away_team, config) -> None:
        controller = create(home_team, away_team, config)
        surface = PygameMatchSurface(controller, screen=None, font=None)

        surface.update(0.25)
        assert surface.ball[0] > 0.5

        controller.session.home_possession = False
        for _ in range(10):
            surface.update(0.25)
        assert surface.ball[0] < 0.5

    def test_goal_triggers_flash(self, home_team, away_team, config) -> None:
        controller = create(home_team, away_team, config)
        surface = PygameMatchSurface(controller, screen=None, font=None)
        surface.update(0.1)
        assert surface.flash_timer == 0.0

        controller.session.score[1] += 1
        surface.update(0.1)
        assert surface.flash_timer == pytest.approx(1.4)


class TestRunVisualizer:
    """Tests for the host loop entry point."""

    def test_returns_none_without_pygame(self, home_team, away_team, config, monkeypatch) -> None:
        monkeypatch.setattr(visualizer, "pygame", None)
        controller = create(home_team, away_team, config)

        assert visualizer.run_visualizer(controller) is None
        assert controller.get_state().status is MatchStatus.IDLE

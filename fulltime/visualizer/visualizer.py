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
"""Pygame render surface and host loop for visual matches."""
import math
from typing import Optional, Tuple

try:
    import pygame
except Exception:
    pygame = None

from fulltime.engine.events import EventKind
from fulltime.engine.match_controller import MatchController, MatchMode, MatchStatus
from fulltime.engine.results import MatchResult

# Colors
GREEN = (38, 160, 72)
LINE = (245, 245, 245)
HOME = (200, 30, 30)
AWAY = (30, 90, 200)
BALL = (245, 245, 245)
TEXT = (20, 20, 20)
PANEL = (0, 0, 0, 140)
PANEL_TEXT = (235, 235, 235)
GOAL_FLASH = (250, 250, 100)

SPEED_STEP = 2.0


class PygameMatchSurface:
    """Draws the pitch, ball, scoreboard and event feed for one match.

    The ball does not follow physics; it drifts towards the half of the side
    in possession so the screen reflects the flow of the simulated minutes.

    Parameters
    ----------
    controller : MatchController
        Match being displayed.
    screen : pygame.Surface
        Window surface to draw on.
    font : pygame.font.Font
        Font used for the HUD and event feed.
    feed_length : int, default=6
        Number of recent events listed at the bottom of the screen.
    """

    def __init__(self, controller: MatchController, screen, font, feed_length: int = 6) -> None:
        self.controller = controller
        self.screen = screen
        self.font = font
        self.feed_length = feed_length
        self.ball = (0.5, 0.5)
        self.elapsed = 0.0
        self.flash_timer = 0.0
        self._goals_seen = 0

    def update(self, dt: float) -> None:
        """Advance the ball animation.

        Parameters
        ----------
        dt : float
            Seconds covered by this sub-step.
        """
        self.elapsed += dt
        state = self.controller.get_state()
        target_x = 0.7 if state.home_possession else 0.3
        target_y = 0.5 + 0.3 * math.sin(self.elapsed * 0.9)
        ease = min(1.0, dt * 2.0)
        bx, by = self.ball
        self.ball = (bx + (target_x - bx) * ease, by + (target_y - by) * ease)

        goals = sum(state.score)
        if goals > self._goals_seen:
            self._goals_seen = goals
            self.flash_timer = 1.5
        self.flash_timer = max(0.0, self.flash_timer - dt)

    def draw(self) -> None:
        """Render the current frame to the window surface."""
        state = self.controller.get_state()
        screen = self.screen
        width, height = screen.get_size()
        screen.fill((0, 0, 0))

        margin = 12
        pitch_rect = pygame.Rect(margin, margin, width - 2 * margin, height - 2 * margin)
        pygame.draw.rect(screen, GOAL_FLASH if self.flash_timer > 0 else GREEN, pitch_rect)
        pygame.draw.rect(screen, LINE, pitch_rect, 4)
        pygame.draw.line(screen, LINE, (pitch_rect.centerx, pitch_rect.top), (pitch_rect.centerx, pitch_rect.bottom), 2)
        pygame.draw.circle(screen, LINE, pitch_rect.center, int(pitch_rect.h * 0.13), 2)
        box_w, box_h = int(pitch_rect.w * 0.16), int(pitch_rect.h * 0.44)
        box_y = pitch_rect.centery - box_h // 2
        pygame.draw.rect(screen, LINE, (pitch_rect.left, box_y, box_w, box_h), 2)
        pygame.draw.rect(screen, LINE, (pitch_rect.right - box_w, box_y, box_w, box_h), 2)

        bx = pitch_rect.left + int(self.ball[0] * pitch_rect.w)
        by = pitch_rect.top + int(self.ball[1] * pitch_rect.h)
        owner = HOME if state.home_possession else AWAY
        pygame.draw.circle(screen, owner, (bx, by), 10)
        pygame.draw.circle(screen, BALL, (bx, by), 6)

        # HUD: score, minute and speed
        home, away = self.controller.session.home_team, self.controller.session.away_team
        score_text = f"{home.name} {state.score[0]} - {state.score[1]} {away.name}"
        status = " (paused)" if state.status is MatchStatus.PAUSED else ""
        if state.status is MatchStatus.COMPLETED:
            status = " (full time)"
        time_text = f"Minute: {state.minute:02d}{status}  Speed: {state.speed_multiplier:.1f}x"
        stats = state.stats
        stats_text = (
            f"Possession {stats.possession_home}% - {stats.possession_away}%  "
            f"Shots {stats.home.shots} - {stats.away.shots}  "
            f"Corners {stats.home.corners} - {stats.away.corners}"
        )
        screen.blit(self.font.render(score_text, True, TEXT), (margin + 10, margin + 8))
        screen.blit(self.font.render(time_text, True, TEXT), (margin + 10, margin + 28))
        screen.blit(self.font.render(stats_text, True, TEXT), (margin + 10, margin + 48))

        feed = list(reversed(state.events[-self.feed_length :]))
        if feed:
            line_height = self.font.get_linesize()
            panel_height = line_height * len(feed) + 12
            panel = pygame.Surface((width, panel_height), pygame.SRCALPHA)
            panel.fill(PANEL)
            screen.blit(panel, (0, height - panel_height))
            base_y = height - panel_height + 6
            for idx, event in enumerate(feed):
                colour = GOAL_FLASH if event.kind is EventKind.GOAL else PANEL_TEXT
                text = self.font.render(f"{event.minute:>2}' {event.description}", True, colour)
                screen.blit(text, (12, base_y + idx * line_height))


def run_visualizer(
    controller: MatchController,
    screen_size: Tuple[int, int] = (1050, 680),
    fps: int = 30,
    speed: Optional[float] = None,
) -> Optional[MatchResult]:
    """Open a window and play ``controller``'s match in visual mode.

    SPACE pauses or resumes, UP and DOWN double or halve the speed, and Q or
    closing the window stops the match. After full time the window stays open
    until it is closed.

    If ``pygame`` is not installed the function returns ``None`` immediately.

    Parameters
    ----------
    controller : MatchController
        Idle controller to start.
    screen_size : Tuple[int, int], default=(1050, 680)
        Initial window size in pixels.
    fps : int, default=30
        Frame rate cap.
    speed : float | None, optional
        Initial speed multiplier.

    Returns
    -------
    MatchResult | None
        The match result, or ``None`` when pygame is unavailable.
    """
    if pygame is None:
        return None

    pygame.init()
    screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)
    pygame.display.set_caption("Fulltime")
    clock = pygame.time.Clock()
    font = pygame.font.SysFont(None, 20)

    surface = PygameMatchSurface(controller, screen, font)
    controller.attach_render_surface(surface)
    controller.start(MatchMode.VISUAL, speed_multiplier=speed)

    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_q:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        if controller.session.status is MatchStatus.PAUSED:
                            controller.resume()
                        else:
                            controller.pause()
                    elif event.key == pygame.K_UP:
                        controller.set_speed(controller.session.speed_multiplier * SPEED_STEP)
                    elif event.key == pygame.K_DOWN:
                        controller.set_speed(controller.session.speed_multiplier / SPEED_STEP)
                elif event.type == pygame.VIDEORESIZE:
                    screen_size = (event.w, event.h)
                    surface.screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)

            controller.frame()
            pygame.display.flip()
            clock.tick(fps)
    finally:
        pygame.quit()

    return controller.stop()

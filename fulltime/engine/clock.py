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
"""Per-session clocks that turn wall time into simulated match minutes.

Both clocks drive the match through a single ``advance`` callable that
processes exactly one minute and returns ``False`` once the match has nothing
left to play. :class:`FrameClock` is pumped by the host's render loop;
:class:`BatchClock` owns a worker thread.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Protocol

from fulltime.engine.config import SimulationConfig

_MINUTE_EPSILON = 1e-9


class RenderSurface(Protocol):
    """Drawing collaborator driven by the visual clock."""

    def update(self, dt: float) -> None:
        """Advance animations by ``dt`` seconds.

        Parameters
        ----------
        dt : float
            Clamped wall time of the current sub-step.
        """
        ...

    def draw(self) -> None:
        """Render the current frame."""
        ...


class MatchClock:
    """Shared pause, speed and cancellation state for the clock drivers.

    Parameters
    ----------
    advance : Callable[[], bool]
        Processes one match minute; returns ``False`` when the match is over.
    config : SimulationConfig
        Timing and speed limits.
    """

    def __init__(self, advance: Callable[[], bool], config: SimulationConfig) -> None:
        self.advance = advance
        self.config = config
        self.speed = config.default_speed
        self.started = False
        self.paused = False
        self.cancelled = False
        self.finished = False

    @property
    def active(self) -> bool:
        """Return ``True`` while the clock should keep producing minutes."""
        return self.started and not (self.paused or self.cancelled or self.finished)

    def start(self) -> None:
        """Begin producing minutes."""
        self.started = True

    def pause(self) -> None:
        """Stop producing minutes until :meth:`resume` is called."""
        self.paused = True

    def resume(self) -> None:
        """Continue producing minutes after a pause."""
        self.paused = False

    def cancel(self) -> None:
        """Stop the clock permanently."""
        self.cancelled = True

    def set_speed(self, speed: float) -> float:
        """Clamp and apply a playback speed multiplier.

        Parameters
        ----------
        speed : float
            Requested multiplier.

        Returns
        -------
        float
            The multiplier actually applied.
        """
        self.speed = max(self.config.min_speed, min(self.config.max_speed, speed))
        return self.speed

    def _step(self) -> bool:
        """Advance one minute and note when the match has ended.

        Returns
        -------
        bool
            ``False`` once there is nothing left to play.
        """
        if not self.advance():
            self.finished = True
            return False
        return True


class FrameClock(MatchClock):
    """Frame-driven clock for visual matches.

    Every call to :meth:`frame` measures elapsed wall time, clamps it to
    ``max_frame_dt`` and runs ``speed`` sub-steps. Fractional speeds carry over
    to later frames. Each sub-step moves the match on by
    ``dt * visual_minutes_per_second`` minutes and ticks whenever a whole minute
    is crossed.

    Parameters
    ----------
    advance : Callable[[], bool]
        Processes one match minute; returns ``False`` when the match is over.
    surface : RenderSurface
        Receives ``update`` per sub-step and ``draw`` once per frame.
    config : SimulationConfig
        Timing and speed limits.
    time_source : Callable[[], float], optional
        Monotonic clock used when :meth:`frame` is called without ``now``.
    """

    def __init__(
        self,
        advance: Callable[[], bool],
        surface: RenderSurface,
        config: SimulationConfig,
        time_source: Callable[[], float] = time.perf_counter,
    ) -> None:
        super().__init__(advance, config)
        self.surface = surface
        self.time_source = time_source
        self.last_time: Optional[float] = None
        self.step_budget = 0.0
        self.match_time = 0.0
        self.minutes_ticked = 0

    def frame(self, now: Optional[float] = None) -> int:
        """Run one rendered frame.

        Parameters
        ----------
        now : float | None, optional
            Current wall time in seconds; read from ``time_source`` when omitted.

        Returns
        -------
        int
            Number of match minutes processed during this frame.
        """
        now = self.time_source() if now is None else now
        dt = 0.0 if self.last_time is None else min(max(now - self.last_time, 0.0), self.config.max_frame_dt)
        self.last_time = now

        ticks = 0
        if self.active:
            self.step_budget += self.speed
            steps = int(self.step_budget)
            self.step_budget -= steps
            for _ in range(steps):
                if not self.active:
                    break
                self.surface.update(dt)
                self.match_time += dt * self.config.visual_minutes_per_second
                while self.active and self.match_time + _MINUTE_EPSILON >= self.minutes_ticked + 1:
                    self.minutes_ticked += 1
                    ticks += 1
                    self._step()
        self.surface.draw()
        return ticks


class BatchClock(MatchClock):
    """Timer-driven clock for headless matches.

    A daemon worker advances ``batch_minutes`` minutes, then waits
    ``batch_delay / speed`` seconds on an interruptible event, and repeats
    until the match ends or the clock is cancelled. Pause and cancel are
    observed before every minute.

    Parameters
    ----------
    advance : Callable[[], bool]
        Processes one match minute; returns ``False`` when the match is over.
    config : SimulationConfig
        Timing and speed limits.
    on_error : Callable[[Exception], None] | None, optional
        Called on the worker thread when ``advance`` raises.
    name : str, optional
        Worker thread name.
    """

    def __init__(
        self,
        advance: Callable[[], bool],
        config: SimulationConfig,
        on_error: Optional[Callable[[Exception], None]] = None,
        name: str = "fulltime-clock",
    ) -> None:
        super().__init__(advance, config)
        self.on_error = on_error
        self.name = name
        self.error: Optional[Exception] = None
        self._running = threading.Event()
        self._running.set()
        self._cancel = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Launch the worker thread."""
        super().start()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def pause(self) -> None:
        """Hold the worker before its next minute."""
        super().pause()
        self._running.clear()

    def resume(self) -> None:
        """Release a paused worker."""
        super().resume()
        self._running.set()

    def cancel(self) -> None:
        """Stop the worker and wake it if it is sleeping or paused."""
        super().cancel()
        self._cancel.set()
        self._running.set()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker to exit.

        Parameters
        ----------
        timeout : float | None, optional
            Maximum seconds to wait. Joining from the worker itself is a no-op.
        """
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def _run(self) -> None:
        """Worker loop; stores and reports any exception raised by ``advance``."""
        try:
            while not self._cancel.is_set():
                for _ in range(self.config.batch_minutes):
                    self._running.wait()
                    if self._cancel.is_set():
                        return
                    if not self._step():
                        return
                self._cancel.wait(self.config.batch_delay / self.speed)
        except Exception as exc:
            self.error = exc
            self.finished = True
            if self.on_error is not None:
                self.on_error(exc)

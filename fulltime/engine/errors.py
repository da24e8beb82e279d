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
"""Exception hierarchy raised by the match pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from fulltime.engine.results import MatchResult


class ConfigurationError(ValueError):
    """The session cannot start with the supplied teams or collaborators."""


class MatchStateError(RuntimeError):
    """A lifecycle call was made in a state that cannot honour it."""


class RuntimeEventError(RuntimeError):
    """An event observer raised while handling a dispatched event.

    Parameters
    ----------
    minute : int
        Match minute of the event being dispatched.
    original : Exception
        Exception raised by the observer.
    """

    def __init__(self, minute: int, original: Exception) -> None:
        super().__init__(f"Observer failed at minute {minute}: {original!r}")
        self.minute = minute
        self.original = original


class InvariantViolation(AssertionError):
    """A cross-component consistency check failed; this is always a bug."""


class PersistenceError(RuntimeError):
    """One or more recording calls failed after the result was built.

    Parameters
    ----------
    result : MatchResult
        The result that was built before recording started. Simulation state is
        never rolled back, so callers can still use it.
    errors : Sequence[Exception]
        Every exception raised by the recording collaborator.
    """

    def __init__(self, result: "MatchResult", errors: Sequence[Exception]) -> None:
        summary = "; ".join(repr(err) for err in errors)
        super().__init__(f"Failed to record match {result.match_id}: {summary}")
        self.result = result
        self.errors: List[Exception] = list(errors)

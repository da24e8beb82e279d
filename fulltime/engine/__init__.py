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
from __future__ import annotations

from .errors import (
    ConfigurationError,
    InvariantViolation,
    MatchStateError,
    PersistenceError,
    RuntimeEventError,
)
from .events import EventKind, Importance, MatchEvent, Side
from .match_controller import MatchController, MatchMode, MatchSnapshot, MatchStatus, create
from .results import MatchResult, ResultRecorder, ResultSynthesizer

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "EventKind",
    "Importance",
    "InvariantViolation",
    "MatchController",
    "MatchEvent",
    "MatchMode",
    "MatchResult",
    "MatchSnapshot",
    "MatchStateError",
    "MatchStatus",
    "PersistenceError",
    "ResultRecorder",
    "ResultSynthesizer",
    "RuntimeEventError",
    "Side",
    "create",
]

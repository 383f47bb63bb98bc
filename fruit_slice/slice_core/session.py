"""
Session State
=============

Score, lives and the Playing / Paused / GameOver state machine.

- Playing <-> Paused toggles on host request.
- Playing -> GameOver when lives reach 0. GameOver is terminal until reset.
- Score never decreases; lives only drop while Playing.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Optional

from fruit_slice.slice_core.events import EventDispatcher

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    PLAYING = auto()
    PAUSED = auto()
    GAME_OVER = auto()


class SessionState:
    """
    Owns the outcome-driven part of a session.

    Every change is announced through the dispatcher: ``score_changed``,
    ``lives_changed`` and ``status_changed``.
    """

    def __init__(self, starting_lives: int = 3, dispatcher: Optional[EventDispatcher] = None):
        """
        Initialize session state.

        Args:
            starting_lives: Lives at the start of the session.
            dispatcher: Event sink. A listener-less one is created if None.
        """
        self._dispatcher = dispatcher if dispatcher is not None else EventDispatcher()
        self._starting_lives = max(1, int(starting_lives))
        self._score: int = 0
        self._lives: int = self._starting_lives
        self._status = SessionStatus.PLAYING

    @property
    def score(self) -> int:
        return self._score

    @property
    def lives(self) -> int:
        return self._lives

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def starting_lives(self) -> int:
        return self._starting_lives

    @property
    def is_playing(self) -> bool:
        return self._status is SessionStatus.PLAYING

    @property
    def is_paused(self) -> bool:
        return self._status is SessionStatus.PAUSED

    @property
    def is_over(self) -> bool:
        return self._status is SessionStatus.GAME_OVER

    def award(self, points: int) -> bool:
        """
        Add points for a fruit hit.

        Returns:
            True if the score changed (Playing only, positive points).
        """
        if not self.is_playing or points <= 0:
            return False
        self._score += int(points)
        self._dispatcher.emit("score_changed", self._score)
        return True

    def lose_life(self, reason: str = "") -> bool:
        """
        Take one life for a miss or a bomb.

        Args:
            reason: Short label for the log.

        Returns:
            True if this loss ended the session.
        """
        if not self.is_playing:
            return False

        self._lives = max(0, self._lives - 1)
        logger.debug("life lost (%s), %d left", reason or "unknown", self._lives)
        self._dispatcher.emit("lives_changed", self._lives)

        if self._lives <= 0:
            self._set_status(SessionStatus.GAME_OVER)
            return True
        return False

    def pause(self) -> bool:
        if not self.is_playing:
            return False
        self._set_status(SessionStatus.PAUSED)
        return True

    def resume(self) -> bool:
        if not self.is_paused:
            return False
        self._set_status(SessionStatus.PLAYING)
        return True

    def toggle_pause(self) -> bool:
        """Pause if playing, resume if paused. False once the game is over."""
        if self.is_playing:
            return self.pause()
        return self.resume()

    def reset(self, starting_lives: Optional[int] = None) -> None:
        """Full reset: fresh lives, zero score, Playing."""
        if starting_lives is not None:
            self._starting_lives = max(1, int(starting_lives))
        self._score = 0
        self._lives = self._starting_lives
        self._status = SessionStatus.PLAYING
        self._dispatcher.emit("score_changed", self._score)
        self._dispatcher.emit("lives_changed", self._lives)
        self._dispatcher.emit("status_changed", self._status)

    def _set_status(self, status: SessionStatus) -> None:
        if status is self._status:
            return
        logger.debug("session %s -> %s", self._status.name, status.name)
        self._status = status
        self._dispatcher.emit("status_changed", status)

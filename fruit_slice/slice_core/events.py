"""
Host Events
===========

Everything the core tells the host, and the best-score collaborator it asks.

Listener and score-board calls go through EventDispatcher, which logs and
swallows host exceptions so a broken renderer, sound system or save file
never corrupts score, lives or session status.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from fruit_slice.slice_core.fruit_catalog import ProjectileKind

if TYPE_CHECKING:
    from fruit_slice.slice_core.physics_world import Projectile
    from fruit_slice.slice_core.session import SessionStatus

logger = logging.getLogger(__name__)


class SessionListener:
    """
    Base class for host callbacks. Override what you need; every method
    defaults to doing nothing. Calls are fire-and-forget.
    """

    def score_changed(self, score: int) -> None:
        pass

    def lives_changed(self, lives: int) -> None:
        pass

    def combo_achieved(self, count: int) -> None:
        pass

    def slice_occurred(
        self,
        projectile_id: int,
        kind: ProjectileKind,
        position: Tuple[float, float],
        swipe_angle: float,
        points: int,
        combo_count: int
    ) -> None:
        pass

    def miss_occurred(self, projectile_id: int) -> None:
        pass

    def bomb_detonated(self, projectile_id: int) -> None:
        pass

    def session_ended(self, final_score: int, is_new_best: bool) -> None:
        pass

    def status_changed(self, status: "SessionStatus") -> None:
        pass

    def projectile_spawned(self, projectile: "Projectile") -> None:
        pass

    def sound_requested(self, key: str, volume: float, detune: float) -> None:
        pass


class ScoreBoard:
    """Best-score collaborator interface, keyed by difficulty mode."""

    def get_best_score(self, mode: str) -> int:
        raise NotImplementedError

    def report_score(self, mode: str, score: int) -> bool:
        """Record a finished session; True if it is a new best."""
        raise NotImplementedError


class InMemoryScoreBoard(ScoreBoard):
    """Default score board: per-mode bests held for the process lifetime."""

    def __init__(self, initial: Optional[Dict[str, int]] = None):
        self._best: Dict[str, int] = dict(initial or {})

    def get_best_score(self, mode: str) -> int:
        return self._best.get(mode, 0)

    def report_score(self, mode: str, score: int) -> bool:
        if score > self._best.get(mode, 0):
            self._best[mode] = score
            return True
        return False


class EventDispatcher:
    """
    Fans events out to listeners and shields the core from their failures.
    """

    def __init__(
        self,
        listeners: Optional[List[SessionListener]] = None,
        score_board: Optional[ScoreBoard] = None,
        sound_enabled: bool = True
    ):
        self._listeners: List[SessionListener] = list(listeners or [])
        self._score_board = score_board if score_board is not None else InMemoryScoreBoard()
        self.sound_enabled = sound_enabled

    @property
    def score_board(self) -> ScoreBoard:
        return self._score_board

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: str, *args) -> None:
        """Call ``event`` on every listener, logging and skipping failures."""
        for listener in list(self._listeners):
            try:
                getattr(listener, event)(*args)
            except Exception:
                logger.warning("listener %r failed handling %s", listener, event, exc_info=True)

    def sound(self, key: str, volume: float = 0.5, detune: float = 0.0) -> None:
        if self.sound_enabled:
            self.emit("sound_requested", key, volume, detune)

    def best_score(self, mode: str) -> int:
        """Best score for ``mode``, or 0 if the score board is unavailable."""
        try:
            return int(self._score_board.get_best_score(mode))
        except Exception:
            logger.warning("score board lookup failed for mode %s", mode, exc_info=True)
            return 0

    def report_score(self, mode: str, score: int) -> bool:
        """Report a final score; a failing score board means 'not a new best'."""
        try:
            return bool(self._score_board.report_score(mode, score))
        except Exception:
            logger.warning("score board rejected score %d for mode %s", score, mode, exc_info=True)
            return False

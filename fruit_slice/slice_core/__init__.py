"""
Slice Core - The heart of the game simulation.

This module provides the tick-driven session (difficulty, spawning, slice
detection, combos, lives) and its supporting pieces.

Main exports:
- CoreGame: Session orchestrator driven by advance() and pointer_*()
- GameConfig: Configuration loaded from game_config.yaml
- DifficultyCurve: Elapsed time -> gameplay parameters
- SessionListener: Base class for host callbacks
- InMemoryScoreBoard: Default best-score collaborator
"""

from fruit_slice.slice_core.config_loader import GameConfig, load_config
from fruit_slice.slice_core.difficulty import DifficultyCurve, DifficultySnapshot
from fruit_slice.slice_core.events import InMemoryScoreBoard, ScoreBoard, SessionListener
from fruit_slice.slice_core.fruit_catalog import BOMB, BombKind, FruitCatalog, FruitKind
from fruit_slice.slice_core.game import CoreGame
from fruit_slice.slice_core.session import SessionStatus

__all__ = [
    "GameConfig",
    "load_config",
    "DifficultyCurve",
    "DifficultySnapshot",
    "SessionListener",
    "ScoreBoard",
    "InMemoryScoreBoard",
    "BOMB",
    "BombKind",
    "FruitKind",
    "FruitCatalog",
    "CoreGame",
    "SessionStatus",
]

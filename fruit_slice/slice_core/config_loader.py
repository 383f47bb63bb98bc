"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.

Structural problems (missing sections, unknown names) raise. Out-of-range
tunables are corrected in place (swapped or clamped) and logged once at load
time so a bad preset never takes a session down.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

Pair = Tuple[float, float]

SPAWN_POLICIES = ("continuous", "wave")
VERTICAL_MODES = ("apex", "velocity")


@dataclass(frozen=True)
class ScreenConfig:
    """Reference resolution that all pixel tunables are authored against."""
    reference_width: int
    reference_height: int


@dataclass(frozen=True)
class DifficultyPreset:
    """
    A named difficulty tier.

    Every ``(start, end)`` pair is interpolated along the progress curve;
    ``horizontal_velocity`` and ``gravity`` are constant over the session
    and only scaled to the viewport.
    """
    name: str
    ramp_seconds: float
    starting_lives: int
    gravity: float
    horizontal_velocity: Pair
    spawn_interval_min: Pair
    spawn_interval_max: Pair
    wave_size_min: Pair
    wave_size_max: Pair
    wave_delay_min: Pair
    wave_delay_max: Pair
    max_concurrent: Pair
    bomb_chance: Pair
    vertical_velocity_min: Pair
    vertical_velocity_max: Pair

    @property
    def ramp_ms(self) -> float:
        return self.ramp_seconds * 1000.0


@dataclass(frozen=True)
class DifficultyConfig:
    """All presets plus the mode used when none is requested."""
    default_mode: str
    presets: Tuple[DifficultyPreset, ...]

    @property
    def mode_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.presets)

    def get_preset(self, name: Optional[str] = None) -> DifficultyPreset:
        """Get preset by name (default mode if None)."""
        if name is None:
            name = self.default_mode
        for preset in self.presets:
            if preset.name == name:
                return preset
        raise ValueError(f"Unknown difficulty mode: {name!r} (known: {self.mode_names})")


@dataclass(frozen=True)
class FruitConfig:
    """Configuration for a single fruit variant."""
    id: int
    variant: str
    score: int
    weight: float
    color: Tuple[int, int, int]


@dataclass(frozen=True)
class SpawnConfig:
    """Launch scheduling and initial placement."""
    policy: str
    initial_delay: float
    wave_stagger: float
    horizontal_margin: float
    offset_below_screen: float
    base_radius: float
    radius_variation: Pair
    spin_range: Pair
    vertical_mode: str
    apex_band: Pair


@dataclass(frozen=True)
class SliceConfig:
    """Swipe trail and intersection parameters."""
    max_trail_points: int
    max_trail_age: float
    min_slice_speed: float
    segments_per_move: int
    bbox_margin: float
    near_miss_cooldown: float
    max_projectiles_checked: int


@dataclass(frozen=True)
class ComboConfig:
    """Combo chaining parameters."""
    window: float
    announce_threshold: int


@dataclass(frozen=True)
class SessionRulesConfig:
    """Life loss and end-of-session rules."""
    miss_margin: float
    game_over_grace: float
    sound_enabled: bool


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    screen: ScreenConfig
    difficulty: DifficultyConfig
    fruits: Tuple[FruitConfig, ...]
    spawn: SpawnConfig
    slice: SliceConfig
    combo: ComboConfig
    session: SessionRulesConfig

    @property
    def num_fruit_variants(self) -> int:
        return len(self.fruits)

    def get_fruit(self, fruit_id: int) -> FruitConfig:
        """Get fruit config by ID."""
        if 0 <= fruit_id < len(self.fruits):
            return self.fruits[fruit_id]
        raise ValueError(f"Invalid fruit ID: {fruit_id}")

    def get_preset(self, name: Optional[str] = None) -> DifficultyPreset:
        return self.difficulty.get_preset(name)


def _pair(data: Dict[str, Any], key: str, default: Optional[Pair] = None) -> Pair:
    """Parse a two-element list from YAML."""
    value = data[key] if default is None else data.get(key, default)
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{key} must have 2 values, got {value}")
    return (float(value[0]), float(value[1]))


def _parse_color(color_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _ordered_pair(value: Pair, label: str) -> Pair:
    """Swap a (low, high) pair that was written backwards."""
    low, high = value
    if low > high:
        logger.warning("%s has min > max (%s > %s); swapping", label, low, high)
        return (high, low)
    return value


def _ordered_ramps(low: Pair, high: Pair, label: str) -> Tuple[Pair, Pair]:
    """
    Make sure a min/max pair of ramps stays ordered at both ends.

    Args:
        low: (start, end) of the lower bound.
        high: (start, end) of the upper bound.
        label: Name used in the log message.

    Returns:
        Corrected (low, high) ramps.
    """
    start_low, start_high = _ordered_pair((low[0], high[0]), f"{label} at start")
    end_low, end_high = _ordered_pair((low[1], high[1]), f"{label} at end")
    return (start_low, end_low), (start_high, end_high)


def _non_negative(value: Pair, label: str) -> Pair:
    if value[0] < 0 or value[1] < 0:
        logger.warning("%s has negative values %s; clamping to 0", label, value)
        return (max(0.0, value[0]), max(0.0, value[1]))
    return value


def _unit_interval(value: Pair, label: str) -> Pair:
    clamped = (min(1.0, max(0.0, value[0])), min(1.0, max(0.0, value[1])))
    if clamped != value:
        logger.warning("%s %s outside [0, 1]; clamping to %s", label, value, clamped)
    return clamped


def _parse_preset(name: str, data: Dict[str, Any]) -> DifficultyPreset:
    """Parse and correct a single difficulty preset."""
    label = f"difficulty.{name}"

    ramp_seconds = float(data["ramp_seconds"])
    if ramp_seconds <= 0:
        logger.warning("%s.ramp_seconds=%s is not positive; using 1", label, ramp_seconds)
        ramp_seconds = 1.0

    starting_lives = int(data.get("starting_lives", 3))
    if starting_lives < 1:
        logger.warning("%s.starting_lives=%s; using 1", label, starting_lives)
        starting_lives = 1

    gravity = float(data["gravity"])
    if gravity < 0:
        logger.warning("%s.gravity=%s is negative; using %s", label, gravity, -gravity)
        gravity = -gravity

    horizontal = _ordered_pair(
        _non_negative(_pair(data, "horizontal_velocity"), f"{label}.horizontal_velocity"),
        f"{label}.horizontal_velocity"
    )

    interval_min, interval_max = _ordered_ramps(
        _non_negative(_pair(data, "spawn_interval_min"), f"{label}.spawn_interval_min"),
        _non_negative(_pair(data, "spawn_interval_max"), f"{label}.spawn_interval_max"),
        f"{label}.spawn_interval"
    )
    wave_min, wave_max = _ordered_ramps(
        _non_negative(_pair(data, "wave_size_min"), f"{label}.wave_size_min"),
        _non_negative(_pair(data, "wave_size_max"), f"{label}.wave_size_max"),
        f"{label}.wave_size"
    )
    delay_min, delay_max = _ordered_ramps(
        _non_negative(_pair(data, "wave_delay_min"), f"{label}.wave_delay_min"),
        _non_negative(_pair(data, "wave_delay_max"), f"{label}.wave_delay_max"),
        f"{label}.wave_delay"
    )
    vy_min, vy_max = _ordered_ramps(
        _pair(data, "vertical_velocity_min"),
        _pair(data, "vertical_velocity_max"),
        f"{label}.vertical_velocity"
    )

    return DifficultyPreset(
        name=name,
        ramp_seconds=ramp_seconds,
        starting_lives=starting_lives,
        gravity=gravity,
        horizontal_velocity=horizontal,
        spawn_interval_min=interval_min,
        spawn_interval_max=interval_max,
        wave_size_min=wave_min,
        wave_size_max=wave_max,
        wave_delay_min=delay_min,
        wave_delay_max=delay_max,
        # Left as written: the scheduler refuses to spawn on a non-positive cap
        max_concurrent=_pair(data, "max_concurrent"),
        bomb_chance=_unit_interval(_pair(data, "bomb_chance"), f"{label}.bomb_chance"),
        vertical_velocity_min=vy_min,
        vertical_velocity_max=vy_max
    )


def _parse_fruit(index: int, fruit_data: dict) -> FruitConfig:
    """Parse a single fruit variant from YAML."""
    weight = float(fruit_data["weight"])
    if weight < 0:
        logger.warning("fruit %s has negative weight %s; using 0", fruit_data["variant"], weight)
        weight = 0.0
    return FruitConfig(
        id=index,
        variant=str(fruit_data["variant"]),
        score=int(fruit_data["score"]),
        weight=weight,
        color=_parse_color(fruit_data.get("color", [255, 255, 255]))
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if not config.fruits:
        raise ValueError("At least one fruit variant is required")

    if sum(f.weight for f in config.fruits) <= 0:
        raise ValueError("Fruit weights must not all be zero")

    variants = [f.variant for f in config.fruits]
    if len(set(variants)) != len(variants):
        raise ValueError(f"Duplicate fruit variants: {variants}")

    if not config.difficulty.presets:
        raise ValueError("At least one difficulty preset is required")

    # Raises for an unknown default
    config.difficulty.get_preset(config.difficulty.default_mode)

    if config.spawn.policy not in SPAWN_POLICIES:
        raise ValueError(f"spawn.policy must be one of {SPAWN_POLICIES}, got '{config.spawn.policy}'")

    if config.spawn.vertical_mode not in VERTICAL_MODES:
        raise ValueError(
            f"spawn.vertical_mode must be one of {VERTICAL_MODES}, got '{config.spawn.vertical_mode}'"
        )

    if config.screen.reference_width <= 0 or config.screen.reference_height <= 0:
        raise ValueError("screen reference size must be positive")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    return config_from_dict(raw)


def config_from_dict(raw: Dict[str, Any]) -> GameConfig:
    """
    Build a GameConfig from an already-parsed mapping.

    Args:
        raw: Mapping with the same layout as game_config.yaml.

    Returns:
        Validated GameConfig instance.
    """
    screen_data = raw["screen"]
    screen = ScreenConfig(
        reference_width=int(screen_data["reference_width"]),
        reference_height=int(screen_data["reference_height"])
    )

    difficulty_data = raw["difficulty"]
    presets = tuple(
        _parse_preset(str(name), preset_data)
        for name, preset_data in difficulty_data["presets"].items()
    )
    difficulty = DifficultyConfig(
        default_mode=str(difficulty_data.get("default_mode", "normal")),
        presets=presets
    )

    fruits = tuple(_parse_fruit(i, f) for i, f in enumerate(raw["fruits"]))

    session_data = raw.get("session", {})
    miss_margin = float(session_data.get("miss_margin", 80))

    spawn_data = raw["spawn"]
    offset = float(spawn_data.get("offset_below_screen", 70))
    if offset >= miss_margin:
        # Launches must start above the miss line or they count as missed at once
        logger.warning(
            "spawn.offset_below_screen=%s must be below session.miss_margin=%s; using %s",
            offset, miss_margin, miss_margin - 1
        )
        offset = miss_margin - 1
    spawn = SpawnConfig(
        policy=str(spawn_data.get("policy", "continuous")),
        initial_delay=max(0.0, float(spawn_data.get("initial_delay", 400))),
        wave_stagger=max(0.0, float(spawn_data.get("wave_stagger", 80))),
        horizontal_margin=float(spawn_data.get("horizontal_margin", 60)),
        offset_below_screen=offset,
        base_radius=float(spawn_data.get("base_radius", 28)),
        radius_variation=_ordered_pair(
            _pair(spawn_data, "radius_variation", (0.9, 1.1)), "spawn.radius_variation"
        ),
        spin_range=_ordered_pair(_pair(spawn_data, "spin_range", (-220, 220)), "spawn.spin_range"),
        vertical_mode=str(spawn_data.get("vertical_mode", "apex")),
        apex_band=_ordered_pair(
            _unit_interval(_pair(spawn_data, "apex_band", (0.12, 0.40)), "spawn.apex_band"),
            "spawn.apex_band"
        )
    )

    slice_data = raw["slice"]
    segments = int(slice_data.get("segments_per_move", 1))
    if not 1 <= segments <= 3:
        logger.warning("slice.segments_per_move=%s outside [1, 3]; clamping", segments)
        segments = min(3, max(1, segments))
    slice_config = SliceConfig(
        max_trail_points=max(2, int(slice_data.get("max_trail_points", 14))),
        max_trail_age=max(0.0, float(slice_data.get("max_trail_age", 250))),
        min_slice_speed=max(0.0, float(slice_data.get("min_slice_speed", 900))),
        segments_per_move=segments,
        bbox_margin=max(0.0, float(slice_data.get("bbox_margin", 40))),
        near_miss_cooldown=max(0.0, float(slice_data.get("near_miss_cooldown", 100))),
        max_projectiles_checked=max(1, int(slice_data.get("max_projectiles_checked", 12)))
    )

    combo_data = raw["combo"]
    combo = ComboConfig(
        window=max(0.0, float(combo_data.get("window", 150))),
        announce_threshold=int(combo_data.get("announce_threshold", 3))
    )

    session = SessionRulesConfig(
        miss_margin=miss_margin,
        game_over_grace=max(0.0, float(session_data.get("game_over_grace", 300))),
        sound_enabled=bool(session_data.get("sound_enabled", True))
    )

    config = GameConfig(
        screen=screen,
        difficulty=difficulty,
        fruits=fruits,
        spawn=spawn,
        slice=slice_config,
        combo=combo,
        session=session
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config

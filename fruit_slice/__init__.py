"""
Fruit Slice
===========

Gameplay-simulation core for an arcade slicing game. The core never draws,
plays audio or touches storage: a host drives it with frame ticks and
pointer samples and reacts to the events it emits.

All tunable parameters are in game_config.yaml.
"""

"""
Performance Benchmark
=====================

Measures tick and pointer-move throughput of the slicing core.

Usage:
    python -m tools.benchmark_speed [--frames N] [--projectiles P]
"""

from __future__ import annotations

import argparse
import sys
import time

import numpy as np

from fruit_slice.slice_core.config_loader import load_config
from fruit_slice.slice_core.game import CoreGame
from fruit_slice.slice_core.trail import TrailPoint

FRAME_MS = 1000.0 / 60.0


def benchmark_session(
    num_frames: int = 3600,
    seed: int = 42,
    mode: str = "normal"
) -> dict:
    """
    Benchmark a full session with a random swiping player.

    Args:
        num_frames: Number of 60 Hz frames to simulate.
        seed: Random seed.
        mode: Difficulty mode.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    game = CoreGame(config=config, mode=mode, seed=seed, sound_enabled=False)
    rng = np.random.default_rng(seed)
    width, height = game.viewport

    moves = 0
    resets = 0
    t = 0.0
    start = time.perf_counter()

    for frame in range(num_frames):
        game.advance(FRAME_MS)
        t += FRAME_MS

        # One swipe every 20 frames, 4 samples per frame while swiping
        phase = frame % 20
        if phase == 0:
            game.pointer_down(rng.uniform(0, width), rng.uniform(0, height), t)
        elif phase < 8:
            for k in range(4):
                game.pointer_move(
                    rng.uniform(0, width),
                    rng.uniform(0, height),
                    t + k * FRAME_MS / 4
                )
                moves += 1
        elif phase == 8:
            game.pointer_up(t)

        if game.is_over:
            game.reset()
            resets += 1

    elapsed = time.perf_counter() - start

    return {
        "mode": f"session/{mode}",
        "frames": num_frames,
        "moves": moves,
        "resets": resets,
        "elapsed_seconds": elapsed,
        "frames_per_second": num_frames / elapsed,
        "ms_per_frame": (elapsed * 1000) / num_frames
    }


def benchmark_slice_detection(
    num_projectiles: int = 50,
    num_segments: int = 5000,
    seed: int = 42
) -> dict:
    """
    Benchmark segment tests against a crowded screen.

    Args:
        num_projectiles: Live projectiles placed on screen.
        num_segments: Segments tested.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    game = CoreGame(config=config, seed=seed, sound_enabled=False, autostart=False)
    rng = np.random.default_rng(seed)
    width, height = game.viewport

    def refill():
        while game.world.count < num_projectiles:
            game.spawn_projectile(
                position=(rng.uniform(0, width), rng.uniform(0, height)),
                velocity=(0.0, 0.0)
            )

    refill()
    slicer = game.slicer
    hits = 0
    start = time.perf_counter()

    for i in range(num_segments):
        x, y = rng.uniform(0, width), rng.uniform(0, height)
        angle = rng.uniform(0, 2 * np.pi)
        a = TrailPoint(x, y, float(i * 10))
        b = TrailPoint(x + 60 * np.cos(angle), y + 60 * np.sin(angle), float(i * 10 + 5))
        hits += len(slicer.check_segment(a, b))
        refill()

    elapsed = time.perf_counter() - start

    return {
        "mode": f"slice/{num_projectiles}",
        "segments": num_segments,
        "hits": hits,
        "circle_tests": slicer.circle_tests,
        "elapsed_seconds": elapsed,
        "segments_per_second": num_segments / elapsed,
        "us_per_segment": (elapsed * 1e6) / num_segments
    }


def run_all_benchmarks(
    frames: int = 3600,
    projectile_counts: list = [5, 12, 50],
    segments: int = 5000
) -> list:
    """Run comprehensive benchmarks."""
    results = []

    print("=" * 60)
    print("FRUIT SLICE CORE PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    for mode in ("easy", "normal", "hard"):
        print(f"Benchmarking session ({mode})...")
        result = benchmark_session(num_frames=frames, mode=mode)
        results.append(result)
        print(f"  Frames/sec: {result['frames_per_second']:.1f}")
        print(f"  ms/frame:   {result['ms_per_frame']:.3f}")
        print()

    for count in projectile_counts:
        print(f"Benchmarking slice detection (projectiles={count})...")
        result = benchmark_slice_detection(num_projectiles=count, num_segments=segments)
        results.append(result)
        print(f"  Segments/sec: {result['segments_per_second']:.1f}")
        print(f"  us/segment:   {result['us_per_segment']:.2f}")
        print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<20} {'Ops/s':>12} {'Cost':>14}")
    print("-" * 48)

    for r in results:
        if "frames_per_second" in r:
            print(f"{r['mode']:<20} {r['frames_per_second']:>12.1f} {r['ms_per_frame']:>11.3f} ms")
        else:
            print(f"{r['mode']:<20} {r['segments_per_second']:>12.1f} {r['us_per_segment']:>11.2f} us")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark fruit slice core performance")
    parser.add_argument("--frames", type=int, default=3600, help="Frames per session benchmark")
    parser.add_argument("--projectiles", type=int, nargs="+", default=[5, 12, 50],
                        help="Projectile counts for slice detection")
    parser.add_argument("--segments", type=int, default=5000, help="Segments per slice benchmark")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer frames)")

    args = parser.parse_args()

    frames = 600 if args.quick else args.frames
    segments = 500 if args.quick else args.segments

    run_all_benchmarks(
        frames=frames,
        projectile_counts=args.projectiles,
        segments=segments
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())

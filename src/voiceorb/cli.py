"""
CLI entry point for the voice visualizer.

Usage:
    voiceorb live [options]
    voiceorb render -o orb.gif [options]
    python -m voiceorb <command> [options]
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from voiceorb.config import PROFILES, EngineConfig, load_config, make_config, with_overrides
from voiceorb.core.palette import AgentState, parse_state
from voiceorb.demo import DemoSignal
from voiceorb.io.exporter import FrameExporter, render_frames
from voiceorb.scheduler import HostInputs


def _progress_bar(current: int, total: int, width: int = 30):
    """Report render progress; redraws in place on a terminal."""
    total = max(total, 1)
    done = current >= total
    if not sys.stdout.isatty():
        step = max(1, total // 10)
        if done or current % step == 0:
            print(f"rendered {current}/{total} frames", flush=True)
        return

    filled = width * current // total
    bar = "=" * filled + " " * (width - filled)
    end = "\n" if done else ""
    sys.stdout.write(f"\r|{bar}| {current}/{total} frames{end}")
    sys.stdout.flush()


def _parse_background(value: str) -> tuple[int, int, int]:
    """Parse ``#rrggbb`` into an RGB tuple."""
    text = value.lstrip("#")
    if len(text) != 6:
        raise argparse.ArgumentTypeError(f"expected #rrggbb, got {value!r}")
    try:
        return tuple(int(text[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected #rrggbb, got {value!r}") from None


def _state_arg(value: str) -> AgentState:
    try:
        return parse_state(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="voiceorb",
        description="Audio-reactive voice agent visualizer",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    common.add_argument(
        "-p", "--profile", type=str, default="full",
        choices=sorted(PROFILES),
        help="Engine profile (baseline: no bursts, full: bursts) (default: full)",
    )
    common.add_argument("-c", "--config", type=Path, default=None, help="JSON file of engine overrides")
    common.add_argument("--size", type=int, default=None, help="Logical canvas size (default: 400)")
    common.add_argument("--pixel-ratio", type=float, default=None, help="Device pixel ratio, capped at 2")
    common.add_argument("--particles", type=int, default=None, help="Particle count")
    common.add_argument("--seed", type=int, default=None, help="Random seed for particles")
    common.add_argument(
        "-s", "--state", type=_state_arg, default=AgentState.SPEAKING,
        help="Agent state (default: speaking)",
    )
    common.add_argument("-l", "--level", type=float, default=0.5, help="Raw audio level in [-1, 1] (default: 0.5)")
    common.add_argument("--demo", action="store_true", help="Drive state and level from the simulated demo signal")

    sub = parser.add_subparsers(dest="command", required=True)

    live = sub.add_parser("live", parents=[common], help="Open a live window")
    live.add_argument("--refresh", type=int, default=60, help="Display loop rate in Hz (default: 60)")

    render = sub.add_parser("render", parents=[common], help="Render frames to a GIF or PNG sequence")
    render.add_argument("-o", "--output", type=Path, required=True, help="Output .gif file or directory for PNGs")
    render.add_argument("-n", "--frames", type=int, default=90, help="Number of frames (default: 90)")
    render.add_argument(
        "--background", type=_parse_background, default=None,
        help="Flatten onto #rrggbb (default: transparent PNGs, white GIF)",
    )

    return parser


def _build_config(args) -> EngineConfig:
    if args.config is not None:
        config = load_config(args.config, profile=args.profile)
    else:
        config = make_config(args.profile)
    return with_overrides(
        config,
        size=args.size,
        pixel_ratio=args.pixel_ratio,
        particle_count=args.particles,
        seed=args.seed,
    )


def _run_render(args, config: EngineConfig) -> int:
    if args.frames <= 0:
        print("Error: --frames must be positive", file=sys.stderr)
        return 1

    if args.demo:
        inputs = DemoSignal(size=config.size, seed=config.seed).inputs_at
    else:
        inputs = HostInputs(size=config.size, state=args.state, audio_level=args.level)

    as_gif = args.output.suffix.lower() == ".gif"
    background = args.background
    if as_gif and background is None:
        background = (255, 255, 255)

    print(f"Rendering {args.frames} frames at {config.backing_size()}px ({config.fps_cap:g} fps cap)")
    start = time.time()
    frames = list(render_frames(config, inputs, args.frames, background, progress_callback=_progress_bar))

    exporter = FrameExporter(fps=config.fps_cap)
    if as_gif:
        path = exporter.save_gif(frames, args.output)
        print(f"Wrote {path}")
    else:
        paths = exporter.save_png_sequence(frames, args.output)
        print(f"Wrote {len(paths)} frames to {args.output}")

    print(f"Done in {time.time() - start:.1f}s")
    return 0


def _run_live(args, config: EngineConfig) -> int:
    # pygame is only needed for the window
    from voiceorb.viewer import run_viewer

    run_viewer(config, state=args.state, level=args.level, demo=args.demo, refresh_rate=args.refresh)
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = _build_config(args)
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "render":
        return _run_render(args, config)
    return _run_live(args, config)


if __name__ == "__main__":
    sys.exit(main())

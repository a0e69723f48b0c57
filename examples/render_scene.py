#!/usr/bin/env python3
"""Render a scene described by a JSON command script.

The script is a JSON array of wire messages, handled in order by a
TracerWorker exactly as a message producer would send them:

    [
        {"type": "sphere", "data": {"center": {"x": 0, "y": 0, "z": -5}, "radius": 1}},
        {"type": "ray", "data": {"origin": {"x": 0, "y": 0, "z": 0},
                                 "direction": {"x": 0, "y": 0, "z": -1}}},
        {"type": "viewport", "data": {"width": 320, "height": 240, "top": 1,
                                      "bottom": -1, "left": -1, "right": 1,
                                      "near": 1, "far": 100, "fov": 45}}
    ]

Notifications and errors are logged. Every viewport result is saved as a
PNG; when the script renders more than once the files are numbered.

Usage:
    python -m examples.render_scene [script.json] [options]

Options:
    --output OUTPUT     Output file path (default: scene.png)
    --shade-mode MODE   lambertian, normal or flat (default: lambertian)
    --light X Y Z       Point light position (default: 10 10 10)
    --cpu               Force the CPU backend
    --verbose           Log debug output

Without a script a built-in demo scene is rendered.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_scene")

DEMO_SCRIPT = [
    {
        "type": "sphere",
        "data": {
            "center": {"x": 0.0, "y": 0.0, "z": -5.0},
            "radius": 1.0,
            "material": {"ambient": [0.1, 0.02, 0.02], "diffuse": [0.8, 0.2, 0.2]},
        },
    },
    {
        "type": "sphere",
        "data": {
            "center": {"x": 1.5, "y": 0.5, "z": -7.0},
            "radius": 0.75,
            "material": {"ambient": [0.02, 0.02, 0.1], "diffuse": [0.2, 0.3, 0.9]},
        },
    },
    {
        "type": "tri",
        "data": {
            "a": {"x": -4.0, "y": -1.0, "z": -3.0},
            "b": {"x": 4.0, "y": -1.0, "z": -3.0},
            "c": {"x": 0.0, "y": -1.0, "z": -12.0},
            "material": {"ambient": [0.05, 0.05, 0.05], "diffuse": [0.6, 0.6, 0.6]},
        },
    },
    {
        "type": "ray",
        "data": {"origin": {"x": 0, "y": 0, "z": 0}, "direction": {"x": 0, "y": 0, "z": -1}},
    },
    {
        "type": "viewport",
        "data": {
            "width": 320,
            "height": 240,
            "top": 1.0,
            "bottom": -1.0,
            "left": -1.0,
            "right": 1.0,
            "near": 1.0,
            "far": 100.0,
            "fov": 45.0,
        },
    },
]


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene from a JSON command script.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "script",
        nargs="?",
        type=Path,
        help="JSON array of messages (default: built-in demo scene)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="scene.png",
        help="Output file path (default: scene.png)",
    )
    parser.add_argument(
        "--shade-mode",
        choices=["lambertian", "normal", "flat"],
        default="lambertian",
        help="Pixel shading mode (default: lambertian)",
    )
    parser.add_argument(
        "--light",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=(10.0, 10.0, 10.0),
        help="Point light position (default: 10 10 10)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    return parser.parse_args()


def load_script(path: Path | None) -> list[dict]:
    """Load a command script, or the demo scene when no path is given."""
    if path is None:
        return DEMO_SCRIPT
    with open(path, encoding="utf-8") as f:
        script = json.load(f)
    if not isinstance(script, list):
        raise ValueError(f"{path}: script must be a JSON array of messages")
    return script


def output_path(base: Path, index: int, total: int) -> Path:
    if total == 1:
        return base
    return base.with_name(f"{base.stem}_{index:03d}{base.suffix}")


def run_script(
    script: list[dict],
    output: str = "scene.png",
    shade_mode: str = "lambertian",
    light_position: tuple[float, float, float] = (10.0, 10.0, 10.0),
) -> list[Path]:
    """Feed a script to a TracerWorker and save every rendered frame.

    Args:
        script: Messages to handle in order.
        output: PNG path for the rendered frame(s).
        shade_mode: Name of the ShadeMode to render with.
        light_position: Point light position.

    Returns:
        Paths of the saved images.
    """
    # Lazy imports to allow Taichi initialization first
    from raycaster.core.config import ShadeMode, TracerConfig
    from raycaster.preview.export import save_png
    from raycaster.protocol.messages import ERROR, RESULT
    from raycaster.protocol.worker import TracerWorker

    config = TracerConfig(
        light_position=tuple(light_position),
        shade_mode=ShadeMode[shade_mode.upper()],
    )
    worker = TracerWorker(config)

    replies = worker.handle_all(script)
    frames = [reply for reply in replies if reply.type == RESULT]
    for reply in replies:
        if reply.type == ERROR:
            logger.error("%s", reply.message)
        elif reply.type != RESULT:
            logger.info("%s", reply.message)

    saved = []
    for index, frame in enumerate(frames):
        path = save_png(
            frame.data, frame.width, frame.height, output_path(Path(output), index, len(frames))
        )
        logger.info("Saved %dx%d frame to %s", frame.width, frame.height, path.absolute())
        saved.append(path)

    if not frames:
        logger.warning("Script rendered no viewport")
    return saved


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    if args.cpu:
        ti.init(arch=ti.cpu)
    else:
        try:
            ti.init(arch=ti.gpu)
        except RuntimeError:
            ti.init(arch=ti.cpu)

    try:
        script = load_script(args.script)
        run_script(
            script,
            output=args.output,
            shade_mode=args.shade_mode,
            light_position=args.light,
        )
        return 0
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())

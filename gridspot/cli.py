"""Command-line entry point: compose grids and run analyses from the shell."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from gridspot.config import load_config
from gridspot.engine import AnalysisOptions, analyze_with_grid
from gridspot.errors import GridspotError
from gridspot.grid.composer import GridStyle, compose_grid
from gridspot.providers.registry import create_provider
from gridspot.visualization.annotations import box_style_from_config, cell_style_from_config
from gridspot.visualization.surface import Surface


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gridspot", description="Grid-prompted visual grounding")
    parser.add_argument("--config", type=str, default="", help="YAML or JSON config file")
    parser.add_argument("--verbose", action="store_true", help="Debug logging to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    grid = sub.add_parser("grid", help="Compose a labeled grid over an image")
    grid.add_argument("image", help="Image path, URL or data URL")
    grid.add_argument("--out", type=str, required=True, help="Where to save the grid image")
    _add_grid_args(grid)

    analyze = sub.add_parser("analyze", help="Locate objects with a vision model")
    analyze.add_argument("image", help="Image path, URL or data URL")
    analyze.add_argument("--objects", type=str, default=None, help="What to look for")
    analyze.add_argument("--provider", type=str, default=None, help="openai, anthropic or google")
    analyze.add_argument("--model", type=str, default=None, help="Model name override")
    analyze.add_argument("--max-areas", type=int, default=None, help="Maximum areas to keep")
    analyze.add_argument("--pad-ratio", type=float, default=None, help="Box padding as a fraction of its size")
    analyze.add_argument("--mode", choices=("bbox", "cells"), default=None, help="Annotation mode")
    analyze.add_argument("--language", type=str, default=None, help="Language code for labels")
    analyze.add_argument("--grid-preview", action="store_true", default=None, help="Include the grid image in the output")
    analyze.add_argument("--out", type=str, default="", help="Save the annotated image here")
    _add_grid_args(analyze)

    return parser


def _add_grid_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--rows", type=int, default=None, help="Grid rows")
    p.add_argument("--cols", type=int, default=None, help="Grid columns")
    p.add_argument("--margin", type=int, default=None, help="White margin in pixels")
    p.add_argument("--max-side", type=int, default=None, help="Downscale bound for the longest side")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        cfg = load_config(args.config)
        if args.command == "grid":
            return _run_grid(args, cfg)
        return _run_analyze(args, cfg)
    except GridspotError as exc:
        logger.debug("Command failed", exc_info=True)
        print(json.dumps({"ok": False, "error": str(exc)}, indent=2), file=sys.stderr)
        return 1


def _run_grid(args: argparse.Namespace, cfg) -> int:
    options = AnalysisOptions.from_config(
        cfg, rows=args.rows, cols=args.cols, margin=args.margin, max_side=args.max_side,
    )
    grid = compose_grid(args.image, options.grid_spec(), style=GridStyle.from_config(cfg.get("grid") or {}))
    grid.image.save(args.out)
    print(json.dumps(grid.geometry.to_dict(), indent=2))
    return 0


def _run_analyze(args: argparse.Namespace, cfg) -> int:
    options = AnalysisOptions.from_config(
        cfg,
        objects=args.objects,
        rows=args.rows,
        cols=args.cols,
        margin=args.margin,
        max_side=args.max_side,
        max_areas=args.max_areas,
        pad_ratio=args.pad_ratio,
        display_mode=args.mode,
        language=args.language,
        grid_preview=args.grid_preview,
    )
    # fail on bad grid settings before building a provider
    options.grid_spec()

    pcfg = cfg.get("provider") or {}
    provider = create_provider(
        args.provider or pcfg.get("name") or "openai",
        model=args.model or pcfg.get("model"),
        max_tokens=pcfg.get("max_tokens"),
        timeout_s=pcfg.get("timeout_s"),
    )

    render = cfg.get("render") or {}
    surface = Surface() if args.out else None
    result = asyncio.run(analyze_with_grid(
        provider,
        args.image,
        options=options,
        surface=surface,
        grid_style=GridStyle.from_config(cfg.get("grid") or {}),
        box_style=box_style_from_config(render),
        cell_style=cell_style_from_config(render),
    ))

    if surface is not None and result.ok and not result.no_detections:
        surface.save(args.out)
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())

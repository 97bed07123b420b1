"""Command-line front end: generate, print, save and load run maps."""
from __future__ import annotations

import argparse
import json
import logging
import secrets
import sys
from pathlib import Path
from typing import List, Sequence, TextIO

from seedmap.domain.map_models import GenerationConfig, MapGraph
from seedmap.presentation.cli import config as cli_config
from seedmap.presentation.cli.render import (
    debug_enabled,
    render_legend,
    render_map,
    render_stream_debug,
)
from seedmap.services.errors import SaveLoadError
from seedmap.services.map_generation import MapGenerator
from seedmap.services.map_navigation_service import MapNavigationService
from seedmap.services.rng_registry import RNGRegistry
from seedmap.services.save_service import SaveService

_MAX_RANDOM_SEED = 2**31 - 1
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="seedmap", description="Generate a deterministic run map.")
    parser.add_argument("--seed", help="Master seed (random when omitted).")
    parser.add_argument("--layers", type=int, help="Index of the boss layer.")
    parser.add_argument("--min-width", type=int, help="Minimum nodes per middle layer.")
    parser.add_argument("--max-width", type=int, help="Maximum nodes per middle layer.")
    parser.add_argument("--config", type=Path, help="Path to a JSON config file.")
    parser.add_argument("--save", type=Path, help="Write the run to this JSON file.")
    parser.add_argument("--load", type=Path, help="Resume the run stored in this JSON file.")
    parser.add_argument("--log-level", choices=_LOG_LEVELS, default="WARNING")
    return parser


def resolve_generation_config(args: argparse.Namespace, seed: str) -> GenerationConfig:
    """Merge the config file with command-line overrides."""
    defaults = cli_config.load_config(args.config)
    return GenerationConfig(
        seed=seed,
        layer_count=args.layers if args.layers is not None else defaults["layer_count"],
        min_path_width=args.min_width if args.min_width is not None else defaults["min_path_width"],
        max_path_width=args.max_width if args.max_width is not None else defaults["max_path_width"],
    )


def start_new_run(config: GenerationConfig) -> tuple[RNGRegistry, MapNavigationService, MapGraph]:
    registry = RNGRegistry()
    registry.initialize(config.seed)
    graph = MapGenerator.from_registry(registry, config).generate()
    navigation = MapNavigationService()
    navigation.set_map(graph)
    return registry, navigation, graph


def load_run(path: Path) -> tuple[RNGRegistry, MapNavigationService]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SaveLoadError(f"Could not read save file {path}: {exc}") from exc
    snapshot = SaveService().deserialize(payload)
    return snapshot.registry, snapshot.navigation


def main(argv: Sequence[str] | None = None, out: TextIO | None = None) -> int:
    """Run the CLI and return the process exit code."""
    stream = out or sys.stdout
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.load is not None:
            registry, navigation = load_run(args.load)
            graph = navigation.current_map
            if graph is None:
                config = resolve_generation_config(args, registry.master_seed)
                graph = MapGenerator.from_registry(registry, config).generate()
                navigation.set_map(graph)
        else:
            seed = args.seed if args.seed is not None else str(secrets.randbelow(_MAX_RANDOM_SEED))
            registry, navigation, graph = start_new_run(resolve_generation_config(args, seed))
    except (SaveLoadError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    lines: List[str] = [f"Seed: {registry.master_seed}", render_legend(), ""]
    lines.extend(render_map(graph, navigation))
    if debug_enabled():
        lines.append("")
        lines.extend(render_stream_debug(registry))
    print("\n".join(lines), file=stream)

    if args.save is not None:
        payload = SaveService().serialize(registry, navigation)
        args.save.parent.mkdir(parents=True, exist_ok=True)
        args.save.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        logger.info("Saved run to %s", args.save)
    return 0

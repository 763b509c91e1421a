"""Command-line entry point for inspecting and creating stored flows."""

import argparse
import asyncio
from typing import List, Optional

from loguru import logger

from .config.schemas import EditorConfig
from .core.exceptions import ConfigurationError, FlowStoreError
from .core.flow_editor import FlowEditor
from .utils.config_loader import load_config
from .utils.formatters import format_flow
from .utils.logging_config import configure_from_config
from .utils.validators import validate_config_dependencies


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect and create decision flows in a flow store.")
    parser.add_argument("--config", default=None, help="Path to a YAML config file or directory.")
    parser.add_argument("--base-url", default=None, help="Flow store origin (overrides config).")
    parser.add_argument("--log-level", default=None, help="Console log level (overrides config).")

    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Print a stored flow.")
    show.add_argument("flow_id", help="Identifier assigned by the store.")

    create = subparsers.add_parser("create", help="Create a flow from a list of questions and save it.")
    create.add_argument(
        "--question",
        action="append",
        default=[],
        dest="questions",
        help="Question label; repeat for several questions.",
    )
    create.add_argument(
        "--responses",
        nargs="+",
        default=None,
        help="Response options for every question (default from config).",
    )
    create.add_argument(
        "--chain",
        action="store_true",
        help="Connect the first response of each question to the next question.",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> EditorConfig:
    config = load_config(args.config)
    if args.base_url:
        config.store.base_url = args.base_url.rstrip("/")
    if args.log_level:
        config.logging.level = args.log_level
    validate_config_dependencies(config)
    return config


async def show_flow(config: EditorConfig, flow_id: str) -> int:
    async with FlowEditor(config=config, flow_id=flow_id) as editor:
        if editor.synchronizer.last_error is not None:
            print(f"Could not load flow {flow_id}: {editor.synchronizer.last_error}")
            return 1
        print(format_flow(editor.snapshot()))
    return 0


async def create_flow(
    config: EditorConfig,
    questions: List[str],
    responses: Optional[List[str]],
    chain: bool
) -> int:
    async with FlowEditor(config=config) as editor:
        nodes = [editor.add_question(label=label, responses=responses) for label in questions]

        if chain:
            for current, following in zip(nodes, nodes[1:]):
                if not current.responses:
                    continue
                editor.on_connect({
                    "source": current.id,
                    "sourceHandle": f"0-{current.responses[0]}",
                    "target": following.id,
                })

        try:
            saved = await editor.save()
        except FlowStoreError as e:
            print(f"Save failed: {e}")
            return 1

        print(saved.message)
        print(f"Flow id: {editor.flow_id}")
        print(format_flow(editor.snapshot()))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = build_config(args)
        configure_from_config(config.logging)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2

    if args.command == "show":
        return asyncio.run(show_flow(config, args.flow_id))
    if args.command == "create":
        if not args.questions:
            logger.warning("No --question given; saving an empty flow")
        return asyncio.run(create_flow(config, args.questions, args.responses, args.chain))
    return 2


if __name__ == "__main__":
    raise SystemExit(main())

"""
codecollab — Entry Point
Chat with a remote code assistant and apply its file actions to the workspace.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from codecollab import __version__
from codecollab.config.settings import CollabSettings, load_settings
from codecollab.core.errors import ConfigError
from codecollab.core.feedback import CallbackFeedbackChannel, FeedbackEvent, FeedbackType
from codecollab.core.file_tree import build_file_tree, list_workspace_files
from codecollab.core.orchestrator import SessionOrchestrator
from codecollab.core.prompt import PromptRequest
from codecollab.core.session_store import SessionStore
from codecollab.ui.colors import (
    ACCENT_FG,
    CHAT_LABEL_AI,
    DIM,
    ERROR_FG,
    MUTED_FG,
    PRIMARY_FG,
    SUCCESS_FG,
    WARNING_FG,
    colorize,
    colors_enabled,
)
from codecollab.utils.path_utils import resolve_base_dir

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_TURN_FAILED = 1
EXIT_CONFIG = 2


# =====================================================================
#  LOGGING
# =====================================================================

def _setup_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    handlers = [logging.FileHandler(log_file, encoding="utf-8")] if log_file else None
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )
    # HTTP client chatter stays out of the terminal unless debugging
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("openai").setLevel(logging.WARNING)


# =====================================================================
#  FEEDBACK RENDERING
# =====================================================================

class ConsoleRenderer:
    """Prints feedback events to the terminal."""

    def __init__(self, stream=None, show_raw: bool = False, color: Optional[bool] = None):
        self.stream = stream or sys.stdout
        self.show_raw = show_raw
        self.color = colors_enabled(self.stream) if color is None else color

    def _print(self, text: str) -> None:
        print(text, file=self.stream, flush=True)

    def _c(self, text: str, color: str, style: str = "") -> str:
        return colorize(text, color, style, enabled=self.color)

    def __call__(self, event: FeedbackEvent) -> None:
        c = self._c

        if event.type is FeedbackType.ACTION:
            mark = c("  ✔", SUCCESS_FG) if event.ok else c("  ✖", WARNING_FG)
            self._print(f"{mark} {event.content}")
        elif event.type is FeedbackType.SUMMARY:
            self._print(f"{c('AI ▸', CHAT_LABEL_AI)} {c(event.content, ACCENT_FG)}")
        elif event.type is FeedbackType.RESPONSE:
            if self.show_raw:
                self._print(c(event.content, MUTED_FG, DIM))
            self._print(c("Done.", MUTED_FG))
        elif event.type is FeedbackType.ERROR:
            self._print(c(f"Error: {event.content}", ERROR_FG))
            if event.detail:
                self._print(c(event.detail, MUTED_FG, DIM))


# =====================================================================
#  HELPERS
# =====================================================================

def _load_settings(args: argparse.Namespace) -> CollabSettings:
    return load_settings(
        config_path=Path(args.config) if args.config else None,
        model=args.model,
        poll_interval=args.poll_interval,
    )


def _workspace(args: argparse.Namespace) -> Path:
    return resolve_base_dir(cli_arg=args.dir)


def _build_orchestrator(args: argparse.Namespace, settings: CollabSettings) -> SessionOrchestrator:
    renderer = ConsoleRenderer(show_raw=args.show_raw)
    return SessionOrchestrator.from_settings(
        _workspace(args),
        settings,
        feedback=CallbackFeedbackChannel(renderer),
    )


def _parse_chat_line(line: str) -> PromptRequest:
    """`/file <path> <prompt>` targets a file; anything else is a plain prompt."""
    if line.startswith("/file "):
        _, _, rest = line.partition(" ")
        path, _, text = rest.strip().partition(" ")
        return PromptRequest(text=text.strip() or f"Improve {path}", file_path=path)
    return PromptRequest(text=line)


# =====================================================================
#  COMMANDS
# =====================================================================

async def _chat_loop(orchestrator: SessionOrchestrator) -> None:
    marker = colorize("you ▸ ", PRIMARY_FG, enabled=colors_enabled())
    print(colorize(
        f"codecollab {__version__} — workspace {orchestrator.workspace_root}\n"
        "Commands: /file <path> <prompt>, /reset, /exit",
        MUTED_FG,
        enabled=colors_enabled(),
    ))

    while True:
        try:
            line = await asyncio.to_thread(input, marker)
        except EOFError:
            break

        line = line.strip()
        if not line:
            continue
        if line in ("/exit", "/quit", "exit", "quit"):
            break
        if line == "/reset":
            orchestrator.reset_session()
            print(colorize("Session reset; the next prompt starts a new thread.", MUTED_FG, enabled=colors_enabled()))
            continue

        try:
            await orchestrator.handle_prompt(_parse_chat_line(line))
        except asyncio.CancelledError:
            orchestrator.cancel()
            raise


def cmd_chat(args: argparse.Namespace) -> int:
    try:
        settings = _load_settings(args)
        orchestrator = _build_orchestrator(args, settings)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    try:
        asyncio.run(_chat_loop(orchestrator))
    except KeyboardInterrupt:
        print()
    return EXIT_OK


def cmd_ask(args: argparse.Namespace) -> int:
    try:
        settings = _load_settings(args)
        orchestrator = _build_orchestrator(args, settings)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    request = PromptRequest(text=args.prompt, file_path=args.file)
    try:
        result = asyncio.run(orchestrator.handle_prompt(request))
    except KeyboardInterrupt:
        return EXIT_TURN_FAILED
    return EXIT_OK if result.ok else EXIT_TURN_FAILED


def cmd_files(args: argparse.Namespace) -> int:
    try:
        settings = _load_settings(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    for rel in asyncio.run(list_workspace_files(_workspace(args), ignore=settings.tree_ignore)):
        print(rel)
    return EXIT_OK


def cmd_tree(args: argparse.Namespace) -> int:
    try:
        settings = _load_settings(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    tree = asyncio.run(build_file_tree(_workspace(args), ignore=settings.tree_ignore))
    print(json.dumps(tree.to_dict(), indent=2))
    return EXIT_OK


def cmd_reset(args: argparse.Namespace) -> int:
    try:
        settings = _load_settings(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    root = _workspace(args)
    if SessionStore(storage_dir=settings.state_dir).forget(root):
        print(f"Forgot session for {root}")
    else:
        print(f"No session stored for {root}")
    return EXIT_OK


# =====================================================================
#  CLI ENTRY WITH SUBCOMMANDS
# =====================================================================

def _create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="codecollab",
        description="Chat with a code assistant that creates and edits files in your workspace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  codecollab                              # Interactive chat in the current directory
  codecollab --dir ~/proj ask "add a README"
  codecollab ask "fix the bug" --file src/app.js
  codecollab files                        # List workspace files
  codecollab reset                        # Start a fresh remote thread
        """
    )

    # Global options
    parser.add_argument("--version", action="version", version=f"codecollab {__version__}")
    parser.add_argument("--dir", type=str, help="Workspace root (default: current directory)")
    parser.add_argument("--config", type=str, help="Path to config.json")
    parser.add_argument("--model", type=str, help="Override the model from config")
    parser.add_argument("--poll-interval", type=float, help="Seconds between run status checks")
    parser.add_argument("--show-raw", action="store_true", help="Print the raw assistant reply")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=str, help="Write logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("chat", help="Interactive chat (default)")

    parser_ask = subparsers.add_parser("ask", help="Send a single prompt")
    parser_ask.add_argument("prompt", help="Prompt text")
    parser_ask.add_argument("--file", type=str, help="Workspace file to include for editing")

    subparsers.add_parser("files", help="List workspace files")
    subparsers.add_parser("tree", help="Print the workspace file tree as JSON")
    subparsers.add_parser("reset", help="Forget the cached assistant/thread for this workspace")

    return parser


def main(argv=None) -> int:
    """Main entry point with subcommand routing."""
    parser = _create_parser()
    args = parser.parse_args(argv)
    _setup_logging(debug=args.debug, log_file=args.log_file)
    logger.debug(f"codecollab {__version__}: command={args.command or 'chat'}")

    if args.command == "ask":
        return cmd_ask(args)
    elif args.command == "files":
        return cmd_files(args)
    elif args.command == "tree":
        return cmd_tree(args)
    elif args.command == "reset":
        return cmd_reset(args)
    elif args.command in ("chat", None):
        return cmd_chat(args)
    else:
        parser.print_help()
        return EXIT_TURN_FAILED


if __name__ == "__main__":
    sys.exit(main() or 0)

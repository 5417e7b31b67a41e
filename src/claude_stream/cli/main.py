"""
claude-stream CLI.

Commands:
  claude-stream query <prompt>   One-shot query
  claude-stream chat             Interactive REPL chat
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

try:
    import click
    from rich.console import Console
    from rich.markup import escape
except ImportError:
    raise SystemExit("CLI requires extras: pip install claude-stream[cli]")

from claude_stream._version import __version__
from claude_stream.options import ClaudeAgentOptions

console = Console()
CONFIG_FILE = Path.home() / ".claude-stream" / "config.json"
CONFIG_KEYS = ("model", "cli_path", "cwd", "max_turns")


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def build_options(overrides: dict[str, Any], stderr: Optional[Any] = None) -> ClaudeAgentOptions:
    """Persisted config first, then non-None command-line overrides."""
    cfg = {k: v for k, v in _load_config().items() if k in CONFIG_KEYS}
    cfg.update({k: v for k, v in overrides.items() if v is not None})
    return ClaudeAgentOptions(stderr=stderr, **cfg)


def print_stderr(line: str) -> None:
    console.print(f"[dim]{escape(line)}[/dim]", highlight=False)


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """claude-stream CLI: talk to Claude Code over stream-json."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


from claude_stream.cli.chat import chat_cmd, query_cmd

main.add_command(chat_cmd)
main.add_command(query_cmd)


if __name__ == "__main__":
    main()

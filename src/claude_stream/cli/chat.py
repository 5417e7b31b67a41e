"""CLI: claude-stream chat, claude-stream query"""

import json
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from claude_stream.client import ClaudeSDKClient
from claude_stream.errors import ClaudeStreamError
from claude_stream.models.messages import (
    AssistantMessage,
    Message,
    ResultMessage,
    SystemMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from claude_stream.query import query

console = Console()


def _build_options(**overrides):
    from claude_stream.cli.main import build_options, print_stderr
    return build_options(overrides, stderr=print_stderr)


def _run(coro):
    from claude_stream.cli.main import _run
    return _run(coro)


def render_message(message: Message) -> None:
    if isinstance(message, AssistantMessage):
        for block in message.content:
            if isinstance(block, TextBlock):
                console.print(f"[green]Claude:[/green] {escape(block.text)}", highlight=False)
            elif isinstance(block, ThinkingBlock):
                console.print(f"[dim italic]{escape(block.thinking)}[/dim italic]", highlight=False)
            elif isinstance(block, ToolUseBlock):
                console.print(f"[yellow]Tool:[/yellow] {block.name} {escape(json.dumps(block.input))}", highlight=False)
            elif isinstance(block, ToolResultBlock):
                marker = "[red]error[/red]" if block.is_error else "[dim]result[/dim]"
                console.print(f"{marker} {block.tool_use_id}")
    elif isinstance(message, SystemMessage):
        console.print(f"[dim]\\[system: {message.subtype}][/dim]")
    elif isinstance(message, ResultMessage):
        cost = f"${message.total_cost_usd:.4f}" if message.total_cost_usd is not None else "n/a"
        console.print(
            f"[dim]\\[{message.subtype}: {message.num_turns} turns, "
            f"{message.duration_ms} ms, cost {cost}][/dim]"
        )


def _common_options(fn):
    fn = click.option("--model", default=None)(fn)
    fn = click.option("--max-turns", type=int, default=None)(fn)
    fn = click.option("--cwd", default=None, type=click.Path(file_okay=False))(fn)
    fn = click.option("--cli-path", default=None)(fn)
    return fn


@click.command("query")
@click.argument("prompt")
@_common_options
@click.option("--json-output", "--json", is_flag=True)
def query_cmd(prompt: str, model: Optional[str], max_turns: Optional[int],
              cwd: Optional[str], cli_path: Optional[str], json_output: bool):
    """Send a one-shot prompt."""

    async def _query():
        options = _build_options(model=model, max_turns=max_turns, cwd=cwd, cli_path=cli_path)
        async for message in query(prompt, options=options):
            if json_output:
                click.echo(json.dumps(message.model_dump(), ensure_ascii=False))
            else:
                render_message(message)

    try:
        _run(_query())
    except ClaudeStreamError as e:
        console.print(f"[red]{e}[/red]", highlight=False)
        raise SystemExit(1)


@click.command("chat")
@_common_options
def chat_cmd(model: Optional[str], max_turns: Optional[int], cwd: Optional[str], cli_path: Optional[str]):
    """Interactive chat with Claude."""

    async def _chat():
        options = _build_options(model=model, max_turns=max_turns, cwd=cwd, cli_path=cli_path)
        async with ClaudeSDKClient(options) as client:
            console.print("[cyan]Type your message (Ctrl+C to exit)[/cyan]\n")
            try:
                while True:
                    msg = click.prompt("You", prompt_suffix=": ")
                    if msg.lower() in ("/quit", "/exit"):
                        break
                    await client.query(msg)
                    async for message in client.receive_response():
                        render_message(message)
            except (KeyboardInterrupt, EOFError, click.exceptions.Abort):
                pass

    try:
        _run(_chat())
    except ClaudeStreamError as e:
        console.print(f"[red]{e}[/red]", highlight=False)
        raise SystemExit(1)

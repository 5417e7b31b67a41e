"""
Worker discovery and argv construction.
"""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from claude_stream.errors import CLINotFoundError
from claude_stream.options import ClaudeAgentOptions

CLI_NAME = "claude"

INSTALL_GUIDANCE = (
    "Claude Code not found. Install with:\n"
    "  npm install -g @anthropic-ai/claude-code\n"
    "\nIf already installed locally, try:\n"
    '  export PATH="$HOME/node_modules/.bin:$PATH"\n'
    "\nOr pass cli_path= in ClaudeAgentOptions"
)


def fallback_locations(home: Optional[Path] = None) -> list[Path]:
    home = home or Path.home()
    return [
        home / ".npm-global" / "bin" / CLI_NAME,
        Path("/usr/local/bin") / CLI_NAME,
        home / ".local" / "bin" / CLI_NAME,
        home / "node_modules" / ".bin" / CLI_NAME,
        home / ".yarn" / "bin" / CLI_NAME,
    ]


def find_cli() -> str:
    """Locate the claude executable on PATH, then in the usual npm/yarn install dirs."""
    found = shutil.which(CLI_NAME)
    if found:
        return found
    for location in fallback_locations():
        if location.is_file():
            return str(location)
    raise CLINotFoundError(INSTALL_GUIDANCE)


def build_command(cli_path: str, options: ClaudeAgentOptions, prompt: Optional[str] = None) -> list[str]:
    """Build the worker argv. `prompt=None` selects streaming (stdin) input mode."""
    cmd = [str(cli_path), "--output-format", "stream-json", "--verbose"]

    if options.system_prompt is not None:
        cmd.extend(["--system-prompt", options.system_prompt])
    if options.append_system_prompt is not None:
        cmd.extend(["--append-system-prompt", options.append_system_prompt])
    if options.allowed_tools:
        cmd.extend(["--allowedTools", ",".join(options.allowed_tools)])
    if options.max_turns is not None:
        cmd.extend(["--max-turns", str(options.max_turns)])
    if options.disallowed_tools:
        cmd.extend(["--disallowedTools", ",".join(options.disallowed_tools)])
    if options.model:
        cmd.extend(["--model", options.model])
    if options.permission_prompt_tool_name:
        cmd.extend(["--permission-prompt-tool", options.permission_prompt_tool_name])
    if options.permission_mode:
        cmd.extend(["--permission-mode", options.permission_mode])
    if options.continue_conversation:
        cmd.append("--continue")
    if options.resume:
        cmd.extend(["--resume", options.resume])
    if options.settings:
        cmd.extend(["--settings", options.settings])
    for directory in options.add_dirs:
        cmd.extend(["--add-dir", str(directory)])

    if isinstance(options.mcp_servers, dict):
        if options.mcp_servers:
            cmd.extend(["--mcp-config", json.dumps({"mcpServers": options.mcp_servers})])
    elif options.mcp_servers:
        cmd.extend(["--mcp-config", str(options.mcp_servers)])

    if options.include_partial_messages:
        cmd.append("--include-partial-messages")
    if options.fork_session:
        cmd.append("--fork-session")
    if options.agents:
        cmd.extend(["--agents", json.dumps(options.agents)])

    sources = ",".join(options.setting_sources) if options.setting_sources is not None else ""
    cmd.extend(["--setting-sources", sources])

    for flag, value in options.extra_args.items():
        cmd.append(f"--{flag}")
        if value is not None:
            cmd.append(value)

    if prompt is None:
        cmd.extend(["--input-format", "stream-json"])
    else:
        cmd.extend(["--print", "--", prompt])
    return cmd


def build_env(options: ClaudeAgentOptions, version: str) -> dict[str, str]:
    env = dict(os.environ)
    env.update(options.env)
    env["CLAUDE_CODE_ENTRYPOINT"] = "sdk-py"
    env["CLAUDE_AGENT_SDK_VERSION"] = version
    if options.cwd is not None:
        env["PWD"] = str(options.cwd)
    return env

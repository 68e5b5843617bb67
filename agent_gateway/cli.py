from __future__ import annotations

import argparse
import asyncio
import os
import sys
from typing import TextIO
import uuid

import uvicorn

from agent_gateway.agents.factory import build_agent_runtime
from agent_gateway.agents.runtime import AgentRuntime
from agent_gateway.core.logging import configure_logging
from agent_gateway.core.settings import Settings, get_settings

REPL_COMMANDS = "Commands: /exit, /quit, /reset, /thread"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="agent-gateway", description="Agent gateway server and terminal client")
    subcommands = parser.add_subparsers(dest="command", required=True)

    subcommands.add_parser("serve", help="Run the HTTP streaming server")

    chat = subcommands.add_parser("chat", help="Run agent turns in the terminal")
    chat.add_argument("-i", "--interactive", action="store_true", help="Start a REPL session")
    chat.add_argument("prompt", nargs="*", help="Prompt text; read from stdin when omitted")
    return parser.parse_args(argv)


async def stream_turn(
    runtime: AgentRuntime,
    *,
    prompt: str,
    debug: bool,
    source: str,
    thread_id: str | None = None,
    stdout: TextIO = sys.stdout,
    stderr: TextIO = sys.stderr,
) -> None:
    async for event in runtime.run(prompt, thread_id=thread_id, metadata={"source": source}):
        if event["type"] == "token":
            stdout.write(event["text"])
            stdout.flush()
        elif event["type"] == "debug" and debug:
            stderr.write(f"[DEBUG] {event['message']}\n")
        elif event["type"] == "tool_start" and debug:
            stderr.write(f"[TOOL_START] {event['name']}\n")
        elif event["type"] == "tool_end" and debug:
            stderr.write(f"[TOOL_END] {event['name']}\n")
        elif event["type"] == "error":
            stderr.write(f"[ERROR] {event['message']}\n")
    stdout.write("\n")


async def _run_interactive(runtime: AgentRuntime, *, debug: bool) -> None:
    thread_id = os.environ.get("THREAD_ID", "").strip() or str(uuid.uuid4())
    sys.stderr.write(f"REPL started. threadId={thread_id}\n{REPL_COMMANDS}\n")

    while True:
        try:
            line = (await asyncio.to_thread(input, "> ")).strip()
        except EOFError:
            return
        if not line:
            continue
        if line in ("/exit", "/quit"):
            return
        if line == "/thread":
            sys.stderr.write(f"{thread_id}\n")
            continue
        if line == "/reset":
            thread_id = str(uuid.uuid4())
            sys.stderr.write(f"threadId reset: {thread_id}\n")
            continue

        await stream_turn(runtime, prompt=line, debug=debug, source="cli-repl", thread_id=thread_id)


def _read_stdin() -> str:
    if sys.stdin.isatty():
        return ""
    return sys.stdin.read().strip()


async def _chat(settings: Settings, args: argparse.Namespace) -> int:
    prompt = " ".join(args.prompt).strip()
    if not args.interactive and not prompt:
        prompt = _read_stdin()
        if not prompt:
            sys.stderr.write('Usage: agent-gateway chat "your prompt"\n       agent-gateway chat --interactive\n')
            return 1

    runtime = await build_agent_runtime(settings)
    if args.interactive:
        await _run_interactive(runtime, debug=settings.debug)
    else:
        thread_id = os.environ.get("THREAD_ID", "").strip() or None
        await stream_turn(runtime, prompt=prompt, debug=settings.debug, source="cli", thread_id=thread_id)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    configure_logging(settings.effective_log_level)

    if args.command == "serve":
        uvicorn.run(
            "agent_gateway.main:app_factory",
            factory=True,
            host=settings.host,
            port=settings.port,
            log_config=None,
        )
        return 0

    return asyncio.run(_chat(settings, args))


if __name__ == "__main__":
    sys.exit(main())

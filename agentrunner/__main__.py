"""
Run one agent call from the terminal.

Usage:
    python -m agentrunner "Summarize my meeting notes"
    python -m agentrunner --provider openrouter --model openai/gpt-4o-mini "..."
    python -m agentrunner --vault ~/notes --attach daily/2024-05-01.md "What did I do?"
    python -m agentrunner --file diagram.png "Explain this diagram"
    python -m agentrunner --system "You are terse." --single "Define entropy"
"""

import argparse
import asyncio
import dataclasses
import logging
from pathlib import Path
from typing import List, Optional

from rich.logging import RichHandler

from .client import AgentRunner
from .errors import AgentError
from .functions import FunctionRegistry
from .rich_printer import RichAgentPrinter, console
from .settings import Settings


def build_vault_registry(vault: Path) -> FunctionRegistry:
    """Small registry with read-only access to a folder of Markdown notes."""
    registry = FunctionRegistry()
    root = vault.resolve()

    def resolve(relative: str) -> Optional[Path]:
        # None when the path escapes the vault
        target = (root / relative).resolve()
        if target != root and root not in target.parents:
            return None
        return target

    @registry.tool(
        "List the Markdown notes in a folder of the vault.",
        {
            "type": "OBJECT",
            "properties": {
                "folder": {"type": "STRING", "description": "Folder relative to the vault root. Empty for the root."},
            },
        },
    )
    def list_notes(folder: str = "") -> dict:
        folder_path = resolve(folder)
        if folder_path is None:
            return {"error": f"Folder is outside the vault: {folder}"}
        notes = sorted(str(p.relative_to(root)) for p in folder_path.rglob("*.md"))
        return {"folder": folder, "notes": notes}

    @registry.tool(
        "Read the content of a note.",
        {
            "type": "OBJECT",
            "properties": {
                "path": {"type": "STRING", "description": "Path of the note relative to the vault root."},
            },
            "required": ["path"],
        },
    )
    def read_note(path: str) -> dict:
        note_path = resolve(path)
        if note_path is None:
            return {"error": f"Note is outside the vault: {path}"}
        return {"path": path, "content": note_path.read_text(encoding="utf-8")}

    return registry


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agentrunner", description="Run one agent call.")
    parser.add_argument("prompt", help="User message")
    parser.add_argument("--provider", choices=["google", "openrouter", "local"], help="Override AGENT_PROVIDER")
    parser.add_argument("--model", help="Override AGENT_MODEL")
    parser.add_argument("--vault", type=Path, default=Path("."), help="Folder of notes the agent can read")
    parser.add_argument("--attach", action="append", default=[], help="Note path to attach (repeatable)")
    parser.add_argument("--file", action="append", default=[], help="File to send inline (repeatable)")
    parser.add_argument("--single", action="store_true", help="Single model call without tools or history")
    parser.add_argument("--system", default="You are a helpful assistant.", help="System prompt for --single")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log turn progress")
    return parser


async def run(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    overrides = {k: v for k, v in (("provider", args.provider), ("model", args.model)) if v}
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    runner = AgentRunner(build_vault_registry(args.vault), settings)

    try:
        if args.single:
            text = await runner.call_model(args.system, args.prompt, args.file)
            console.print(text)
        else:
            printer = RichAgentPrinter(title=f"{settings.provider} / {settings.model}")
            attachments = [{"path": path} for path in args.attach]
            await printer.print_agent(
                runner.call_agent([], args.prompt, attachments, args.file, printer)
            )
    except AgentError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.WARNING, format="%(message)s", handlers=[RichHandler(console=console)])
        logging.getLogger("agentrunner").setLevel(logging.DEBUG)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())

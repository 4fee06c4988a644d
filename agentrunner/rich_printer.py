"""
Rich printer for displaying a streaming agent invocation in the terminal.
"""
import json
from typing import Any, Awaitable, List, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from .types import ToolCall

console = Console()


class RichAgentPrinter:
    """
    Displays agent output as it streams in, using rich.

    An instance is the `on_update` callback itself: pass it to
    `AgentRunner.call_agent` and await the call through `print_agent`.

    Attributes:
        title: Title for the display panel
        show_reasoning: Whether to show the model's thoughts
        show_tool_calls: Whether to show executed tool calls
        code_theme: Theme for code blocks
        inline_code_theme: Theme for inline code
        refresh_rate: Refresh rate for Live display
        border_style: Border style while streaming
    """

    def __init__(
        self,
        title: str = "Agent",
        show_reasoning: bool = True,
        show_tool_calls: bool = True,
        code_theme: str = "coffee",
        inline_code_theme: str = "monokai",
        refresh_rate: int = 30,
        border_style: str = "blue",
    ):
        self.title = title
        self.show_reasoning = show_reasoning
        self.show_tool_calls = show_tool_calls
        self.code_theme = code_theme
        self.inline_code_theme = inline_code_theme
        self.refresh_rate = refresh_rate
        self.border_style = border_style
        self._live: Optional[Live] = None
        self.reset()

    def reset(self) -> None:
        self._full_text = ""
        self._reasoning = ""
        self._tool_calls: List[ToolCall] = []

    def __call__(self, text: str, reasoning: str, tool_calls: List[ToolCall]) -> None:
        """Append one update and refresh the display."""
        self._full_text += text
        if reasoning:
            self._reasoning += reasoning
        self._tool_calls.extend(tool_calls)
        if self._live is not None:
            self._update_display(is_final=False)

    async def print_agent(self, invocation: Awaitable[Any]) -> str:
        """
        Await an agent invocation while showing its output live.

        Args:
            invocation: The awaitable returned by `call_agent(..., on_update=self)`.

        Returns:
            The full text of the answer.
        """
        self.reset()
        with Live(Panel("", border_style=self.border_style), refresh_per_second=self.refresh_rate, console=console) as live:
            self._live = live
            try:
                await invocation
            finally:
                self._update_display(is_final=True)
                self._live = None
        return self._full_text

    def _update_display(self, is_final: bool) -> None:
        """Update the Live display with current content."""
        title = "[bold]Final Response[/bold]" if is_final else f"[bold]{self.title}[/bold]"
        self._live.update(
            Panel(
                self._build_content(),
                title=title,
                border_style="green" if is_final else self.border_style,
                padding=(1, 2),
            )
        )

    def _build_content(self) -> Any:
        renderables = []

        if self.show_reasoning and self._reasoning.strip():
            renderables.append(Panel(
                Text(self._reasoning, style="dim italic"),
                title="[bold]Thoughts[/bold]",
                border_style="dim",
            ))

        if self.show_tool_calls and self._tool_calls:
            calls_json = json.dumps(self._tool_calls, indent=2, default=str)
            renderables.append(Panel(
                Syntax(calls_json, "json", theme="lightbulb", background_color="default"),
                title=f"[bold]Tool calls ({len(self._tool_calls)})[/bold]",
                border_style="dim",
            ))

        if self._full_text.strip():
            renderables.append(Markdown(
                self._full_text,
                code_theme=self.code_theme,
                inline_code_theme=self.inline_code_theme,
            ))
        elif not renderables:
            return Text("(waiting for response...)", style="dim italic")

        return Group(*renderables)

    def get_full_text(self) -> str:
        return self._full_text

    def get_reasoning(self) -> str:
        return self._reasoning

    def get_tool_calls(self) -> List[ToolCall]:
        return list(self._tool_calls)

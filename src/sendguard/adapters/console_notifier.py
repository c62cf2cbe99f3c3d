"""Terminal notification adapter.

Renders error notices with rich for hosts that run in a terminal, such as
relay hooks or local send scripts.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text


def render_notice(title: str, message: str) -> Panel:
    """Build the error panel shown for one notice."""

    body = Text(message)
    return Panel(body, title=Text(title, style="bold red"), border_style="red", expand=False)


class ConsoleNotifier:
    """Notifier adapter that prints notices to a rich console."""

    def __init__(self, console: Optional[Console] = None) -> None:
        # Notices are errors, so they go to stderr unless a console is given.
        self._console = console or Console(stderr=True)

    async def notify(self, title: str, message: str) -> None:
        self._console.print(render_notice(title, message))

from __future__ import annotations

import asyncio

from rich.console import Console

from sendguard.adapters.console_notifier import ConsoleNotifier, render_notice


def test_notice_is_rendered_with_title_and_message() -> None:
    console = Console(record=True, width=80)
    notifier = ConsoleNotifier(console)

    asyncio.run(notifier.notify("Send blocked", "One or more email addresses are invalid."))

    output = console.export_text()
    assert "Send blocked" in output
    assert "One or more email addresses are invalid." in output


def test_render_notice_title() -> None:
    panel = render_notice("Audit copy not saved", "down")
    assert panel.title.plain == "Audit copy not saved"

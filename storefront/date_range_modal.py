"""Date range entry modal for the history view."""

from __future__ import annotations

from datetime import date

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from storefront.history import parse_day

DateRange = tuple[date | None, date | None]


class DateRangeModal(ModalScreen[DateRange | None]):
    """Prompt for an inclusive start/end day. Blank fields leave that side open."""

    CSS = """
    DateRangeModal {
        align: center middle;
        background: $background 60%;
    }

    #date-range-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #date-range-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    .date-range-field {
        border: heavy $surface;
        padding: 0 1;
        color: white;
    }

    .date-range-field.-focused {
        border: heavy $secondary;
    }

    #date-range-error {
        color: #ffb3b3;
        margin: 1 0;
    }

    #date-range-help {
        color: #dddddd;
    }
    """

    _FIELDS = ("start", "end")

    def __init__(self, start: date | None = None, end: date | None = None) -> None:
        super().__init__()
        self.values = {
            "start": start.isoformat() if start else "",
            "end": end.isoformat() if end else "",
        }
        self.field = "start"
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="date-range-dialog"):
            yield Static("Filter History by Date", id="date-range-title")
            yield Static(id="date-range-start", classes="date-range-field")
            yield Static(id="date-range-end", classes="date-range-field")
            yield Static(id="date-range-error")
            yield Static(
                "YYYY-MM-DD. Tab switch field. Enter apply. Backspace delete. Esc cancel.",
                id="date-range-help",
            )

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key in {"tab", "shift+tab", "up", "down"}:
            self.field = "end" if self.field == "start" else "start"
            self._refresh_content()
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            self.values[self.field] = self.values[self.field][:-1]
            self.error = ""
            self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character and (event.character.isdigit() or event.character == "-"):
            if len(self.values[self.field]) < 10:
                self.values[self.field] += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _confirm(self) -> None:
        parsed: dict[str, date | None] = {}
        for name in self._FIELDS:
            raw = self.values[name].strip()
            if not raw:
                parsed[name] = None
                continue
            try:
                parsed[name] = parse_day(raw)
            except ValueError:
                self.error = f"{name.title()} date must look like 2024-01-31."
                self._refresh_content()
                return

        start, end = parsed["start"], parsed["end"]
        if start is not None and end is not None and start > end:
            self.error = "Start date is after end date."
            self._refresh_content()
            return

        self.dismiss((start, end))

    def _refresh_content(self) -> None:
        for name in self._FIELDS:
            widget = self.query_one(f"#date-range-{name}", Static)
            widget.update(f"{name.title():<5}: {self.values[name]}")
            widget.set_class(self.field == name, "-focused")
        self.query_one("#date-range-error", Static).update(self.error or "")

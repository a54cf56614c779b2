"""Digit entry modal used for the operator PIN and the delivery fee."""

from __future__ import annotations

from typing import Callable

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

# Returns an error message, or None when the value is acceptable.
Validator = Callable[[str], str | None]


class NumberEntryModal(ModalScreen[str | None]):
    """Prompt for a short run of digits and dismiss with it once it validates."""

    CSS = """
    NumberEntryModal {
        align: center middle;
        background: $background 60%;
    }

    #number-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #number-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #number-prompt {
        color: white;
        margin-bottom: 1;
    }

    #number-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #number-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #number-help {
        color: #dddddd;
    }
    """

    def __init__(
        self,
        title: str,
        prompt: str,
        validate: Validator,
        initial: str = "",
        max_length: int = 6,
        masked: bool = False,
    ) -> None:
        super().__init__()
        self.title_text = title
        self.prompt_text = prompt
        self._validate = validate
        self.value = initial
        self.max_length = max_length
        self.masked = masked
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="number-dialog"):
            yield Static(self.title_text, id="number-title")
            yield Static(self.prompt_text, id="number-prompt")
            yield Static(id="number-value")
            yield Static(id="number-error")
            yield Static("Digits only. Enter confirm. Backspace delete. Esc cancel.", id="number-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character and event.character.isdigit():
            if len(self.value) < self.max_length:
                self.value += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _confirm(self) -> None:
        error = self._validate(self.value)
        if error:
            self.error = error
            if self.masked:
                self.value = ""
            self._refresh_content()
            return

        self.dismiss(self.value)

    def _refresh_content(self) -> None:
        shown = "•" * len(self.value) if self.masked else self.value
        self.query_one("#number-value", Static).update(shown or "")
        self.query_one("#number-error", Static).update(self.error or "")

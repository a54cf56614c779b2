"""Backup restore modal: path entry followed by an explicit confirmation."""

from __future__ import annotations

from pathlib import Path

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static


class RestoreBackupModal(ModalScreen[Path | None]):
    """Ask for a backup file, then ask again before anything is replaced."""

    CSS = """
    RestoreBackupModal {
        align: center middle;
        background: $background 60%;
    }

    #restore-dialog {
        width: 72;
        height: auto;
        border: round $warning;
        background: $panel;
        padding: 1 2;
    }

    #restore-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #restore-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #restore-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #restore-help {
        color: #dddddd;
    }
    """

    def __init__(self, initial_path: str = "") -> None:
        super().__init__()
        self.value = initial_path
        self.error = ""
        self.confirming = False

    def compose(self) -> ComposeResult:
        with Container(id="restore-dialog"):
            yield Static("Restore Backup", id="restore-title")
            yield Static(id="restore-value")
            yield Static(id="restore-error")
            yield Static(id="restore-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if self.confirming:
            if event.character in {"y", "Y"}:
                self.dismiss(Path(self.value.strip()).expanduser())
            elif event.character in {"n", "N"}:
                self.confirming = False
                self._refresh_content()
            event.stop()
            return

        if event.key == "enter":
            self._request_confirmation()
            event.stop()
            return

        if event.key == "backspace":
            self.value = self.value[:-1]
            self.error = ""
            self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            self.value += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _request_confirmation(self) -> None:
        path = Path(self.value.strip()).expanduser()
        if not self.value.strip():
            self.error = "Backup path is required."
        elif not path.is_file():
            self.error = f"No such file: {path}"
        else:
            self.confirming = True
        self._refresh_content()

    def _refresh_content(self) -> None:
        value_widget = self.query_one("#restore-value", Static)
        error_widget = self.query_one("#restore-error", Static)
        help_widget = self.query_one("#restore-help", Static)
        value_widget.update(f"{self.value}|" if not self.confirming else self.value)
        if self.confirming:
            error_widget.update("This replaces menu, orders and settings found in the backup. Continue?")
            help_widget.update("y apply. n go back. Esc cancel.")
        else:
            error_widget.update(self.error or "")
            help_widget.update("Type the backup file path. Enter continue. Esc cancel.")

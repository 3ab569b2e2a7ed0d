"""Textual app hosting an editor session."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from rich.style import Style
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.widget import Widget

from rune.buffer.text import cluster_width, split_graphemes
from rune.session import EditorSession
from rune.view import RenderDiff
from rune.view.frame import FILLER, PROMPT, STATUS, TEXT

from .controller import TextualEditorController, TextualUIHooks

ROW_STYLES: Dict[str, Style] = {
    TEXT: Style(),
    FILLER: Style(color="blue", bold=True),
    STATUS: Style(reverse=True),
    PROMPT: Style(),
}
CURSOR_STYLE = Style(reverse=True)


def cell_to_index(row: str, column: int) -> int:
    """Character index of the cluster drawn at screen cell ``column``."""

    cells = 0
    index = 0
    for cluster in split_graphemes(row):
        width = cluster_width(cluster, cells)
        if cells + width > column:
            return index
        cells += width
        index += len(cluster)
    return index + (column - cells)


class EditorRows(Widget):
    """Draws the rows of the last frame and the cursor cell."""

    DEFAULT_CSS = """
    EditorRows {
        width: 1fr;
        height: 1fr;
    }
    """

    can_focus = True

    def __init__(self) -> None:
        super().__init__(id="editor-rows")
        self._rows: List[Tuple[str, str]] = []
        self._cursor: Tuple[int, int] = (0, 0)

    def apply(self, diff: RenderDiff) -> None:
        if diff.full:
            self._rows = []
        for update in diff.updates:
            while len(self._rows) <= update.row:
                self._rows.append(("", TEXT))
            self._rows[update.row] = (update.text, update.style)
        self._cursor = diff.cursor
        self.refresh()

    def render(self) -> Text:
        output = Text(no_wrap=True, overflow="crop")
        cursor_row, cursor_col = self._cursor
        for index, (row, style) in enumerate(self._rows):
            line = Text(row, style=ROW_STYLES.get(style, Style()), no_wrap=True)
            if index == cursor_row:
                start = cell_to_index(row, cursor_col)
                line.pad_right(max(start + 1 - len(row), 0))
                line.stylize(CURSOR_STYLE, start, start + 1)
            if index:
                output.append("\n")
            output.append_text(line)
        return output


class RuneApp(App[None]):
    """Full-screen editor: one row widget, keys go to the session."""

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    def __init__(self, session: EditorSession) -> None:
        super().__init__()
        self.session = session
        self.controller: Optional[TextualEditorController] = None
        self._rows_widget = EditorRows()

    def compose(self) -> ComposeResult:
        yield self._rows_widget

    def on_mount(self) -> None:
        hooks = TextualUIHooks(
            draw=self._rows_widget.apply,
            quit=self.exit,
            handle_event=self._handle_event,
        )
        self.controller = TextualEditorController(self.session, hooks)
        self.controller.resize(self.size.height, self.size.width)
        self._rows_widget.focus()
        self.set_interval(0.05, self._process_timeouts)

    def on_resize(self, event: events.Resize) -> None:
        if self.controller:
            self.controller.resize(event.size.height, event.size.width)

    def on_key(self, event: events.Key) -> None:
        if not self.controller:
            return
        self.controller.handle_textual_key(event.key, character=event.character)
        event.stop()
        event.prevent_default()

    async def action_quit(self) -> None:
        """Ctrl-Q goes through the session, which guards modified buffers."""

        if self.controller:
            self.controller.handle_textual_key("ctrl+q")
        else:
            self.exit()

    def _process_timeouts(self) -> None:
        if self.controller:
            self.controller.process_timeouts()

    def _handle_event(self, name: str, payload: object | None) -> None:
        self.log.debug(f"{name}: {payload!r}")


__all__ = ["EditorRows", "RuneApp"]

"""One editing session: a buffer, the mode machine and the view."""

from __future__ import annotations

from pathlib import Path
import time
from typing import Dict, Mapping, Optional

from rune.buffer import Buffer
from rune.buffer.buffer import DEFAULT_NAME
from rune.config import EditorConfig
from rune.errors import DecodeError, SaveError
from rune.files import read_document, write_document
from rune.keymaps import KeymapRegistry, KeymapResolver, load_default_keymaps
from rune.modes import (
    CommandMode,
    InsertMode,
    KeyInput,
    ModeBus,
    ModeContext,
    ModeName,
    ModeResult,
    NormalMode,
)
from rune.modes.mode_manager import Clock, ModeManager
from rune.runtime import telemetry
from rune.view import RenderDiff, TerminalSize, ViewModel

DEFAULT_SIZE = TerminalSize(rows=24, cols=80)

# Keys handled by the session itself, in every mode.
QUIT_KEY = KeyInput(key="q", modifiers=("ctrl",))
SAVE_KEY = KeyInput(key="s", modifiers=("ctrl",))
QUIT_WARNING = "File modified, press Ctrl-Q again to quit"


class EditorSession:
    """Wires the buffer, keymaps, modes and view model together.

    The driver feeds keys to :meth:`handle_key` and draws what
    :meth:`render` returns. Writes and quits requested from the command
    line arrive here through the mode bus.
    """

    def __init__(
        self,
        *,
        buffer: Optional[Buffer] = None,
        path: Optional[Path | str] = None,
        config: Optional[EditorConfig] = None,
        size: TerminalSize = DEFAULT_SIZE,
        clock: Clock = time.monotonic,
    ) -> None:
        self.logger = telemetry.get_logger("rune.session")
        self.config = config or EditorConfig()
        self.path = Path(path) if path is not None else None
        self.buffer = buffer or Buffer(name=str(self.path) if self.path else DEFAULT_NAME)
        self.size = size
        self.view = ViewModel()
        self.message: Optional[str] = None
        self.should_quit = False
        self._quit_confirmed = False

        self.registry = KeymapRegistry(logger_name="rune.keymaps")
        load_default_keymaps(self.registry, extra_bindings=self.config.bindings)
        self.resolver = KeymapResolver(self.registry, logger_name="rune.keymaps")

        self.bus = ModeBus()
        self.context = ModeContext(
            buffer=self.buffer,
            registers=self.buffer.registers,
            bus=self.bus,
            extras={},
        )
        self.manager = ModeManager(
            self.context,
            keymap_registry=self.registry,
            keymap_resolver=self.resolver,
            load_defaults=False,
            clock=clock,
        )
        self.manager.register_mode(NormalMode)
        self.manager.register_mode(InsertMode)
        self.manager.register_mode(CommandMode)
        self.bus.subscribe("command.write", self._on_write)
        self.bus.subscribe("command.quit", self._on_quit)
        if self.config.start_in_insert:
            self.manager.switch_mode(ModeName.INSERT.value)

    @classmethod
    def open(
        cls,
        path: Path | str,
        *,
        config: Optional[EditorConfig] = None,
        size: TerminalSize = DEFAULT_SIZE,
    ) -> "EditorSession":
        """Start a session on ``path``.

        A missing file starts empty and is created on the first write. A
        file that is not UTF-8 is left alone and the session starts on an
        unnamed empty buffer; writing needs an explicit file name.
        """

        path = Path(path)
        target: Optional[Path] = path
        message = None
        try:
            buffer = Buffer.from_text(read_document(path), name=str(path))
        except FileNotFoundError:
            buffer = Buffer(name=str(path))
            message = f'"{path}" [New]'
        except DecodeError as exc:
            buffer = Buffer(name=DEFAULT_NAME)
            target = None
            message = f"Cannot open {exc}"
            telemetry.record_event(
                "session.decode_error",
                level="warning",
                data={"path": str(path), "reason": exc.reason},
                logger_name="rune.session",
            )
        session = cls(buffer=buffer, path=target, config=config, size=size)
        session.message = message
        return session

    @property
    def mode(self) -> str:
        return self.manager.active_name or ModeName.NORMAL.value

    def handle_key(self, key: KeyInput) -> ModeResult:
        self.message = None
        if key == QUIT_KEY:
            return self.request_quit()
        self._quit_confirmed = False
        if key == SAVE_KEY:
            return self.request_save()
        result = self.manager.handle_key(key)
        if result.message:
            self.message = result.message
        return result

    def process_timeouts(self) -> Dict[str, ModeResult]:
        results = self.manager.process_timeouts()
        for outcome in results.values():
            if outcome.message:
                self.message = outcome.message
        return results

    def resize(self, rows: int, cols: int) -> None:
        self.size = TerminalSize(rows=rows, cols=cols)
        self.view.invalidate()

    def render(self) -> RenderDiff:
        prompt = None
        if self.mode == ModeName.COMMAND.value:
            state = self.context.extras.get("command_state")
            prompt = str(state.get("text", "")) if isinstance(state, Mapping) else ""
        active = self.manager.active_mode
        return self.view.reconcile(
            self.buffer,
            self.buffer.cursor,
            self.mode,
            self.size,
            message=self.message,
            prompt=prompt,
            pending=active.pending_display if active else "",
        )

    def save(self, path: Optional[Path | str] = None) -> Path:
        """Write the buffer to ``path`` (or the session's file)."""

        target = Path(path) if path is not None else self.path
        if target is None:
            raise SaveError(self.buffer.name, "no file name")
        snapshot = self.buffer.snapshot()
        with telemetry.span(
            "session::save",
            logger_name="rune.session",
            component="session",
            metadata={"path": str(target)},
        ):
            size = write_document(target, snapshot.text)
        if self.path is None:
            self.path = target
            self.buffer.name = str(target)
        if target == self.path:
            self.buffer.mark_saved()
        lines = self.buffer.document.line_count()
        self.message = f'"{target}" {lines}L, {size}B written'
        return target

    def request_quit(self) -> ModeResult:
        """Quit, unless the buffer is modified and this is the first try."""

        if self.buffer.dirty and not self._quit_confirmed:
            self._quit_confirmed = True
            self.message = QUIT_WARNING
            return ModeResult(consumed=True, status="quit_refused", message=QUIT_WARNING)
        self.should_quit = True
        return ModeResult(consumed=True, status="quit")

    def request_save(self) -> ModeResult:
        """Save to the session's file, or ask for a name if it has none."""

        if self.path is None:
            self.manager.switch_mode(ModeName.COMMAND.value)
            command = self.manager.get_mode(ModeName.COMMAND.value)
            if isinstance(command, CommandMode):
                command.prefill("w ")
            return ModeResult(consumed=True, status="save_as")
        try:
            self.save()
        except SaveError as exc:
            self.message = f"Save error: {exc}"
            return ModeResult(consumed=True, status="save_error", message=self.message)
        return ModeResult(consumed=True, status="saved", message=self.message)

    def _on_write(self, payload: object | None) -> None:
        args = payload.get("args", []) if isinstance(payload, Mapping) else []
        self.save(args[0] if args else None)

    def _on_quit(self, payload: object | None) -> None:
        del payload
        self.should_quit = True


__all__ = ["DEFAULT_SIZE", "EditorSession", "QUIT_KEY", "QUIT_WARNING", "SAVE_KEY"]

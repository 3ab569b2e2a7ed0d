"""Command-line prompt with inline editing and keymap integration."""

from __future__ import annotations

from typing import List, MutableMapping, cast

from rune.keymaps.models import DEFAULT_SEQUENCE_TIMEOUT_MS
from rune.keymaps.resolver import ResolutionMatch
from rune.runtime import telemetry

from .base_mode import ActionRequest, KeyInput, Mode, ModeContext, ModeName, ModeResult
from .keymap_helpers import key_to_token, require_keymap_resolver


class CommandMode(Mode):
    """Collects a ``:`` command line; ``ENTER`` submits, ``ESC`` cancels."""

    name = ModeName.COMMAND.value

    def __init__(
        self,
        context: ModeContext,
        *,
        default_pending_timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS,
    ) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("rune.modes.command")
        self._resolver = require_keymap_resolver(context)
        self._pending: List[str] = []
        self._typed: List[str] = []
        self._default_timeout_ms = default_pending_timeout_ms

    def on_enter(self, previous: str | None) -> None:
        del previous
        self._typed.clear()
        self.context.bus.emit("command.start", None)
        self._sync_command_state()

    def on_exit(self, next_mode: str | None) -> None:
        del next_mode
        self._pending.clear()
        self.context.bus.emit("command.end", self.current_command)
        self._typed.clear()
        self._sync_command_state()

    @property
    def current_command(self) -> str:
        return "".join(self._typed)

    def prefill(self, text: str) -> None:
        """Start the prompt with ``text`` already typed."""

        self._typed = list(text)
        self._sync_command_state()

    def handle_key(self, key: KeyInput) -> ModeResult:
        token = key_to_token(key)
        self._pending.append(token)
        result = self._resolver.resolve(self.name, tuple(self._pending))

        if result.status == "match" and result.match:
            self._pending.clear()
            return self._execute_match(result.match, key)

        if result.status == "pending":
            timeout_ms = result.timeout_ms or self._default_timeout_ms
            return ModeResult(consumed=True, status="pending", timeout_ms=timeout_ms)

        self._pending.clear()
        return self._handle_text_input(key)

    def _handle_text_input(self, key: KeyInput) -> ModeResult:
        if key.key == "BACKSPACE":
            if not self._typed:
                return ModeResult(
                    consumed=True, switch_to=ModeName.NORMAL.value, status="command_cancel"
                )
            self._typed.pop()
            self._sync_command_state()
            return ModeResult(consumed=True, status="editing")

        if key.text and not key.modifiers:
            self._typed.append(key.text)
            self._sync_command_state()
            return ModeResult(consumed=True, status="editing")

        return ModeResult(consumed=False, status="miss")

    def handle_timeout(self) -> ModeResult:
        if not self._pending:
            return ModeResult(consumed=False, status="timeout")

        tokens = tuple(self._pending)
        self._pending.clear()
        result = self._resolver.resolve(self.name, tokens)
        if result.status == "match" and result.match:
            return self._execute_match(result.match, None)
        return ModeResult(consumed=False, status="timeout")

    def _execute_match(self, match: ResolutionMatch, key: KeyInput | None) -> ModeResult:
        self._sync_command_state()
        with telemetry.span(
            "keymaps::execute",
            logger_name="rune.modes.command",
            component="keymaps",
            metadata={"binding_id": match.binding.id, "action": match.action.id},
        ):
            outcome = match.action(self.context, ActionRequest(key=key))

        if isinstance(outcome, ModeResult):
            return outcome
        return ModeResult(consumed=True)

    def _command_state(self) -> MutableMapping[str, object]:
        return cast(
            MutableMapping[str, object],
            self.context.extras.setdefault("command_state", {}),
        )

    def _sync_command_state(self) -> None:
        state = self._command_state()
        state["text"] = self.current_command


__all__ = ["CommandMode"]

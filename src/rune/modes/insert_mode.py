"""Insert mode: typed text goes into the buffer as one undo group."""

from __future__ import annotations

from typing import List, Optional

from rune.actions.core import insert_text
from rune.keymaps.models import DEFAULT_SEQUENCE_TIMEOUT_MS, ActionKind
from rune.keymaps.resolver import ResolutionMatch
from rune.runtime import telemetry

from .base_mode import ActionRequest, KeyInput, Mode, ModeContext, ModeName, ModeResult
from .keymap_helpers import key_to_token, require_keymap_resolver

# Keys with these modifiers never insert their text.
_COMMAND_MODIFIERS = frozenset({"ctrl", "alt", "meta", "super"})


class InsertMode(Mode):
    """Inserts typed text; the whole session is one undo group.

    The group is opened on entry (or inherited from a ``c``/``o`` command
    that left one open) and committed on exit. ``break_undo`` commits and
    reopens it mid-session.
    """

    name = ModeName.INSERT.value

    def __init__(
        self,
        context: ModeContext,
        *,
        default_pending_timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS,
    ) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("rune.modes.insert")
        self._resolver = require_keymap_resolver(context)
        self._pending: List[str] = []
        self._default_timeout_ms = default_pending_timeout_ms

    @property
    def pending_display(self) -> str:
        return "".join(self._pending)

    def on_enter(self, previous: str | None) -> None:
        del previous
        self._pending.clear()
        self.context.buffer.begin_group("insert")

    def on_exit(self, next_mode: str | None) -> None:
        del next_mode
        self._pending.clear()
        self.context.buffer.commit_group()

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

        stale = len(self._pending) > 1
        self._pending.clear()
        if stale:
            # An unfinished sequence is abandoned; the new key stands alone.
            return self.handle_key(key)
        return self._insert_key(key)

    def handle_timeout(self) -> ModeResult:
        if not self._pending:
            return ModeResult(consumed=False, status="timeout")

        tokens = tuple(self._pending)
        self._pending.clear()
        result = self._resolver.resolve(self.name, tokens)
        if result.status == "match" and result.match:
            return self._execute_match(result.match, None)
        return ModeResult(consumed=False, status="timeout")

    def _insert_key(self, key: KeyInput) -> ModeResult:
        if not key.text or _COMMAND_MODIFIERS.intersection(key.modifiers):
            return ModeResult(consumed=False, status="miss")
        return insert_text(self.context, key.text)

    def _execute_match(self, match: ResolutionMatch, key: Optional[KeyInput]) -> ModeResult:
        action = match.action
        buffer = self.context.buffer
        with telemetry.span(
            "keymaps::execute",
            logger_name="rune.modes.insert",
            component="keymaps",
            metadata={"binding_id": match.binding.id, "action": action.id},
        ):
            if action.kind is ActionKind.MOTION:
                target = action(buffer, ActionRequest(past_end=True, key=key))
                buffer.set_cursor(target.position, keep_column=target.keep_column)
                return ModeResult(consumed=True, status="motion")
            outcome = action(self.context, ActionRequest(key=key))

        if isinstance(outcome, ModeResult):
            return outcome
        return ModeResult(consumed=True)


__all__ = ["InsertMode"]

"""Normal mode: counts, operators, motions and standalone commands."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Optional

from rune.actions.motions import change_word
from rune.buffer import Position, clamp_position
from rune.errors import InvalidKeySequence
from rune.keymaps.models import DEFAULT_SEQUENCE_TIMEOUT_MS, Action, ActionKind, ActionRef
from rune.keymaps.resolver import ResolutionMatch, ResolutionResult
from rune.runtime import telemetry

from .base_mode import ActionRequest, KeyInput, Mode, ModeContext, ModeName, ModeResult
from .keymap_helpers import ESCAPE_TOKENS, key_to_token, require_keymap_resolver
from .operator_pipeline import OperatorRange, PendingCommand, line_range, motion_range


class NormalMode(Mode):
    """Resolves keys into motions, operators and commands.

    Keys accumulate in a :class:`PendingCommand` until they form a complete
    command; every complete command that edits the buffer runs inside one
    buffer transaction, so it becomes exactly one undo group whatever its
    count.
    """

    name = ModeName.NORMAL.value

    def __init__(
        self,
        context: ModeContext,
        *,
        default_pending_timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS,
    ) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("rune.modes.normal")
        self._resolver = require_keymap_resolver(context)
        self._pending = PendingCommand()
        self._default_timeout_ms = default_pending_timeout_ms

    @property
    def pending(self) -> PendingCommand:
        return self._pending

    @property
    def pending_display(self) -> str:
        return self._pending.describe()

    def on_enter(self, previous: str | None) -> None:
        del previous
        self._pending.clear()
        self.context.buffer.clamp_cursor(past_end=False)

    def on_exit(self, next_mode: str | None) -> None:
        del next_mode
        self._pending.clear()

    def handle_key(self, key: KeyInput) -> ModeResult:
        token = key_to_token(key)
        pending = self._pending
        if token in ESCAPE_TOKENS:
            pending.clear()
            return ModeResult(consumed=True, status="cancel")

        if pending.accepts_digit(token):
            pending.push_digit(token)
            return ModeResult(consumed=True, status="pending")

        pending.keys.append(token)
        result, combined = self._resolve()
        if result.status == "pending":
            return ModeResult(
                consumed=True,
                status="pending",
                timeout_ms=result.timeout_ms or self._default_timeout_ms,
            )
        if result.status != "match" or result.match is None:
            return self._drop()
        return self._dispatch(result.match, combined, key)

    def handle_timeout(self) -> ModeResult:
        if not self._pending.keys:
            return ModeResult(consumed=False, status="timeout")
        result, combined = self._resolve()
        if result.status == "match" and result.match is not None:
            return self._dispatch(result.match, combined, None)
        self._drop()
        return ModeResult(consumed=False, status="timeout")

    def _resolve(self) -> tuple[ResolutionResult, bool]:
        """Resolve the buffered keys; the flag tells whether the pending
        operator's keys were part of the match (``dd`` bound on its own)."""

        pending = self._pending
        keys = tuple(pending.keys)
        if pending.operator is None:
            return self._resolver.resolve(self.name, keys), False
        combined = self._resolver.resolve(self.name, pending.operator_tokens + keys)
        if combined.status == "match":
            return combined, True
        alone = self._resolver.resolve(self.name, keys)
        if combined.status == "pending" and alone.status != "match":
            return combined, True
        return alone, False

    def _dispatch(
        self, match: ResolutionMatch, combined: bool, key: Optional[KeyInput]
    ) -> ModeResult:
        pending = self._pending
        action = match.action
        operator = None if combined else pending.operator
        count = pending.count
        request = ActionRequest(count=count, explicit_count=pending.explicit_count, key=key)

        if action.kind is ActionKind.OPERATOR:
            if operator is None:
                tokens = tuple(pending.keys)
                if combined:
                    tokens = pending.operator_tokens + tokens
                pending.set_operator(action, tokens)
                return ModeResult(consumed=True, status="pending")
            if operator.id != action.id:
                return self._drop()
            # Doubled operator: ``count`` whole lines from the cursor line.
            pending.clear()
            buffer = self.context.buffer
            span = line_range(buffer.document, buffer.cursor.line, count)
            return self._apply_operator(action, span)

        pending.clear()
        if action.kind is ActionKind.MOTION:
            if operator is not None:
                return self._operate(operator, action, request)
            return self._move(action, request)
        if operator is not None:
            return self._drop()
        return self._execute(action, lambda: action(self.context, request))

    def _move(self, motion: ActionRef, request: ActionRequest) -> ModeResult:
        buffer = self.context.buffer
        target = motion(buffer, request)
        line, col = clamp_position(buffer.document, target.position, past_end=False)
        buffer.set_cursor(Position(line, col), keep_column=target.keep_column)
        return ModeResult(consumed=True, status="motion")

    def _operate(
        self, operator: ActionRef, motion: ActionRef, request: ActionRequest
    ) -> ModeResult:
        buffer = self.context.buffer
        request = replace(request, for_operator=True, operator_id=operator.id)
        compute: Callable[..., object] = motion
        if operator.id == Action.CHANGE.value and motion.id == Action.WORD_FORWARD.value:
            compute = change_word
        target = compute(buffer, request)
        span = motion_range(buffer.document, buffer.cursor, target)
        buffer.state.preferred_column = None
        return self._apply_operator(operator, span)

    def _apply_operator(self, operator: ActionRef, span: OperatorRange) -> ModeResult:
        return self._execute(operator, lambda: operator(self.context, span))

    def _execute(self, action: ActionRef, call: Callable[[], object]) -> ModeResult:
        buffer = self.context.buffer
        with telemetry.span(
            "keymaps::execute",
            logger_name="rune.modes.normal",
            component="keymaps",
            metadata={"action": action.id},
        ):
            if action.mutates:
                with buffer.transaction(action.id) as tx:
                    outcome = call()
                    if isinstance(outcome, ModeResult) and outcome.switch_to == ModeName.INSERT.value:
                        # The insert session that follows joins this undo group.
                        tx.keep_open()
            else:
                outcome = call()

        if not isinstance(outcome, ModeResult):
            outcome = ModeResult(consumed=True)
        if outcome.switch_to is None:
            buffer.clamp_cursor(past_end=False)
        return outcome

    def _drop(self) -> ModeResult:
        error = InvalidKeySequence(self._pending.tokens())
        self._pending.clear()
        self.logger.debug("dropping pending keys: %s", error)
        return ModeResult(consumed=True, status="invalid")


__all__ = ["NormalMode"]

"""The delete, change and yank operators."""

from __future__ import annotations

from rune.buffer import Buffer, Position, RegisterKind, clamp_position, first_non_blank
from rune.buffer.registers import UNNAMED
from rune.modes.base_mode import ModeContext, ModeName, ModeResult
from rune.modes.operator_pipeline import OperatorRange


def _kind(span: OperatorRange) -> RegisterKind:
    return RegisterKind.LINEWISE if span.linewise else RegisterKind.CHARWISE


def range_text(buffer: Buffer, span: OperatorRange) -> str:
    document = buffer.document
    if span.linewise:
        return "\n".join(
            document.line_text(index) for index in range(span.first_line, span.last_line + 1)
        )
    return document.text_range(span.start, span.end)


def remove_range(buffer: Buffer, span: OperatorRange) -> str:
    """Delete ``span``; linewise spans take their line breaks with them."""

    document = buffer.document
    if not span.linewise:
        return buffer.delete(span.start, span.end)

    text = range_text(buffer, span)
    first, last = span.first_line, span.last_line
    last_end = Position(last, document.grapheme_count(last))
    if last + 1 < document.line_count():
        buffer.delete(Position(first, 0), Position(last + 1, 0))
    elif first > 0:
        buffer.delete(Position(first - 1, document.grapheme_count(first - 1)), last_end)
    else:
        buffer.delete(Position(0, 0), last_end)
    return text


def delete(context: ModeContext, span: OperatorRange) -> ModeResult:
    if span.empty:
        return ModeResult(consumed=True, status="noop")
    buffer = context.buffer
    text = remove_range(buffer, span)
    context.registers.yank_to(UNNAMED, text, kind=_kind(span))
    document = buffer.document
    if span.linewise:
        line = min(span.first_line, document.line_count() - 1)
        buffer.set_cursor(Position(line, first_non_blank(document, line)))
    else:
        buffer.set_cursor(clamp_position(document, span.start, past_end=False))
    return ModeResult(consumed=True, status="delete")


def change(context: ModeContext, span: OperatorRange) -> ModeResult:
    buffer = context.buffer
    document = buffer.document
    if span.linewise:
        text = range_text(buffer, span)
        # The first line survives, emptied, to receive the insert.
        buffer.delete(Position(span.first_line, 0), span.end)
        start = Position(span.first_line, 0)
    else:
        text = buffer.delete(span.start, span.end)
        start = span.start
    if text:
        context.registers.yank_to(UNNAMED, text, kind=_kind(span))
    buffer.set_cursor(clamp_position(document, start))
    return ModeResult(consumed=True, switch_to=ModeName.INSERT.value, status="change")


def yank(context: ModeContext, span: OperatorRange) -> ModeResult:
    buffer = context.buffer
    if span.empty:
        return ModeResult(consumed=True, status="noop")
    context.registers.yank_to(UNNAMED, range_text(buffer, span), kind=_kind(span))
    if span.linewise:
        if span.first_line < buffer.cursor.line:
            target = Position(span.first_line, buffer.cursor.col)
            buffer.set_cursor(clamp_position(buffer.document, target, past_end=False))
    else:
        buffer.set_cursor(span.start)
    return ModeResult(consumed=True, status="yank")


__all__ = ["change", "delete", "range_text", "remove_range", "yank"]

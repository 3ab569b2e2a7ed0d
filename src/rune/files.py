"""Reading and atomically writing text files."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from rune.errors import DecodeError, SaveError
from rune.runtime import telemetry

logger = telemetry.get_logger("rune.files")


def read_document(path: Path | str) -> str:
    """Return the file's text with ``\\r`` removed.

    The file must be valid UTF-8; ``FileNotFoundError`` propagates so the
    caller can start a new file.
    """

    path = Path(path)
    data = path.read_bytes()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(path, f"not valid UTF-8 (byte {exc.start})") from exc
    logger.debug("read %s (%d bytes)", path, len(data))
    return text.replace("\r", "")


def write_document(path: Path | str, text: str) -> int:
    """Write ``text`` to ``path`` atomically and return the byte count.

    The text goes to a temporary file in the target directory, which is
    synced and then renamed over the target.
    """

    path = Path(path)
    payload = text.encode("utf-8")
    temp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as temp_file:
            temp_name = temp_file.name
            temp_file.write(payload)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.replace(temp_name, path)
    except OSError as exc:
        if temp_name is not None and os.path.exists(temp_name):
            os.remove(temp_name)
        logger.error("write failed for %s: %s", path, exc)
        raise SaveError(path, exc.strerror or str(exc)) from exc
    logger.debug("wrote %s (%d bytes)", path, len(payload))
    return len(payload)


__all__ = ["read_document", "write_document"]

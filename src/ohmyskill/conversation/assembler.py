"""Line assembler — turns arbitrary output chunks into complete lines."""

from __future__ import annotations

_NEWLINE = b"\n"


class LineAssembler:
    """Buffers byte chunks and yields only newline-terminated lines.

    The trailing fragment of every chunk is kept until a later chunk
    completes it.  Lines are returned without their terminator.  A fragment
    that never receives a newline is only surfaced by :meth:`flush`.
    """

    def __init__(self) -> None:
        self._pending = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet part of a complete line."""
        return len(self._pending)

    def feed(self, chunk: bytes) -> list[bytes]:
        """Add *chunk* and return every line it completed, in order."""
        if not chunk:
            return []
        self._pending.extend(chunk)
        if _NEWLINE not in chunk:
            return []
        *complete, rest = bytes(self._pending).split(_NEWLINE)
        self._pending = bytearray(rest)
        return complete

    def flush(self) -> bytes | None:
        """Return and clear the unterminated trailing fragment, if any.

        Called once the stream has ended so a final record written
        without a newline is not lost.
        """
        if not self._pending:
            return None
        rest = bytes(self._pending)
        self._pending.clear()
        return rest

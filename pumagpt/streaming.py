"""Reassembly of streamed chat completion events.

The completion API streams newline-delimited records such as::

    data: {"choices": [{"delta": {"content": "Hel"}}]}
    data: {"choices": [{"delta": {"content": "lo"}}]}
    data: [DONE]

Network chunks don't respect record boundaries, so a record (or a multi-byte
UTF-8 character inside it) can arrive in pieces. ``SSEFrameReader`` keeps raw
bytes until a full line is present and only then decodes and parses it.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


@dataclass
class Frame:
    """One parsed record: either a content delta or the end-of-stream sentinel."""

    content: str = ""
    done: bool = False


@dataclass
class StreamTranscript:
    """Accumulates forwarded deltas so the full answer can be logged afterwards."""

    parts: list[str] = field(default_factory=list)

    def append(self, delta: str) -> None:
        self.parts.append(delta)

    @property
    def text(self) -> str:
        return "".join(self.parts)


class SSEFrameReader:
    """Incremental line framer for the ``data: <json>`` event stream.

    Feed it transport chunks in arrival order; it returns the frames completed
    by each chunk. A complete line that can't be decoded or parsed is logged
    and dropped.
    """

    def __init__(self):
        self._buffer = bytearray()
        self.dropped_lines = 0

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet terminated by a newline."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> list[Frame]:
        self._buffer.extend(chunk)

        frames = []
        while True:
            newline = self._buffer.find(b"\n")
            if newline == -1:
                break
            line = bytes(self._buffer[:newline])
            del self._buffer[: newline + 1]

            frame = self._parse_line(line)
            if frame is not None:
                frames.append(frame)

        return frames

    def close(self) -> list[Frame]:
        """Parse whatever is left once the upstream has ended without a final newline."""
        if not self._buffer:
            return []

        line = bytes(self._buffer)
        self._buffer.clear()
        frame = self._parse_line(line)
        return [frame] if frame is not None else []

    def _parse_line(self, raw: bytes) -> Frame | None:
        raw = raw.rstrip(b"\r")
        if not raw.strip():
            return None

        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            self._drop(raw, f"invalid UTF-8 ({e})")
            return None

        # SSE comment / keep-alive
        if line.startswith(":"):
            return None

        if line.startswith(DATA_PREFIX):
            line = line[len(DATA_PREFIX) :]
            if line.startswith(" "):
                line = line[1:]

        if line.strip() == DONE_SENTINEL:
            return Frame(done=True)

        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            self._drop(raw, f"invalid JSON ({e})")
            return None

        if not isinstance(record, dict):
            self._drop(raw, "record is not a JSON object")
            return None

        choices = record.get("choices")
        choice = choices[0] if isinstance(choices, list) and choices and isinstance(choices[0], dict) else {}
        delta = choice.get("delta") or {}
        content = delta.get("content") if isinstance(delta, dict) else None
        return Frame(content=content if isinstance(content, str) else "")

    def _drop(self, raw: bytes, reason: str) -> None:
        self.dropped_lines += 1
        logger.warning(f"[STREAM] Dropping unparseable record: {reason}: {raw[:200]!r}")


def iter_content_deltas(
    chunks: Iterable[bytes],
    reader: SSEFrameReader | None = None,
    transcript: StreamTranscript | None = None,
) -> Iterator[str]:
    """Yield content deltas from a chunked event stream as soon as each record completes.

    Stops at the ``[DONE]`` sentinel without pulling any further chunks from
    ``chunks``. Missing deltas are yielded as empty strings.

    Args:
        chunks: Raw transport chunks in arrival order
        reader: Frame reader to use (a fresh one by default)
        transcript: Optional collector for the forwarded text

    Yields:
        Content delta strings
    """
    reader = reader or SSEFrameReader()

    for chunk in chunks:
        for frame in reader.feed(chunk):
            if frame.done:
                logger.debug("[STREAM] Received [DONE]")
                return
            if transcript is not None:
                transcript.append(frame.content)
            yield frame.content

    for frame in reader.close():
        if frame.done:
            return
        if transcript is not None:
            transcript.append(frame.content)
        yield frame.content

    logger.warning("[STREAM] Upstream closed before [DONE]")

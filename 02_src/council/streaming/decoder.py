"""Decoder for server-sent-event shaped chat completion bodies."""

import codecs
import json
from typing import AsyncIterable, AsyncIterator

from ..errors import MalformedFragmentError
from ..logging_config import get_logger

logger = get_logger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def parse_fragment(payload: str) -> str | None:
    """Extract `choices[0].delta.content` from one data payload.

    Returns None for well-formed chunks without content (role-only or
    finish chunks). Raises MalformedFragmentError for anything else.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedFragmentError(f"Invalid JSON payload: {e}") from e

    try:
        delta = data["choices"][0].get("delta") or {}
        content = delta.get("content")
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise MalformedFragmentError(f"Unexpected chunk shape: {e!r}") from e

    if content is None or content == "":
        return None
    if not isinstance(content, str):
        raise MalformedFragmentError(f"Non-string content: {type(content).__name__}")
    return content


class StreamDecoder:
    """Incremental byte -> fragment decoder.

    Buffers partial UTF-8 sequences and partial lines across chunks, so a
    frame split anywhere between two reads decodes the same as an unsplit
    one. Stops producing fragments once the `[DONE]` sentinel is seen.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._done = False
        self.skipped = 0

    @property
    def done(self) -> bool:
        return self._done

    def feed(self, chunk: bytes) -> list[str]:
        """Decode one chunk and return the fragments it completes."""
        if self._done:
            return []
        return self._consume(self._decoder.decode(chunk), final=False)

    def close(self) -> list[str]:
        """Flush the decoder; handles a trailing line without newline."""
        if self._done:
            return []
        return self._consume(self._decoder.decode(b"", final=True), final=True)

    def _consume(self, text: str, final: bool) -> list[str]:
        self._buffer += text
        lines = self._buffer.split("\n")
        self._buffer = "" if final else lines.pop()

        fragments: list[str] = []
        for line in lines:
            line = line.rstrip("\r")
            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX):]
            if payload.strip() == DONE_SENTINEL:
                self._done = True
                self._buffer = ""
                break

            try:
                fragment = parse_fragment(payload)
            except MalformedFragmentError as e:
                self.skipped += 1
                logger.debug("Skipping malformed chunk: %s", e)
                continue

            if fragment is not None:
                fragments.append(fragment)
        return fragments


async def iter_fragments(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Lazily turn a byte stream into text fragments, in arrival order."""
    decoder = StreamDecoder()
    async for chunk in chunks:
        for fragment in decoder.feed(chunk):
            yield fragment
        if decoder.done:
            return

    for fragment in decoder.close():
        yield fragment

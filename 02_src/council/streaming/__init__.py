"""Streaming module."""

from .cancellation import CancellationToken
from .decoder import StreamDecoder, iter_fragments, parse_fragment
from .slot import stream_into_slot
from .streamer import IResponseStreamer, ResponseStreamer, StreamCallbacks

__all__ = [
    "CancellationToken",
    "StreamDecoder",
    "iter_fragments",
    "parse_fragment",
    "IResponseStreamer",
    "ResponseStreamer",
    "StreamCallbacks",
    "stream_into_slot",
]

"""Drive one stream into a StreamState slot, emitting snapshots."""

from typing import Awaitable, Callable, Sequence

from ..models import ChatMessage, StreamState
from .cancellation import CancellationToken
from .streamer import IResponseStreamer, StreamCallbacks

SnapshotHandler = Callable[[StreamState], Awaitable[None]]


async def stream_into_slot(
    streamer: IResponseStreamer,
    state: StreamState,
    model_id: str,
    messages: Sequence[ChatMessage],
    token: CancellationToken,
    publish: SnapshotHandler,
    web_search: bool = False,
) -> StreamState:
    """Run one call, moving the slot idle -> loading -> streaming -> done|error.

    The accumulator lives in this coroutine only; `publish` receives a new
    immutable snapshot after every transition. A cancelled call resets the
    slot to idle and discards partial text.
    """
    current = state.loading(model_id)
    await publish(current)

    async def on_start() -> None:
        nonlocal current
        current = current.streaming()
        await publish(current)

    async def on_delta(fragment: str) -> None:
        nonlocal current
        current = current.append(fragment)
        await publish(current)

    async def on_complete(full_text: str) -> None:
        nonlocal current
        current = current.done(full_text)
        await publish(current)

    async def on_error(message: str) -> None:
        nonlocal current
        current = current.failed(message)
        await publish(current)

    await streamer.stream(
        model_id,
        messages,
        token,
        StreamCallbacks(
            on_start=on_start,
            on_delta=on_delta,
            on_complete=on_complete,
            on_error=on_error,
        ),
        web_search=web_search,
    )

    if token.cancelled and current.in_flight:
        current = current.reset()
        await publish(current)
    return current

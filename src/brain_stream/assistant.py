"""
This module provides the client for the streaming assistant endpoint.
It posts the conversation, reassembles the SSE response and hands typed events to a callback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from brain_stream._cancel import CancelToken
from brain_stream._client import BrainHttpClient, HttpConfig
from brain_stream._config import ClientSettings
from brain_stream.events import HubEvent
from brain_stream.messages import AssistantRunContext, AssistantRunRequest, MessageLike, to_chat_messages
from brain_stream.stream import EventCallback, aconsume, consume
from brain_stream.turn import AssistantTurn

ASSISTANT_RUN_PATH = "/api/assistant/run"
DEFAULT_MAX_BUFFER_CHARS = 4 * 1024 * 1024


def _tee(turn: AssistantTurn, on_event: Optional[EventCallback]) -> EventCallback:
    if on_event is None:
        return turn

    def dispatch(event: HubEvent) -> None:
        turn(event)
        on_event(event)

    return dispatch


@dataclass(slots=True)
class AssistantClient:
    """
    Main interface for running the assistant.
    Provides synchronous and asynchronous methods; each call consumes one response stream.
    """

    base_url: str | None = None
    api_key: str | None = None
    timeout_s: float = 120.0
    max_buffer_chars: int | None = DEFAULT_MAX_BUFFER_CHARS

    _http: BrainHttpClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """
        Resolve settings and build the HTTP client after dataclass initialization.
        """
        settings = ClientSettings.from_env_or_values(self.base_url, self.api_key)
        self.base_url = settings.base_url
        self._http = BrainHttpClient(
            config=HttpConfig(base_url=settings.base_url, timeout_s=self.timeout_s),
            api_key=settings.api_key,
        )

    @staticmethod
    def _build_payload(
        messages: Sequence[MessageLike],
        context: AssistantRunContext | Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        ctx: AssistantRunContext | None
        if context is None or isinstance(context, AssistantRunContext):
            ctx = context
        else:
            ctx = AssistantRunContext.model_validate(dict(context))
        request = AssistantRunRequest(messages=to_chat_messages(messages), context=ctx)
        return request.to_payload()

    def run(
        self,
        messages: Sequence[MessageLike],
        on_event: EventCallback,
        *,
        context: AssistantRunContext | Mapping[str, Any] | None = None,
        cancel_token: CancelToken | None = None,
    ) -> None:
        """
        Run the assistant and dispatch every streamed event to `on_event`.

        Args:
            messages: Conversation so far (ChatMessage, dicts or LangChain messages).
            on_event: Called synchronously, in order, once per event.
            context: Optional request context (org, session, user, write permission).
            cancel_token: Cancelling it stops the stream at the next read or dispatch.

        Raises:
            BrainAPIError: If the endpoint answers with a non-2xx status.
            BrainStreamError: If the response has no body or an unterminated
                block outgrows max_buffer_chars.
        """
        payload = self._build_payload(messages, context)
        with self._http.stream_post_json(ASSISTANT_RUN_PATH, payload) as r:
            self._http.read_error_and_raise(r)
            consume(
                self._http.iter_body(r),
                on_event,
                cancel_token,
                max_buffer_chars=self.max_buffer_chars,
            )

    async def arun(
        self,
        messages: Sequence[MessageLike],
        on_event: EventCallback,
        *,
        context: AssistantRunContext | Mapping[str, Any] | None = None,
        cancel_token: CancelToken | None = None,
    ) -> None:
        """Versión async de run()."""
        payload = self._build_payload(messages, context)
        async with self._http.astream_post_json(ASSISTANT_RUN_PATH, payload) as r:
            await self._http.aread_error_and_raise(r)
            await aconsume(
                self._http.aiter_body(r),
                on_event,
                cancel_token,
                max_buffer_chars=self.max_buffer_chars,
            )

    def complete(
        self,
        messages: Sequence[MessageLike],
        *,
        context: AssistantRunContext | Mapping[str, Any] | None = None,
        cancel_token: CancelToken | None = None,
        on_event: EventCallback | None = None,
    ) -> AssistantTurn:
        """
        Run the assistant and return the accumulated turn.

        A cancelled run returns the partial turn (`completed` stays False).
        """
        turn = AssistantTurn()
        self.run(messages, _tee(turn, on_event), context=context, cancel_token=cancel_token)
        return turn

    async def acomplete(
        self,
        messages: Sequence[MessageLike],
        *,
        context: AssistantRunContext | Mapping[str, Any] | None = None,
        cancel_token: CancelToken | None = None,
        on_event: EventCallback | None = None,
    ) -> AssistantTurn:
        turn = AssistantTurn()
        await self.arun(messages, _tee(turn, on_event), context=context, cancel_token=cancel_token)
        return turn

    def close(self) -> None:
        self._http.close()

    async def aclose(self) -> None:
        await self._http.aclose()

    def __enter__(self) -> AssistantClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    async def __aenter__(self) -> AssistantClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

"""
Typed events carried by the assistant stream.

Contract of the server:
- zero or more `delta` events with incremental content,
- `tool_start` followed by `tool_result` for every tool call,
- exactly one `final` event closing the stream.

All response data of a finished turn must be read from `final.payload`.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, TypeAdapter


class _WireModel(BaseModel):
    # Unknown wire fields are dropped, never forwarded to the consumer.
    model_config = ConfigDict(extra="ignore", frozen=True)


class DeltaEvent(_WireModel):
    """Incremental content chunk."""

    type: Literal["delta"] = "delta"
    content: str


class ToolStartEvent(_WireModel):
    """
    Tool execution started.
    Tool arguments are never sent to the client; an `args` field on the wire is discarded.
    """

    type: Literal["tool_start"] = "tool_start"
    tool: str


class ToolResultEvent(_WireModel):
    """Sanitized outcome of a tool call (truncated data plus explainability metadata)."""

    type: Literal["tool_result"] = "tool_result"
    tool: str
    data: Any = None
    explainability: Any = None
    error: Optional[StrictBool] = None


class FinalPayload(_WireModel):
    agent: str
    content: str
    next_actions: list[str]
    assumptions: Optional[list[str]] = None


class FinalEvent(_WireModel):
    """Terminal event signaling stream completion."""

    type: Literal["final"] = "final"
    payload: FinalPayload


HubEvent = Annotated[
    Union[DeltaEvent, ToolStartEvent, ToolResultEvent, FinalEvent],
    Field(discriminator="type"),
]

_HUB_EVENT_ADAPTER: TypeAdapter[HubEvent] = TypeAdapter(HubEvent)


def parse_event(payload: str) -> HubEvent:
    """
    Parse the joined data of one SSE block into a HubEvent.

    Raises:
        pydantic.ValidationError: If the payload is not JSON, not an object,
            has an unknown `type` or misses fields of its variant.
    """
    return _HUB_EVENT_ADAPTER.validate_json(payload)


def event_to_dict(event: HubEvent) -> dict[str, Any]:
    """Wire representation of an event, without unset optional fields."""
    return event.model_dump(exclude_unset=True) | {"type": event.type}

from __future__ import annotations

from brain_stream.assistant import AssistantClient
from brain_stream.events import (
    DeltaEvent,
    FinalEvent,
    FinalPayload,
    HubEvent,
    ToolResultEvent,
    ToolStartEvent,
)
from brain_stream.messages import AssistantRunContext, ChatMessage
from brain_stream.stream import StreamReassembler, aconsume, consume
from brain_stream.turn import AssistantTurn, ToolActivity
from brain_stream._cancel import CancelToken
from brain_stream._errors import BrainAPIError, BrainError, BrainStreamError

__all__ = [
    "AssistantClient",
    "AssistantRunContext",
    "AssistantTurn",
    "BrainAPIError",
    "BrainError",
    "BrainStreamError",
    "CancelToken",
    "ChatMessage",
    "DeltaEvent",
    "FinalEvent",
    "FinalPayload",
    "HubEvent",
    "StreamReassembler",
    "ToolActivity",
    "ToolResultEvent",
    "ToolStartEvent",
    "aconsume",
    "consume",
]

__version__ = "0.1.0"

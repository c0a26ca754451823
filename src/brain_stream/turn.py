from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from typing_extensions import assert_never

from brain_stream.events import DeltaEvent, FinalEvent, HubEvent, ToolResultEvent, ToolStartEvent


@dataclass(slots=True)
class ToolActivity:
    tool: str
    finished: bool = False
    data: Any = None
    explainability: Any = None
    error: bool = False


@dataclass(slots=True)
class AssistantTurn:
    """
    Event callback that folds one assistant stream into a single message.

    Deltas grow `content` while streaming; the final payload replaces it and
    provides `agent`, `next_actions` and `assumptions`. Tool results are paired
    with the earliest unfinished start of the same tool.
    """

    content: str = ""
    agent: str | None = None
    next_actions: list[str] = field(default_factory=list)
    assumptions: list[str] | None = None
    tools: list[ToolActivity] = field(default_factory=list)
    completed: bool = False

    @property
    def is_streaming(self) -> bool:
        return not self.completed

    def __call__(self, event: HubEvent) -> None:
        if isinstance(event, DeltaEvent):
            self.content += event.content
        elif isinstance(event, ToolStartEvent):
            self.tools.append(ToolActivity(tool=event.tool))
        elif isinstance(event, ToolResultEvent):
            self._finish_tool(event)
        elif isinstance(event, FinalEvent):
            payload = event.payload
            self.content = payload.content
            self.agent = payload.agent
            self.next_actions = list(payload.next_actions)
            self.assumptions = list(payload.assumptions) if payload.assumptions is not None else None
            self.completed = True
        else:
            assert_never(event)

    def _finish_tool(self, event: ToolResultEvent) -> None:
        activity = next((t for t in self.tools if t.tool == event.tool and not t.finished), None)
        if activity is None:
            # Result without a matching start.
            activity = ToolActivity(tool=event.tool)
            self.tools.append(activity)
        activity.finished = True
        activity.data = event.data
        activity.explainability = event.explainability
        activity.error = bool(event.error)

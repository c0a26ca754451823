"""
Request models for POST /api/assistant/run and conversion of chat history into them.
"""

from __future__ import annotations

from typing import Any, Literal, Mapping, Optional, Sequence, Union

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from pydantic import BaseModel, ConfigDict, Field

ChatRole = Literal["user", "assistant"]


class ChatMessage(BaseModel):
    """One turn of the conversation as the assistant endpoint expects it."""

    model_config = ConfigDict(extra="forbid")
    role: ChatRole
    content: str


class AssistantRunContext(BaseModel):
    """
    Optional request context forwarded to tool execution.
    `allowWrites` keeps the wire spelling used by the endpoint.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)
    org_id: Optional[str] = None
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    allow_writes: Optional[bool] = Field(default=None, alias="allowWrites")


class AssistantRunRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    messages: list[ChatMessage]
    context: Optional[AssistantRunContext] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


MessageLike = Union[ChatMessage, BaseMessage, Mapping[str, Any]]


def _text_from_content(content: Any) -> str:
    """Flatten LangChain content (str or list of parts) to plain text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts: list[str] = []
        for part in content:
            if isinstance(part, str):
                texts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text" and isinstance(part.get("text"), str):
                texts.append(part["text"])
        return "".join(texts)
    return "" if content is None else str(content)


def _from_langchain(message: BaseMessage) -> ChatMessage:
    if isinstance(message, HumanMessage):
        role: ChatRole = "user"
    elif isinstance(message, AIMessage):
        role = "assistant"
    else:
        raise ValueError(
            f"Unsupported message type {type(message).__name__!r}: only human and AI messages can be sent"
        )
    return ChatMessage(role=role, content=_text_from_content(message.content))


def to_chat_messages(messages: Sequence[MessageLike]) -> list[ChatMessage]:
    """
    Normalize a conversation into ChatMessage objects.

    Accepts ChatMessage instances, plain {"role", "content"} mappings and
    LangChain HumanMessage/AIMessage objects, in any mix.

    Raises:
        ValueError: For roles other than "user"/"assistant" (system and tool
            messages are not part of the endpoint contract).
    """
    out: list[ChatMessage] = []
    for m in messages:
        if isinstance(m, ChatMessage):
            out.append(m)
        elif isinstance(m, BaseMessage):
            out.append(_from_langchain(m))
        elif isinstance(m, Mapping):
            role = m.get("role")
            if role not in ("user", "assistant"):
                raise ValueError(f"Unsupported message role {role!r}: expected 'user' or 'assistant'")
            out.append(ChatMessage(role=role, content=_text_from_content(m.get("content"))))
        else:
            raise TypeError(f"Cannot convert {type(m).__name__!r} into a chat message")
    return out

"""Language model gateway protocol and reply types.

A gateway response resolves to a tagged union of replies: plain text, or a
tool invocation the caller should act on. Which one comes back is decided
entirely by the model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Union, runtime_checkable


@dataclass(frozen=True)
class TextReply:
    """Free-text assistant output."""

    content: str


@dataclass(frozen=True)
class ToolInvocation:
    """A structured tool call emitted instead of (or alongside) text.

    ``arguments`` is the raw JSON string exactly as the model produced it.
    """

    name: str
    arguments: str
    call_id: str = ""


ModelReply = Union[TextReply, ToolInvocation]


@dataclass
class GatewayResponse:
    """Result from a single gateway call."""

    text: Optional[str] = None
    tool_calls: list[ToolInvocation] = field(default_factory=list)
    finish_reason: str = "finished"
    usage: dict[str, int] = field(default_factory=dict)

    def replies(self) -> list[ModelReply]:
        """Tool invocations first (in model order), then the text reply if any."""
        replies: list[ModelReply] = list(self.tool_calls)
        if self.text:
            replies.append(TextReply(self.text))
        return replies


@runtime_checkable
class IInferenceBackend(Protocol):
    """Protocol for pluggable language model gateways."""

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str,
        *,
        tools: Optional[list[dict[str, Any]]] = None,
        tool_choice: Optional[str] = None,
        response_format: Optional[dict[str, Any]] = None,
        **params: Any,
    ) -> GatewayResponse:
        """Run a single completion.

        Args:
            messages: Chat messages in OpenAI format.
            model: Model identifier (supports LiteLLM prefixes).
            tools: Optional OpenAI-style tool definitions.
            tool_choice: Tool selection policy, e.g. ``"auto"``.
            response_format: e.g. ``{"type": "json_object"}``.
            **params: Additional parameters (temperature, timeout, etc.).

        Raises:
            UpstreamGatewayError: The transport or provider failed.
        """
        ...

"""Scripted language model gateway for testing."""

from __future__ import annotations

import json
from typing import Any, Optional, Union

from medcard.exceptions import UpstreamGatewayError
from medcard.inference.protocols import GatewayResponse, ToolInvocation

Scripted = Union[GatewayResponse, Exception]


def text_response(content: str, **usage: int) -> GatewayResponse:
    return GatewayResponse(text=content, usage=dict(usage))


def tool_response(name: str, arguments: Union[dict[str, Any], str], *more: ToolInvocation) -> GatewayResponse:
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments, ensure_ascii=False)
    return GatewayResponse(tool_calls=[ToolInvocation(name=name, arguments=raw, call_id="call_1"), *more])


class FakeGateway:
    """Replays scripted responses in order: no LLM calls needed.

    Exceptions in the script are raised instead of returned. Once the script
    runs out, ``default`` is returned.
    """

    def __init__(self, *script: Scripted, default: Optional[GatewayResponse] = None) -> None:
        self._script: list[Scripted] = list(script)
        self._default = default or GatewayResponse(text="fake response")
        self.calls: list[dict[str, Any]] = []

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
        self.calls.append(
            {
                "messages": messages,
                "model": model,
                "tools": tools,
                "tool_choice": tool_choice,
                "response_format": response_format,
                "params": params,
            }
        )
        item = self._script.pop(0) if self._script else self._default
        if isinstance(item, Exception):
            raise item
        return item


class FailingGateway(FakeGateway):
    """Every call fails like an unreachable provider."""

    def __init__(self) -> None:
        super().__init__(default=GatewayResponse())

    async def complete(self, messages: list[dict[str, Any]], model: str, **kwargs: Any) -> GatewayResponse:
        self.calls.append({"messages": messages, "model": model, **kwargs})
        raise UpstreamGatewayError("provider unreachable")

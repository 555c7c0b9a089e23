"""Real-time gateway backend: wraps litellm.acompletion()."""

from __future__ import annotations

import logging
from typing import Any, Optional

from medcard.exceptions import UpstreamGatewayError
from medcard.inference.protocols import GatewayResponse, ToolInvocation

log = logging.getLogger(__name__)


class RealTimeBackend:
    """Single-shot completions via litellm.acompletion().

    No retries: a provider failure is surfaced immediately as
    :class:`UpstreamGatewayError`.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout

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
        """Single completion via litellm.acompletion()."""
        from litellm import acompletion

        kwargs: dict[str, Any] = {"model": model, "messages": messages, **params}
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = tool_choice or "auto"
        if response_format is not None:
            kwargs["response_format"] = response_format
        if self._api_key:
            kwargs["api_key"] = self._api_key
        if self._base_url:
            kwargs["api_base"] = self._base_url
        if self._timeout is not None:
            kwargs.setdefault("timeout", self._timeout)

        try:
            response = await acompletion(**kwargs)
        except Exception as e:
            log.error("Gateway call failed: %s", e, extra={"model": model})
            raise UpstreamGatewayError(f"Language model call failed: {e}") from e

        return self._to_gateway_response(response)

    @staticmethod
    def _to_gateway_response(response: Any) -> GatewayResponse:
        choice = response.choices[0]
        message = choice.message
        reason = choice.finish_reason
        mapped_reason = "max_output_reached" if reason == "length" else "finished"

        tool_calls: list[ToolInvocation] = []
        for call in getattr(message, "tool_calls", None) or []:
            function = call.function
            tool_calls.append(
                ToolInvocation(
                    name=function.name,
                    arguments=function.arguments or "",
                    call_id=getattr(call, "id", "") or "",
                )
            )

        usage: dict[str, int] = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": getattr(response.usage, "prompt_tokens", 0),
                "completion_tokens": getattr(response.usage, "completion_tokens", 0),
                "total_tokens": getattr(response.usage, "total_tokens", 0),
            }

        return GatewayResponse(
            text=message.content,
            tool_calls=tool_calls,
            finish_reason=mapped_reason,
            usage=usage,
        )

"""
wordforge_bridge.core.tools.executor - Method-aware ability dispatch

Builds execution requests for the registry's "run ability" endpoint and
unwraps the envelopes it returns.

- GET / DELETE: arguments travel in the query string, PHP bracket style
  (input[post_type]=page&input[per_page]=5)
- POST: arguments travel as a JSON body ({"input": {...}})

Example:
    >>> executor = AbilityExecutor(client)
    >>> data = await executor.execute(tool, {"post_type": "page", "per_page": 5})
"""

import logging
from dataclasses import dataclass, field
from time import time
from typing import Any, Protocol

from pydantic import ValidationError

from wordforge_bridge.exceptions import AbilityExecutionError, ArgumentValidationError

from .base import ExecutionEnvelope, HttpMethod, Tool

logger = logging.getLogger(__name__)

INPUT_PARAM = "input"


class AbilityRunner(Protocol):
    """Anything that can run an ability by name (DiscoveryClient in production)."""

    async def execute_ability(
        self, name: str, method: HttpMethod | str, args: dict[str, Any] | None = None
    ) -> Any: ...


@dataclass(frozen=True)
class ExecutionRequest:
    """Transport-ready description of one execution call."""

    method: HttpMethod
    path: str
    params: list[tuple[str, str]] = field(default_factory=list)
    json: Any | None = None


def execution_path(name: str) -> str:
    """Path of the run endpoint for an ability (names keep their slash)."""
    return f"/abilities/{name}/run"


def serialize_input(value: Any, prefix: str = INPUT_PARAM) -> list[tuple[str, str]]:
    """
    Flatten arguments into PHP-style query parameters.

    Example:
        >>> serialize_input({"post_type": "page", "tax": {"ids": [1, 2]}, "draft": True})
        [('input[post_type]', 'page'), ('input[tax][ids][0]', '1'),
         ('input[tax][ids][1]', '2'), ('input[draft]', 'true')]
    """
    if value is None:
        return []

    if isinstance(value, dict):
        pairs: list[tuple[str, str]] = []
        for key, item in value.items():
            pairs.extend(serialize_input(item, f"{prefix}[{key}]"))
        return pairs

    if isinstance(value, list | tuple):
        pairs = []
        for index, item in enumerate(value):
            pairs.extend(serialize_input(item, f"{prefix}[{index}]"))
        return pairs

    if isinstance(value, bool):
        return [(prefix, "true" if value else "false")]

    return [(prefix, str(value))]


def build_execution_request(
    name: str, method: HttpMethod | str, args: dict[str, Any] | None = None
) -> ExecutionRequest:
    """Place arguments according to the HTTP method."""
    method = method if isinstance(method, HttpMethod) else HttpMethod(method.upper())
    path = execution_path(name)

    if method is HttpMethod.POST:
        # An empty object is still sent: the server reads a missing body as null input
        return ExecutionRequest(
            method=method, path=path, json=None if args is None else {INPUT_PARAM: args}
        )

    return ExecutionRequest(method=method, path=path, params=serialize_input(args or None))


def unwrap_envelope(payload: Any) -> Any:
    """
    Return the useful part of an execution response.

    - {"success": true, "data": ...} -> data
    - {"success": true, "messages": [...]} -> messages
    - {"success": true, ...} -> the envelope without "success"
    - {"success": false, "error": {...}} -> raises AbilityExecutionError
    - anything else (e.g. a prompt's {"messages": [...]}) -> returned unchanged

    Raises:
        AbilityExecutionError: If the envelope reports failure
    """
    if not isinstance(payload, dict) or "success" not in payload:
        return payload

    try:
        envelope = ExecutionEnvelope.model_validate(payload)
    except ValidationError:
        return payload

    if not envelope.success:
        error = envelope.error
        raise AbilityExecutionError(
            error.message if error else None,
            code=error.code if error else "error",
        )

    if "data" in payload:
        return payload["data"]
    if "messages" in payload:
        return payload["messages"]
    return {k: v for k, v in payload.items() if k != "success"}


@dataclass(frozen=True)
class AbilityExecutor:
    """
    Executes tools against the remote registry.

    Unlike a fire-and-forget engine, this executor propagates every failure:
    validation, transport and envelope errors all reach the caller. The
    agent-integration layer (ToolRouter) decides how to present them.

    Args:
        runner: Object exposing execute_ability() (usually a DiscoveryClient)
        validate_arguments: Check arguments against the tool's input schema
            before dispatching
    """

    runner: AbilityRunner
    validate_arguments: bool = True

    async def execute(self, tool: Tool, args: dict[str, Any]) -> Any:
        """
        Validate and dispatch one tool call.

        Returns:
            The unwrapped payload of the ability's envelope

        Raises:
            ArgumentValidationError: If args do not match tool.input_schema
            ExecutionTransportError: On transport failure
            AbilityExecutionError: If the ability reports success=false
        """
        start_time = time()

        if self.validate_arguments:
            result = tool.input_schema.validate(args)
            if not result.success:
                summary = result.summary()
                logger.warning(
                    f"Parameter validation failed for {tool.mcp_name}: {summary}",
                    extra={"tool_name": tool.mcp_name, "ability": tool.name},
                )
                raise ArgumentValidationError(
                    f"Invalid arguments for {tool.mcp_name}: {summary}", issues=result.errors
                )

        try:
            output = await self.runner.execute_ability(tool.name, tool.http_method, args)
        except Exception as e:
            logger.warning(
                f"Tool {tool.mcp_name} failed: {e}",
                extra={
                    "tool_name": tool.mcp_name,
                    "ability": tool.name,
                    "http_method": tool.http_method.value,
                    "duration_ms": (time() - start_time) * 1000,
                    "error": str(e),
                },
            )
            raise

        logger.info(
            f"Tool {tool.mcp_name} executed successfully",
            extra={
                "tool_name": tool.mcp_name,
                "http_method": tool.http_method.value,
                "duration_ms": (time() - start_time) * 1000,
            },
        )
        return output

"""
wordforge_bridge.core.tools.base - Base Tool Definitions

Data models shared by the loader, executor and router:

- AbilityDescriptor: server-declared metadata for one ability (read-only input)
- Tool: protocol-ready, agent-consumable representation of one ability
- ExecutionEnvelope: the {success, data|error} wrapper every execution returns
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .schema import ArgumentValidator


def _empty_list_as_none(value: Any) -> Any:
    # PHP encodes an empty associative array as []
    if isinstance(value, list) and not value:
        return None
    return value


class HttpMethod(str, Enum):
    """Transport method used to execute an ability."""

    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"


class McpType(str, Enum):
    """How an ability is surfaced to the agent runtime."""

    TOOL = "tool"
    PROMPT = "prompt"
    RESOURCE = "resource"


class AbilityAnnotations(BaseModel):
    """Safety annotations declared by an ability. Missing values mean False."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    readonly: bool | None = None
    destructive: bool | None = None
    idempotent: bool | None = None


class McpMeta(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    public: bool = False
    type: str | None = None


class AbilityMeta(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    mcp: McpMeta | None = None
    annotations: AbilityAnnotations | None = None

    @field_validator("mcp", "annotations", mode="before")
    @classmethod
    def _empty_as_none(cls, value: Any) -> Any:
        return _empty_list_as_none(value)


class AbilityDescriptor(BaseModel):
    """
    Ability descriptor as returned by the remote registry.

    Example:
        >>> descriptor = AbilityDescriptor.model_validate({
        ...     "name": "wordforge/list-content",
        ...     "label": "List Content",
        ...     "description": "Retrieve a list of content items",
        ...     "category": "wordforge-content",
        ...     "input_schema": {"type": "object", "properties": {}},
        ...     "meta": {"annotations": {"readonly": True}},
        ... })
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = Field(..., description="Ability name: '<namespace>/<action>'")
    label: str = Field(default="", description="Human-readable title")
    description: str = Field(default="")
    category: str = Field(default="", description="Category slug: '<prefix>-<slug>'")
    input_schema: dict[str, Any] | None = Field(
        default=None, description="Object-shaped JSON schema for the ability input"
    )
    output_schema: dict[str, Any] | None = Field(default=None)
    meta: AbilityMeta = Field(default_factory=AbilityMeta)

    @field_validator("label", "description", "category", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("input_schema", "output_schema", mode="before")
    @classmethod
    def _empty_schema_as_object(cls, value: Any) -> Any:
        # `[]` still means "a schema was declared", so keep it present
        if isinstance(value, list) and not value:
            return {}
        return value

    @field_validator("meta", mode="before")
    @classmethod
    def _empty_meta(cls, value: Any) -> Any:
        value = _empty_list_as_none(value)
        return {} if value is None else value

    @property
    def annotations(self) -> AbilityAnnotations:
        return self.meta.annotations or AbilityAnnotations()

    @property
    def mcp_type(self) -> str | None:
        return self.meta.mcp.type if self.meta.mcp else None


class AbilityCategory(BaseModel):
    """Category listed by the registry's category endpoint."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    slug: str
    label: str = ""
    description: str = ""


class ExecutionError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str = "error"
    message: str | None = None


class ExecutionEnvelope(BaseModel):
    """
    Envelope returned by every ability execution.

    Example:
        >>> envelope = ExecutionEnvelope(success=True, data={"items": [], "total": 0})
    """

    model_config = ConfigDict(extra="allow")

    success: bool
    data: Any | None = None
    message: str | None = None
    error: ExecutionError | None = None

    @field_validator("error", mode="before")
    @classmethod
    def _empty_as_none(cls, value: Any) -> Any:
        return _empty_list_as_none(value)


class ToolAnnotations(BaseModel):
    """MCP tool annotations derived from the ability's safety annotations."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    read_only_hint: bool = Field(default=False, alias="readOnlyHint")
    destructive_hint: bool = Field(default=False, alias="destructiveHint")
    idempotent_hint: bool = Field(default=False, alias="idempotentHint")


class Tool(BaseModel):
    """
    Tool definition derived from one ability descriptor.

    Tools are immutable and recomputed on every load; two loads of the same
    catalog produce equal Tool lists. `execute()` dispatches through the
    executor bound at load time.

    Example:
        >>> tools = await load_tools(client, exclude_categories=["woocommerce"])
        >>> tool = next(t for t in tools if t.mcp_name == "wordpress_list-content")
        >>> tool.http_method
        <HttpMethod.GET: 'GET'>
        >>> data = await tool.execute({"post_type": "page", "per_page": 5})
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # Identity
    mcp_name: str = Field(..., description="Agent-facing name (e.g., 'wordpress_list-content')")
    name: str = Field(..., description="Original ability name (e.g., 'wordforge/list-content')")
    description: str = Field(default="")
    category: str = Field(default="")

    # Dispatch
    mcp_type: str = Field(default=McpType.TOOL.value)
    http_method: HttpMethod = Field(default=HttpMethod.GET)

    # Interface
    annotations: ToolAnnotations = Field(default_factory=ToolAnnotations)
    input_schema: ArgumentValidator

    executor: Any = Field(default=None, exclude=True, repr=False)

    async def execute(self, args: dict[str, Any] | None = None) -> Any:
        """
        Execute the underlying ability and return its unwrapped payload.

        Raises:
            ArgumentValidationError: If args do not match input_schema
            ExecutionTransportError: On non-2xx status or network failure
            AbilityExecutionError: If the ability reports success=false
        """
        if self.executor is None:
            raise RuntimeError(f"Tool {self.mcp_name} has no executor bound")
        return await self.executor.execute(self, args or {})

    def to_mcp_definition(self) -> dict[str, Any]:
        """Return the MCP `tools/list` entry for this tool."""
        return {
            "name": self.mcp_name,
            "description": self.description,
            "inputSchema": self.input_schema.json_schema,
            "annotations": self.annotations.model_dump(by_alias=True),
        }


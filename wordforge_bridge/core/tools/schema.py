"""
wordforge_bridge.core.tools.schema - JSON Schema to argument validator

Converts the object-shaped JSON schema fragments that abilities declare into
pydantic-backed validators.

Policy:
- No schema: any object is accepted, `{}` included.
- Unknown properties are accepted and passed through, unless the schema sets
  `additionalProperties: false`.
- Primitive types are strict: "5" is not an integer and True is not a number.
- `oneOf` / `anyOf` become unions; a value passes if any alternative does.
- A property whose schema cannot be converted accepts any value; the other
  properties, and `required`, still apply.

Example:
    >>> validator = SchemaConverter().convert({
    ...     "type": "object",
    ...     "properties": {"id": {"oneOf": [{"type": "integer"}, {"type": "string"}]}},
    ...     "required": ["id"],
    ... })
    >>> validator.validate({"id": "hello-world"}).success
    True
    >>> validator.validate({}).errors[0].loc
    ('id',)
"""

import json
import logging
import re
from typing import Annotated, Any, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    create_model,
)

logger = logging.getLogger(__name__)

EMPTY_OBJECT_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}

_PRIMITIVES: dict[str, Any] = {
    "string": StrictStr,
    "integer": StrictInt,
    "number": (StrictInt, StrictFloat),
    "boolean": StrictBool,
    "null": None,
}

# JSON schema keyword -> pydantic Field constraint
_CONSTRAINTS = {
    "minimum": "ge",
    "maximum": "le",
    "exclusiveMinimum": "gt",
    "exclusiveMaximum": "lt",
    "minLength": "min_length",
    "maxLength": "max_length",
    "pattern": "pattern",
    "minItems": "min_length",
    "maxItems": "max_length",
}


class ValidationIssue(BaseModel):
    """One typed validation failure."""

    model_config = ConfigDict(frozen=True)

    loc: tuple[str | int, ...] = ()
    message: str
    type: str


class ValidationResult(BaseModel):
    """Outcome of validating a candidate argument object."""

    success: bool
    value: Any = None
    errors: list[ValidationIssue] = Field(default_factory=list)

    def summary(self) -> str:
        """Errors as "path: message" pairs joined with "; "."""
        return "; ".join(
            f"{'.'.join(str(p) for p in issue.loc) or '<root>'}: {issue.message}"
            for issue in self.errors
        )


class ArgumentValidator:
    """
    Validates tool arguments against a converted JSON schema.

    Equality is structural on the source schema so that two loads of the
    same catalog compare equal.
    """

    def __init__(self, adapter: TypeAdapter, source: dict[str, Any] | None) -> None:
        self._adapter = adapter
        self._source = source

    @property
    def json_schema(self) -> dict[str, Any]:
        """The source JSON schema, or an empty object schema when none was declared."""
        if self._source is None:
            return dict(EMPTY_OBJECT_SCHEMA)
        return self._source

    def validate(self, value: Any) -> ValidationResult:
        """Validate a candidate value; never raises for invalid input."""
        try:
            self._adapter.validate_python(value)
        except ValidationError as e:
            return ValidationResult(
                success=False,
                errors=[
                    ValidationIssue(
                        loc=tuple(err.get("loc", ())),
                        message=err.get("msg", ""),
                        type=err.get("type", "value_error"),
                    )
                    for err in e.errors()
                ],
            )
        return ValidationResult(success=True, value=value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArgumentValidator):
            return NotImplemented
        return self._source == other._source

    def __hash__(self) -> int:
        return hash(json.dumps(self._source, sort_keys=True, default=str))

    def __repr__(self) -> str:
        return f"ArgumentValidator({self.json_schema!r})"


class SchemaConverter:
    """
    Turns JSON schema fragments into ArgumentValidator instances.

    Supported keywords: type (single or list), properties, required,
    additionalProperties, items, enum, default, oneOf, anyOf and the numeric,
    string and array bounds in _CONSTRAINTS. Anything else is ignored.
    """

    def convert(self, schema: dict[str, Any] | None, name: str = "Arguments") -> ArgumentValidator:
        """
        Build a validator for `schema`.

        Args:
            schema: Object schema fragment, or None when the ability declares no input
            name: Base name for generated models (used in error messages)

        Returns:
            ArgumentValidator for the schema; a permissive object validator if
            the schema cannot be converted
        """
        if not schema:
            return ArgumentValidator(TypeAdapter(_empty_model(name)), schema)

        try:
            annotation = self._convert_object(schema, _model_name(name))
            return ArgumentValidator(TypeAdapter(annotation), schema)
        except Exception as e:
            logger.debug(
                f"Failed to convert schema for {name}, accepting any object: {e}",
                extra={"schema_name": name},
            )
            return ArgumentValidator(TypeAdapter(_empty_model(name)), schema)

    def _convert_object(self, schema: dict[str, Any], name: str) -> Any:
        alternatives = schema.get("oneOf") or schema.get("anyOf")
        if alternatives and _is_object_like(schema):
            base = {k: v for k, v in schema.items() if k not in ("oneOf", "anyOf")}
            models = [
                self._build_model(_merge_object(base, alt), f"{name}Option{i}")
                for i, alt in enumerate(alternatives)
            ]
            return Union[tuple(models)] if len(models) > 1 else models[0]
        return self._build_model(schema, name)

    def _build_model(self, schema: dict[str, Any], name: str) -> type[BaseModel]:
        properties = dict(schema.get("properties") or {})
        required = set(schema.get("required") or [])
        for missing in sorted(required - properties.keys()):
            properties[missing] = {}
        extra = "forbid" if schema.get("additionalProperties") is False else "allow"

        config = ConfigDict(extra=extra, regex_engine="python-re")

        fields: dict[str, tuple[Any, dict[str, Any]]] = {}
        for index, (prop_name, prop_schema) in enumerate(properties.items()):
            prop_schema = prop_schema if isinstance(prop_schema, dict) else {}
            try:
                annotation = self._convert(prop_schema, f"{name}_{_model_name(prop_name)}")
            except Exception as e:
                logger.debug(
                    f"Unsupported schema for property {prop_name!r} of {name}, accepting any value: {e}",
                    extra={"schema_name": name, "property": prop_name},
                )
                annotation = Any
            # Generated identifiers keep hyphenated or reserved property names valid
            fields[f"field_{index}"] = (
                annotation,
                {
                    "default": ... if prop_name in required else prop_schema.get("default"),
                    "alias": prop_name,
                    "description": prop_schema.get("description"),
                },
            )

        try:
            return _create_model(name, config, fields)
        except Exception:
            # Constraints are only compiled with the whole model; isolate the offending ones
            for key, (annotation, field_kwargs) in fields.items():
                try:
                    _create_model(name, config, {key: (annotation, field_kwargs)})
                except Exception as e:
                    logger.debug(
                        f"Unsupported constraints for property {field_kwargs['alias']!r} of {name}, "
                        f"accepting any value: {e}",
                        extra={"schema_name": name, "property": field_kwargs["alias"]},
                    )
                    fields[key] = (Any, field_kwargs)
            return _create_model(name, config, fields)

    def _convert(self, schema: dict[str, Any], name: str) -> Any:
        alternatives = schema.get("oneOf") or schema.get("anyOf")
        if alternatives:
            if _is_object_like(schema):
                return self._convert_object(schema, name)
            options = [
                self._convert({**_without_union(schema), **alt}, f"{name}Option{i}")
                for i, alt in enumerate(alternatives)
                if isinstance(alt, dict)
            ]
            return Union[tuple(options)] if len(options) > 1 else options[0]

        if "enum" in schema and schema["enum"]:
            choices = list(schema["enum"])
            if "type" not in schema:
                return Literal[tuple(choices)]
            # Check the declared type strictly before membership, so True never passes for 1
            base = self._convert({k: v for k, v in schema.items() if k != "enum"}, name)
            return Annotated[base, AfterValidator(_one_of(choices))]

        schema_type = schema.get("type")
        if isinstance(schema_type, list):
            options = [self._convert({**schema, "type": t}, f"{name}_{t}") for t in schema_type]
            return Union[tuple(options)] if len(options) > 1 else options[0]

        if schema_type == "object":
            if schema.get("properties"):
                return self._build_model(schema, name)
            return dict[str, Any]

        if schema_type == "array":
            items = schema.get("items")
            item_type = self._convert(items, f"{name}Item") if isinstance(items, dict) else Any
            return _constrained(list[item_type], schema)

        if schema_type in _PRIMITIVES:
            base = _PRIMITIVES[schema_type]
            if base is None:
                return None
            if isinstance(base, tuple):
                return Union[tuple(_constrained(member, schema) for member in base)]
            return _constrained(base, schema)

        return Any


def _constrained(base: Any, schema: dict[str, Any]) -> Any:
    constraints = {
        kwarg: schema[keyword] for keyword, kwarg in _CONSTRAINTS.items() if keyword in schema
    }
    if not constraints:
        return base
    return Annotated[base, Field(**constraints)]


def _one_of(choices: list[Any]) -> Any:
    def check(value: Any) -> Any:
        if value not in choices:
            raise ValueError(f"Input should be one of {', '.join(repr(c) for c in choices)}")
        return value

    return check


def _create_model(
    name: str, config: ConfigDict, fields: dict[str, tuple[Any, dict[str, Any]]]
) -> type[BaseModel]:
    return create_model(
        name,
        __config__=config,
        **{key: (annotation, Field(**kwargs)) for key, (annotation, kwargs) in fields.items()},
    )


def _is_object_like(schema: dict[str, Any]) -> bool:
    return schema.get("type") == "object" or "properties" in schema


def _without_union(schema: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in schema.items() if k not in ("oneOf", "anyOf", "description")}


def _merge_object(base: dict[str, Any], alternative: dict[str, Any]) -> dict[str, Any]:
    merged = {**base, **alternative}
    merged["type"] = "object"
    merged["properties"] = {**(base.get("properties") or {}), **(alternative.get("properties") or {})}
    merged["required"] = list(
        dict.fromkeys([*(base.get("required") or []), *(alternative.get("required") or [])])
    )
    return merged


def _model_name(name: str) -> str:
    parts = re.split(r"[^0-9a-zA-Z]+", name)
    return "".join(p[:1].upper() + p[1:] for p in parts if p) or "Arguments"


def _empty_model(name: str) -> type[BaseModel]:
    return create_model(_model_name(name), __config__=ConfigDict(extra="allow"))

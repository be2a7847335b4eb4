"""
Tests for wordforge_bridge.core.tools.schema - JSON Schema to validator conversion.
"""

import pytest

from wordforge_bridge.core.tools.schema import (
    EMPTY_OBJECT_SCHEMA,
    ArgumentValidator,
    SchemaConverter,
)


@pytest.fixture
def converter():
    return SchemaConverter()


LIST_CONTENT_SCHEMA = {
    "type": "object",
    "properties": {
        "post_type": {"type": "string", "default": "post"},
        "status": {"type": "string", "enum": ["publish", "draft", "any"], "default": "any"},
        "per_page": {"type": "integer", "minimum": 1, "maximum": 100},
        "search": {"type": "string", "minLength": 1, "maxLength": 200},
    },
}


# ============================================================================
# Absent schema
# ============================================================================


class TestAbsentSchema:
    def test_accepts_empty_object(self, converter):
        validator = converter.convert(None)
        assert validator.validate({}).success

    def test_accepts_unknown_properties(self, converter):
        validator = converter.convert(None)
        assert validator.validate({"anything": [1, 2, 3]}).success

    def test_rejects_non_objects(self, converter):
        validator = converter.convert(None)
        assert not validator.validate("not an object").success
        assert not validator.validate([1, 2]).success

    def test_empty_schema_behaves_like_absent(self, converter):
        validator = converter.convert({})
        assert validator.validate({}).success
        assert validator.validate({"x": 1}).success

    def test_json_schema_defaults_to_empty_object(self, converter):
        assert converter.convert(None).json_schema == EMPTY_OBJECT_SCHEMA


# ============================================================================
# Properties and required fields
# ============================================================================


class TestProperties:
    def test_valid_arguments(self, converter):
        validator = converter.convert(LIST_CONTENT_SCHEMA)
        result = validator.validate({"post_type": "page", "per_page": 5})
        assert result.success
        assert result.value == {"post_type": "page", "per_page": 5}

    def test_no_properties_required_by_default(self, converter):
        validator = converter.convert(LIST_CONTENT_SCHEMA)
        assert validator.validate({}).success

    def test_required_field_missing(self, converter):
        validator = converter.convert(
            {"type": "object", "properties": {"id": {"type": "integer"}}, "required": ["id"]}
        )
        result = validator.validate({})
        assert not result.success
        assert result.errors[0].loc == ("id",)
        assert result.errors[0].type == "missing"

    def test_required_name_without_property_accepts_any_value(self, converter):
        validator = converter.convert({"type": "object", "required": ["payload"]})
        assert validator.validate({"payload": {"nested": True}}).success
        assert not validator.validate({}).success

    def test_hyphenated_and_reserved_property_names(self, converter):
        validator = converter.convert(
            {
                "type": "object",
                "properties": {
                    "post-type": {"type": "string"},
                    "class": {"type": "string"},
                },
                "required": ["post-type"],
            }
        )
        assert validator.validate({"post-type": "page", "class": "x"}).success
        assert not validator.validate({"class": "x"}).success

    def test_unknown_properties_accepted(self, converter):
        validator = converter.convert(LIST_CONTENT_SCHEMA)
        assert validator.validate({"post_type": "page", "unexpected": 1}).success

    def test_additional_properties_false_rejects_unknown(self, converter):
        validator = converter.convert({**LIST_CONTENT_SCHEMA, "additionalProperties": False})
        result = validator.validate({"post_type": "page", "unexpected": 1})
        assert not result.success
        assert result.errors[0].loc == ("unexpected",)

    def test_summary_lists_every_issue(self, converter):
        validator = converter.convert(
            {
                "type": "object",
                "properties": {"id": {"type": "integer"}, "title": {"type": "string"}},
                "required": ["id", "title"],
            }
        )
        summary = validator.validate({}).summary()
        assert "id: " in summary
        assert "title: " in summary


# ============================================================================
# Primitive strictness and constraints
# ============================================================================


class TestPrimitives:
    def test_integer_rejects_numeric_string(self, converter):
        validator = converter.convert({"type": "object", "properties": {"n": {"type": "integer"}}})
        assert validator.validate({"n": 5}).success
        assert not validator.validate({"n": "5"}).success

    def test_integer_rejects_bool(self, converter):
        validator = converter.convert({"type": "object", "properties": {"n": {"type": "integer"}}})
        assert not validator.validate({"n": True}).success

    def test_number_accepts_int_and_float(self, converter):
        validator = converter.convert({"type": "object", "properties": {"x": {"type": "number"}}})
        assert validator.validate({"x": 2}).success
        assert validator.validate({"x": 2.5}).success
        assert not validator.validate({"x": "2.5"}).success

    def test_number_bounds_apply_to_both_members(self, converter):
        validator = converter.convert(
            {"type": "object", "properties": {"x": {"type": "number", "minimum": 0, "maximum": 1}}}
        )
        assert validator.validate({"x": 0.5}).success
        assert not validator.validate({"x": 2}).success
        assert not validator.validate({"x": -0.1}).success

    def test_boolean_is_strict(self, converter):
        validator = converter.convert({"type": "object", "properties": {"b": {"type": "boolean"}}})
        assert validator.validate({"b": False}).success
        assert not validator.validate({"b": "false"}).success

    def test_integer_bounds(self, converter):
        validator = converter.convert(LIST_CONTENT_SCHEMA)
        assert validator.validate({"per_page": 100}).success
        assert not validator.validate({"per_page": 0}).success
        assert not validator.validate({"per_page": 101}).success

    def test_string_length(self, converter):
        validator = converter.convert(LIST_CONTENT_SCHEMA)
        assert not validator.validate({"search": ""}).success
        assert not validator.validate({"search": "x" * 201}).success

    def test_pattern(self, converter):
        validator = converter.convert(
            {"type": "object", "properties": {"slug": {"type": "string", "pattern": "^[a-z-]+$"}}}
        )
        assert validator.validate({"slug": "hello-world"}).success
        assert not validator.validate({"slug": "Hello World"}).success

    def test_enum(self, converter):
        validator = converter.convert(LIST_CONTENT_SCHEMA)
        assert validator.validate({"status": "draft"}).success
        assert not validator.validate({"status": "archived"}).success

    def test_pattern_with_lookahead(self, converter):
        validator = converter.convert(
            {"type": "object", "properties": {"slug": {"type": "string", "pattern": "^(?!admin).*$"}}}
        )
        assert validator.validate({"slug": "about-us"}).success
        assert not validator.validate({"slug": "admin-panel"}).success

    def test_typed_enum_is_strict(self, converter):
        validator = converter.convert(
            {"type": "object", "properties": {"n": {"type": "integer", "enum": [1, 2]}}}
        )
        assert validator.validate({"n": 2}).success
        assert not validator.validate({"n": True}).success
        assert not validator.validate({"n": "1"}).success
        assert not validator.validate({"n": 3}).success

    def test_nullable_enum(self, converter):
        validator = converter.convert(
            {
                "type": "object",
                "properties": {"status": {"type": ["string", "null"], "enum": ["draft", None]}},
            }
        )
        assert validator.validate({"status": None}).success
        assert validator.validate({"status": "draft"}).success
        assert not validator.validate({"status": "publish"}).success

    def test_nullable_type_list(self, converter):
        validator = converter.convert(
            {"type": "object", "properties": {"parent": {"type": ["integer", "null"]}}}
        )
        assert validator.validate({"parent": 3}).success
        assert validator.validate({"parent": None}).success
        assert not validator.validate({"parent": "3"}).success


# ============================================================================
# Arrays and nested objects
# ============================================================================


class TestContainers:
    def test_array_items(self, converter):
        validator = converter.convert(
            {
                "type": "object",
                "properties": {"tags": {"type": "array", "items": {"type": "string"}, "minItems": 1}},
            }
        )
        assert validator.validate({"tags": ["a", "b"]}).success
        assert not validator.validate({"tags": [1]}).success
        assert not validator.validate({"tags": []}).success

    def test_nested_object(self, converter):
        validator = converter.convert(
            {
                "type": "object",
                "properties": {
                    "meta": {
                        "type": "object",
                        "properties": {"key": {"type": "string"}},
                        "required": ["key"],
                    }
                },
            }
        )
        assert validator.validate({"meta": {"key": "color"}}).success
        result = validator.validate({"meta": {}})
        assert not result.success
        assert result.errors[0].loc == ("meta", "key")

    def test_free_form_object(self, converter):
        validator = converter.convert(
            {"type": "object", "properties": {"attrs": {"type": "object"}}}
        )
        assert validator.validate({"attrs": {"align": "wide", "level": 2}}).success
        assert not validator.validate({"attrs": "wide"}).success


# ============================================================================
# Unions
# ============================================================================


class TestUnions:
    def test_one_of_id_or_slug(self, converter):
        validator = converter.convert(
            {
                "type": "object",
                "properties": {
                    "id": {"oneOf": [{"type": "integer"}, {"type": "string"}]},
                },
                "required": ["id"],
            }
        )
        assert validator.validate({"id": 42}).success
        assert validator.validate({"id": "hello-world"}).success
        assert not validator.validate({"id": 4.2}).success

    def test_any_of(self, converter):
        validator = converter.convert(
            {
                "type": "object",
                "properties": {
                    "value": {"anyOf": [{"type": "boolean"}, {"type": "array", "items": {"type": "integer"}}]}
                },
            }
        )
        assert validator.validate({"value": True}).success
        assert validator.validate({"value": [1, 2]}).success
        assert not validator.validate({"value": "yes"}).success

    def test_object_level_one_of(self, converter):
        validator = converter.convert(
            {
                "type": "object",
                "properties": {"id": {"type": "integer"}, "slug": {"type": "string"}},
                "oneOf": [{"required": ["id"]}, {"required": ["slug"]}],
            }
        )
        assert validator.validate({"id": 1}).success
        assert validator.validate({"slug": "about"}).success
        assert not validator.validate({}).success


# ============================================================================
# Fallback and equality
# ============================================================================


class TestValidatorIdentity:
    def test_unconvertible_schema_falls_back_to_permissive(self, converter):
        validator = converter.convert(
            {"type": "object", "properties": {"mode": {"enum": [{"a": 1}, [1, 2]]}}}
        )
        assert isinstance(validator, ArgumentValidator)
        assert validator.validate({}).success

    def test_unconvertible_property_keeps_rest_of_schema(self, converter):
        validator = converter.convert(
            {
                "type": "object",
                "properties": {
                    "slug": {"type": "string", "pattern": "(["},
                    "id": {"type": "integer"},
                },
                "required": ["id"],
            }
        )

        assert validator.validate({"id": 1, "slug": 42}).success
        missing = validator.validate({})
        assert not missing.success
        assert missing.errors[0].loc == ("id",)
        assert not validator.validate({"id": "1"}).success

    def test_unconvertible_enum_keeps_required(self, converter):
        validator = converter.convert(
            {
                "type": "object",
                "properties": {"mode": {"enum": [{"a": 1}, [1, 2]]}, "id": {"type": "integer"}},
                "required": ["id"],
            }
        )
        assert validator.validate({"id": 1}).success
        assert not validator.validate({"mode": [1, 2]}).success

    def test_equal_for_equal_sources(self, converter):
        first = converter.convert(LIST_CONTENT_SCHEMA)
        second = SchemaConverter().convert(dict(LIST_CONTENT_SCHEMA))
        assert first == second
        assert hash(first) == hash(second)

    def test_not_equal_for_different_sources(self, converter):
        assert converter.convert(LIST_CONTENT_SCHEMA) != converter.convert(None)

    def test_json_schema_returns_source(self, converter):
        assert converter.convert(LIST_CONTENT_SCHEMA).json_schema == LIST_CONTENT_SCHEMA

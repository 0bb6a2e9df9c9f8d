import pytest

from openapi_model_generator.pipeline.analyzer.ir_nodes import UNTYPED, PrimitiveKind, TypeKind, TypeRef
from openapi_model_generator.pipeline.analyzer.type_mapper import ObjectShape, TypeMapper
from openapi_model_generator.pipeline.schema_ast import ObjectNode, PrimitiveNode, PropertyDef


@pytest.mark.parametrize(
    "kind, fmt, expected",
    [
        ("string", None, PrimitiveKind.TEXT),
        ("string", "uuid", PrimitiveKind.UNIQUE_ID),
        ("string", "date-time", PrimitiveKind.TIMESTAMP),
        ("string", "date", PrimitiveKind.DATE),
        ("string", "email", PrimitiveKind.TEXT),
        ("string", "UUID", PrimitiveKind.UNIQUE_ID),
        ("integer", None, PrimitiveKind.INTEGER64),
        ("integer", "int32", PrimitiveKind.INTEGER64),
        ("number", "float", PrimitiveKind.FLOAT64),
        ("boolean", None, PrimitiveKind.BOOLEAN),
    ],
)
def test_map_primitive(kind, fmt, expected):
    assert TypeMapper().map_primitive(kind, fmt) == TypeRef.primitive(expected)


def test_unknown_kind_is_untyped():
    mapper = TypeMapper()
    assert mapper.map_primitive("null") == UNTYPED
    assert mapper.map_primitive(None) == UNTYPED


def test_format_override():
    mapper = TypeMapper({"semver": "semver::Version", "uuid": "MyUuid"})

    result = mapper.map_primitive("string", "semver")
    assert result.kind is TypeKind.CUSTOM
    assert result.name == "semver::Version"

    # Overrides take precedence over built-in formats
    assert mapper.map_primitive("string", "uuid") == TypeRef.custom("MyUuid")


def test_enum_value_type():
    mapper = TypeMapper()
    assert mapper.map_enum_value_type("integer") is PrimitiveKind.INTEGER64
    assert mapper.map_enum_value_type("string") is PrimitiveKind.TEXT


def test_object_shape():
    prop = PropertyDef(name="id", schema=PrimitiveNode(type_name="string"))
    assert TypeMapper.object_shape(ObjectNode(properties=(prop,))) == ObjectShape.STRUCT
    assert TypeMapper.object_shape(ObjectNode(additional_properties=True)) == ObjectShape.MAP
    assert TypeMapper.object_shape(ObjectNode()) == ObjectShape.EMPTY

import pytest

from openapi_model_generator.pipeline.analyzer.reference_resolver import ReferenceResolver
from openapi_model_generator.pipeline.errors import (
    CyclicReferenceError,
    InvalidSchemaShapeError,
    UnresolvedReferenceError,
)
from openapi_model_generator.pipeline.schema_ast import ObjectNode, RefNode, SchemaParser


def make_resolver(schemas, **components):
    document = {"components": {"schemas": schemas, **components}}
    return ReferenceResolver(SchemaParser().parse(document))


def ref(name, **kwargs):
    return RefNode(ref_path=f"#/components/schemas/{name}", **kwargs)


class TestResolve:
    def test_resolves_and_normalizes(self):
        resolver = make_resolver({"user-name": {"type": "object", "description": "A user"}})
        resolved = resolver.resolve_schema(ref("user-name"))

        assert resolved.source_name == "user-name"
        assert resolved.target_name == "UserName"
        assert isinstance(resolved.target, ObjectNode)
        assert resolved.description == "A user"

    @pytest.mark.parametrize(
        "ref_path",
        [
            "#/components/schemas/Missing",
            "#/definitions/Pet",
            "https://example.com/schemas/Pet",
            "#/components/schemas/Pet/properties/id",
            "#/components/parameters/Pet",
        ],
    )
    def test_unresolved(self, ref_path):
        resolver = make_resolver({"Pet": {"type": "object"}})
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            resolver.resolve(ref_path, schema_name="Owner")
        assert exc_info.value.ref_path == ref_path
        assert exc_info.value.schema_name == "Owner"
        assert str(exc_info.value).startswith("[Owner]")

    def test_pointer_unescaping(self):
        resolver = make_resolver({"a/b": {"type": "string"}})
        assert resolver.resolve("#/components/schemas/a~1b").source_name == "a/b"

    def test_target_nullable_propagates(self):
        resolver = make_resolver({"Note": {"type": "string", "nullable": True}})
        assert resolver.resolve_schema(ref("Note")).nullable is True

    def test_caller_nullable_wins(self):
        resolver = make_resolver({"Note": {"type": "string", "nullable": True}})
        assert resolver.resolve_schema(ref("Note", nullable=False)).nullable is False

    def test_nullable_through_alias_chain(self):
        resolver = make_resolver({"A": {"$ref": "#/components/schemas/B"}, "B": {"type": "string", "nullable": True}})
        assert resolver.resolve_schema(ref("A")).nullable is True

    def test_caller_description_and_extensions_win(self):
        resolver = make_resolver({"Pet": {"type": "object", "description": "Pet", "x-rust-attrs": ["#[a]"]}})
        resolved = resolver.resolve_schema(ref("Pet", description="Owner's pet", extensions={"x-rust-attrs": ["#[b]"]}))
        assert resolved.description == "Owner's pet"
        assert resolved.extensions == {"x-rust-attrs": ["#[b]"]}

    def test_schema_ref_must_designate_schema(self):
        resolver = make_resolver({}, requestBodies={"Body": {"content": {}}})
        with pytest.raises(InvalidSchemaShapeError):
            resolver.resolve_schema(RefNode(ref_path="#/components/requestBodies/Body"))


class TestFollow:
    def test_alias_chain(self):
        resolver = make_resolver(
            {
                "A": {"$ref": "#/components/schemas/B"},
                "B": {"$ref": "#/components/schemas/C"},
                "C": {"type": "object"},
            }
        )
        first, node = resolver.follow(ref("A"))

        assert first.target_name == "A"
        assert isinstance(node, ObjectNode)
        assert resolver.active == ()

    def test_cycle(self):
        resolver = make_resolver({"A": {"$ref": "#/components/schemas/B"}, "B": {"$ref": "#/components/schemas/A"}})
        with pytest.raises(CyclicReferenceError) as exc_info:
            resolver.follow(ref("A"))

        assert exc_info.value.chain == ["A", "B", "A"]
        assert "A -> B -> A" in str(exc_info.value)
        assert resolver.active == ()

    def test_entering_detects_revisit(self):
        resolver = make_resolver({"A": {"type": "object"}})
        with resolver.entering("A"):
            assert resolver.active == ("A",)
            with pytest.raises(CyclicReferenceError):
                with resolver.entering("A"):
                    pass
        assert resolver.active == ()

"""
Model synthesis driver.

Walks the schema registry and produces the canonical model set. Every
schema goes through the same pipeline: override interceptor, reference
resolution, composition or union synthesis, then type mapping.

Models are registered when they are complete, so an inline child always
precedes the model that uses it.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..config import CodeGeneratorConfig
from ..errors import InvalidSchemaShapeError, NameCollisionError
from ..schema_ast.nodes import (
    AllOfNode,
    ArrayNode,
    EnumNode,
    ObjectNode,
    OperationDef,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    RequestBodyDef,
    ResponseDef,
    SchemaNode,
    SchemaRegistry,
    UnionNode,
)
from .composition import CompositionMerger
from .ir_nodes import (
    UNTYPED,
    EmptyStruct,
    EnumModel,
    EnumVariant,
    Field,
    RequestBinding,
    ResolvedModel,
    ResponseBinding,
    Struct,
    SynthesisResult,
    TypeAlias,
    TypeKind,
    TypeRef,
    UnionModel,
)
from .naming import description_lines, enum_variant_name, normalize, operation_name
from .overrides import OverrideInterceptor
from .reference_resolver import REQUEST_BODIES, RESPONSES, ReferenceResolver
from .type_mapper import ObjectShape, TypeMapper
from .unions import UnionSynthesizer

logger = logging.getLogger(__name__)

# Field holding additionalProperties next to declared properties
ADDITIONAL_PROPERTIES_FIELD = "additional_properties"

# Enums of other kinds (boolean, number) map to their primitive
NAMED_ENUM_TYPES = ("string", "integer")


class ModelSynthesizer:
    """
    Produces the canonical model set from a schema registry.

    A synthesizer holds per-run state (memo table, resolution stack) and
    should be used for one synthesize() call.
    """

    def __init__(self, config: CodeGeneratorConfig | None = None):
        """
        Initialize the synthesizer.

        Args:
            config: Code generation configuration
        """
        self.config = config or CodeGeneratorConfig()
        self.mapper = TypeMapper(self.config.format_overrides)
        self.interceptor = OverrideInterceptor(self.config.type_extension, self.config.attrs_extension)

        self.registry: SchemaRegistry | None = None
        self.resolver: ReferenceResolver | None = None
        self.merger: CompositionMerger | None = None
        self.unions: UnionSynthesizer | None = None

        self._models: dict[str, ResolvedModel] = {}
        self._sources: dict[str, str] = {}
        self._node_ids: dict[str, int] = {}
        self._requests: list[RequestBinding] = []
        self._responses: list[ResponseBinding] = []
        self._binding_sources: list[tuple[str, str, str]] = []

    def synthesize(self, registry: SchemaRegistry) -> SynthesisResult:
        """
        Synthesize every schema in the registry.

        Order: component schemas, component request bodies, component
        responses, then operation bindings.

        Args:
            registry: The read-only schema registry

        Returns:
            SynthesisResult with models, bindings and dependencies

        Raises:
            ModelSynthesisError: On the first unrecoverable schema
        """
        self._reset(registry)

        for name, node in registry.schemas.items():
            if self._is_ignored(name):
                logger.info("Ignoring schema %s", name)
                continue
            with self.resolver.entering(name, name):
                self.synthesize_named(name, node, name)

        for name, body in registry.request_bodies.items():
            if isinstance(body, RequestBodyDef):
                self._synthesize_component_body(name, body)

        for name, response in registry.responses.items():
            if isinstance(response, ResponseDef):
                self._synthesize_component_body(name, response)

        if self.config.include_operations:
            for operation in registry.operations:
                self._synthesize_operation(operation)
            self._check_binding_names()

        models = _mark_recursive_fields(self._models)
        result = SynthesisResult(
            models=tuple(models.values()),
            requests=tuple(self._requests),
            responses=tuple(self._responses),
            dependencies=self._dependencies(models),
        )
        logger.info(
            "Synthesized %d models, %d request bindings, %d response bindings",
            len(result.models),
            len(result.requests),
            len(result.responses),
        )
        return result

    def _reset(self, registry: SchemaRegistry) -> None:
        self.registry = registry
        self.resolver = ReferenceResolver(registry)
        self.merger = CompositionMerger(self)
        self.unions = UnionSynthesizer(self)
        self._models = {}
        self._sources = {}
        self._node_ids = {}
        self._requests = []
        self._responses = []
        self._binding_sources = []

    def _is_ignored(self, name: str) -> bool:
        ignored = set(self.config.ignore_schemas)
        return name in ignored or normalize(name) in ignored

    # ------------------------------------------------------------------
    # Named models
    # ------------------------------------------------------------------

    def synthesize_named(self, name: str, node: SchemaNode, schema_name: str | None = None) -> str:
        """
        Synthesize a model under a name and register it.

        Returns the normalized model name. A node that was already
        synthesized under the same name is not built twice.
        """
        model_name = normalize(name)
        if not model_name:
            raise InvalidSchemaShapeError(f"'{name}' does not normalize to an identifier", schema_name)

        if self._node_ids.get(model_name) == id(node):
            return model_name

        model = self._build_model(model_name, node, schema_name)
        self._register(model, node, schema_name)
        return model_name

    def _register(self, model: ResolvedModel, node: SchemaNode, schema_name: str | None) -> None:
        existing = self._models.get(model.name)
        if existing is None:
            self._models[model.name] = model
            self._sources[model.name] = node.source_path
            self._node_ids[model.name] = id(node)
            logger.debug("Synthesized %s %s from %s", type(model).__name__, model.name, node.source_path)
            return

        if _shape(existing) == _shape(model):
            logger.debug("%s from %s matches the existing model", model.name, node.source_path)
            return

        raise NameCollisionError(model.name, [self._sources[model.name], node.source_path], schema_name)

    def _build_model(self, name: str, node: SchemaNode, schema_name: str | None) -> ResolvedModel:
        description = description_lines(node.description)
        attributes = self.interceptor.attributes(node)

        literal = self.interceptor.type_override(node)
        if literal is not None:
            return TypeAlias(name=name, description=description, attributes=attributes, target=TypeRef.custom(literal))

        if isinstance(node, RefNode):
            first, _ = self.resolver.follow(node, schema_name)
            return TypeAlias(
                name=name,
                description=description,
                attributes=attributes,
                target=TypeRef.named(first.target_name),
            )

        if isinstance(node, ObjectNode):
            shape = self.mapper.object_shape(node)
            if shape == ObjectShape.STRUCT:
                return Struct(
                    name=name,
                    description=description,
                    attributes=attributes,
                    fields=self._object_fields(node, name, schema_name),
                )
            if shape == ObjectShape.MAP:
                return TypeAlias(
                    name=name,
                    description=description,
                    attributes=attributes,
                    target=self._map_type(node, name, "", schema_name),
                )
            return EmptyStruct(name=name, description=description, attributes=attributes)

        if isinstance(node, AllOfNode):
            single = _single_ref(node)
            if single is not None:
                # Wrapper adding nullable or a description to a referenced schema
                first, _ = self.resolver.follow(single, schema_name)
                return TypeAlias(
                    name=name,
                    description=description,
                    attributes=attributes,
                    target=TypeRef.named(first.target_name),
                )
            return self.merger.merge(name, node, schema_name)

        if isinstance(node, UnionNode):
            return self.unions.synthesize(name, node, schema_name)

        if isinstance(node, EnumNode):
            if node.value_type not in NAMED_ENUM_TYPES:
                return TypeAlias(
                    name=name,
                    description=description,
                    attributes=attributes,
                    target=self.mapper.map_primitive(node.value_type),
                )
            return self._enum_model(name, node, schema_name)

        if isinstance(node, ArrayNode):
            return TypeAlias(
                name=name,
                description=description,
                attributes=attributes,
                target=self._array_type(node, name, "", schema_name),
            )

        if isinstance(node, PrimitiveNode):
            return TypeAlias(
                name=name,
                description=description,
                attributes=attributes,
                target=self.mapper.map_primitive(node.type_name, node.format),
            )

        return TypeAlias(name=name, description=description, attributes=attributes, target=UNTYPED)

    def _enum_model(self, name: str, node: EnumNode, schema_name: str | None) -> EnumModel:
        if not node.values:
            raise InvalidSchemaShapeError(f"enum has no values ({node.source_path})", schema_name)

        variants: list[EnumVariant] = []
        values: dict[str, object] = {}
        for index, value in enumerate(node.values):
            member = enum_variant_name(value, index)
            if member in values:
                if values[member] == value:
                    continue
                raise NameCollisionError(f"{name}.{member}", [repr(values[member]), repr(value)], schema_name)
            values[member] = value
            variants.append(EnumVariant(name=member, value=value))

        return EnumModel(
            name=name,
            description=description_lines(node.description),
            attributes=self.interceptor.attributes(node),
            variants=tuple(variants),
            value_type=self.mapper.map_enum_value_type(node.value_type),
        )

    # ------------------------------------------------------------------
    # Fields and inline types
    # ------------------------------------------------------------------

    def _object_fields(self, node: ObjectNode, owner: str, schema_name: str | None) -> tuple[Field, ...]:
        fields: list[Field] = []
        seen: dict[str, str] = {}

        for prop in node.properties:
            field, nullable = self.build_field(prop, owner, schema_name)
            fields.append(replace(field, optional=not prop.is_required or nullable))
            self._claim_field(seen, prop.name, owner, schema_name)

        if node.additional_properties is not None:
            extra = self.additional_properties_field(node, owner, schema_name)
            self._claim_field(seen, extra.name, owner, schema_name)
            fields.append(extra)

        return tuple(fields)

    @staticmethod
    def _claim_field(seen: dict[str, str], name: str, owner: str, schema_name: str | None) -> None:
        key = normalize(name)
        if key in seen:
            raise NameCollisionError(f"{owner}.{key}", [seen[key], name], schema_name)
        seen[key] = name

    def build_field(self, prop: PropertyDef, owner: str, schema_name: str | None = None) -> tuple[Field, bool]:
        """
        Build a field from a property.

        Optionality is left to the caller, which knows the required set.

        Returns:
            The field and whether its value is nullable
        """
        node = prop.schema
        if node is None:
            raise InvalidSchemaShapeError(f"Property '{prop.name}' of {owner} has no schema", schema_name)

        nullable = node.is_nullable
        description = node.description

        if isinstance(node, RefNode) and self.interceptor.type_override(node) is None:
            resolved = self.resolver.resolve_schema(node, schema_name)
            nullable = resolved.nullable
            description = resolved.description
        elif isinstance(node, AllOfNode) and node.nullable is None:
            single = _single_ref(node)
            if single is not None:
                nullable = self.resolver.resolve_schema(single, schema_name).nullable

        field = Field(
            name=prop.name,
            type_ref=self.resolve_type(node, owner, prop.name, schema_name),
            description=description_lines(description),
            attributes=self.interceptor.attributes(node),
        )
        return field, nullable

    def additional_properties_field(self, node: ObjectNode, owner: str, schema_name: str | None = None) -> Field:
        """Flattened map field holding additional properties."""
        return Field(
            name=ADDITIONAL_PROPERTIES_FIELD,
            type_ref=self._map_type(node, owner, "", schema_name),
            flatten=True,
        )

    def resolve_type(self, node: SchemaNode | None, owner: str, hint: str, schema_name: str | None = None) -> TypeRef:
        """
        Resolve the type of a field, item, value or variant.

        Inline structs, enums and unions are synthesized as named models
        called owner + hint.

        Args:
            node: The schema at that position
            owner: Normalized name of the enclosing model
            hint: Property name or positional hint (e.g. "Variant1", "Item")
            schema_name: Name of the schema being synthesized (for error messages)

        Returns:
            TypeRef of the position
        """
        if node is None:
            return UNTYPED

        literal = self.interceptor.type_override(node)
        if literal is not None:
            return TypeRef.custom(literal)

        if isinstance(node, RefNode):
            return TypeRef.named(self.resolver.resolve_schema(node, schema_name).target_name)

        inline_name = owner + normalize(hint)

        if isinstance(node, AllOfNode):
            single = _single_ref(node)
            if single is not None:
                return TypeRef.named(self.resolver.resolve_schema(single, schema_name).target_name)
            return TypeRef.named(self.synthesize_named(inline_name, node, schema_name))

        if isinstance(node, EnumNode) and node.value_type not in NAMED_ENUM_TYPES:
            return self.mapper.map_primitive(node.value_type)

        if isinstance(node, (UnionNode, EnumNode)):
            return TypeRef.named(self.synthesize_named(inline_name, node, schema_name))

        if isinstance(node, ObjectNode):
            shape = self.mapper.object_shape(node)
            if shape == ObjectShape.STRUCT:
                return TypeRef.named(self.synthesize_named(inline_name, node, schema_name))
            if shape == ObjectShape.MAP:
                return self._map_type(node, owner, hint, schema_name)
            return UNTYPED

        if isinstance(node, ArrayNode):
            return self._array_type(node, owner, hint, schema_name)

        if isinstance(node, PrimitiveNode):
            return self.mapper.map_primitive(node.type_name, node.format)

        return UNTYPED

    def _array_type(self, node: ArrayNode, owner: str, hint: str, schema_name: str | None) -> TypeRef:
        return TypeRef.list_of(self.resolve_type(node.items, owner, f"{hint}Item", schema_name))

    def _map_type(self, node: ObjectNode, owner: str, hint: str, schema_name: str | None) -> TypeRef:
        value = node.additional_properties
        if isinstance(value, SchemaNode):
            return TypeRef.map_of(self.resolve_type(value, owner, f"{hint}Value", schema_name))
        return TypeRef.map_of(UNTYPED)

    # ------------------------------------------------------------------
    # Request / response bodies
    # ------------------------------------------------------------------

    def _synthesize_component_body(self, name: str, definition: RequestBodyDef | ResponseDef) -> None:
        """Inline schemas of component request bodies and responses become models."""
        content = definition.primary_content()
        if content is None:
            return
        _, schema = content
        if isinstance(schema, RefNode):
            return
        if self._is_ignored(name):
            logger.info("Ignoring body %s", name)
            return
        self.synthesize_named(name, schema, name)

    def _synthesize_operation(self, operation: OperationDef) -> None:
        op_name = operation_name(operation.method, operation.path, operation.operation_id)
        op_path = f"#/paths/{operation.path}/{operation.method}"
        logger.debug("Synthesizing bindings for %s %s as %s", operation.method.upper(), operation.path, op_name)

        if operation.request_body is not None:
            body = self._body(operation.request_body, REQUEST_BODIES, op_name, "RequestBody")
            if body is not None:
                definition, content_type, type_ref = body
                self._binding_sources.append((f"{op_name}Request", f"{op_path}/requestBody", op_name))
                self._requests.append(
                    RequestBinding(
                        name=f"{op_name}Request",
                        content_type=content_type,
                        body=type_ref,
                        required=definition.required,
                    )
                )

        for status, response in operation.responses.items():
            status_name = normalize(status) or status
            body = self._body(response, RESPONSES, op_name, f"Response{status_name}Body")
            if body is None:
                continue
            definition, content_type, type_ref = body
            self._binding_sources.append((f"{op_name}Response{status_name}", f"{op_path}/responses/{status}", op_name))
            self._responses.append(
                ResponseBinding(
                    name=f"{op_name}Response",
                    status=status_name,
                    content_type=content_type,
                    body=type_ref,
                    description=description_lines(definition.description),
                )
            )

    def _check_binding_names(self) -> None:
        """Binding types share the namespace of the model set."""
        claimed = dict(self._sources)
        for name, source, op_name in self._binding_sources:
            if name in claimed:
                raise NameCollisionError(name, [claimed[name], source], op_name)
            claimed[name] = source

    def _body(
        self,
        definition: RequestBodyDef | ResponseDef | RefNode,
        section: str,
        op_name: str,
        hint: str,
    ) -> tuple[RequestBodyDef | ResponseDef, str, TypeRef] | None:
        """Resolve a request body or response to (definition, media type, body type)."""
        component = None
        seen = set()
        while isinstance(definition, RefNode):
            resolved = self.resolver.resolve(definition.ref_path, schema_name=op_name)
            if resolved.section != section:
                raise InvalidSchemaShapeError(f"'{definition.ref_path}' does not designate a {section} entry", op_name)
            if resolved.source_name in seen:
                raise InvalidSchemaShapeError(f"'{definition.ref_path}' refers back to itself", op_name)
            seen.add(resolved.source_name)
            component = resolved.source_name
            definition = resolved.target

        content = definition.primary_content()
        if content is None:
            return None
        content_type, schema = content

        if isinstance(schema, RefNode) or component is None:
            type_ref = self.resolve_type(schema, op_name, hint, op_name)
        else:
            # Synthesized under the component name in the component pass
            type_ref = self._component_body_type(component, schema)
        return definition, content_type, type_ref

    def _component_body_type(self, component: str, schema: SchemaNode) -> TypeRef:
        name = normalize(component)
        if name in self._models:
            return TypeRef.named(name)
        # Ignored component: resolve the schema in place
        return self.resolve_type(schema, name, "", component)

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    def _dependencies(self, models: dict[str, ResolvedModel]) -> dict[str, frozenset[str]]:
        dependencies: dict[str, frozenset[str]] = {}
        for name, model in models.items():
            identifiers: set[str] = set()
            for type_ref in model.type_refs():
                identifiers |= type_ref.identifiers()
            dependencies[name] = frozenset(identifiers)
        for request in self._requests:
            dependencies[request.name] = frozenset(request.body.identifiers())
        for response in self._responses:
            dependencies[response.type_name] = frozenset(response.body.identifiers())
        return dependencies


def _single_ref(node: AllOfNode) -> RefNode | None:
    """The $ref of an allOf wrapping exactly one reference."""
    if len(node.fragments) == 1 and isinstance(node.fragments[0], RefNode):
        return node.fragments[0]
    return None


def _shape(model: ResolvedModel) -> ResolvedModel:
    """A model without its documentation, for shape comparison."""
    if isinstance(model, Struct):
        fields = tuple(replace(f, description=()) for f in model.fields)
        return replace(model, description=(), fields=fields)
    return replace(model, description=())


def _named_edges(model: ResolvedModel) -> set[str]:
    """Models referenced directly, without a list or map in between."""
    return {t.name for t in model.type_refs() if t.kind is TypeKind.NAMED}


def _mark_recursive_fields(models: dict[str, ResolvedModel]) -> dict[str, ResolvedModel]:
    """Box fields and variants through which their owner is reachable again."""
    edges = {name: _named_edges(model) for name, model in models.items()}
    reachable_cache: dict[str, set[str]] = {}

    def reachable(start: str) -> set[str]:
        if start not in reachable_cache:
            seen = set()
            stack = [start]
            while stack:
                current = stack.pop()
                if current in seen:
                    continue
                seen.add(current)
                stack.extend(edges.get(current, ()))
            reachable_cache[start] = seen
        return reachable_cache[start]

    def is_recursive(owner: str, type_ref: TypeRef) -> bool:
        return type_ref.kind is TypeKind.NAMED and owner in reachable(type_ref.name)

    result = {}
    for name, model in models.items():
        if isinstance(model, Struct):
            fields = tuple(replace(f, boxed=True) if is_recursive(name, f.type_ref) else f for f in model.fields)
            model = replace(model, fields=fields)
        elif isinstance(model, UnionModel):
            variants = tuple(replace(v, boxed=True) if is_recursive(name, v.type_ref) else v for v in model.variants)
            model = replace(model, variants=variants)
        result[name] = model
    return result

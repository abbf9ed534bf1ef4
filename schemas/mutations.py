"""
Mutation input schemas.

Create and update inputs come in two flavours:

* checked (``<E>CreateInput``): relations are written through nested
  envelopes (``{"department": {"connect": {"id": ...}}}``) and the foreign
  key columns they own are not accepted;
* unchecked (``<E>UncheckedCreateInput``): the foreign key columns are
  written directly and only relations owned by the other side remain.

Nested envelopes are named after the relation as seen from the target,
``<Target>CreateNestedManyWithout<Back>Input`` and so on, where ``Back`` is
the relation on the target that points back at the parent. The parent
supplies that side, so every ``...Without<Back>...`` schema omits it.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel

from schemas.introspection import EntityDescriptor, FieldDescriptor, RelationDescriptor, ScalarKind
from schemas.json_value import json_write_value
from schemas.operations import ensure_update_operations
from schemas.primitives import value_type
from schemas.queries import one_or_many
from schemas.registry import FieldMap, SchemaRegistry


def pascal(name: str) -> str:
    return name[:1].upper() + name[1:]


# ==================== Scalar fields ===================== #

def create_field(field: FieldDescriptor) -> tuple[Any, bool]:
    """(annotation, required) of a column in a create input."""
    if field.kind is ScalarKind.JSON:
        annotation = json_write_value(field.nullable)
    elif field.nullable:
        annotation = Optional[value_type(field)]
    else:
        annotation = value_type(field)
    return annotation, not field.nullable and not field.generated


def update_field(registry: SchemaRegistry, field: FieldDescriptor) -> tuple[Any, bool]:
    """Update inputs take a bare value or a single-operation envelope."""
    if field.kind is ScalarKind.JSON:
        return json_write_value(field.nullable), False
    value = Optional[value_type(field)] if field.nullable else value_type(field)
    operations = registry.ref(ensure_update_operations(registry, field))
    return Union[value, operations], False


# ==================== Nested envelope names ===================== #

def nested_create_name(relation: RelationDescriptor) -> str:
    cardinality = "Many" if relation.to_many else "One"
    return f"{relation.target}CreateNested{cardinality}Without{pascal(relation.back)}Input"


def nested_update_name(relation: RelationDescriptor) -> str:
    if relation.to_many:
        operation = "UpdateMany"
    elif relation.required:
        operation = "UpdateOneRequired"
    else:
        operation = "UpdateOne"
    return f"{relation.target}{operation}Without{pascal(relation.back)}NestedInput"


def _without(entity: EntityDescriptor, back: Optional[str]) -> tuple[Optional[str], frozenset]:
    if back is None:
        return None, frozenset()
    relation = entity.relation(back)
    return back, frozenset(relation.local_fields)


# ==================== Field maps ===================== #

def create_fields(
    registry: SchemaRegistry,
    entity: EntityDescriptor,
    unchecked: bool,
    without: Optional[str] = None,
) -> FieldMap:
    skipped_relation, skipped_columns = _without(entity, without)
    owned = entity.owned_foreign_keys
    fields: FieldMap = {}
    for field in entity.fields:
        if field.name in skipped_columns:
            continue
        if not unchecked and field.name in owned:
            continue
        fields[field.name] = create_field(field)
    for relation in entity.relations:
        if relation.name == skipped_relation:
            continue
        if unchecked and relation.owning:
            continue
        required = not unchecked and relation.owning and relation.required
        fields[relation.name] = (registry.ref(nested_create_name(relation)), required)
    return fields


def update_fields(
    registry: SchemaRegistry,
    entity: EntityDescriptor,
    unchecked: bool,
    without: Optional[str] = None,
    relations: bool = True,
) -> FieldMap:
    skipped_relation, skipped_columns = _without(entity, without)
    owned = entity.owned_foreign_keys
    fields: FieldMap = {}
    for field in entity.fields:
        if field.name in skipped_columns:
            continue
        if not unchecked and field.name in owned:
            continue
        fields[field.name] = update_field(registry, field)
    if not relations:
        return fields
    for relation in entity.relations:
        if relation.name == skipped_relation:
            continue
        if unchecked and relation.owning:
            continue
        fields[relation.name] = (registry.ref(nested_update_name(relation)), False)
    return fields


def many_fields(
    registry: SchemaRegistry,
    entity: EntityDescriptor,
    update: bool,
    without: Optional[str] = None,
) -> FieldMap:
    """Scalar-only shapes used by createMany/updateMany (FK columns included)."""
    _, skipped_columns = _without(entity, without)
    fields: FieldMap = {}
    for field in entity.fields:
        if field.name in skipped_columns:
            continue
        fields[field.name] = update_field(registry, field) if update else create_field(field)
    return fields


# ==================== "Without" family ===================== #

def define_without_family(
    registry: SchemaRegistry, target: EntityDescriptor, back: str, to_many: bool
) -> None:
    """
    Schemas for writing ``target`` rows from the parent on the other side of
    ``target.back``.
    """
    name = target.name
    suffix = f"Without{pascal(back)}Input"
    ref = registry.ref

    registry.define(f"{name}Create{suffix}", lambda: create_fields(registry, target, False, back))
    registry.define(
        f"{name}UncheckedCreate{suffix}", lambda: create_fields(registry, target, True, back)
    )
    registry.define(f"{name}Update{suffix}", lambda: update_fields(registry, target, False, back))
    registry.define(
        f"{name}UncheckedUpdate{suffix}", lambda: update_fields(registry, target, True, back)
    )

    create = lambda: Union[ref(f"{name}Create{suffix}"), ref(f"{name}UncheckedCreate{suffix}")]
    update = lambda: Union[ref(f"{name}Update{suffix}"), ref(f"{name}UncheckedUpdate{suffix}")]

    registry.define(
        f"{name}CreateOrConnect{suffix}",
        lambda: {
            "where": (ref(f"{name}WhereUniqueInput"), True),
            "create": (create(), True),
        },
    )

    if not to_many:
        registry.define(
            f"{name}Upsert{suffix}",
            lambda: {
                "update": (update(), True),
                "create": (create(), True),
                "where": (ref(f"{name}WhereInput"), False),
            },
        )
        registry.define(
            f"{name}UpdateToOneWithWhere{suffix}",
            lambda: {
                "where": (ref(f"{name}WhereInput"), False),
                "data": (update(), True),
            },
        )
        return

    registry.define(
        f"{name}UpsertWithWhereUnique{suffix}",
        lambda: {
            "where": (ref(f"{name}WhereUniqueInput"), True),
            "update": (update(), True),
            "create": (create(), True),
        },
    )
    registry.define(
        f"{name}UpdateWithWhereUnique{suffix}",
        lambda: {
            "where": (ref(f"{name}WhereUniqueInput"), True),
            "data": (update(), True),
        },
    )
    registry.define(
        f"{name}UncheckedUpdateMany{suffix}",
        lambda: many_fields(registry, target, update=True, without=back),
    )
    registry.define(
        f"{name}UpdateManyWithWhere{suffix}",
        lambda: {
            "where": (ref(f"{name}ScalarWhereInput"), True),
            "data": (
                Union[
                    ref(f"{name}UpdateManyMutationInput"),
                    ref(f"{name}UncheckedUpdateMany{suffix}"),
                ],
                True,
            ),
        },
    )
    registry.define(
        f"{name}CreateMany{pascal(back)}Input",
        lambda: many_fields(registry, target, update=False, without=back),
    )
    registry.define(
        f"{name}CreateMany{pascal(back)}InputEnvelope",
        lambda: {
            "data": (one_or_many(ref(f"{name}CreateMany{pascal(back)}Input")), True),
            "skipDuplicates": (bool, False),
        },
    )


# ==================== Nested envelopes ===================== #

def define_nested_envelopes(registry: SchemaRegistry, relation: RelationDescriptor) -> None:
    """Create/update envelopes for writing through ``relation`` from its owner."""
    name = relation.target
    suffix = f"Without{pascal(relation.back)}Input"
    ref = registry.ref
    unique = lambda: ref(f"{name}WhereUniqueInput")
    create = lambda: Union[ref(f"{name}Create{suffix}"), ref(f"{name}UncheckedCreate{suffix}")]
    connect_or_create = lambda: ref(f"{name}CreateOrConnect{suffix}")
    update = lambda: Union[ref(f"{name}Update{suffix}"), ref(f"{name}UncheckedUpdate{suffix}")]

    if not relation.to_many:

        def create_one() -> FieldMap:
            return {
                "create": (create(), False),
                "connectOrCreate": (connect_or_create(), False),
                "connect": (unique(), False),
            }

        def update_one() -> FieldMap:
            fields = create_one()
            fields["upsert"] = (ref(f"{name}Upsert{suffix}"), False)
            if relation.optional:
                where = ref(f"{name}WhereInput")
                fields["disconnect"] = (Union[bool, where], False)
                fields["delete"] = (Union[bool, where], False)
            fields["update"] = (
                Union[ref(f"{name}UpdateToOneWithWhere{suffix}"), update()],
                False,
            )
            return fields

        registry.define(nested_create_name(relation), create_one)
        registry.define(nested_update_name(relation), update_one)
        return

    def create_many() -> FieldMap:
        return {
            "create": (Union[create(), List[create()]], False),
            "connectOrCreate": (one_or_many(connect_or_create()), False),
            "createMany": (
                ref(f"{name}CreateMany{pascal(relation.back)}InputEnvelope"),
                False,
            ),
            "connect": (one_or_many(unique()), False),
        }

    def update_many() -> FieldMap:
        fields = create_many()
        fields["upsert"] = (one_or_many(ref(f"{name}UpsertWithWhereUnique{suffix}")), False)
        for operation in ("set", "disconnect", "delete"):
            fields[operation] = (one_or_many(unique()), False)
        fields["update"] = (one_or_many(ref(f"{name}UpdateWithWhereUnique{suffix}")), False)
        fields["updateMany"] = (one_or_many(ref(f"{name}UpdateManyWithWhere{suffix}")), False)
        fields["deleteMany"] = (one_or_many(ref(f"{name}ScalarWhereInput")), False)
        return fields

    registry.define(nested_create_name(relation), create_many)
    registry.define(nested_update_name(relation), update_many)


# ==================== Entry point ===================== #

def define_mutation_inputs(
    registry: SchemaRegistry,
    entity: EntityDescriptor,
    entities: dict[str, EntityDescriptor],
) -> None:
    name = entity.name
    registry.define(
        f"{name}CreateInput",
        lambda: create_fields(registry, entity, unchecked=False),
        doc=f"Create a {name}; relations are written through nested envelopes.",
    )
    registry.define(
        f"{name}UncheckedCreateInput",
        lambda: create_fields(registry, entity, unchecked=True),
        doc=f"Create a {name} writing foreign key columns directly.",
    )
    registry.define(f"{name}UpdateInput", lambda: update_fields(registry, entity, unchecked=False))
    registry.define(
        f"{name}UncheckedUpdateInput", lambda: update_fields(registry, entity, unchecked=True)
    )
    registry.define(f"{name}CreateManyInput", lambda: many_fields(registry, entity, update=False))
    registry.define(
        f"{name}UpdateManyMutationInput",
        lambda: update_fields(registry, entity, unchecked=False, relations=False),
    )
    registry.define(
        f"{name}UncheckedUpdateManyInput", lambda: many_fields(registry, entity, update=True)
    )

    for relation in entity.relations:
        define_without_family(registry, entities[relation.target], relation.back, relation.to_many)
        define_nested_envelopes(registry, relation)


# ==================== Checked/unchecked equivalence ===================== #

def foreign_key_assignments(entity: EntityDescriptor, payload: Any) -> dict[str, Any]:
    """
    Foreign key column values implied by a validated create payload.

    Unchecked payloads state them directly; checked payloads imply them
    through ``connect`` on an owning relation (when connecting by the
    referenced columns). Either form of the same write yields the same
    mapping.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(by_alias=True, exclude_unset=True)

    assignments: dict[str, Any] = {}
    for relation in entity.relations:
        if not relation.owning:
            continue
        for column in relation.local_fields:
            if payload.get(column) is not None:
                assignments[column] = payload[column]
        nested = payload.get(relation.name)
        if not isinstance(nested, dict) or not isinstance(nested.get("connect"), dict):
            continue
        connect = nested["connect"]
        for local, remote in zip(relation.local_fields, relation.remote_fields):
            if connect.get(remote) is not None:
                assignments[local] = connect[remote]
    return assignments

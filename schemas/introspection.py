"""
Entity descriptors read from the SQLAlchemy mappers.

The declarative models in ``database.models`` are the single source of
truth for fields, relations and unique keys. This module flattens them into
immutable descriptors that the schema builders consume, so nothing past
this point touches SQLAlchemy.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum as PyEnum
from functools import partial
from typing import Any, Callable, Iterable, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SQLEnum,
    Float,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    inspect as sa_inspect,
)
from sqlalchemy.orm import configure_mappers
from sqlalchemy.orm.interfaces import MANYTOMANY, MANYTOONE

from core.errors import SchemaDefinitionError
from database.rules import VALIDATION_INFO_KEY

logger = logging.getLogger(__name__)


class ScalarKind(str, PyEnum):
    """Primitive type of a scalar field."""

    STRING = "String"
    INT = "Int"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    ENUM = "Enum"
    JSON = "Json"


NUMERIC_KINDS = frozenset({ScalarKind.INT, ScalarKind.FLOAT})
ORDERED_KINDS = frozenset({
    ScalarKind.STRING, ScalarKind.INT, ScalarKind.FLOAT, ScalarKind.DATETIME,
})


@dataclass(frozen=True)
class FieldRules:
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    format: Optional[str] = None
    positive: bool = False
    message: Optional[str] = None
    type_message: Optional[str] = None

    @property
    def empty(self) -> bool:
        return self == FieldRules()


@dataclass(frozen=True)
class FieldDescriptor:
    """One scalar column."""

    name: str
    kind: ScalarKind
    nullable: bool
    unique: bool = False
    primary_key: bool = False
    foreign_key: bool = False
    enum: Optional[type] = None
    default: Optional[Callable[[], Any]] = field(default=None, compare=False)
    rules: FieldRules = FieldRules()

    @property
    def generated(self) -> bool:
        """True when the column synthesizes a value if none is supplied."""
        return self.default is not None

    @property
    def numeric(self) -> bool:
        return self.kind in NUMERIC_KINDS

    @property
    def type_label(self) -> str:
        """Name fragment used in filter and update-operation schema names."""
        if self.kind is ScalarKind.ENUM:
            return f"Enum{self.enum.__name__}"
        if self.kind is ScalarKind.BOOLEAN:
            return "Bool"
        return self.kind.value


@dataclass(frozen=True)
class RelationDescriptor:
    """
    One relation as seen from its entity.

    The owning side holds the foreign key columns (``local_fields``) that
    reference ``remote_fields`` on the target.
    """

    name: str
    target: str
    back: str
    to_many: bool
    owning: bool
    required: bool
    local_fields: tuple[str, ...] = ()
    remote_fields: tuple[str, ...] = ()

    @property
    def optional(self) -> bool:
        return not self.to_many and not self.required


@dataclass(frozen=True)
class UniqueKey:
    fields: tuple[str, ...]

    @property
    def name(self) -> str:
        return "_".join(self.fields)

    @property
    def compound(self) -> bool:
        return len(self.fields) > 1


@dataclass(frozen=True)
class EntityDescriptor:
    """Everything the schema builders need to know about one entity."""

    name: str
    fields: tuple[FieldDescriptor, ...]
    relations: tuple[RelationDescriptor, ...]
    unique_keys: tuple[UniqueKey, ...]

    def field(self, name: str) -> FieldDescriptor:
        for item in self.fields:
            if item.name == name:
                return item
        raise KeyError(f"{self.name} has no field {name}")

    def relation(self, name: str) -> RelationDescriptor:
        for item in self.relations:
            if item.name == name:
                return item
        raise KeyError(f"{self.name} has no relation {name}")

    @property
    def scalar_names(self) -> tuple[str, ...]:
        return tuple(item.name for item in self.fields)

    @property
    def owned_foreign_keys(self) -> frozenset[str]:
        """FK columns written through a relation in checked inputs."""
        return frozenset(
            name
            for relation in self.relations
            if relation.owning
            for name in relation.local_fields
        )

    @property
    def single_unique_fields(self) -> tuple[str, ...]:
        return tuple(key.fields[0] for key in self.unique_keys if not key.compound)

    @property
    def compound_keys(self) -> tuple[UniqueKey, ...]:
        return tuple(key for key in self.unique_keys if key.compound)

    @property
    def numeric_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(item for item in self.fields if item.numeric)

    @property
    def to_many_relations(self) -> tuple[RelationDescriptor, ...]:
        return tuple(item for item in self.relations if item.to_many)


# ==================== Column introspection ===================== #

def _scalar_kind(column) -> tuple[ScalarKind, Optional[type]]:
    column_type = column.type
    # SQLEnum is a String subtype, so it is checked first
    if isinstance(column_type, SQLEnum):
        if column_type.enum_class is None:
            raise SchemaDefinitionError(
                f"Column {column.key} must use a Python enum class"
            )
        return ScalarKind.ENUM, column_type.enum_class
    if isinstance(column_type, JSON):
        return ScalarKind.JSON, None
    if isinstance(column_type, Boolean):
        return ScalarKind.BOOLEAN, None
    if isinstance(column_type, DateTime):
        return ScalarKind.DATETIME, None
    if isinstance(column_type, Integer):
        return ScalarKind.INT, None
    # Float is not a Numeric subclass on every SQLAlchemy 2.x release
    if isinstance(column_type, (Float, Numeric)):
        return ScalarKind.FLOAT, None
    if isinstance(column_type, String):
        return ScalarKind.STRING, None
    raise SchemaDefinitionError(
        f"Unsupported column type {column_type!r} for {column.key}"
    )


def _constant(value: Any) -> Any:
    return value


def _default_generator(column) -> Optional[Callable[[], Any]]:
    default = column.default
    if default is None:
        return None
    if default.is_callable:
        # SQLAlchemy wraps generators to take an execution context
        return partial(default.arg, None)
    if default.is_scalar:
        return partial(_constant, default.arg)
    # Server-side SQL expression: nothing to synthesize client-side
    return None


def _describe_column(column, single_primary_key: bool) -> FieldDescriptor:
    kind, enum_class = _scalar_kind(column)
    rules = column.info.get(VALIDATION_INFO_KEY) or {}
    return FieldDescriptor(
        name=column.key,
        kind=kind,
        nullable=bool(column.nullable) and not column.primary_key,
        unique=bool(column.unique) or (column.primary_key and single_primary_key),
        primary_key=bool(column.primary_key),
        foreign_key=bool(column.foreign_keys),
        enum=enum_class,
        default=_default_generator(column),
        rules=FieldRules(**rules),
    )


def _describe_relationship(entity: str, relationship) -> RelationDescriptor:
    if not relationship.back_populates:
        raise SchemaDefinitionError(
            f"Relation {entity}.{relationship.key} has no back reference"
        )
    if relationship.direction is MANYTOMANY:
        raise SchemaDefinitionError(
            f"Relation {entity}.{relationship.key} must go through a join entity"
        )

    owning = relationship.direction is MANYTOONE
    local_fields: tuple[str, ...] = ()
    remote_fields: tuple[str, ...] = ()
    required = False
    if owning:
        pairs = relationship.local_remote_pairs
        local_fields = tuple(local.key for local, _ in pairs)
        remote_fields = tuple(remote.key for _, remote in pairs)
        required = all(not local.nullable for local, _ in pairs)

    return RelationDescriptor(
        name=relationship.key,
        target=relationship.mapper.class_.__name__,
        back=relationship.back_populates,
        to_many=bool(relationship.uselist),
        owning=owning,
        required=required,
        local_fields=local_fields,
        remote_fields=remote_fields,
    )


def _unique_keys(table) -> tuple[UniqueKey, ...]:
    keys: list[UniqueKey] = []

    def add(columns: Iterable) -> None:
        key = UniqueKey(tuple(column.key for column in columns))
        if key.fields and key not in keys:
            keys.append(key)

    add(table.primary_key.columns)
    for column in table.columns:
        if column.unique:
            add([column])
    constraints = [c for c in table.constraints if isinstance(c, UniqueConstraint)]
    for constraint in sorted(constraints, key=lambda c: str(c.name or "")):
        add(constraint.columns)
    return tuple(keys)


# ==================== Entry points ===================== #

def describe_entity(model: type) -> EntityDescriptor:
    """Build the descriptor of one mapped class."""
    mapper = sa_inspect(model)
    table = mapper.local_table
    single_primary_key = len(table.primary_key.columns) == 1

    fields = tuple(
        _describe_column(prop.columns[0], single_primary_key)
        for prop in mapper.column_attrs
    )
    relations = tuple(
        _describe_relationship(model.__name__, rel) for rel in mapper.relationships
    )
    return EntityDescriptor(
        name=model.__name__,
        fields=fields,
        relations=relations,
        unique_keys=_unique_keys(table),
    )


def describe_models(models: Iterable[type]) -> dict[str, EntityDescriptor]:
    """
    Describe a closed set of mapped classes.

    Raises:
        SchemaDefinitionError: if a relation points outside the set or its
            back reference is missing on the target.
    """
    configure_mappers()
    entities = {model.__name__: describe_entity(model) for model in models}

    for entity in entities.values():
        for relation in entity.relations:
            target = entities.get(relation.target)
            if target is None:
                raise SchemaDefinitionError(
                    f"{entity.name}.{relation.name} targets unknown entity {relation.target}"
                )
            try:
                target.relation(relation.back)
            except KeyError as exc:
                raise SchemaDefinitionError(
                    f"{entity.name}.{relation.name} back reference "
                    f"{relation.target}.{relation.back} does not exist"
                ) from exc

    logger.debug(f"Described {len(entities)} entities")
    return entities

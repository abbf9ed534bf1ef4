"""
Entity shape schemas.

Eight variants per entity, differing in which fields are required and
whether relations are embedded:

    <E>                                    declared shape
    <E>Partial                             every field optional
    <E>OptionalDefaults                    generated fields optional, filled in
    <E>WithRelations                       + relations (full)
    <E>OptionalDefaultsWithRelations       defaults + relations (defaults)
    <E>PartialWithRelations                partial + relations (partial)
    <E>OptionalDefaultsWithPartialRelations
    <E>WithPartialRelations
"""

from enum import Enum as PyEnum
from typing import Any, Callable, Dict, List, Optional

from pydantic import model_validator

from schemas.introspection import EntityDescriptor, FieldDescriptor, ScalarKind
from schemas.json_value import JsonValue, NullableJsonValue
from schemas.primitives import value_type
from schemas.registry import EntityModel, FieldMap, SchemaRegistry


class FieldMode(str, PyEnum):
    """Requiredness applied to scalar fields of a shape."""

    DECLARED = "declared"
    PARTIAL = "partial"
    DEFAULTS = "defaults"


# suffix -> (scalar mode, relation suffix or None, relations optional)
SHAPES = {
    "": (FieldMode.DECLARED, None, False),
    "Partial": (FieldMode.PARTIAL, None, True),
    "OptionalDefaults": (FieldMode.DEFAULTS, None, False),
    "WithRelations": (FieldMode.DECLARED, "WithRelations", False),
    "OptionalDefaultsWithRelations": (FieldMode.DEFAULTS, "OptionalDefaultsWithRelations", False),
    "PartialWithRelations": (FieldMode.PARTIAL, "PartialWithRelations", True),
    "OptionalDefaultsWithPartialRelations": (FieldMode.DEFAULTS, "PartialWithRelations", True),
    "WithPartialRelations": (FieldMode.DECLARED, "PartialWithRelations", True),
}


def shape_field(field: FieldDescriptor, mode: FieldMode) -> tuple[Any, bool]:
    """(annotation, required) of a scalar field in an entity shape."""
    if field.kind is ScalarKind.JSON:
        # JSON values already admit null
        annotation = NullableJsonValue if mode is FieldMode.DEFAULTS else JsonValue
    elif field.nullable:
        annotation = Optional[value_type(field)]
    else:
        annotation = value_type(field)

    if field.nullable or mode is FieldMode.PARTIAL:
        return annotation, False
    if mode is FieldMode.DEFAULTS and field.generated:
        return annotation, False
    return annotation, True


def _generated_defaults(generators: Dict[str, Callable[[], Any]]):
    """Before-validator filling omitted generated fields."""

    def fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        missing = [name for name in generators if name not in data]
        if not missing:
            return data
        # Never mutate the caller's payload
        filled = dict(data)
        for name in missing:
            filled[name] = generators[name]()
        return filled

    return model_validator(mode="before")(fill_defaults)


def define_entity_shapes(registry: SchemaRegistry, entity: EntityDescriptor) -> None:
    """Define all eight shape variants of ``entity``."""
    generators = {field.name: field.default for field in entity.fields if field.generated}

    for suffix, (mode, relation_suffix, relations_optional) in SHAPES.items():

        def fields(mode=mode, relation_suffix=relation_suffix, optional=relations_optional) -> FieldMap:
            shape: FieldMap = {field.name: shape_field(field, mode) for field in entity.fields}
            if relation_suffix is None:
                return shape
            for relation in entity.relations:
                target = registry.ref(f"{relation.target}{relation_suffix}")
                if relation.to_many:
                    shape[relation.name] = (List[target], not optional)
                elif relation.required:
                    shape[relation.name] = (target, not optional)
                else:
                    shape[relation.name] = (Optional[target], False)
            return shape

        validators = None
        if mode is FieldMode.DEFAULTS and generators:
            validators = {"fill_defaults": _generated_defaults(generators)}

        registry.define(
            f"{entity.name}{suffix}",
            fields,
            base=EntityModel,
            validators=validators,
            doc=f"{entity.name} ({suffix or 'declared shape'}).",
        )

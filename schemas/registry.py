"""
Schema registry.

Every derived schema is a pydantic model created at runtime and published
into a namespace module (``schemas.generated`` for the process-wide
registry). Models refer to each other (and to themselves) by name through
forward references, so the cyclic graph User -> Job -> Department -> User
can be declared in any order. Pydantic resolves the references against that
namespace the first time a model is used.

Construction happens in two passes: ``define`` every model, then ``wire``,
which proves that every referenced name was defined and seals the registry.
"""

import keyword
import logging
import sys
from types import ModuleType
from typing import Any, Callable, Dict, ForwardRef, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, create_model

from core.errors import SchemaDefinitionError, UnknownSchemaError

logger = logging.getLogger(__name__)


class InputModel(BaseModel):
    """Base for query and mutation inputs: closed shape, accepted by wire name only."""

    model_config = ConfigDict(extra="forbid", defer_build=True)


class EntityModel(BaseModel):
    """Base for entity shapes: unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", defer_build=True)


def python_name(key: str) -> str:
    """Attribute name for a wire key (``in`` -> ``in_``, ``_count`` -> ``count_``)."""
    if key.startswith("_"):
        return key.lstrip("_") + "_"
    if keyword.iskeyword(key):
        return key + "_"
    return key


def namespace_module(name: str) -> ModuleType:
    """Empty module registered in sys.modules, where published models resolve their references."""
    module = ModuleType(name)
    sys.modules[name] = module
    return module


# (annotation, required) keyed by wire name
FieldMap = Dict[str, Tuple[Any, bool]]


class SchemaRegistry:
    """
    Name -> schema table backing every derived validator.

    Not thread-safe while being built; read-only once wired.
    """

    def __init__(self, namespace: ModuleType):
        self._namespace = namespace
        self._models: dict[str, type[BaseModel]] = {}
        self._aliases: dict[str, Any] = {}
        self._adapters: dict[str, TypeAdapter] = {}
        self._references: dict[str, set[str]] = {}
        self._pending: set[str] = set()
        self._current: Optional[str] = None
        self._sealed = False
        self._name_set: Optional[frozenset[str]] = None
        self.entities: dict[str, Any] = {}

    # ------------------------------------------------------------------ #
    # Declaration
    # ------------------------------------------------------------------ #

    def ref(self, name: str) -> ForwardRef:
        """Deferred reference to a schema that may not be defined yet."""
        self._references.setdefault(name, set()).add(self._current or "<unknown>")
        return ForwardRef(name)

    def define(
        self,
        name: str,
        fields: Callable[[], FieldMap],
        base: type[BaseModel] = InputModel,
        validators: Optional[Dict[str, Any]] = None,
        doc: Optional[str] = None,
    ) -> type[BaseModel]:
        """
        Create and publish a model unless one with this name exists.

        ``fields`` is a thunk so that a model is only described once even
        when many builders ask for it.
        """
        if name in self._models:
            return self._models[name]
        if self._sealed:
            raise SchemaDefinitionError(f"Registry is sealed; cannot define {name}")

        previous, self._current = self._current, name
        self._pending.add(name)
        try:
            field_map = fields()
        finally:
            self._current = previous
            self._pending.discard(name)

        definitions = {}
        for key, (annotation, required) in field_map.items():
            attr = python_name(key)
            alias = key if attr != key else None
            if required:
                definitions[attr] = (annotation, Field(..., alias=alias))
            else:
                definitions[attr] = (annotation, Field(None, alias=alias))

        model = create_model(
            name,
            __base__=base,
            __module__=self._namespace.__name__,
            __validators__=validators,
            __doc__=doc,
            **definitions,
        )
        self._models[name] = model
        setattr(self._namespace, name, model)
        return model

    def define_alias(self, name: str, annotation: Any) -> Any:
        """Publish a non-model schema (literal set, union) under a name."""
        if name not in self._aliases:
            if self._sealed:
                raise SchemaDefinitionError(f"Registry is sealed; cannot define {name}")
            self._aliases[name] = annotation
            setattr(self._namespace, name, annotation)
        return self._aliases[name]

    def wire(self, warmup: Iterable[str] = ()) -> "SchemaRegistry":
        """
        Second pass: verify references, compile requested schemas, seal.

        Raises:
            SchemaDefinitionError: if any referenced schema was never defined.
        """
        defined = set(self._models) | set(self._aliases)
        missing = sorted(set(self._references) - defined)
        if missing:
            details = ", ".join(
                f"{name} (from {', '.join(sorted(self._references[name]))})"
                for name in missing[:10]
            )
            raise SchemaDefinitionError(f"Unresolved schema references: {details}")

        self._sealed = True

        for name in warmup:
            schema = self.get(name)
            if isinstance(schema, type) and issubclass(schema, BaseModel):
                schema.model_rebuild()
            logger.debug(f"Compiled schema {name}")

        logger.info(
            f"Schema registry wired: {len(self._models)} models, "
            f"{len(self._aliases)} aliases, {len(self.entities)} entities"
        )
        return self

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __contains__(self, name: str) -> bool:
        # Models still being described count, so self-references terminate
        return name in self._models or name in self._aliases or name in self._pending

    def __len__(self) -> int:
        return len(self._models) + len(self._aliases)

    def names(self) -> list[str]:
        return sorted(set(self._models) | set(self._aliases))

    def name_set(self) -> frozenset[str]:
        """Every registered name, for recognising union labels in error paths."""
        if self._name_set is None or not self._sealed:
            self._name_set = frozenset(self._models) | frozenset(self._aliases)
        return self._name_set

    def get(self, name: str) -> Any:
        """Model class or alias annotation registered under ``name``."""
        if name in self._models:
            return self._models[name]
        if name in self._aliases:
            return self._aliases[name]
        raise UnknownSchemaError(f"Unknown schema: {name}")

    def adapter(self, name: str) -> TypeAdapter:
        """TypeAdapter for an alias schema, built on first use."""
        if name not in self._adapters:
            if name not in self._aliases:
                raise UnknownSchemaError(f"Unknown alias schema: {name}")
            self._adapters[name] = TypeAdapter(self._aliases[name])
        return self._adapters[name]

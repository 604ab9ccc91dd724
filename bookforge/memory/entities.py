"""Base models shared by every stored entity."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, ClassVar

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


def freeze_record(value: Any) -> Any:
    """Read-only copy of a free-form value: mappings become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze_record(item) for key, item in value.items()})
    if isinstance(value, list | tuple):
        return tuple(freeze_record(item) for item in value)
    return value


def thaw_record(value: Any) -> Any:
    """Plain dict/list form of a frozen value, for serialization."""
    if isinstance(value, Mapping):
        return {key: thaw_record(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw_record(item) for item in value]
    return value


# Free-form JSON object (editor blocks, canvas nodes) stored read-only
Record = Annotated[
    dict[str, Any], AfterValidator(freeze_record), PlainSerializer(thaw_record)
]


class StoreModel(BaseModel):
    """Immutable model with camelCase aliases.

    Instances handed out by the store are snapshots: they are frozen, every
    sequence field is a tuple and free-form records are read-only mappings, so
    nothing reachable from a snapshot can change after it was built. Unknown
    fields are rejected. Both the snake_case field name and the camelCase alias
    are accepted on input.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class StoreEntity(StoreModel):
    """An independently addressable entity with a store-assigned id."""

    id: str

    # Kind name used in logs and validation errors
    entity_type: ClassVar[str] = "entity"
    # Field that must be a non-empty string on create
    label_field: ClassVar[str] = "name"
    # Fields callers can never set; silently dropped from create/update payloads
    protected_fields: ClassVar[frozenset[str]] = frozenset({"id"})
    # Child lists owned by value; changed only through their own operations
    owned_collections: ClassVar[frozenset[str]] = frozenset()
    # Embedded record lists whose items get a store id when created without one
    embedded_records: ClassVar[frozenset[str]] = frozenset()

    @property
    def label(self) -> str:
        """Display label (name or title) of the entity."""
        return getattr(self, self.label_field)


class WorldScopedEntity(StoreEntity):
    """An entity owned by a World, carrying a lookup-only back-reference to it."""

    parent_world_id: str = ""

    protected_fields: ClassVar[frozenset[str]] = frozenset({"id", "parent_world_id"})


class HistoryEvent(StoreModel):
    """A dated event embedded in a world or location history."""

    event: str = ""
    event_note: str = ""
    date: str = ""
    linked_timeline_event: str | None = None


"""Typed create/update payloads for store entities.

Each entity has a generated ``<Entity>Patch`` model: every mutable field is
optional and unknown names are rejected. Identity and back-reference fields
(``id``, ``parent_world_id``) are not part of any patch and are silently
dropped from incoming payloads; owned child collections are not patchable.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, Field, create_model
from pydantic import ValidationError as PydanticValidationError

from bookforge.memory.books import Book, Version
from bookforge.memory.entities import StoreEntity, StoreModel
from bookforge.memory.narrative import Chapter, Character, PlotArc
from bookforge.memory.world import Location, Lore, MagicSystem, World, WorldObject
from bookforge.utils.exceptions import EntityValidationError
from bookforge.utils.validation import validate_not_empty

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=StoreEntity)

Payload = Mapping[str, Any] | BaseModel
IdFactory = Callable[[], str]


class EntityPatch(StoreModel):
    """Base class for generated patch models."""

    def changes(self) -> dict[str, Any]:
        """Validated values of the fields the caller actually set, by field name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


def make_patch_model(entity_cls: type[StoreEntity]) -> type[EntityPatch]:
    """Build the patch model for an entity class.

    Args:
        entity_cls: Entity model to derive the patch from.

    Returns:
        A model with every patchable field optional (default None, unvalidated).
    """
    excluded = entity_cls.protected_fields | entity_cls.owned_collections
    field_definitions: dict[str, Any] = {
        name: (info.annotation, Field(default=None, alias=info.alias))
        for name, info in entity_cls.model_fields.items()
        if name not in excluded
    }
    return create_model(
        f"{entity_cls.__name__}Patch",
        __base__=EntityPatch,
        __module__=__name__,
        **field_definitions,
    )


BookPatch = make_patch_model(Book)
VersionPatch = make_patch_model(Version)
CharacterPatch = make_patch_model(Character)
PlotArcPatch = make_patch_model(PlotArc)
ChapterPatch = make_patch_model(Chapter)
WorldPatch = make_patch_model(World)
LocationPatch = make_patch_model(Location)
WorldObjectPatch = make_patch_model(WorldObject)
LorePatch = make_patch_model(Lore)
MagicSystemPatch = make_patch_model(MagicSystem)

PATCH_MODELS: dict[type[StoreEntity], type[EntityPatch]] = {
    Book: BookPatch,
    Version: VersionPatch,
    Character: CharacterPatch,
    PlotArc: PlotArcPatch,
    Chapter: ChapterPatch,
    World: WorldPatch,
    Location: LocationPatch,
    WorldObject: WorldObjectPatch,
    Lore: LorePatch,
    MagicSystem: MagicSystemPatch,
}


def _field_keys(entity_cls: type[StoreEntity], names: frozenset[str]) -> set[str]:
    """Field names plus their aliases for the given fields."""
    keys = set(names)
    for name in names:
        alias = entity_cls.model_fields[name].alias
        if alias:
            keys.add(alias)
    return keys


def _payload_to_dict(entity_cls: type[StoreEntity], payload: Payload) -> dict[str, Any]:
    """Turn a mapping or model payload into a plain dict, minus protected fields."""
    if isinstance(payload, BaseModel):
        data = payload.model_dump(exclude_unset=True)
    elif isinstance(payload, Mapping):
        data = dict(payload)
    else:
        raise EntityValidationError(
            f"{entity_cls.entity_type} payload must be a mapping or model, "
            f"got {type(payload).__name__}",
            entity_cls.entity_type,
        )

    dropped = _field_keys(entity_cls, entity_cls.protected_fields) & data.keys()
    for key in dropped:
        del data[key]
    if dropped:
        logger.debug(
            "Dropped protected fields from %s payload: %s",
            entity_cls.entity_type,
            sorted(dropped),
        )
    return data


def _check_label(entity_cls: type[StoreEntity], data: Mapping[str, Any], required: bool) -> None:
    """Reject an empty name/title; on updates only when the label is being set."""
    label = entity_cls.label_field
    alias = entity_cls.model_fields[label].alias or label
    if not required and label not in data and alias not in data:
        return
    value = data.get(label, data.get(alias))
    try:
        validate_not_empty(value, label)
    except (TypeError, ValueError) as e:
        raise EntityValidationError(
            f"Invalid {entity_cls.entity_type}: {e}", entity_cls.entity_type
        ) from e


def assign_record_ids(
    records: Mapping[str, tuple[Any, ...]], id_factory: IdFactory
) -> dict[str, tuple[Any, ...]]:
    """Give embedded records (character arcs, plot scenes) with an empty id a fresh one.

    Args:
        records: Record tuples keyed by field name.
        id_factory: Source of fresh ids.

    Returns:
        The same fields with every record carrying an id.
    """
    return {
        name: tuple(
            item if item.id else item.model_copy(update={"id": id_factory()}) for item in items
        )
        for name, items in records.items()
    }


def build_entity(
    entity_cls: type[EntityT],
    payload: Payload,
    entity_id: str,
    id_factory: IdFactory | None = None,
    **forced: Any,
) -> EntityT:
    """Construct a new entity from a create payload.

    Args:
        entity_cls: Entity model to build.
        payload: Caller data without id (mapping or model).
        entity_id: Store-assigned id.
        id_factory: Source of ids for embedded records created without one.
        **forced: Fields set by the store that override caller data
            (e.g. parent_world_id).

    Returns:
        The validated entity.

    Raises:
        EntityValidationError: If the label is empty, the payload carries owned
            child collections, or any value fails validation.
    """
    data = _payload_to_dict(entity_cls, payload)

    owned = _field_keys(entity_cls, entity_cls.owned_collections) & data.keys()
    if owned:
        raise EntityValidationError(
            f"Cannot create {entity_cls.entity_type} with child collections {sorted(owned)}; "
            "add children through their own operations",
            entity_cls.entity_type,
        )

    _check_label(entity_cls, data, required=True)

    if "created_at" in entity_cls.model_fields:
        created_at = data.pop("createdAt", None) or data.get("created_at")
        data["created_at"] = created_at or datetime.now().isoformat()

    try:
        entity = entity_cls.model_validate({**data, "id": entity_id, **forced})
    except PydanticValidationError as e:
        raise EntityValidationError(
            f"Invalid {entity_cls.entity_type}: {e}", entity_cls.entity_type
        ) from e

    if id_factory is None:
        return entity
    records = {name: getattr(entity, name) for name in entity_cls.embedded_records}
    return entity.model_copy(update=assign_record_ids(records, id_factory))


def coerce_patch(
    entity_cls: type[StoreEntity], patch: Payload, id_factory: IdFactory | None = None
) -> dict[str, Any]:
    """Validate an update payload against the entity's patch model.

    Args:
        entity_cls: Entity model being updated.
        patch: Patch model instance or mapping of fields to change.
        id_factory: Source of ids for embedded records set without one.

    Returns:
        Validated changes keyed by field name; empty when nothing is set.

    Raises:
        EntityValidationError: If a field is unknown or not patchable, the label
            is set to an empty value, or any value fails validation.
    """
    patch_cls = PATCH_MODELS[entity_cls]
    if isinstance(patch, patch_cls):
        changes = patch.changes()
        _check_label(entity_cls, changes, required=False)
    else:
        data = _payload_to_dict(entity_cls, patch)
        _check_label(entity_cls, data, required=False)
        try:
            changes = patch_cls.model_validate(data).changes()
        except PydanticValidationError as e:
            raise EntityValidationError(
                f"Invalid {entity_cls.entity_type} update: {e}", entity_cls.entity_type
            ) from e

    if id_factory is not None:
        records = {name: changes[name] for name in entity_cls.embedded_records & changes.keys()}
        changes.update(assign_record_ids(records, id_factory))
    return changes


def apply_changes(entity: EntityT, changes: Mapping[str, Any]) -> EntityT:
    """Shallow-merge validated changes over an entity, returning a new snapshot."""
    return entity.model_copy(update=dict(changes))

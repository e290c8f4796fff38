"""
ViewSet: Default Serializer
============================

What:  Reflects an entity's fields into a plain dict, then merges computed
       fields on top.
Why:   Most resources expose their stored columns as-is; the few extra keys a
       response needs (derived values, links) are added per field instead of
       writing a serializer class per resource.
How:   Field reflection, in order of preference:
         1. `schema` given      → pydantic model built with from_attributes
         2. pydantic model      → model_dump()
         3. SQLAlchemy instance → mapped column attributes
         4. dataclass           → dataclasses.asdict()
         5. mapping             → dict(entity)
         6. anything else       → public instance attributes (vars)
       `fields` keeps only the named keys, `exclude` drops keys, then each
       ComputedField is awaited and stored under its key.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import InstanceState
from starlette.requests import Request

from viewset.interfaces import ComputedField, EntityT, Serializer


def reflect_fields(entity: Any) -> Dict[str, Any]:
    """Return the entity's own fields as a new dict."""
    if isinstance(entity, BaseModel):
        return entity.model_dump()

    state = sa_inspect(entity, raiseerr=False)
    if isinstance(state, InstanceState):
        return {attr.key: getattr(entity, attr.key) for attr in state.mapper.column_attrs}

    if dataclasses.is_dataclass(entity) and not isinstance(entity, type):
        return dataclasses.asdict(entity)

    if isinstance(entity, Mapping):
        return dict(entity)

    return {key: value for key, value in vars(entity).items() if not key.startswith("_")}


class DefaultSerializer(Serializer[EntityT]):
    """
    Reflection-based serializer with optional field policy and computed fields.

    Args:
        fields:          Keys to keep (None keeps every reflected key)
        exclude:         Keys to drop after `fields` is applied
        computed_fields: Extra keys, each produced by a ComputedField
        schema:          Optional pydantic model used for reflection instead
                         of the entity's own attributes
    """

    def __init__(
        self,
        fields: Optional[Iterable[str]] = None,
        exclude: Iterable[str] = (),
        computed_fields: Optional[Dict[str, ComputedField[EntityT]]] = None,
        schema: Optional[Type[BaseModel]] = None,
    ):
        self.fields = tuple(fields) if fields is not None else None
        self.exclude = frozenset(exclude)
        self.computed_fields = dict(computed_fields or {})
        self.schema = schema

    def to_mapping(self, entity: EntityT) -> Dict[str, Any]:
        if self.schema is not None:
            data = self.schema.model_validate(entity, from_attributes=True).model_dump()
        else:
            data = reflect_fields(entity)

        if self.fields is not None:
            data = {key: data[key] for key in self.fields if key in data}
        for key in self.exclude:
            data.pop(key, None)
        return data

    async def serialize(self, entity: EntityT, request: Request) -> Dict[str, Any]:
        data = self.to_mapping(entity)
        for key, field in self.computed_fields.items():
            data[key] = await field.serialize(entity, request)
        return data

    async def many_serialize(
        self, entities: Sequence[EntityT], request: Request
    ) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        for entity in entities:
            results.append(await self.serialize(entity, request))
        return results

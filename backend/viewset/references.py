"""
Entity references passed into `PersistenceManager.save`.

`Absent` asks the manager to insert a new row, `Present(entity)` asks it to
update that entity in place. The variant is the only create/update signal.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

EntityT = TypeVar("EntityT")


@dataclass(frozen=True)
class Absent:
    """No entity yet: save() must insert."""

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class Present(Generic[EntityT]):
    """An existing entity: save() must update it in place."""

    entity: EntityT


EntityRef = Union[Absent, Present[Any]]

ABSENT = Absent()

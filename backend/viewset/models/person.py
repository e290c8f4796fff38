"""
ViewSet: Person Model (demo resource)
======================================

What:  ORM model behind the demo `/people` resource.
Why:   Gives the demo app and the adapter tests a real mapped table to run
       the default SQLAlchemyManager against.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from viewset.database import Base


class Person(Base):
    """A named person with an age."""

    __tablename__ = "people"

    # Autoincrement integer key; exposed as the `{pk}` detail placeholder
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    age: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Person(id={self.id}, name='{self.name}', age={self.age})>"

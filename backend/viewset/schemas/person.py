"""
ViewSet: Person Schemas (demo resource)
========================================

What:  Pydantic models for the demo `/people` resource.
How:   - PersonRequest: request body, bound by DefaultValidator on create
         and update (PUT and PATCH share it)
       - PersonLookup: decodes the `{pk}` path parameter into an `id` filter
         for SQLAlchemyManager.get_object
       - PersonResponse: response shape read from the ORM object
"""

from pydantic import BaseModel, Field


class PersonRequest(BaseModel):
    """Body for POST /people/ and PUT/PATCH /people/{pk}."""

    name: str = Field(min_length=1, max_length=255, description="Display name")
    age: int = Field(ge=0, le=200, description="Age in years")


class PersonLookup(BaseModel):
    """Path parameters of a detail route, keyed by model attribute."""

    id: int = Field(alias="pk", ge=1)


class PersonResponse(BaseModel):
    """Serialized person, including the generated id."""

    id: int
    name: str
    age: int

    model_config = {"from_attributes": True}

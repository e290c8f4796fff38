"""
ViewSet: Serializer & Validator Tests
======================================

What:  Tests for DefaultSerializer field reflection and DefaultValidator binding.

What we test:
    ✅ Reflection of pydantic models, ORM rows, dataclasses, mappings, objects
    ✅ fields / exclude policy and schema-based reflection
    ✅ Computed fields are awaited and merged; their errors propagate
    ✅ JSON and form payloads bind into the input schema
"""

from dataclasses import dataclass

import pytest
from pydantic import BaseModel, ValidationError

from viewset import ABSENT, ComputedField, DefaultSerializer, DefaultValidator
from viewset.models import Person
from viewset.schemas import PersonRequest, PersonResponse
from viewset.serializers import reflect_fields


@dataclass
class Pet:
    name: str
    species: str


class Plain:
    def __init__(self):
        self.title = "x"
        self._secret = "hidden"


class Greeting(ComputedField):
    async def serialize(self, entity, request):
        return f"hello {entity.name}"


class Broken(ComputedField):
    async def serialize(self, entity, request):
        raise RuntimeError("cannot compute")


class TestReflectFields:
    def test_pydantic_model(self):
        assert reflect_fields(PersonRequest(name="a", age=1)) == {"name": "a", "age": 1}

    def test_orm_instance_uses_mapped_columns(self):
        assert reflect_fields(Person(id=3, name="a", age=1)) == {"id": 3, "name": "a", "age": 1}

    def test_dataclass(self):
        assert reflect_fields(Pet("rex", "dog")) == {"name": "rex", "species": "dog"}

    def test_mapping_is_copied(self):
        source = {"a": 1}
        result = reflect_fields(source)
        assert result == source
        assert result is not source

    def test_plain_object_skips_private_attributes(self):
        assert reflect_fields(Plain()) == {"title": "x"}


class TestDefaultSerializer:
    @pytest.mark.asyncio
    async def test_reflects_everything_by_default(self, make_request):
        data = await DefaultSerializer().serialize(Pet("rex", "dog"), make_request())
        assert data == {"name": "rex", "species": "dog"}

    @pytest.mark.asyncio
    async def test_fields_and_exclude(self, make_request):
        person = Person(id=1, name="a", age=2)
        only = DefaultSerializer(fields=["name", "missing"])
        without = DefaultSerializer(exclude=["id"])

        assert await only.serialize(person, make_request()) == {"name": "a"}
        assert await without.serialize(person, make_request()) == {"name": "a", "age": 2}

    @pytest.mark.asyncio
    async def test_schema_reflection(self, make_request):
        serializer = DefaultSerializer(schema=PersonResponse)
        data = await serializer.serialize(Person(id=5, name="a", age=2), make_request())
        assert data == {"id": 5, "name": "a", "age": 2}

    @pytest.mark.asyncio
    async def test_computed_fields_are_merged(self, make_request):
        serializer = DefaultSerializer(computed_fields={"greeting": Greeting()})
        data = await serializer.serialize(Pet("rex", "dog"), make_request())
        assert data == {"name": "rex", "species": "dog", "greeting": "hello rex"}

    @pytest.mark.asyncio
    async def test_computed_field_overrides_reflected_key(self, make_request):
        serializer = DefaultSerializer(computed_fields={"name": Greeting()})
        data = await serializer.serialize(Pet("rex", "dog"), make_request())
        assert data["name"] == "hello rex"

    @pytest.mark.asyncio
    async def test_computed_field_error_propagates(self, make_request):
        serializer = DefaultSerializer(computed_fields={"broken": Broken()})
        with pytest.raises(RuntimeError, match="cannot compute"):
            await serializer.serialize(Pet("rex", "dog"), make_request())

    @pytest.mark.asyncio
    async def test_many_serialize_keeps_order(self, make_request):
        pets = [Pet("a", "cat"), Pet("b", "dog"), Pet("c", "owl")]
        results = await DefaultSerializer(fields=["name"]).many_serialize(pets, make_request())
        assert results == [{"name": "a"}, {"name": "b"}, {"name": "c"}]


def json_request(make_request, body: bytes, content_type: str = "application/json"):
    request = make_request(
        method="POST", headers=[(b"content-type", content_type.encode())]
    )
    request._body = body
    return request


class TestDefaultValidator:
    @pytest.mark.asyncio
    async def test_binds_json_into_schema(self, make_request):
        request = json_request(make_request, b'{"name": "a", "age": 21}')
        validated = await DefaultValidator(PersonRequest).validate(ABSENT, request)
        assert validated == PersonRequest(name="a", age=21)

    @pytest.mark.asyncio
    async def test_without_schema_returns_payload(self, make_request):
        request = json_request(make_request, b'{"anything": [1, 2]}')
        assert await DefaultValidator().validate(ABSENT, request) == {"anything": [1, 2]}

    @pytest.mark.asyncio
    async def test_schema_errors_propagate(self, make_request):
        request = json_request(make_request, b'{"name": "", "age": -1}')
        with pytest.raises(ValidationError):
            await DefaultValidator(PersonRequest).validate(ABSENT, request)

    @pytest.mark.asyncio
    async def test_non_object_payload_is_rejected(self, make_request):
        request = json_request(make_request, b"[1, 2, 3]")
        with pytest.raises(ValueError, match="JSON object"):
            await DefaultValidator().validate(ABSENT, request)

    @pytest.mark.asyncio
    async def test_form_payload(self, mount, store):
        from viewset import ViewSet

        client = await mount(ViewSet("/people", store, input_schema=PersonRequest))
        response = await client.post("/people/", data={"name": "formy", "age": "44"})

        assert response.status_code == 201
        assert response.json()["name"] == "formy"
        assert response.json()["age"] == 44

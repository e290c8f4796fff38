"""
ViewSet: Error Handling Tests
==============================

What:  Tests for the exception hierarchy, DefaultExceptionHandler, AllowAny
       and the entity reference type.
"""

import json
import logging

import pytest

from viewset import (
    ABSENT,
    Absent,
    AllowAny,
    DefaultExceptionHandler,
    InternalFailure,
    NotFound,
    PermissionDenied,
    Present,
    ValidationFailed,
    ViewSetError,
)
from viewset.context import request_id_var


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "error_cls, status_code",
        [
            (PermissionDenied, 403),
            (NotFound, 404),
            (ValidationFailed, 400),
            (InternalFailure, 500),
        ],
    )
    def test_stage_status_codes(self, error_cls, status_code):
        error = error_cls("boom")
        assert isinstance(error, ViewSetError)
        assert error.status_code == status_code
        assert error.message == "boom"
        assert str(error) == "boom"

    def test_cause_is_chained(self):
        cause = KeyError("pk")
        error = NotFound("Object not found", cause=cause)
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_base_error_carries_explicit_status(self):
        error = ViewSetError("conflict", status_code=409, context={"pk": 1})
        assert error.status_code == 409
        assert error.context == {"pk": 1}
        assert "409" in repr(error)

    def test_not_found_default_message(self):
        assert NotFound().message == "Object not found"


class TestDefaultExceptionHandler:
    @pytest.mark.asyncio
    async def test_viewset_error_uses_its_status(self, make_request):
        response = await DefaultExceptionHandler().handle(PermissionDenied("Denied"), make_request())
        assert response.status_code == 403
        assert json.loads(response.body) == {"message": "Denied"}

    @pytest.mark.asyncio
    async def test_unrecognized_error_defaults_to_400(self, make_request):
        response = await DefaultExceptionHandler().handle(KeyError("oops"), make_request())
        assert response.status_code == 400
        assert json.loads(response.body) == {"message": "'oops'"}

    @pytest.mark.asyncio
    async def test_context_is_never_returned(self, make_request):
        error = InternalFailure("db down", context={"dsn": "secret"})
        response = await DefaultExceptionHandler().handle(error, make_request())
        assert response.status_code == 500
        assert json.loads(response.body) == {"message": "db down"}

    @pytest.mark.asyncio
    async def test_logging_levels_and_request_id(self, make_request, caplog):
        token = request_id_var.set("abc123")
        try:
            with caplog.at_level(logging.WARNING, logger="viewset.handlers"):
                await DefaultExceptionHandler().handle(NotFound(), make_request())
                await DefaultExceptionHandler().handle(
                    InternalFailure("db down", cause=RuntimeError("x")), make_request()
                )
        finally:
            request_id_var.reset(token)

        levels = [record.levelno for record in caplog.records]
        assert levels == [logging.WARNING, logging.ERROR]
        assert all("[abc123]" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_request_id_is_empty_without_middleware(self, make_request, caplog):
        assert request_id_var.get() == ""

        with caplog.at_level(logging.WARNING, logger="viewset.handlers"):
            response = await DefaultExceptionHandler().handle(NotFound(), make_request())

        assert response.status_code == 404
        assert caplog.records[0].getMessage().startswith("[] GET /people/")


class TestAllowAny:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["list", "retrieve", "create", "update", "delete", "custom"])
    async def test_allows_every_action(self, make_request, action):
        assert await AllowAny().check(action, make_request()) is None


class TestEntityReference:
    def test_absent_is_falsy_and_singleton_equal(self):
        assert not ABSENT
        assert ABSENT == Absent()

    def test_present_wraps_entity(self):
        entity = object()
        ref = Present(entity)
        assert ref.entity is entity
        assert ref != ABSENT

    def test_present_is_truthy_even_for_empty_entity(self):
        assert Present({})

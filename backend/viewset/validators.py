"""
ViewSet: Default Form Validator
================================

What:  Binds the request payload straight into the validated-input shape.
How:   The payload is read according to Content-Type (form bodies through
       Starlette's form parser, everything else as JSON) and, when a pydantic
       `schema` is configured, validated with `schema.model_validate`.
       Without a schema the decoded payload dict is the validated input.

Errors:
    Malformed JSON, a non-object payload or a pydantic ValidationError are
    raised unchanged; the dispatcher reports them as 400.
"""

from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel
from starlette.requests import Request

from viewset.interfaces import EntityT, FormValidator
from viewset.references import EntityRef

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class DefaultValidator(FormValidator[EntityT, Union[BaseModel, Dict[str, Any]]]):
    """Validate the payload against `schema` (or pass the raw dict through)."""

    def __init__(self, schema: Optional[Type[BaseModel]] = None):
        self.schema = schema

    async def read_payload(self, request: Request) -> Dict[str, Any]:
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(FORM_CONTENT_TYPES):
            form = await request.form()
            return dict(form)

        payload = await request.json()
        if not isinstance(payload, dict):
            raise ValueError("Request body must be a JSON object")
        return payload

    async def validate(
        self, ref: EntityRef, request: Request
    ) -> Union[BaseModel, Dict[str, Any]]:
        payload = await self.read_payload(request)
        if self.schema is None:
            return payload
        return self.schema.model_validate(payload)

# SPDX-License-Identifier: Apache-2.0
"""Request description and body preparation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from yarl import URL

from doc_translate.network.errors import InvalidURLError, RequestPreparationError

_ALLOWED_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class FormField:
    """One form field.

    A field with a ``filename`` turns the body into multipart/form-data.
    """

    name: str
    value: str | bytes
    filename: str | None = None
    content_type: str | None = None


def _new_request_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Request:
    """Description of one HTTP exchange.

    Attributes:
        url: Absolute endpoint URL.
        method: HTTP method.
        headers: Request headers.
        body: Raw body bytes (mutually exclusive with ``fields``).
        fields: Form fields, encoded urlencoded or multipart.
        request_id: Identifier used for cancellation. Reusing an identifier
            cancels the in-flight request registered under it.
    """

    url: str
    method: str = "POST"
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None
    fields: tuple[FormField, ...] = ()
    request_id: str = field(default_factory=_new_request_id)


@dataclass(frozen=True)
class PreparedRequest:
    """A request ready to hand to a transport."""

    method: str
    url: URL
    headers: dict[str, str]
    data: Any
    request_id: str
    fields: tuple[FormField, ...] = ()

    def field_value(self, name: str) -> str | bytes | None:
        """Return the first form field named ``name``, if any."""
        for form_field in self.fields:
            if form_field.name == name:
                return form_field.value
        return None


def parse_url(raw: str) -> URL:
    """Parse ``raw`` into an absolute http(s) URL.

    Raises:
        InvalidURLError: If the URL is malformed or not absolute http(s).
    """
    try:
        url = URL(raw)
    except (TypeError, ValueError) as e:
        raise InvalidURLError(raw, e) from e
    if not url.is_absolute() or url.scheme not in _ALLOWED_SCHEMES or not url.host:
        raise InvalidURLError(raw)
    return url


def _encode_fields(fields: tuple[FormField, ...]) -> Any:
    form = aiohttp.FormData()
    for form_field in fields:
        if not isinstance(form_field.value, (str, bytes)):
            raise TypeError(
                f"Field {form_field.name!r} has unsupported value type "
                f"{type(form_field.value).__name__}"
            )
        form.add_field(
            form_field.name,
            form_field.value,
            filename=form_field.filename,
            content_type=form_field.content_type,
        )
    return form()


def prepare_request(request: Request) -> PreparedRequest:
    """Validate the URL and encode the body.

    A fresh payload is built on every call; encoded form payloads can only
    be sent once.

    Raises:
        InvalidURLError: On a malformed endpoint.
        RequestPreparationError: If the body cannot be encoded.
    """
    url = parse_url(request.url)

    if request.body is not None and request.fields:
        raise RequestPreparationError("Request has both a raw body and form fields")

    data: Any = request.body
    if request.fields:
        try:
            data = _encode_fields(request.fields)
        except (TypeError, ValueError, LookupError) as e:
            raise RequestPreparationError(
                f"Failed to encode request body: {e}", cause=e
            ) from e

    return PreparedRequest(
        method=request.method.upper(),
        url=url,
        headers=dict(request.headers),
        data=data,
        request_id=request.request_id,
        fields=request.fields,
    )

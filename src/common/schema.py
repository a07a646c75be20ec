"""Common schemas for the API."""

import typing as t

from ninja import Schema
from pydantic import StringConstraints

T = t.TypeVar("T")

StrippedString = t.Annotated[str, StringConstraints(strip_whitespace=True)]
ReasonString = t.Annotated[str, StringConstraints(min_length=1, max_length=500, strip_whitespace=True)]
NotesString = t.Annotated[str, StringConstraints(max_length=1000, strip_whitespace=True)]


class VersionResponse(Schema):
    version: str


class ResponseOk(Schema):
    status: t.Literal["ok"] = "ok"


class Envelope(Schema, t.Generic[T]):
    """Successful response wrapper: ``{"ok": true, "data": ...}``."""

    ok: t.Literal[True] = True
    data: T


class ErrorResponse(Schema):
    """Failed response wrapper carrying a stable error kind."""

    ok: t.Literal[False] = False
    error_kind: str
    message: str
    data: dict[str, t.Any] | None = None

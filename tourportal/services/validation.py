# tourportal/services/validation.py
"""
Resource validation.

Shape checks run against the pydantic schemas in models.schemas and are total:
every field is checked and every violation reported, in declaration order.
Uniqueness is not decided here; callers check the store after validation.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from tourportal.core.errors import InvalidInput
from tourportal.models.schemas import is_valid_slug  # noqa: F401  (re-exported)

logger = logging.getLogger("tourportal.validation")

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class Violation:
    field: str
    message: str


def _field_name(loc) -> str:
    if not loc:
        return "body"
    return ".".join(str(part) for part in loc)


def _message(error: dict) -> str:
    msg = error.get("msg", "Invalid value")
    # Custom validators surface as "Value error, <text>"
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return msg


def _violations(schema: Type[BaseModel], exc: ValidationError) -> List[Violation]:
    order = {}
    for idx, (name, field) in enumerate(schema.model_fields.items()):
        order[name] = idx
        if field.alias:
            order[field.alias] = idx
    violations = [Violation(_field_name(e.get("loc")), _message(e)) for e in exc.errors()]
    # sorted() is stable: several errors on one field keep their order
    return sorted(violations, key=lambda v: order.get(v.field.split(".")[0], len(order)))


def collect_violations(schema: Type[BaseModel], raw: Any) -> List[Violation]:
    """Return every violation of `schema` in `raw`; empty when valid."""
    try:
        schema.model_validate(raw)
    except ValidationError as exc:
        return _violations(schema, exc)
    return []


def validate_payload(schema: Type[M], raw: Any) -> M:
    """Return the normalized model or raise InvalidInput with all violations."""
    try:
        return schema.model_validate(raw)
    except ValidationError as exc:
        violations = _violations(schema, exc)
        logger.debug("Rejected %s: %s", schema.__name__, violations)
        raise InvalidInput(violations) from None


async def json_body(request: Request) -> Any:
    """
    Route dependency for the request body. Declared after the policy
    dependency, so a caller without access never gets a body error.
    """
    try:
        return await request.json()
    except ValueError:
        raise InvalidInput([Violation("body", "Malformed JSON body")]) from None

"""Validation primitives for plugin APIs."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

import pydantic
from pydantic import BaseModel


class ValidationError(ValueError):
    """Raised when validation fails."""

    def __init__(self, message: str, *, details: Any | None = None):
        super().__init__(message)
        self.details = details


class SchemaModel(BaseModel):
    """Strict base model for request/response validation.

    Unknown fields are rejected and floats must be finite, so ``NaN`` or
    ``Infinity`` in a JSON body never reaches the calculator core.
    """

    model_config = pydantic.ConfigDict(extra="forbid", str_strip_whitespace=True, allow_inf_nan=False)


TModel = TypeVar("TModel", bound=SchemaModel)


def _jsonable_errors(exc: pydantic.ValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


def parse_model(model: type[TModel], payload: Mapping[str, Any] | None) -> TModel:
    payload = payload or {}
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError("Invalid request payload", details={"errors": _jsonable_errors(exc)}) from exc


__all__ = ["ValidationError", "SchemaModel", "parse_model"]

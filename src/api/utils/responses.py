"""JSON responses serialized with orjson."""

from decimal import Decimal
from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def _default(value: object) -> object:
    # Amounts are rendered as strings so no precision is lost
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


class ORJSONResponse(JSONResponse):
    """Default response class of the application.

    Pydantic models are dumped in JSON mode; bare Decimal values are written
    as strings, the same way Pydantic renders them.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json")
        return orjson.dumps(content, default=_default, option=orjson.OPT_SORT_KEYS)

"""SQLAlchemy column types for typed JSON values."""
from __future__ import annotations
from typing import Any

from pydantic import TypeAdapter
from sqlalchemy import JSON
from sqlalchemy.types import TypeDecorator


class JSONValue(TypeDecorator):
    """JSON column validated through a pydantic ``TypeAdapter``.

    Values are dumped to plain JSON on the way in and validated back into the
    declared Python type on the way out, so handlers only ever see typed
    objects.
    """

    impl = JSON
    cache_ok = True

    def __init__(self, type_: Any):
        super().__init__()
        self.type_ = type_
        self._adapter = TypeAdapter(type_)

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return self._adapter.dump_python(
            self._adapter.validate_python(value), mode="json"
        )

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self._adapter.validate_python(value)

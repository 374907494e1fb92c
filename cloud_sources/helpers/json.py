"""Helpers to work with (de)serializing of json."""

from __future__ import annotations

from typing import Any

import orjson

JSON_ENCODE_EXCEPTIONS = (TypeError, ValueError)
JSON_DECODE_EXCEPTIONS = (orjson.JSONDecodeError,)

json_loads = orjson.loads


def json_dumps(data: Any, indent: bool = False) -> str:
    """Dump json string."""
    option = orjson.OPT_NON_STR_KEYS
    if indent:
        option |= orjson.OPT_INDENT_2
    return orjson.dumps(data, option=option).decode("utf-8")

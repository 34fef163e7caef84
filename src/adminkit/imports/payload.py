"""Transport encoding for chunk payloads and UTF-8 normalization of row values."""

import base64
from typing import Any

import orjson

Row = dict[str, Any]


def encode_rows(rows: list[Row]) -> str:
    """Serialize rows into a base64 string safe for any broker."""
    return base64.b64encode(orjson.dumps(rows)).decode("ascii")


def decode_rows(rows: list[Row] | str) -> list[Row]:
    """Return rows as a list, decoding them first if they were encoded."""
    if isinstance(rows, str):
        return orjson.loads(base64.b64decode(rows))
    return list(rows)


def utf8_scrub(value: Any) -> Any:
    """Normalize strings to valid UTF-8, replacing invalid sequences with '?'.

    Lists and mappings are walked recursively (mapping keys are kept as-is);
    anything that is not text is returned unchanged.
    """
    if isinstance(value, dict):
        return {key: utf8_scrub(item) for key, item in value.items()}

    if isinstance(value, (list, tuple)):
        return [utf8_scrub(item) for item in value]

    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("utf-8", errors="surrogateescape")

    if isinstance(value, str):
        return value.encode("utf-8", errors="replace").decode("utf-8")

    return value

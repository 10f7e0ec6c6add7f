"""Call body encodings.

A call body is exactly one of three variants: raw bytes, a positional
argument list, or a named argument map. Each variant knows its content type
and how to turn itself into bytes; :func:`decode` is the inverse, as used by
the serving side.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from .. import json
from ..errors import EncodingError
from .fields import ARGS, MAP, OCTET_STREAM


@dataclass(frozen=True)
class RawBody:
    data: bytes = b""
    content_type = OCTET_STREAM

    def encode(self) -> bytes:
        return bytes(self.data)


@dataclass(frozen=True)
class ArgsBody:
    args: Tuple[Any, ...] = ()
    content_type = ARGS

    def encode(self) -> bytes:
        return _dumps(list(self.args))


@dataclass(frozen=True)
class MapBody:
    mapping: Dict[str, Any] = field(default_factory=dict)
    content_type = MAP

    def encode(self) -> bytes:
        return _dumps(self.mapping)


Body = Union[RawBody, ArgsBody, MapBody]


def encode(body: Optional[Body]) -> Tuple[bytes, str]:
    """Return (body_bytes, content_type). No body is an empty octet-stream."""

    if body is None:
        body = RawBody()
    return body.encode(), body.content_type


def decode(content_type: str, data: bytes) -> Any:
    """Decode a request body according to its *content_type*: bytes for an
    octet-stream, a list for positional arguments, a dict for named ones.
    """

    if content_type == OCTET_STREAM:
        return bytes(data)

    if content_type not in (ARGS, MAP):
        raise EncodingError(f"unknown content type: {content_type!r}")

    try:
        decoded = json.loads(data)
    except json.DecodeError as exc:
        raise EncodingError(f"malformed {content_type} body: {exc}") from exc

    expected = list if content_type == ARGS else dict
    if not isinstance(decoded, expected):
        raise EncodingError(
            f"{content_type} body decoded to {type(decoded).__name__}, "
            f"expected {expected.__name__}"
        )
    return decoded


def _dumps(obj: Any) -> bytes:
    try:
        return json.dumps(obj)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"cannot encode call body: {exc}") from exc

from __future__ import annotations

import base64
import binascii
import json
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from pydantic_core import to_json

from .errors import EncodingError
from .headers import HeaderBuilder, HeaderKeyValue
from .types import ContentType, Parameters, is_empty

logger = logging.getLogger(__name__)

Fields = dict[str, Any]
Pairs = list[tuple[str, str]]


def new_boundary() -> str:
    return str(uuid.uuid4()).upper()


@dataclass(frozen=True)
class EncodedBody:
    header: HeaderKeyValue
    body: bytes | None


def to_json_bytes(parameters: Parameters) -> bytes:
    try:
        return to_json(parameters)
    except ValueError as exc:
        raise EncodingError(
            f"cannot encode {type(parameters).__name__} as JSON: {exc}"
        ) from exc


def to_fields(parameters: Parameters) -> Fields:
    """
    Round-trips the parameters through JSON to get a mapping of field name to
    plain JSON value.
    """
    fields = json.loads(to_json_bytes(parameters))
    if not isinstance(fields, dict):
        raise EncodingError(
            f"{type(parameters).__name__} does not encode to a JSON object"
        )
    return fields


def _field_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def to_pairs(fields: Fields) -> Pairs:
    """
    An array of strings becomes one pair per element, in array order. Any
    other value becomes a single pair.
    """
    pairs: Pairs = []
    for key, value in fields.items():
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            pairs.extend((key, item) for item in value)
        else:
            pairs.append((key, _field_text(value)))
    return pairs


def encode_pairs(pairs: Pairs) -> str:
    return urlencode(pairs, quote_via=quote)


@dataclass(frozen=True)
class BodyEncoder:
    headers: HeaderBuilder = field(default_factory=HeaderBuilder)
    boundary: Callable[[], str] = new_boundary

    def encode(
        self, content_type: ContentType, parameters: Parameters
    ) -> EncodedBody:
        """
        Returns the content-type header and body for the given parameters.
        EMPTY (or None) parameters give no body. Raises EncodingError rather
        than returning a partial or empty body for unencodable parameters.
        """
        if content_type is ContentType.multipart:
            boundary = self.boundary()
            header = self.headers.header_for(content_type, boundary)
            if is_empty(parameters):
                return EncodedBody(header, None)
            return EncodedBody(header, self.multipart(boundary, parameters))

        header = self.headers.header_for(content_type)
        if is_empty(parameters):
            return EncodedBody(header, None)
        if content_type is ContentType.json:
            return EncodedBody(header, to_json_bytes(parameters))
        return EncodedBody(header, self.form(parameters))

    def form(self, parameters: Parameters) -> bytes:
        return encode_pairs(to_pairs(to_fields(parameters))).encode("utf-8")

    def multipart(self, boundary: str, parameters: Parameters) -> bytes:
        extension = self.headers.config.part_extension
        part_content_type = self.headers.config.part_content_type
        body = bytearray()
        for key, value in to_fields(parameters).items():
            if any(char in key for char in '"\r\n'):
                raise EncodingError(
                    f"multipart field name {key!r} cannot contain quotes or line breaks"
                )
            body += (
                f"\r\n--{boundary}\r\n"
                f'Content-Disposition: form-data; name="{key}"; '
                f'filename="{key}.{extension}"\r\n'
                f"Content-Type: {part_content_type}\r\n\r\n"
            ).encode("utf-8")
            body += self._part_payload(key, value)
            body += b"\r\n"
        body += f"--{boundary}--".encode("utf-8")
        return bytes(body)

    def _part_payload(self, key: str, value: Any) -> bytes:
        if not isinstance(value, str):
            raise EncodingError(
                f"multipart field {key!r} must be a base64 string, "
                f"got {type(value).__name__}"
            )
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as exc:
            raise EncodingError(f"multipart field {key!r} is not valid base64") from exc

    def query(self, url: str, parameters: Parameters) -> str:
        """
        Appends the parameters to the URL as query parameters, after any query
        already on it. The order of the appended pairs is not part of the
        contract.
        """
        if is_empty(parameters):
            return url
        pairs = to_pairs(to_fields(parameters))
        if not pairs:
            return url
        parts = urlsplit(url)
        query = encode_pairs(pairs)
        if parts.query:
            query = f"{parts.query}&{query}"
        logger.debug("encoded %d query parameter(s) for %s", len(pairs), url)
        return urlunsplit(parts._replace(query=query))

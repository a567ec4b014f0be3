from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .types import ContentType, HeaderMapping, Headers

CONTENT_TYPE = "Content-Type"
AUTHORIZATION = "Authorization"
BEARER = "Bearer"
APPLICATION_JSON = "application/json"
JSON_CONTENT_TYPE = f"{APPLICATION_JSON}; charset=utf-8"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MULTIPART_CONTENT_TYPE = "multipart/form-data"


def _default_common() -> Headers:
    return {CONTENT_TYPE: JSON_CONTENT_TYPE}


@dataclass(frozen=True)
class HeaderKeyValue:
    key: str
    value: str

    def as_dict(self) -> Headers:
        return {self.key: self.value}


@dataclass(frozen=True)
class HeaderConfig:
    """
    Headers sent with every request, plus the metadata used for multipart
    parts. Build one and hand it to the Client; it is never mutated.
    """

    common: Mapping[str, str] = field(default_factory=_default_common)
    additional: Mapping[str, str] = field(default_factory=dict)
    bearer_token: str | None = None
    part_content_type: str = "image/png"
    part_extension: str = "png"

    def __post_init__(self) -> None:
        headers = [*self.common.items(), *self.additional.items()]
        if self.bearer_token is not None:
            headers.append((AUTHORIZATION, f"{BEARER} {self.bearer_token}"))
        headers.append((CONTENT_TYPE, self.part_content_type))
        for key, value in headers:
            if not _is_header_text(key) or not _is_header_text(value):
                raise ValueError(f"header {key!r} must be printable ASCII")


def _is_header_text(text: str) -> bool:
    return text.isascii() and "\r" not in text and "\n" not in text


def merge_headers(*maps: HeaderMapping | None) -> Headers:
    """
    Merge header maps left to right. Keys are compared case-insensitively and
    the last map wins, keeping the casing of the key it was given with.
    """
    merged: Headers = {}
    for headers in maps:
        if not headers:
            continue
        for key, value in headers.items():
            for existing in [k for k in merged if k.lower() == key.lower()]:
                del merged[existing]
            merged[key] = value
    return merged


def get_header(headers: HeaderMapping, key: str) -> str | None:
    wanted = key.lower()
    for name, value in headers.items():
        if name.lower() == wanted:
            return value
    return None


def is_json_response(headers: HeaderMapping) -> bool:
    content_type = get_header(headers, CONTENT_TYPE)
    return content_type is not None and APPLICATION_JSON in content_type.lower()


@dataclass(frozen=True)
class HeaderBuilder:
    config: HeaderConfig = field(default_factory=HeaderConfig)

    @property
    def headers(self) -> Headers:
        token = (
            {AUTHORIZATION: f"{BEARER} {self.config.bearer_token}"}
            if self.config.bearer_token
            else None
        )
        return merge_headers(self.config.common, token, self.config.additional)

    def json_header(self) -> HeaderKeyValue:
        return HeaderKeyValue(CONTENT_TYPE, JSON_CONTENT_TYPE)

    def form_header(self) -> HeaderKeyValue:
        return HeaderKeyValue(CONTENT_TYPE, FORM_CONTENT_TYPE)

    def multipart_header(self, boundary: str) -> HeaderKeyValue:
        return HeaderKeyValue(
            CONTENT_TYPE, f"{MULTIPART_CONTENT_TYPE}; boundary={boundary}"
        )

    def header_for(
        self, content_type: ContentType, boundary: str | None = None
    ) -> HeaderKeyValue:
        if content_type is ContentType.json:
            return self.json_header()
        elif content_type is ContentType.form_urlencoded:
            return self.form_header()
        elif content_type is ContentType.multipart:
            if boundary is None:
                raise ValueError("multipart header requires a boundary")
            return self.multipart_header(boundary)
        raise ValueError(f"unsupported content type {content_type!r}")

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin, urlsplit

from httpx import URL, InvalidURL

from .decoding import Failure, ResponseDecoder, Result, decoding_for
from .encoding import BodyEncoder, new_boundary, to_json_bytes
from .errors import EncodingError, InvalidRequestError
from .headers import HeaderBuilder, HeaderConfig, merge_headers
from .http.types import HttpImplementation, Method, Request, RequestFailed
from .types import EMPTY, ContentType, Parameters, is_empty

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[\s\x00-\x1f\x7f]")
_SCHEMES = ("http", "https")


def resolve_url(base_url: str | None, path: str) -> str:
    """
    Resolves ``path`` against ``base_url`` following RFC 3986, so an absolute
    URL replaces the base entirely.
    """
    if _UNSAFE.search(path):
        raise InvalidRequestError(path, "contains whitespace or control characters")
    try:
        url = urljoin(base_url, path) if base_url else path
        parts = urlsplit(url)
        # Raises ValueError for a non-numeric or out of range port.
        parts.port
    except ValueError as exc:
        raise InvalidRequestError(path, str(exc)) from exc
    if parts.scheme not in _SCHEMES:
        raise InvalidRequestError(path, f"unsupported scheme {parts.scheme!r}")
    if not parts.hostname:
        raise InvalidRequestError(path, "missing host")
    try:
        # Reading .host IDNA-decodes "xn--" labels, which httpx defers.
        URL(url).host
    except (InvalidURL, ValueError) as exc:
        raise InvalidRequestError(path, str(exc)) from exc
    return url


@dataclass(frozen=True)
class Client:
    http: HttpImplementation
    base_url: str | None = None
    headers: HeaderConfig = field(default_factory=HeaderConfig)
    decoder: ResponseDecoder = field(default_factory=ResponseDecoder)
    boundary: Callable[[], str] = new_boundary

    @property
    def header_builder(self) -> HeaderBuilder:
        return HeaderBuilder(self.headers)

    @property
    def encoder(self) -> BodyEncoder:
        return BodyEncoder(self.header_builder, self.boundary)

    async def get(
        self, path: str, parameters: Parameters = EMPTY, *, expect: Any = Any
    ) -> Result[Any]:
        return await self.request("GET", path, parameters, expect=expect)

    async def post(
        self,
        path: str,
        parameters: Parameters = EMPTY,
        content_type: ContentType = ContentType.json,
        *,
        expect: Any = Any,
    ) -> Result[Any]:
        return await self.request(
            "POST", path, parameters, content_type, expect=expect
        )

    async def put(
        self,
        path: str,
        parameters: Parameters = EMPTY,
        content_type: ContentType = ContentType.json,
        *,
        expect: Any = Any,
    ) -> Result[Any]:
        return await self.request("PUT", path, parameters, content_type, expect=expect)

    async def delete(
        self,
        path: str,
        parameters: Parameters = EMPTY,
        content_type: ContentType = ContentType.json,
        *,
        expect: Any = Any,
    ) -> Result[Any]:
        """
        DELETE always sends its parameters as a JSON body; ``content_type`` is
        accepted for symmetry with post/put but not used.
        """
        return await self.request(
            "DELETE", path, parameters, content_type, expect=expect
        )

    async def request(
        self,
        method: Method,
        path: str,
        parameters: Parameters = EMPTY,
        content_type: ContentType = ContentType.json,
        *,
        expect: Any = Any,
    ) -> Result[Any]:
        """
        Sends one request and returns its Result. ``expect`` is either a
        Decoding or a type: ``bytes`` and ``str`` ask for the raw body or its
        text, any other type is validated from a JSON body.
        """
        decoding = decoding_for(expect)
        try:
            request = self.build_request(method, path, parameters, content_type)
        except (InvalidRequestError, EncodingError) as exc:
            logger.warning("not sending %s %s: %s", method, path, exc)
            return Failure(exc)

        logger.debug("%s %s", request.method, request.url)
        try:
            response = await self.http(request)
        except RequestFailed as exc:
            return self.decoder.resolve(None, exc.inner, decoding)
        return self.decoder.resolve(response, None, decoding)

    def build_request(
        self,
        method: Method,
        path: str,
        parameters: Parameters,
        content_type: ContentType = ContentType.json,
    ) -> Request:
        url = resolve_url(self.base_url, path)
        headers = self.header_builder.headers

        if method == "GET":
            return Request(method, self.encoder.query(url, parameters), headers, None)

        if method == "DELETE":
            if content_type is not ContentType.json:
                logger.debug("DELETE ignores content type %s", content_type.name)
            body = None if is_empty(parameters) else to_json_bytes(parameters)
            return Request(method, url, headers, body)

        encoded = self.encoder.encode(content_type, parameters)
        return Request(
            method,
            url,
            merge_headers(headers, encoded.header.as_dict()),
            encoded.body,
        )

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from .errors import AIORestError, DecodeError, TransportError, UnknownError
from .headers import is_json_response
from .http.types import Response

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Decoding(Generic[T], metaclass=abc.ABCMeta):
    """
    The kind of result a caller asks for. ``json_type`` is what a JSON
    response body gets validated into.
    """

    @property
    @abc.abstractmethod
    def json_type(self) -> Any:
        raise NotImplementedError()


@dataclass(frozen=True)
class AsJson(Decoding[T]):
    type: Any

    @property
    def json_type(self) -> Any:
        return self.type


@dataclass(frozen=True)
class AsBytes(Decoding[bytes]):
    @property
    def json_type(self) -> Any:
        return bytes


@dataclass(frozen=True)
class AsText(Decoding[str]):
    encoding: str = "utf-8"

    @property
    def json_type(self) -> Any:
        return str


def decoding_for(expected: Any) -> Decoding[Any]:
    if isinstance(expected, Decoding):
        return expected
    if expected is bytes:
        return AsBytes()
    if expected is str:
        return AsText()
    return AsJson(expected)


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    status: int

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    error: AIORestError

    def unwrap(self) -> NoReturn:
        raise self.error


Result = Union[Success[T], Failure]


def _decode_error(response: Response, cause: Exception | None = None) -> DecodeError:
    error = DecodeError(f"Decode error in {response.url}", url=response.url)
    error.__cause__ = cause
    return error


@dataclass(frozen=True)
class ResponseDecoder:
    def resolve(
        self,
        response: Response | None,
        error: Exception | None,
        decoding: Decoding[T],
    ) -> Result[T]:
        """
        A response wins over an error reported alongside it. A lone error is a
        transport failure, and getting neither is an UnknownError.
        """
        if response is not None:
            return self.decode(response, decoding)
        if error is not None:
            logger.warning("transport failed: %r", error)
            failure = TransportError(error)
            failure.__cause__ = error
            return Failure(failure)
        return Failure(UnknownError("transport returned neither a response nor an error"))

    def decode(self, response: Response, decoding: Decoding[T]) -> Result[T]:
        body = response.body
        if body is not None and is_json_response(response.headers):
            try:
                value = TypeAdapter(decoding.json_type).validate_json(body)
            except ValidationError as exc:
                logger.warning("invalid JSON body from %s: %s", response.url, exc)
                return Failure(_decode_error(response, exc))
            return Success(value, response.status)

        if isinstance(decoding, AsBytes) and body is not None:
            return Success(body, response.status)

        if isinstance(decoding, AsText) and body is not None:
            try:
                text = body.decode(decoding.encoding)
            except UnicodeDecodeError as exc:
                logger.warning("undecodable text body from %s", response.url)
                return Failure(_decode_error(response, exc))
            return Success(text, response.status)

        logger.warning(
            "cannot decode %s response from %s as %r",
            response.status,
            response.url,
            decoding,
        )
        return Failure(_decode_error(response))

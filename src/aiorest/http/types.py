from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

Method = Literal["GET"] | Literal["POST"] | Literal["PUT"] | Literal["DELETE"]


@dataclass(frozen=True)
class Request:
    method: Method
    url: str
    headers: dict[str, str]
    body: bytes | None


@dataclass(frozen=True)
class Response:
    status: int
    headers: dict[str, str]
    body: bytes | None
    url: str


@dataclass
class RequestFailed(Exception):
    inner: Exception


# Returns None only when the transport produced neither a response nor an error.
HttpImplementation = Callable[[Request], Awaitable[Response | None]]

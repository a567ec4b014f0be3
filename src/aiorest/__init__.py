from .client import Client
from .decoding import AsBytes, AsJson, AsText, Failure, Result, Success
from .errors import (
    AIORestError,
    DecodeError,
    EncodingError,
    InvalidRequestError,
    TransportError,
    UnknownError,
)
from .headers import HeaderConfig
from .service import Service
from .types import EMPTY, ContentType

__all__ = [
    "Client",
    "Service",
    "HeaderConfig",
    "ContentType",
    "EMPTY",
    "AsBytes",
    "AsJson",
    "AsText",
    "Result",
    "Success",
    "Failure",
    "AIORestError",
    "DecodeError",
    "EncodingError",
    "InvalidRequestError",
    "TransportError",
    "UnknownError",
]

class AIORestError(Exception):
    pass


class EncodingError(AIORestError):
    pass


class TransportError(AIORestError):
    def __init__(self, inner: Exception):
        super().__init__(f"transport failed: {inner!r}")
        self.inner = inner


class DecodeError(AIORestError):
    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class InvalidRequestError(AIORestError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"invalid URL {path!r}: {reason}")
        self.path = path
        self.reason = reason


class UnknownError(AIORestError):
    pass

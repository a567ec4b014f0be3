from dataclasses import dataclass

from .client import Client


@dataclass(frozen=True)
class Service:
    """
    Base for API wrappers: subclass it and build endpoint methods on top of
    ``self.client``.
    """

    client: Client

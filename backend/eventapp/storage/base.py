"""Media storage contract shared by every backend."""
import abc
import secrets
from typing import Optional

KEY_PREFIX = "uploads"


def random_key(nbytes: int = 32) -> str:
    """Fresh collision-resistant key, drawn from randomness rather than content."""
    return f"{KEY_PREFIX}/{secrets.token_hex(nbytes)}"


class StorageBackend(abc.ABC):
    """Uniform interface over the media backends.

    ``upload`` raises ``UploadError``; ``sign`` and ``delete`` never raise,
    returning ``None`` and ``False`` respectively when they cannot do their job.
    """

    name: str = "base"

    @abc.abstractmethod
    def upload(self, content: bytes, content_type: str) -> str:
        """Store ``content`` under a new key and return the key."""

    @abc.abstractmethod
    def sign(self, key: Optional[str], ttl_seconds: int = 3600) -> Optional[str]:
        """Return a retrieval URL for ``key``, valid for ``ttl_seconds`` where the backend can expire URLs.

        Backends whose delivery URLs cannot expire return a permanent URL and
        say so in their class docstring.
        """

    @abc.abstractmethod
    def delete(self, key: Optional[str]) -> bool:
        """Remove ``key``; ``False`` if nothing was removed."""

"""
This module defines the core domain models for the updater.

These classes represent the pure, technology-agnostic entities and data
structures that the update logic operates on.
"""

import dataclasses
import enum
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qsl, unquote, urlencode, urlsplit, urlunsplit

from .exceptions import ConfigurationError


# --- Domain Models ---

class DigestConvention(str, enum.Enum):
    """How a provider exposes the digest of an archive."""

    # Same endpoint, a query parameter selects digest or archive payload.
    QUERY = "query"
    # The digest lives next to the archive under a ".md5" suffix.
    SIBLING = "sibling"


@dataclasses.dataclass(frozen=True)
class ArchiveReference:
    """
    A remote tar.gz archive, the entry to extract from it, and the
    provider convention used to address its digest.
    """

    url: str
    entry_name: str
    credential: Optional[str] = None
    digest_convention: DigestConvention = DigestConvention.QUERY
    auth_param: Optional[str] = "license_key"
    auth_required: bool = False
    suffix_param: str = "suffix"
    digest_suffix: str = "tar.gz.md5"
    archive_suffix: str = "tar.gz"
    sibling_suffix: str = ".md5"

    def _with_params(self, url: str, **params: str) -> str:
        parts = urlsplit(url)
        query = dict(parse_qsl(parts.query, keep_blank_values=True))
        if self.auth_param and self.credential:
            query[self.auth_param] = self.credential
        query.update(params)
        encoded = urlencode(sorted(query.items()))
        return urlunsplit(parts._replace(query=encoded))

    def digest_url(self) -> str:
        """URL of the small resource holding the archive digest."""
        if self.digest_convention is DigestConvention.SIBLING:
            parts = urlsplit(self.url)
            sibling = urlunsplit(
                parts._replace(path=parts.path + self.sibling_suffix)
            )
            return self._with_params(sibling)
        return self._with_params(
            self.url, **{self.suffix_param: self.digest_suffix}
        )

    def archive_url(self) -> str:
        """URL of the archive itself."""
        if self.digest_convention is DigestConvention.SIBLING:
            return self._with_params(self.url)
        return self._with_params(
            self.url, **{self.suffix_param: self.archive_suffix}
        )

    def redacted(self) -> str:
        """The URL without the credential parameter, safe for log lines."""
        parts = urlsplit(self.url)
        query = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if key != self.auth_param
        ]
        return urlunsplit(parts._replace(query=urlencode(query), fragment=""))


@dataclasses.dataclass(frozen=True)
class RemoteDigest:
    """The trimmed digest reported by the provider and where it came from."""

    value: bytes
    url: str


@dataclasses.dataclass(frozen=True)
class UpdateResult:
    """Outcome of a single update call."""

    changed: bool
    destination: Path
    marker: Path
    digest: bytes


def marker_path(destination: Path, digest_url: str) -> Path:
    """
    Derive the marker file location for a destination.

    The marker sits in the destination's directory and is named after the
    decoded final segment of the digest URL path. Query string and fragment
    never contribute to the name.

    Raises:
        ConfigurationError: If the URL path has no final segment.
    """

    name = unquote(urlsplit(digest_url).path.rsplit("/", 1)[-1])
    if not name:
        raise ConfigurationError(
            f"Cannot derive a marker file name from {urlsplit(digest_url).path!r}",
            stage="deriving marker path",
        )
    return Path(destination).parent / name


# --- Ports (Interfaces) ---

class Fetcher(ABC):
    """A port for retrieving digests and archives from a provider."""

    @abstractmethod
    async def fetch_digest(self, reference: ArchiveReference) -> RemoteDigest:
        """Fetches and trims the remote digest of an archive."""
        pass

    @abstractmethod
    def archive(
        self, reference: ArchiveReference
    ) -> AbstractAsyncContextManager[Path]:
        """
        Downloads the archive to a scratch file and yields its path.
        The scratch file is removed when the context exits.
        """
        pass


class Extractor(ABC):
    """A port for pulling a single entry out of an archive."""

    @abstractmethod
    async def extract(
        self, archive_path: Path, entry_name: str, destination: Path
    ) -> bool:
        """
        Copies the first matching entry to destination.
        Returns False when no entry matches.
        """
        pass

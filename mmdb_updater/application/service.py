"""
The core application service, containing the update-or-skip logic.

UpdaterService fetches the remote digest, compares it with the marker file
stored next to the destination and only downloads and extracts the archive
when the two differ.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from .domain import (
    ArchiveReference,
    Extractor,
    Fetcher,
    UpdateResult,
    marker_path,
)
from .exceptions import EntryNotFoundError, FilesystemError


class UpdaterService:
    """Keeps a single file extracted from a remote archive up to date."""

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: Extractor,
        strict: bool = False,
    ):
        """Initializes the service with the fetcher and extractor ports."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.fetcher = fetcher
        self.extractor = extractor
        self.strict = strict

    @staticmethod
    def _read_marker(marker: Path) -> Optional[bytes]:
        if not marker.exists():
            return None
        try:
            return marker.read_bytes().strip()
        except OSError as e:
            raise FilesystemError(str(e), stage="reading marker file") from e

    @staticmethod
    def _write_marker(marker: Path, digest: bytes):
        try:
            marker.write_bytes(digest)
        except OSError as e:
            raise FilesystemError(str(e), stage="writing marker file") from e

    async def update(
        self, destination: Union[str, Path], reference: ArchiveReference
    ) -> UpdateResult:
        """
        Guarantee the destination holds the current archive entry,
        downloading only if the remote digest changed.

        Args:
            destination: Path the extracted entry is written to.
            reference: The remote archive and the entry to extract.

        Returns:
            An UpdateResult; ``changed`` is True only when the destination
            and the marker file were rewritten.

        Raises:
            TransportError: If a request fails or returns non-2xx.
            DecodeError: If the archive is not valid tar.gz.
            FilesystemError: If reading or writing local files fails.
            EntryNotFoundError: In strict mode, if no entry matches.
        """

        destination = Path(destination)
        digest = await self.fetcher.fetch_digest(reference)
        marker = marker_path(destination, digest.url)

        current = await asyncio.to_thread(self._read_marker, marker)
        if current is not None and current == digest.value:
            self.logger.info(
                f"{destination.name} is up to date. Skipping download."
            )
            return UpdateResult(
                changed=False,
                destination=destination,
                marker=marker,
                digest=digest.value,
            )

        async with self.fetcher.archive(reference) as archive_path:
            extracted = await self.extractor.extract(
                archive_path, reference.entry_name, destination
            )

        if not extracted:
            if self.strict:
                raise EntryNotFoundError(
                    f"{reference.entry_name} not found in "
                    f"{reference.redacted()}",
                    stage="reading archive",
                )
            # Reported as "no change" to match the non-strict contract.
            self.logger.warning(
                f"No entry named {reference.entry_name} in "
                f"{reference.redacted()}; {destination.name} left untouched."
            )
            return UpdateResult(
                changed=False,
                destination=destination,
                marker=marker,
                digest=digest.value,
            )

        await asyncio.to_thread(self._write_marker, marker, digest.value)
        self.logger.info(f"Updated {destination.name} from {reference.redacted()}")

        return UpdateResult(
            changed=True,
            destination=destination,
            marker=marker,
            digest=digest.value,
        )

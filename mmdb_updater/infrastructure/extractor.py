"""
Infrastructure adapter for pulling a single file out of a tar.gz archive.
"""

import asyncio
import logging
import shutil
import tarfile
import zlib
from pathlib import Path
from typing import IO

from ..application.domain import Extractor
from ..application.exceptions import DecodeError, FilesystemError

_DECODE_ERRORS = (tarfile.TarError, EOFError, zlib.error)


def entry_matches(member_name: str, entry_name: str) -> bool:
    """True if an archive member path names ``entry_name``."""
    return member_name == entry_name or member_name.endswith("/" + entry_name)


class TarGzExtractor(Extractor):
    """
    An adapter that implements the Extractor port by reading a gzip
    compressed tar archive as a stream.
    """

    def __init__(self, chunk_size: int = 65536):
        """Initializes the extractor."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.chunk_size = chunk_size

    def _copy_to_destination(self, source: IO[bytes], destination: Path):
        """Create the destination tree and copy the entry verbatim."""
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(str(e), stage="creating directory") from e
        try:
            with open(destination, "wb") as out_fh:
                shutil.copyfileobj(source, out_fh, self.chunk_size)
        except OSError as e:
            raise FilesystemError(
                str(e), stage="writing destination file"
            ) from e

    def _blocking_extract(
        self, archive_path: Path, entry_name: str, destination: Path
    ) -> bool:
        """
        Scan members in stream order and copy the first match.
        Members after the match are never read.
        """
        try:
            with open(archive_path, "rb") as in_fh:
                with tarfile.open(fileobj=in_fh, mode="r|gz") as tar:
                    for member in tar:
                        if not member.isfile():
                            continue
                        if not entry_matches(member.name, entry_name):
                            continue
                        self.logger.info(
                            f"Extracting {member.name} to {destination}"
                        )
                        source = tar.extractfile(member)
                        self._copy_to_destination(source, destination)
                        return True
        except _DECODE_ERRORS as e:
            raise DecodeError(
                f"Failed to read {archive_path.name}: {e}",
                stage="reading archive",
            ) from e
        except OSError as e:
            raise FilesystemError(str(e), stage="opening archive") from e

        return False

    async def extract(
        self, archive_path: Path, entry_name: str, destination: Path
    ) -> bool:
        """
        Copy the entry named ``entry_name`` from the archive to destination.

        The blocking decompression and copy run in a separate thread to
        avoid blocking the event loop.

        Args:
            archive_path: A local tar.gz file.
            entry_name: File name to look for; matches the whole member path
                        or its final components after a "/".
            destination: Where to write the entry.

        Returns:
            True if the entry was found and copied, False otherwise.

        Raises:
            DecodeError: If the archive is not valid gzip or tar.
            FilesystemError: If the destination cannot be written.
        """

        return await asyncio.to_thread(
            self._blocking_extract, Path(archive_path), entry_name, Path(destination)
        )

"""HTTP implementation of the Fetcher port."""

import asyncio
import contextlib
import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator

import httpx
from tqdm import tqdm

from ..application.domain import ArchiveReference, Fetcher, RemoteDigest
from ..application.exceptions import FilesystemError, TransportError

from .base_client import BaseClient
from .decorators import translate_errors

_HTTP_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


class HttpFetcher(BaseClient, Fetcher):
    """A fetcher that retrieves digests and archives via HTTP GET."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float,
        chunk_size: int,
        show_progress: bool = False,
    ):
        """Initializes the fetcher adapter."""
        super().__init__(client)
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.show_progress = show_progress

    @translate_errors("fetching digest", TransportError, _HTTP_ERRORS)
    async def _execute_fetch(self, url: str) -> bytes:
        """Executes the raw HTTP GET request for the digest."""
        response = await self.client.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    async def fetch_digest(self, reference: ArchiveReference) -> RemoteDigest:
        """
        Fetches the digest resource and trims surrounding whitespace.

        Args:
            reference: The archive whose digest is requested.

        Returns:
            The trimmed digest and the URL it was served from.

        Raises:
            ConfigurationError: If the credential is missing or a placeholder.
            TransportError: If the request fails or returns non-2xx.
        """

        self._check_credential(reference)
        self.logger.info(f"Fetching digest for {reference.redacted()}...")

        url = reference.digest_url()
        body = await self._execute_fetch(url)
        return RemoteDigest(value=body.strip(), url=url)

    @contextlib.contextmanager
    def _scratch_file(self) -> Generator[Path, None, None]:
        """Provides a temporary archive path and ensures cleanup."""
        try:
            fd, name = tempfile.mkstemp(prefix="mmdb-", suffix=".tar.gz")
            os.close(fd)
        except OSError as e:
            raise FilesystemError(str(e), stage="creating scratch file") from e
        scratch = Path(name)
        try:
            yield scratch
        finally:
            scratch.unlink(missing_ok=True)

    async def _stream_chunks(
        self, response: httpx.Response, target_file: Path,
    ):
        """Produce byte chunks from a response and write them to a file."""
        with open(target_file, "wb") as f:
            async for chunk in response.aiter_bytes(self.chunk_size):
                await asyncio.to_thread(f.write, chunk)
                yield len(chunk)

    async def _consume_stream_with_progress(
        self,
        stream: AsyncGenerator[int, None],
        total_size: int,
        desc: str,
    ):
        """Consume the byte stream, updating a progress bar if enabled."""

        with tqdm(
            total=total_size or None,
            unit="B",
            unit_scale=True,
            desc=desc,
            disable=not self.show_progress,
        ) as progress_bar:
            received = 0
            async for progress in stream:
                received += progress
                progress_bar.update(progress)

        if total_size and received != total_size:
            raise TransportError(
                f"Size mismatch: {received} != {total_size}",
                stage="downloading archive",
            )

    @translate_errors("downloading archive", TransportError, _HTTP_ERRORS)
    @translate_errors("writing scratch archive", FilesystemError, OSError)
    async def _stream_from_network(
        self, reference: ArchiveReference, target_file: Path
    ):
        """Manage the network request and the streaming process."""
        async with self.client.stream(
            "GET", reference.archive_url(), timeout=self.timeout
        ) as response:
            response.raise_for_status()
            # Decoded bodies no longer match the declared length.
            total_size = 0
            if "Content-Encoding" not in response.headers:
                total_size = int(response.headers.get("Content-Length", 0))
            stream = self._stream_chunks(response, target_file)
            await self._consume_stream_with_progress(
                stream, total_size, reference.entry_name
            )

    @contextlib.asynccontextmanager
    async def archive(
        self, reference: ArchiveReference
    ) -> AsyncGenerator[Path, None]:
        """
        Download the archive to a scratch file that lives for the duration
        of the context.

        Raises:
            ConfigurationError: If the credential is missing or a placeholder.
            TransportError: If the request fails, returns non-2xx or is cut
                            short.
            FilesystemError: If the scratch file cannot be written.
        """

        self._check_credential(reference)
        with self._scratch_file() as scratch:
            self.logger.info(f"Downloading {reference.redacted()}...")
            await self._stream_from_network(reference, scratch)
            self.logger.info(f"Finished downloading {reference.entry_name} archive")
            yield scratch

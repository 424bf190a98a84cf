"""Shared fixtures: in-memory archives and a stub GeoLite2-style provider."""

import io
import tarfile
from typing import Dict, List

import httpx
import pytest
from dependency_injector import providers

from mmdb_updater.application.service import UpdaterService
from mmdb_updater.infrastructure.containers import Container
from mmdb_updater.infrastructure.extractor import TarGzExtractor
from mmdb_updater.infrastructure.http_fetcher import HttpFetcher

LICENSE_KEY = "test-license-key"


def make_archive(entries: Dict[str, bytes]) -> bytes:
    """Build a tar.gz archive in memory from a name -> content mapping."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, data in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def geolite2_archive(release: str) -> bytes:
    """An archive laid out like a GeoLite2 release, with all three databases."""
    prefix = f"GeoLite2_{release}"
    return make_archive(
        {
            f"{prefix}/COPYRIGHT.txt": b"copyright",
            f"{prefix}/GeoLite2-Country.mmdb": f"country {release}".encode(),
            f"{prefix}/GeoLite2-City.mmdb": f"city {release}".encode(),
            f"{prefix}/GeoLite2-ASN.mmdb": f"asn {release}".encode(),
        }
    )


class FakeProvider:
    """
    Serves a digest and an archive from one endpoint, selected either by the
    ``suffix`` query parameter or by a ``.md5`` path suffix.
    """

    def __init__(self, archive: bytes, digest: bytes = b"abc123\n"):
        self.archive = archive
        self.digest = digest
        self.digest_status = 200
        self.archive_status = 200
        self.requests: List[httpx.Request] = []

    def publish(self, archive: bytes, digest: bytes):
        self.archive = archive
        self.digest = digest

    def is_digest_request(self, request: httpx.Request) -> bool:
        return (
            request.url.params.get("suffix") == "tar.gz.md5"
            or request.url.path.endswith(".md5")
        )

    @property
    def archive_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if not self.is_digest_request(r)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.is_digest_request(request):
            return httpx.Response(self.digest_status, content=self.digest)
        return httpx.Response(self.archive_status, content=self.archive)


@pytest.fixture
def provider():
    return FakeProvider(geolite2_archive("20240102"))


@pytest.fixture
async def http_client(provider):
    client = httpx.AsyncClient(transport=httpx.MockTransport(provider.handler))
    yield client
    await client.aclose()


@pytest.fixture
def service(http_client):
    return UpdaterService(
        HttpFetcher(http_client, timeout=5, chunk_size=1024),
        TarGzExtractor(chunk_size=1024),
    )


@pytest.fixture
def container(http_client):
    container = Container()
    container.http_client.override(providers.Object(http_client))
    yield container
    container.http_client.reset_override()

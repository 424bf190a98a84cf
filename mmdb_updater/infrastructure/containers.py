"""
Dependency Injection container for the mmdb_updater library.

This container uses the `dependency-injector` library to wire together the
service and its infrastructure adapters based on the Dynaconf settings.
Tests and callers replace pieces with ``provider.override(...)``.
"""

from dependency_injector import containers, providers
import httpx

from ..application.domain import Extractor, Fetcher
from ..application.service import UpdaterService
from ..settings import settings

from .extractor import TarGzExtractor
from .http_fetcher import HttpFetcher
from .source_models import load_sources


class Container(containers.DeclarativeContainer):
    """DI container for wiring the updater components."""

    config = providers.Object(settings)

    http_client = providers.Singleton(httpx.AsyncClient, follow_redirects=True)

    sources = providers.Singleton(load_sources, config().sources)

    fetcher: providers.Factory[Fetcher] = providers.Factory(
        HttpFetcher,
        client=http_client,
        timeout=config().updater.timeout,
        chunk_size=config().updater.chunk_size,
        show_progress=config().updater.show_progress,
    )

    extractor: providers.Factory[Extractor] = providers.Factory(
        TarGzExtractor,
        chunk_size=config().updater.chunk_size,
    )

    updater_service = providers.Factory(
        UpdaterService,
        fetcher=fetcher,
        extractor=extractor,
        strict=config().updater.strict,
    )

"""
Public entry points for keeping GeoLite2 databases up to date.

Each function downloads a tar.gz archive, extracts the database file from it
to the given file name and saves the archive digest in a marker file in the
same directory. The marker is checked on the next call so an unchanged
archive is never downloaded twice.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .application.domain import ArchiveReference, DigestConvention, UpdateResult
from .application.exceptions import ConfigurationError
from .infrastructure.containers import Container
from .settings import settings

PathLike = Union[str, Path]


def setup_logging(level: Optional[str] = None):
    """Applies basic logging configuration."""
    logging.basicConfig(level=level or settings.logging.level)


async def _run(
    container: Optional[Container],
    destination: PathLike,
    reference: ArchiveReference,
) -> UpdateResult:
    """Resolves the service and runs one update, closing a client it owns."""

    owned = container is None
    if owned:
        container = Container()
    try:
        service = container.updater_service()
        return await service.update(destination, reference)
    finally:
        if owned:
            await container.http_client().aclose()


async def update(
    destination: PathLike,
    entry_name: str,
    source_address: str,
    credentials: Optional[str] = None,
    *,
    digest_convention: DigestConvention = DigestConvention.QUERY,
    container: Optional[Container] = None,
) -> UpdateResult:
    """
    Update ``destination`` from an arbitrary tar.gz source.

    Args:
        destination: File the archive entry is written to.
        entry_name: Name of the file inside the archive.
        source_address: URL of the archive provider.
        credentials: Optional access key sent as the ``license_key``
                     query parameter.
        digest_convention: How the provider serves the archive digest.
        container: A wired Container; a fresh one is used if omitted.
    """

    reference = ArchiveReference(
        url=source_address,
        entry_name=entry_name,
        credential=credentials,
        digest_convention=DigestConvention(digest_convention),
    )
    return await _run(container, destination, reference)


async def update_variant(
    variant: str,
    filename: PathLike,
    license_key: Optional[str] = None,
    *,
    container: Optional[Container] = None,
) -> UpdateResult:
    """
    Update ``filename`` from one of the configured ``sources`` variants.

    When ``license_key`` is omitted the ``updater.license_key`` setting is
    used.

    Raises:
        ConfigurationError: If the variant is not configured.
    """

    sources = (container or Container).sources()
    try:
        source = sources[variant.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown variant {variant!r}; configured: {sorted(sources)}",
            stage="selecting variant",
        ) from None

    if license_key is None:
        license_key = settings.get("updater.license_key") or None

    return await _run(container, filename, source.to_reference(license_key))


async def update_geolite2_country(
    filename: PathLike,
    license_key: Optional[str] = None,
    *,
    container: Optional[Container] = None,
) -> UpdateResult:
    """
    Downloads and updates a GeoLite2 Country database and saves it under
    filename. The digest of the tar archive is saved in a file in the same
    directory for update checks.
    """
    return await update_variant(
        "country", filename, license_key, container=container
    )


async def update_geolite2_city(
    filename: PathLike,
    license_key: Optional[str] = None,
    *,
    container: Optional[Container] = None,
) -> UpdateResult:
    """Same as update_geolite2_country, for the GeoLite2 City database."""
    return await update_variant(
        "city", filename, license_key, container=container
    )


async def update_geolite2_asn(
    filename: PathLike,
    license_key: Optional[str] = None,
    *,
    container: Optional[Container] = None,
) -> UpdateResult:
    """Same as update_geolite2_country, for the GeoLite2 ASN database."""
    return await update_variant(
        "asn", filename, license_key, container=container
    )

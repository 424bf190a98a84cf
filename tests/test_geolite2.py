"""
Tests for the GeoLite2 entry points, wired through the DI container against a
stubbed provider.
"""

import pytest

from mmdb_updater.application.exceptions import ConfigurationError
from mmdb_updater.geolite2 import (
    update,
    update_geolite2_asn,
    update_geolite2_city,
    update_geolite2_country,
    setup_logging,
    update_variant,
)
from mmdb_updater.settings import settings

from .conftest import LICENSE_KEY, geolite2_archive

VARIANTS = [
    pytest.param(update_geolite2_country, b"country", id="country"),
    pytest.param(update_geolite2_city, b"city", id="city"),
    pytest.param(update_geolite2_asn, b"asn", id="asn"),
]


@pytest.mark.parametrize("update_fn, kind", VARIANTS)
async def test_update_cycle(update_fn, kind, tmp_path, provider, container):
    filename = tmp_path / "db" / "database.mmdb"

    # download a new file
    result = await update_fn(filename, LICENSE_KEY, container=container)
    assert result.changed
    assert result.marker == tmp_path / "db" / "geoip_download"
    assert filename.read_bytes() == kind + b" 20240102"
    assert result.marker.read_bytes() == b"abc123"

    file_stat = filename.stat()
    marker_stat = result.marker.stat()
    requests_before = len(provider.requests)

    # do not download a new file
    result = await update_fn(filename, LICENSE_KEY, container=container)
    assert not result.changed
    assert len(provider.requests) == requests_before + 1
    assert filename.stat().st_mtime_ns == file_stat.st_mtime_ns
    assert result.marker.stat().st_mtime_ns == marker_stat.st_mtime_ns

    # simulate an outdated local copy by changing saved files
    filename.write_bytes(b"data")
    result.marker.write_bytes(b"hash")

    result = await update_fn(filename, LICENSE_KEY, container=container)
    assert result.changed
    assert filename.read_bytes() == kind + b" 20240102"
    assert result.marker.read_bytes() == b"abc123"


@pytest.mark.parametrize("update_fn, kind", VARIANTS)
async def test_remote_change_rewrites_both_files(
    update_fn, kind, tmp_path, provider, container
):
    filename = tmp_path / "database.mmdb"
    await update_fn(filename, LICENSE_KEY, container=container)

    provider.publish(geolite2_archive("20240109"), b"  def456\r\n")
    result = await update_fn(filename, LICENSE_KEY, container=container)

    assert result.changed
    assert filename.read_bytes() == kind + b" 20240109"
    assert result.marker.read_bytes() == b"def456"


async def test_license_key_is_sent_on_both_requests(tmp_path, provider, container):
    await update_geolite2_city(
        tmp_path / "city.mmdb", LICENSE_KEY, container=container
    )

    assert len(provider.requests) == 2
    for request in provider.requests:
        assert request.url.params["license_key"] == LICENSE_KEY
        assert request.url.params["edition_id"] == "GeoLite2-City"
    assert [r.url.params["suffix"] for r in provider.requests] == [
        "tar.gz.md5",
        "tar.gz",
    ]


async def test_missing_license_key_fails_before_any_request(
    tmp_path, provider, container, monkeypatch
):
    monkeypatch.setitem(settings.updater, "license_key", "")

    with pytest.raises(ConfigurationError):
        await update_geolite2_asn(tmp_path / "asn.mmdb", container=container)

    assert provider.requests == []


async def test_license_key_falls_back_to_settings(
    tmp_path, provider, container, monkeypatch
):
    monkeypatch.setitem(settings.updater, "license_key", "configured-key")

    result = await update_geolite2_city(tmp_path / "city.mmdb", container=container)

    assert result.changed
    assert len(provider.requests) == 2
    for request in provider.requests:
        assert request.url.params["license_key"] == "configured-key"


async def test_unknown_variant(tmp_path, container):
    with pytest.raises(ConfigurationError, match="Unknown variant"):
        await update_variant(
            "isp", tmp_path / "isp.mmdb", LICENSE_KEY, container=container
        )


async def test_generic_update(tmp_path, provider, container):
    filename = tmp_path / "asn.mmdb"

    result = await update(
        filename,
        "GeoLite2-ASN.mmdb",
        "https://mirror.example.com/app/geoip_download?edition_id=GeoLite2-ASN",
        container=container,
    )

    assert result.changed
    assert filename.read_bytes() == b"asn 20240102"
    assert "license_key" not in provider.requests[0].url.params


async def test_generic_update_sibling_convention(tmp_path, provider, container):
    filename = tmp_path / "asn.mmdb"

    result = await update(
        filename,
        "GeoLite2-ASN.mmdb",
        "https://mirror.example.com/geoip/GeoLite2-ASN.tar.gz",
        digest_convention="sibling",
        container=container,
    )

    assert result.changed
    assert result.marker == tmp_path / "GeoLite2-ASN.tar.gz.md5"
    assert [r.url.path for r in provider.requests] == [
        "/geoip/GeoLite2-ASN.tar.gz.md5",
        "/geoip/GeoLite2-ASN.tar.gz",
    ]


def test_setup_logging_uses_configured_level(monkeypatch):
    calls = []
    monkeypatch.setattr(
        "mmdb_updater.geolite2.logging.basicConfig",
        lambda **kwargs: calls.append(kwargs),
    )

    setup_logging()
    setup_logging("DEBUG")

    assert calls == [{"level": "INFO"}, {"level": "DEBUG"}]

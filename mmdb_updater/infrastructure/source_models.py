"""
Pydantic models for validating the variant table read from configuration.

These models serve as a strict contract for the ``sources`` section of the
settings, ensuring that a malformed entry is caught when the table is loaded
rather than half-way through an update.
"""

from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

from ..application.domain import ArchiveReference, DigestConvention
from ..application.exceptions import ConfigurationError


class SourceSettings(BaseModel):
    """
    A single database variant: where its archive lives, which file to take
    out of it and how the provider exposes the archive digest.
    """

    url: str
    entry_name: str
    digest_convention: DigestConvention = DigestConvention.QUERY
    auth_param: Optional[str] = "license_key"
    auth_required: bool = False
    suffix_param: str = "suffix"
    digest_suffix: str = "tar.gz.md5"
    archive_suffix: str = "tar.gz"
    sibling_suffix: str = ".md5"

    @field_validator("url")
    @classmethod
    def _require_http(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"expected an http(s) URL, got {value!r}")
        return value

    def to_reference(self, credential: Optional[str] = None) -> ArchiveReference:
        """Maps the settings entry to a domain model."""
        return ArchiveReference(
            url=self.url,
            entry_name=self.entry_name,
            credential=credential,
            digest_convention=self.digest_convention,
            auth_param=self.auth_param,
            auth_required=self.auth_required,
            suffix_param=self.suffix_param,
            digest_suffix=self.digest_suffix,
            archive_suffix=self.archive_suffix,
            sibling_suffix=self.sibling_suffix,
        )


class SourcesConfig(BaseModel):
    """Represents the top-level ``sources`` table keyed by variant name."""

    sources: Dict[str, SourceSettings]


def load_sources(raw: Mapping) -> Dict[str, SourceSettings]:
    """
    Validates the raw ``sources`` mapping from the settings.

    Raises:
        ConfigurationError: If any variant entry is malformed.
    """

    try:
        validated = SourcesConfig.model_validate({"sources": dict(raw or {})})
    except ValidationError as e:
        raise ConfigurationError(str(e), stage="loading sources") from e
    return {name.lower(): source for name, source in validated.sources.items()}

"""Base class for async HTTP clients."""

import logging
import httpx

from ..application.domain import ArchiveReference
from ..application.exceptions import ConfigurationError


class BaseClient:
    """A base client that holds an async client and checks credentials."""

    def __init__(self, client: httpx.AsyncClient):
        """
        Initializes the base client.

        Args:
            client: An instance of httpx.AsyncClient.
        """

        self.client = client
        self.logger = logging.getLogger(self.__class__.__name__)

    def _check_credential(self, reference: ArchiveReference):
        """
        Raises:
            ConfigurationError: If a required credential is missing or any
                                credential appears to be a placeholder.
        """

        credential = reference.credential
        if credential and "YOUR_" in credential.upper():
            raise ConfigurationError(
                f"Credential for {reference.redacted()} is a placeholder. "
                f"Please check your config files.",
                stage="checking credential",
            )
        if reference.auth_required and not credential:
            raise ConfigurationError(
                f"{reference.redacted()} requires a credential but none "
                f"was given.",
                stage="checking credential",
            )

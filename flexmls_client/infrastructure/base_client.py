"""Base class for async HTTP clients."""

import logging
import httpx

from ..application.exceptions import ConfigurationError


class BaseClient:
    """A base client that handles an async client and API key configuration."""

    def __init__(self, client: httpx.AsyncClient, api_key: str, api_secret: str):
        """
        Initializes the base client.

        Args:
            client: An instance of httpx.AsyncClient.
            api_key: The API key issued for the application.
            api_secret: The secret used to sign requests.

        Raises:
            ConfigurationError: If a credential is missing or appears to be
                                a placeholder.
        """

        for name, value in (("key", api_key), ("secret", api_secret)):
            if not value or "YOUR_" in str(value).upper():
                raise ConfigurationError(
                    f"API {name} for {self.__class__.__name__} is missing "
                    f"or is a placeholder. Please check your config files."
                )

        self.client = client
        self.api_key = api_key
        self.api_secret = api_secret
        self.logger = logging.getLogger(self.__class__.__name__)

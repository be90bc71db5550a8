"""
Dependency Injection container for the flexmls client.

This container uses the `dependency-injector` library to wire the API client
to its authenticator and HTTP transport, based on the client's configuration.
"""

from dependency_injector import containers, providers
import httpx

from ..application.domain import Authenticator
from ..settings import settings

from .api_client import ApiClient
from .authenticator import HttpAuthenticator


class Container(containers.DeclarativeContainer):
    """DI container for wiring the client components."""

    config = providers.Object(settings)

    http_client = providers.Singleton(
        httpx.AsyncClient,
        base_url=config.provided.api.endpoint,
        timeout=config.provided.api.timeout,
    )

    # One authenticator per container, so every client shares its session.
    authenticator: providers.Singleton[Authenticator] = providers.Singleton(
        HttpAuthenticator,
        client=http_client,
        api_key=config.provided.api.key,
        api_secret=config.provided.api.secret,
        version=config.provided.api.version,
        api_user=config.provided.api.get.call("user"),
    )

    api_client = providers.Factory(
        ApiClient,
        authenticator=authenticator,
        version=config.provided.api.version,
    )

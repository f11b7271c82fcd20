"""Dependency injection container for the application."""

from dependency_injector import containers, providers

from core.config import Settings
from core.database import Database
from core.cache import CacheService
from services.acquisition import ProjectSource
from services.baserow import BaserowClient
from services.site import SiteSession
from services.store import ProjectStore


class Container(containers.DeclarativeContainer):
    """Application dependency injection container."""

    # Settings
    settings = providers.Singleton(
        Settings,
    )

    # Database (SQLite backend of the key-value store)
    database = providers.Singleton(
        Database,
        settings=settings
    )

    # Key-value store (SQLite or memory)
    cache = providers.Singleton(
        CacheService,
        settings=settings,
        database=database
    )

    # Services
    baserow = providers.Singleton(
        BaserowClient,
        settings=settings
    )

    project_source = providers.Singleton(
        ProjectSource,
        settings=settings,
        baserow=baserow,
        cache=cache
    )

    project_store = providers.Singleton(
        ProjectStore
    )

    site_session = providers.Singleton(
        SiteSession,
        settings=settings,
        baserow=baserow,
        source=project_source,
        store=project_store
    )


# Global container instance
container = Container()

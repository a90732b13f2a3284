"""
URI Resolution and Content Resolvers
====================================

Maps a source locator to a local file:

- ``file:`` URIs resolve to their path directly.
- ``content:`` URIs are looked up in a ContentResolver, which returns the
  ``_data`` column (the real file path) for the URI.
- Anything else does not resolve.

Content resolvers are registered by name, so a store can be configured with
one by name alone:

    store = ImageStore(resolver="sqlite", resolver_options={"db_file": "media.db"})
    store.resolver.register("content://media/external/images/1", "/data/img.jpg")
    store.copy_image_from_uri("content://media/external/images/1", "image/jpeg")
"""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union
from urllib.parse import unquote, urlparse

from sqlalchemy import Column, String, create_engine, delete, select
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..error_handling import ImageStoreConfigurationError

logger = logging.getLogger(__name__)

DATA_COLUMN = "_data"

Base = declarative_base()


class MediaEntry(Base):
    """SQLAlchemy model mapping a content URI to its file path."""

    __tablename__ = "media"

    uri = Column(String, primary_key=True)
    data = Column(DATA_COLUMN, String, nullable=True)


# =============================================================================
# Abstract Base Class
# =============================================================================


class ContentResolver(ABC):
    """
    Abstract base class for content resolvers.

    A resolver answers column queries for opaque content URIs, the way a
    platform media index does.
    """

    @abstractmethod
    def query_column(self, uri: str, column: str = DATA_COLUMN) -> Optional[str]:
        """
        Return the value of column for the row matching uri.

        Returns:
            The column value, or None if there is no matching row
        """
        pass

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


# =============================================================================
# Built-in Implementations
# =============================================================================


class InMemoryContentResolver(ContentResolver):
    """Dictionary-backed resolver, mostly useful in tests."""

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self._rows: Dict[str, Dict[str, Optional[str]]] = {}
        for uri, path in (entries or {}).items():
            self.register(uri, path)

    def register(self, uri: str, path: Optional[Union[str, Path]]) -> None:
        self._rows[uri] = {DATA_COLUMN: str(path) if path is not None else None}

    def unregister(self, uri: str) -> bool:
        return self._rows.pop(uri, None) is not None

    def query_column(self, uri: str, column: str = DATA_COLUMN) -> Optional[str]:
        row = self._rows.get(uri)
        if row is None:
            return None
        return row.get(column)


class SqliteContentResolver(ContentResolver):
    """SQLite-backed resolver using SQLAlchemy ORM."""

    def __init__(self, db_file: Union[str, Path] = ":memory:", echo: bool = False):
        self.db_file = str(db_file)
        engine_options = {}
        if self.db_file == ":memory:":
            # Share the single in-memory database across threads
            engine_options["poolclass"] = StaticPool
        self.engine = create_engine(
            f"sqlite:///{self.db_file}",
            echo=echo,
            connect_args={"check_same_thread": False},
            **engine_options,
        )
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )
        self._lock = threading.Lock()

        Base.metadata.create_all(self.engine)
        logger.debug(f"SqliteContentResolver initialized: {self.db_file}")

    def register(self, uri: str, path: Optional[Union[str, Path]]) -> None:
        with self._lock, self.SessionLocal() as session:
            session.merge(
                MediaEntry(uri=uri, data=str(path) if path is not None else None)
            )
            session.commit()

    def unregister(self, uri: str) -> bool:
        with self._lock, self.SessionLocal() as session:
            result = session.execute(delete(MediaEntry).where(MediaEntry.uri == uri))
            session.commit()
            return result.rowcount > 0

    def query_column(self, uri: str, column: str = DATA_COLUMN) -> Optional[str]:
        if column != DATA_COLUMN:
            logger.warning(f"Unsupported column queried: {column}")
            return None
        with self._lock, self.SessionLocal() as session:
            return session.execute(
                select(MediaEntry.data).where(MediaEntry.uri == uri)
            ).scalar_one_or_none()

    def close(self) -> None:
        self.engine.dispose()


# =============================================================================
# URI Resolution
# =============================================================================


def get_file_from_uri(
    uri: str, resolver: Optional[ContentResolver] = None
) -> Optional[Path]:
    """
    Resolve a file: or content: URI to a local path.

    Args:
        uri: Source locator
        resolver: Resolver consulted for content: URIs

    Returns:
        The resolved path, or None if the URI cannot be resolved
    """
    parsed = urlparse(uri)
    scheme = parsed.scheme.lower()

    if scheme == "file":
        return Path(unquote(parsed.path))

    if scheme == "content":
        if resolver is None:
            logger.warning(f"No content resolver configured for {uri}")
            return None
        path = resolver.query_column(uri, DATA_COLUMN)
        if not path:
            logger.debug(f"Content resolver returned no path for {uri}")
            return None
        return Path(path)

    logger.debug(f"Unsupported URI scheme {scheme!r} in {uri}")
    return None


# =============================================================================
# Content Resolver Registry
# =============================================================================

_BUILTIN_CONTENT_RESOLVERS: Dict[str, Type[ContentResolver]] = {
    "memory": InMemoryContentResolver,
    "sqlite": SqliteContentResolver,
}

_content_resolver_registry: Dict[str, Type[ContentResolver]] = dict(
    _BUILTIN_CONTENT_RESOLVERS
)


def register_content_resolver(
    name: str, resolver_class: Type[ContentResolver], force: bool = False
) -> None:
    """
    Make a resolver class available by name, e.g. to ImageStore(resolver=name).

    Raises:
        ImageStoreConfigurationError: If resolver_class is not a ContentResolver
            subclass, or name is taken and force is not set
    """
    if not (isinstance(resolver_class, type) and issubclass(resolver_class, ContentResolver)):
        raise ImageStoreConfigurationError(
            f"Content resolver '{name}' must be a ContentResolver subclass",
            {"name": name, "resolver_class": repr(resolver_class)},
        )

    existing = _content_resolver_registry.get(name)
    if existing is not None and not force:
        raise ImageStoreConfigurationError(
            f"Content resolver name '{name}' is already taken by {existing.__name__}",
            {"name": name},
        )

    _content_resolver_registry[name] = resolver_class
    logger.info(f"Registered content resolver '{name}' ({resolver_class.__name__})")


def unregister_content_resolver(name: str) -> bool:
    if _content_resolver_registry.pop(name, None) is None:
        logger.warning(f"Content resolver '{name}' is not registered")
        return False
    logger.info(f"Unregistered content resolver '{name}'")
    return True


def get_content_resolver(name: str, **options) -> ContentResolver:
    """
    Build a registered content resolver.

    Args:
        name: Registered resolver name, e.g. "sqlite"
        **options: Constructor arguments, e.g. db_file="media.db"

    Raises:
        ImageStoreConfigurationError: If the name is unknown or the options
            do not fit the resolver's constructor
    """
    resolver_class = _content_resolver_registry.get(name)
    if resolver_class is None:
        raise ImageStoreConfigurationError(
            f"No content resolver named '{name}'",
            {"name": name, "registered": sorted(_content_resolver_registry)},
        )

    try:
        return resolver_class(**options)
    except TypeError as e:
        raise ImageStoreConfigurationError(
            f"Invalid options for content resolver '{name}': {e}",
            {"name": name, "options": options},
        ) from e


def list_content_resolvers() -> List[Dict[str, Any]]:
    """List registered resolvers, built-ins first, then by name."""
    entries = sorted(
        _content_resolver_registry.items(),
        key=lambda item: (item[0] not in _BUILTIN_CONTENT_RESOLVERS, item[0]),
    )
    return [
        {
            "name": name,
            "class": resolver_class.__name__,
            "is_builtin": _BUILTIN_CONTENT_RESOLVERS.get(name) is resolver_class,
        }
        for name, resolver_class in entries
    ]


__all__ = [
    "ContentResolver",
    "InMemoryContentResolver",
    "SqliteContentResolver",
    "get_file_from_uri",
    "register_content_resolver",
    "unregister_content_resolver",
    "get_content_resolver",
    "list_content_resolvers",
]

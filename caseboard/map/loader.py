"""
Map document loading.

Fetches the map from its remote URL, falling back to the last cached copy
and then to the document bundled with the package. A document is only cached
or returned from the cache once it parses as a map. The chain is strictly
sequential and never fails: some document is always returned.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import requests

from ..database.db_manager import DatabaseManager
from ..utils import get_logger
from .choropleth import ChoroplethDocument, MapDocumentError

BUNDLED_MAP_PATH = Path(__file__).parent / "assets" / "us_tile_map.svg"


class MapSource(str, Enum):
    """Where a loaded map document came from."""
    REMOTE = "remote"
    CACHE = "cache"
    BUNDLED = "bundled"


@dataclass(frozen=True)
class LoadedMap:
    """A map document and its origin."""

    text: str
    source: MapSource


class DocumentCache:
    """
    Single-key text cache on the local database.

    Read and write failures are logged and swallowed.
    """

    def __init__(self, db_manager: Optional[DatabaseManager], key: str) -> None:
        self.db_manager = db_manager
        self.key = key
        self.logger = get_logger("map_cache")

    def get(self) -> Optional[str]:
        if self.db_manager is None:
            return None
        try:
            return self.db_manager.get_cached_value(self.key)
        except Exception as e:
            self.logger.debug(f"Map cache read failed: {e}")
            return None

    def put(self, text: str) -> None:
        if self.db_manager is None:
            return
        try:
            self.db_manager.set_cached_value(self.key, text)
        except Exception as e:
            self.logger.debug(f"Map cache write failed: {e}")


def read_bundled_map(path: Path = BUNDLED_MAP_PATH) -> str:
    """Read the map document shipped with the package."""
    return path.read_text(encoding="utf-8")


class MapDocumentLoader:
    """Loads the map document through the remote -> cache -> bundled chain."""

    def __init__(
        self,
        url: str,
        cache: DocumentCache,
        bundled_path: Path = BUNDLED_MAP_PATH,
        timeout_seconds: int = 10,
        region_attribute: str = "data-region",
    ) -> None:
        """
        Initialize loader.

        Args:
            url: Remote URL of the map document
            cache: Cache for the last successfully fetched document
            bundled_path: Document used when remote and cache both fail
            timeout_seconds: Remote fetch timeout
            region_attribute: Attribute carrying each shape's region code
        """
        self.url = url
        self.cache = cache
        self.bundled_path = bundled_path
        self.timeout = timeout_seconds
        self.region_attribute = region_attribute
        self.logger = get_logger("map_loader")

    def load(self) -> LoadedMap:
        """
        Load the map document.

        Returns:
            LoadedMap from the first source that produced a document
        """
        try:
            text = self._fetch_remote()
        except requests.RequestException as e:
            self.logger.warning(f"Map fetch from {self.url} failed, using fallback: {e}")
        else:
            if self.is_usable(text):
                self.cache.put(text)
                self.logger.info(f"Loaded map document from {self.url}")
                return LoadedMap(text=text, source=MapSource.REMOTE)
            self.logger.warning(f"Map document from {self.url} is not a usable map, using fallback")

        return self.load_fallback()

    def load_fallback(self) -> LoadedMap:
        """Load the cached document, or the bundled one when no usable copy is cached."""
        cached = self.cache.get()
        if cached and self.is_usable(cached):
            self.logger.info("Loaded map document from cache")
            return LoadedMap(text=cached, source=MapSource.CACHE)

        self.logger.info("Loaded bundled map document")
        return LoadedMap(text=read_bundled_map(self.bundled_path), source=MapSource.BUNDLED)

    def is_usable(self, text: str) -> bool:
        """Check that a document parses as a map."""
        try:
            ChoroplethDocument(text, self.region_attribute)
        except MapDocumentError as e:
            self.logger.debug(f"Unusable map document: {e}")
            return False
        return True

    def _fetch_remote(self) -> str:
        """
        Fetch the remote document.

        Raises:
            requests.RequestException: On network errors or non-2xx status
        """
        if not self.url:
            raise requests.RequestException("No map URL configured")
        response = requests.get(self.url, timeout=self.timeout)
        response.raise_for_status()
        return response.text

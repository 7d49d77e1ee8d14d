"""Site-specific stylesheet providers.

The engine knows nothing about individual sites. At enable/disable time it
asks a SiteProfiles provider to inject or remove whatever stylesheet belongs
to the current hostname; the stylesheet itself is opaque.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from .logger import get_logger

if TYPE_CHECKING:
    from .host import Document

logger = get_logger()

RESTRICTED_URL_PREFIXES = (
    "chrome://",
    "chrome-extension://",
    "edge://",
    "about:",
    "file://",
)


def is_restricted_url(url: str | None) -> bool:
    """Pages the host will not let the engine touch."""
    if not url:
        return True
    return url.lower().startswith(RESTRICTED_URL_PREFIXES)


def stylesheet_key(hostname: str) -> str:
    return f"darkpage-site-{hostname}"


class SiteProfiles(Protocol):
    """Capability to add/remove a site stylesheet."""

    def inject(self, hostname: str, document: Document) -> bool:
        """Inject the stylesheet for hostname; returns True if one was injected."""
        ...

    def remove(self, hostname: str, document: Document) -> None:
        """Remove the stylesheet injected for hostname, if any."""
        ...


class NullSiteProfiles:
    """No site stylesheets."""

    def inject(self, hostname: str, document: Document) -> bool:
        return False

    def remove(self, hostname: str, document: Document) -> None:
        return None


class DirectorySiteProfiles:
    """Stylesheets stored as <hostname>.css files in a directory.

    'www.example.com' also matches 'example.com.css'.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def find(self, hostname: str) -> Path | None:
        candidates = [hostname]
        if hostname.startswith("www."):
            candidates.append(hostname.removeprefix("www."))
        for name in candidates:
            path = self.directory / f"{name}.css"
            if path.is_file():
                return path
        return None

    def inject(self, hostname: str, document: Document) -> bool:
        path = self.find(hostname)
        if path is None:
            logger.checks(f"no site stylesheet for {hostname}")
            return False
        document.inject_stylesheet(stylesheet_key(hostname), path.read_text(encoding="utf-8"))
        logger.changes(f"injected site stylesheet {path.name}")
        return True

    def remove(self, hostname: str, document: Document) -> None:
        document.remove_stylesheet(stylesheet_key(hostname))


def profiles_for(directory: Path | str | None) -> SiteProfiles:
    if directory is None:
        return NullSiteProfiles()
    return DirectorySiteProfiles(directory)

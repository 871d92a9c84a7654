"""Cache revalidation hook for rendered pages.

Rendering lives outside this service; after every content mutation the
service layer tells the renderer which logical paths are stale. The default
implementation only logs and remembers the paths, which is enough for a
single-process deployment that renders on demand and for tests.
"""

import logging
from collections import deque
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

ADMIN_ROOT = "/admin"
PUBLIC_ROOT = "/portfolio"


class PathRevalidator:
    """Interface: invalidate cached renders of a logical path."""

    def revalidate(self, path: str) -> None:
        raise NotImplementedError

    def revalidate_many(self, paths: Iterable[str]) -> None:
        for path in dict.fromkeys(paths):
            self.revalidate(path)


class LoggingRevalidator(PathRevalidator):
    """Records revalidated paths in a bounded history."""

    def __init__(self, history: int = 500):
        self.paths: deque = deque(maxlen=history)

    def revalidate(self, path: str) -> None:
        logger.debug("Revalidate %s", path)
        self.paths.append(path)

    def recent(self) -> List[str]:
        return list(self.paths)


_revalidator: PathRevalidator = LoggingRevalidator()


def get_revalidator() -> PathRevalidator:
    return _revalidator


def set_revalidator(revalidator: PathRevalidator) -> None:
    """Install a different revalidator (e.g. one that calls the renderer's HTTP hook)."""
    global _revalidator
    _revalidator = revalidator


def admin_path(section: Optional[str] = None) -> str:
    return f"{ADMIN_ROOT}/{section}" if section else ADMIN_ROOT


def public_path(slug: Optional[str]) -> str:
    return f"{PUBLIC_ROOT}/{slug}" if slug else PUBLIC_ROOT

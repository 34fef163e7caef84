"""Admin panel configuration."""

import re
from typing import Any, Self

from adminkit.panels.concerns import HasSpaMode
from adminkit.support.concerns import EvaluatesClosures


class Panel(EvaluatesClosures, HasSpaMode):
    """A fluently configured admin panel."""

    def __init__(self, panel_id: str):
        self._id = panel_id
        self._path = panel_id
        self._is_default = False

    @classmethod
    def make(cls, panel_id: str) -> Self:
        return cls(panel_id)

    def __repr__(self) -> str:
        return f"<Panel(id='{self._id}', path='{self._path}')>"

    def path(self, path: str) -> Self:
        self._path = path.strip("/")
        return self

    def default(self, condition: bool = True) -> Self:
        self._is_default = condition
        return self

    def get_id(self) -> str:
        return self._id

    def get_path(self) -> str:
        return self._path

    def is_default(self) -> bool:
        return self._is_default

    def get_default_closure_injections(self) -> dict[str, Any]:
        return {"panel": self}

    def uses_spa_navigation(self, url: str | None = None, root: str | None = None) -> bool:
        """Whether a link to ``url`` should navigate without a full page load."""
        if not self.has_spa_mode():
            return False

        if not url:
            return True

        if root and not url.startswith(root.rstrip("/")):
            return False

        return not any(_url_pattern(pattern).fullmatch(url) for pattern in self.get_spa_url_exceptions())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.get_id(),
            "path": self.get_path(),
            "is_default": self.is_default(),
            "spa": {
                "enabled": self.has_spa_mode(),
                "prefetch": self.has_spa_prefetch(),
                "url_exceptions": self.get_spa_url_exceptions(),
            },
        }


def _url_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a URL pattern where only ``*`` is a wildcard."""
    return re.compile(re.escape(pattern).replace(r"\*", ".*"), re.DOTALL)

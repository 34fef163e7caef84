"""Registered admin panels."""

from adminkit.config import Settings, settings
from adminkit.panels.panel import Panel


class PanelRegistry:
    """Holds panels by id."""

    def __init__(self):
        self._panels: dict[str, Panel] = {}

    def register(self, panel: Panel) -> Panel:
        self._panels[panel.get_id()] = panel
        return panel

    def get(self, panel_id: str) -> Panel | None:
        return self._panels.get(panel_id)

    def get_default(self) -> Panel | None:
        for panel in self._panels.values():
            if panel.is_default():
                return panel
        return next(iter(self._panels.values()), None)

    def all(self) -> list[Panel]:
        return list(self._panels.values())


def build_default_panel(config: Settings = settings) -> Panel:
    """The panel described by settings; SPA flags follow later setting changes."""
    return (
        Panel.make(config.panel_id)
        .path(config.panel_path)
        .default()
        .spa(
            condition=lambda: config.panel_spa_mode,
            prefetch=lambda: config.panel_spa_prefetch,
        )
        .spa_url_exceptions(
            lambda panel: [
                f"*/{panel.get_path()}/imports/*/failed-rows/download",
                *config.panel_spa_url_exceptions,
            ]
        )
    )


panel_registry = PanelRegistry()
panel_registry.register(build_default_panel())

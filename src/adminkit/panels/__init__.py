"""Admin panel configuration."""

from adminkit.panels.concerns import HasSpaMode
from adminkit.panels.panel import Panel
from adminkit.panels.registry import PanelRegistry, build_default_panel, panel_registry

__all__ = ["HasSpaMode", "Panel", "PanelRegistry", "build_default_panel", "panel_registry"]

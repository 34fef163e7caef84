"""Admin panel configuration endpoints."""

from fastapi import APIRouter, HTTPException, Query, status

from adminkit.api.deps import CurrentUser
from adminkit.panels import Panel, panel_registry
from adminkit.schemas.panel import NavigationResponse, PanelResponse

router = APIRouter()


def _get_panel_or_404(panel_id: str) -> Panel:
    panel = panel_registry.get(panel_id)
    if panel is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Panel {panel_id} not found",
        )
    return panel


@router.get("", response_model=list[PanelResponse])
async def list_panels(current_user: CurrentUser) -> list[PanelResponse]:
    return [PanelResponse.model_validate(panel.to_dict()) for panel in panel_registry.all()]


@router.get("/{panel_id}", response_model=PanelResponse)
async def get_panel(panel_id: str, current_user: CurrentUser) -> PanelResponse:
    """Get a panel's SPA configuration."""
    return PanelResponse.model_validate(_get_panel_or_404(panel_id).to_dict())


@router.get("/{panel_id}/navigation", response_model=NavigationResponse)
async def get_navigation(
    panel_id: str,
    current_user: CurrentUser,
    url: str | None = Query(None, description="Link target"),
    root: str | None = Query(None, description="Application root URL"),
) -> NavigationResponse:
    """Whether a link to ``url`` should use SPA navigation."""
    panel = _get_panel_or_404(panel_id)
    spa = panel.uses_spa_navigation(url, root)
    return NavigationResponse(url=url, spa=spa, prefetch=spa and panel.has_spa_prefetch())

"""Panel schemas."""

from pydantic import BaseModel


class SpaSchema(BaseModel):
    enabled: bool
    prefetch: bool
    url_exceptions: list[str]


class PanelResponse(BaseModel):
    """Panel configuration as seen by the frontend."""

    id: str
    path: str
    is_default: bool
    spa: SpaSchema


class NavigationResponse(BaseModel):
    url: str | None = None
    spa: bool
    prefetch: bool

"""Pydantic schema for dashboard records returned by the Grafana.com API."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class Dashboard(BaseModel):
    """A dashboard's name and download count.

    This is a small snippet of the data available from the Grafana API; any
    other field in the response is ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = Field(..., strict=True)
    id: int = Field(..., strict=True)
    downloads: int = Field(..., ge=0, strict=True)
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC), exclude=True)

    @property
    def dashboard_id(self) -> str:
        """Cache key: the decimal form of the id reported by the API."""

        return str(self.id)

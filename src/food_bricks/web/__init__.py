"""Web API for Food Bricks."""

from typing import Optional

import uvicorn

from ..utils.config import get_settings


def run(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False):
    """Run the web server, falling back to the configured bind address."""
    settings = get_settings()
    uvicorn.run(
        "food_bricks.web.app:app",
        host=host or settings.web_host,
        port=port or settings.web_port,
        reload=reload,
    )


__all__ = ["run"]

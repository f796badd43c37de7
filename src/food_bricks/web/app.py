"""FastAPI web application."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..errors import FoodBricksError
from .routes import babies, dashboard, foods, notifications, preferences, trials

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Food Bricks",
    description="Track food introductions and allergy risk for babies",
    version="0.1.0",
)

# Include routers
app.include_router(foods.router, prefix="/foods", tags=["foods"])
app.include_router(babies.router, prefix="/babies", tags=["babies"])
app.include_router(babies.steroid_router, tags=["babies"])
app.include_router(trials.router, tags=["trials"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
app.include_router(notifications.router, tags=["notifications"])
app.include_router(preferences.router, tags=["settings"])


@app.exception_handler(FoodBricksError)
async def domain_error_handler(request: Request, exc: FoodBricksError):
    """Map domain errors to JSON responses."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}

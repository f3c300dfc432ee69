"""FastAPI application - trip components service."""

from fastapi import FastAPI

from backend.trips.api.errors import register_exception_handlers
from backend.trips.api.routes.components import router as components_router
from backend.trips.api.routes.health import router as health_router
from backend.trips.api.routes.metrics import router as metrics_router
from backend.trips.api.routes.payment_schedules import router as payment_schedules_router
from backend.trips.api.routes.schedules import router as schedules_router

app = FastAPI(title="Trip Components API", version="0.1.0")

register_exception_handlers(app)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(components_router)
app.include_router(schedules_router)
app.include_router(payment_schedules_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Trip Components API", "version": "0.1.0"}

"""Route registration for the Trackline API."""

from fastapi import FastAPI

from .tracking import router as tracking_router


def register_routes(app: FastAPI):
    app.include_router(tracking_router)

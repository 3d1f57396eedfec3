"""Shipment lookup, scrape and resolve routes."""

import logging

from fastapi import APIRouter

from ...errors import InputEmpty, UpstreamFetchFailed
from ...models import TrackingQuery
from ..app import error_response, require_app, success_response
from ..models import TrackingIdRequest, TrackShipmentRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/track-shipment")
async def track_shipment(req: TrackShipmentRequest):
    """Look up a shipment in the internal registry."""
    if TrackingQuery.from_raw(req.tracking_number).is_empty:
        return error_response(400, "tracking_number is required")

    app = require_app()
    if not app.has_registry:
        return error_response(503, "Shipment registry is not configured")

    try:
        shipment = await app.lookup_shipment(req.tracking_number)
    except UpstreamFetchFailed as e:
        return error_response(500, e.message)
    except Exception as e:
        logger.error(f"Shipment lookup failed: {e}", exc_info=True)
        return error_response(500, "Internal server error")

    if shipment is None:
        return error_response(404, "Shipment not found")
    return success_response(shipment=shipment)


@router.post("/api/scrape-tracking")
async def scrape_tracking(req: TrackingIdRequest):
    """Scrape the public aggregator page for a tracking id."""
    query = TrackingQuery.from_raw(req.tracking_id)
    if query.is_empty:
        return error_response(400, "tracking_id is required")

    app = require_app()
    try:
        result = await app.scrape(query.identifier)
    except UpstreamFetchFailed as e:
        return error_response(502, e.message)
    except InputEmpty:
        return error_response(400, "tracking_id is required")
    except Exception as e:
        logger.error(f"Scrape failed: {e}", exc_info=True)
        return error_response(500, "Internal server error")

    return success_response(tracking_id=query.identifier, **result.to_dict())


@router.post("/api/resolve")
async def resolve(req: TrackingIdRequest):
    """Run the full resolution pipeline."""
    app = require_app()
    result = await app.resolve(req.tracking_id)
    return result.to_dict()


@router.get("/api/track/{tracking_id}")
async def track(tracking_id: str):
    """Run the full resolution pipeline for a path identifier."""
    app = require_app()
    result = await app.resolve(tracking_id)
    return result.to_dict()

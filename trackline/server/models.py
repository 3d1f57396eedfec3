"""Pydantic request models for the Trackline API."""

from typing import Optional

from pydantic import BaseModel


class TrackShipmentRequest(BaseModel):
    tracking_number: Optional[str] = None


class TrackingIdRequest(BaseModel):
    tracking_id: Optional[str] = None

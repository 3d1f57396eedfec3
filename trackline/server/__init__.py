"""Trackline HTTP API (FastAPI)."""

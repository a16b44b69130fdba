# backend/digital_offices/schemas/__init__.py
"""Pydantic request/response schemas for the v1 API."""

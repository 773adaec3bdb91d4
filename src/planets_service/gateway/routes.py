"""Operational HTTP endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..services.health import HealthService

health_router = APIRouter(tags=["system"])


@health_router.get("/health", include_in_schema=True)
async def health_check(request: Request) -> JSONResponse:
    service: HealthService = request.app.state.health  # type: ignore[attr-defined]
    return JSONResponse(service.liveness())


@health_router.get("/ready", include_in_schema=True)
async def readiness_check(request: Request) -> JSONResponse:
    service: HealthService = request.app.state.health  # type: ignore[attr-defined]
    # checks hit the database and may sleep between retries
    payload = await asyncio.to_thread(service.readiness)
    status_code = 503 if payload["status"] == "error" else 200
    return JSONResponse(payload, status_code=status_code)


__all__ = ["health_router"]

"""
Liveness and store-connectivity checks.
"""

from __future__ import annotations

from fastapi import APIRouter

from core import db

router = APIRouter(prefix="/health")


@router.get("")
async def health() -> dict:
    return {"success": True, "message": "API is running"}


@router.get("/db")
async def health_db() -> dict:
    # Store failures fall through to the top-level 500 handler.
    result = await db.ping()
    return {
        "success": True,
        "message": "API and database are running",
        "dbTest": result,
    }

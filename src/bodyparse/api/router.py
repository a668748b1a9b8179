"""Main API router aggregating all routes."""

from fastapi import APIRouter

from bodyparse.api.routes import foo

api_router = APIRouter()

api_router.include_router(foo.router)

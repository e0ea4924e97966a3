"""API route modules."""

from fastapi import APIRouter

from routes.auth_routes import router as auth_router
from routes.crud import build_crud_router
from routes.health_routes import router as health_router
from routes.pokemon_routes import router as pokemon_router
from routes.resources import RESOURCES, VIEWS
from routes.users_routes import router as users_router


def build_crud_routers() -> list[APIRouter]:
    """One top-level router per resource, plus a league-scoped one where defined."""
    routers = [build_crud_router(resource, VIEWS) for resource in RESOURCES]
    routers.extend(
        build_crud_router(resource, VIEWS, scoped=True)
        for resource in RESOURCES
        if resource.league_scope is not None
    )
    return routers


__all__ = [
    "auth_router",
    "build_crud_routers",
    "health_router",
    "pokemon_router",
    "users_router",
]

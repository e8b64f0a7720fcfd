"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from meal_nutrition.api.models import ReferenceStatus

if TYPE_CHECKING:
    from meal_nutrition.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not admin_token or not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/reference", dependencies=[Depends(require_admin)])
async def reference_status(request: Request) -> dict[str, object]:
    """Return the reference dataset state."""
    container: AppContainer = request.app.state.container
    stats = container.reference_store.stats()
    return ReferenceStatus.from_stats(stats).model_dump()


@router.post("/reference/refresh", dependencies=[Depends(require_admin)])
async def refresh_reference(request: Request) -> dict[str, object]:
    """Reload the reference dataset and return the new state."""
    container: AppContainer = request.app.state.container
    await container.reference_store.refresh()
    return ReferenceStatus.from_stats(container.reference_store.stats()).model_dump()

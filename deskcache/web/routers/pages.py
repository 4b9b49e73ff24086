"""Page placeholders guarded by RouteGuardMiddleware; rendering lives in the frontend."""

from fastapi import APIRouter

router = APIRouter(tags=["pages"])


@router.get("/")
async def root():
    return {"page": "/"}


@router.get("/login")
async def login_page():
    return {"page": "/login"}


@router.get("/dashboard")
async def dashboard():
    return {"page": "/dashboard"}


@router.get("/dashboard/{section:path}")
async def dashboard_section(section: str):
    return {"page": f"/dashboard/{section}"}

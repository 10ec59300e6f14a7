"""Authentication web routes — Google sign-in, callback, logout."""

import logging
from pathlib import Path

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobfinder.models.base import get_db
from jobfinder.models.user import User
from jobfinder.exceptions import ValidationError
from jobfinder.services.auth_service import oauth, google_sign_in_configured
from jobfinder.services.user_service import upsert_user_from_profile
from jobfinder.dependencies.auth import get_current_user, ensure_csrf_token

logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=Path(__file__).resolve().parent.parent / "templates")


def _login_page(request: Request, error: str | None, status_code: int = 200):
    csrf_token = ensure_csrf_token(request)
    return templates.TemplateResponse(
        request,
        "auth/login.html",
        {"request": request, "csrf_token": csrf_token, "current_user": None, "error": error},
        status_code=status_code,
    )


@router.get("/login", response_class=HTMLResponse)
async def login(request: Request, user: User | None = Depends(get_current_user)):
    """Send the visitor to Google, or show why sign-in is unavailable."""
    if user:
        return RedirectResponse("/", status_code=303)
    if not google_sign_in_configured():
        return _login_page(request, "Google sign-in is not configured on this server.", status_code=503)

    redirect_uri = str(request.url_for("google_callback"))
    return await oauth.google.authorize_redirect(request, redirect_uri)


@router.get("/auth/google/callback", name="google_callback")
async def google_callback(request: Request, db: AsyncSession = Depends(get_db)):
    """Finish Google sign-in: create or refresh the user, then start a session."""
    try:
        token = await oauth.google.authorize_access_token(request)
    except OAuthError as e:
        logger.warning(f"Google sign-in failed: {e.error}")
        return _login_page(request, "Sign-in was cancelled or failed. Please try again.", status_code=400)

    profile = token.get("userinfo") or {}
    try:
        user = await upsert_user_from_profile(
            db,
            provider_id=profile.get("sub"),
            email=profile.get("email"),
            name=profile.get("name"),
            picture=profile.get("picture"),
        )
    except (ValidationError, IntegrityError) as e:
        await db.rollback()
        logger.error(f"Error during sign in: {e}")
        return _login_page(request, "We could not sign you in with that Google account.", status_code=400)

    request.session["user_id"] = str(user.id)
    await db.commit()

    return RedirectResponse("/", status_code=303)


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return RedirectResponse("/", status_code=303)

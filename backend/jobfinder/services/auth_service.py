"""Authentication helpers — Google sign-in via OpenID Connect."""

from authlib.integrations.starlette_client import OAuth

from jobfinder.config import get_settings

settings = get_settings()

oauth = OAuth()
oauth.register(
    name="google",
    client_id=settings.google_client_id,
    client_secret=settings.google_client_secret,
    server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
    client_kwargs={"scope": "openid email profile"},
    authorize_params={"prompt": "consent", "access_type": "offline"},
)


def google_sign_in_configured() -> bool:
    return bool(settings.google_client_id and settings.google_client_secret)

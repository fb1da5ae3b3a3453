"""Authentication: Supabase JWT validation via JWKS, with a local dev-mode bypass."""
import logging
from dataclasses import dataclass
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from core.config import Settings, get_settings

logger = logging.getLogger(__name__)


# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)

# Cache for JWKS clients (reuse across requests)
_jwks_clients: dict[str, PyJWKClient] = {}

SUPABASE_ALGORITHMS = ["ES256", "RS256"]
DEV_USER_EMAIL = "dev@localhost"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as asserted by the identity provider."""

    user_id: UUID
    email: str | None = None


def get_jwks_client(settings: Settings) -> PyJWKClient:
    """Get or create a cached JWKS client for the given settings."""
    if settings.supabase_jwks_url not in _jwks_clients:
        _jwks_clients[settings.supabase_jwks_url] = PyJWKClient(
            settings.supabase_jwks_url,
            cache_jwk_set=True,
            lifespan=3600,  # Cache keys for 1 hour
        )
    return _jwks_clients[settings.supabase_jwks_url]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_jwt(token: str, settings: Settings) -> dict:
    """
    Decode and validate a Supabase access token.

    Raises:
        HTTPException: 401 if the token is invalid, expired, or has the wrong
            audience/issuer; 503 if the signing keys can't be fetched.
    """
    try:
        jwks_client = get_jwks_client(settings)
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        return jwt.decode(
            token,
            signing_key.key,
            algorithms=SUPABASE_ALGORITHMS,
            audience=settings.supabase_jwt_audience,
            issuer=settings.supabase_issuer,
        )

    except jwt.ExpiredSignatureError as e:
        raise _unauthorized("Token has expired") from e
    except jwt.InvalidAudienceError as e:
        raise _unauthorized("Invalid audience") from e
    except jwt.InvalidIssuerError as e:
        raise _unauthorized("Invalid issuer") from e
    except jwt.PyJWKClientConnectionError as e:
        # Log full details for debugging (server-side only)
        logger.error("Failed to fetch JWKS from Supabase: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not validate credentials",
        ) from e
    except jwt.PyJWTError as e:
        logger.warning("JWT validation failed: %s", e, exc_info=True)
        raise _unauthorized("Invalid token") from e


def identity_from_claims(claims: dict) -> Identity:
    """
    Build an Identity from verified token claims.

    Raises:
        HTTPException: 401 if ``sub`` is missing or not a UUID.
    """
    subject = claims.get("sub")
    try:
        user_id = UUID(str(subject))
    except ValueError as e:
        raise _unauthorized("Invalid token payload") from e
    return Identity(user_id=user_id, email=claims.get("email"))


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> Identity:
    """
    Resolve the caller from the bearer token.

    In DEV_MODE the token is ignored and a fixed local user is returned.
    """
    if settings.dev_mode:
        return Identity(user_id=settings.dev_user_id, email=DEV_USER_EMAIL)

    if credentials is None:
        raise _unauthorized("Not authenticated")

    claims = decode_jwt(credentials.credentials, settings)
    return identity_from_claims(claims)

from datetime import datetime, timedelta, timezone
from typing import Optional
import secrets

from jose import jwt, JWTError
from passlib.context import CryptContext
import structlog

from vertragsdb.config import Settings, settings

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# ---------- password helpers ----------

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# ---------- signing keys ----------


class TokenSigner:
    """
    Signs with the current secret; verifies against current and previous ones.

    Built once from configuration at startup, so rotating a secret is a
    config change plus restart: move the old value to
    JWT_PREVIOUS_SECRET_KEYS and set a new JWT_SECRET_KEY.
    """

    def __init__(
        self,
        secret: str,
        previous_secrets: Optional[list[str]] = None,
        algorithm: str = "HS256",
        expire_minutes: int = 24 * 60,
    ):
        if not secret:
            raise ValueError("A signing secret is required")
        self.secret = secret
        self.previous_secrets = list(previous_secrets or [])
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, cfg: Settings) -> "TokenSigner":
        secret = cfg.JWT_SECRET_KEY
        if not secret:
            if cfg.is_production:
                raise RuntimeError("JWT_SECRET_KEY must be configured in production")
            # Tokens issued with this key die with the process.
            secret = secrets.token_urlsafe(48)
            logger.warning("jwt_secret_ephemeral", environment=cfg.ENVIRONMENT)
        return cls(
            secret=secret,
            previous_secrets=cfg.previous_jwt_secrets,
            algorithm=cfg.JWT_ALGORITHM,
            expire_minutes=cfg.ACCESS_TOKEN_EXPIRE_MINUTES,
        )

    def encode(self, claims: dict) -> str:
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        """Decode and verify a JWT token. Raises JWTError on failure."""
        last_error: Optional[JWTError] = None
        for key in [self.secret, *self.previous_secrets]:
            try:
                return jwt.decode(token, key, algorithms=[self.algorithm])
            except JWTError as e:
                last_error = e
        raise last_error or JWTError("Token could not be verified")


_signer: Optional[TokenSigner] = None


def init_token_signer(cfg: Settings = settings) -> TokenSigner:
    global _signer
    _signer = TokenSigner.from_settings(cfg)
    return _signer


def get_token_signer() -> TokenSigner:
    if _signer is None:
        return init_token_signer()
    return _signer


# ---------- token generation ----------

def create_access_token(user_id: int, username: str, role: str) -> str:
    signer = get_token_signer()
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "username": username,
        "role": getattr(role, "value", role),
        "iat": now,
        "exp": now + timedelta(minutes=signer.expire_minutes),
        "type": "access",
    }
    return signer.encode(claims)


# ---------- token verification ----------

def verify_access_token(token: str) -> dict:
    """Verify an access token and return its claims."""
    payload = get_token_signer().decode(token)
    if payload.get("type") != "access":
        raise JWTError("Not an access token")
    return payload

# auth.py
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from email_validator import validate_email, EmailNotValidError
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
import logging

from nainzaka.db import get_db
from nainzaka.models import AdminUser
from nainzaka.schemas import AdminPublic, Token
from nainzaka.settings import settings

log = logging.getLogger(__name__)

# ===================================================================
# Configuration
# ===================================================================

router = APIRouter(prefix="/admin", tags=["Admin Auth"])

pwd_context = CryptContext(schemes=["scrypt", "bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/admin/login")


# ===================================================================
# Sign-in errors
# ===================================================================

# Provider-style codes so the admin frontend can switch on them.
AUTH_ERRORS = {
    "auth/invalid-email": (status.HTTP_400_BAD_REQUEST, "Invalid email address."),
    "auth/user-not-found": (status.HTTP_401_UNAUTHORIZED, "No admin account found with this email."),
    "auth/wrong-password": (status.HTTP_401_UNAUTHORIZED, "Incorrect password."),
    "auth/user-disabled": (status.HTTP_403_FORBIDDEN, "This account has been disabled."),
    "auth/too-many-requests": (
        status.HTTP_429_TOO_MANY_REQUESTS, "Too many failed attempts. Please try again later."
    ),
}
DEFAULT_AUTH_ERROR = (status.HTTP_401_UNAUTHORIZED, "Login failed. Please check your credentials.")


class AuthError(Exception):
    """A failed sign-in, identified by a provider-style error code."""

    def __init__(self, code: str):
        self.code = code
        self.status_code, self.message = AUTH_ERRORS.get(code, DEFAULT_AUTH_ERROR)
        super().__init__(f"{code}: {self.message}")

    def to_http(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={"code": self.code, "message": self.message},
        )


# ===================================================================
# Utility Functions
# ===================================================================

def hash_password(password: str) -> str:
    """Hashes a plain-text password using the default scheme (scrypt)."""
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifies a plain password against a hashed one."""
    return pwd_context.verify(plain_password, hashed_password)

def normalize_email(email: str) -> str:
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        raise AuthError("auth/invalid-email")

def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    """Creates a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.JWT_EXPIRY_MINUTES
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

async def get_admin_by_email(db: AsyncSession, email: str) -> Optional[AdminUser]:
    result = await db.execute(select(AdminUser).where(AdminUser.email == email))
    return result.scalars().first()

# email -> times of recent failed sign-ins, per process
_failed_logins: Dict[str, List[datetime]] = {}

def _recent_failures(email: str, now: datetime) -> List[datetime]:
    window = timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
    recent = [t for t in _failed_logins.get(email, []) if now - t < window]
    if recent:
        _failed_logins[email] = recent
    else:
        _failed_logins.pop(email, None)
    return recent

def _record_failure(email: str, now: datetime) -> None:
    _failed_logins.setdefault(email, []).append(now)

def reset_login_attempts() -> None:
    _failed_logins.clear()

async def authenticate_admin(db: AsyncSession, email: str, password: str) -> AdminUser:
    """Email/password sign-in. Raises AuthError with the matching code on failure."""
    email = normalize_email(email)
    now = datetime.now(timezone.utc)
    if len(_recent_failures(email, now)) >= settings.LOGIN_MAX_ATTEMPTS:
        raise AuthError("auth/too-many-requests")

    admin = await get_admin_by_email(db, email)
    if not admin:
        _record_failure(email, now)
        raise AuthError("auth/user-not-found")
    if not verify_password(password, admin.hashed_password):
        _record_failure(email, now)
        raise AuthError("auth/wrong-password")
    if not admin.is_active:
        raise AuthError("auth/user-disabled")

    _failed_logins.pop(email, None)
    return admin

async def seed_admin(db: AsyncSession) -> Optional[AdminUser]:
    """Create the admin from ADMIN_EMAIL / ADMIN_PASSWORD if it does not exist yet."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        log.warning("ADMIN_EMAIL or ADMIN_PASSWORD not set. No admin account seeded.")
        return None

    email = normalize_email(settings.ADMIN_EMAIL)
    existing = await get_admin_by_email(db, email)
    if existing:
        return existing

    admin = AdminUser(email=email, hashed_password=hash_password(settings.ADMIN_PASSWORD))
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    log.info(f"👤 Seeded admin account {email}")
    return admin


# ===================================================================
# Current Admin Dependency
# ===================================================================

async def get_current_admin(
    token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)
) -> AdminUser:
    """
    Decodes the bearer token and loads the admin it names. Every admin route
    and every admin write goes through this check.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        log.warning(f"Invalid JWT decode attempt: {e}")
        raise credentials_exception

    email = payload.get("sub")
    if email is None:
        raise credentials_exception

    admin = await get_admin_by_email(db, email)
    if admin is None or not admin.is_active:
        raise credentials_exception
    if payload.get("ver") != admin.token_version:
        # Issued before the last sign-out
        raise credentials_exception
    return admin


# ===================================================================
# API Endpoints
# ===================================================================

@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)
):
    """
    Admin sign-in. Expects form-data (`username` = email, `password`).
    """
    try:
        admin = await authenticate_admin(db, form_data.username, form_data.password)
    except AuthError as e:
        log.info(f"Admin login failed for '{form_data.username}': {e.code}")
        raise e.to_http()

    access_token = create_access_token({"sub": admin.email, "ver": admin.token_version})
    log.info(f"Admin {admin.email} signed in.")
    return Token(
        access_token=access_token,
        token_type="bearer",
        admin=AdminPublic.model_validate(admin),
    )


@router.post("/logout")
async def logout(
    admin: AdminUser = Depends(get_current_admin), db: AsyncSession = Depends(get_db)
):
    """Signs out everywhere by invalidating every token issued so far."""
    admin.token_version = (admin.token_version or 0) + 1
    await db.commit()
    log.info(f"Admin {admin.email} signed out.")
    return {"message": "Signed out."}


@router.get("/me", response_model=AdminPublic)
async def read_current_admin(admin: AdminUser = Depends(get_current_admin)):
    """Current session observation: who is signed in, if anyone."""
    return admin

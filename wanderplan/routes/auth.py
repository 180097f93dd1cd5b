import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..auth import create_session_token, get_current_user
from ..config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ENVIRONMENT,
    FRONTEND_URL,
    SESSION_COOKIE_NAME,
)
from ..database import get_db
from ..errors import api_error
from ..models import User, utcnow
from ..rate_limiter import (
    LOGIN_LIMIT,
    PASSWORD_RESET_LIMIT,
    create_rate_limiter,
    get_rate_limit_status,
    rate_limit_exceeded,
    record_failed_attempt,
    reset_rate_limit,
)
from ..schemas import (
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    RegisterRequest,
    TokenRequest,
    user_response,
)
from ..security_utils import (
    EMAIL_VERIFICATION_SALT,
    PASSWORD_RESET_SALT,
    generate_timed_token,
    hash_password_bcrypt,
    mask_sensitive_data,
    verify_password_bcrypt,
    verify_timed_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

EMAIL_VERIFICATION_MAX_AGE = 24 * 60 * 60
PASSWORD_RESET_MAX_AGE = 60 * 60

rate_limit_password_reset = create_rate_limiter(
    limit=PASSWORD_RESET_LIMIT[0],
    window_seconds=PASSWORD_RESET_LIMIT[1],
    key_prefix="password_reset",
    message="Too many password reset requests. Please try again in {minutes} minutes.",
)


def _password_fingerprint(user: User) -> str:
    """Ties a reset token to the current hash so it stops working once used"""
    return (user.password_hash or "")[-16:]


async def _send_verification(user: User) -> None:
    token = generate_timed_token({"user_id": user.id, "email": user.email}, EMAIL_VERIFICATION_SALT)
    verify_link = f"{FRONTEND_URL}/verify-email?token={token}"
    try:
        from ..email_service import send_verification_email

        await send_verification_email(
            to=user.email, user_name=user.first_name or user.email, verify_link=verify_link
        )
    except Exception as e:
        logger.warning(f"⚠️ Failed to send verification email to {mask_sensitive_data(user.email)}: {e}")


# ============================================================================
# REGISTRATION AND SESSIONS
# ============================================================================


@router.post("/register", status_code=201)
async def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and email a verification link"""
    if db.query(User).filter(User.email == data.email).first():
        raise api_error(409, "An account with this email already exists", code="CONFLICT")

    user = User(
        email=data.email,
        password_hash=hash_password_bcrypt(data.password),
        first_name=data.firstName,
        last_name=data.lastName,
        timezone=data.timezone,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"✅ New user registered: {user.id}")

    await _send_verification(user)

    return {
        "message": "Account created. Please check your email to verify your address.",
        "user": user_response(user),
    }


@router.post("/login")
async def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """
    Exchange email and password for a session token.

    Failed attempts are counted per email; after LOGIN_LIMIT failures inside
    the window every attempt is refused with 429 until the window resets.
    """
    limit, window = LOGIN_LIMIT
    attempts_key = f"login:{data.email}"
    remaining, ttl = get_rate_limit_status(attempts_key, limit)
    if remaining <= 0:
        logger.warning(f"🚫 Login locked for {mask_sensitive_data(data.email)}")
        raise rate_limit_exceeded(
            ttl, "Too many failed login attempts. Please try again in {minutes} minutes."
        )

    user = db.query(User).filter(User.email == data.email).first()
    if not user or not verify_password_bcrypt(data.password, user.password_hash):
        record_failed_attempt(attempts_key, window)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    reset_rate_limit(attempts_key)
    token = create_session_token(user)
    expires_in = ACCESS_TOKEN_EXPIRE_MINUTES * 60
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=expires_in,
        httponly=True,
        secure=ENVIRONMENT == "production",
        samesite="lax",
    )
    logger.info(f"🔐 User {user.id} logged in")

    return {
        "accessToken": token,
        "tokenType": "bearer",
        "expiresIn": expires_in,
        "user": user_response(user),
    }


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"message": "Logged out"}


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    return {"user": user_response(current_user)}


# ============================================================================
# EMAIL VERIFICATION
# ============================================================================


@router.post("/verify-email")
async def verify_email(data: TokenRequest, db: Session = Depends(get_db)):
    payload = verify_timed_token(data.token, EMAIL_VERIFICATION_SALT, EMAIL_VERIFICATION_MAX_AGE)
    if not payload:
        raise HTTPException(status_code=400, detail="Invalid or expired verification link")

    user = db.query(User).filter(User.id == payload.get("user_id")).first()
    if not user or user.email != payload.get("email"):
        raise HTTPException(status_code=400, detail="Invalid or expired verification link")

    if not user.email_verified:
        user.email_verified = True
        user.email_verified_at = utcnow()
        db.commit()
        logger.info(f"✅ Email verified for user {user.id}")

    return {"message": "Email verified successfully", "user": user_response(user)}


@router.post("/verify-email/send")
async def resend_verification_email(current_user: User = Depends(get_current_user)):
    if current_user.email_verified:
        raise HTTPException(status_code=400, detail="Email is already verified")
    await _send_verification(current_user)
    return {"message": "Verification email sent"}


# ============================================================================
# PASSWORD RESET
# ============================================================================


@router.post("/password-reset/request")
async def request_password_reset(
    data: PasswordResetRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_password_reset),
):
    """Always answers 200 so the endpoint cannot be used to discover which accounts exist"""
    user = db.query(User).filter(User.email == data.email).first()
    if user and user.password_hash:
        token = generate_timed_token(
            {"user_id": user.id, "fp": _password_fingerprint(user)}, PASSWORD_RESET_SALT
        )
        try:
            from ..email_service import send_password_reset_email

            await send_password_reset_email(
                to=user.email, reset_link=f"{FRONTEND_URL}/reset-password?token={token}"
            )
        except Exception as e:
            logger.warning(f"⚠️ Failed to send password reset email for user {user.id}: {e}")
    else:
        logger.info(f"🔍 Password reset requested for unknown email {mask_sensitive_data(data.email)}")

    return {"message": "If an account exists for this email, a reset link has been sent."}


@router.post("/password-reset/confirm")
async def confirm_password_reset(data: PasswordResetConfirm, db: Session = Depends(get_db)):
    payload = verify_timed_token(data.token, PASSWORD_RESET_SALT, PASSWORD_RESET_MAX_AGE)
    if not payload:
        raise HTTPException(status_code=400, detail="Invalid or expired reset link")

    user = db.query(User).filter(User.id == payload.get("user_id")).first()
    if not user or payload.get("fp") != _password_fingerprint(user):
        raise HTTPException(status_code=400, detail="Invalid or expired reset link")

    user.password_hash = hash_password_bcrypt(data.password)
    db.commit()
    reset_rate_limit(f"login:{user.email}")
    logger.info(f"🔑 Password reset for user {user.id}")

    return {"message": "Password has been reset. You can now log in."}

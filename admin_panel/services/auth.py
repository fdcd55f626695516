"""Authentication primitives: password hashing, TOTP secrets and enrollment QR codes."""

import base64
import binascii
import io

import bcrypt
import pyotp
import qrcode

from admin_panel.config import settings

# Checked against when the username is unknown so both paths cost one bcrypt round.
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt()).decode("utf-8")


def hash_password(password: str) -> str:
    pw = password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    pw = plain.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw, hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def burn_password_check(plain: str) -> None:
    """Spend the same time as a real password check for a user that does not exist."""
    verify_password(plain, _DUMMY_HASH)


def verify_totp(secret: str, code: str) -> bool:
    totp = pyotp.TOTP(secret)
    try:
        return totp.verify(code, valid_window=settings.totp_valid_window)
    except (binascii.Error, ValueError):
        # Stored secret is not valid base32
        return False


def generate_totp_secret() -> str:
    return pyotp.random_base32(length=32)


def get_totp_uri(secret: str, username: str) -> str:
    return pyotp.TOTP(secret).provisioning_uri(
        name=username,
        issuer_name=settings.totp_issuer,
    )


def generate_qr_code(provisioning_uri: str) -> str:
    """Render the provisioning URI as a PNG data URL for authenticator apps."""
    img = qrcode.make(provisioning_uri)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"

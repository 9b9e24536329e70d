import base64
import binascii


def b64url_encode(raw: bytes) -> str:
    """URL-safe base64 without '=' padding."""
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def b64url_decode(token: str) -> bytes:
    """Inverse of b64url_encode. Raises binascii.Error / ValueError on bad input."""
    # b64decode would still accept the standard alphabet's '+' and '/'
    if "+" in token or "/" in token:
        raise binascii.Error("Not a base64url token")
    padded = token + "=" * (-len(token) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=True)

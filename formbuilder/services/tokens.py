import hmac
import secrets

TOKEN_BYTES = 16  # 32 hex characters


def generate_token() -> str:
    """Return a fresh random hex token for a recipient or a form owner"""
    return secrets.token_hex(TOKEN_BYTES)


def tokens_match(supplied, expected) -> bool:
    """Exact comparison of a supplied token against the stored one"""
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))

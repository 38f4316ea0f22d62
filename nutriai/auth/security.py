# -*- coding: utf-8 -*-
"""Auth — verification of platform-issued access tokens.

The hosting platform signs HS256 JWTs whose ``sub`` claim is the user id.
Nothing here issues sessions; ``create_access_token`` only exists so local
tooling and tests can produce tokens the server accepts.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

from ..config import settings

ALGORITHM = "HS256"
CLOCK_SKEW_SECONDS = 30


class TokenError(ValueError):
    """The token is malformed, badly signed, expired or carries no expiry."""


def _segment(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _unsegment(segment: str) -> bytes:
    try:
        return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
    except (binascii.Error, ValueError) as exc:
        raise TokenError("token segment is not base64url") from exc


def _signature(secret: str, signing_input: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()


def create_access_token(*, user_id: str, email: str = "", secret: str | None = None) -> str:
    issued = int(time.time())
    claims = {
        "sub": user_id,
        "email": email,
        "role": "authenticated",
        "iat": issued,
        "exp": issued + int(settings.token_ttl_days) * 86400,
    }
    return sign_claims(claims, secret or settings.jwt_secret)


def sign_claims(claims: Dict[str, Any], secret: str) -> str:
    header = _segment(json.dumps({"alg": ALGORITHM, "typ": "JWT"}, separators=(",", ":")).encode("utf-8"))
    body = _segment(json.dumps(claims, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
    signing_input = f"{header}.{body}"
    return f"{signing_input}.{_segment(_signature(secret, signing_input))}"


def verify_token(token: str, secret: str, *, now: float | None = None) -> Dict[str, Any]:
    """Return the claims of a valid token or raise ``TokenError``."""
    try:
        header_seg, body_seg, sig_seg = token.split(".")
    except ValueError as exc:
        raise TokenError("token must have three segments") from exc

    try:
        header = json.loads(_unsegment(header_seg))
        claims = json.loads(_unsegment(body_seg))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TokenError("token segments are not JSON") from exc
    if not isinstance(header, dict) or header.get("alg") != ALGORITHM:
        raise TokenError("unsupported algorithm")
    if not isinstance(claims, dict):
        raise TokenError("claims must be an object")

    expected = _signature(secret, f"{header_seg}.{body_seg}")
    if not hmac.compare_digest(expected, _unsegment(sig_seg)):
        raise TokenError("signature mismatch")

    exp = claims.get("exp")
    current = time.time() if now is None else now
    if not isinstance(exp, (int, float)) or isinstance(exp, bool):
        raise TokenError("token has no expiry")
    if exp + CLOCK_SKEW_SECONDS < current:
        raise TokenError("token expired")
    return claims


def user_from_token(token: str) -> Dict[str, Any]:
    """Resolve a bearer token to ``{"id", "email"}``; HTTP 401 when rejected."""
    try:
        claims = verify_token(token, settings.jwt_secret)
    except TokenError as exc:
        raise HTTPException(status_code=401, detail=f"Invalid token: {exc}") from exc
    user_id = str(claims.get("sub") or "")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: missing subject")
    return {"id": user_id, "email": str(claims.get("email") or "")}


def bearer_token(request: Request) -> Optional[str]:
    scheme, _, value = (request.headers.get("authorization") or "").partition(" ")
    if scheme.lower() != "bearer":
        return None
    return value.strip() or None


def get_current_user_from_request(request: Request) -> Dict[str, Any]:
    # The auth middleware stores the user on request.state first.
    cached = getattr(request.state, "user", None)
    if cached:
        return cached

    token = bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    request.state.user = user_from_token(token)
    return request.state.user


def get_current_user(user: Dict[str, Any] = Depends(get_current_user_from_request)) -> Dict[str, Any]:
    return user

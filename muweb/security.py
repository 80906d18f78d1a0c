"""Password hashing, session tokens and the bearer-token dependencies."""
import hashlib
import hmac
import logging
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, Request
from sqlalchemy import select

from muweb.database import get_config, get_session
from muweb.errors import AuthenticationError
from muweb.models import Account, AdminCredential

log = logging.getLogger(__name__)

ALGORITHM = "HS256"


def hash_password(username, password):
    """MuEmu DV-Team format: sha256("account:password")"""
    return hashlib.sha256(f"{username}:{password}".encode("utf-8")).hexdigest()


def candidate_hashes(username, password):
    """Canonical hash first, then the encodings older accounts were stored with"""
    return [
        hash_password(username, password),
        password,
        hashlib.sha256(password.encode("utf-8")).hexdigest(),
        hashlib.md5(password.encode("utf-8")).hexdigest(),
    ]


def verify_password(username, password, stored_hash):
    if not stored_hash:
        return False
    stored = stored_hash.encode("utf-8")
    for candidate in candidate_hashes(username, password):
        if hmac.compare_digest(candidate.encode("utf-8"), stored):
            return True
    return False


def hash_admin_password(password):
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def create_token(claims, secret, expire_minutes):
    now = datetime.now(timezone.utc)
    payload = dict(claims)
    payload["iat"] = now
    payload["exp"] = now + timedelta(minutes=expire_minutes)
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_token(token, secret):
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.InvalidTokenError as e:
        log.debug("Rejected token: %s", e)
        raise AuthenticationError("Invalid or expired token", status_code=403) from e


def bearer_token(request: Request):
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Access token required")
    return token.strip()


def create_user_token(account, config):
    return create_token(
        {"userId": account.guid, "username": account.account, "email": account.email},
        config["jwt_secret"],
        config["token_expire_minutes"],
    )


def create_admin_token(admin, config):
    return create_token(
        {"adminId": admin.id, "username": admin.username, "role": admin.role},
        config["jwt_secret"],
        config["admin_token_expire_minutes"],
    )


def current_user(token: str = Depends(bearer_token), config: dict = Depends(get_config)):
    """Claims of a player token"""
    claims = decode_token(token, config["jwt_secret"])
    if "userId" not in claims:
        raise AuthenticationError("Invalid or expired token", status_code=403)
    return claims


def current_account(claims: dict = Depends(current_user), session=Depends(get_session)):
    account = session.get(Account, claims["userId"])
    if account is None or account.blocked == 1:
        raise AuthenticationError("Invalid token")
    return account


def current_admin(
    token: str = Depends(bearer_token),
    config: dict = Depends(get_config),
    session=Depends(get_session),
):
    """Admin row for an admin token; player tokens are rejected"""
    claims = decode_token(token, config["jwt_secret"])
    admin_id = claims.get("adminId")
    if admin_id is None:
        raise AuthenticationError("Invalid or expired token", status_code=403)
    admin = session.execute(
        select(AdminCredential).where(AdminCredential.id == admin_id)
    ).scalar_one_or_none()
    if admin is None:
        raise AuthenticationError("Admin not found", status_code=403)
    return admin

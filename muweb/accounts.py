"""Account registration and login.

Registration writes the account row and its four dependent rows
(account_data, accounts_status, accounts_security, accounts_validation)
in one transaction; either all five exist afterwards or none do.
"""
import logging
import re
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from muweb.errors import AuthenticationError, ConflictError, InternalError, ValidationError
from muweb.models import (
    Account,
    AccountData,
    AccountSecurity,
    AccountStatus,
    AccountValidation,
)
from muweb.security import hash_password, verify_password

log = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_LENGTH = (4, 20)
PASSWORD_LENGTH = (6, 20)
DEFAULT_IP = "127.0.0.1"


def register_timestamp(now=None):
    """YYYYMMDDHHMMSS, as the game server stores `accounts.register`"""
    return (now or datetime.now()).strftime("%Y%m%d%H%M%S")


def is_valid_email(email):
    return bool(email) and EMAIL_RE.match(email) is not None


def validate_password_length(password):
    low, high = PASSWORD_LENGTH
    if not low <= len(password) <= high:
        raise ValidationError(f"Password must be between {low} and {high} characters")


def validate_registration(username, password, email, confirm_password):
    if not username or not password or not email or not confirm_password:
        raise ValidationError("All fields are required")
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    low, high = USERNAME_LENGTH
    if not low <= len(username) <= high:
        raise ValidationError(f"Username must be between {low} and {high} characters")
    validate_password_length(password)
    if not is_valid_email(email):
        raise ValidationError("Invalid email address")


def find_account(session, username):
    return session.execute(
        select(Account).where(Account.account == username)
    ).scalar_one_or_none()


def email_taken(session, email, exclude_id=None):
    query = select(Account.guid).where(Account.email == email)
    if exclude_id is not None:
        query = query.where(Account.guid != exclude_id)
    return session.execute(query).first() is not None


def dependent_rows(account_id, username, ip):
    """The four rows the game server expects next to every account"""
    return [
        AccountData(
            account_id=account_id,
            vip_status=-1,
            vip_duration=0,
            expanded_warehouse=0,
            expanded_warehouse_time=0,
            special_character=0,
            credits=0,
            web_credits=None,
            current_character=0,
            current_type=0,
            current_server=65535,
            goblin_points=0,
        ),
        AccountStatus(
            account_id=account_id,
            server_group=0,
            current_server=0,
            start_server=0,
            dest_server=-1,
            dest_world=-1,
            dest_x=-1,
            dest_y=-1,
            warp_time=0,
            last_ip=ip,
            last_mac="00:00:00:00:00:00",
            last_online=datetime.now(),
            online=0,
            disk_serial=0,
            type=0,
        ),
        AccountSecurity(
            account_id=account_id,
            account=username,
            ip=ip,
            mac="00:00:00:00:00:00",
            disk_serial=0,
        ),
        AccountValidation(account_id=account_id, disk_serial=0),
    ]


def register_account(session, username, password, email, confirm_password, ip=None):
    """Create an account; returns the new Account row"""
    validate_registration(username, password, email, confirm_password)

    if find_account(session, username) is not None:
        raise ConflictError("Username already exists")
    if email_taken(session, email):
        raise ConflictError("Email already registered")

    ip = ip or DEFAULT_IP
    account = Account(
        account=username,
        password=hash_password(username, password),
        email=email,
        register=register_timestamp(),
        security_code="devemu",
        golden_channel=1500434821,
        secured=1,
        activated=0,
        blocked=0,
        facebook_status=0,
        web_admin=0,
    )
    try:
        session.add(account)
        session.flush()
        for row in dependent_rows(account.guid, username, ip):
            session.add(row)
            session.flush()
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        log.error("Registration of %s rolled back: %s", username, e)
        raise InternalError("Registration failed") from e

    log.info("Registered account %s (id=%s)", username, account.guid)
    return account


def authenticate(session, username, password, ip=None):
    """Check credentials; returns the Account and records the login"""
    if not username or not password:
        raise ValidationError("Username and password are required")

    account = find_account(session, username)
    if account is None or not verify_password(username, password, account.password):
        log.info("Failed login for %s", username)
        raise AuthenticationError("Invalid username or password")
    if account.blocked == 1:
        log.info("Blocked account %s attempted to log in", username)
        raise AuthenticationError("Account is blocked", status_code=403)

    status = session.get(AccountStatus, account.guid)
    if status is not None:
        status.last_ip = ip or DEFAULT_IP
        status.last_online = datetime.now()
        session.commit()
    return account


def change_password(session, account, current_password, new_password):
    if not current_password or not new_password:
        raise ValidationError("Current password and new password are required")
    validate_password_length(new_password)
    if not verify_password(account.account, current_password, account.password):
        raise ValidationError("Current password is incorrect")

    account.password = hash_password(account.account, new_password)
    session.commit()
    log.info("Password changed for account %s", account.account)


def user_projection(account, data=None):
    return {
        "id": account.guid,
        "username": account.account,
        "email": account.email,
        "vipStatus": data.vip_status if data else None,
        "credits": (data.credits or 0) if data else 0,
        "webCredits": (data.web_credits or 0) if data else 0,
    }

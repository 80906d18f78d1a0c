from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from muweb import accounts
from muweb.database import get_config, get_session
from muweb.envelope import ok
from muweb.errors import AuthenticationError
from muweb.models import Account, AccountData
from muweb.schemas import LoginRequest, RegisterRequest
from muweb.security import create_user_token, current_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


def client_ip(request: Request):
    return request.client.host if request.client else None


@router.post("/register", status_code=201)
def register(body: RegisterRequest, request: Request, session=Depends(get_session)):
    """Create an account with its dependent game server rows"""
    account = accounts.register_account(
        session,
        body.username,
        body.password,
        body.email,
        body.confirm_password,
        ip=client_ip(request),
    )
    return JSONResponse(
        status_code=201,
        content=ok(
            {"id": account.guid, "username": account.account, "email": account.email},
            message="Account created successfully",
        ),
    )


@router.post("/login")
def login(
    body: LoginRequest,
    request: Request,
    session=Depends(get_session),
    config: dict = Depends(get_config),
):
    account = accounts.authenticate(session, body.username, body.password, ip=client_ip(request))
    token = create_user_token(account, config)
    data = session.get(AccountData, account.guid)
    return ok(
        {"token": token, "user": accounts.user_projection(account, data)},
        message="Login successful",
    )


@router.get("/verify")
def verify(claims: dict = Depends(current_user), session=Depends(get_session)):
    """Reload the token's account so blocked accounts lose access at once"""
    account = session.get(Account, claims["userId"])
    if account is None or account.blocked == 1:
        raise AuthenticationError("Invalid token")
    data = session.get(AccountData, account.guid)
    return ok({"user": accounts.user_projection(account, data)})

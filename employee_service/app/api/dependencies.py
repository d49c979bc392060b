"""Request authentication and caller resolution"""
from fastapi import Depends, Header
from shared.constants import (
    ERROR_ADMIN_REQUIRED,
    ERROR_INVALID_TOKEN,
    ERROR_TOKEN_EXPIRED,
    ERROR_TOKEN_REQUIRED,
)
from shared.exceptions import AuthenticationError, AuthorizationError
from ..core.security import TokenExpiredError, verify_jwt_token
from ..models import User
from ..services.auth_service import auth_service
from ..services.role_service import Caller, OrgCaller, SystemCaller, parse_role


async def get_current_account(authorization: str = Header(default="")) -> User:
    """Decode the bearer token and load the account it names"""
    if not authorization.startswith("Bearer "):
        raise AuthenticationError(ERROR_TOKEN_REQUIRED)
    token = authorization.replace("Bearer ", "", 1).strip()

    try:
        payload = verify_jwt_token(token)
    except TokenExpiredError:
        raise AuthenticationError(ERROR_TOKEN_EXPIRED, headers={"X-Token-Expired": "true"})
    except ValueError:
        raise AuthenticationError(ERROR_INVALID_TOKEN)

    user = await auth_service.get_account(payload["sub"])
    if user is None:
        raise AuthenticationError("User not found")
    return user


async def get_caller(account: User = Depends(get_current_account)) -> Caller:
    """The account's place in the org chart, if any"""
    if account.employee is not None:
        return OrgCaller(
            user_id=account.id,
            account_role=account.role,
            employee_id=account.employee.id,
            role=parse_role(account.employee.role),
        )
    return SystemCaller(user_id=account.id, account_role=account.role)


async def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_admin:
        raise AuthorizationError(ERROR_ADMIN_REQUIRED, error_code="ADMIN_REQUIRED")
    return caller

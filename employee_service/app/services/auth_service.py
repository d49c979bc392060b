from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from typing import Optional
from shared.exceptions import AuthenticationError, ConflictError, NotFoundError
from shared.constants import ERROR_INVALID_CREDENTIALS
from ..schemas import (
    AccountOut,
    AuthResponse,
    CreateUserRequest,
    LinkUserRequest,
    LoginRequest,
    RegisterRequest,
)
from ..core.database import AsyncSessionLocal
from ..core.security import generate_jwt_token, hash_password, verify_password
from ..models import Employee, User, UserRole
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Account management: registration, login, admin-created accounts,
    account <-> employee linking and profile photos.
    """

    async def _find_user(self, session: AsyncSession, user_id: str) -> Optional[User]:
        result = await session.execute(
            select(User)
            .options(selectinload(User.employee))
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _find_user_by_email(self, session: AsyncSession, email: str) -> Optional[User]:
        result = await session.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    def _auth_response(self, user: User) -> AuthResponse:
        role = user.role.value if isinstance(user.role, UserRole) else str(user.role)
        token = generate_jwt_token(user.id, user.email, role)
        return AuthResponse(user=AccountOut.model_validate(user), token=token)

    async def register(self, payload: RegisterRequest) -> AuthResponse:
        """Self-service signup. The very first account becomes ADMIN."""
        email = payload.email.lower().strip()
        async with AsyncSessionLocal() as session:
            async with session.begin():
                if await self._find_user_by_email(session, email):
                    raise ConflictError("Email already registered")

                user_count = (await session.execute(
                    select(func.count()).select_from(User)
                )).scalar_one()
                role = UserRole.ADMIN if user_count == 0 else UserRole.VIEWER

                user = User(
                    email=email,
                    name=payload.name.strip(),
                    password_hash=hash_password(payload.password),
                    role=role,
                )
                session.add(user)
                await session.flush()
                user = await self._find_user(session, user.id)

            logger.info(f"Account {user.id} registered as {role.value}")
            return self._auth_response(user)

    async def login(self, payload: LoginRequest) -> AuthResponse:
        email = payload.email.lower().strip()
        async with AsyncSessionLocal() as session:
            user = await self._find_user_by_email(session, email)
            if not user or not verify_password(payload.password, user.password_hash):
                logger.warning(f"Failed login for {email}")
                raise AuthenticationError(ERROR_INVALID_CREDENTIALS)

            user = await self._find_user(session, user.id)
            return self._auth_response(user)

    async def get_account(self, user_id: str) -> Optional[User]:
        """Account with its linked employee loaded"""
        async with AsyncSessionLocal() as session:
            return await self._find_user(session, user_id)

    async def create_user(self, payload: CreateUserRequest) -> User:
        """Admin-created account, optionally linked to an existing employee"""
        email = payload.email.lower().strip()
        async with AsyncSessionLocal() as session:
            async with session.begin():
                if await self._find_user_by_email(session, email):
                    raise ConflictError("Email already registered")

                employee = None
                if payload.employee_id is not None:
                    employee = await session.get(Employee, payload.employee_id)
                    if employee is None:
                        raise NotFoundError("Employee")
                    if employee.user_id is not None:
                        raise ConflictError("Employee is already linked to an account")

                user = User(
                    email=email,
                    name=payload.name.strip(),
                    password_hash=hash_password(payload.password),
                    role=payload.role,
                )
                session.add(user)
                await session.flush()

                if employee is not None:
                    employee.user_id = user.id
                    await session.flush()

                user = await self._find_user(session, user.id)

            logger.info(f"Account {user.id} created with role {payload.role.value}")
            return user

    async def link_user(self, payload: LinkUserRequest) -> User:
        """Link an account to an employee, or unlink it when employee_id is None"""
        async with AsyncSessionLocal() as session:
            async with session.begin():
                user = await self._find_user(session, payload.user_id)
                if user is None:
                    raise NotFoundError("User")

                employee = None
                if payload.employee_id is not None:
                    employee = await session.get(Employee, payload.employee_id)
                    if employee is None:
                        raise NotFoundError("Employee")
                    if employee.user_id is not None and employee.user_id != user.id:
                        raise ConflictError("Employee is already linked to another account")

                # An account links to at most one employee
                if user.employee is not None and (employee is None or user.employee.id != employee.id):
                    user.employee.user_id = None
                    await session.flush()

                if employee is not None:
                    employee.user_id = user.id
                    await session.flush()

                user = await self._find_user(session, user.id)

            if employee is not None:
                logger.info(f"Account {user.id} linked to employee {employee.id}")
            else:
                logger.info(f"Account {user.id} unlinked")
            return user

    async def set_profile_photo(self, user_id: str, photo_url: Optional[str]) -> User:
        async with AsyncSessionLocal() as session:
            async with session.begin():
                user = await self._find_user(session, user_id)
                if user is None:
                    raise NotFoundError("User")
                user.profile_photo_url = photo_url
                await session.flush()
                user = await self._find_user(session, user_id)
            return user


auth_service = AuthService()

"""HTTP route definitions for the account service."""

from __future__ import annotations

from typing import Annotated

from email_validator import validate_email
from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import AfterValidator, BaseModel, Field

from ..domain.account import Account, Role
from ..domain.contracts import AuthResult, RegistrationInput
from ..domain.errors import UnauthenticatedError
from ..domain.service import AccountService

router = APIRouter(prefix="/api")

bearer_scheme = HTTPBearer(auto_error=False)


def _check_email(value: str) -> str:
    # Syntax only; the address is stored exactly as submitted.
    validate_email(value, check_deliverability=False)
    return value


EmailAddress = Annotated[str, AfterValidator(_check_email)]


class UserResponse(BaseModel):
    """Public view of an ``Account``; credentials are never included."""

    id: str
    firstName: str
    lastName: str
    email: str
    mobileNumber: str
    role: Role

    @classmethod
    def from_domain(cls, account: Account) -> "UserResponse":
        """Build a response model from the domain aggregate."""
        return cls(
            id=account.account_id,
            firstName=account.first_name,
            lastName=account.last_name,
            email=account.email,
            mobileNumber=account.mobile_number,
            role=account.role,
        )


class SignupRequest(BaseModel):
    """Payload accepted when registering a new account."""

    firstName: str = Field(..., min_length=2)
    lastName: str = Field(..., min_length=1)
    email: EmailAddress
    mobileNumber: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: Role = Role.USER


class SigninRequest(BaseModel):
    email: EmailAddress
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    """Token issuance response returned by signup and signin."""

    status: str = "success"
    message: str
    token: str
    userId: str
    email: str

    @classmethod
    def from_result(cls, result: AuthResult, message: str) -> "AuthResponse":
        return cls(message=message, token=result.token, userId=result.account_id, email=result.email)


class UpdateUserRequest(BaseModel):
    # Names are checked by the service once the caller is allowed to update.
    firstName: str
    lastName: str


class UpdateUserResponse(BaseModel):
    status: str = "success"
    message: str = "User updated successfully"
    user: UserResponse


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def get_optional_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    service: AccountService = Depends(get_service),
) -> Account | None:
    """Return the account named by a valid bearer token, else ``None``.

    A missing or non-bearer ``Authorization`` header and an unverifiable token
    all leave the request unauthenticated; each route decides what that means.
    """
    if credentials is None:
        return None
    return service.resolve_caller(credentials.credentials)


def require_caller(caller: Account | None = Depends(get_optional_caller)) -> Account:
    if caller is None:
        raise UnauthenticatedError()
    return caller


@router.post("/auth/signup", response_model=AuthResponse)
def signup(
    payload: SignupRequest,
    service: AccountService = Depends(get_service),
) -> AuthResponse:
    """Register an account and return its first token."""
    result = service.register(
        RegistrationInput(
            email=payload.email,
            password=payload.password,
            first_name=payload.firstName,
            last_name=payload.lastName,
            mobile_number=payload.mobileNumber,
            role=payload.role,
        )
    )
    return AuthResponse.from_result(result, "User registered successfully")


@router.post("/auth/signin", response_model=AuthResponse)
def signin(
    payload: SigninRequest,
    service: AccountService = Depends(get_service),
) -> AuthResponse:
    """Exchange an email and password for a token."""
    result = service.login(payload.email, payload.password)
    return AuthResponse.from_result(result, "User logged in successfully")


@router.put("/user/update/{account_id}", response_model=UpdateUserResponse)
def update_user(
    account_id: str,
    payload: UpdateUserRequest,
    caller: Account = Depends(require_caller),
    service: AccountService = Depends(get_service),
) -> UpdateUserResponse:
    """Update names on the caller's own account, or on any account for admins."""
    account = service.update_profile(caller, account_id, payload.firstName, payload.lastName)
    return UpdateUserResponse(user=UserResponse.from_domain(account))


@router.get("/users", response_model=None)
def list_users(
    account_id: str | None = Query(default=None, alias="id"),
    caller: Account = Depends(require_caller),
    service: AccountService = Depends(get_service),
) -> Response | dict:
    """Return one user when ``id`` is given, otherwise every user with a count."""
    if account_id is not None:
        account = service.get_account(caller, account_id)
        return {
            "status": "success",
            "message": "Fetched user successfully",
            "user": UserResponse.from_domain(account).model_dump(mode="json"),
        }

    listing = service.list_accounts(caller)
    if listing.is_empty:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return {
        "status": "success",
        "message": "Fetched users successfully",
        "totalUsers": listing.total,
        "users": [UserResponse.from_domain(account).model_dump(mode="json") for account in listing.accounts],
    }

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from filemanager.core.errors import ConflictError, NotFoundError, ValidationError
from filemanager.core.security import create_access_token, dummy_verify, get_password_hash, verify_password
from filemanager.db.session import get_db
from filemanager.models.user import User
from filemanager.schemas.common import DataResponse, ErrorResponse
from filemanager.schemas.user import LoginResponse, UserLogin, UserOut, UserRegister

logger = logging.getLogger(__name__)

router = APIRouter(responses={
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
})


@router.post("/register", response_model=DataResponse[UserOut], response_model_exclude_none=True,
             status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """
    Create an account; the password is stored as a bcrypt hash only
    """
    existing_email = db.query(User.id).filter(User.email == user_data.email).first()
    if existing_email:
        raise ConflictError("Email is already registered")

    new_user = User(
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        email=user_data.email,
        username=user_data.username,
        password=get_password_hash(user_data.password),
    )

    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent registration won the unique index
        db.rollback()
        raise ConflictError("Email is already registered")
    db.refresh(new_user)

    logger.info("User %s registered", new_user.id)

    return DataResponse(data=UserOut.model_validate(new_user))


@router.post("/login", response_model=LoginResponse)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """
    Check email/password and return a signed token valid for one hour
    """
    if credentials.email is None or credentials.password is None:
        raise ValidationError("Email and password are required")

    user = db.query(User).filter(User.email == credentials.email).first()

    if user is None:
        dummy_verify()
        logger.warning("Login attempt for unknown email")
        raise NotFoundError(f"User with email {credentials.email} does not exist")

    if not verify_password(credentials.password, user.password):
        logger.warning("Invalid credentials for user %s", user.id)
        raise ValidationError("invalid credentials")

    token = create_access_token({
        "sub": user.id,
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
    })

    logger.info("User %s logged in", user.id)

    return LoginResponse(message="Login successfully", token=token)

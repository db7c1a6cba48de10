"""
Authentication service: Cognito identity, Redis-backed bearer sessions.
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from botocore.exceptions import ClientError
from app.aws import get_aws_client, CognitoIdentityProviderWrapper
from app.core.config import settings
from app.core.exceptions import EmailAlreadyExists, InvalidCredentials
from app.session import create_session, remove_session
from app.crud import user_crud
from app.model.user import User
from app.schema.auth import UserRegister, UserLogin, LoginResponse, UserInfo
import logging

logger = logging.getLogger(__name__)


def session_payload(user: User, access_token: str = None) -> dict:
    """Principal data stored under the bearer token."""
    return {
        "user_id": str(user.id),
        "email": user.email,
        "name": user.name,
        "access_token": access_token,  # kept for Cognito sign-out
    }


class AuthService:
    """Handles user authentication operations."""

    def __init__(self, db: Session, cognito: CognitoIdentityProviderWrapper = None):
        self.db = db
        self.cognito = cognito or CognitoIdentityProviderWrapper(
            cognito_client=get_aws_client('cognito-idp', region_name=settings.COGNITO_REGION),
            user_pool_id=settings.COGNITO_USER_POOL_ID,
            client_id=settings.COGNITO_CLIENT_ID,
            client_secret=settings.COGNITO_CLIENT_SECRET
        )

    def register_user(self, user_data: UserRegister) -> User:
        """Register in Cognito first, then create the local user."""
        if user_crud.get_by_email(self.db, user_data.email):
            raise EmailAlreadyExists()
        try:
            cognito_response = self.cognito.sign_up(
                email=user_data.email,
                password=user_data.password,
                name=user_data.name,
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'UsernameExistsException':
                raise EmailAlreadyExists()
            raise InvalidCredentials(message=e.response['Error']['Message'])
        try:
            user = user_crud.create_from_dict(self.db, obj_in={
                "email": user_data.email,
                "name": user_data.name,
                "cognito_username": cognito_response['username'],
            })
        except IntegrityError:
            self.db.rollback()
            raise EmailAlreadyExists()
        logger.info(f"User registered: {user.email}, Cognito Username: {cognito_response['username']}")
        return user

    def login(self, login_data: UserLogin) -> LoginResponse:
        """Authenticate via Cognito, create a session keyed by the IdToken."""
        try:
            tokens = self.cognito.initiate_auth(email=login_data.email, password=login_data.password)
        except ClientError as e:
            if e.response['Error']['Code'] in ['NotAuthorizedException', 'UserNotFoundException']:
                raise InvalidCredentials()
            raise InvalidCredentials(message=e.response['Error']['Message'])

        user = user_crud.get_by_email(self.db, login_data.email)
        if not user or not user.is_active:
            raise InvalidCredentials(message="User not found in local database")

        id_token = tokens['id_token']
        create_session(id_token, session_payload(user, tokens['access_token']))
        logger.info(f"User logged in: {user.email}")
        return LoginResponse(
            message="Login successful",
            access_token=id_token,
            user=UserInfo.model_validate(user),
        )

    def logout(self, token: str, user_data: dict) -> bool:
        """Sign out from Cognito and always remove the local session."""
        access_token = user_data.get('access_token')
        if access_token:
            try:
                self.cognito.global_sign_out(access_token)
            except ClientError as e:
                logger.warning(f"Cognito sign out failed: {e.response['Error']['Message']}")
        return remove_session(token)

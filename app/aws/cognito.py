"""
AWS Cognito wrapper: sign-up, password login and global sign-out.
"""
import base64
import hashlib
import hmac
import uuid
from typing import Dict, Any, Optional
from botocore.exceptions import ClientError
import logging

logger = logging.getLogger(__name__)


class CognitoIdentityProviderWrapper:
    """Encapsulates the Cognito Identity Provider actions used by AuthService."""

    def __init__(
        self,
        cognito_client,
        user_pool_id: str,
        client_id: str,
        client_secret: Optional[str] = None
    ):
        self.cognito_client = cognito_client
        self.user_pool_id = user_pool_id
        self.client_id = client_id
        self.client_secret = client_secret

    def _secret_hash(self, username: str) -> Optional[str]:
        """SECRET_HASH required when the app client has a secret."""
        if not self.client_secret:
            return None
        message = bytes(username + self.client_id, 'utf-8')
        key = bytes(self.client_secret, 'utf-8')
        return base64.b64encode(hmac.new(key, message, digestmod=hashlib.sha256).digest()).decode()

    def sign_up(self, email: str, password: str, name: str) -> Dict[str, Any]:
        """
        Register a user. The pool uses email as an alias, so Username is a fresh UUID.

        Returns:
            Dict with username, user_sub and user_confirmed

        Raises:
            ClientError: If sign up fails
        """
        username = str(uuid.uuid4())
        kwargs = {
            'ClientId': self.client_id,
            'Username': username,
            'Password': password,
            'UserAttributes': [
                {'Name': 'email', 'Value': email},
                {'Name': 'name', 'Value': name},
            ],
        }
        if self.client_secret:
            kwargs['SecretHash'] = self._secret_hash(username)
        try:
            response = self.cognito_client.sign_up(**kwargs)
        except ClientError as e:
            logger.error(f"Sign up failed for {email}: {e.response['Error']['Message']}")
            raise
        logger.info(f"User signed up: {email}")
        return {
            'username': username,
            'user_sub': response['UserSub'],
            'user_confirmed': response['UserConfirmed'],
        }

    def initiate_auth(self, email: str, password: str) -> Dict[str, Any]:
        """
        Authenticate with ADMIN_USER_PASSWORD_AUTH.

        Returns:
            Dict with id_token, access_token, refresh_token, expires_in

        Raises:
            ClientError: If authentication fails
        """
        kwargs = {
            'UserPoolId': self.user_pool_id,
            'ClientId': self.client_id,
            'AuthFlow': 'ADMIN_USER_PASSWORD_AUTH',
            'AuthParameters': {'USERNAME': email, 'PASSWORD': password},
        }
        if self.client_secret:
            kwargs['AuthParameters']['SECRET_HASH'] = self._secret_hash(email)
        try:
            response = self.cognito_client.admin_initiate_auth(**kwargs)
        except ClientError as e:
            logger.error(f"Authentication failed for {email}: {e.response['Error']['Message']}")
            raise
        result = response['AuthenticationResult']
        logger.info(f"User authenticated: {email}")
        return {
            'id_token': result['IdToken'],
            'access_token': result['AccessToken'],
            'refresh_token': result.get('RefreshToken'),
            'expires_in': result['ExpiresIn'],
        }

    def global_sign_out(self, access_token: str) -> None:
        """Invalidate every token issued to the user."""
        try:
            self.cognito_client.global_sign_out(AccessToken=access_token)
        except ClientError as e:
            logger.error(f"Global sign out failed: {e.response['Error']['Message']}")
            raise
        logger.info("User signed out globally")

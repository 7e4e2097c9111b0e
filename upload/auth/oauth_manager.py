"""
OAuth Manager

Handles Google OAuth 2.0 authentication for the Drive API.
Uses refresh token for automated, long-lived authentication.

Flow:
1. Initial setup: Run setup_drive_auth.py once to generate token.json
2. Runtime: This class uses token.json for automatic authentication
3. Token refresh: Happens automatically when needed (transparent to user)
"""

import logging
import os
from typing import List, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from upload.constants import DRIVE_SCOPES
from upload.interfaces.credential_provider_interface import (
    CredentialError,
    CredentialProviderInterface,
)


class OAuthManager(CredentialProviderInterface):
    """
    Manages Google OAuth 2.0 authentication.

    This class:
    - Loads credentials from token.json
    - Refreshes expired tokens automatically
    - Forces a refresh after the server rejected the current token
    """

    def __init__(
        self,
        client_secret_path: str,
        token_path: str,
        scopes: Optional[List[str]] = None,
    ):
        """
        Initialize OAuth manager.

        Args:
            client_secret_path: Path to client_secret.json from Google Cloud
            token_path: Path to token.json (created during initial auth)
            scopes: OAuth scopes, Drive file access by default

        Example:
            oauth = OAuthManager(
                client_secret_path="credentials/client_secret.json",
                token_path="credentials/token.json"
            )
        """
        self.logger = logging.getLogger(__name__)

        self.client_secret_path = client_secret_path
        self.token_path = token_path
        self.scopes = scopes or DRIVE_SCOPES
        self.credentials: Optional[Credentials] = None
        self._force_refresh = False

        # Validate paths
        self._validate_paths()

        # Load credentials
        self._load_credentials()

        self.logger.info("OAuth Manager initialized")

    def _validate_paths(self) -> None:
        """
        Validate that required credential files exist.

        Raises:
            FileNotFoundError: If client_secret.json doesn't exist
            CredentialError: If token.json doesn't exist (needs initial setup)
        """
        if not os.path.exists(self.client_secret_path):
            raise FileNotFoundError(
                f"Client secret file not found: {self.client_secret_path}\n"
                f"Download from Google Cloud Console > Credentials",
            )

        if not os.path.exists(self.token_path):
            raise CredentialError(
                f"Token file not found: {self.token_path}\n"
                f"Run 'python setup_drive_auth.py' first to authenticate",
            )

    def _load_credentials(self) -> None:
        """
        Load credentials from token.json.

        If token is expired but has refresh token, automatically refreshes.
        """
        try:
            self.credentials = Credentials.from_authorized_user_file(
                self.token_path,
                self.scopes,
            )
            self.get_credentials()
            self.logger.debug("Credentials loaded and validated")

        except Exception as e:
            self.logger.error(f"Failed to load credentials: {e}")
            raise

    def _refresh(self) -> None:
        assert self.credentials is not None
        self.logger.info("Refreshing access token...")
        try:
            self.credentials.refresh(Request())
        except RefreshError as e:
            raise CredentialError(
                f"Token refresh failed: {e}. "
                f"Run 'python setup_drive_auth.py' to re-authenticate",
            ) from e
        self._force_refresh = False
        self._save_credentials()
        self.logger.info("Access token refreshed successfully")

    def _save_credentials(self) -> None:
        """Save refreshed credentials back to token.json"""
        try:
            with open(self.token_path, "w") as token_file:
                token_file.write(self.credentials.to_json())
            self.logger.debug("Credentials saved to token file")
        except Exception as e:
            self.logger.warning(f"Failed to save credentials: {e}")

    def get_credentials(self) -> Credentials:
        """
        Get valid OAuth credentials.

        Automatically refreshes if expired or invalidated.

        Returns:
            Valid Google OAuth credentials

        Raises:
            CredentialError: If credentials cannot be obtained
        """
        creds = self.credentials
        needs_refresh = creds is not None and (creds.expired or self._force_refresh)

        if needs_refresh and creds.refresh_token:
            self._refresh()

        if not self.credentials or not self.credentials.valid or self._force_refresh:
            raise CredentialError(
                "Cannot get valid credentials. "
                "Run 'python setup_drive_auth.py' to re-authenticate",
            )

        return self.credentials

    def get_access_token(self) -> str:
        return self.get_credentials().token

    def invalidate(self) -> None:
        """Drop the cached access token; the next request refreshes it"""
        self.logger.warning("Access token rejected, will refresh before next upload")
        self._force_refresh = True

    def is_authenticated(self) -> bool:
        """
        Check if currently authenticated with valid credentials.

        Returns:
            True if credentials are valid
        """
        try:
            creds = self.get_credentials()
            return creds is not None and creds.valid
        except Exception:
            return False


class StaticCredentialProvider(CredentialProviderInterface):
    """
    Serves a pre-issued access token.

    For tests and deployments where another component owns the OAuth flow.

    Example:
        provider = StaticCredentialProvider("ya29.a0Af...")
    """

    def __init__(self, token: str):
        self.logger = logging.getLogger(__name__)
        self._token = token
        self.invalidation_count = 0

    def get_access_token(self) -> str:
        if not self._token:
            raise CredentialError("No access token configured")
        return self._token

    def get_credentials(self) -> Credentials:
        return Credentials(token=self.get_access_token())

    def invalidate(self) -> None:
        self.invalidation_count += 1
        self.logger.warning("Static access token rejected by server")

    def is_authenticated(self) -> bool:
        return bool(self._token)


def run_initial_auth(
    client_secret_path: str,
    token_path: str,
    port: int = 8080,
) -> bool:
    """
    Run initial OAuth authentication flow.

    This is a standalone function for the setup script.
    Opens browser for user to grant permissions.

    Args:
        client_secret_path: Path to client_secret.json
        token_path: Where to save token.json
        port: Local port for OAuth callback (default: 8080)

    Returns:
        True if authentication successful

    Example:
        run_initial_auth(
            "credentials/client_secret.json",
            "credentials/token.json"
        )
    """
    logger = logging.getLogger(__name__)

    try:
        # Create flow from client secrets
        flow = InstalledAppFlow.from_client_secrets_file(
            client_secret_path,
            DRIVE_SCOPES,
        )

        # Run local server for OAuth callback
        logger.info(f"Starting OAuth flow on port {port}...")
        logger.info("A browser window will open for authentication")

        credentials = flow.run_local_server(port=port)

        # Save credentials
        with open(token_path, "w") as token_file:
            token_file.write(credentials.to_json())

        logger.info(f"✅ Authentication successful! Token saved to: {token_path}")
        return True

    except Exception as e:
        logger.error(f"Authentication failed: {e}")
        return False

"""
Upload Factory

Factory pattern for creating uploader and credential implementations.
Follows the same pattern as recording/factory.py for consistency.

Automatically configures from config/settings.py (.env backed).
"""

import logging
from typing import Literal, Optional

import httpx

from config.settings import GOOGLE_CLIENT_SECRET_PATH, GOOGLE_TOKEN_PATH
from upload.auth.oauth_manager import OAuthManager, StaticCredentialProvider
from upload.implementations.mock_uploader import MockUploader
from upload.implementations.resumable_uploader import ResumableUploader
from upload.interfaces.credential_provider_interface import CredentialProviderInterface
from upload.interfaces.uploader_interface import UploaderInterface

# Type alias
UploaderMode = Literal["auto", "drive", "mock"]

# Token served when running without Drive credentials
MOCK_ACCESS_TOKEN = "mock-access-token"


class UploaderFactory:
    """
    Factory for creating uploader implementations.

    Reads configuration from settings:
    - GOOGLE_CLIENT_SECRET_PATH: Path to client_secret.json
    - GOOGLE_TOKEN_PATH: Path to token.json

    Usage:
        # Auto-detect from environment
        uploader = UploaderFactory.create_uploader()

        # Force mock for testing
        uploader = UploaderFactory.create_uploader(mode="mock")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_uploader(
        cls,
        mode: UploaderMode = "auto",
        client: Optional[httpx.AsyncClient] = None,
    ) -> UploaderInterface:
        """
        Create an uploader instance.

        Args:
            mode: "auto" (from env), "drive" (force real), "mock" (force sim)
            client: Shared httpx client for the real uploader

        Returns:
            UploaderInterface implementation

        Raises:
            RuntimeError: If mode="drive" but credentials not available
        """
        if mode == "mock":
            cls._logger.info("Creating Mock Uploader (forced)")
            return MockUploader()

        if mode == "drive":
            if not cls.is_drive_available():
                raise RuntimeError(
                    "Drive uploader requested but credentials are not available. "
                    "Run 'python setup_drive_auth.py' first",
                )
            cls._logger.info("Creating Resumable Drive Uploader (forced)")
            return ResumableUploader(client=client)

        # mode == "auto" - try Drive first, fall back to mock
        if cls.is_drive_available():
            cls._logger.info("Creating Resumable Drive Uploader (auto-detected)")
            return ResumableUploader(client=client)

        cls._logger.warning("Drive credentials not available, using Mock Uploader")
        return MockUploader()

    @classmethod
    def create_credential_provider(
        cls,
        mode: UploaderMode = "auto",
    ) -> CredentialProviderInterface:
        """
        Create the bearer credential source matching `mode`.

        Raises:
            RuntimeError: If mode="drive" but OAuth initialization fails
        """
        if mode == "mock":
            cls._logger.info("Creating static mock credentials (forced)")
            return StaticCredentialProvider(MOCK_ACCESS_TOKEN)

        try:
            return cls._create_oauth_manager()
        except Exception as e:
            if mode == "drive":
                raise RuntimeError(f"Drive credentials requested but not available: {e}") from e
            cls._logger.warning(
                f"OAuth credentials not available ({e}), using static mock credentials",
            )
            return StaticCredentialProvider(MOCK_ACCESS_TOKEN)

    @classmethod
    def _create_oauth_manager(cls) -> OAuthManager:
        """
        Create OAuth manager from settings.

        Raises:
            ValueError: If credential paths are not configured
            CredentialError: If token.json is missing or cannot be refreshed
        """
        if not GOOGLE_CLIENT_SECRET_PATH:
            raise ValueError(
                "GOOGLE_CLIENT_SECRET_PATH not set in environment. "
                "Add to .env file: GOOGLE_CLIENT_SECRET_PATH=/path/to/client_secret.json",
            )

        if not GOOGLE_TOKEN_PATH:
            raise ValueError(
                "GOOGLE_TOKEN_PATH not set in environment. "
                "Add to .env file: GOOGLE_TOKEN_PATH=/path/to/token.json",
            )

        return OAuthManager(
            client_secret_path=GOOGLE_CLIENT_SECRET_PATH,
            token_path=GOOGLE_TOKEN_PATH,
        )

    @classmethod
    def is_drive_available(cls) -> bool:
        """
        Check if the Drive uploader can be used.

        Returns:
            True if OAuth credentials load and validate
        """
        try:
            cls._create_oauth_manager()
            return True
        except Exception:
            return False


# Convenience functions for quick creation
def create_uploader(force_mock: bool = False) -> UploaderInterface:
    """
    Quick uploader creation with simple mock override.

    Example:
        # Normal usage
        uploader = create_uploader()

        # Testing
        uploader = create_uploader(force_mock=True)
    """
    mode = "mock" if force_mock else "auto"
    return UploaderFactory.create_uploader(mode=mode)


def create_credential_provider(force_mock: bool = False) -> CredentialProviderInterface:
    """Quick credential provider creation with simple mock override"""
    mode = "mock" if force_mock else "auto"
    return UploaderFactory.create_credential_provider(mode=mode)

"""
Credential Provider Interface

Source of bearer credentials for the upload engine. The engine treats the
token as opaque; how it is obtained (OAuth refresh token, pre-issued token)
is the provider's concern.
"""

from abc import ABC, abstractmethod

from google.oauth2.credentials import Credentials


class CredentialProviderInterface(ABC):
    """
    Abstract base class for credential providers.

    Methods may block (token refresh goes over the network), so async
    callers run them through asyncio.to_thread().
    """

    @abstractmethod
    def get_access_token(self) -> str:
        """
        Get a currently valid bearer access token.

        Raises:
            CredentialError: If no valid token can be obtained
        """

    @abstractmethod
    def get_credentials(self) -> Credentials:
        """Google credentials object for API client libraries"""

    @abstractmethod
    def invalidate(self) -> None:
        """
        Discard the cached token after the server rejected it.

        The next get_access_token() call must obtain a fresh one.
        """

    @abstractmethod
    def is_authenticated(self) -> bool:
        """True if a valid token can be obtained without user interaction"""


class CredentialError(RuntimeError):
    """No valid credential available; the one-time auth flow must be run"""
    pass

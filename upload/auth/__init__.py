"""
Authentication Package

OAuth 2.0 credentials for the Google Drive API.
"""

from upload.auth.oauth_manager import (
    OAuthManager,
    StaticCredentialProvider,
    run_initial_auth,
)

__all__ = [
    "OAuthManager",
    "StaticCredentialProvider",
    "run_initial_auth",
]

#!/usr/bin/env python3
"""
Google Drive Authentication Setup Script

Run this ONCE to authenticate with Google Drive and generate token.json.
After this, uploads refresh the token automatically as needed.

Usage:
    python setup_drive_auth.py

Requirements:
    1. client_secret.json from Google Cloud Console (Desktop app client)
    2. .env file with GOOGLE_CLIENT_SECRET_PATH and GOOGLE_TOKEN_PATH
"""

import logging
import os
import sys

from config import settings
from upload.auth.oauth_manager import run_initial_auth

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def validate_credentials() -> str:
    """Validate client_secret.json exists"""
    client_secret_path = settings.GOOGLE_CLIENT_SECRET_PATH

    if not os.path.exists(client_secret_path):
        logger.error(f"❌ client_secret.json not found: {client_secret_path}")
        logger.info("\nTo get client_secret.json:")
        logger.info("1. Go to: https://console.cloud.google.com/apis/credentials")
        logger.info("2. Create OAuth 2.0 Client ID (Desktop app)")
        logger.info("3. Download JSON file")
        logger.info(f"4. Save to: {client_secret_path}")
        sys.exit(1)

    logger.info(f"✅ Found client_secret.json: {client_secret_path}")
    return client_secret_path


def validate_token_path() -> str:
    """Validate token.json path is configured"""
    token_path = settings.GOOGLE_TOKEN_PATH

    # Create directory if needed
    token_dir = os.path.dirname(token_path)
    if token_dir and not os.path.exists(token_dir):
        os.makedirs(token_dir)
        logger.info(f"✅ Created directory: {token_dir}")

    logger.info(f"✅ Token will be saved to: {token_path}")
    return token_path


def run_authentication(client_secret_path: str, token_path: str) -> None:
    """Run OAuth authentication flow"""
    logger.info("\n" + "=" * 60)
    logger.info("Starting Google Drive Authentication")
    logger.info("=" * 60)
    logger.info("\nSteps:")
    logger.info("1. Browser will open automatically")
    logger.info("2. Log in with the account owning the feedback folders")
    logger.info("3. Grant Drive file access to the app")
    logger.info("4. Token will be saved automatically")
    logger.info("\nPress Enter to continue...")
    input()

    success = run_initial_auth(
        client_secret_path=client_secret_path,
        token_path=token_path,
    )

    if success:
        logger.info("\n" + "=" * 60)
        logger.info("✅ AUTHENTICATION SUCCESSFUL!")
        logger.info("=" * 60)
        logger.info(f"\nToken saved to: {token_path}")
        logger.info("\n⚠️  Keep token.json secret - it grants access to your Drive files!")
    else:
        logger.error("\n" + "=" * 60)
        logger.error("❌ AUTHENTICATION FAILED")
        logger.error("=" * 60)
        logger.error("\nTroubleshooting:")
        logger.error("1. Check client_secret.json is valid")
        logger.error("2. Ensure OAuth consent screen is configured")
        logger.error("3. Ensure the Drive API is enabled for the project")
        sys.exit(1)


def main():
    """Main setup flow"""
    logger.info("=" * 60)
    logger.info("Google Drive Authentication Setup")
    logger.info("=" * 60)

    logger.info("\n[Step 1/3] Validating client_secret.json...")
    client_secret_path = validate_credentials()

    logger.info("\n[Step 2/3] Validating token path...")
    token_path = validate_token_path()

    logger.info("\n[Step 3/3] Running authentication flow...")
    run_authentication(client_secret_path, token_path)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("\n\n❌ Setup cancelled by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"\n\n❌ Unexpected error: {e}", exc_info=True)
        sys.exit(1)

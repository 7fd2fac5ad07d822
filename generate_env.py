#!/usr/bin/env python3
"""
Environment Configuration Generator for the maintenance service

This script generates a .env file with:
- Cryptographically secure SECRET_KEY for Flask sessions
- A secure random password for the bootstrap administrator
- Storage and AI backend configuration

Usage:
    python generate_env.py              # Interactive mode
    python generate_env.py --force      # Overwrite existing .env
    python generate_env.py --dev        # Development mode (less secure, predictable)
"""

import argparse
import os
import secrets
import shutil
import string
import sys
from datetime import datetime
from pathlib import Path


class EnvGenerator:
    """Generate secure environment configuration"""

    def __init__(self, dev_mode=False, env_file=None):
        self.dev_mode = dev_mode
        self.env_file = Path(env_file) if env_file else Path(__file__).parent / '.env'

    def generate_secret_key(self, length=64):
        """Generate a cryptographically secure secret key"""
        if self.dev_mode:
            return "dev-secret-key-DO-NOT-USE-IN-PRODUCTION"
        return secrets.token_hex(length)

    def generate_password(self, length=20, include_special=True):
        """
        Generate a secure random password

        Args:
            length: Password length (default: 20)
            include_special: Include special characters (default: True)
        """
        if self.dev_mode:
            return "admin987654321!"

        lowercase = string.ascii_lowercase
        uppercase = string.ascii_uppercase
        digits = string.digits
        # Safe special characters for .env files (avoid #, =, :, quotes)
        special = "!@$%^&*()_+-[]{}|;.,<>?"

        # Ensure at least one of each type
        password = [
            secrets.choice(lowercase),
            secrets.choice(uppercase),
            secrets.choice(digits),
        ]
        if include_special:
            password.append(secrets.choice(special))

        all_chars = lowercase + uppercase + digits
        if include_special:
            all_chars += special
        for _ in range(length - len(password)):
            password.append(secrets.choice(all_chars))

        secrets.SystemRandom().shuffle(password)
        return ''.join(password)

    def create_env_content(self):
        """Create the full .env file content"""
        secret_key = self.generate_secret_key()
        admin_password = self.generate_password()
        insecure_cookies = 'False' if self.dev_mode else 'True'

        content = f"""# Maintenance Service Environment Configuration
# Generated: {self._get_timestamp()}
#
# SECURITY WARNING: Keep this file secret! Never commit to version control!

# ============================================================================
# Flask Configuration
# ============================================================================

SECRET_KEY={secret_key}
FLASK_DEBUG=False
USE_RELOADER=False
FLASK_HOST=127.0.0.1
FLASK_PORT=5000

# ============================================================================
# Storage
# ============================================================================

# json: one JSON file per collection in DATA_DIR
# sql: one table per collection in DATABASE_URL
STORAGE_BACKEND=json
DATA_DIR=instance/data
# DATABASE_URL=sqlite:///instance/maintenance.db

# ============================================================================
# Bootstrap administrator (created on first build when no user exists)
# ============================================================================

ADMIN_EMAIL=admin@empresa.com
ADMIN_NAME=Administrador
ADMIN_PASSWORD="{admin_password}"

# ============================================================================
# AI text generation (OpenAI-compatible chat completions)
# ============================================================================

AI_API_URL=https://api.groq.com/openai/v1/chat/completions
AI_MODEL=llama-3.3-70b-versatile
AI_API_KEY=
AI_TIMEOUT_SECONDS=30

# ============================================================================
# Analytics
# ============================================================================

STOCKOUT_WINDOW_DAYS=90
AUDIT_TOP_N=10
DASHBOARD_TOP_N=5

# ============================================================================
# Security Settings
# ============================================================================

RATELIMIT_ENABLED=True
LOGIN_RATE_LIMIT=10 per minute
SESSION_COOKIE_SECURE={insecure_cookies}
PERMANENT_SESSION_LIFETIME=3600

# ============================================================================
# Logging
# ============================================================================

# Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_LEVEL=INFO
# Empty disables the log files
LOG_DIR=logs
"""
        return content, {
            'secret_key': secret_key,
            'admin_password': admin_password,
        }

    def _get_timestamp(self):
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def file_exists(self):
        return self.env_file.exists()

    def create_backup(self):
        """Create backup of existing .env file"""
        if not self.file_exists():
            return None
        backup_path = self.env_file.parent / f'.env.backup.{self._get_timestamp().replace(":", "-").replace(" ", "_")}'
        shutil.copy2(self.env_file, backup_path)
        return backup_path

    def write_env_file(self, content):
        with open(self.env_file, 'w') as f:
            f.write(content)

        # Owner read/write only
        os.chmod(self.env_file, 0o600)

    def display_credentials(self, credentials):
        print("\n" + "=" * 80)
        print("GENERATED CREDENTIALS - SAVE THESE SECURELY!")
        print("=" * 80)
        print("\nThese credentials have been written to the .env file.")
        print("This is the ONLY time the password will be displayed!")
        print("\n" + "-" * 80)

        if not self.dev_mode:
            print("\nFlask Secret Key:")
            print(f"   {credentials['secret_key'][:20]}...{credentials['secret_key'][-20:]}")
            print(f"   (Length: {len(credentials['secret_key'])} characters)")
        else:
            print("\nFlask Secret Key: dev-secret-key-DO-NOT-USE-IN-PRODUCTION")

        print("\nAdministrator:")
        print("   - E-mail: admin@empresa.com")
        print(f"   - Password: {credentials['admin_password']}")

        print("\n" + "-" * 80)
        print("\nNext Steps:")
        print("   1. Set AI_API_KEY to enable the AI helpers")
        print("   2. Run: python app.py --build-only  (to initialize storage)")
        print("   3. Run: python app.py")

        if self.dev_mode:
            print("\nDEV MODE: Using simple passwords for development!")
            print("   DO NOT use this configuration in production!")

        print("\n" + "=" * 80 + "\n")

    def generate(self, force=False):
        """
        Generate .env file

        Args:
            force: Overwrite existing .env file without prompting
        """
        if self.file_exists() and not force:
            print(f"\nFile {self.env_file} already exists!")
            response = input("Do you want to overwrite it? (yes/no): ").lower().strip()

            if response not in ['yes', 'y']:
                print("Aborted. Existing .env file was not modified.")
                return False

            backup_path = self.create_backup()
            if backup_path:
                print(f"Backup created: {backup_path}")

        print("\nGenerating secure environment configuration...")
        content, credentials = self.create_env_content()
        self.write_env_file(content)
        print(f"Created: {self.env_file}")

        self.display_credentials(credentials)
        return True


def main():
    parser = argparse.ArgumentParser(
        description='Generate secure .env configuration for the maintenance service',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python generate_env.py              # Interactive mode
  python generate_env.py --force      # Overwrite without prompting
  python generate_env.py --dev        # Development mode (simple passwords)
        """
    )
    parser.add_argument('--force', '-f', action='store_true',
                        help='Overwrite existing .env file without prompting')
    parser.add_argument('--dev', '-d', action='store_true',
                        help='Development mode: use simple, predictable values (NOT FOR PRODUCTION!)')
    args = parser.parse_args()

    if args.dev:
        print("\nWARNING: Development mode enabled!")
        print("    This will generate INSECURE credentials for development only.\n")

    generator = EnvGenerator(dev_mode=args.dev)
    sys.exit(0 if generator.generate(force=args.force) else 1)


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
"""
Writes a .env for the Marketplace Order Desk with a fresh SECRET_KEY and every
setting marketplace.create_app() reads.

    python generate_env.py           # prompt before replacing an existing .env
    python generate_env.py --force   # replace without asking (old file is backed up)
    python generate_env.py --dev     # fixed secrets and plain-HTTP cookies for local work
"""

import argparse
import os
import secrets
import shutil
import sys
from datetime import datetime
from pathlib import Path

DEV_SECRET_KEY = "dev-secret-key-DO-NOT-USE-IN-PRODUCTION"
DEV_DEMO_PASSWORD = "demo-password-123"


class EnvGenerator:
    """Builds and writes the .env file next to this script"""

    def __init__(self, dev_mode=False):
        self.dev_mode = dev_mode
        self.env_file = Path(__file__).parent / '.env'

    def sections(self, secret_key, demo_password):
        """(heading, [(key, value), ...]) pairs in file order"""
        secure_cookies = str(not self.dev_mode)
        return [
            ("Flask", [
                ('SECRET_KEY', secret_key),
                ('FLASK_DEBUG', str(self.dev_mode)),
                ('USE_RELOADER', 'False'),
                ('FLASK_HOST', '127.0.0.1'),
                ('FLASK_PORT', '5000'),
            ]),
            ("Database (SQLite in instance/ unless DATABASE_URL is set)", [
                ('SQLITE_BUSY_TIMEOUT', '30'),
            ]),
            ("Sessions", [
                ('SESSION_COOKIE_SECURE', secure_cookies),
                ('REMEMBER_COOKIE_SECURE', secure_cookies),
                ('PERMANENT_SESSION_LIFETIME', '3600'),
            ]),
            ("Rate limiting", [
                ('RATELIMIT_DEFAULT', '200 per hour'),
            ]),
            ("Orders: only the assigned employee may accept or decline", [
                ('ENFORCE_ORDER_OWNERSHIP', 'True'),
            ]),
            ("Demo accounts created by `python app.py --seed-demo`", [
                ('DEMO_USER_PASSWORD', f'"{demo_password}"'),
            ]),
            ("Logging", [
                ('LOG_LEVEL', 'DEBUG' if self.dev_mode else 'INFO'),
                ('LOG_DIR', 'logs'),
            ]),
        ]

    def render(self):
        """Return (file content, demo password)"""
        secret_key = DEV_SECRET_KEY if self.dev_mode else secrets.token_hex(64)
        demo_password = DEV_DEMO_PASSWORD if self.dev_mode else secrets.token_urlsafe(18)

        lines = [
            "# Marketplace Order Desk environment",
            f"# Generated {datetime.now():%Y-%m-%d %H:%M:%S}. Keep this file out of version control.",
        ]
        for heading, settings in self.sections(secret_key, demo_password):
            lines.append("")
            lines.append(f"# {heading}")
            lines.extend(f"{key}={value}" for key, value in settings)
        return "\n".join(lines) + "\n", demo_password

    def backup_existing(self):
        if not self.env_file.exists():
            return None
        target = self.env_file.with_name(f'.env.backup.{datetime.now():%Y-%m-%d_%H-%M-%S}')
        shutil.copy2(self.env_file, target)
        return target

    def generate(self, force=False):
        if self.env_file.exists():
            if not force:
                answer = input(f"{self.env_file} already exists. Overwrite? (yes/no): ").strip().lower()
                if answer not in ('yes', 'y'):
                    print("Left the existing .env unchanged.")
                    return False
            print(f"Backed up to {self.backup_existing()}")

        content, demo_password = self.render()
        self.env_file.write_text(content)
        os.chmod(self.env_file, 0o600)

        print(f"Wrote {self.env_file}")
        print(f"Demo account password: {demo_password}")
        if self.dev_mode:
            print("Dev mode: fixed secrets and insecure cookies. Never use this file in production.")
        return True


def main():
    parser = argparse.ArgumentParser(description='Generate the .env file for the Marketplace Order Desk')
    parser.add_argument('--force', '-f', action='store_true', help='Overwrite an existing .env without prompting')
    parser.add_argument('--dev', '-d', action='store_true', help='Predictable values for local development')
    args = parser.parse_args()

    sys.exit(0 if EnvGenerator(dev_mode=args.dev).generate(force=args.force) else 1)


if __name__ == '__main__':
    main()

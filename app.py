#!/usr/bin/env python3
"""
Run script for the Marketplace Order Desk
"""

import argparse
import os
import sys

from dotenv import load_dotenv

# Load environment variables from .env file before the app reads its config
load_dotenv()

from marketplace import create_app  # noqa: E402
from marketplace.build import build_database  # noqa: E402
from marketplace.logger import get_logger  # noqa: E402

# Run 'python generate_env.py' to create a .env file with a SECRET_KEY.

logger = get_logger("marketplace.run")


def parse_arguments():
    parser = argparse.ArgumentParser(description='Marketplace Order Desk')
    parser.add_argument('--build-only', action='store_true',
                        help='Create database tables and exit without starting the web server')
    parser.add_argument('--seed-demo', action='store_true',
                        help='Insert a demo employee, customer and items if they are missing')
    parser.add_argument('--reconcile-notifications', action='store_true',
                        help='Rebuild employee inboxes from pending orders, then exit')
    return parser.parse_args()


def main():
    args = parse_arguments()
    app = create_app()

    with app.app_context():
        build_database(seed_demo=args.seed_demo)

        if args.reconcile_notifications:
            from marketplace.business.orders.notification_relay import NotificationRelay
            counts = NotificationRelay().reconcile()
            logger.info(f"Reconciled notifications: {counts}")
            sys.exit(0)

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')
    host = os.environ.get('FLASK_HOST', '127.0.0.1')
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)


if __name__ == '__main__':
    main()

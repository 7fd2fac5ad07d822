#!/usr/bin/env python3
"""
Run script for the maintenance service
"""

import argparse
import os
import sys

from dotenv import load_dotenv

from maintenance_app import create_app
from maintenance_app.build import build_database
from maintenance_app.logger import get_logger

# Load environment variables from .env file
load_dotenv()

# Note: the administrator credentials come from environment variables.
# Run 'python generate_env.py' to create a .env file with a secure password.

logger = get_logger("maintenance_app.run")


def parse_arguments():
    parser = argparse.ArgumentParser(description='Industrial Maintenance Management Service')
    parser.add_argument('--build-only', action='store_true',
                        help='Create the storage and insert critical data (roles, administrator), then exit')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()

    logger.debug("Starting maintenance service...")
    app = create_app()

    # Critical data is always checked and inserted
    build_database(app)

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    # FLASK_DEBUG: Enable/disable debug mode (default: False for security)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    # USE_RELOADER: Enable/disable auto-reloader (default: False in production)
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')

    # FLASK_HOST: Server host (default: 127.0.0.1 for security)
    host = os.environ.get('FLASK_HOST', '127.0.0.1')

    # FLASK_PORT: Server port (default: 5000)
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)

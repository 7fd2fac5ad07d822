#!/usr/bin/env python3
"""
Build orchestrator for the maintenance service
Creates the storage (tables or data directory) and inserts the critical data:
the role permission matrix and the bootstrap administrator.
"""

from maintenance_app import create_app, db, get_repository
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.business.core.permission_manager import PermissionManager
from maintenance_app.business.users.user_manager import UserManager
from maintenance_app.data.core.roles import ADMIN_ROLE, DEFAULT_PERMISSIONS
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.build")


def verify_critical_data(repository):
    """
    Verify that critical data is present

    Returns:
        bool: True if every default role is persisted and at least one user exists
    """
    missing_roles = [role for role in DEFAULT_PERMISSIONS if repository.roles.get_by_id(role) is None]
    if missing_roles:
        logger.warning(f"Roles not seeded: {', '.join(missing_roles)}")
        return False
    if not repository.users.get_all():
        logger.warning("No user found")
        return False
    logger.info("Critical data verification passed")
    return True


def insert_critical_data(repository, config):
    """
    Seed the permission matrix and create the administrator when no user exists.

    Raises:
        RuntimeError: If the administrator is needed but cannot be created
    """
    ctx = AuthContext.system()

    inserted = PermissionManager(repository).seed_defaults()
    logger.info(f"Permission matrix seeded ({inserted} new role(s))")

    if repository.users.get_all():
        logger.info("Users already present, skipping administrator creation")
        return

    password = config.get('ADMIN_PASSWORD')
    if not password:
        logger.warning("ADMIN_PASSWORD not set; no administrator created. Run generate_env.py to create one.")
        return

    result = UserManager(repository).create_user(ctx, {
        'email': config.get('ADMIN_EMAIL'),
        'name': config.get('ADMIN_NAME'),
        'password': password,
        'cargo': 'Administrador do Sistema',
        'role': ADMIN_ROLE,
    })
    if not result.success:
        error_msg = f"Administrator creation failed: {result.error}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)
    logger.info(f"Created administrator {result.data['email']}")


def build_database(app=None):
    """
    Main build entry point

    Args:
        app: Application to build; a new one is created from the environment when omitted
    """
    app = app or create_app()

    with app.app_context():
        logger.info(f"Starting build - storage backend: {app.config['STORAGE_BACKEND']}")

        if app.config['STORAGE_BACKEND'] == 'sql':
            db.create_all()
            logger.info("All database tables created")

        repository = get_repository(app)
        if verify_critical_data(repository):
            logger.info("Critical data already present")
        else:
            insert_critical_data(repository, app.config)

        logger.info("Build completed successfully")
    return app


if __name__ == '__main__':
    build_database()

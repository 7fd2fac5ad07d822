"""
PermissionManager - role permission matrix backed by the `roles` collection

Responsibilities:
- Seed the default matrix on first build
- Resolve a role's flags (falling back to the defaults for unseeded roles)
- Toggle single flags
"""

from typing import Dict

from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.data.core.roles import ADMIN_ROLE, DEFAULT_PERMISSIONS, PERMISSIONS, RolePermissions
from maintenance_app.data.storage.repository import ROLES
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.business.permissions")


class PermissionManager:

    def __init__(self, repository):
        self.repository = repository

    def seed_defaults(self) -> int:
        """Insert the default matrix for roles that are not persisted yet."""
        inserted = 0
        for role, flags in DEFAULT_PERMISSIONS.items():
            if self.repository.roles.get_by_id(role) is None:
                self.repository.roles.add(RolePermissions(id=role, permissions=dict(flags)).to_dict())
                inserted += 1
        if inserted:
            self.repository.invalidate_views(ROLES)
            logger.info(f"Seeded permissions for {inserted} role(s)")
        return inserted

    def list_roles(self) -> Dict[str, Dict[str, bool]]:
        matrix = {role: dict(flags) for role, flags in DEFAULT_PERMISSIONS.items()}
        for document in self.repository.roles.get_all():
            record = RolePermissions.from_dict(document)
            matrix[record.id] = self._complete(record.permissions)
        return matrix

    def get_permissions(self, role: str) -> Dict[str, bool]:
        """Flags of a role; unknown roles get no permission at all."""
        document = self.repository.roles.get_by_id(role) if role else None
        if document is not None:
            return self._complete(RolePermissions.from_dict(document).permissions)
        return dict(DEFAULT_PERMISSIONS.get(role, {p: False for p in PERMISSIONS}))

    def has_permission(self, user, permission: str) -> bool:
        if user is None:
            return False
        return bool(self.get_permissions(user.role).get(permission, False))

    def set_permission(self, ctx: AuthContext, role: str, permission: str, value: bool) -> ActionResult:
        if permission not in PERMISSIONS:
            return ActionResult.fail(f"Permissão desconhecida: {permission}")
        if not role or not role.strip():
            return ActionResult.fail("O papel é obrigatório.")
        if role == ADMIN_ROLE and permission == 'modifyRoles' and not value:
            return ActionResult.fail("O Administrador não pode perder a permissão de modificar papéis.")

        permissions = self.get_permissions(role)
        permissions[permission] = bool(value)
        if self.repository.roles.get_by_id(role) is None:
            self.repository.roles.add(RolePermissions(id=role, permissions=permissions).to_dict())
        else:
            self.repository.roles.update(role, {'permissions': permissions})
        self.repository.invalidate_views(ROLES)

        logger.info(f"{ctx} set {role}.{permission} = {bool(value)}")
        return ActionResult.ok({'role': role, 'permissions': permissions})

    @staticmethod
    def _complete(flags: Dict[str, bool]) -> Dict[str, bool]:
        return {p: bool(flags.get(p, False)) for p in PERMISSIONS}

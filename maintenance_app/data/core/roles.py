"""
Role permission matrix.

The defaults below seed the `roles` collection on first build; after that the
persisted matrix is authoritative and can be edited through the API.
"""

from dataclasses import dataclass
from typing import Dict

from maintenance_app.data.core.document import DocumentMixin, doc_field

PERMISSION_LABELS = {
    'viewDashboard': 'Visualizar Dashboard',
    'viewEquipment': 'Visualizar Equipamentos',
    'createEquipment': 'Criar Equipamentos',
    'modifyEquipment': 'Modificar Equipamentos',
    'viewStores': 'Visualizar Lojas',
    'modifyStores': 'Modificar Lojas',
    'viewUsers': 'Visualizar Usuários',
    'modifyUsers': 'Criar ou Modificar Usuários',
    'viewRoles': 'Visualizar Papéis',
    'modifyRoles': 'Modificar Papéis e Permissões',
}

PERMISSIONS = tuple(PERMISSION_LABELS)

PERMISSION_GROUPS = {
    'Geral': ['viewDashboard'],
    'Equipamentos': ['viewEquipment', 'createEquipment', 'modifyEquipment'],
    'Lojas': ['viewStores', 'modifyStores'],
    'Administração': ['viewUsers', 'modifyUsers', 'viewRoles', 'modifyRoles'],
}

ADMIN_ROLE = 'Administrador'


def _grant(*flags):
    return {permission: permission in flags for permission in PERMISSIONS}


DEFAULT_PERMISSIONS = {
    ADMIN_ROLE: _grant(*PERMISSIONS),
    'Gerente de Manutenção': _grant('viewDashboard', 'viewEquipment', 'createEquipment', 'modifyEquipment', 'viewStores'),
    'Gerente de Refrigeração': _grant('viewDashboard', 'viewEquipment', 'createEquipment', 'modifyEquipment', 'viewStores'),
    'Gerente Regional': _grant('viewDashboard', 'viewEquipment', 'modifyEquipment', 'viewStores', 'modifyStores', 'viewUsers'),
    'Gerente de Loja': _grant('viewDashboard', 'viewEquipment', 'viewStores'),
    'Líder de Manutenção': _grant('viewDashboard', 'viewEquipment', 'createEquipment', 'modifyEquipment', 'viewStores'),
    'Analista de Manutenção': _grant('viewDashboard', 'viewEquipment', 'viewStores'),
    'Técnico de Manutenção': _grant('viewDashboard', 'viewEquipment', 'modifyEquipment', 'viewStores'),
    'Ajudante': _grant('viewEquipment', 'viewStores'),
}


@dataclass
class RolePermissions(DocumentMixin):
    """Persisted permission flags of one role; the role name is the key."""
    id: str = doc_field('id', '')
    permissions: Dict[str, bool] = doc_field('permissions', default_factory=dict)

    def allows(self, permission: str) -> bool:
        return bool(self.permissions.get(permission, False))

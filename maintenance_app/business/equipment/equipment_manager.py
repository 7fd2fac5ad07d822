"""
EquipmentManager - Business logic for the equipment registry

Responsibilities:
- Register, edit and delete equipment (asset tag = equipment id)
- Resolve QR payloads back to equipment
- Global search across equipment, users and warehouse items
"""

from typing import Any, Dict, List, Optional

from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.data.core.equipment import Equipment
from maintenance_app.data.core.user import User
from maintenance_app.data.inventory.warehouse import WarehouseComponent, WarehouseInsumo
from maintenance_app.data.storage.base import DuplicateKeyError, RecordNotFoundError
from maintenance_app.data.storage.repository import EQUIPMENT
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.business.equipment")

DUPLICATE_ID_ERROR = "Este número de patrimônio já está em uso."
DUPLICATE_ID_ON_UPDATE_ERROR = "Este número de patrimônio já está em uso por outro equipamento."
NOT_FOUND_ERROR = "Equipamento não encontrado."
MANAGED_FIELD_ERROR = "O histórico de manutenção e o plano preventivo não podem ser editados por aqui."

# Written only through the log and preventive plan managers
MANAGED_FIELDS = ('maintenanceHistory', 'preventivePlan')

SEARCH_LIMIT = 10


class EquipmentManager:
    """Handles all equipment registry business logic"""

    def __init__(self, repository):
        self.repository = repository

    # ------------------------------------------------------------------ reads

    def get_equipment(self, equipment_id: str) -> Optional[Equipment]:
        document = self.repository.equipment.get_by_id(equipment_id)
        return Equipment.from_dict(document) if document is not None else None

    def list_equipment(self, store_id: Optional[str] = None) -> List[Equipment]:
        equipment = [Equipment.from_dict(d) for d in self.repository.equipment.get_all()]
        if store_id:
            equipment = [e for e in equipment if e.store_id == store_id]
        return equipment

    def validate_qr_code(self, payload: str) -> Dict[str, Any]:
        """
        Look up the equipment whose id is the literal QR payload.

        Returns:
            dict: {'success': bool, 'equipment': dict or None}
        """
        equipment = self.get_equipment(payload) if payload else None
        if equipment is None:
            logger.debug(f"QR payload did not match any equipment: {payload!r}")
        return {
            'success': equipment is not None,
            'equipment': equipment.to_dict() if equipment else None,
        }

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> Dict[str, List[Dict[str, Any]]]:
        """
        Case-insensitive global search.

        Equipment matches on id, name or model; users on name or email;
        components on name or part number; insumos on name or type.
        """
        results = {'equipment': [], 'users': [], 'components': [], 'insumos': []}
        text = (query or '').strip().lower()
        if not text:
            return results

        def matches(*values):
            return any(text in (v or '').lower() for v in values)

        for equipment in self.list_equipment():
            if matches(equipment.id, equipment.name, equipment.model):
                results['equipment'].append({'id': equipment.id, 'name': equipment.name, 'model': equipment.model})
        for document in self.repository.users.get_all():
            user = User.from_dict(document)
            if matches(user.name, user.email):
                results['users'].append({'id': user.id, 'name': user.name, 'email': user.email})
        for document in self.repository.warehouse_components.get_all():
            component = WarehouseComponent.from_dict(document)
            if matches(component.name, component.part_number):
                results['components'].append({'partNumber': component.part_number, 'name': component.name})
        for document in self.repository.warehouse_insumos.get_all():
            insumo = WarehouseInsumo.from_dict(document)
            if matches(insumo.name, insumo.type):
                results['insumos'].append({'id': insumo.id, 'name': insumo.name, 'type': insumo.type})

        return {group: items[:limit] for group, items in results.items()}

    # -------------------------------------------------------------- mutations

    def register_equipment(self, ctx: AuthContext, data: Dict[str, Any]) -> ActionResult:
        """
        Register new equipment. The preventive plan and the maintenance
        history always start empty.

        Args:
            ctx: Authenticated caller
            data: Equipment document (camelCase keys)
        """
        data = dict(data or {})
        equipment_id = str(data.get('id') or '').strip()
        if not equipment_id:
            return ActionResult.fail("O número de patrimônio é obrigatório.")
        if not str(data.get('name') or '').strip():
            return ActionResult.fail("O nome do equipamento é obrigatório.")

        data['id'] = equipment_id
        data['preventivePlan'] = []
        data['maintenanceHistory'] = []
        try:
            equipment = Equipment.from_dict(data)
        except (TypeError, ValueError) as e:
            return ActionResult.fail(f"Dados de equipamento inválidos: {e}")

        try:
            self.repository.equipment.add(equipment.to_dict())
        except DuplicateKeyError:
            logger.warning(f"{ctx} tried to register duplicate equipment id {equipment_id}")
            return ActionResult.conflict(DUPLICATE_ID_ERROR)

        self.repository.invalidate_views(EQUIPMENT)
        logger.info(f"{ctx} registered equipment {equipment_id}")
        return ActionResult.ok(equipment.to_dict())

    def update_equipment(self, ctx: AuthContext, equipment_id: str, partial: Dict[str, Any]) -> ActionResult:
        """
        Shallow-merge a partial document into an equipment record. Changing
        the id is allowed as long as the new id is free.
        The maintenance history and the preventive plan are refused here.
        """
        current = self.repository.equipment.get_by_id(equipment_id)
        if current is None:
            return ActionResult.not_found(NOT_FOUND_ERROR)

        partial = dict(partial or {})
        if not partial:
            return ActionResult.ok(current)
        if any(field in partial for field in MANAGED_FIELDS):
            logger.warning(f"{ctx} tried to overwrite managed fields of {equipment_id}: "
                           f"{', '.join(f for f in MANAGED_FIELDS if f in partial)}")
            return ActionResult.fail(MANAGED_FIELD_ERROR)

        if 'id' in partial and not str(partial['id'] or '').strip():
            return ActionResult.fail("O número de patrimônio é obrigatório.")
        if 'name' in partial and not str(partial['name'] or '').strip():
            return ActionResult.fail("O nome do equipamento é obrigatório.")

        try:
            Equipment.from_dict({**current, **partial})
        except (TypeError, ValueError) as e:
            return ActionResult.fail(f"Dados de equipamento inválidos: {e}")

        try:
            updated = self.repository.equipment.update(equipment_id, partial)
        except RecordNotFoundError:
            return ActionResult.not_found(NOT_FOUND_ERROR)
        except DuplicateKeyError:
            return ActionResult.conflict(DUPLICATE_ID_ON_UPDATE_ERROR)

        self.repository.invalidate_views(EQUIPMENT)
        new_id = updated.get('id', equipment_id)
        if new_id != equipment_id:
            logger.info(f"{ctx} renamed equipment {equipment_id} -> {new_id}")
        logger.info(f"{ctx} updated equipment {new_id}: {', '.join(sorted(partial))}")
        return ActionResult.ok(updated)

    def delete_equipment(self, ctx: AuthContext, equipment_id: str) -> ActionResult:
        """Hard delete; deleting an unknown id is not an error."""
        existed = self.repository.equipment.get_by_id(equipment_id) is not None
        self.repository.equipment.delete(equipment_id)
        self.repository.invalidate_views(EQUIPMENT)
        if existed:
            logger.info(f"{ctx} deleted equipment {equipment_id}")
        return ActionResult.ok({'id': equipment_id, 'deleted': existed})

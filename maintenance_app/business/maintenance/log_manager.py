"""
MaintenanceLogManager - Business logic for maintenance history entries

Responsibilities:
- Append log entries (timestamped, unique id, newest first)
- Summarize the technician's description with the AI client, falling back
  to a plain text when the backend fails
- Consume one unit of warehouse stock for the part or consumable used and
  take its unit cost when no cost was given
- Keep stock and history consistent with a compensating transaction
"""

from typing import Any, Callable, Dict, Optional

from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.business.core.compensating_transaction import CompensatingTransaction
from maintenance_app.data.core.equipment import (
    CONSUMABLE_REQUEST_PREFIX,
    Equipment,
    LogKind,
    MaintenanceLog,
)
from maintenance_app.data.inventory.warehouse import WarehouseComponent, WarehouseInsumo
from maintenance_app.data.storage.base import RecordNotFoundError
from maintenance_app.data.storage.repository import EQUIPMENT, WAREHOUSE_COMPONENTS, WAREHOUSE_INSUMOS
from maintenance_app.services.ai.text_generation import AIServiceError
from maintenance_app.utils.dates import epoch_millis, to_iso, utcnow
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.business.maintenance.logs")

AI_FALLBACK_WARNING = 'Falha ao gerar o log de manutenção com IA. Um log básico foi criado.'
NOT_FOUND_ERROR = 'Equipamento não encontrado.'

# Time booked for swapping a consumable, in hours
CONSUMABLE_REPLACEMENT_HOURS = 0.5


def fallback_log_text(modifications: str) -> str:
    return f'Serviço registrado: {modifications}'


def consumable_request_text(insumo_name: str) -> str:
    return f'{CONSUMABLE_REQUEST_PREFIX} {insumo_name}'


class MaintenanceLogManager:

    def __init__(self, repository, ai_client=None, clock: Callable = utcnow):
        self.repository = repository
        self.ai_client = ai_client
        self.clock = clock

    # ------------------------------------------------------------ history

    def append_log(self, ctx: AuthContext, equipment_id: str, log: Dict[str, Any]) -> MaintenanceLog:
        """
        Stamp and insert a log entry at the head of the equipment's history.

        Raises:
            RecordNotFoundError: If the equipment does not exist
        """
        document = self.repository.equipment.get_by_id(equipment_id)
        if document is None:
            raise RecordNotFoundError(EQUIPMENT, equipment_id)

        history = list(document.get('maintenanceHistory') or [])
        now = self.clock()
        entry = MaintenanceLog.from_dict(dict(log or {}))
        entry.id = self._unique_log_id(now, {h.get('id') for h in history})
        entry.date = to_iso(now)
        if not entry.created_by:
            entry.created_by = ctx.user_id

        self.repository.equipment.update(equipment_id, {'maintenanceHistory': [entry.to_dict()] + history})
        logger.info(f"{ctx} appended {entry.kind} log {entry.id} to equipment {equipment_id}")
        return entry

    def remove_log(self, ctx: AuthContext, equipment_id: str, log_id: str) -> None:
        """Drop a history entry. Only used to undo an append."""
        document = self.repository.equipment.get_by_id(equipment_id)
        if document is None:
            return
        history = [h for h in (document.get('maintenanceHistory') or []) if h.get('id') != log_id]
        self.repository.equipment.update(equipment_id, {'maintenanceHistory': history})
        logger.info(f"{ctx} removed log {log_id} from equipment {equipment_id}")

    @staticmethod
    def _unique_log_id(now, taken) -> str:
        millis = epoch_millis(now)
        while f'log-{millis}' in taken:
            millis += 1
        return f'log-{millis}'

    # ------------------------------------------------------------ log entry

    def _summarize(self, equipment_name: str, equipment_description: str, modifications: str):
        """Return (log text, warning or None)."""
        if self.ai_client is None:
            return fallback_log_text(modifications), AI_FALLBACK_WARNING
        try:
            result = self.ai_client.generate_maintenance_log(equipment_name, equipment_description, modifications)
            return result['logEntry'], None
        except AIServiceError as e:
            logger.warning(f"AI log generation failed, using fallback text: {e}")
            return fallback_log_text(modifications), AI_FALLBACK_WARNING

    def _consume_component(self, tx: CompensatingTransaction, part_number: str) -> Optional[float]:
        document = self.repository.warehouse_components.get_by_id(part_number)
        if document is None:
            return None
        component = WarehouseComponent.from_dict(document)
        if component.quantity_in_stock <= 0:
            logger.info(f"Component {part_number} is out of stock; log cost left unset")
            return None

        self.repository.warehouse_components.update(part_number, {'quantityInStock': component.quantity_in_stock - 1})
        tx.on_rollback(lambda: self._restock(self.repository.warehouse_components, part_number),
                       f'restock component {part_number}')
        return component.cost

    def _consume_insumo(self, tx: CompensatingTransaction, insumo_name: str) -> Optional[float]:
        wanted = insumo_name.strip().lower()
        insumo = None
        for document in self.repository.warehouse_insumos.get_all():
            candidate = WarehouseInsumo.from_dict(document)
            if candidate.name.strip().lower() == wanted:
                insumo = candidate
                break
        if insumo is None:
            return None
        if insumo.quantity_in_stock <= 0:
            logger.info(f"Insumo {insumo.name} is out of stock; log cost left unset")
            return None

        self.repository.warehouse_insumos.update(insumo.id, {'quantityInStock': insumo.quantity_in_stock - 1})
        tx.on_rollback(lambda: self._restock(self.repository.warehouse_insumos, insumo.id),
                       f'restock insumo {insumo.id}')
        return insumo.cost

    @staticmethod
    def _restock(collection, key: str) -> None:
        document = collection.get_by_id(key)
        if document is not None:
            collection.update(key, {'quantityInStock': (document.get('quantityInStock') or 0) + 1})

    def create_maintenance_log(self, ctx: AuthContext, request: Dict[str, Any]) -> ActionResult:
        """
        Record a maintenance action on an equipment.

        Args:
            ctx: Authenticated caller
            request: {
                equipmentId, modifications (free text, required),
                componentId, componentPartNumber, componentName,
                insumoName, tempoGasto, cost, kind
            }

        Returns:
            ActionResult with data {'log': ..., 'logEntry': ...}; `warning`
            is set when the AI summary fell back to plain text
        """
        request = request or {}
        equipment_id = request.get('equipmentId')
        modifications = (request.get('modifications') or '').strip()
        if not modifications:
            return ActionResult.fail('Descreva o serviço realizado.')

        kind = request.get('kind') or LogKind.CORRECTIVE
        if kind not in LogKind.ALL:
            return ActionResult.fail(f'Tipo de log inválido: {kind}')

        tempo_gasto = request.get('tempoGasto')
        cost = request.get('cost')
        for label, value in (('tempoGasto', tempo_gasto), ('cost', cost)):
            if value is not None and (not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0):
                return ActionResult.fail(f'{label} deve ser um número não negativo.')

        document = self.repository.equipment.get_by_id(equipment_id) if equipment_id else None
        if document is None:
            return ActionResult.not_found(NOT_FOUND_ERROR)
        equipment = Equipment.from_dict(document)

        component_name = request.get('componentName')
        part_number = request.get('componentPartNumber')
        insumo_name = (request.get('insumoName') or '').strip() or None

        if component_name:
            installed = next((c for c in equipment.components if c.id == request.get('componentId')), None)
            subject = f'{equipment.name} (Componente: {component_name})'
            subject_description = (installed.description if installed else None) or f'Part number: {part_number or "-"}'
        else:
            subject, subject_description = equipment.name, equipment.description
        log_text, warning = self._summarize(subject, subject_description, modifications)

        with CompensatingTransaction(f'maintenance log on {equipment_id}') as tx:
            final_cost = cost
            if not cost:
                final_cost = None
                if part_number:
                    final_cost = self._consume_component(tx, part_number)
                elif insumo_name:
                    final_cost = self._consume_insumo(tx, insumo_name)

            entry = self.append_log(ctx, equipment_id, {
                'userRequest': modifications,
                'generatedLog': log_text,
                'kind': kind,
                'componentId': request.get('componentId'),
                'componentName': component_name,
                'insumoName': insumo_name,
                'tempoGasto': tempo_gasto,
                'cost': final_cost,
                'createdBy': ctx.user_id,
            })

        touched = [EQUIPMENT]
        if part_number and not cost:
            touched.append(WAREHOUSE_COMPONENTS)
        elif insumo_name and not cost:
            touched.append(WAREHOUSE_INSUMOS)
        self.repository.invalidate_views(*touched)

        return ActionResult.ok({'log': entry.to_dict(), 'logEntry': log_text}, warning=warning)

    def register_consumable_replacement(self, ctx: AuthContext, equipment_id: str, insumo_name: str,
                                        tempo_gasto: float = CONSUMABLE_REPLACEMENT_HOURS) -> ActionResult:
        """Log the swap of a consumable and take one unit from the warehouse."""
        insumo_name = (insumo_name or '').strip()
        if not insumo_name:
            return ActionResult.fail('Informe o insumo substituído.')
        return self.create_maintenance_log(ctx, {
            'equipmentId': equipment_id,
            'modifications': consumable_request_text(insumo_name),
            'insumoName': insumo_name,
            'tempoGasto': tempo_gasto,
            'kind': LogKind.CONSUMABLE,
        })

"""
AI helpers exposed to the equipment forms. Each call turns an AIServiceError
into a failed ActionResult; nothing here is required for a workflow to
complete.
"""

from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.services.ai.text_generation import AIServiceError
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.business.ai")


class EquipmentAssistant:

    def __init__(self, client):
        self.client = client

    def _call(self, error_message: str, operation, *args) -> ActionResult:
        try:
            return ActionResult.ok(operation(*args))
        except AIServiceError as e:
            logger.warning(f"{error_message} ({e})")
            return ActionResult.fail(error_message, status=502)

    def improve_name(self, current_name: str, description: str = '') -> ActionResult:
        if not (current_name or '').strip():
            return ActionResult.fail('Informe um nome para melhorar.')
        return self._call('Falha ao melhorar o nome com IA.', self.client.improve_name, current_name, description)

    def improve_description(self, equipment_name: str, current_description: str) -> ActionResult:
        if not (equipment_name or '').strip():
            return ActionResult.fail('Informe o nome do equipamento.')
        return self._call('Falha ao melhorar a descrição com IA.', self.client.improve_description,
                          equipment_name, current_description or '')

    def find_components(self, equipment_name: str, model: str) -> ActionResult:
        if not (equipment_name or '').strip() or not (model or '').strip():
            return ActionResult.fail('Informe o nome e o modelo do equipamento.')
        return self._call('Falha ao buscar componentes com IA.', self.client.find_components, equipment_name, model)

    def find_insumos(self, equipment_name: str, model: str) -> ActionResult:
        if not (equipment_name or '').strip() or not (model or '').strip():
            return ActionResult.fail('Informe o nome e o modelo do equipamento.')
        return self._call('Falha ao buscar insumos com IA.', self.client.find_insumos, equipment_name, model)

    def find_models(self, equipment_name: str) -> ActionResult:
        if not (equipment_name or '').strip():
            return ActionResult.fail('Informe o nome do equipamento.')
        return self._call('Falha ao buscar modelos com IA.', self.client.find_models, equipment_name)

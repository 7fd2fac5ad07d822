from dataclasses import dataclass
from typing import List, Optional

from maintenance_app.data.core.document import DocumentMixin, doc_field

# Request texts written by the equipment page. Legacy logs carry no kind and
# are classified by these prefixes when loaded.
PREVENTIVE_REQUEST_PREFIX = 'Execução da tarefa de manutenção preventiva:'
CONSUMABLE_REQUEST_PREFIX = 'Substituição do insumo:'


class LogKind:
    CORRECTIVE = 'corrective'
    PREVENTIVE = 'preventive'
    CONSUMABLE = 'consumable'

    ALL = (CORRECTIVE, PREVENTIVE, CONSUMABLE)

    @staticmethod
    def classify_request(user_request: str) -> str:
        text = (user_request or '').strip()
        if text.startswith('Execução da tarefa'):
            return LogKind.PREVENTIVE
        if text.startswith(CONSUMABLE_REQUEST_PREFIX):
            return LogKind.CONSUMABLE
        return LogKind.CORRECTIVE


@dataclass
class EquipmentLocation(DocumentMixin):
    latitude: Optional[float] = doc_field('latitude')
    longitude: Optional[float] = doc_field('longitude')
    manual_address: Optional[str] = doc_field('manualAddress')


@dataclass
class Component(DocumentMixin):
    """A durable part installed on an equipment."""
    id: str = doc_field('id', '')
    name: str = doc_field('name', '')
    part_number: str = doc_field('partNumber', '')
    description: Optional[str] = doc_field('description')


@dataclass
class Insumo(DocumentMixin):
    """A consumable supply (oil, grease, filter) specified for an equipment."""
    id: str = doc_field('id', '')
    name: str = doc_field('name', '')
    type: str = doc_field('type', '')
    description: Optional[str] = doc_field('description')


@dataclass
class MaintenanceLog(DocumentMixin):
    """
    One entry of an equipment's maintenance history. Entries are appended,
    never edited.
    """
    id: str = doc_field('id', '')
    date: str = doc_field('date', '')
    user_request: str = doc_field('userRequest', '')
    generated_log: str = doc_field('generatedLog', '')
    kind: Optional[str] = doc_field('kind')
    component_id: Optional[str] = doc_field('componentId')
    component_name: Optional[str] = doc_field('componentName')
    insumo_name: Optional[str] = doc_field('insumoName')
    tempo_gasto: Optional[float] = doc_field('tempoGasto')
    cost: Optional[float] = doc_field('cost')
    created_by: Optional[str] = doc_field('createdBy')

    def __post_init__(self):
        if not self.kind:
            self.kind = LogKind.classify_request(self.user_request)

    @property
    def is_preventive(self) -> bool:
        return self.kind == LogKind.PREVENTIVE

    @property
    def consumed_insumo(self) -> Optional[str]:
        """Name of the consumable used by this entry, if any."""
        if self.insumo_name:
            return self.insumo_name.strip()
        text = (self.user_request or '').strip()
        if CONSUMABLE_REQUEST_PREFIX in text:
            name = text.split(CONSUMABLE_REQUEST_PREFIX, 1)[1].strip()
            return name or None
        return None


@dataclass
class PreventiveTask(DocumentMixin):
    """Recurring task; next due = lastExecution + frequencyDays."""
    id: str = doc_field('id', '')
    task_name: str = doc_field('taskName', '')
    frequency_days: int = doc_field('frequencyDays', 0)
    last_execution: str = doc_field('lastExecution', '')


@dataclass
class Equipment(DocumentMixin):
    id: str = doc_field('id', '')
    name: str = doc_field('name', '')
    description: str = doc_field('description', '')
    image_url: Optional[str] = doc_field('imageUrl')
    image_hint: Optional[str] = doc_field('imageHint')
    store_id: str = doc_field('storeId', '')
    model: Optional[str] = doc_field('model')
    value: Optional[float] = doc_field('value')
    location: Optional[EquipmentLocation] = doc_field('location', nested=EquipmentLocation)
    maintenance_history: List[MaintenanceLog] = doc_field('maintenanceHistory', item=MaintenanceLog, default_factory=list)
    components: List[Component] = doc_field('components', item=Component, default_factory=list)
    insumos: List[Insumo] = doc_field('insumos', item=Insumo, default_factory=list)
    preventive_plan: List[PreventiveTask] = doc_field('preventivePlan', item=PreventiveTask, default_factory=list)

    def find_task(self, task_id: str) -> Optional[PreventiveTask]:
        for task in self.preventive_plan:
            if task.id == task_id:
                return task
        return None

    def __repr__(self):
        return f'<Equipment {self.id}: {self.name}>'

"""
Text-generation client for the AI helpers (naming, descriptions, log
summaries, component / consumable / model suggestions).

Talks to an OpenAI-compatible chat-completions endpoint (Groq by default)
and asks for a JSON object back. Every failure, whether transport, HTTP,
missing configuration or an answer that does not match the expected shape,
is raised as AIServiceError; callers decide on the fallback.
"""

import json
from typing import Any, Dict, List

import requests

from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.services.ai")

SYSTEM_PROMPT = (
    "Você é um assistente de manutenção industrial. "
    "Responda sempre em português e apenas com um objeto JSON válido, sem texto adicional."
)


class AIServiceError(Exception):
    """The text-generation backend could not produce a usable answer."""


class TextGenerationClient:

    def __init__(self, api_url: str, api_key: str, model: str, timeout: float = 30):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> 'TextGenerationClient':
        return cls(
            api_url=config.get('AI_API_URL'),
            api_key=config.get('AI_API_KEY'),
            model=config.get('AI_MODEL'),
            timeout=config.get('AI_TIMEOUT_SECONDS', 30),
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_url and self.api_key and self.model)

    def _complete(self, operation: str, prompt: str) -> Dict[str, Any]:
        if not self.configured:
            raise AIServiceError(f"{operation}: AI backend is not configured (AI_API_KEY / AI_API_URL / AI_MODEL)")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.4,
            "stream": False
        }

        try:
            response = requests.post(self.api_url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
            result = json.loads(content)
        except requests.exceptions.RequestException as e:
            logger.error(f"AI request for {operation} failed: {e}")
            raise AIServiceError(f"{operation}: request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"AI response for {operation} could not be parsed: {e}")
            raise AIServiceError(f"{operation}: unexpected response format: {e}") from e

        if not isinstance(result, dict):
            raise AIServiceError(f"{operation}: expected a JSON object, got {type(result).__name__}")
        logger.debug(f"AI {operation} completed")
        return result

    @staticmethod
    def _require_text(operation: str, result: Dict[str, Any], key: str) -> str:
        value = result.get(key)
        if not isinstance(value, str) or not value.strip():
            raise AIServiceError(f"{operation}: answer has no '{key}' text")
        return value.strip()

    @staticmethod
    def _require_items(operation: str, result: Dict[str, Any], key: str, fields: List[str]) -> List[Dict[str, str]]:
        items = result.get(key)
        if not isinstance(items, list):
            raise AIServiceError(f"{operation}: answer has no '{key}' list")
        cleaned = []
        for item in items:
            if not isinstance(item, dict) or not item.get('name'):
                raise AIServiceError(f"{operation}: malformed item in '{key}': {item!r}")
            cleaned.append({f: str(item.get(f) or '') for f in fields})
        return cleaned

    # -------------------------------------------------------------- operations

    def improve_name(self, current_name: str, description: str = '') -> Dict[str, str]:
        prompt = f"""Você é um especialista em catalogação de equipamentos. Melhore e padronize o nome de um equipamento fornecido pelo usuário.

O nome deve ser claro e específico. Se o usuário fornecer marca, modelo ou especificações, inclua-os de forma padronizada (ex: 'Furadeira de Impacto 1/2" 500W Bosch GSB 550 RE').
Não invente marcas, modelos ou especificações. Se o nome for simples (ex: "Masseira"), gere um nome profissional, mas genérico (ex: "Masseira Industrial para Pão").

Nome do usuário: {current_name}
Descrição: {description or '-'}

Responda no formato {{"improvedName": "..."}}."""
        result = self._complete('improve_name', prompt)
        return {'improvedName': self._require_text('improve_name', result, 'improvedName')}

    def improve_description(self, equipment_name: str, current_description: str) -> Dict[str, str]:
        prompt = f"""Você é um escritor técnico. Melhore e expanda a descrição de equipamento fornecida pelo usuário.

A descrição deve ser clara, concisa e profissional, com detalhes relevantes para manutenção e identificação. Não repita apenas a entrada; acrescente detalhes plausíveis com base no nome se a descrição for escassa.

Nome do equipamento: {equipment_name}
Descrição do usuário: {current_description}

Responda no formato {{"improvedDescription": "..."}}."""
        result = self._complete('improve_description', prompt)
        return {'improvedDescription': self._require_text('improve_description', result, 'improvedDescription')}

    def generate_maintenance_log(self, equipment_name: str, equipment_description: str, modifications: str) -> Dict[str, str]:
        prompt = f"""Você é um especialista em logs de manutenção de equipamentos industriais.
Converta a descrição informal de um serviço em uma única frase técnica, clara e formal.

Equipamento: {equipment_name}
Descrição: {equipment_description}
Serviço realizado (descrito pelo usuário): "{modifications}"

Exemplo: "troquei o óleo e apertei os parafusos da base" -> "Realizada a substituição do óleo lubrificante e o reaperto dos parafusos de fixação da base do equipamento."

Responda no formato {{"logEntry": "..."}}."""
        result = self._complete('generate_maintenance_log', prompt)
        return {'logEntry': self._require_text('generate_maintenance_log', result, 'logEntry')}

    def find_components(self, equipment_name: str, model: str) -> Dict[str, List[Dict[str, str]]]:
        prompt = f"""Você é um especialista em catalogação de peças de equipamentos industriais.
Liste os principais componentes do equipamento abaixo, com nomes e part numbers genéricos e críveis. Não use marcas reais que não foram fornecidas.

Nome do equipamento: {equipment_name}
Modelo: {model}

Responda no formato {{"components": [{{"id": "...", "name": "...", "partNumber": "...", "description": "..."}}]}}."""
        result = self._complete('find_components', prompt)
        return {'components': self._require_items('find_components', result, 'components',
                                                  ['id', 'name', 'partNumber', 'description'])}

    def find_insumos(self, equipment_name: str, model: str) -> Dict[str, List[Dict[str, str]]]:
        prompt = f"""Você é um especialista em manutenção de equipamentos industriais.
Liste uma lista curta de insumos (óleos, graxas, filtros, fluidos) usados na manutenção preventiva do equipamento abaixo. Use nomes e tipos genéricos e críveis.

Nome do equipamento: {equipment_name}
Modelo: {model}

Responda no formato {{"insumos": [{{"id": "...", "name": "...", "type": "...", "description": "..."}}]}}."""
        result = self._complete('find_insumos', prompt)
        return {'insumos': self._require_items('find_insumos', result, 'insumos',
                                               ['id', 'name', 'type', 'description'])}

    def find_models(self, equipment_name: str) -> Dict[str, List[str]]:
        prompt = f"""Você é um especialista em catalogação de equipamentos industriais.
Liste 5 modelos comuns e plausíveis para o tipo de equipamento abaixo. Gere apenas os nomes dos modelos.

Nome do equipamento: {equipment_name}

Responda no formato {{"models": ["...", "..."]}}."""
        result = self._complete('find_models', prompt)
        models = result.get('models')
        if not isinstance(models, list) or not all(isinstance(m, str) for m in models):
            raise AIServiceError("find_models: answer has no 'models' list of strings")
        return {'models': [m.strip() for m in models if m.strip()]}

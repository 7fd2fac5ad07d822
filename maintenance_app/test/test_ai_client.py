"""
Text-generation client against a stubbed HTTP layer, and the assistant's
mapping of its failures
"""
import json

import pytest
import requests

from maintenance_app.business.equipment.ai_assistant import EquipmentAssistant
from maintenance_app.services.ai import text_generation
from maintenance_app.services.ai.text_generation import AIServiceError, TextGenerationClient


class StubResponse:

    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f'{self.status_code} Server Error')

    def json(self):
        return self.body


def completion(content):
    return {'choices': [{'message': {'content': json.dumps(content)}}]}


@pytest.fixture
def text_client():
    return TextGenerationClient('https://ai.example.test/v1/chat/completions', 'chave-teste', 'modelo-teste', timeout=5)


@pytest.fixture
def stub_post(monkeypatch):
    sent = []

    def install(response=None, error=None):
        def fake_post(url, headers=None, json=None, timeout=None):
            sent.append({'url': url, 'headers': headers, 'json': json, 'timeout': timeout})
            if error is not None:
                raise error
            return response
        monkeypatch.setattr(text_generation.requests, 'post', fake_post)
        return sent

    return install


def test_log_summary_is_parsed(text_client, stub_post):
    sent = stub_post(StubResponse(completion({'logEntry': '  Realizada a troca do termostato.  '})))
    result = text_client.generate_maintenance_log('Balcão Refrigerado', 'Balcão de 2 portas', 'troquei o termostato')

    assert result == {'logEntry': 'Realizada a troca do termostato.'}
    request = sent[0]
    assert request['headers']['Authorization'] == 'Bearer chave-teste'
    assert request['json']['model'] == 'modelo-teste'
    assert request['json']['response_format'] == {'type': 'json_object'}
    assert 'troquei o termostato' in request['json']['messages'][1]['content']
    assert request['timeout'] == 5


def test_component_suggestions_are_normalized(text_client, stub_post):
    stub_post(StubResponse(completion({'components': [
        {'id': 'c1', 'name': 'Compressor', 'partNumber': 'CMP-1'},
        {'name': 'Ventilador', 'partNumber': None, 'description': 'Axial'},
    ]})))
    result = text_client.find_components('Balcão Refrigerado', 'BR-2000')
    assert result['components'][1] == {'id': '', 'name': 'Ventilador', 'partNumber': '', 'description': 'Axial'}


def test_models_are_stripped(text_client, stub_post):
    stub_post(StubResponse(completion({'models': [' BR-1000 ', 'BR-2000', '  ']})))
    assert text_client.find_models('Balcão Refrigerado') == {'models': ['BR-1000', 'BR-2000']}


@pytest.mark.parametrize('response', [
    StubResponse(completion({'outra': 'coisa'})),
    StubResponse(completion(['lista'])),
    StubResponse({'choices': []}),
    StubResponse({'choices': [{'message': {'content': 'isto não é json'}}]}),
    StubResponse({}, status_code=500),
])
def test_unusable_answers_raise(text_client, stub_post, response):
    stub_post(response)
    with pytest.raises(AIServiceError):
        text_client.improve_name('balcao')


def test_transport_errors_raise(text_client, stub_post):
    stub_post(error=requests.exceptions.ConnectTimeout('timed out'))
    with pytest.raises(AIServiceError):
        text_client.improve_description('Balcão', 'frio')


def test_unconfigured_client_never_calls_out(stub_post):
    sent = stub_post(StubResponse(completion({'improvedName': 'x'})))
    unconfigured = TextGenerationClient.from_config({'AI_API_URL': 'https://ai.example.test', 'AI_API_KEY': '',
                                                     'AI_MODEL': 'modelo-teste'})
    assert not unconfigured.configured
    with pytest.raises(AIServiceError):
        unconfigured.improve_name('balcao')
    assert sent == []


def test_assistant_success(ai_client):
    result = EquipmentAssistant(ai_client).find_models('Balcão')
    assert result.success
    assert result.data == {'models': ['Modelo A', 'Modelo B']}


def test_assistant_maps_failures_to_502(failing_ai_client):
    result = EquipmentAssistant(failing_ai_client).find_components('Balcão', 'BR-2000')
    assert not result.success
    assert result.status == 502
    assert result.error == 'Falha ao buscar componentes com IA.'


def test_assistant_validates_input_before_calling(ai_client):
    assistant = EquipmentAssistant(ai_client)
    assert assistant.find_insumos('Balcão', '  ').status == 400
    assert assistant.improve_name('').status == 400
    assert ai_client.calls == []

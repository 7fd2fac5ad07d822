"""
Test the logging sanitizer utility.
Passwords and other credentials must never reach the logs.
"""

from werkzeug.datastructures import ImmutableMultiDict

from maintenance_app.utils.logging_sanitizer import (
    SENSITIVE_FIELDS, sanitize_dict, sanitize_exception_message, sanitize_form_data, sanitize_list,
)


def test_sanitize_dict():
    """Test dictionary sanitization"""
    result = sanitize_dict({'email': 'ana@empresa.com', 'password': 'segredo123', 'name': 'Ana'})
    assert result['email'] == 'ana@empresa.com', "Email should not be redacted"
    assert result['password'] == '[REDACTED]', "Password should be redacted"
    assert result['name'] == 'Ana', "Name should not be redacted"

    # Case insensitivity
    result = sanitize_dict({'Password': 'a', 'PASSWORD': 'b', 'Authorization': 'Bearer x'})
    assert set(result.values()) == {'[REDACTED]'}


def test_sanitize_nested_documents():
    """Stored user documents embed their password; nested structures are walked"""
    document = {
        'users': [
            {'id': 'user-ana-1', 'email': 'ana@empresa.com', 'password': '$2b$12$abc'},
            'texto solto',
        ],
        'settings': {'ai_api_key': 'gsk_123', 'model': 'llama'},
    }
    result = sanitize_dict(document)
    assert result['users'][0]['password'] == '[REDACTED]'
    assert result['users'][0]['email'] == 'ana@empresa.com'
    assert result['users'][1] == 'texto solto'
    assert result['settings'] == {'ai_api_key': '[REDACTED]', 'model': 'llama'}
    assert document['users'][0]['password'] == '$2b$12$abc', "Input must not be modified"


def test_sanitize_list_and_empty_input():
    assert sanitize_list([{'token': 'abc'}, 3]) == [{'token': '[REDACTED]'}, 3]
    assert sanitize_dict({}) == {}
    assert sanitize_dict(None) is None


def test_custom_redaction_text():
    assert sanitize_dict({'secret': 'x'}, redact_text='***') == {'secret': '***'}


def test_sanitize_form_data():
    """Test request.form / request.args sanitization"""
    form_data = ImmutableMultiDict([
        ('email', 'admin@empresa.com'),
        ('password', 'segredo123'),
    ])
    result = sanitize_form_data(form_data)
    assert result['email'] == 'admin@empresa.com'
    assert result['password'] == '[REDACTED]'


def test_all_sensitive_fields():
    """Verify all sensitive fields are properly configured"""
    result = sanitize_dict({field: f'sensitive_{field}_value' for field in SENSITIVE_FIELDS})
    for field in SENSITIVE_FIELDS:
        assert result[field] == '[REDACTED]', f"Field '{field}' should be redacted"


def test_sanitize_exception_message():
    assert sanitize_exception_message(ValueError('loja-9 não encontrada')) == 'loja-9 não encontrada'
    hidden = sanitize_exception_message(RuntimeError('invalid password hash for user-ana-1'))
    assert hidden == 'RuntimeError: [Message contains sensitive data]'

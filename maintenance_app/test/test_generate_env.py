"""
.env generation for first-time setup
"""
import stat

from dotenv import dotenv_values

from generate_env import EnvGenerator


def test_dev_mode_is_predictable(tmp_path):
    generator = EnvGenerator(dev_mode=True, env_file=tmp_path / '.env')
    content, credentials = generator.create_env_content()

    assert credentials['secret_key'] == 'dev-secret-key-DO-NOT-USE-IN-PRODUCTION'
    assert credentials['admin_password'] == 'admin987654321!'
    assert 'SESSION_COOKIE_SECURE=False' in content


def test_production_values_are_random(tmp_path):
    generator = EnvGenerator(env_file=tmp_path / '.env')
    assert len(generator.generate_secret_key()) == 128
    assert generator.generate_secret_key() != generator.generate_secret_key()

    password = generator.generate_password()
    assert len(password) == 20
    assert any(c.isupper() for c in password)
    assert any(c.isdigit() for c in password)
    assert not any(c in password for c in '#=:"\'')


def test_generate_writes_readable_env_file(tmp_path):
    env_file = tmp_path / '.env'
    generator = EnvGenerator(dev_mode=True, env_file=env_file)
    assert generator.generate(force=True)

    assert stat.S_IMODE(env_file.stat().st_mode) == 0o600
    values = dotenv_values(env_file)
    assert values['SECRET_KEY'] == 'dev-secret-key-DO-NOT-USE-IN-PRODUCTION'
    assert values['ADMIN_PASSWORD'] == 'admin987654321!'
    assert values['STORAGE_BACKEND'] == 'json'
    assert values['STOCKOUT_WINDOW_DAYS'] == '90'
    assert values['AI_API_KEY'] == ''


def test_existing_file_is_kept_when_declined(tmp_path, monkeypatch):
    env_file = tmp_path / '.env'
    env_file.write_text('SECRET_KEY=keep-me\n')
    monkeypatch.setattr('builtins.input', lambda prompt: 'no')

    assert not EnvGenerator(dev_mode=True, env_file=env_file).generate()
    assert env_file.read_text() == 'SECRET_KEY=keep-me\n'


def test_overwrite_creates_backup(tmp_path, monkeypatch):
    env_file = tmp_path / '.env'
    env_file.write_text('SECRET_KEY=old\n')
    monkeypatch.setattr('builtins.input', lambda prompt: 'yes')

    assert EnvGenerator(dev_mode=True, env_file=env_file).generate()
    backups = list(tmp_path.glob('.env.backup.*'))
    assert len(backups) == 1
    assert backups[0].read_text() == 'SECRET_KEY=old\n'

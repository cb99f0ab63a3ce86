import logging

import pytest

from app import create_app, remove_logging_handlers


@pytest.fixture
def dhcp_config_file(tmp_path):
    return tmp_path / "dhcpd.conf"


@pytest.fixture
def app(tmp_path, dhcp_config_file):
    config_file = tmp_path / "config.conf"
    config_file.write_text(
        "API_PREFIX=/api\n"
        f"DHCP_CONFIG_PATH={dhcp_config_file}\n"
        f"LOGGING_PATH={tmp_path / 'logs'}\n"
        "LOG_LEVEL=DEBUG\n"
        "CORS_ORIGINS=https://admin.example\n"
    )
    app = create_app(str(config_file))
    app.config['TESTING'] = True
    yield app
    remove_logging_handlers()


@pytest.fixture
def client(app):
    return app.test_client()


def test_health_check(client):
    response = client.get('/api/')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'running'


def test_config_types(app, tmp_path):
    assert app.config['DEBUG'] is False
    assert app.config['MAX_CONTENT_LENGTH'] == 1048576
    assert app.config['CORS_ORIGINS'] == ['https://admin.example']
    assert (tmp_path / 'logs' / 'dhcp-converter.log').exists()


def test_security_headers(client):
    response = client.get('/api/')
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert response.headers['X-Frame-Options'] == 'DENY'
    assert 'no-store' in response.headers['Cache-Control']


def test_convert_json(client, office_config):
    response = client.post('/api/convert', json={'config': office_config})

    assert response.status_code == 200
    body = response.get_json()
    assert [c['command'] for c in body['commands']] == [
        'create_scope', 'set_option_value', 'create_reservation']
    assert body['commands'][0] == {
        'command': 'create_scope',
        'name': 'Office',
        'start': '10.0.0.10',
        'end': '10.0.0.200',
        'mask': '255.255.255.0',
    }
    assert body['option_119_defined'] is False
    assert body['warnings'] == []
    assert 'script' not in body


def test_convert_powershell(client, office_config):
    response = client.post('/api/convert', json={'config': office_config, 'format': 'powershell'})

    assert response.status_code == 200
    script = response.get_json()['script']
    assert script.startswith("Add-DhcpServerv4Scope -Name 'Office'")
    assert "-ClientId '001122334455'" in script


def test_convert_reports_lossy_behavior(client):
    config = (
        "shared-network n {\n"
        "  subnet 10.0.0.0 netmask 255.255.255.0 {\n"
        "    range 10.0.0.10 10.0.0.50;\n"
        "    range 10.0.0.100 10.0.0.150;\n"
        "    option ntp-servers 10.0.0.5;\n"
        "  }\n"
        "}\n"
    )
    body = client.post('/api/convert', json={'config': config}).get_json()
    assert len(body['warnings']) == 2


def test_convert_requires_config(client):
    response = client.post('/api/convert', json={'format': 'json'})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'config is required'


def test_convert_rejects_non_json_body(client):
    response = client.post('/api/convert', data='authoritative;', content_type='text/plain')
    assert response.status_code == 400


def test_convert_rejects_unknown_format(client, office_config):
    response = client.post('/api/convert', json={'config': office_config, 'format': 'yaml'})
    assert response.status_code == 400


def test_convert_unterminated_block(client):
    response = client.post('/api/convert', json={'config': 'shared-network X {\n  subnet 10.0.0.0 netmask 255.0.0.0 {\n'})

    assert response.status_code == 400
    body = response.get_json()
    assert body['error'] == 'Invalid DHCP configuration'
    assert body['line'] == 1


def test_convert_invalid_netmask(client):
    config = "shared-network X {\n  subnet 10.0.0.0 netmask 255.0.255.0 {\n  }\n}\n"
    body = client.post('/api/convert', json={'config': config}).get_json()
    assert body['error'] == 'Invalid DHCP configuration'
    assert body['line'] == 2


def test_parse_returns_model(client, full_config):
    response = client.post('/api/parse', json={'config': full_config})

    assert response.status_code == 200
    body = response.get_json()
    assert [n['name'] for n in body['shared_networks']] == ['CAMPUS', 'Empty']
    assert body['option_spaces'] == ['pxelinux']
    assert body['option_definitions'][0] == {
        'space': 'pxelinux', 'name': 'magic', 'code': 208, 'type': 'string'}
    assert body['global_settings']['default-lease-time'] == '600'


def test_parse_requires_config(client):
    assert client.post('/api/parse', json={}).status_code == 400


def test_convert_current(client, dhcp_config_file, office_config):
    dhcp_config_file.write_text(office_config)

    response = client.get('/api/convert/current?format=powershell')

    assert response.status_code == 200
    body = response.get_json()
    assert len(body['commands']) == 3
    assert body['script'].count('\n') == 3


def test_convert_current_missing_file(client):
    response = client.get('/api/convert/current')
    assert response.status_code == 404


def test_unknown_route(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Not found'


def test_invalid_app_config(tmp_path):
    config_file = tmp_path / "config.conf"
    config_file.write_text("LOG_LEVEL=CHATTY\n")
    with pytest.raises(ValueError):
        create_app(str(config_file))


def test_logging_handlers_are_detached(tmp_path):
    config_file = tmp_path / "config.conf"
    config_file.write_text(f"LOGGING_PATH={tmp_path / 'logs'}\nLOG_LEVEL=DEBUG\n")
    root_logger = logging.getLogger()

    create_app(str(config_file))
    create_app(str(config_file))
    installed = [h for h in root_logger.handlers if getattr(h, 'dhcp_converter', False)]
    assert len(installed) == 2

    assert remove_logging_handlers() == 2
    assert not any(getattr(h, 'dhcp_converter', False) for h in root_logger.handlers)
    assert root_logger.level == logging.WARNING

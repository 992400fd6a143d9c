import pytest

from wireguard_exporter.metrics import MetricAttributeOptions
from wireguard_exporter.options import DEFAULT_ADDRESS, DEFAULT_PORT, ENV_PREFIX, parse_options


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('ADDRESS', 'PORT', 'VERBOSE_ENABLED', 'PREPEND_SUDO_ENABLED',
                 'SEPARATE_ALLOWED_IPS_ENABLED', 'EXPORT_REMOTE_IP_AND_PORT_ENABLED',
                 'HANDSHAKE_TIMEOUT_SECONDS', 'CONFIG_FILE_NAMES', 'INTERFACES'):
        monkeypatch.delenv(ENV_PREFIX + name, raising=False)


def test_defaults():
    options = parse_options([])
    assert options.addr == DEFAULT_ADDRESS
    assert options.port == DEFAULT_PORT
    assert options.verbose is False
    assert options.prepend_sudo is False
    assert options.interfaces is None
    assert options.extract_names_config_files is None
    assert options.metric_attributes == MetricAttributeOptions()


def test_flags():
    options = parse_options([
        '-l', '127.0.0.1', '-p', '9000', '-v', '-a', '-s', '-r', '-t', '120',
        '-n', '/etc/wireguard/wg0.conf', '-n', '/etc/wireguard/wg1.conf',
        '-i', 'wg0', '-i', 'wg1',
    ])
    assert options.addr == '127.0.0.1'
    assert options.port == 9000
    assert options.verbose and options.prepend_sudo
    assert options.interfaces == ['wg0', 'wg1']
    assert options.extract_names_config_files == ['/etc/wireguard/wg0.conf', '/etc/wireguard/wg1.conf']
    assert options.metric_attributes == MetricAttributeOptions(
        split_allowed_ips=True,
        export_remote_ip_and_port=True,
        handshake_timeout_seconds=120,
    )


def test_long_flags():
    options = parse_options(['--separate-allowed-ips', '--handshake-timeout-seconds', '0'])
    assert options.metric_attributes.split_allowed_ips is True
    assert options.metric_attributes.handshake_timeout_seconds == 0


def test_environment(monkeypatch):
    monkeypatch.setenv(ENV_PREFIX + 'ADDRESS', '::')
    monkeypatch.setenv(ENV_PREFIX + 'PORT', '9999')
    monkeypatch.setenv(ENV_PREFIX + 'EXPORT_REMOTE_IP_AND_PORT_ENABLED', 'true')
    monkeypatch.setenv(ENV_PREFIX + 'HANDSHAKE_TIMEOUT_SECONDS', '300')
    monkeypatch.setenv(ENV_PREFIX + 'INTERFACES', 'wg0, wg1')
    monkeypatch.setenv(ENV_PREFIX + 'CONFIG_FILE_NAMES', '/etc/wireguard/wg0.conf')

    options = parse_options([])
    assert options.addr == '::'
    assert options.port == 9999
    assert options.metric_attributes.export_remote_ip_and_port is True
    assert options.metric_attributes.handshake_timeout_seconds == 300
    assert options.interfaces == ['wg0', 'wg1']
    assert options.extract_names_config_files == ['/etc/wireguard/wg0.conf']


def test_flags_override_environment(monkeypatch):
    monkeypatch.setenv(ENV_PREFIX + 'PORT', '9999')
    monkeypatch.setenv(ENV_PREFIX + 'INTERFACES', 'wg0,wg1')
    options = parse_options(['-p', '9100', '-i', 'wg2'])
    assert options.port == 9100
    assert options.interfaces == ['wg2']


def test_false_environment_values(monkeypatch):
    monkeypatch.setenv(ENV_PREFIX + 'VERBOSE_ENABLED', 'false')
    monkeypatch.setenv(ENV_PREFIX + 'PREPEND_SUDO_ENABLED', '0')
    options = parse_options([])
    assert options.verbose is False
    assert options.prepend_sudo is False


@pytest.mark.parametrize('argv', [
    ['-p', '0'],
    ['-p', '70000'],
    ['-p', 'http'],
    ['-t', '-5'],
    ['-t', 'soon'],
])
def test_invalid_values(argv):
    with pytest.raises(SystemExit):
        parse_options(argv)

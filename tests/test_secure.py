from wireguard_exporter.secure import HIDDEN, SecureString, mask_config_line, mask_fields


def test_secure_string_repr():
    key = SecureString('secret')
    assert repr(key) == HIDDEN
    assert key == 'secret'


def test_mask_fields():
    assert mask_fields(['wg0', 'pub', 'priv', '51820', 'off'], {2}) == f'wg0\tpub\t{HIDDEN}\t51820\toff'


def test_mask_config_line():
    assert mask_config_line('PrivateKey = abc=') == f'PrivateKey = {HIDDEN}'
    assert mask_config_line('  presharedkey=abc=') == f'  presharedkey= {HIDDEN}'
    assert mask_config_line('PublicKey = abc=') == 'PublicKey = abc='
    assert mask_config_line('# PrivateKey') == '# PrivateKey'

import base64
import threading

import pytest

from twofactor import token as token_module
from twofactor.errors import EmptyCharacterPool
from twofactor.token import ALPHA, ALPHA_UPPER, NUMERIC, SPECIAL, Token


def test_explicit_value_and_defaults():
    token = Token("JBSWY3DPEHPK3PXP")
    assert token.value == "JBSWY3DPEHPK3PXP"
    assert str(token) == "JBSWY3DPEHPK3PXP"
    assert token.name == "Unknown"
    assert token.length == 16


def test_empty_value_means_generate():
    token = Token("")
    assert not token.is_set
    assert len(token.value) == 16


def test_value_is_lazy_and_idempotent():
    token = Token()
    assert not token.is_set
    first = token.value
    assert token.is_set
    assert all(token.value == first for _ in range(10))


def test_default_pool():
    assert Token().chars == ALPHA + ALPHA_UPPER + NUMERIC


def test_pool_order_and_flags():
    token = Token().use_alpha(False).use_special(True)
    assert token.chars == ALPHA_UPPER + NUMERIC + SPECIAL
    assert token.flags == {
        "use_alpha": False,
        "use_alpha_upper": True,
        "use_numeric": True,
        "use_special": True,
    }


def test_generated_value_uses_only_pool_characters():
    for _ in range(50):
        token = Token()
        value = token.value
        assert len(value) == 16
        assert set(value) <= set(token.chars)
        assert not set(value) & set(SPECIAL)


def test_generate_honours_special_and_length():
    token = Token().use_alpha(False).use_alpha_upper(False).use_numeric(False).use_special(True)
    token.set_length(20)
    value = token.value
    assert len(value) == 20
    assert set(value) <= set(SPECIAL)


@pytest.mark.parametrize("length", [8, 13, 20])
def test_set_length_in_range(length):
    token = Token().set_length(length)
    assert token.length == length
    assert len(token.value) == length


@pytest.mark.parametrize("length", [0, 7, 21, 100, -5])
def test_set_length_out_of_range_is_ignored(length):
    token = Token().set_length(12).set_length(length)
    assert token.length == 12


def test_settings_do_not_regenerate_existing_value():
    token = Token()
    value = token.value
    token.use_special(True).use_alpha(False).set_length(20)
    assert token.value == value


def test_set_value_replaces():
    token = Token("AAAAAAAAAAAAAAAA")
    assert token.set_value("BBBBBBBBBBBBBBBB") is token
    assert token.value == "BBBBBBBBBBBBBBBB"


def test_generate_does_not_store():
    token = Token("JBSWY3DPEHPK3PXP")
    assert len(token.generate()) == 16
    assert token.value == "JBSWY3DPEHPK3PXP"


def test_empty_pool_raises():
    token = Token().use_alpha(False).use_alpha_upper(False).use_numeric(False)
    with pytest.raises(EmptyCharacterPool):
        token.value


def test_generation_uses_secrets(monkeypatch):
    calls = []

    def fake_choice(seq):
        calls.append(seq)
        return seq[0]

    monkeypatch.setattr(token_module.secrets, "choice", fake_choice)
    assert Token().value == "a" * 16
    assert len(calls) == 16


def test_concurrent_first_read_yields_single_value():
    token = Token()
    results = []
    barrier = threading.Barrier(8)

    def read():
        barrier.wait()
        results.append(token.value)

    threads = [threading.Thread(target=read) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(set(results)) == 1


def test_provisioning_uri():
    token = Token("JBSWY3DPEHPK3PXP", name="alice")
    assert token.provisioning_uri("Acme") == "otpauth://totp/Acme/alice?secret=JBSWY3DPEHPK3PXP"
    token.name = "bob"
    assert token.provisioning_uri("Acme") == "otpauth://totp/Acme/bob?secret=JBSWY3DPEHPK3PXP"


def test_provisioning_uri_default_issuer():
    token = Token("JBSWY3DPEHPK3PXP", name="alice")
    assert token.provisioning_uri() == (
        f"otpauth://totp/{token_module.DEFAULT_ISSUER}/alice?secret=JBSWY3DPEHPK3PXP"
    )


def test_image_base64_is_svg():
    image = base64.b64decode(Token("JBSWY3DPEHPK3PXP", name="alice").image_base64("Acme"))
    assert b"<svg" in image


def test_set_value_empty_means_generate():
    token = Token("JBSWY3DPEHPK3PXP").set_value("")
    assert not token.is_set
    assert len(token.value) == 16

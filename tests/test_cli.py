import pytest

from twofactor import cli
from twofactor.token import ALPHA_UPPER

RFC6238_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "No command specified" in capsys.readouterr().out


def test_secret_defaults_to_base32_safe_pool(capsys):
    assert cli.main(["secret", "--name", "alice", "--issuer", "Acme"]) == 0
    out = capsys.readouterr().out
    secret = out.splitlines()[0].split(": ", 1)[1]
    assert len(secret) == 16
    assert set(secret) <= set(ALPHA_UPPER)
    assert f"otpauth://totp/Acme/alice?secret={secret}" in out


def test_code_at_time(capsys):
    assert cli.main(["code", "--secret", RFC6238_SECRET, "--time", "59"]) == 0
    assert "TOTP: 287082" in capsys.readouterr().out


def test_secret_from_environment(monkeypatch, capsys):
    monkeypatch.setenv("TWOFACTOR_SECRET", RFC6238_SECRET)
    assert cli.main(["code", "--time", "1234567890"]) == 0
    assert "TOTP: 005924" in capsys.readouterr().out


def test_missing_secret(monkeypatch):
    monkeypatch.delenv("TWOFACTOR_SECRET", raising=False)
    with pytest.raises(SystemExit):
        cli.main(["code"])


def test_hotp(capsys):
    assert cli.main(["hotp", "--secret", RFC6238_SECRET, "--counter", "3"]) == 0
    assert "969429" in capsys.readouterr().out


def test_verify_exit_codes(capsys):
    args = ["verify", "--secret", RFC6238_SECRET, "--time", "59"]
    assert cli.main(args + ["--code", "287082"]) == 0
    assert "VALID" in capsys.readouterr().out
    assert cli.main(args + ["--code", "287083", "--window", "0"]) == 1
    assert "INVALID" in capsys.readouterr().out


def test_bad_secret_reports_error(capsys):
    assert cli.main(["code", "--secret", "abc1", "--time", "59"]) == 2
    assert "error:" in capsys.readouterr().err


def test_uri(capsys):
    assert cli.main(["uri", "--secret", RFC6238_SECRET, "--name", "bob", "--issuer", "Acme"]) == 0
    assert capsys.readouterr().out.strip() == f"otpauth://totp/Acme/bob?secret={RFC6238_SECRET}"


def test_qr_writes_svg(tmp_path, capsys):
    output = tmp_path / "qr.svg"
    assert cli.main(["qr", "--secret", RFC6238_SECRET, "--output", str(output)]) == 0
    assert b"<svg" in output.read_bytes()


def test_basic_round_trip(capsys):
    assert cli.main(["basic", "encode", "--username", "alice", "--password", "s3cret"]) == 0
    token = capsys.readouterr().out.strip()
    assert token == "Basic YWxpY2U6czNjcmV0"
    assert cli.main(["basic", "decode", token]) == 0
    out = capsys.readouterr().out
    assert "username: alice" in out and "password: s3cret" in out


def test_basic_decode_malformed(capsys):
    assert cli.main(["basic", "decode", "bm9wZQ=="]) == 2
    assert "error:" in capsys.readouterr().err

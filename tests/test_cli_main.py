from __future__ import annotations

import io
import json

from omni_identity import Identity
from omni_identity.cli.main import main

PUBLIC_KEY_TEXT = "oahek5lid7ek7ckhq7j77nfwgk3vkspnyppm2u467ne5mwiqys"
PUBLIC_KEY_HEX = "01c8aead03f915f128f0fa7ff696c656eaa93db87bd9aa73df693acb22"


def _run(argv: list[str], tmp_path) -> tuple[int, str, str]:
    out = io.StringIO()
    err = io.StringIO()
    rc = main(["--config", str(tmp_path / "missing.toml"), *argv], stdout=out, stderr=err)
    return rc, out.getvalue(), err.getvalue()


def test_version_json_has_expected_fields(tmp_path) -> None:
    rc, out, err = _run(["version", "--json"], tmp_path)
    assert rc == 0
    assert err == ""

    payload = json.loads(out)
    assert payload["cli"] == "omni-identity"
    assert payload["cbor_tag"] == 10000
    assert isinstance(payload["version"], str)


def test_inspect_text_identity(tmp_path) -> None:
    rc, out, err = _run(["inspect", PUBLIC_KEY_TEXT], tmp_path)
    assert rc == 0
    assert err == ""
    assert f"identity: {PUBLIC_KEY_TEXT}" in out
    assert "kind: public-key" in out
    assert f"bytes: {PUBLIC_KEY_HEX}" in out


def test_inspect_hex_identity_as_json(tmp_path) -> None:
    rc, out, _ = _run(["inspect", "--hex", PUBLIC_KEY_HEX, "--json"], tmp_path)
    assert rc == 0

    payload = json.loads(out)
    assert payload["identity"] == PUBLIC_KEY_TEXT
    assert payload["kind"] == "public-key"
    assert payload["subresource_id"] is None
    assert payload["can_sign"] is True


def test_inspect_rejects_invalid_identity(tmp_path) -> None:
    rc, out, err = _run(["inspect", PUBLIC_KEY_TEXT[:-1] + "t"], tmp_path)
    assert rc == 1
    assert out == ""
    assert "invalid identity" in err


def test_subresource_command(tmp_path) -> None:
    rc, out, _ = _run(["subresource", PUBLIC_KEY_TEXT, "2", "--json"], tmp_path)
    assert rc == 0

    payload = json.loads(out)
    expected = Identity.from_text(PUBLIC_KEY_TEXT).with_subresource_id(2)
    assert payload["identity"] == expected.to_text()
    assert payload["kind"] == "subresource"
    assert payload["subresource_id"] == 2


def test_subresource_of_anonymous_is_rejected(tmp_path) -> None:
    rc, _, err = _run(["subresource", "oaa", "2"], tmp_path)
    assert rc == 1
    assert "anonymous" in err


def test_cbor_encode_and_decode(tmp_path) -> None:
    rc, out, _ = _run(["cbor-encode", "oaa"], tmp_path)
    assert rc == 0
    assert out.strip() == "d927104100"

    rc, out, _ = _run(["cbor-decode", "d92710581d" + PUBLIC_KEY_HEX, "--json"], tmp_path)
    assert rc == 0
    assert json.loads(out)["identity"] == PUBLIC_KEY_TEXT


def test_cbor_decode_requires_tag(tmp_path) -> None:
    rc, _, err = _run(["cbor-decode", "4100"], tmp_path)
    assert rc == 1
    assert "tagged" in err


def test_init_then_show_uses_same_key(tmp_path) -> None:
    key_file = tmp_path / "ed25519.pem"

    rc, out, _ = _run(["init", "--key-file", str(key_file)], tmp_path)
    assert rc == 0
    assert "created key:" in out

    rc, out, _ = _run(["init", "--key-file", str(key_file), "--json"], tmp_path)
    assert rc == 0
    created = json.loads(out)
    assert created["kind"] == "public-key"

    rc, out, _ = _run(["show", "--key-file", str(key_file), "--json"], tmp_path)
    assert rc == 0
    assert json.loads(out)["identity"] == created["identity"]

    rc, out, _ = _run(["show", "--key-file", str(key_file), "--subresource", "4", "--json"], tmp_path)
    assert rc == 0
    child = json.loads(out)
    expected = Identity.from_text(created["identity"]).with_subresource_id(4)
    assert child["identity"] == expected.to_text()


def test_show_reports_missing_key_file(tmp_path) -> None:
    rc, _, err = _run(["show", "--key-file", str(tmp_path / "missing.pem")], tmp_path)
    assert rc == 1
    assert "identity error" in err


def test_config_output_json_applies_without_flag(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('output = "json"\n', encoding="utf-8")
    out = io.StringIO()
    err = io.StringIO()

    rc = main(["--config", str(config_path), "inspect", "oaa"], stdout=out, stderr=err)
    assert rc == 0
    assert json.loads(out.getvalue())["kind"] == "anonymous"


def test_invalid_config_is_reported(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('output = "yaml"\n', encoding="utf-8")
    out = io.StringIO()
    err = io.StringIO()

    rc = main(["--config", str(config_path), "inspect", "oaa"], stdout=out, stderr=err)
    assert rc == 1
    assert "config error" in err.getvalue()

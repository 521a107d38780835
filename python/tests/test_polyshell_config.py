"""Tests for polyshell configuration loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from polyshell.config import ShellConfig, load_config
from polyshell.decoders import JsonDecoder
from polyshell.errors import ConfigError


def test_missing_file_yields_defaults(tmp_path):
    config = load_config(str(tmp_path / "absent.json"))
    assert config.auto_switching is False
    assert config.decoders == {}
    assert config.path is None


def test_load_config_reads_settings(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "auto_switching": True,
                "json_output": True,
                "history_file": str(tmp_path / "hist"),
                "file_root": str(tmp_path),
                "decoders": {"quotes": ["json", "text"], "blobs": "hex"},
            }
        ),
        encoding="utf-8",
    )
    config = load_config(str(path))
    assert config.auto_switching is True
    assert config.json_output is True
    assert config.history_file == tmp_path / "hist"
    assert config.file_root == tmp_path
    assert config.decoders == {"quotes": ["json", "text"], "blobs": ["hex"]}
    assert config.path == path
    assert config.to_dict()["decoders"]["blobs"] == ["hex"]


def test_env_var_selects_config(tmp_path, monkeypatch):
    path = tmp_path / "env.json"
    path.write_text('{"auto_switching": true}', encoding="utf-8")
    monkeypatch.setenv("POLYSHELL_CONFIG", str(path))
    assert load_config().auto_switching is True


@pytest.mark.parametrize(
    "text",
    ["{not json", "[1, 2]", '{"decoders": ["json"]}', '{"decoders": {"quotes": [1]}}'],
)
def test_invalid_config_raises(tmp_path, text):
    path = tmp_path / "bad.json"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_get_decoders_preserves_order_and_keeps_unresolved():
    config = ShellConfig(decoders={"quotes": ["avro:file:q.avsc", "json"], "trades": ["text"]})
    entries = config.get_decoders()
    assert [(e.topic, e.reference) for e in entries] == [
        ("quotes", "avro:file:q.avsc"),
        ("quotes", "json"),
        ("trades", "text"),
    ]
    assert entries[0].decoder is None and "unsupported" in entries[0].error
    assert isinstance(entries[1].decoder, JsonDecoder)
    assert config.get_decoders()[1].decoder is entries[1].decoder

"""Tests for the polyshell module manager."""

from __future__ import annotations

import logging

from polyshell.errors import ModuleTeardownFailure
from polyshell.modules import ModuleManager


def test_command_set_last_registration_wins(make_module):
    first = make_module("kafka").add("ls").add("kget")
    second = make_module("zookeeper", "zk").add("ls")
    manager = ModuleManager()
    manager.register([first, second])
    commands = manager.command_set
    assert commands["ls"].module is second
    assert commands["kget"].module is first

    manager = ModuleManager()
    manager.register([second, first])
    assert manager.command_set["ls"].module is first


def test_command_set_refreshes_after_register(make_module):
    manager = ModuleManager()
    manager.register([make_module("kafka").add("kls")])
    assert set(manager.command_set) == {"kls"}
    later = make_module("mongo").add("kls").add("mget")
    manager += [later]
    assert set(manager.command_set) == {"kls", "mget"}
    assert manager.find_command("kls").module is later


def test_find_by_name_and_prefix(make_module):
    es = make_module("elasticsearch", "es")
    other_es = make_module("search", "es")
    manager = ModuleManager()
    manager.register([es, other_es])
    assert manager.find_by_name("elasticsearch") is es
    assert manager.find_by_name("missing") is None
    assert manager.find_by_prefix("es") is es
    assert manager.find_by_prefix("e") is None
    assert manager.find_by_prefix("es:") is None


def test_active_module_slot(make_module):
    manager = ModuleManager()
    module = make_module("kafka")
    manager.register([module])
    assert manager.active_module is None
    manager.set_active_module(module)
    assert manager.active_module is module


def test_shutdown_isolates_failures(make_module, caplog):
    ok_first = make_module("core")
    broken = make_module("kafka", teardown_error=RuntimeError("broker gone"))
    ok_last = make_module("mongo")
    manager = ModuleManager()
    manager.register([ok_first, broken, ok_last])
    with caplog.at_level(logging.ERROR, logger="polyshell.modules"):
        failures = manager.shutdown()
    assert [type(f) for f in failures] == [ModuleTeardownFailure]
    assert failures[0].module == "kafka"
    assert "broker gone" in str(failures[0])
    assert ok_first.shutdown_calls == 1
    assert ok_last.shutdown_calls == 1
    assert "kafka" in caplog.text


def test_shutdown_is_idempotent_for_completed_modules(make_module):
    clean = make_module("core")
    broken = make_module("kafka", teardown_error=RuntimeError("boom"))
    manager = ModuleManager()
    manager.register([clean, broken])
    manager.shutdown()
    broken.teardown_error = None
    assert manager.shutdown() == []
    assert manager.shutdown() == []
    assert clean.shutdown_calls == 1
    assert broken.shutdown_calls == 2

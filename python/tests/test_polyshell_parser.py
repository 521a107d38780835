"""Tests for polyshell command parsing helpers."""

from __future__ import annotations

import pytest

from polyshell.errors import CommandSyntaxError, InvalidArguments
from polyshell.parser import CommandParams, UnixArgs, params, parse_tokens, parse_unix_args


def test_parse_tokens_handles_quotes():
    assert parse_tokens('kput quotes "hello world" -k \'a b\'') == ["kput", "quotes", "hello world", "-k", "a b"]


def test_parse_tokens_blank_line():
    assert parse_tokens("   ") == []


def test_parse_tokens_unbalanced_quote_raises():
    with pytest.raises(CommandSyntaxError):
        parse_tokens('kput "oops')


def test_parse_unix_args_splits_flags_and_positionals():
    args = parse_unix_args(["kget", "quotes", "-p", "3", "-o", "10", "extra"])
    assert args.command_name == "kget"
    assert args.args == ["quotes", "extra"]
    assert args.flags == {"-p": "3", "-o": "10"}


def test_parse_unix_args_flag_without_value():
    args = parse_unix_args(["kls", "-a", "-v"])
    assert args.args == []
    assert args.flags == {"-a": None, "-v": None}
    assert args.has_flag("-a")
    assert args.flag("-a", "default") == "default"


def test_negative_numbers_are_positionals():
    args = parse_unix_args(["seek", "-5"])
    assert args.args == ["-5"]
    assert args.flags == {}


def test_int_flag_rejects_garbage():
    args = UnixArgs(command_name="fcat", flags={"-n": "many"})
    with pytest.raises(InvalidArguments):
        args.int_flag("-n")
    assert UnixArgs(flags={"-n": "08"}).int_flag("-n") == 8
    with pytest.raises(InvalidArguments):
        UnixArgs(command_name="fcat", flags={"-n": "0x10"}).int_flag("-n")


def test_check_args_arity():
    spec = params("topic", "[partition]", flags=[("-n", "count")])
    spec.check_args("kget", parse_unix_args(["kget", "quotes"]))
    spec.check_args("kget", parse_unix_args(["kget", "quotes", "0", "-n", "5"]))
    with pytest.raises(InvalidArguments, match="missing argument"):
        spec.check_args("kget", parse_unix_args(["kget"]))
    with pytest.raises(InvalidArguments, match="at most 2"):
        spec.check_args("kget", parse_unix_args(["kget", "a", "b", "c"]))


def test_check_args_unknown_and_required_flags():
    spec = CommandParams(flags=(("-t", "topic"),), required_flags=("-t",))
    with pytest.raises(InvalidArguments, match="unknown flag -x"):
        spec.check_args("kcount", parse_unix_args(["kcount", "-t", "q", "-x"]))
    with pytest.raises(InvalidArguments, match="-t is required"):
        spec.check_args("kcount", parse_unix_args(["kcount", "-t"]))


def test_usage_marks_optional_parts():
    spec = params("source", "[target]", flags=[("-n", "count")])
    assert spec.usage("copy") == "copy source [target] [-n count]"

"""Tests for StructValidator and the structural walker.

Tests cover:
- End-to-end scenarios (flat, nested, ranges, custom and negated types)
- Structural mismatches and extra keys
- Schema errors confined to their leaf
- errors()/errstr() bookkeeping
- Instance and global registration, snapshot policy
- Debug tracing and configuration
"""

import logging
import re

import pytest

from structcheck import (
    ErrorKind,
    StructValidator,
    ValidatorConfig,
    register_global_type,
)
from structcheck.registry import TypeRegistry
from structcheck.types import ValidationError, to_text
from structcheck.walker import BranchNode, LeafNode, build_schema


@pytest.fixture(autouse=True)
def clean_global_types(monkeypatch):
    """Reset the global tier and debug env around each test."""
    monkeypatch.delenv("STRUCTCHECK_DEBUG", raising=False)
    TypeRegistry.clear_global()
    yield
    TypeRegistry.clear_global()


# =============================================================================
# Scenarios
# =============================================================================


class TestScenarios:
    def test_flat_valid(self):
        validator = StructValidator({"user": "word", "uid": "int"})

        assert validator.validate({"user": "HansDampf", "uid": 92}) is True
        assert validator.errors() == []
        assert validator.errstr() == ""

    def test_flat_invalid_reports_every_leaf(self):
        validator = StructValidator({"user": "word", "uid": "int"})

        assert validator.validate({"user": "Hans Dampf", "uid": "nine"}) is False

        errors = validator.errors()
        assert [e.path for e in errors] == [("user",), ("uid",)]
        assert all(e.kind == ErrorKind.LEAF for e in errors)
        assert str(errors[0]) == "Hans Dampf doesn't match word at user"
        assert validator.errstr() == "nine doesn't match int at uid"

    def test_nested_valid(self):
        validator = StructValidator({"b1": {"b2": {"b3": {"item": "int"}}}})

        assert validator.validate({"b1": {"b2": {"b3": {"item": "100"}}}}) is True

    def test_nested_one_level_short(self):
        validator = StructValidator({"b1": {"b2": {"b3": {"item": "int"}}}})

        assert validator.validate({"b1": {"b2": {"item": "100"}}}) is False

        errors = validator.errors()
        assert len(errors) == 1
        assert errors[0].kind == ErrorKind.STRUCTURE
        assert errors[0].path == ("b1", "b2", "b3")
        assert str(errors[0]) == "<missing> doesn't match <mapping> at b1.b2.b3"

    @pytest.mark.parametrize("value,expected", [(22, True), (23, True), (21, False), (24, False)])
    def test_range(self, value, expected):
        validator = StructValidator({"age": "range(22-23)"})

        assert validator.validate({"age": value}) is expected

    def test_instance_type(self):
        validator = StructValidator({"address": "address"})
        validator.register_type("address", re.compile(r"^\w+\s+\d+$"))

        assert validator.validate({"address": "Livermore 19"}) is True
        assert validator.validate({"address": "Livermore"}) is False

    def test_negated_builtin(self):
        validator = StructValidator({"target": "novars"})

        assert validator.validate({"target": "path/to/thing"}) is True
        assert validator.validate({"target": "I am $(years) old"}) is False


# =============================================================================
# Walker behaviour
# =============================================================================


class TestStructure:
    def test_extra_keys_are_ignored(self):
        schema = {"name": "word", "sub": {"port": "port"}}
        data = {"name": "web", "sub": {"port": 80}}
        extended = {"name": "web", "sub": {"port": 80, "x": "?"}, "other": {"deep": 1}}

        validator = StructValidator(schema)

        assert validator.validate(data) == validator.validate(extended) is True

    def test_scalar_where_branch_expected(self):
        validator = StructValidator({"server": {"host": "hostname"}})

        assert validator.validate({"server": "localhost"}) is False
        error = validator.errors()[0]
        assert error.kind == ErrorKind.STRUCTURE
        assert error.spec == "<mapping>"
        assert error.value == "localhost"

    def test_mapping_where_leaf_expected(self):
        validator = StructValidator({"host": "hostname"})

        assert validator.validate({"host": {"name": "x"}}) is False
        error = validator.errors()[0]
        assert error.kind == ErrorKind.STRUCTURE
        assert str(error) == "<mapping> doesn't match hostname at host"

    def test_sequence_where_leaf_expected(self):
        validator = StructValidator({"hosts": "hostname"})

        assert validator.validate({"hosts": ["a", "b"]}) is False
        assert validator.errors()[0].value == "<sequence>"

    def test_branch_mismatch_does_not_stop_siblings(self):
        validator = StructValidator(
            {"a": {"x": "int"}, "b": "int", "c": {"y": "int"}}
        )

        assert validator.validate({"a": 5, "b": "x", "c": {"y": "z"}}) is False
        assert [(e.kind, e.path) for e in validator.errors()] == [
            (ErrorKind.STRUCTURE, ("a",)),
            (ErrorKind.LEAF, ("b",)),
            (ErrorKind.LEAF, ("c", "y")),
        ]

    def test_errors_follow_schema_order(self):
        validator = StructValidator({"z": "int", "a": "int", "m": "int"})

        validator.validate({"m": "x", "a": "x", "z": "x"})

        assert [e.path for e in validator.errors()] == [("z",), ("a",), ("m",)]

    def test_branches_are_always_required(self):
        validator = StructValidator({"opt": {"value": "int | optional"}})

        assert validator.validate({}) is False
        assert validator.validate({"opt": {}}) is True

    def test_missing_and_none_leaves(self):
        validator = StructValidator({"a": "int | optional", "b": "int"})

        assert validator.validate({"b": None}) is False
        error = validator.errors()[0]
        assert error.path == ("b",)
        assert error.value == "<missing>"
        assert validator.validate({"a": None, "b": 1}) is True

    def test_non_mapping_root(self):
        validator = StructValidator({"a": "int"})

        assert validator.validate("just text") is False
        assert str(validator.errors()[0]) == "just text doesn't match <mapping> at <root>"

    def test_empty_schema_accepts_any_mapping(self):
        assert StructValidator({}).validate({"anything": 1}) is True

    def test_schema_root_must_be_mapping(self):
        with pytest.raises(TypeError):
            StructValidator("int")  # type: ignore[arg-type]

    def test_result_matches_error_list(self):
        validator = StructValidator({"a": "int", "b": {"c": "word"}})

        for data in [{"a": 1, "b": {"c": "x"}}, {"a": "x"}, {}, {"b": {"c": "a b"}}]:
            assert validator.validate(data) == (validator.errors() == [])


class TestSchemaErrors:
    def test_unknown_type_confined_to_leaf(self):
        validator = StructValidator({"bad": "bogus", "good": "int"})

        assert validator.validate({"bad": "x", "good": "nope"}) is False

        errors = validator.errors()
        assert errors[0].kind == ErrorKind.SCHEMA
        assert errors[0].detail == "Unknown type 'bogus'"
        assert str(errors[0]) == "x doesn't match bogus at bad"
        assert errors[0].to_dict()["detail"] == "Unknown type 'bogus'"
        assert errors[1].kind == ErrorKind.LEAF

    def test_unknown_type_fails_even_when_missing(self):
        validator = StructValidator({"bad": "bogus | optional"})

        assert validator.validate({}) is False

    def test_sequence_in_schema(self):
        validator = StructValidator({"list": ["int"]})

        assert validator.validate({"list": "1"}) is False
        assert validator.errors()[0].kind == ErrorKind.SCHEMA

    def test_late_instance_registration_fixes_leaf(self):
        validator = StructValidator({"code": "zipcode"})

        assert validator.validate({"code": "12345"}) is False

        validator.register_type("zipcode", r"\A\d{5}\Z")

        assert validator.validate({"code": "12345"}) is True


# =============================================================================
# Error collector
# =============================================================================


class TestErrorCollector:
    def test_errors_reset_per_call(self):
        validator = StructValidator({"n": "int"})

        validator.validate({"n": "x"})
        assert len(validator.errors()) == 1

        validator.validate({"n": 1})
        assert validator.errors() == []
        assert validator.errstr() == ""

    def test_errors_returns_copy(self):
        validator = StructValidator({"n": "int"})
        validator.validate({"n": "x"})

        validator.errors().clear()

        assert len(validator.errors()) == 1

    def test_error_to_dict(self):
        validator = StructValidator({"a": {"b": "int"}})
        validator.validate({"a": {"b": "x"}})

        assert validator.errors()[0].to_dict() == {
            "kind": "leaf",
            "path": ["a", "b"],
            "spec": "int",
            "value": "x",
            "detail": "",
            "message": "x doesn't match int at a.b",
        }

    def test_error_is_immutable(self):
        error = ValidationError(ErrorKind.LEAF, ("a",), "int", "x")

        with pytest.raises(Exception):
            error.value = "y"  # type: ignore[misc]


# =============================================================================
# Registration tiers
# =============================================================================


class TestRegistration:
    def test_global_type_visible_to_new_validators(self):
        register_global_type("color", r"\A#[0-9a-f]{6}\Z")
        validator = StructValidator({"bg": "color"})

        assert validator.validate({"bg": "#00ff00"}) is True

    def test_global_snapshot_at_construction(self):
        validator = StructValidator({"bg": "color"})
        register_global_type("color", r"\A#[0-9a-f]{6}\Z")

        assert validator.validate({"bg": "#00ff00"}) is False
        assert validator.errors()[0].kind == ErrorKind.SCHEMA

    def test_instance_type_does_not_leak(self):
        first = StructValidator({"v": "mine"})
        first.register_type("mine", r"x")
        second = StructValidator({"v": "mine"})

        assert first.validate({"v": "x"}) is True
        assert second.validate({"v": "x"}) is False

    def test_instance_overrides_builtin(self):
        validator = StructValidator({"v": "int"})
        validator.register_type("int", r"\A\d{2}\Z")

        assert validator.validate({"v": "123"}) is False
        assert validator.validate({"v": "12"}) is True

    def test_predicate_type_with_args(self):
        def length(value, raw_args, parsed_args):
            low, high = (int(a) for a in parsed_args)
            return low <= len(value) <= high

        validator = StructValidator({"name": "length(2-4)"})
        validator.register_type("length", length)

        assert validator.validate({"name": "abc"}) is True
        assert validator.validate({"name": "abcde"}) is False

    def test_raising_predicate_never_escapes(self):
        def broken(value, raw_args, parsed_args):
            raise RuntimeError("boom")

        validator = StructValidator({"v": "broken", "w": "int"})
        validator.register_type("broken", broken)

        assert validator.validate({"v": "x", "w": 1}) is False
        assert [e.path for e in validator.errors()] == [("v",)]

    def test_type_registered_on_registry_after_first_validate(self):
        validator = StructValidator({"a": "address"})

        assert validator.validate({"a": "Liv 1"}) is False

        validator.registry.register("address", r"\A\w+\s+\d+\Z")

        assert validator.validate({"a": "Liv 1"}) is True

    def test_register_type_after_first_validate(self):
        validator = StructValidator({"a": "address"})
        validator.validate({"a": "Liv 1"})

        validator.register_type("address", r"\A\w+\s+\d+\Z")

        assert validator.validate({"a": "Liv 1"}) is True

    def test_reregistering_replaces_compiled_type(self):
        validator = StructValidator({"a": "code"})
        validator.register_type("code", r"\A\d+\Z")
        assert validator.validate({"a": "abc"}) is False

        validator.register_type("code", r"\A[a-z]+\Z")

        assert validator.validate({"a": "abc"}) is True


# =============================================================================
# Values, debug and config
# =============================================================================


class TestValuesAndDebug:
    @pytest.mark.parametrize(
        "value,text",
        [(92, "92"), (92.0, "92.0"), (True, "true"), (False, "false"), ("x", "x")],
    )
    def test_to_text(self, value, text):
        assert to_text(value) == text

    def test_float_is_not_an_int(self):
        validator = StructValidator({"n": "int"})

        assert validator.validate({"n": 92.0}) is False
        assert validator.validate({"n": 92}) is True

    def test_debug_trace(self, caplog):
        validator = StructValidator({"n": "word | int"})
        validator.set_debug(True)

        with caplog.at_level(logging.DEBUG, logger="structcheck"):
            validator.validate({"n": "12 3"})

        messages = [r.getMessage() for r in caplog.records]
        assert any("word (pattern) -> fail" in m for m in messages)
        assert any("int (pattern) -> fail" in m for m in messages)
        assert any(m.startswith("FAIL ") for m in messages)
        assert len(validator.errors()) == 1

    def test_no_trace_without_debug(self, caplog):
        validator = StructValidator({"n": "int"})

        with caplog.at_level(logging.DEBUG, logger="structcheck"):
            validator.validate({"n": "x"})

        assert caplog.records == []

    def test_debug_from_env(self, monkeypatch):
        monkeypatch.setenv("STRUCTCHECK_DEBUG", "yes")

        assert ValidatorConfig.from_env().debug is True
        assert StructValidator({}).debug is True

    def test_debug_env_default(self):
        assert ValidatorConfig.from_env().debug is False

    def test_explicit_config_wins(self, monkeypatch):
        monkeypatch.setenv("STRUCTCHECK_DEBUG", "1")

        assert StructValidator({}, config=ValidatorConfig(debug=False)).debug is False


class TestSchemaTree:
    def test_build_schema(self):
        tree = build_schema({"a": "int", "b": {"c": "word"}, 1: 2})

        assert isinstance(tree, BranchNode)
        assert isinstance(tree.children["a"], LeafNode)
        assert isinstance(tree.children["b"], BranchNode)
        assert tree.children["1"].spec == "2"
        assert tree.children["b"].children["c"].spec == "word"

    def test_non_string_data_keys(self):
        validator = StructValidator({"ports": {"80": "word", "true": "int"}})

        assert validator.validate({"ports": {80: "http", True: 1}}) is True

    def test_colliding_data_keys_warn(self, caplog):
        validator = StructValidator({"1": "word"})

        with caplog.at_level(logging.WARNING, logger="structcheck.walker"):
            assert validator.validate({1: "a b", "1": "b"}) is True

        assert "both render as '1'" in caplog.text

    def test_distinct_data_keys_do_not_warn(self, caplog):
        validator = StructValidator({"80": "word", "x": "int"})

        with caplog.at_level(logging.WARNING, logger="structcheck.walker"):
            assert validator.validate({80: "http", "x": 1}) is True

        assert "both render" not in caplog.text

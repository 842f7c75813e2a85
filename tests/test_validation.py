"""Tests for recordspine.rules and recordspine.validation."""

from __future__ import annotations

import pytest

from recordspine.errors import ConfigurationError, RecordValidationError
from recordspine.protocols import RuleValidator
from recordspine.rules import PipeRuleValidator, parse_rules
from recordspine.validation import ValidationGate, merge_rules


def _check(rules, record):
    validator = PipeRuleValidator()
    validator.set_rules(rules)
    validator.populate(record)
    return validator, validator.is_valid()


class TestParseRules:
    def test_splits_on_pipe(self):
        assert parse_rules("required|max_length[5]") == [("required", None), ("max_length", "5")]

    def test_skips_blank_parts(self):
        assert parse_rules("trim||") == [("trim", None)]

    def test_malformed(self):
        with pytest.raises(ConfigurationError):
            parse_rules("max_length[5")


class TestPipeRuleValidator:
    def test_satisfies_protocol(self):
        assert isinstance(PipeRuleValidator(), RuleValidator)

    def test_filters_are_authoritative(self):
        validator, ok = _check({"name": "trim|lower"}, {"name": "  ADA ", "age": 3})
        assert ok
        assert validator.get_values() == {"name": "ada", "age": 3}

    def test_integer_coerces(self):
        validator, ok = _check({"age": "integer"}, {"age": "42"})
        assert ok
        assert validator.get_values()["age"] == 42

    def test_required_missing(self):
        validator, ok = _check({"email": "required"}, {})
        assert not ok
        assert list(validator.get_errors()) == ["email"]

    def test_required_empty_string(self):
        _, ok = _check({"email": "required|trim"}, {"email": "   "})
        assert not ok

    def test_optional_field_may_be_absent(self):
        validator, ok = _check({"email": "valid_email"}, {"name": "x"})
        assert ok
        assert validator.get_values() == {"name": "x"}

    def test_valid_email(self):
        _, ok = _check({"email": "valid_email"}, {"email": "ada@example.com"})
        assert ok
        validator, ok = _check({"email": "valid_email"}, {"email": "not-an-email"})
        assert not ok
        assert "valid email" in validator.get_errors()["email"][0]

    def test_max_length(self):
        _, ok = _check({"name": "max_length[3]"}, {"name": "abcd"})
        assert not ok

    def test_numeric_bounds(self):
        _, ok = _check({"age": "integer|greater_than_equal_to[18]"}, {"age": 17})
        assert not ok
        _, ok = _check({"age": "greater_than[0]"}, {"age": 5})
        assert ok

    def test_bounds_keep_the_value_type(self):
        validator, ok = _check({"age": "greater_than_equal_to[0]"}, {"age": 5})
        assert ok
        assert validator.get_values()["age"] == 5
        assert isinstance(validator.get_values()["age"], int)

    def test_bounds_reject_non_numbers(self):
        validator, ok = _check({"age": "greater_than[0]"}, {"age": "lots"})
        assert not ok
        assert "must contain a number" in validator.get_errors()["age"][0]

    def test_string_filters_accept_non_strings(self):
        validator, ok = _check({"name": "trim|max_length[20]"}, {"name": 42})
        assert ok
        assert validator.get_values()["name"] == 42

    def test_length_measures_the_rendered_value(self):
        _, ok = _check({"code": "max_length[3]"}, {"code": 12345})
        assert not ok
        _, ok = _check({"code": "exact_length[3]"}, {"code": 123})
        assert ok

    def test_in_list(self):
        _, ok = _check({"role": "in_list[admin, member]"}, {"role": "member"})
        assert ok
        validator, ok = _check({"role": "in_list[admin,member]"}, {"role": "root"})
        assert not ok
        assert "admin, member" in validator.get_errors()["role"][0]

    def test_alpha_dash(self):
        _, ok = _check({"slug": "alpha_dash"}, {"slug": "a-b_c"})
        assert ok
        _, ok = _check({"slug": "alpha_dash"}, {"slug": "a b"})
        assert not ok

    def test_multiple_field_errors(self):
        validator, ok = _check(
            {"email": "required|valid_email", "name": "required"},
            {"email": "bad"},
        )
        assert not ok
        assert set(validator.get_errors()) == {"email", "name"}

    def test_unknown_rule(self):
        with pytest.raises(ConfigurationError):
            _check({"name": "shiny"}, {"name": "x"})

    def test_populate_clears_previous_errors(self):
        validator, ok = _check({"email": "required"}, {})
        assert not ok
        validator.populate({"email": "x"})
        assert validator.get_errors() == {}
        assert validator.is_valid()


class TestMergeRules:
    def test_appends_to_existing(self):
        assert merge_rules({"email": "trim"}, {"email": "required"}) == {"email": "trim|required"}

    def test_adds_insert_only_fields(self):
        assert merge_rules({"email": "trim"}, {"password": "required"}) == {
            "email": "trim",
            "password": "required",
        }

    def test_no_insert_rules(self):
        assert merge_rules({"a": "trim"}, None) == {"a": "trim"}


class TestValidationGate:
    @pytest.fixture
    def gate(self):
        return ValidationGate(
            PipeRuleValidator(),
            {"name": "trim", "email": "trim|valid_email"},
            {"email": "required"},
        )

    def test_sanitizes(self, gate):
        result = gate.validate({"name": "  Ada ", "email": "ada@example.com"}, "insert")
        assert result.is_ok()
        assert result.unwrap() == {"name": "Ada", "email": "ada@example.com"}

    def test_insert_rules_only_apply_to_insert(self, gate):
        assert gate.validate({"name": "Ada"}, "insert").is_err()
        assert gate.validate({"name": "Ada"}, "update").is_ok()

    def test_failure_is_retained(self, gate):
        result = gate.validate({"name": "Ada"}, "insert")
        assert isinstance(result.error, RecordValidationError)
        assert "email" in result.error.errors
        assert "email" in gate.errors

    def test_success_clears_last_failure(self, gate):
        gate.validate({"name": "Ada"}, "insert")
        gate.validate({"name": "Ada"}, "update")
        assert gate.errors == {}

    def test_skip_returns_record_unchanged(self, gate):
        result = gate.validate({"name": "  x  "}, "insert", skip_validation=True)
        assert result.unwrap() == {"name": "  x  "}

    def test_instance_wide_skip(self):
        gate = ValidationGate(PipeRuleValidator(), {"email": "required"}, skip_validation=True)
        assert gate.validate({}, "insert").is_ok()
        assert gate.validate({}, "insert", skip_validation=False).is_err()

    def test_no_rules_passes_through(self):
        gate = ValidationGate(PipeRuleValidator(), {}, {"email": "required"})
        assert gate.validate({"x": 1}, "insert").unwrap() == {"x": 1}

    def test_errors_property_is_a_copy(self, gate):
        gate.validate({"name": "Ada"}, "insert")
        gate.errors["email"].append("tampered")
        assert "tampered" not in gate.errors["email"]

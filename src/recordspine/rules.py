"""Rule-string validator backed by pydantic.

Record models declare their rules the compact way::

    validate_rules = {
        "email": "required|trim|max_length[120]|valid_email",
        "age":   "integer|greater_than_equal_to[0]",
        "role":  "in_list[admin,member]",
    }

:class:`PipeRuleValidator` compiles each rule set once into a pydantic model
(cached by rule set) and satisfies the
:class:`~recordspine.protocols.RuleValidator` contract. Rules are split on
``|``; a rule's argument sits in square brackets.

Supported rules
───────────────
required                 field must be present and not None
trim / lower / upper     string filters, applied before the checks
integer / numeric        coerce to int / float
boolean                  coerce to bool
string                   must be a string
min_length[n] / max_length[n] / exact_length[n]
greater_than[n] / less_than[n]
greater_than_equal_to[n] / less_than_equal_to[n]
valid_email / alpha / alpha_numeric / alpha_dash
in_list[a,b,c]

Only the type rules coerce. Filters, length and numeric-bound rules check
the value as given: ``max_length[3]`` measures ``len(str(value))`` and an
integer stays an integer under ``greater_than[0]``.
Fields without rules pass through untouched.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, ConfigDict, Field, create_model
from pydantic import BaseModel as PydanticModel
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from recordspine.errors import ConfigurationError

_RULE = re.compile(r"^([a-z_]+)(?:\[(.*)\])?$")

_PATTERNS: dict[str, tuple[re.Pattern[str], str]] = {
    "valid_email": (
        re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$"),
        "must contain a valid email address",
    ),
    "alpha": (re.compile(r"^[A-Za-z]+$"), "may only contain alphabetical characters"),
    "alpha_numeric": (re.compile(r"^[A-Za-z0-9]+$"), "may only contain alpha-numeric characters"),
    "alpha_dash": (
        re.compile(r"^[A-Za-z0-9_\-]+$"),
        "may only contain alpha-numeric characters, underscores, and dashes",
    ),
}

_FILTERS: dict[str, Callable[[str], str]] = {
    "trim": str.strip,
    "lower": str.lower,
    "upper": str.upper,
}

_TYPES: dict[str, type] = {
    "integer": int,
    "numeric": float,
    "boolean": bool,
    "string": str,
}

_NUMERIC_BOUNDS: dict[str, tuple[Callable[[float, float], bool], str]] = {
    "greater_than": (operator.gt, "must contain a number greater than {limit}"),
    "less_than": (operator.lt, "must contain a number less than {limit}"),
    "greater_than_equal_to": (operator.ge, "must contain a number greater than or equal to {limit}"),
    "less_than_equal_to": (operator.le, "must contain a number less than or equal to {limit}"),
}

_LENGTHS: dict[str, tuple[Callable[[int, int], bool], str]] = {
    "min_length": (operator.ge, "must be at least {size} characters in length"),
    "max_length": (operator.le, "cannot exceed {size} characters in length"),
    "exact_length": (operator.eq, "must be exactly {size} characters in length"),
}


def parse_rules(expression: str) -> list[tuple[str, str | None]]:
    """Split ``"required|max_length[5]"`` into ``[("required", None), ("max_length", "5")]``."""
    parsed = []
    for part in expression.split("|"):
        part = part.strip()
        if not part:
            continue
        match = _RULE.match(part)
        if not match:
            raise ConfigurationError(f"Malformed validation rule: {part!r}")
        parsed.append((match.group(1), match.group(2)))
    return parsed


def _string_filter(func: Callable[[str], str]) -> BeforeValidator:
    return BeforeValidator(lambda v: func(v) if isinstance(v, str) else v)


def _pattern_check(rule: str) -> AfterValidator:
    pattern, message = _PATTERNS[rule]

    def check(value: Any) -> Any:
        if value is not None and not pattern.match(str(value)):
            raise PydanticCustomError(rule, message)
        return value

    return AfterValidator(check)


def _in_list_check(options: list[str]) -> AfterValidator:
    def check(value: Any) -> Any:
        if value is not None and str(value) not in options:
            raise PydanticCustomError(
                "in_list",
                "must be one of: {options}",
                {"options": ", ".join(options)},
            )
        return value

    return AfterValidator(check)


def _length_check(rule: str, size: int) -> AfterValidator:
    test, message = _LENGTHS[rule]

    def check(value: Any) -> Any:
        if value is not None and not test(len(str(value)), size):
            raise PydanticCustomError(rule, message, {"size": size})
        return value

    return AfterValidator(check)


def _bound_check(rule: str, limit: float) -> AfterValidator:
    test, message = _NUMERIC_BOUNDS[rule]

    def check(value: Any) -> Any:
        if value is None:
            return value
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise PydanticCustomError("numeric", "must contain a number") from None
        if not test(number, limit):
            raise PydanticCustomError(rule, message, {"limit": limit})
        return value

    return AfterValidator(check)


def _required_check(value: Any) -> Any:
    if value is None or value == "":
        raise PydanticCustomError("required", "is required")
    return value


def _number(rule: str, argument: str | None) -> float:
    try:
        return float(argument or "")
    except ValueError as exc:
        raise ConfigurationError(f"Rule {rule} needs a numeric argument, got {argument!r}") from exc


def _compile_field(field_name: str, expression: str) -> tuple[Any, Any]:
    required = False
    base: type | None = None
    before: list[Any] = []
    checks: list[Any] = []

    for rule, argument in parse_rules(expression):
        if rule == "required":
            required = True
        elif rule in _FILTERS:
            before.append(_string_filter(_FILTERS[rule]))
        elif rule in _TYPES:
            base = _TYPES[rule]
        elif rule in _LENGTHS:
            checks.append(_length_check(rule, int(_number(rule, argument))))
        elif rule in _NUMERIC_BOUNDS:
            checks.append(_bound_check(rule, _number(rule, argument)))
        elif rule in _PATTERNS:
            checks.append(_pattern_check(rule))
        elif rule == "in_list":
            checks.append(_in_list_check([o.strip() for o in (argument or "").split(",")]))
        else:
            raise ConfigurationError(f"Unknown validation rule {rule!r} on field {field_name!r}")

    # Only an explicit type rule coerces; every other rule checks the value as given.
    after = [AfterValidator(_required_check)] if required else []
    after.extend(checks)
    metadata = [*before, *after]
    annotation: Any = Annotated[base or Any, *metadata] if metadata else base or Any

    if required:
        return annotation, Field(...)
    return annotation | None, Field(default=None)


@lru_cache(maxsize=128)
def compile_rules(rules: tuple[tuple[str, str], ...]) -> type[PydanticModel]:
    """Build (and cache) a pydantic model for a frozen rule set."""
    fields = {name: _compile_field(name, expression) for name, expression in rules}
    return create_model(  # type: ignore[call-overload]
        "RecordRules",
        __config__=ConfigDict(extra="ignore"),
        **fields,
    )


class PipeRuleValidator:
    """Default :class:`~recordspine.protocols.RuleValidator` implementation."""

    def __init__(self) -> None:
        self._rules: dict[str, str] = {}
        self._record: dict[str, Any] = {}
        self._errors: dict[str, list[str]] = {}
        self._values: dict[str, Any] = {}

    def set_rules(self, rules: Mapping[str, str]) -> None:
        self._rules = dict(rules)

    def populate(self, record: Mapping[str, Any]) -> None:
        self._record = dict(record)
        self._errors = {}
        self._values = {}

    def is_valid(self) -> bool:
        model = compile_rules(tuple(sorted(self._rules.items())))
        candidate = {k: v for k, v in self._record.items() if k in self._rules}
        try:
            validated = model.model_validate(candidate)
        except PydanticValidationError as exc:
            self._errors = self._collect_errors(exc)
            return False

        values = dict(self._record)
        for name in validated.model_fields_set:
            values[name] = getattr(validated, name)
        self._values = values
        return True

    def get_errors(self) -> dict[str, list[str]]:
        return {k: list(v) for k, v in self._errors.items()}

    def get_values(self) -> dict[str, Any]:
        return dict(self._values)

    @staticmethod
    def _collect_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            field_name = str(error["loc"][0]) if error["loc"] else "__record__"
            errors.setdefault(field_name, []).append(f"{field_name}: {error['msg']}")
        return errors


__all__ = [
    "parse_rules",
    "compile_rules",
    "PipeRuleValidator",
]

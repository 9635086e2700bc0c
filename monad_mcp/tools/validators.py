"""Declarative argument validation for Monad MCP tools."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

STRING = "string"
NUMERIC_STRING = "numeric-string"
BOOLEAN = "boolean"

KINDS = (STRING, NUMERIC_STRING, BOOLEAN)

AMOUNT_PATTERN = r"^[0-9]+(\.[0-9]+)?$"

# Plain ASCII decimal or exponent notation.
NUMBER_RE = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


class ValidationError(ValueError):
    """Base class for argument validation failures."""

    def __init__(self, message: str, *, field_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field_name = field_name


class MissingFieldError(ValidationError):
    """A required field is absent or empty."""


class NotANumberError(ValidationError):
    """A numeric-string field does not parse as a number."""


class ConstraintViolationError(ValidationError):
    """A declared constraint rejected the value."""


class PatternMismatchError(ValidationError):
    """A declared pattern did not match the raw value."""


@dataclass(frozen=True, slots=True)
class Constraint:
    """
    A predicate and the message reported when it fails.

    Constraints with ``on_raw`` set test the raw string; the others test the
    parsed value (a ``Decimal`` for numeric-string fields).
    """

    predicate: Callable[[Any], bool]
    message: str
    on_raw: bool = False
    error: type = ConstraintViolationError
    json_schema: Tuple[Tuple[str, Any], ...] = ()


def greater_than(bound: Any, message: str) -> Constraint:
    limit = Decimal(str(bound))
    return Constraint(lambda value: value > limit, message)


def at_most(bound: Any, message: str) -> Constraint:
    limit = Decimal(str(bound))
    return Constraint(lambda value: value <= limit, message)


def max_decimals(places: int, message: str) -> Constraint:
    def _check(value: Decimal) -> bool:
        exponent = value.as_tuple().exponent
        return not isinstance(exponent, int) or -exponent <= places

    return Constraint(_check, message)


def matches(pattern: str, message: str) -> Constraint:
    compiled = re.compile(pattern)
    return Constraint(
        lambda raw: bool(compiled.fullmatch(raw)),
        message,
        on_raw=True,
        error=PatternMismatchError,
        json_schema=(("pattern", pattern),),
    )


@dataclass(frozen=True, slots=True)
class FieldSpec:
    kind: str = STRING
    required: bool = True
    constraints: Tuple[Constraint, ...] = ()
    description: str = ""
    missing_message: Optional[str] = None
    invalid_message: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"Unsupported field kind: {self.kind}")


Schema = Mapping[str, FieldSpec]


def _is_missing(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and raw.strip() == "")


def _parse_decimal(name: str, spec: FieldSpec, raw: str) -> Decimal:
    message = spec.invalid_message or f"{name} must be a valid number"
    text = raw.strip()
    # Decimal() alone would also take "1_0", "NaN" and non-ASCII digits.
    if not NUMBER_RE.fullmatch(text):
        raise NotANumberError(message, field_name=name)
    try:
        return Decimal(text)
    except InvalidOperation:
        raise NotANumberError(message, field_name=name) from None


def _parse_boolean(name: str, spec: FieldSpec, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in {"true", "false"}:
        return raw.strip().lower() == "true"
    raise ConstraintViolationError(spec.invalid_message or f"{name} must be a boolean", field_name=name)


def validate_field(name: str, spec: FieldSpec, raw: Any) -> Any:
    """
    Validate one raw value against its field spec.

    Returns the typed value (``str``, ``Decimal`` or ``bool``). Raises the
    ValidationError subclass of the first unmet check, in declaration order.
    """
    if _is_missing(raw):
        raise MissingFieldError(spec.missing_message or f"{name} is required", field_name=name)

    if spec.kind == BOOLEAN:
        value = _parse_boolean(name, spec, raw)
        for constraint in spec.constraints:
            if not constraint.predicate(value):
                raise constraint.error(constraint.message, field_name=name)
        return value

    if isinstance(raw, (int, float)) and not isinstance(raw, bool) and spec.kind == NUMERIC_STRING:
        raw = str(raw)
    if not isinstance(raw, str):
        raise ConstraintViolationError(spec.invalid_message or f"{name} must be a string", field_name=name)

    parsed: Optional[Decimal] = None
    for constraint in spec.constraints:
        if constraint.on_raw:
            subject: Any = raw
        elif spec.kind == NUMERIC_STRING:
            if parsed is None:
                parsed = _parse_decimal(name, spec, raw)
            subject = parsed
        else:
            subject = raw
        if not constraint.predicate(subject):
            raise constraint.error(constraint.message, field_name=name)

    if spec.kind == NUMERIC_STRING:
        return parsed if parsed is not None else _parse_decimal(name, spec, raw)
    return raw


def validate_arguments(schema: Schema, raw_args: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate every declared field in order; stop at the first failure."""
    validated: Dict[str, Any] = {}
    for name, spec in schema.items():
        raw = raw_args.get(name)
        if not spec.required and _is_missing(raw):
            continue
        validated[name] = validate_field(name, spec, raw)
    return validated


def to_json_schema(schema: Schema) -> Dict[str, Any]:
    """Render a field mapping as the JSON Schema advertised by tools/list."""
    properties: Dict[str, Any] = {}
    required: List[str] = []
    for name, spec in schema.items():
        prop: Dict[str, Any] = {"type": "boolean" if spec.kind == BOOLEAN else "string"}
        if spec.description:
            prop["description"] = spec.description
        if spec.required and spec.kind != BOOLEAN:
            prop["minLength"] = 1
        for constraint in spec.constraints:
            prop.update(dict(constraint.json_schema))
        properties[name] = prop
        if spec.required:
            required.append(name)
    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }

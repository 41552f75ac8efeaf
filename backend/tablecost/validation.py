from __future__ import annotations
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from tablecost.time_utils import parse_iso_datetime
from tablecost.money_utils import CENT, QUANTITY_STEP, to_decimal

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from sqlalchemy import JSON, Boolean, Integer, Numeric, String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta

from tablecost.models import RECURRENCE_FREQUENCIES


# Largest value a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal("99999999.99")


class ValidationError(ValueError):
    """400-level input problem, carrying one entry per offending field."""

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        return {"error": str(self), "errors": self.errors}


class FieldErrors:
    """Accumulates {"field", "message"} entries so one response reports every problem."""

    def __init__(self) -> None:
        self.items: list[dict] = []

    def add(self, field_name: str, message: str) -> None:
        self.items.append({"field": field_name, "message": message})

    def __bool__(self) -> bool:
        return bool(self.items)


Rule = Callable[[dict, FieldErrors], None]


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - rules: entity business rules run on the coerced patch
    - label: entity name used in the top-level error message
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    rules: tuple[Rule, ...] = ()
    label: str = "payload"


class _CoercionError(ValueError):
    pass


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_int(name: str, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise _CoercionError(f"{name} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise _CoercionError(f"{name} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise _CoercionError(f"{name} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise _CoercionError(f"{name} must be an integer")
    # Reject floats explicitly
    if isinstance(value, float):
        raise _CoercionError(f"{name} must be an integer, not a decimal")
    raise _CoercionError(f"{name} must be an integer")


def _coerce_decimal(name: str, value: Any, step: Optional[Decimal] = None) -> Decimal:
    """Parse a number; with `step`, round half up to the precision it is stored at."""
    try:
        result = to_decimal(value)
    except ValueError:
        raise _CoercionError(f"{name} must be a number")
    if step is not None:
        result = result.quantize(step, rounding=ROUND_HALF_UP)
    if abs(result) > MAX_AMOUNT:
        raise _CoercionError(f"{name} cannot exceed {MAX_AMOUNT}")
    return result


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        return _coerce_int(col.key, value)

    # Decimals (currency) - numbers or numeric strings, rounded to the column scale
    if isinstance(coltype, Numeric):
        step = Decimal(1).scaleb(-coltype.scale) if coltype.scale is not None else None
        return _coerce_decimal(col.key, value, step)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise _CoercionError(f"{col.key} must be true or false")

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise _CoercionError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise _CoercionError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise _CoercionError(f"{col.key} must be a datetime")

    # JSON lists; element structure is checked by entity rules
    if isinstance(coltype, JSON):
        if not isinstance(value, list):
            raise _CoercionError(f"{col.key} must be a list")
        return value

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list, bool)):
            raise _CoercionError(f"{col.key} must be a string")
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    - the policy's entity rules
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)

    Raises ValidationError listing every problem found.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError(f"Invalid {policy.label} data", [{"field": "", "message": "Invalid JSON payload"}])

    errors = FieldErrors()

    if not partial:
        for f in sorted(policy.required_on_create):
            if f not in payload:
                errors.add(f, f"{f} is required")

    cols = _columns_by_key(model)
    patch: dict = {}

    for k, raw in payload.items():
        # Reject unknown / non-writable fields
        if k not in policy.writable_fields or k not in cols:
            errors.add(k, f"Field not allowed: {k}")
            continue

        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                errors.add(k, f"{k} cannot be null")
                continue
            patch[k] = None
            continue

        try:
            val = _coerce_value(col, raw)
        except _CoercionError as e:
            errors.add(k, str(e))
            continue

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                errors.add(k, f"{k} cannot be blank")
                continue

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                errors.add(k, f"{k} exceeds max length {col.type.length}")
                continue

        patch[k] = val

    for rule in policy.rules:
        rule(patch, errors)

    if errors:
        raise ValidationError(f"Invalid {policy.label} data", errors.items)

    return patch


# ----------------------------------------------------------------------
# Entity rules: small and centralized, run after column coercion
# ----------------------------------------------------------------------

def _require_positive(patch: dict, errors: FieldErrors, name: str) -> None:
    value = patch.get(name)
    if value is not None and value <= 0:
        errors.add(name, f"{name} must be > 0")


def _require_non_negative(patch: dict, errors: FieldErrors, name: str) -> None:
    value = patch.get(name)
    if value is not None and value < 0:
        errors.add(name, f"{name} must be >= 0")


def _check_list_entries(
    entries: list,
    errors: FieldErrors,
    list_name: str,
    id_field: str,
    quantity_integer: bool,
    money_fields: tuple[str, ...] = (),
) -> None:
    for i, entry in enumerate(entries):
        prefix = f"{list_name}[{i}]"
        if not isinstance(entry, dict):
            errors.add(prefix, f"{prefix} must be an object")
            continue

        for key in (id_field, "quantity", *money_fields):
            if key not in entry or entry[key] is None:
                errors.add(f"{prefix}.{key}", f"{key} is required")

        if entry.get(id_field) is not None:
            try:
                if _coerce_int(id_field, entry[id_field]) <= 0:
                    errors.add(f"{prefix}.{id_field}", f"{id_field} must be > 0")
            except _CoercionError as e:
                errors.add(f"{prefix}.{id_field}", str(e))

        if entry.get("quantity") is not None:
            try:
                if quantity_integer:
                    quantity = _coerce_int("quantity", entry["quantity"])
                else:
                    quantity = _coerce_decimal("quantity", entry["quantity"], QUANTITY_STEP)
                if quantity <= 0:
                    errors.add(f"{prefix}.quantity", "quantity must be > 0")
            except _CoercionError as e:
                errors.add(f"{prefix}.quantity", str(e))

        for key in money_fields:
            if entry.get(key) is None:
                continue
            try:
                if _coerce_decimal(key, entry[key], CENT) < 0:
                    errors.add(f"{prefix}.{key}", f"{key} must be >= 0")
            except _CoercionError as e:
                errors.add(f"{prefix}.{key}", str(e))


def enforce_rules_ingredient(patch: dict, errors: FieldErrors) -> None:
    _require_non_negative(patch, errors, "cost_per_unit")


def enforce_rules_recipe(patch: dict, errors: FieldErrors) -> None:
    servings = patch.get("servings")
    if servings is not None and servings < 1:
        errors.add("servings", "servings must be >= 1")

    lines = patch.get("ingredients")
    if lines is not None:
        if not lines:
            errors.add("ingredients", "ingredients must contain at least one entry")
        _check_list_entries(lines, errors, "ingredients", "ingredient_id", quantity_integer=False)


def enforce_rules_product(patch: dict, errors: FieldErrors) -> None:
    _require_positive(patch, errors, "price")
    _require_positive(patch, errors, "cost")
    _require_non_negative(patch, errors, "stock")
    _require_non_negative(patch, errors, "min_stock")


def enforce_rules_sale(patch: dict, errors: FieldErrors) -> None:
    _require_positive(patch, errors, "total_amount")
    _require_non_negative(patch, errors, "tax_amount")

    items = patch.get("items")
    if items is not None:
        _check_list_entries(
            items, errors, "items", "product_id",
            quantity_integer=True, money_fields=("price", "total"),
        )


def enforce_rules_operational_cost(patch: dict, errors: FieldErrors) -> None:
    _require_positive(patch, errors, "amount")

    frequency = patch.get("frequency")
    if frequency is not None and frequency not in RECURRENCE_FREQUENCIES:
        errors.add("frequency", f"frequency must be one of: {', '.join(RECURRENCE_FREQUENCIES)}")

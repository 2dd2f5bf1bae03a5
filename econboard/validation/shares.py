"""Share validation: bounds, sums, sub-sector taxonomy and period order.

Pure functions with no state. The same functions back the wizard step
validators and the record gateway, so both sides apply one rule table
(``econboard.validation.rules``).

Single checks return ``Violation | None``; composites return a list that is
empty when the input is valid. Sums are compared with an absolute tolerance,
never with float equality.
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from econboard.errors import Violation, ViolationKind
from econboard.models.common import Sector
from econboard.validation.rules import (
    AUXILIARY_FIELDS,
    PARTITION_FIELDS,
    PERCENT_MAX,
    PERCENT_MIN,
    QUARTERS,
    SHARE_TOLERANCE,
    SNAPSHOT_PARTITION_FIELDS,
    SUBSECTOR_FIELDS,
    SUBSECTOR_REQUIRED,
    SUBSECTOR_TAXONOMY,
    YEAR_MAX,
    YEAR_MIN,
)

# Slack for binary representation error at the tolerance boundary.
_EPS = 1e-9


def _label(field: str) -> str:
    return field.replace("_", " ").replace(".", " ")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def percent_of(total: float, share: float) -> float:
    """Amount represented by ``share`` percent of ``total``."""
    return total * share / 100


def share_amounts(record: Any, fields: Iterable[str]) -> dict[str, float]:
    """Amount of ``record.total_gdp`` behind each percentage field that is set."""
    amounts = {}
    for name in fields:
        share = getattr(record, name)
        if share is not None:
            amounts[name] = percent_of(record.total_gdp, share)
    return amounts


# ---------------------------------------------------------------------------
# Single checks
# ---------------------------------------------------------------------------


def validate_required(value: Any, *, field: str) -> Violation | None:
    if _is_blank(value):
        return Violation(
            kind=ViolationKind.MISSING_FIELD,
            field=field,
            message=f"{_label(field)} is required.",
        )
    return None


def parse_number(value: Any, *, field: str) -> tuple[float | None, Violation | None]:
    """Read a numeric form input (number or numeric string).

    Booleans, non-numeric text and non-finite values (inf, nan) are MALFORMED.
    """
    malformed = Violation(ViolationKind.MALFORMED, field, f"{_label(field)} must be a finite number.")
    if isinstance(value, bool):
        return None, malformed
    try:
        number = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except (ValueError, OverflowError):
        return None, malformed
    if not math.isfinite(number):
        return None, malformed
    return number, None


def validate_bounds(
    value: float,
    minimum: float = PERCENT_MIN,
    maximum: float = PERCENT_MAX,
    *,
    field: str = "value",
) -> Violation | None:
    """OUT_OF_RANGE unless ``minimum <= value <= maximum`` (NaN is out of range)."""
    if not (minimum <= value <= maximum):
        return Violation(
            kind=ViolationKind.OUT_OF_RANGE,
            field=field,
            message=f"{_label(field)} must be between {minimum:g} and {maximum:g} (got {value:g}).",
        )
    return None


def validate_positive(value: float, *, field: str) -> Violation | None:
    if not value > 0:
        return Violation(
            kind=ViolationKind.OUT_OF_RANGE,
            field=field,
            message=f"{_label(field)} must be greater than 0 (got {value:g}).",
        )
    return None


def validate_non_negative(value: float, *, field: str) -> Violation | None:
    if not value >= 0:
        return Violation(
            kind=ViolationKind.OUT_OF_RANGE,
            field=field,
            message=f"{_label(field)} must not be negative (got {value:g}).",
        )
    return None


def validate_sum_to_100(
    parts: Iterable[float],
    tolerance: float = SHARE_TOLERANCE,
    *,
    field: str = "shares",
) -> Violation | None:
    """SUM_MISMATCH unless ``|sum(parts) - 100| <= tolerance``.

    The violation carries the computed sum so the user can correct it.
    """
    actual = math.fsum(parts)
    if abs(actual - 100) > tolerance + _EPS:
        return Violation(
            kind=ViolationKind.SUM_MISMATCH,
            field=field,
            message=f"{_label(field)} must sum to 100% (currently {actual:g}%).",
            actual_sum=actual,
        )
    return None


def validate_sum_at_most(
    parts: Iterable[float],
    limit: float = PERCENT_MAX,
    tolerance: float = SHARE_TOLERANCE,
    *,
    field: str = "shares",
) -> Violation | None:
    """SUM_MISMATCH when a partial allocation already exceeds ``limit``."""
    actual = math.fsum(parts)
    if actual > limit + tolerance + _EPS:
        return Violation(
            kind=ViolationKind.SUM_MISMATCH,
            field=field,
            message=f"{_label(field)} cannot exceed {limit:g}% combined (currently {actual:g}%).",
            actual_sum=actual,
        )
    return None


def validate_subsector_keys(
    mapping: Mapping[str, Any] | None,
    whitelist: Iterable[str],
    *,
    field: str = "sub_shares",
    required: bool = False,
) -> Violation | None:
    """INVALID_KEY for keys outside ``whitelist``, in input order.

    A missing or empty map passes only when ``required`` is false.
    """
    if not mapping:
        if required:
            return Violation(
                kind=ViolationKind.MISSING_FIELD,
                field=field,
                message=f"{_label(field)} percentages are required.",
            )
        return None
    allowed = frozenset(whitelist)
    invalid = tuple(key for key in mapping if key not in allowed)
    if invalid:
        return Violation(
            kind=ViolationKind.INVALID_KEY,
            field=field,
            message=f"Invalid {_label(field)}: {', '.join(invalid)}.",
            keys=invalid,
        )
    return None


def validate_period_order(last_year: int, current_year: int, *, field: str = "current_year") -> Violation | None:
    """ORDERING_VIOLATION unless the current period is strictly later."""
    if not current_year > last_year:
        return Violation(
            kind=ViolationKind.ORDERING_VIOLATION,
            field=field,
            message=(
                f"Current period ({current_year}) must be after the previous period ({last_year})."
            ),
        )
    return None


def validate_append_only(existing: Sequence[Any], updated: Sequence[Any], *, field: str) -> Violation | None:
    """ORDERING_VIOLATION unless ``updated`` starts with every ``existing`` entry, in order."""
    if list(updated[: len(existing)]) != list(existing):
        return Violation(
            kind=ViolationKind.ORDERING_VIOLATION,
            field=field,
            message=f"{_label(field)} is append-only; existing entries must be kept in order.",
        )
    return None


# ---------------------------------------------------------------------------
# Field checks: required -> numeric -> bounds, first failure wins
# ---------------------------------------------------------------------------


def check_percentage(value: Any, *, field: str, required: bool = True) -> list[Violation]:
    if _is_blank(value):
        return [validate_required(value, field=field)] if required else []
    number, bad = parse_number(value, field=field)
    if bad is not None:
        return [bad]
    violation = validate_bounds(number, field=field)
    return [violation] if violation else []


def check_positive(value: Any, *, field: str) -> list[Violation]:
    if _is_blank(value):
        return [validate_required(value, field=field)]
    number, bad = parse_number(value, field=field)
    if bad is not None:
        return [bad]
    violation = validate_positive(number, field=field)
    return [violation] if violation else []


def check_non_negative(value: Any, *, field: str) -> list[Violation]:
    if _is_blank(value):
        return [validate_required(value, field=field)]
    number, bad = parse_number(value, field=field)
    if bad is not None:
        return [bad]
    violation = validate_non_negative(number, field=field)
    return [violation] if violation else []


def check_year(value: Any, *, field: str) -> list[Violation]:
    if _is_blank(value):
        return [validate_required(value, field=field)]
    number, bad = parse_number(value, field=field)
    if bad is not None:
        return [bad]
    if not number.is_integer():
        return [Violation(ViolationKind.MALFORMED, field, f"{_label(field)} must be a whole year.")]
    violation = validate_bounds(number, YEAR_MIN, YEAR_MAX, field=field)
    return [violation] if violation else []


def check_quarter(value: Any, *, field: str) -> list[Violation]:
    if _is_blank(value):
        return [validate_required(value, field=field)]
    if str(value) not in QUARTERS:
        return [Violation(
            kind=ViolationKind.OUT_OF_RANGE,
            field=field,
            message=f"{_label(field)} must be one of {', '.join(QUARTERS)}.",
        )]
    return []


def check_period(year: Any, quarter: Any, amount: Any, *, prefix: str) -> list[Violation]:
    """A (year, quarter, amount) observation: year in range, quarter chosen, amount > 0."""
    return [
        *check_year(year, field=f"{prefix}.year"),
        *check_quarter(quarter, field=f"{prefix}.quarter"),
        *check_positive(amount, field=f"{prefix}.amount"),
    ]


def check_subsector(sector: Sector, mapping: Mapping[str, Any] | None) -> list[Violation]:
    """Taxonomy membership (with the sector's sub-detail policy) and value bounds."""
    field = SUBSECTOR_FIELDS[sector]
    violation = validate_subsector_keys(
        mapping,
        SUBSECTOR_TAXONOMY[sector],
        field=field,
        required=SUBSECTOR_REQUIRED[sector],
    )
    if violation is not None:
        return [violation]
    violations: list[Violation] = []
    for key, value in (mapping or {}).items():
        violations.extend(check_percentage(value, field=f"{field}.{key}"))
    return violations


def _numbers(record: Any, fields: Iterable[str]) -> list[float] | None:
    """Field values as floats, or None when any is missing or non-numeric."""
    values: list[float] = []
    for name in fields:
        raw = getattr(record, name)
        if _is_blank(raw):
            return None
        number, bad = parse_number(raw, field=name)
        if bad is not None:
            return None
        values.append(number)
    return values


# ---------------------------------------------------------------------------
# Record composites
# ---------------------------------------------------------------------------


def validate_share_record(record: Any) -> list[Violation]:
    """Every rule for a sector-share or sector-growth record.

    Bounds on each share, sum-to-100 over services/industry/agriculture/
    taxes, taxonomy and bounds on each sub-share map, and bounds on the
    optional auxiliary percentages where the record has them. Sub-shares
    are not checked against their parent share.
    """
    violations = check_non_negative(record.total_gdp, field="total_gdp")
    for name in PARTITION_FIELDS:
        violations.extend(check_percentage(getattr(record, name), field=name))

    parts = _numbers(record, PARTITION_FIELDS)
    if parts is not None:
        mismatch = validate_sum_to_100(parts, field="sector_shares")
        if mismatch is not None:
            violations.append(mismatch)

    for sector, name in SUBSECTOR_FIELDS.items():
        violations.extend(check_subsector(sector, getattr(record, name)))

    for name in AUXILIARY_FIELDS:
        violations.extend(check_percentage(getattr(record, name, None), field=name, required=False))
    return violations


def validate_sector_snapshot(record: Any) -> list[Violation]:
    violations = [
        *check_year(record.year, field="year"),
        *check_non_negative(record.total_gdp, field="total_gdp"),
    ]
    for name in SNAPSHOT_PARTITION_FIELDS:
        violations.extend(check_percentage(getattr(record, name), field=name))
    parts = _numbers(record, SNAPSHOT_PARTITION_FIELDS)
    if parts is not None:
        mismatch = validate_sum_to_100(parts, field="sector_shares")
        if mismatch is not None:
            violations.append(mismatch)
    return violations


def validate_period_amount(record: Any) -> list[Violation]:
    return check_period(record.year, record.quarter, record.amount_billion_rwf, prefix="period")


def validate_period_comparison(record: Any) -> list[Violation]:
    last, current = record.last_year, record.current_year
    violations = [
        *check_period(last.year, last.quarter, last.money, prefix="last_year"),
        *check_period(current.year, current.quarter, current.money, prefix="current_year"),
    ]
    for i, point in enumerate(record.trends):
        violations.extend(check_period(point.year, point.quarter, point.money, prefix=f"trends[{i}]"))
    if not violations:
        order = validate_period_order(last.year, current.year, field="current_year.year")
        if order is not None:
            violations.append(order)
    return violations


def validate_target(record: Any) -> list[Violation]:
    violations: list[Violation] = []
    missing = validate_required(record.target_name, field="target_name")
    if missing is not None:
        violations.append(missing)
    violations.extend(check_percentage(record.target_percentage, field="target_percentage", required=False))
    for i, point in enumerate(record.trend):
        violations.extend(check_year(point.year, field=f"trend[{i}].year"))
        violations.extend(check_percentage(point.percentage, field=f"trend[{i}].percentage"))
    for i, point in enumerate(record.map):
        violations.extend(check_year(point.year, field=f"map[{i}].year"))
        missing = validate_required(point.location, field=f"map[{i}].location")
        if missing is not None:
            violations.append(missing)
        violations.extend(check_percentage(point.poverty_rate, field=f"map[{i}].poverty_rate"))
    return violations

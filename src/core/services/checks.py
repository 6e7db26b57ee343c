"""Assert phase: the ordered battery of response checks.

Every check is a plain function ``(response, context) -> CheckResult``. The
battery in `CHECKS` runs in a fixed order and never short-circuits: a check
that fails (or blows up on a malformed payload) produces a failed result and
the next check still runs. `validate_response` is the only entry-point the
pipeline needs.
"""

from __future__ import annotations

import functools
import logging
from decimal import Decimal
from typing import Any, Callable

from pydantic import ValidationError
from pydantic_core import ErrorDetails

from core.domain.context import SharedContext
from core.domain.models import (
    PROVIDERS,
    TOP_LEVEL_KEYS,
    CheckResult,
    ResponseCoordinates,
    ResponseLinks,
    ServiceResponse,
)

logger = logging.getLogger(__name__)

SUCCESS_STATUS = 200
LATENCY_CEILING_MS = 10_000
COORDINATE_TOLERANCE = 0.0001
COORDINATE_PREFIX_LENGTH = 8
COORDINATE_LINK_PROVIDERS: tuple[str, ...] = ("google", "apple")

Check = Callable[[ServiceResponse, SharedContext], CheckResult]


class _PayloadError(ValueError):
    """The response body cannot be read as the JSON object a check needs."""


def _payload(response: ServiceResponse) -> dict[str, Any]:
    data = response.parsed_json()
    if not isinstance(data, dict):
        raise _PayloadError("response body is not a JSON object")
    return data


def _coordinates(payload: dict[str, Any]) -> dict[str, Any]:
    coordinates = payload.get("coordinates")
    if not isinstance(coordinates, dict):
        raise _PayloadError("response has no 'coordinates' object")
    return coordinates


def _is_valid(payload: dict[str, Any]) -> bool:
    return _coordinates(payload).get("valid") is True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def coordinate_text(value: float) -> str:
    """Decimal string form of a coordinate, as map providers print it.

    Positional notation, no exponent and no trailing ``.0``:
    ``48.0 -> "48"``, ``1e-05 -> "0.00001"``, ``48.8566 -> "48.8566"``.
    """

    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _result(name: str, problems: list[str], *, ok_message: str | None = None) -> CheckResult:
    if problems:
        return CheckResult(name=name, passed=False, message="; ".join(problems))
    return CheckResult(name=name, passed=True, message=ok_message)


def _skipped(name: str, reason: str) -> CheckResult:
    return CheckResult(name=name, passed=True, skipped=True, message=f"skipped: {reason}")


def _check(name: str) -> Callable[[Callable[..., CheckResult]], Check]:
    """Give a check its report name; payload errors fail the check."""

    def decorate(func: Callable[..., CheckResult]) -> Check:
        @functools.wraps(func)
        def wrapper(response: ServiceResponse, context: SharedContext) -> CheckResult:
            try:
                return func(name, response, context)
            except _PayloadError as exc:
                return CheckResult(name=name, passed=False, message=str(exc))

        wrapper.check_name = name  # type: ignore[attr-defined]
        return wrapper

    return decorate


def name_of(check: Check) -> str:
    return getattr(check, "check_name", getattr(check, "__name__", "check"))


# ---------------------------------------------------------------------------
# Checks (in execution order)
# ---------------------------------------------------------------------------


@_check("Status code is 200")
def check_status(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    if response.status_code != SUCCESS_STATUS:
        return _result(name, [f"expected status {SUCCESS_STATUS}, got {response.status_code}"])
    return _result(name, [])


@_check("Response time is acceptable")
def check_latency(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    elapsed = response.elapsed_ms
    if elapsed >= LATENCY_CEILING_MS:
        return _result(name, [f"response took {elapsed:.0f} ms, expected below {LATENCY_CEILING_MS} ms"])
    return _result(name, [], ok_message=f"{elapsed:.0f} ms")


@_check("Response has valid JSON structure")
def check_structure(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    payload = _payload(response)

    problems: list[str] = []
    missing = [key for key in TOP_LEVEL_KEYS if key not in payload]
    unexpected = sorted(key for key in payload if key not in TOP_LEVEL_KEYS)
    if missing:
        problems.append(f"missing keys: {', '.join(missing)}")
    if unexpected:
        problems.append(f"unexpected keys: {', '.join(unexpected)}")
    return _result(name, problems)


@_check("Coordinates object validation")
def check_coordinates_shape(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    try:
        ResponseCoordinates.model_validate(_payload(response).get("coordinates"))
    except ValidationError as exc:
        return _result(name, [_coordinate_problem(error) for error in exc.errors()])
    return _result(name, [])


def _coordinate_problem(error: ErrorDetails) -> str:
    field = ".".join(str(part) for part in error["loc"]) or "coordinates"
    value = error["input"]
    kind = error["type"]
    if kind == "model_type":
        return f"coordinates must be an object, got {value!r}"
    if kind == "missing":
        return f"{field} is missing"
    if kind == "float_type":
        return f"{field} must be a number, got {value!r}"
    if kind == "bool_type":
        return f"{field} must be a boolean, got {value!r}"
    return f"{field} {value}: {error['msg']}"


@_check("Expected coordinate values match")
def check_expected_coordinates(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    expected_lat = context.expected_lat
    expected_lon = context.expected_lon
    if expected_lat is None or expected_lon is None:
        return _skipped(name, "no expected coordinates")

    coordinates = _coordinates(_payload(response))
    lat = coordinates.get("lat")
    lon = coordinates.get("lon")

    problems: list[str] = []
    if coordinates.get("valid") is not True:
        problems.append(f"expected valid coordinates, got valid={coordinates.get('valid')!r}")
    if not _is_number(lat) or abs(lat - expected_lat) > COORDINATE_TOLERANCE:
        problems.append(f"Expected lat {expected_lat}, got {lat}")
    if not _is_number(lon) or abs(lon - expected_lon) > COORDINATE_TOLERANCE:
        problems.append(f"Expected lon {expected_lon}, got {lon}")

    if not problems:
        logger.info("Coordinates match: %s, %s", lat, lon)
    return _result(name, problems, ok_message=f"{lat}, {lon}")


@_check("Name field validation")
def check_name(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    expected = context.expected_name
    if context.skip_name_validation:
        return _skipped(name, "name validation disabled")
    if not expected or not expected.strip():
        return _skipped(name, "no expected name")

    actual = _payload(response).get("name")
    if actual is None:
        warning = f'Expected name "{expected}" but got null'
        logger.warning("%s", warning)
        return CheckResult(name=name, passed=True, message=warning, warnings=[warning])
    if not isinstance(actual, str):
        return _result(name, [f"name must be a string or null, got {actual!r}"])
    if not _contains(actual, expected):
        return _result(name, [f'Expected name to contain "{expected}", got "{actual}"'])
    return _result(name, [])


@_check("Address field validation")
def check_address(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    actual = _payload(response).get("address")
    if not isinstance(actual, str):
        return _result(name, [f"address must be a string, got {actual!r}"])
    if not actual.strip():
        return _result(name, ["address must not be empty"])

    expected = context.expected_address
    if context.skip_address_validation or not expected or not expected.strip():
        return _result(name, [])
    if not _contains(actual, expected):
        return _result(name, [f'Address "{actual}" should contain "{expected}"'])
    return _result(name, [])


@_check("Links object validation")
def check_links(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    payload = _payload(response)
    if not _is_valid(payload):
        return _skipped(name, "coordinates are not valid")

    try:
        ResponseLinks.model_validate(payload.get("links"))
    except ValidationError as exc:
        return _result(name, _link_problems(exc.errors()))
    logger.info("All %d link providers present", len(PROVIDERS))
    return _result(name, [])


def _link_problems(errors: list[ErrorDetails]) -> list[str]:
    missing: list[str] = []
    invalid: list[str] = []
    unexpected: list[str] = []
    for error in errors:
        if not error["loc"]:
            return [f"links must be an object, got {error['input']!r}"]
        provider = str(error["loc"][0])
        if error["type"] == "missing":
            missing.append(provider)
        elif error["type"] == "extra_forbidden":
            unexpected.append(provider)
        else:
            invalid.append(f"{provider} link should be a valid URL: {error['input']}")

    problems: list[str] = []
    if missing:
        problems.append(f"missing providers: {', '.join(missing)}")
    problems.extend(invalid)
    if unexpected:
        problems.append(f"unexpected providers: {', '.join(sorted(unexpected))}")
    return problems


@_check("Links contain correct coordinates")
def check_link_coordinates(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    payload = _payload(response)
    if not _is_valid(payload):
        return _skipped(name, "coordinates are not valid")

    coordinates = _coordinates(payload)
    lat = coordinates.get("lat")
    lon = coordinates.get("lon")
    if not _is_number(lat) or not _is_number(lon):
        return _result(name, [f"coordinates are not numeric: {lat!r}, {lon!r}"])
    links = payload.get("links")
    if not isinstance(links, dict):
        return _result(name, [f"links must be an object, got {links!r}"])

    lat_prefix = coordinate_text(lat)[:COORDINATE_PREFIX_LENGTH]
    lon_prefix = coordinate_text(lon)[:COORDINATE_PREFIX_LENGTH]

    problems: list[str] = []
    for provider in COORDINATE_LINK_PROVIDERS:
        url = links.get(provider)
        if not url:
            continue
        if not isinstance(url, str) or lat_prefix not in url or lon_prefix not in url:
            problems.append(f"{provider.capitalize()} link should contain coordinates: {url}")
    return _result(name, problems)


@_check("Response data integrity")
def check_integrity(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    payload = _payload(response)

    problems: list[str] = []
    if len(payload) != len(TOP_LEVEL_KEYS):
        problems.append(f"expected {len(TOP_LEVEL_KEYS)} top-level keys, got {len(payload)}")
    if _is_valid(payload):
        if not payload.get("address"):
            problems.append("address must not be empty when coordinates are valid")
        links = payload.get("links")
        count = len(links) if isinstance(links, dict) else 0
        if count != len(PROVIDERS):
            problems.append(f"expected {len(PROVIDERS)} links, got {count}")
    return _result(name, problems)


@_check("Log test results")
def check_summary(name: str, response: ServiceResponse, context: SharedContext) -> CheckResult:
    return CheckResult(name=name, passed=True, message=summary_line(response, context))


def summary_line(response: ServiceResponse, context: SharedContext) -> str:
    """Human-readable one-line summary of the response for the report."""

    data = response.parsed_json()
    if not isinstance(data, dict):
        return f"Test Results for: {context.description} | no JSON body (status {response.status_code})"

    coordinates = data.get("coordinates") if isinstance(data.get("coordinates"), dict) else {}
    links = data.get("links") if isinstance(data.get("links"), dict) else {}
    return (
        f"Test Results for: {context.description}"
        f" | Valid: {coordinates.get('valid')}"
        f" | Coordinates: {coordinates.get('lat')}, {coordinates.get('lon')}"
        f" | Name: {data.get('name')}"
        f" | Address: {data.get('address')}"
        f" | Links count: {len(links)}"
    )


CHECKS: tuple[Check, ...] = (
    check_status,
    check_latency,
    check_structure,
    check_coordinates_shape,
    check_expected_coordinates,
    check_name,
    check_address,
    check_links,
    check_link_coordinates,
    check_integrity,
    check_summary,
)


def run_check(check: Check, response: ServiceResponse, context: SharedContext) -> CheckResult:
    """Run one check; any exception becomes a failed result for that check only."""

    try:
        return check(response, context)
    except Exception as exc:
        logger.debug("Check %s raised", name_of(check), exc_info=True)
        return CheckResult(
            name=name_of(check),
            passed=False,
            message=f"{type(exc).__name__}: {exc}",
        )


def validate_response(
    response: ServiceResponse,
    context: SharedContext,
    checks: tuple[Check, ...] = CHECKS,
) -> list[CheckResult]:
    """Run every check in order against `response` and return all results."""

    return [run_check(check, response, context) for check in checks]

"""
Movie Record Codec

Converts between ``Movie`` records and DynamoDB attribute maps, and between
the tagged ``AttributeValue`` variants and the boto3 low-level wire format.

Number convention: every number is written in canonical base-10 form with no
exponent and no trailing zeros (``4.0`` -> ``"4"``, ``2.40`` -> ``"2.4"``).
Floats are converted through their shortest ``repr``, so decoding the token
gives back exactly the same float.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .exceptions import DecodeError
from .models import (
    AttributeMap,
    AttributeValue,
    BoolValue,
    Movie,
    NullValue,
    NumberValue,
    StringValue,
)

logger = logging.getLogger(__name__)

_META = Movie.Meta

# Magnitude range of the DynamoDB Number type
_MAX_MAGNITUDE = Decimal("1E+126")
_MIN_MAGNITUDE = Decimal("1E-130")


# =============================================================================
# Numbers
# =============================================================================

def canonical_number(value: Union[int, float, Decimal]) -> str:
    """Render a number the way it is stored in an ``N`` attribute.

    Args:
        value: int, float or Decimal (bools are rejected)

    Returns:
        Base-10 string without exponent or trailing zeros

    Raises:
        ValueError: For bools, non-finite values and magnitudes outside
            1E-130 to 1E+126
    """
    if isinstance(value, bool):
        raise ValueError("Booleans are not numbers in DynamoDB; use BOOL")
    if isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        number = Decimal(repr(value))
    elif isinstance(value, Decimal):
        number = value
    else:
        raise ValueError(f"Unsupported number type: {type(value).__name__}")

    if not number.is_finite():
        raise ValueError(f"DynamoDB numbers must be finite, got {value!r}")
    if number.is_zero():
        return "0"
    if not _MIN_MAGNITUDE <= abs(number) < _MAX_MAGNITUDE:
        raise ValueError(f"{value!r} is outside the range of a DynamoDB number")
    return format(number.normalize(), "f")


def _parse_number(token: str, attribute: str) -> Decimal:
    try:
        number = Decimal(token)
    except (InvalidOperation, TypeError) as e:
        raise DecodeError(f"Attribute '{attribute}' is not a valid number: {token!r}", attribute, e) from e
    if not number.is_finite():
        raise DecodeError(f"Attribute '{attribute}' is not a finite number: {token!r}", attribute)
    return number


# =============================================================================
# Attribute Values
# =============================================================================

def to_attribute_value(value: Any) -> AttributeValue:
    """Wrap a Python literal in its attribute value variant.

    Raises:
        TypeError: If the value has no scalar DynamoDB representation
        ValueError: If a number is not finite
    """
    if value is None:
        return NullValue()
    if isinstance(value, bool):
        return BoolValue(value=value)
    if isinstance(value, (int, float, Decimal)):
        return NumberValue(value=canonical_number(value))
    if isinstance(value, str):
        return StringValue(value=value)
    raise TypeError(f"Cannot represent {type(value).__name__} as a DynamoDB attribute value")


def from_attribute_value(av: AttributeValue) -> Any:
    """Unwrap a variant to a plain Python value (numbers become int or float)."""
    if isinstance(av, NumberValue):
        number = _parse_number(av.value, "value")
        if number == number.to_integral_value():
            return int(number)
        return float(av.value)
    if isinstance(av, NullValue):
        return None
    return av.value


def to_wire(av: AttributeValue) -> Dict[str, Any]:
    """Variant -> boto3 low-level representation, e.g. ``{"N": "2015"}``."""
    return {av.tag: av.value}


def from_wire(raw: Dict[str, Any], attribute: str = "value") -> AttributeValue:
    """boto3 low-level representation -> variant.

    Raises:
        DecodeError: If the map is not a single supported tag
    """
    if not isinstance(raw, dict) or len(raw) != 1:
        raise DecodeError(f"Attribute '{attribute}' is not a tagged attribute value: {raw!r}", attribute)

    tag, value = next(iter(raw.items()))
    if tag == "N" and isinstance(value, str):
        return NumberValue(value=value)
    if tag == "S" and isinstance(value, str):
        return StringValue(value=value)
    if tag == "BOOL" and isinstance(value, bool):
        return BoolValue(value=value)
    if tag == "NULL":
        return NullValue()
    raise DecodeError(f"Attribute '{attribute}' has unsupported type '{tag}'", attribute)


def to_wire_map(attrs: AttributeMap) -> Dict[str, Dict[str, Any]]:
    """Attribute map -> boto3 ``Item``/``Key`` dictionary."""
    return {name: to_wire(av) for name, av in attrs.items()}


def from_wire_map(item: Dict[str, Dict[str, Any]], attributes: Optional[Iterable[str]] = None) -> AttributeMap:
    """boto3 ``Item`` dictionary -> attribute map.

    Args:
        item: Item as returned by the low-level client
        attributes: Only parse these attribute names (others are dropped)
    """
    wanted = set(attributes) if attributes is not None else None
    return {
        name: from_wire(raw, name)
        for name, raw in item.items()
        if wanted is None or name in wanted
    }


# =============================================================================
# Movie Encoding
# =============================================================================

def encode(movie: Movie) -> AttributeMap:
    """Encode a movie as an attribute map.

    Zero values are kept (``Rating`` 0 is written as ``N "0"``); only an unset
    plot is omitted.
    """
    attrs: AttributeMap = {
        "Year": NumberValue(value=canonical_number(movie.year)),
        "Title": StringValue(value=movie.title),
        "Rating": NumberValue(value=canonical_number(movie.rating)),
    }
    if movie.plot is not None:
        attrs["Plot"] = StringValue(value=movie.plot)
    return attrs


def _required(attrs: AttributeMap, name: str, variant: type) -> AttributeValue:
    av = attrs.get(name)
    if av is None or isinstance(av, NullValue):
        raise DecodeError(f"Required attribute '{name}' is missing", name)
    if not isinstance(av, variant):
        raise DecodeError(
            f"Attribute '{name}' must be {_META.attribute_types[name]}, got {av.tag}", name
        )
    return av


def _optional(attrs: AttributeMap, name: str, variant: type) -> Optional[AttributeValue]:
    av = attrs.get(name)
    if av is None or isinstance(av, NullValue):
        return None
    if not isinstance(av, variant):
        raise DecodeError(
            f"Attribute '{name}' must be {_META.attribute_types[name]}, got {av.tag}", name
        )
    return av


def decode(attrs: AttributeMap) -> Movie:
    """Decode an attribute map into a movie.

    An empty Title decodes successfully; deciding that it means "not found"
    is up to the caller. Only attributes present in ``attrs`` are passed to
    the model, so ``model_fields_set`` tells which optional attributes the
    item actually carried (a projected scan may leave Rating out).

    Raises:
        DecodeError: Missing Year/Title, or any attribute with the wrong type
    """
    year_av = _required(attrs, "Year", NumberValue)
    title_av = _required(attrs, "Title", StringValue)
    plot_av = _optional(attrs, "Plot", StringValue)
    rating_av = _optional(attrs, "Rating", NumberValue)

    year = _parse_number(year_av.value, "Year")
    if year != year.to_integral_value():
        raise DecodeError(f"Attribute 'Year' must be an integer, got {year_av.value!r}", "Year")

    fields: Dict[str, Any] = {"year": int(year), "title": title_av.value}
    if plot_av is not None:
        fields["plot"] = plot_av.value
    if rating_av is not None:
        _parse_number(rating_av.value, "Rating")
        fields["rating"] = float(rating_av.value)

    try:
        return Movie(**fields)
    except PydanticValidationError as e:
        logger.error(f"Failed to build Movie from attributes: {e}")
        raise DecodeError(f"Failed to build Movie from attributes: {e}", original_error=e) from e


def decode_item(item: Dict[str, Dict[str, Any]]) -> Movie:
    """Decode a raw low-level client item, ignoring attributes outside the schema."""
    return decode(from_wire_map(item, _META.attribute_types.keys()))


def movie_key(year: int, title: str) -> AttributeMap:
    """Primary key attribute map for a movie."""
    return {
        _META.partition_key: NumberValue(value=canonical_number(year)),
        _META.sort_key: StringValue(value=title),
    }

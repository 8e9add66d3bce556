"""
Movie Store Utilities

- Seed loading: read a JSON array of movies (``movie_data.json``)
- Client-side filtering: apply a second predicate to records that already
  came back from a store-side scan
- In-memory evaluation of boto3 conditions against Movie records

Client-side filtering exists for predicates the store cannot evaluate, or
that are cheaper to check after a coarse store-side range filter. The same
boto3 condition objects used for FilterExpression can be evaluated here.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, List, Union

from boto3.dynamodb.conditions import AttributeBase, ConditionBase
from pydantic import ValidationError as PydanticValidationError

from .exceptions import BuildError, ValidationError
from .expressions import resolve_field
from .models import Movie

logger = logging.getLogger(__name__)

RecordPredicate = Union[ConditionBase, Callable[[Movie], bool]]

_MISSING = object()


# =============================================================================
# Seed Loading
# =============================================================================

def load_movies(path: Union[str, Path]) -> List[Movie]:
    """Load movies from a JSON seed file.

    The file holds an array of objects with Year, Title and optionally Plot
    and Rating (lowercase field names are accepted too).

    Raises:
        ValidationError: If the file cannot be read, is not a JSON array, or
            contains an invalid movie
    """
    path = Path(path)
    try:
        with path.open('r', encoding='utf-8') as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValidationError(f"Failed to read movie seed file {path}: {e}", original_error=e) from e

    if not isinstance(raw, list):
        raise ValidationError(f"Movie seed file {path} must contain a JSON array")

    movies = []
    for index, entry in enumerate(raw):
        try:
            movies.append(Movie.model_validate(entry))
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid movie at index {index} in {path}",
                errors={str(index): e.errors()},
                original_error=e,
            ) from e

    logger.info(f"Loaded {len(movies)} movies from {path}")
    return movies


# =============================================================================
# In-Memory Condition Evaluation
# =============================================================================

def _attribute_value(movie: Movie, attribute: AttributeBase) -> Any:
    stored_name = resolve_field(attribute.name)
    fields_by_attribute = {alias: field for field, alias in Movie.attribute_names().items()}
    field = fields_by_attribute[stored_name]
    # Defaults stand in for attributes the item did not carry
    if field not in movie.model_fields_set:
        return _MISSING
    value = getattr(movie, field)
    return _MISSING if value is None else value


def _operand(movie: Movie, operand: Any) -> Any:
    if isinstance(operand, ConditionBase) and operand.expression_operator == 'size':
        value = _operand(movie, operand.get_expression()['values'][0])
        if value is _MISSING or not isinstance(value, str):
            return _MISSING
        return len(value)
    if isinstance(operand, AttributeBase):
        return _attribute_value(movie, operand)
    return operand


def _compare(operator: str, left: Any, right: Any) -> bool:
    if left is _MISSING or right is _MISSING:
        return False
    if isinstance(left, bool) != isinstance(right, bool):
        # BOOL is never equal to, or ordered against, N or S
        return operator == '<>'
    try:
        if operator == '=':
            return left == right
        if operator == '<>':
            return left != right
        if operator == '<':
            return left < right
        if operator == '<=':
            return left <= right
        if operator == '>':
            return left > right
        if operator == '>=':
            return left >= right
    except TypeError:
        # Mismatched types never satisfy a comparison in DynamoDB
        return False
    raise BuildError(f"Unsupported comparison operator '{operator}'")


def matches(condition: ConditionBase, movie: Movie) -> bool:
    """Evaluate a boto3 condition against a movie in memory.

    Comparisons involving a missing attribute are false, as they are in
    DynamoDB. An optional field counts as missing unless it was set
    explicitly, so records decoded from a projected scan only expose the
    attributes the scan returned.

    Raises:
        BuildError: For operators that cannot be evaluated client-side
            (e.g. attribute_type) or unknown fields
    """
    expression = condition.get_expression()
    operator = expression['operator']
    operands = expression['values']

    if operator == 'AND':
        return matches(operands[0], movie) and matches(operands[1], movie)
    if operator == 'OR':
        return matches(operands[0], movie) or matches(operands[1], movie)
    if operator == 'NOT':
        return not matches(operands[0], movie)

    if operator == 'attribute_exists':
        return _operand(movie, operands[0]) is not _MISSING
    if operator == 'attribute_not_exists':
        return _operand(movie, operands[0]) is _MISSING

    left = _operand(movie, operands[0])
    if operator in ('=', '<>', '<', '<=', '>', '>='):
        return _compare(operator, left, _operand(movie, operands[1]))
    if operator == 'BETWEEN':
        low = _operand(movie, operands[1])
        high = _operand(movie, operands[2])
        return _compare('>=', left, low) and _compare('<=', left, high)
    if operator == 'IN':
        return left is not _MISSING and any(_compare('=', left, v) for v in operands[1])
    if operator == 'begins_with':
        prefix = _operand(movie, operands[1])
        return isinstance(left, str) and isinstance(prefix, str) and left.startswith(prefix)
    if operator == 'contains':
        part = _operand(movie, operands[1])
        return isinstance(left, str) and isinstance(part, str) and part in left

    raise BuildError(f"Operator '{operator}' cannot be evaluated client-side")


# =============================================================================
# Client-Side Filtering
# =============================================================================

def filter_records(records: Iterable[Movie], predicate: RecordPredicate) -> Iterator[Movie]:
    """Lazily yield the records that satisfy ``predicate``, in input order.

    Args:
        records: Movies, typically decoded from a store-side scan
        predicate: A boto3 condition or any callable taking a Movie
    """
    for movie in records:
        if isinstance(predicate, ConditionBase):
            keep = matches(predicate, movie)
        else:
            keep = predicate(movie)
        if keep:
            yield movie

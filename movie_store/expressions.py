"""
Query Expression Builder

DynamoDB does not take raw field names or literals inside expression
strings. Names go through ``#placeholders`` (so reserved words such as
``Year`` are safe) and literals through ``:placeholders`` bound in a side map.
This module turns a boto3 condition plus a list of projected fields into
those strings and maps.

Predicates are ordinary boto3 conditions::

    from boto3.dynamodb.conditions import Attr

    spec = build(Attr('Year').gte(2014), ['Title', 'Year', 'Rating'])
    client.scan(TableName='Movies', **spec.request_kwargs())

Field names may be written as stored (``Year``) or as the Movie field
(``year``); both resolve to the stored attribute name. Anything outside the
Movies schema is rejected with BuildError.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from boto3.dynamodb.conditions import AttributeBase, ConditionBase, ConditionExpressionBuilder
from boto3.exceptions import (
    DynamoDBNeedsConditionError,
    DynamoDBNeedsKeyConditionError,
    DynamoDBOperationNotSupportedError,
)
from pydantic import BaseModel, ConfigDict, Field

from .codec import to_attribute_value, to_wire
from .exceptions import BuildError
from .models import AttributeValue, Movie

logger = logging.getLogger(__name__)

# Placeholder tokens as they appear in expression strings
_NAME_TOKEN = re.compile(r"#[A-Za-z0-9_]+")
_VALUE_TOKEN = re.compile(r":[A-Za-z0-9_]+")


class QuerySpec(BaseModel):
    """
    Wire-level expression parameters for one DynamoDB request.

    Every placeholder referenced in any of the expression strings has an entry
    in ``names`` or ``values``. Placeholder names are only meaningful inside
    a single QuerySpec.
    """

    names: Dict[str, str] = Field(default_factory=dict, description="Name placeholder -> attribute name")
    values: Dict[str, AttributeValue] = Field(default_factory=dict, description="Value placeholder -> typed value")
    filter_expression: Optional[str] = Field(None, description="FilterExpression for Scan/Query")
    projection_expression: Optional[str] = Field(None, description="Comma-joined name placeholders")
    condition_expression: Optional[str] = Field(None, description="ConditionExpression for writes")
    update_expression: Optional[str] = Field(None, description="UpdateExpression for UpdateItem")

    model_config = ConfigDict(frozen=True)

    def expressions(self) -> List[str]:
        """All expression strings that are set."""
        return [
            expr for expr in (
                self.filter_expression,
                self.projection_expression,
                self.condition_expression,
                self.update_expression,
            )
            if expr
        ]

    def referenced_names(self) -> Set[str]:
        """Name placeholders used by the expression strings."""
        return {token for expr in self.expressions() for token in _NAME_TOKEN.findall(expr)}

    def referenced_values(self) -> Set[str]:
        """Value placeholders used by the expression strings."""
        return {token for expr in self.expressions() for token in _VALUE_TOKEN.findall(expr)}

    def request_kwargs(self) -> Dict[str, Any]:
        """Request fields for the boto3 low-level client, empty ones omitted."""
        kwargs: Dict[str, Any] = {}
        if self.names:
            kwargs['ExpressionAttributeNames'] = dict(self.names)
        if self.values:
            kwargs['ExpressionAttributeValues'] = {
                token: to_wire(av) for token, av in self.values.items()
            }
        if self.filter_expression:
            kwargs['FilterExpression'] = self.filter_expression
        if self.projection_expression:
            kwargs['ProjectionExpression'] = self.projection_expression
        if self.condition_expression:
            kwargs['ConditionExpression'] = self.condition_expression
        if self.update_expression:
            kwargs['UpdateExpression'] = self.update_expression
        return kwargs


# =============================================================================
# Name Resolution
# =============================================================================

def resolve_field(name: str) -> str:
    """Resolve a Movie field or stored attribute name to the stored name.

    Raises:
        BuildError: If the name is not part of the Movies schema
    """
    resolved = Movie.resolve_attribute(name)
    if resolved is None:
        known = sorted(Movie.attribute_names().values())
        raise BuildError(f"Unknown field '{name}'; expected one of {known}", field=name)
    return resolved


def resolve_condition(condition: ConditionBase) -> ConditionBase:
    """Copy a boto3 condition with every attribute name resolved.

    Raises:
        BuildError: If the condition names a field outside the schema
    """
    operands = []
    for operand in condition.get_expression()['values']:
        if isinstance(operand, ConditionBase):
            # Also covers size(), which is both a condition and an attribute
            operands.append(resolve_condition(operand))
        elif isinstance(operand, AttributeBase):
            operands.append(type(operand)(resolve_field(operand.name)))
        else:
            operands.append(operand)
    return type(condition)(*operands)


def as_field_list(fields: Optional[Union[str, Iterable[str]]]) -> Optional[List[str]]:
    """Normalize a projection argument; a single name is a one-field projection."""
    if fields is None:
        return None
    if isinstance(fields, str):
        return [fields]
    return list(fields)


def resolve_projection(fields: Optional[Union[str, Iterable[str]]]) -> List[str]:
    """Resolve projected fields, dropping duplicates and keeping first-seen order."""
    resolved: List[str] = []
    for name in as_field_list(fields) or []:
        attribute = resolve_field(name)
        if attribute not in resolved:
            resolved.append(attribute)
    return resolved


# =============================================================================
# Builder
# =============================================================================

class ExpressionBuilder:
    """
    Fluent builder for a QuerySpec.

    One builder shares its placeholder counters across the filter, condition,
    projection and update parts, so their placeholders never collide. A
    builder is meant to produce a single QuerySpec.

    Example:
        spec = (
            ExpressionBuilder()
            .with_update({'Rating': 2.4})
            .with_condition(Attr('Year').exists())
            .build()
        )
    """

    def __init__(self):
        self._filter: Optional[ConditionBase] = None
        self._condition: Optional[ConditionBase] = None
        self._projection: Optional[List[str]] = None
        self._updates: Optional[Dict[str, Any]] = None

    def with_filter(self, condition: Optional[ConditionBase]) -> 'ExpressionBuilder':
        self._filter = condition
        return self

    def with_condition(self, condition: Optional[ConditionBase]) -> 'ExpressionBuilder':
        self._condition = condition
        return self

    def with_projection(self, fields: Optional[Union[str, Iterable[str]]]) -> 'ExpressionBuilder':
        self._projection = as_field_list(fields)
        return self

    def with_update(self, assignments: Dict[str, Any]) -> 'ExpressionBuilder':
        """Set attributes to new values; a value of None removes the attribute."""
        self._updates = dict(assignments)
        return self

    def build(self) -> QuerySpec:
        """Build the QuerySpec.

        Raises:
            BuildError: Unknown fields, unrepresentable literals, key updates,
                or a failure inside boto3's condition expression builder
        """
        conditions = ConditionExpressionBuilder()
        names: Dict[str, str] = {}
        values: Dict[str, AttributeValue] = {}

        filter_expression = self._build_condition(conditions, self._filter, names, values, "filter")
        condition_expression = self._build_condition(conditions, self._condition, names, values, "condition")
        projection_expression = self._build_projection(names)
        update_expression = self._build_update(names, values)

        spec = QuerySpec(
            names=names,
            values=values,
            filter_expression=filter_expression,
            projection_expression=projection_expression,
            condition_expression=condition_expression,
            update_expression=update_expression,
        )
        _check_placeholders(spec)
        return spec

    def _build_condition(
        self,
        conditions: ConditionExpressionBuilder,
        condition: Optional[ConditionBase],
        names: Dict[str, str],
        values: Dict[str, AttributeValue],
        part: str,
    ) -> Optional[str]:
        if condition is None:
            return None
        if not isinstance(condition, ConditionBase):
            raise BuildError(f"The {part} must be a boto3 condition, got {type(condition).__name__}")

        resolved = resolve_condition(condition)
        try:
            built = conditions.build_expression(resolved)
        except (
            DynamoDBNeedsConditionError,
            DynamoDBNeedsKeyConditionError,
            DynamoDBOperationNotSupportedError,
        ) as e:
            raise BuildError(f"Failed to build {part} expression: {e}", original_error=e) from e

        names.update(built.attribute_name_placeholders)
        for token, literal in built.attribute_value_placeholders.items():
            values[token] = _literal(literal)
        return built.condition_expression

    def _build_projection(self, names: Dict[str, str]) -> Optional[str]:
        fields = resolve_projection(self._projection)
        if not fields:
            return None

        parts = []
        for i, field in enumerate(fields):
            token = f"#p{i}"
            names[token] = field
            parts.append(token)
        return ', '.join(parts)

    def _build_update(self, names: Dict[str, str], values: Dict[str, AttributeValue]) -> Optional[str]:
        if self._updates is None:
            return None
        if not self._updates:
            raise BuildError("Update assignments cannot be empty")

        key_fields = Movie.Meta.get_key_fields()
        assigned: Set[str] = set()
        set_parts = []
        remove_parts = []
        for i, (field, value) in enumerate(self._updates.items()):
            attribute = resolve_field(field)
            if attribute in key_fields:
                raise BuildError(
                    f"'{attribute}' is part of the primary key and cannot be updated; "
                    f"delete the item and put a new one instead",
                    field=field,
                )
            if attribute in assigned:
                raise BuildError(f"'{attribute}' is assigned more than once in one update", field=field)
            assigned.add(attribute)
            name_token = f"#u{i}"
            names[name_token] = attribute
            if value is None:
                remove_parts.append(name_token)
                continue
            value_token = f":u{i}"
            values[value_token] = _literal(value)
            set_parts.append(f"{name_token} = {value_token}")

        clauses = []
        if set_parts:
            clauses.append("SET " + ", ".join(set_parts))
        if remove_parts:
            clauses.append("REMOVE " + ", ".join(remove_parts))
        return " ".join(clauses)


def _literal(value: Any) -> AttributeValue:
    try:
        return to_attribute_value(value)
    except (TypeError, ValueError) as e:
        raise BuildError(f"Cannot use {value!r} in an expression: {e}", original_error=e) from e


def _check_placeholders(spec: QuerySpec) -> None:
    missing = (spec.referenced_names() - spec.names.keys()) | (spec.referenced_values() - spec.values.keys())
    if missing:
        logger.error(f"Expression references unbound placeholders: {sorted(missing)}")
        raise BuildError(f"Expression references unbound placeholders: {sorted(missing)}")


def build(
    filter: Optional[ConditionBase] = None,
    projection: Optional[Union[str, Iterable[str]]] = None
) -> QuerySpec:
    """Translate a filter predicate and projection into a QuerySpec.

    Args:
        filter: boto3 condition evaluated by the store, or None
        projection: Fields to return (a single name is allowed); empty or
            None returns all fields

    Returns:
        QuerySpec whose placeholders are all bound

    Raises:
        BuildError: If the predicate or projection cannot be translated

    Example:
        >>> spec = build(Attr('year').gte(2014), ['Title', 'Year'])
        >>> spec.filter_expression
        '#n0 >= :v0'
        >>> spec.projection_expression
        '#p0, #p1'
    """
    return ExpressionBuilder().with_filter(filter).with_projection(projection).build()

# Tagged attribute values (store wire types)
from .attribute_values import (
    AttributeMap,
    AttributeValue,
    BoolValue,
    NullValue,
    NumberValue,
    StringValue,
)

# Domain models
from .domain_models import (
    Movie,
    TableMeta,
)

__all__ = [
    # Attribute values
    "AttributeMap",
    "AttributeValue",
    "BoolValue",
    "NullValue",
    "NumberValue",
    "StringValue",

    # Domain models
    "Movie",
    "TableMeta",
]

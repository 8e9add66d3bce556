"""
Tagged Attribute Values

DynamoDB represents every stored value as a single-key map whose key is the
type tag (``{"N": "2015"}``, ``{"S": "Heat"}``). These models give each tag its
own class so that code handling attribute values can match on the variant
instead of poking at dictionary keys.

Only the scalar tags used by the Movies schema and by filter literals are
modelled: N, S, BOOL and NULL.
"""

from typing import Annotated, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _AttributeValueBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class NumberValue(_AttributeValueBase):
    """Number attribute. The value is the decimal string sent on the wire."""

    tag: Literal["N"] = "N"
    value: str


class StringValue(_AttributeValueBase):
    """String attribute."""

    tag: Literal["S"] = "S"
    value: str


class BoolValue(_AttributeValueBase):
    """Boolean attribute."""

    tag: Literal["BOOL"] = "BOOL"
    value: bool


class NullValue(_AttributeValueBase):
    """Null attribute. DynamoDB always sends ``{"NULL": true}``."""

    tag: Literal["NULL"] = "NULL"
    value: bool = True


AttributeValue = Annotated[
    Union[NumberValue, StringValue, BoolValue, NullValue],
    Field(discriminator="tag"),
]

AttributeMap = Dict[str, AttributeValue]

SUPPORTED_TAGS = ("N", "S", "BOOL", "NULL")

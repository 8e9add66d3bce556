"""
Domain Models for the Movie Store

The Movies table holds one entity. Its composite primary key is (Year, Title);
Plot and Rating are plain attributes.

Each model carries a ``Meta`` class describing how it is laid out in DynamoDB.
The codec, the expression builder and the table administration code all read
key and attribute names from there instead of hard-coding them.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# DynamoDB Table Metadata Classes
# =============================================================================

class TableMeta:
    """Base class for table metadata definitions."""
    table_name: str
    partition_key: str
    sort_key: Optional[str] = None
    # DynamoDB scalar type ('N', 'S', 'B') for every attribute the model stores
    attribute_types: Dict[str, str] = {}

    @classmethod
    def get_key_fields(cls) -> List[str]:
        """Get DynamoDB item key field names.

        Returns the list of fields that form the DynamoDB item key:
        - For simple keys: [partition_key]
        - For composite keys: [partition_key, sort_key]
        """
        fields = [cls.partition_key]
        if cls.sort_key:
            fields.append(cls.sort_key)
        return fields

    @classmethod
    def get_key_schema(cls) -> List[Dict[str, str]]:
        """KeySchema entries for CreateTable."""
        schema = [{'AttributeName': cls.partition_key, 'KeyType': 'HASH'}]
        if cls.sort_key:
            schema.append({'AttributeName': cls.sort_key, 'KeyType': 'RANGE'})
        return schema

    @classmethod
    def get_attribute_definitions(cls) -> List[Dict[str, str]]:
        """AttributeDefinitions entries for CreateTable (key attributes only)."""
        return [
            {'AttributeName': name, 'AttributeType': cls.attribute_types[name]}
            for name in cls.get_key_fields()
        ]


# =============================================================================
# Movie Domain
# =============================================================================

class Movie(BaseModel):
    """
    A movie stored in the Movies table.

    The model is frozen: (year, title) is the primary key and cannot change
    once the record exists. Use ``model_copy(update=...)`` for the non-key
    attributes, and delete + put for a new identity.

    Fields accept either the Python name (``year``) or the stored attribute
    name (``Year``), so seed files written for other SDKs load as-is.
    """

    year: int = Field(..., alias="Year", description="Release year (partition key)")
    title: str = Field(..., alias="Title", description="Movie title (sort key)")
    plot: Optional[str] = Field(None, alias="Plot", description="Short plot summary")
    rating: float = Field(0.0, alias="Rating", allow_inf_nan=False, description="Average rating")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )

    class Meta(TableMeta):
        table_name = "Movies"
        partition_key = "Year"
        sort_key = "Title"
        attribute_types = {
            "Year": "N",
            "Title": "S",
            "Plot": "S",
            "Rating": "N",
        }

    @classmethod
    def attribute_names(cls) -> Dict[str, str]:
        """Map of Python field name to stored attribute name."""
        return {name: field.alias or name for name, field in cls.model_fields.items()}

    @classmethod
    def resolve_attribute(cls, name: str) -> Optional[str]:
        """Resolve a Python field name or stored attribute name to the stored name.

        Returns None when the name is not part of the schema.
        """
        names = cls.attribute_names()
        if name in names:
            return names[name]
        if name in names.values():
            return name
        return None

    @property
    def key(self) -> Dict[str, object]:
        """Primary key as plain Python values, keyed by attribute name."""
        return {self.Meta.partition_key: self.year, self.Meta.sort_key: self.title}

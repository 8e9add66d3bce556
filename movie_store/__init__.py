"""
Movie Store

CRUD helpers for a DynamoDB "Movies" table (partition key Year, sort key
Title) built on the boto3 low-level client and Pydantic. The core pieces are
the expression builder (placeholder-safe filter/projection/update
expressions) and the record codec (Movie <-> tagged attribute values).
"""

from .config import DynamoDBConfig
from .exceptions import (
    BuildError,
    ConflictError,
    ConnectionError,
    DecodeError,
    MovieStoreError,
    NotFoundError,
    RetryableError,
    StoreError,
    ValidationError,
)
from .models import (
    AttributeMap,
    AttributeValue,
    BoolValue,
    Movie,
    NullValue,
    NumberValue,
    StringValue,
)
from .codec import (
    canonical_number,
    decode,
    decode_item,
    encode,
    movie_key,
)
from .expressions import (
    ExpressionBuilder,
    QuerySpec,
    build,
)
from .utils import (
    filter_records,
    load_movies,
    matches,
)
from .core import (
    TableGateway,
    create_table_gateway,
)
from .handlers.movies import (
    MoviesReadApi,
    MoviesWriteApi,
)

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "DynamoDBConfig",

    # Exceptions
    "BuildError",
    "ConflictError",
    "ConnectionError",
    "DecodeError",
    "MovieStoreError",
    "NotFoundError",
    "RetryableError",
    "StoreError",
    "ValidationError",

    # Models and attribute values
    "AttributeMap",
    "AttributeValue",
    "BoolValue",
    "Movie",
    "NullValue",
    "NumberValue",
    "StringValue",

    # Codec
    "canonical_number",
    "decode",
    "decode_item",
    "encode",
    "movie_key",

    # Expression builder
    "ExpressionBuilder",
    "QuerySpec",
    "build",

    # Utilities
    "filter_records",
    "load_movies",
    "matches",

    # TableGateway architecture
    "TableGateway",
    "create_table_gateway",

    # CQRS APIs
    "MoviesReadApi",
    "MoviesWriteApi",
]

"""
Movies Write API

Write operations against the Movies table:
- CreateTable from the Movie model's key metadata
- PutItem for single movies and for seed files
- UpdateItem with placeholder-safe SET/REMOVE expressions
- DeleteItem

Conditions are optional boto3 conditions; a failed condition surfaces as
ConflictError from the gateway.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from boto3.dynamodb.conditions import ConditionBase

from ...codec import encode, from_attribute_value, from_wire_map, movie_key, to_wire_map
from ...config import DynamoDBConfig
from ...core import TableGateway, create_table_gateway
from ...exceptions import ValidationError
from ...expressions import ExpressionBuilder
from ...models import Movie
from ...utils import load_movies

logger = logging.getLogger(__name__)


class MoviesWriteApi:
    """
    Write-only API for the Movies table.

    Args:
        config: DynamoDB configuration
        gateway: Gateway to write through; built from the config when omitted
    """

    def __init__(self, config: DynamoDBConfig, gateway: Optional[TableGateway] = None):
        self.config = config
        self.gateway = gateway or create_table_gateway(config)

    def create_table(
        self,
        read_capacity: Optional[int] = None,
        write_capacity: Optional[int] = None,
        wait: bool = False
    ) -> Dict[str, Any]:
        """
        Create the Movies table (Year HASH, Title RANGE).

        DynamoDB Operation: CreateTable with provisioned throughput

        Args:
            read_capacity: Read capacity units (config default if None)
            write_capacity: Write capacity units (config default if None)
            wait: Block until the table is ACTIVE

        Returns:
            TableDescription

        Raises:
            ConflictError: The table already exists
        """
        description = self.gateway.create_table(
            key_schema=Movie.Meta.get_key_schema(),
            attribute_definitions=Movie.Meta.get_attribute_definitions(),
            read_capacity=read_capacity or self.config.read_capacity_units,
            write_capacity=write_capacity or self.config.write_capacity_units,
        )
        if wait:
            self.gateway.wait_until_exists()
        logger.info(f"Created the table {self.gateway.table_name}")
        return description

    def put_movie(self, movie: Movie, condition: Optional[ConditionBase] = None) -> Movie:
        """
        Store a movie, replacing any movie with the same key.

        DynamoDB Operation: PutItem

        Raises:
            ValidationError: The title is empty, or a number cannot be stored
        """
        if not movie.title:
            raise ValidationError("Movie title cannot be empty", errors={'title': 'empty'})

        try:
            item = to_wire_map(encode(movie))
        except ValueError as e:
            raise ValidationError(f"Movie '{movie.title}' ({movie.year}) cannot be stored: {e}", original_error=e) from e

        put_kwargs = {}
        if condition is not None:
            put_kwargs = ExpressionBuilder().with_condition(condition).build().request_kwargs()

        self.gateway.put_item(item, **put_kwargs)
        logger.info(f"Successfully added '{movie.title}' ({movie.year}) to table {self.gateway.table_name}")
        return movie

    def load_movies(self, source: Union[str, Path, Iterable[Movie]]) -> int:
        """
        Put every movie from a seed file (or an iterable of movies).

        Movies are written in order; the first failure stops the load and
        propagates.

        Returns:
            Number of movies written
        """
        movies = load_movies(source) if isinstance(source, (str, Path)) else source

        count = 0
        for movie in movies:
            self.put_movie(movie)
            count += 1

        logger.info(f"Loaded {count} movies into {self.gateway.table_name}")
        return count

    def update_movie(
        self,
        year: int,
        title: str,
        updates: Dict[str, Any],
        condition: Optional[ConditionBase] = None
    ) -> Dict[str, Any]:
        """
        Update non-key attributes of a movie.

        DynamoDB Operation: UpdateItem with ReturnValues=UPDATED_NEW

        Args:
            year: Release year of the movie
            title: Title of the movie
            updates: Attribute -> new value; None removes the attribute
            condition: Optional boto3 condition the item must satisfy

        Returns:
            Updated attributes as plain Python values

        Raises:
            BuildError: Unknown attribute, or an attempt to change Year/Title
        """
        spec = ExpressionBuilder().with_update(updates).with_condition(condition).build()

        attributes = self.gateway.update_item(
            key=to_wire_map(movie_key(year, title)),
            return_values='UPDATED_NEW',
            **spec.request_kwargs()
        )

        logger.info(f"Successfully updated '{title}' ({year}): {sorted(updates)}")
        return {
            name: from_attribute_value(av)
            for name, av in from_wire_map(attributes or {}).items()
        }

    def update_rating(self, year: int, title: str, rating: float) -> float:
        """
        Set a movie's rating.

        Returns:
            The rating now stored
        """
        updated = self.update_movie(year, title, {'Rating': rating})
        return float(updated.get('Rating', rating))

    def delete_movie(self, year: int, title: str, condition: Optional[ConditionBase] = None) -> bool:
        """
        Delete a movie.

        DynamoDB Operation: DeleteItem with ReturnValues=ALL_OLD

        Returns:
            True if a movie was deleted, False if there was nothing to delete
        """
        delete_kwargs = {}
        if condition is not None:
            delete_kwargs = ExpressionBuilder().with_condition(condition).build().request_kwargs()

        old = self.gateway.delete_item(
            key=to_wire_map(movie_key(year, title)),
            return_values='ALL_OLD',
            **delete_kwargs
        )

        if old:
            logger.info(f"Deleted '{title}' ({year}) from table {self.gateway.table_name}")
            return True
        logger.info(f"Nothing to delete for '{title}' ({year}) in table {self.gateway.table_name}")
        return False

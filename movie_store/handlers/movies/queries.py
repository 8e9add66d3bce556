"""
Movies Read API

Read operations against the Movies table:
- GetItem by (Year, Title)
- Scan pages with a store-side FilterExpression and ProjectionExpression
- Lazy iteration over every scan page with an optional client-side filter
- Listing table names page by page

Store failures surface as StoreError subclasses and records that cannot be
decoded as DecodeError; neither is wrapped or retried here.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from boto3.dynamodb.conditions import Attr, ConditionBase

from ...codec import decode_item, movie_key, to_wire_map
from ...config import DynamoDBConfig
from ...core import TableGateway, create_table_gateway
from ...expressions import as_field_list, build
from ...models import Movie
from ...utils import RecordPredicate, filter_records

logger = logging.getLogger(__name__)


class MoviesReadApi:
    """
    Read-only API for the Movies table.

    Args:
        config: DynamoDB configuration
        gateway: Gateway to read through; built from the config when omitted
    """

    def __init__(self, config: DynamoDBConfig, gateway: Optional[TableGateway] = None):
        self.config = config
        self.gateway = gateway or create_table_gateway(config)

        # Fields returned by rating scans
        self.rating_projection = ['Title', 'Year', 'Rating']

    def get_movie(self, year: int, title: str) -> Optional[Movie]:
        """
        Get a movie by its primary key.

        DynamoDB Operation: GetItem

        Returns:
            Movie if found, None otherwise (a stored item with an empty title
            also counts as not found)
        """
        item = self.gateway.get_item(to_wire_map(movie_key(year, title)))
        if not item:
            logger.info(f"Could not find '{title}' ({year})")
            return None

        movie = decode_item(item)
        if movie.title == "":
            logger.info(f"Could not find '{title}' ({year})")
            return None
        return movie

    def scan_movies(
        self,
        filter: Optional[ConditionBase] = None,
        projection: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
        last_key: Optional[dict] = None
    ) -> Tuple[List[Movie], Optional[dict]]:
        """
        Scan one page of movies.

        DynamoDB Operation: Scan with FilterExpression/ProjectionExpression

        Args:
            filter: Store-side boto3 condition
            projection: Fields to return (all fields if None). The projection
                must include Year and Title for the items to decode.
            limit: Maximum items evaluated per page
            last_key: Pagination token from the previous page

        Returns:
            Tuple of (movies, next_page_token)
        """
        scan_kwargs = build(filter, projection).request_kwargs()
        if limit:
            scan_kwargs['Limit'] = limit
        if last_key:
            scan_kwargs['ExclusiveStartKey'] = last_key

        response = self.gateway.scan(**scan_kwargs)
        movies = [decode_item(item) for item in response.get('Items', [])]
        return movies, response.get('LastEvaluatedKey')

    def iter_movies(
        self,
        filter: Optional[ConditionBase] = None,
        projection: Optional[Iterable[str]] = None,
        post_filter: Optional[RecordPredicate] = None,
        page_size: Optional[int] = None
    ) -> Iterator[Movie]:
        """
        Lazily yield movies from every scan page.

        The store applies ``filter``; ``post_filter`` (a boto3 condition or any
        callable) is applied afterwards to the decoded movies. Pages are only
        requested as the iterator is consumed.
        """
        projection = as_field_list(projection)

        def pages() -> Iterator[Movie]:
            last_key = None
            while True:
                movies, last_key = self.scan_movies(filter, projection, page_size, last_key)
                yield from movies
                if not last_key:
                    break

        if post_filter is None:
            return pages()
        return filter_records(pages(), post_filter)

    def find_movies_rated_above(self, year: int, min_rating: float) -> List[Movie]:
        """
        Find movies released in or after ``year`` rated above ``min_rating``.

        The store filters on Year and returns only Title, Year and Rating;
        the rating threshold is checked on the decoded movies.

        Returns:
            Matching movies in scan order
        """
        movies = list(self.iter_movies(
            filter=Attr('Year').gte(year),
            projection=self.rating_projection,
            post_filter=lambda movie: movie.rating > min_rating,
        ))
        logger.info(f"Found {len(movies)} movie(s) with a rating above {min_rating} in {year}")
        return movies

    def list_table_names(self, page_size: Optional[int] = None) -> Iterator[str]:
        """
        Lazily yield every table name in the account/region.

        DynamoDB Operation: ListTables, following LastEvaluatedTableName
        """
        page_size = page_size or self.config.list_tables_page_size
        start = None
        while True:
            names, start = self.gateway.list_tables(limit=page_size, exclusive_start_table_name=start)
            yield from names
            if start is None:
                break

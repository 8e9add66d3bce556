#!/usr/bin/env python3
"""
Basic usage example for the movie store.

Runs the classic Movies walkthrough against DynamoDB:
1. List tables
2. Create the Movies table
3. Add a movie, then load movie_data.json if it is present
4. Read the movie back
5. Update its rating
6. Delete it
7. Scan for well-rated movies (store-side Year filter, client-side Rating filter)

Point DYNAMODB_ENDPOINT_URL at DynamoDB Local to try it without AWS.
"""

import logging
import sys
from pathlib import Path

from movie_store import (
    ConflictError,
    DynamoDBConfig,
    Movie,
    MovieStoreError,
    MoviesReadApi,
    MoviesWriteApi,
    create_table_gateway,
)


def main() -> int:
    """Walk through every Movies operation, stopping at the first failure."""
    config = DynamoDBConfig.from_env()
    logging.basicConfig(
        level=logging.DEBUG if config.enable_debug_logging else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    # One gateway (one client) shared by both APIs
    gateway = create_table_gateway(config)
    read_api = MoviesReadApi(config, gateway)
    write_api = MoviesWriteApi(config, gateway)

    try:
        print("1. Tables:")
        for index, name in enumerate(read_api.list_table_names()):
            print(index, "-----", name)

        print("2. Creating the Movies table...")
        try:
            write_api.create_table(wait=True)
        except ConflictError:
            print(f"Table {gateway.table_name} already exists")

        print("3. Adding movies...")
        movie = Movie(year=2015, title="The Big New Movie", plot="Nothing happens at all.", rating=0.0)
        write_api.put_movie(movie)

        seed_file = Path("movie_data.json")
        if seed_file.exists():
            count = write_api.load_movies(seed_file)
            print(f"Loaded {count} movies from {seed_file}")

        print("4. Reading the movie back...")
        found = read_api.get_movie(movie.year, movie.title)
        if found is None:
            print(f"Could not find '{movie.title}' ({movie.year})")
        else:
            print("Year:  ", found.year)
            print("Title: ", found.title)
            print("Plot:  ", found.plot)
            print("Rating:", found.rating)

        print("5. Updating the rating...")
        rating = write_api.update_rating(movie.year, movie.title, 2.4)
        print(f"Successfully updated '{movie.title}' ({movie.year}) rating to {rating}")

        print("6. Deleting the movie...")
        if write_api.delete_movie(movie.year, movie.title):
            print(f"Deleted '{movie.title}' ({movie.year}) from table {gateway.table_name}")

        print("7. Scanning for well-rated movies...")
        min_rating, year = 4.0, 2014
        movies = read_api.find_movies_rated_above(year, min_rating)
        for rated in movies:
            print("Title: ", rated.title)
            print("Rating:", rated.rating)
            print()
        print("Found", len(movies), "movie(s) with a rating above", min_rating, "in", year)

    except MovieStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

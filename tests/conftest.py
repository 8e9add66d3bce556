"""
Test configuration and fixtures for the movie store.

Provides a moto-backed Movies table and read/write APIs wired to it, plus
sample movie data.
"""

import json
import sys
from pathlib import Path

# Add parent directory to path so we can import movie_store
sys.path.insert(0, str(Path(__file__).parent.parent))

import boto3
import pytest
from moto import mock_aws

from movie_store import (
    DynamoDBConfig,
    Movie,
    MoviesReadApi,
    MoviesWriteApi,
    create_table_gateway,
)


MOVIES_TABLE = "test_Movies"


@pytest.fixture
def mock_dynamodb_config():
    """DynamoDB configuration for mocked testing."""
    return DynamoDBConfig(
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        profile_name=None,
        region_name="us-east-1",
        endpoint_url=None,  # Use default AWS endpoint for moto
        environment="test",
        table_prefix="",
        table_name="Movies",
    )


@pytest.fixture
def mock_dynamodb_client():
    """Mock DynamoDB low-level client."""
    with mock_aws():
        yield boto3.client('dynamodb', region_name='us-east-1')


@pytest.fixture
def movies_table(mock_dynamodb_client):
    """Create the Movies table for testing."""
    mock_dynamodb_client.create_table(
        TableName=MOVIES_TABLE,
        KeySchema=[
            {'AttributeName': 'Year', 'KeyType': 'HASH'},
            {'AttributeName': 'Title', 'KeyType': 'RANGE'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'Year', 'AttributeType': 'N'},
            {'AttributeName': 'Title', 'AttributeType': 'S'}
        ],
        ProvisionedThroughput={'ReadCapacityUnits': 10, 'WriteCapacityUnits': 10}
    )
    return MOVIES_TABLE


@pytest.fixture
def movies_gateway(mock_dynamodb_config, mock_dynamodb_client):
    """Gateway sharing the mocked client."""
    return create_table_gateway(mock_dynamodb_config, client=mock_dynamodb_client)


@pytest.fixture
def movies_read_api(mock_dynamodb_config, movies_gateway, movies_table):
    """Movies read API with mocked DynamoDB."""
    return MoviesReadApi(mock_dynamodb_config, movies_gateway)


@pytest.fixture
def movies_write_api(mock_dynamodb_config, movies_gateway, movies_table):
    """Movies write API with mocked DynamoDB."""
    return MoviesWriteApi(mock_dynamodb_config, movies_gateway)


# Sample Data Fixtures

@pytest.fixture
def sample_movie():
    """The movie used throughout the walkthrough."""
    return Movie(year=2015, title="The Big New Movie", plot="Nothing happens at all.", rating=0.0)


@pytest.fixture
def sample_movies():
    """A small catalogue spanning several years and ratings."""
    return [
        Movie(year=2013, title="Rush", plot="A rivalry on the track.", rating=8.3),
        Movie(year=2014, title="Interstellar", plot="A wormhole.", rating=8.6),
        Movie(year=2014, title="Transcendence", plot="An upload.", rating=3.9),
        Movie(year=2015, title="Ex Machina", rating=7.7),
        Movie(year=2015, title="Pixels", plot="Arcade invasion.", rating=2.4),
    ]


@pytest.fixture
def movie_data_file(tmp_path, sample_movies):
    """Seed file in the movie_data.json layout."""
    path = tmp_path / "movie_data.json"
    path.write_text(json.dumps([
        movie.model_dump(by_alias=True, exclude_none=True) for movie in sample_movies
    ]))
    return path

"""
Tests for the record codec (codec.py).

Covers the Movie <-> attribute map round trip, canonical number rendering,
decode failures and the boto3 wire conversion.
"""

from decimal import Decimal

import pytest

from movie_store.codec import (
    canonical_number,
    decode,
    decode_item,
    encode,
    from_attribute_value,
    from_wire,
    from_wire_map,
    movie_key,
    to_attribute_value,
    to_wire,
    to_wire_map,
)
from movie_store.exceptions import DecodeError
from movie_store.models import BoolValue, Movie, NullValue, NumberValue, StringValue


class TestCanonicalNumber:
    """Test the N attribute string form."""

    @pytest.mark.parametrize("value,expected", [
        (4.0, "4"),
        (2.4, "2.4"),
        (0.0, "0"),
        (-0.0, "0"),
        (2015, "2015"),
        (-7, "-7"),
        (1e20, "100000000000000000000"),
        (1.5e-7, "0.00000015"),
        (Decimal("2.50"), "2.5"),
        (Decimal("100"), "100"),
    ])
    def test_canonical_form(self, value, expected):
        """Numbers have no exponent and no trailing zeros."""
        assert canonical_number(value) == expected

    def test_rejects_bool(self):
        """Booleans are not numbers."""
        with pytest.raises(ValueError):
            canonical_number(True)

    @pytest.mark.parametrize("value", [
        5e-324,
        -1e-131,
        1.79e308,
        10 ** 126,
        Decimal("1E+126"),
        Decimal("-9E-131"),
    ])
    def test_rejects_out_of_range(self, value):
        """Magnitudes DynamoDB cannot store fail before reaching the store."""
        with pytest.raises(ValueError, match="outside the range"):
            canonical_number(value)

    @pytest.mark.parametrize("value,expected", [
        (Decimal("1E-130"), "0." + "0" * 129 + "1"),
        (Decimal("9.99E+125"), "999" + "0" * 123),
        (-(10 ** 125), "-1" + "0" * 125),
    ])
    def test_range_limits(self, value, expected):
        """The edges of the range are still accepted."""
        assert canonical_number(value) == expected

    @pytest.mark.parametrize("value", [float("inf"), float("nan"), Decimal("-Infinity")])
    def test_rejects_non_finite(self, value):
        """DynamoDB cannot store infinities or NaN."""
        with pytest.raises(ValueError):
            canonical_number(value)


class TestEncode:
    """Test Movie -> attribute map."""

    def test_encode_all_fields(self, sample_movie):
        """Every field is encoded with its tag, zero rating included."""
        attrs = encode(sample_movie)

        assert attrs == {
            "Year": NumberValue(value="2015"),
            "Title": StringValue(value="The Big New Movie"),
            "Plot": StringValue(value="Nothing happens at all."),
            "Rating": NumberValue(value="0"),
        }

    def test_encode_without_plot(self):
        """An unset plot is left out."""
        attrs = encode(Movie(year=2015, title="Ex Machina", rating=7.7))

        assert "Plot" not in attrs
        assert attrs["Rating"] == NumberValue(value="7.7")

    def test_encode_whole_rating(self):
        """A rating of 4.0 is written as '4' and decodes back to 4.0."""
        attrs = encode(Movie(year=2014, title="A", rating=4.0))

        assert attrs["Rating"].value == "4"
        restored = decode(attrs)
        assert restored.rating == 4.0
        assert isinstance(restored.rating, float)


class TestRoundTrip:
    """decode(encode(movie)) gives back the same movie."""

    @pytest.mark.parametrize("movie", [
        Movie(year=2015, title="The Big New Movie", plot="Nothing happens at all.", rating=0.0),
        Movie(year=1999, title="The Matrix", rating=8.7),
        Movie(year=2014, title="Interstellar", plot="", rating=0.1 + 0.2),
        Movie(year=-1, title="", rating=1e-12),
        Movie(year=2020, title="Reserved words: Year, Size", plot="ü and ✓", rating=123456.789),
    ])
    def test_round_trip(self, movie):
        """No drift in any field."""
        assert decode(encode(movie)) == movie

    def test_round_trip_through_wire(self, sample_movies):
        """The same holds after converting to the client's wire format."""
        for movie in sample_movies:
            assert decode_item(to_wire_map(encode(movie))) == movie


class TestDecode:
    """Test attribute map -> Movie."""

    def test_missing_year(self):
        """Year is required."""
        with pytest.raises(DecodeError) as exc_info:
            decode({"Title": StringValue(value="Heat")})

        assert exc_info.value.attribute == "Year"

    def test_missing_title(self):
        """Title is required."""
        with pytest.raises(DecodeError) as exc_info:
            decode({"Year": NumberValue(value="1995")})

        assert exc_info.value.attribute == "Title"

    def test_null_year_is_missing(self):
        """A NULL Year counts as missing."""
        with pytest.raises(DecodeError):
            decode({"Year": NullValue(), "Title": StringValue(value="Heat")})

    def test_year_with_wrong_tag(self):
        """Year stored as a string is a type mismatch."""
        with pytest.raises(DecodeError, match="Year"):
            decode({"Year": StringValue(value="1995"), "Title": StringValue(value="Heat")})

    def test_title_with_wrong_tag(self):
        """Title stored as a number is a type mismatch."""
        with pytest.raises(DecodeError, match="Title"):
            decode({"Year": NumberValue(value="1995"), "Title": NumberValue(value="1")})

    def test_rating_with_wrong_tag(self):
        """Optional attributes must still have the right type when present."""
        with pytest.raises(DecodeError, match="Rating"):
            decode({
                "Year": NumberValue(value="1995"),
                "Title": StringValue(value="Heat"),
                "Rating": BoolValue(value=True),
            })

    def test_fractional_year(self):
        """Year must be integral."""
        with pytest.raises(DecodeError, match="integer"):
            decode({"Year": NumberValue(value="1995.5"), "Title": StringValue(value="Heat")})

    def test_invalid_number_token(self):
        """Garbage in an N attribute is rejected."""
        with pytest.raises(DecodeError):
            decode({"Year": NumberValue(value="nineteen"), "Title": StringValue(value="Heat")})

    def test_empty_title_decodes(self):
        """An empty title is valid input for the codec."""
        movie = decode({"Year": NumberValue(value="2015"), "Title": StringValue(value="")})

        assert movie.title == ""
        assert movie.year == 2015

    def test_defaults_for_absent_optionals(self):
        """Missing Plot/Rating fall back to None/0.0."""
        movie = decode({"Year": NumberValue(value="2015"), "Title": StringValue(value="Heat")})

        assert movie.plot is None
        assert movie.rating == 0.0
        assert movie.model_fields_set == {"year", "title"}

    def test_null_optional_is_absent(self):
        """NULL optional attributes behave as absent."""
        movie = decode({
            "Year": NumberValue(value="2015"),
            "Title": StringValue(value="Heat"),
            "Plot": NullValue(),
        })

        assert movie.plot is None

    def test_unknown_attributes_ignored(self):
        """Attributes outside the schema do not affect decoding."""
        movie = decode({
            "Year": NumberValue(value="2015"),
            "Title": StringValue(value="Heat"),
            "Genre": StringValue(value="Crime"),
        })

        assert movie == Movie(year=2015, title="Heat")

    def test_overflowing_rating(self):
        """A rating too large for a float is rejected, not turned into inf."""
        with pytest.raises(DecodeError):
            decode({
                "Year": NumberValue(value="2015"),
                "Title": StringValue(value="Heat"),
                "Rating": NumberValue(value="1e400"),
            })


class TestWireConversion:
    """Test variant <-> boto3 low-level format."""

    @pytest.mark.parametrize("literal,variant,wire", [
        (2015, NumberValue(value="2015"), {"N": "2015"}),
        (4.5, NumberValue(value="4.5"), {"N": "4.5"}),
        ("Heat", StringValue(value="Heat"), {"S": "Heat"}),
        (False, BoolValue(value=False), {"BOOL": False}),
        (None, NullValue(), {"NULL": True}),
    ])
    def test_literal_to_wire(self, literal, variant, wire):
        """Literals map to the expected variant and wire form."""
        assert to_attribute_value(literal) == variant
        assert to_wire(variant) == wire
        assert from_wire(wire) == variant

    def test_unsupported_literal(self):
        """Lists have no scalar representation."""
        with pytest.raises(TypeError):
            to_attribute_value([1, 2])

    def test_unsupported_tag(self):
        """Map/list/set attributes are not modelled."""
        with pytest.raises(DecodeError, match="unsupported type 'M'"):
            from_wire({"M": {}}, "Info")

    def test_malformed_wire_value(self):
        """A wire value must have exactly one tag."""
        with pytest.raises(DecodeError):
            from_wire({"N": "1", "S": "1"})

    def test_from_wire_map_limits_attributes(self):
        """Only the requested attributes are parsed."""
        item = {"Year": {"N": "2015"}, "Title": {"S": "Heat"}, "Info": {"M": {}}}

        attrs = from_wire_map(item, ["Year", "Title"])

        assert set(attrs) == {"Year", "Title"}

    def test_decode_item_ignores_nested_attributes(self):
        """Items with extra nested attributes still decode."""
        item = {"Year": {"N": "2015"}, "Title": {"S": "Heat"}, "Info": {"M": {"genre": {"S": "Crime"}}}}

        assert decode_item(item) == Movie(year=2015, title="Heat")

    def test_from_attribute_value(self):
        """Numbers unwrap to int when integral, float otherwise."""
        assert from_attribute_value(NumberValue(value="4")) == 4
        assert from_attribute_value(NumberValue(value="2.4")) == 2.4
        assert from_attribute_value(StringValue(value="x")) == "x"
        assert from_attribute_value(NullValue()) is None

    def test_movie_key(self):
        """The key holds exactly Year and Title."""
        assert to_wire_map(movie_key(2015, "Heat")) == {"Year": {"N": "2015"}, "Title": {"S": "Heat"}}

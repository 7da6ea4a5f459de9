"""Tests for query string parameters."""

from wayfinder.http.query import QueryParams, flatten_multi


class TestQueryParams:
    def test_access(self) -> None:
        query = QueryParams(b"a=1&b=2&b=3&empty=")
        assert query["a"] == "1"
        assert query.get("b") == "2"
        assert query.get_list("b") == ["2", "3"]
        assert query["empty"] == ""
        assert query.get("missing", "x") == "x"
        assert len(query) == 3

    def test_flat(self) -> None:
        assert QueryParams(b"a=1&b=2&b=3").flat() == {"a": "1", "b": ["2", "3"]}

    def test_encode_sorts_keys(self) -> None:
        assert QueryParams(b"z=1&a=2&a=1&m=x+y").encode() == "a=2&a=1&m=x+y&z=1"

    def test_empty(self) -> None:
        assert QueryParams().encode() == ""
        assert QueryParams().flat() == {}


def test_flatten_multi() -> None:
    assert flatten_multi({"one": ["1"], "many": ["1", "2"]}) == {"one": "1", "many": ["1", "2"]}

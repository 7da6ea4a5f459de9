"""Shared fixtures."""

from collections.abc import Iterator

import pytest

from wayfinder.routing.params import clear_regex_cache


@pytest.fixture(autouse=True)
def _fresh_regex_cache() -> Iterator[None]:
    yield
    clear_regex_cache()

import typing

import pytest

from natural_lenses import set_settings


@pytest.fixture(autouse=True)
def _isolated_settings() -> typing.Generator[None, None, None]:
    """Make every test start from settings read from a clean environment."""
    previous = set_settings(None)
    yield
    set_settings(previous)

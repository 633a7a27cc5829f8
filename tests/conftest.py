import pytest

from tinyioc import Container


@pytest.fixture(autouse=True)
def fresh_container():
    """Give every test its own process-wide container."""
    Container._reset()  # noqa: SLF001
    yield
    Container._reset()  # noqa: SLF001

"""Shared fixtures."""

import pytest

from hother.markstream import StreamingParser


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def parser():
    return StreamingParser()

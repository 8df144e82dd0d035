import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from storyseed.services import InMemoryStoryCache, StoryService


class RecordingGenerator:
    """Stand-in for a hosted model that remembers every call."""

    def __init__(self, output="Once upon a time.", error=None):
        self.output = output
        self.error = error
        self.calls = []

    def generate(self, prompt, policy):
        self.calls.append((prompt, policy))
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def generator():
    return RecordingGenerator()


@pytest.fixture
def cache():
    return InMemoryStoryCache()


@pytest.fixture
def service(cache, generator):
    return StoryService(cache, generator)

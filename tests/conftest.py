import random

import pytest

from engine import IdGenerator


class StubRandom(random.Random):
    """Random source with fixed answers, used to force a branch."""

    def __init__(self, roll=0.99, deficit=0, fragment=3, pick=0):
        super().__init__(0)
        self.roll = roll
        self.deficit = deficit
        self.fragment = fragment
        self.pick = pick

    def random(self):
        return self.roll

    def randrange(self, *args, **kwargs):
        return self.deficit

    def randint(self, a, b):
        return self.fragment

    def choice(self, seq):
        return seq[self.pick]


@pytest.fixture
def ids():
    return IdGenerator(100)


@pytest.fixture
def no_fragment():
    return StubRandom(roll=0.99)


@pytest.fixture
def fragment():
    return StubRandom(roll=0.0, fragment=3)

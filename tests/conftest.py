import random
import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so the top-level modules import
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())


SAMPLE_NOTES = (
    "Lecture 4 - Department of Computer Science, Page 12\n"
    "Dr. Ada Lovelace, University of Somewhere, 12/03/2024\n"
    "• Binary Search Trees are a fundamental Data Structure used in Computer Science. "
    "A Binary Search Tree allows efficient Lookup of keys. "
    "Each node in a Binary Search Tree stores a key and two child pointers. "
    "An AVL Tree is a self-balancing Binary Search Tree invented by Adelson-Velsky and Landis. "
    "Hash Tables offer constant time lookups on average; collisions are resolved by chaining. "
    "The HTTP protocol and JavaScript runtimes often rely on HashMap implementations."
)


@pytest.fixture
def sample_notes():
    """Realistic extracted lecture notes, boilerplate included."""
    return SAMPLE_NOTES


@pytest.fixture
def rng():
    """Seeded random source for reproducible MCQs."""
    return random.Random(42)


def _identity(sentence):
    return sentence


def _always_fails(sentence):
    raise RuntimeError("grammar service unavailable")


@pytest.fixture
def identity_corrector():
    return _identity


@pytest.fixture
def failing_corrector():
    return _always_fails

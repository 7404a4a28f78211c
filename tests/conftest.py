"""
Pytest configuration and shared fixtures.

Fixtures available to all tests:
  • make_record(...)   — build a raw BreedRecord
  • make_breed(...)    — build a normalized Breed, optionally with trait overrides
  • family_preference  — the high-activity family with two school-age kids
  • seeded_repo        — in-memory repository with the demo catalog
"""

from __future__ import annotations

import os
import sys

import pytest

# Ensure the project root is on the path so all flat-module imports resolve.
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from breed_catalog import transform_breed  # noqa: E402
from models import Breed, BreedRecord, Preference  # noqa: E402
from repositories import build_seeded_repository  # noqa: E402


# ---------------------------------------------------------------------------
# Breed factories
# ---------------------------------------------------------------------------

def _record(
    record_id: int = 1,
    name: str = "Test Breed",
    group: str = "mixed",
    size: str = "medium",
    breed_type: str = "purebred",
    **kwargs,
) -> BreedRecord:
    return BreedRecord(
        id=record_id, name=name, breed_group=group,
        size_category=size, breed_type=breed_type, **kwargs,
    )


def _breed(
    record_id: int = 1,
    name: str = "Test Breed",
    group: str = "mixed",
    size: str = "medium",
    traits: dict | None = None,
    **kwargs,
) -> Breed:
    breed = transform_breed(_record(record_id, name, group, size, **kwargs))
    if traits:
        breed = breed.model_copy(update={
            "characteristics": breed.characteristics.model_copy(update=traits),
        })
    return breed


@pytest.fixture
def make_record():
    return _record


@pytest.fixture
def make_breed():
    return _breed


@pytest.fixture
def golden_retriever() -> Breed:
    return _breed(2, "Golden Retriever", "sporting", "large")


@pytest.fixture
def chihuahua() -> Breed:
    return _breed(15, "Chihuahua", "toy", "toy")


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

@pytest.fixture
def family_preference() -> Preference:
    return Preference(
        activity_level="high",
        living_space="house-large-yard",
        family_size=4,
        children_ages=[6, 9],
        experience_level="some-experience",
        size=["large"],
    )


@pytest.fixture
def seeded_repo():
    return build_seeded_repository()

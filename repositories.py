"""
HomeForPup Matching — Repository Layer

Abstract data access for the breed catalog, breeders and saved match
preferences, plus an in-memory implementation used for local development
and tests.
"""
from __future__ import annotations
import logging
from typing import Optional

from models import BreederRecord, BreedRecord, SavedPreferences

logger = logging.getLogger(__name__)


# ============================================================
# Database Abstraction Layer (Repository Pattern)
# ============================================================

class CatalogRepository:
    """
    Abstract DB access. In production, backed by asyncpg.
    Here we define the interface; implementations are swappable.
    """

    async def list_breed_records(self) -> list[BreedRecord]:
        raise NotImplementedError

    async def get_breed_record(self, record_id: int) -> Optional[BreedRecord]:
        raise NotImplementedError

    async def list_breeders_with_puppies(self) -> list[BreederRecord]:
        raise NotImplementedError

    async def get_match_preferences(self, user_id: str) -> Optional[SavedPreferences]:
        raise NotImplementedError

    async def save_match_preferences(self, saved: SavedPreferences) -> SavedPreferences:
        raise NotImplementedError


# ============================================================
# In-Memory Repository (for testing / local dev)
# ============================================================

class InMemoryRepository(CatalogRepository):
    """In-memory implementation for testing without a database."""

    def __init__(
        self,
        breeds: Optional[list[BreedRecord]] = None,
        breeders: Optional[list[BreederRecord]] = None,
    ):
        self.breeds: dict[int, BreedRecord] = {}
        self.breeders: dict[int, BreederRecord] = {}
        self.preferences: dict[str, SavedPreferences] = {}
        for b in breeds or []:
            self.breeds[b.id] = b
        for br in breeders or []:
            self.breeders[br.id] = br

    async def list_breed_records(self) -> list[BreedRecord]:
        return list(self.breeds.values())

    async def get_breed_record(self, record_id: int) -> Optional[BreedRecord]:
        return self.breeds.get(record_id)

    async def list_breeders_with_puppies(self) -> list[BreederRecord]:
        return [
            b for b in self.breeders.values()
            if b.active and b.available_puppies > 0
        ]

    async def get_match_preferences(self, user_id: str) -> Optional[SavedPreferences]:
        return self.preferences.get(user_id)

    async def save_match_preferences(self, saved: SavedPreferences) -> SavedPreferences:
        self.preferences[saved.user_id] = saved
        return saved


# ============================================================
# Demo Catalog
# ============================================================

SEED_BREEDS: list[tuple[int, str, str, str, str, list[str]]] = [
    # (id, name, group, size, type, alt names)
    (1, 'Labrador Retriever', 'sporting', 'large', 'purebred', ['Lab']),
    (2, 'Golden Retriever', 'sporting', 'large', 'purebred', ['Golden']),
    (3, 'English Springer Spaniel', 'sporting', 'medium', 'purebred', []),
    (4, 'German Shepherd Dog', 'herding', 'large', 'purebred', ['Alsatian', 'GSD']),
    (5, 'Border Collie', 'herding', 'medium', 'purebred', []),
    (6, 'Australian Shepherd', 'herding', 'medium', 'purebred', ['Aussie']),
    (7, 'Bernese Mountain Dog', 'working', 'giant', 'purebred', ['Berner']),
    (8, 'Boxer', 'working', 'large', 'purebred', []),
    (9, 'Siberian Husky', 'working', 'large', 'purebred', ['Husky']),
    (10, 'Beagle', 'hound', 'small', 'purebred', []),
    (11, 'Basset Hound', 'hound', 'medium', 'purebred', []),
    (12, 'Greyhound', 'hound', 'large', 'purebred', []),
    (13, 'Jack Russell Terrier', 'terrier', 'small', 'purebred', ['Parson Russell']),
    (14, 'West Highland White Terrier', 'terrier', 'small', 'purebred', ['Westie']),
    (15, 'Chihuahua', 'toy', 'toy', 'purebred', []),
    (16, 'Cavalier King Charles Spaniel', 'toy', 'small', 'purebred', ['Cavalier']),
    (17, 'Pomeranian', 'toy', 'toy', 'purebred', ['Pom']),
    (18, 'Standard Poodle', 'non-sporting', 'large', 'purebred', ['Poodle']),
    (19, 'French Bulldog', 'non-sporting', 'small', 'purebred', ['Frenchie']),
    (20, 'Goldendoodle', 'mixed', 'medium', 'designer', ['Groodle']),
    (21, 'Labradoodle', 'mixed', 'large', 'designer', []),
    (22, 'Cavapoo', 'mixed', 'small', 'designer', ['Cavoodle']),
]

SEED_BREEDERS: list[BreederRecord] = [
    BreederRecord(
        id=1, business_name='Sunny Meadow Retrievers', city='Asheville',
        state='NC', breeds=['Golden Retriever', 'Labrador Retriever'],
        available_puppies=4, pricing='$2500-$3500', verified=True,
    ),
    BreederRecord(
        id=2, business_name='Blue Ridge Doodles', city='Roanoke', state='VA',
        breeds=['Goldendoodle', 'Labradoodle', 'Cavapoo'],
        available_puppies=3, pricing='$3000', verified=True,
    ),
    BreederRecord(
        id=3, business_name='Tiny Paws Kennel', city='Austin', state='TX',
        breeds=['Chihuahua', 'Pomeranian'], available_puppies=2,
        pricing='Call for pricing', verified=False,
    ),
    BreederRecord(
        id=4, business_name='High Plains Herding', city='Bozeman', state='MT',
        breeds=['Border Collie', 'Australian Shepherd'],
        available_puppies=0, pricing='$1200-$1800', verified=True,
    ),
]


def seed_breed_records() -> list[BreedRecord]:
    return [
        BreedRecord(
            id=bid, name=name, alt_names=alts, breed_group=group,
            size_category=size, breed_type=btype, hybrid=btype == 'designer',
            search_terms=f"{name.lower()} {group}",
        )
        for bid, name, group, size, btype, alts in SEED_BREEDS
    ]


def build_seeded_repository() -> InMemoryRepository:
    """In-memory repository pre-loaded with the demo catalog."""
    repo = InMemoryRepository(
        breeds=seed_breed_records(),
        breeders=[b.model_copy() for b in SEED_BREEDERS],
    )
    logger.info(
        "Seeded in-memory catalog: %d breeds, %d breeders",
        len(repo.breeds), len(repo.breeders))
    return repo

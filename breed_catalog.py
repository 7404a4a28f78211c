"""
HomeForPup Matching — Breed Catalog

Responsibilities:
  1. Category / size normalization (total, case-insensitive)
  2. Characteristic vector resolution from breed group
  3. Raw catalog row → Breed transformation with descriptive content
  4. Browse: search, filter, sort and paginate the live catalog
"""
from __future__ import annotations
import logging
import math
from typing import Optional

from models import (
    Breed, BreedCategory, BreedCharacteristics, BreedFilters,
    BreedListResponse, BreedRecord, BreedSize, SIZE_ORDER,
)

logger = logging.getLogger(__name__)


# ============================================================
# Characteristic Resolution
# ============================================================

# Traits overridden per breed group; everything else stays at the baseline of 5.
GROUP_TRAIT_OVERRIDES: dict[BreedCategory, dict[str, int]] = {
    BreedCategory.SPORTING: {
        'energy_level': 8, 'exercise_needs': 8, 'trainability': 8, 'friendliness': 7,
    },
    BreedCategory.WORKING: {
        'energy_level': 7, 'protective': 8, 'intelligent': 8, 'loyal': 9,
    },
    BreedCategory.HERDING: {
        'energy_level': 9, 'intelligent': 9, 'trainability': 9, 'alert': 8,
    },
    BreedCategory.HOUND: {
        'independent': 7, 'vocal': 7, 'stubborn': 6, 'energy_level': 6,
    },
    BreedCategory.TERRIER: {
        'energy_level': 8, 'stubborn': 7, 'vocal': 7, 'brave': 8,
    },
    BreedCategory.TOY: {
        'energy_level': 4, 'good_with_kids': 6, 'barking': 7, 'shedding': 3,
    },
}


def resolve_characteristics(breed_group: Optional[str]) -> BreedCharacteristics:
    """
    Build the characteristic vector for a raw breed group string.
    Unknown, missing, mixed and non-sporting groups get the pure baseline.
    """
    category = BreedCategory.normalize(breed_group)
    return BreedCharacteristics(**GROUP_TRAIT_OVERRIDES.get(category, {}))


# ============================================================
# Descriptive Content
# ============================================================

SIZE_PHYSICAL_TRAITS: dict[BreedSize, list[str]] = {
    BreedSize.TOY: ['Compact size', 'Lightweight', 'Portable'],
    BreedSize.SMALL: ['Small stature', 'Manageable size', 'Apartment-friendly'],
    BreedSize.MEDIUM: ['Balanced proportions', 'Versatile size', 'Family-friendly'],
    BreedSize.LARGE: ['Substantial build', 'Strong presence', 'Athletic frame'],
    BreedSize.GIANT: ['Impressive size', 'Powerful build', 'Commanding presence'],
}

GROUP_PHYSICAL_TRAITS: dict[BreedCategory, list[str]] = {
    BreedCategory.SPORTING: ['Athletic build', 'Water-resistant coat', 'Webbed feet'],
    BreedCategory.WORKING: ['Strong build', 'Dense coat', 'Powerful jaws'],
    BreedCategory.HERDING: ['Agile build', 'Alert expression', 'Quick reflexes'],
    BreedCategory.HOUND: ['Sleek build', 'Long ears', 'Scenting ability'],
    BreedCategory.TERRIER: ['Compact build', 'Wire coat', 'Determined expression'],
}

BASE_TEMPERAMENT = ['Loyal', 'Affectionate', 'Intelligent']

GROUP_TEMPERAMENT: dict[BreedCategory, list[str]] = {
    BreedCategory.SPORTING: ['Energetic', 'Friendly', 'Trainable'],
    BreedCategory.WORKING: ['Protective', 'Confident', 'Alert'],
    BreedCategory.HERDING: ['Alert', 'Responsive', 'Energetic'],
    BreedCategory.HOUND: ['Independent', 'Gentle', 'Calm'],
    BreedCategory.TERRIER: ['Spirited', 'Bold', 'Playful'],
    BreedCategory.TOY: ['Gentle', 'Playful', 'Companionable'],
}


def exercise_summary(energy_level: int) -> str:
    if energy_level >= 8:
        return 'High - 60+ minutes daily'
    if energy_level >= 6:
        return 'Moderate - 30-45 minutes daily'
    return 'Low to Moderate - 30 minutes daily'


def _physical_traits(size: BreedSize, category: BreedCategory, raw_size: str) -> list[str]:
    # Only recognized raw sizes contribute size traits; the Medium default does not
    traits = list(SIZE_PHYSICAL_TRAITS[size]) if raw_size.strip().lower() in (
        s.key for s in BreedSize) else []
    traits.extend(GROUP_PHYSICAL_TRAITS.get(category, []))
    return traits


def transform_breed(record: BreedRecord) -> Breed:
    """Convert a raw catalog row to a normalized Breed."""
    size = BreedSize.normalize(record.size_category)
    category = BreedCategory.normalize(record.breed_group)
    characteristics = resolve_characteristics(record.breed_group)
    is_designer = record.breed_type.lower() == 'designer'
    is_purebred = record.breed_type.lower() == 'purebred'
    raw_size = record.size_category.strip().lower()

    overview = (
        f"{'A wonderful hybrid' if record.hybrid else 'A distinguished'} "
        f"{size.key} breed from the {category.value} group. "
        + ('This designer breed combines the best traits of its parent breeds.'
           if is_designer else
           'Known for their unique characteristics and loyal companionship.')
    )

    return Breed(
        id=f"breed-{record.id}",
        name=record.name,
        alt_names=list(record.alt_names),
        category=category,
        size=size,
        breed_type=record.breed_type,
        image=record.cover_photo_url or f"https://placedog.net/500?r&id={record.name}",
        images=[record.cover_photo_url] if record.cover_photo_url else None,
        overview=overview,
        characteristics=characteristics,
        physical_traits=_physical_traits(size, category, record.size_category),
        temperament=BASE_TEMPERAMENT + GROUP_TEMPERAMENT.get(category, []),
        ideal_for=[
            'Dog lovers',
            'Apartment living' if raw_size in ('toy', 'small') else 'Active families',
            'Active owners' if category in (BreedCategory.SPORTING, BreedCategory.WORKING)
            else 'Various lifestyles',
            'Responsible owners',
        ],
        exercise_needs=exercise_summary(characteristics.energy_level),
        common_health_issues=[
            'General breed health considerations',
            'Regular vet checkups recommended',
        ],
        grooming_tips=(
            f"Regular grooming appropriate for {record.breed_group} "
            f"breed characteristics."),
        training_tips=(
            f"Training approach suited for {category.value} group temperament "
            f"and {record.breed_type} characteristics."),
        fun_facts=[
            f"{'Purebred' if is_purebred else 'Hybrid'} breed with rich history",
            f"Part of the {category.value} group",
            f"Size category: {size.value}",
            'Beloved by dog enthusiasts worldwide',
        ],
        breeder_count=0,
    )


# ============================================================
# Browse / Search
# ============================================================

SORT_FIELDS = ('name', 'category', 'size', 'breedType')


def _matches_search(record: BreedRecord, term: str) -> bool:
    haystack = ' '.join([record.name, *record.alt_names, record.search_terms or ''])
    return term in haystack.lower()


def filter_records(
    records: list[BreedRecord],
    search: str = '',
    category: str = 'All',
    size: str = 'All',
    breed_type: str = 'All',
) -> list[BreedRecord]:
    """
    Apply the catalog filters to raw rows. 'All' disables a filter; a
    category or size outside the known vocabulary is ignored.
    """
    known_categories = {c.value for c in BreedCategory}
    known_sizes = {s.value for s in BreedSize}
    term = search.strip().lower()

    out = []
    for r in records:
        if not r.live:
            continue
        if category and category != 'All' and category in known_categories:
            if BreedCategory.normalize(r.breed_group).value != category:
                continue
        if size and size != 'All' and size in known_sizes:
            if BreedSize.normalize(r.size_category).value != size:
                continue
        if breed_type and breed_type != 'All':
            if r.breed_type.lower() != breed_type.lower():
                continue
        if term and not _matches_search(r, term):
            continue
        out.append(r)
    return out


def sort_breeds(breeds: list[Breed], sort_by: str = 'name') -> list[Breed]:
    """Sort a breed list; unknown sort keys leave the input order untouched."""
    name_key = lambda b: b.name.lower()
    if sort_by == 'name':
        return sorted(breeds, key=name_key)
    if sort_by == 'category':
        return sorted(breeds, key=lambda b: (b.category.value, name_key(b)))
    if sort_by == 'size':
        return sorted(breeds, key=lambda b: (SIZE_ORDER.index(b.size), name_key(b)))
    if sort_by == 'breedType':
        return sorted(breeds, key=lambda b: (b.breed_type, name_key(b)))
    return list(breeds)


def paginate(
    breeds: list[Breed],
    page: int = 1,
    limit: int = 50,
) -> BreedListResponse:
    """Slice one page out of an already filtered and sorted breed list."""
    page = max(1, page)
    limit = max(1, limit)
    start = (page - 1) * limit
    end = start + limit
    page_items = breeds[start:end]
    total = len(breeds)
    total_pages = math.ceil(total / limit)

    return BreedListResponse(
        breeds=page_items,
        count=len(page_items),
        total=total,
        page=page,
        limit=limit,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
        total_pages=total_pages,
        start_index=start + 1,
        end_index=min(end, total),
        filters=BreedFilters(
            available_categories=sorted({b.category.value for b in breeds}),
            available_sizes=sorted({b.size.value for b in breeds}),
            available_breed_types=sorted({b.breed_type for b in breeds}),
            total_breeders=sum(b.breeder_count for b in breeds),
        ),
    )


class BreedCatalog:
    """
    Read path over the breed catalog repository. Orchestrates:
      fetch rows → filter → transform → sort → paginate
    """

    def __init__(self, repo):
        """
        Args:
            repo: CatalogRepository (from repositories or asyncpg_repository)
        """
        self.repo = repo

    async def all_breeds(self, limit: Optional[int] = None) -> list[Breed]:
        """All live breeds in name order, as scored by the matcher."""
        records = filter_records(await self.repo.list_breed_records())
        breeds = sort_breeds([transform_breed(r) for r in records], 'name')
        return breeds[:limit] if limit else breeds

    async def list_breeds(
        self,
        search: str = '',
        category: str = 'All',
        size: str = 'All',
        breed_type: str = 'All',
        page: int = 1,
        limit: int = 50,
        sort_by: str = 'name',
    ) -> BreedListResponse:
        records = filter_records(
            await self.repo.list_breed_records(),
            search=search, category=category, size=size, breed_type=breed_type,
        )
        breeds = sort_breeds([transform_breed(r) for r in records], sort_by)
        logger.debug(
            "Catalog query search=%r category=%s size=%s type=%s -> %d breeds",
            search, category, size, breed_type, len(breeds))
        return paginate(breeds, page=page, limit=limit)

    async def get_breed(self, breed_id: str) -> Optional[Breed]:
        """Look up by 'breed-<id>' or bare numeric id."""
        raw = breed_id[len('breed-'):] if breed_id.startswith('breed-') else breed_id
        try:
            record_id = int(raw)
        except ValueError:
            return None
        record = await self.repo.get_breed_record(record_id)
        if record is None or not record.live:
            return None
        return transform_breed(record)

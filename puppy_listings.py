"""
HomeForPup Matching — Puppy Listing Builder

Turns active breeders with available puppies into listing cards for the
breeds an adopter was matched with. Generation is deterministic: names, ages
and images are derived from the breeder id and the puppy's position.
"""
from __future__ import annotations
import logging
import re
from typing import TYPE_CHECKING, Optional

from models import BreederRecord, PuppyListing

if TYPE_CHECKING:
    from recommendation_engine import ScoredBreed

logger = logging.getLogger(__name__)

MALE_NAMES = ['Max', 'Charlie', 'Cooper', 'Buddy', 'Rocky',
              'Tucker', 'Jack', 'Bear', 'Duke', 'Zeus']
FEMALE_NAMES = ['Bella', 'Luna', 'Lucy', 'Daisy', 'Mia',
                'Sophie', 'Ruby', 'Lola', 'Zoe', 'Molly']

DEFAULT_PRICE = 2000
MAX_PUPPIES_PER_BREEDER = 3
BASE_AGE_WEEKS = 8

_PRICE_RE = re.compile(r'\$?(\d+)(?:-\$?(\d+))?')


def parse_price(pricing: Optional[str]) -> int:
    """Midpoint of the first '$min-$max' range in free-text pricing."""
    if not pricing:
        return DEFAULT_PRICE
    m = _PRICE_RE.search(pricing)
    if not m:
        return DEFAULT_PRICE
    low = int(m.group(1))
    high = int(m.group(2)) if m.group(2) else low
    return (low + high) // 2


def build_puppy_listings(
    ranked: list[ScoredBreed],
    breeders: list[BreederRecord],
    limit: int = 20,
) -> list[PuppyListing]:
    """
    Build puppy listings for breeders that raise any of the ranked breeds.
    Listings are ordered by their breed's match score, best first.
    """
    by_name = {sb.breed.name.lower(): sb for sb in reversed(ranked)}
    puppies: list[PuppyListing] = []

    for breeder in breeders:
        if not breeder.active or breeder.available_puppies <= 0:
            continue
        matching = [b for b in breeder.breeds if b.lower() in by_name]
        if not matching:
            continue

        price = parse_price(breeder.pricing)
        count = min(breeder.available_puppies, MAX_PUPPIES_PER_BREEDER)
        for i in range(count):
            gender = 'male' if i % 2 == 0 else 'female'
            names = MALE_NAMES if gender == 'male' else FEMALE_NAMES
            breed_name = matching[i % len(matching)]
            matched = by_name[breed_name.lower()]
            seed = breeder.id * 10 + i

            puppies.append(PuppyListing(
                id=f"{breeder.id}-puppy-{i + 1}",
                name=names[seed % len(names)],
                breed=breed_name,
                gender=gender,
                age_weeks=BASE_AGE_WEEKS + (breeder.id + i) % 12,
                price=price,
                location=f"{breeder.city}, {breeder.state}",
                breeder_name=breeder.business_name,
                breeder_verified=breeder.verified,
                image=f"https://placedog.net/400/300?random={seed}",
                match_score=matched.score,
                match_reasons=list(matched.match_reasons),
            ))

    puppies.sort(key=lambda p: p.match_score, reverse=True)
    logger.debug("Built %d puppy listings from %d breeders", len(puppies), len(breeders))
    return puppies[:limit]

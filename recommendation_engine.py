"""
HomeForPup Matching — Breed Recommendation Engine

Responsibilities:
  1. Raw adopter input → canonical Preference
  2. Weighted, explainable breed scoring over a declarative dimension table
  3. Stable ranking and top-K truncation
  4. Full pipeline: catalog fetch → score → rank → puppy listings
"""
from __future__ import annotations
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from models import (
    ActivityLevel, Breed, BreedRecommendation, BreedSize, ExperienceLevel,
    LivingSpace, Preference, RecommendRequest, RecommendResponse,
)
from puppy_listings import build_puppy_listings

logger = logging.getLogger(__name__)


# ============================================================
# Preference Normalization
# ============================================================

LIVING_SPACE_ALIASES: dict[str, str] = {
    'house-small': LivingSpace.HOUSE_SMALL_YARD.value,
    'house-medium': LivingSpace.HOUSE_SMALL_YARD.value,
    'house-large': LivingSpace.HOUSE_LARGE_YARD.value,
    'farm': LivingSpace.FARM_ACREAGE.value,
    'acreage': LivingSpace.FARM_ACREAGE.value,
    'farm/acreage': LivingSpace.FARM_ACREAGE.value,
}

EXPERIENCE_ALIASES: dict[str, str] = {
    'experienced': ExperienceLevel.VERY_EXPERIENCED.value,
}

FAMILY_SIZE_LABELS: dict[str, int] = {
    'single': 1,
    'couple': 2,
    'small-family': 3,
    'large-family': 5,
}

CHILD_AGE_LABELS: dict[str, int] = {
    'infants': 0,
    'toddlers': 2,
    'young-children': 5,
    'older-children': 10,
    'teens': 14,
}


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().lower()
    return text or None


def _coerce_int(value: Any) -> Optional[int]:
    """Whole number from an int, float or numeric string; fractions truncate."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, float):
        try:
            value = float(str(value).strip())
        except (TypeError, ValueError):
            return None
    if not math.isfinite(value):
        return None
    return int(value)


def _as_list(value: Any) -> list[Any]:
    """A lone value becomes a one-item list; None becomes empty."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def normalize_preferences(request: RecommendRequest) -> Preference:
    """
    Build a Preference from raw adopter input. Nothing here rejects input:
    unknown enum strings are kept and score neutrally downstream.
    """
    activity = _clean(request.activity_level)
    space = _clean(request.living_space)
    experience = _clean(request.experience_level)

    family_size = None
    if request.family_size is not None:
        label = _clean(request.family_size)
        family_size = FAMILY_SIZE_LABELS.get(label) if label else None
        if family_size is None:
            family_size = _coerce_int(request.family_size)

    ages: list[int] = []
    for raw_age in _as_list(request.children_ages):
        label = _clean(raw_age)
        if label in CHILD_AGE_LABELS:
            ages.append(CHILD_AGE_LABELS[label])
            continue
        age = _coerce_int(raw_age)
        if age is not None and age >= 0:
            ages.append(age)

    sizes: list[str] = []
    for raw_size in _as_list(request.size):
        s = _clean(raw_size)
        if s == 'any':
            sizes = []
            break
        if s and s not in sizes:
            sizes.append(s)

    return Preference(
        activity_level=activity,
        living_space=LIVING_SPACE_ALIASES.get(space, space) if space else None,
        family_size=family_size,
        children_ages=ages,
        experience_level=EXPERIENCE_ALIASES.get(experience, experience)
        if experience else None,
        size=sizes,
    )


# ============================================================
# Scoring Tables
# ============================================================

NEUTRAL_LEVEL = 5

# Target breed energy per adopter activity level
ACTIVITY_TARGET: dict[str, int] = {
    ActivityLevel.LOW.value: 3,
    ActivityLevel.MODERATE.value: 6,
    ActivityLevel.HIGH.value: 9,
    ActivityLevel.VERY_HIGH.value: 10,
}

# Handler skill per experience level, compared against breed difficulty
EXPERIENCE_SKILL: dict[str, int] = {
    ExperienceLevel.FIRST_TIME.value: 2,
    ExperienceLevel.SOME_EXPERIENCE.value: 5,
    ExperienceLevel.VERY_EXPERIENCED.value: 9,
}

# Room available per living situation
SPACE_LEVEL: dict[str, int] = {
    LivingSpace.APARTMENT.value: 2,
    LivingSpace.HOUSE_SMALL_YARD.value: 5,
    LivingSpace.HOUSE_LARGE_YARD.value: 8,
    LivingSpace.FARM_ACREAGE.value: 10,
}

SUITABLE_SIZES: dict[str, set[BreedSize]] = {
    LivingSpace.APARTMENT.value: {BreedSize.TOY, BreedSize.SMALL},
    LivingSpace.HOUSE_SMALL_YARD.value: {BreedSize.TOY, BreedSize.SMALL, BreedSize.MEDIUM},
    LivingSpace.HOUSE_LARGE_YARD.value: {
        BreedSize.SMALL, BreedSize.MEDIUM, BreedSize.LARGE, BreedSize.GIANT},
    LivingSpace.FARM_ACREAGE.value: set(BreedSize),
}
DEFAULT_SUITABLE_SIZES = {BreedSize.SMALL, BreedSize.MEDIUM, BreedSize.LARGE}

# Room a breed needs by body size, averaged with its exercise needs
SIZE_SPACE_NEED: dict[BreedSize, int] = {
    BreedSize.TOY: 3,
    BreedSize.SMALL: 3,
    BreedSize.MEDIUM: 5,
    BreedSize.LARGE: 7,
    BreedSize.GIANT: 9,
}

YOUNG_CHILD_MAX_AGE = 4      # ages 0..4 count as young children
BUSY_HOUSEHOLD_SIZE = 3      # households of 3+ people
SIZE_MISMATCH_FRACTION = 0.2


def _clamp(v: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, v))


# ============================================================
# Dimension Scorers
# ============================================================
# Each scorer returns (fraction in [0, 1], reasons).

def score_energy(breed: Breed, pref: Preference) -> tuple[float, list[str]]:
    target = ACTIVITY_TARGET.get(pref.activity_level, NEUTRAL_LEVEL)
    energy = breed.characteristics.energy_level
    diff = abs(target - energy)
    reasons: list[str] = []

    if diff <= 1:
        if pref.activity_level in (ActivityLevel.HIGH.value, ActivityLevel.VERY_HIGH.value):
            reasons.append('Great energy level for active families')
        elif pref.activity_level == ActivityLevel.LOW.value:
            reasons.append('Calm temperament suits your relaxed lifestyle')
        else:
            reasons.append('Well-balanced energy for your moderate lifestyle')
    elif energy > target + 2:
        reasons.append('Higher energy than your preference — needs more exercise')
    elif energy < target - 2:
        reasons.append('Lower energy — may not keep up with your active lifestyle')

    return _clamp((20 - diff * 3) / 20), reasons


def score_size(breed: Breed, pref: Preference) -> tuple[float, list[str]]:
    size = breed.size.value
    if not pref.size:
        return 1.0, [f"{size} size works well for your preferences"]
    if breed.size.key in pref.size:
        return 1.0, [f"Perfect size match — {size} is exactly what you're looking for"]
    return SIZE_MISMATCH_FRACTION, [f"{size} size doesn't match your preference"]


def score_kids(breed: Breed, pref: Preference) -> tuple[float, list[str]]:
    c = breed.characteristics
    reasons: list[str] = []

    if not pref.children_ages:
        if c.friendliness >= 7:
            reasons.append('Friendly and sociable companion')
        return c.friendliness / 10, reasons

    has_young = any(age <= YOUNG_CHILD_MAX_AGE for age in pref.children_ages)
    if has_young:
        value = (c.good_with_kids * 0.4 + c.gentle * 0.3 + c.patient * 0.3) / 10
        if c.good_with_kids >= 8 and c.gentle >= 7:
            reasons.append('Excellent with young children — gentle and patient')
        elif c.good_with_kids < 5:
            reasons.append('May not be ideal around very young children')
    else:
        value = (c.good_with_kids * 0.6 + c.patient * 0.4) / 10
        if c.good_with_kids >= 7:
            reasons.append('Great with kids of all ages')

    return value, reasons


def score_trainability(breed: Breed, pref: Preference) -> tuple[float, list[str]]:
    c = breed.characteristics
    skill = EXPERIENCE_SKILL.get(pref.experience_level, NEUTRAL_LEVEL)
    difficulty = round((10 - c.trainability + c.stubborn + c.independent) / 3)
    reasons: list[str] = []

    if skill >= difficulty:
        value = max(0.2, c.trainability / 10)
        if c.trainability >= 8:
            reasons.append('Highly trainable — eager to learn')
        elif c.trainability >= 5:
            reasons.append('Trainable with consistent effort')
    else:
        value = max(0.2, c.trainability / 10 * 0.6)
        reasons.append('May be challenging for your experience level')

    return value, reasons


def score_space(breed: Breed, pref: Preference) -> tuple[float, list[str]]:
    space = SPACE_LEVEL.get(pref.living_space, NEUTRAL_LEVEL)
    suitable = SUITABLE_SIZES.get(pref.living_space, DEFAULT_SUITABLE_SIZES)
    need = (breed.characteristics.exercise_needs + SIZE_SPACE_NEED[breed.size]) / 2
    slack = space - need

    if breed.size in suitable and slack >= 0:
        return 1.0, ['Great fit for your living space']
    if breed.size in suitable:
        return _clamp((15 + slack * 2) / 15, 5 / 15), [
            'Adequate space, but more room would be ideal']
    return _clamp((15 + slack * 3) / 15, 2 / 15), [
        'Your living space may be tight for this breed']


def score_grooming(breed: Breed, pref: Preference) -> tuple[float, list[str]]:
    c = breed.characteristics
    demand = (c.grooming_needs + c.shedding) / 2
    reasons: list[str] = []
    if demand <= 3:
        reasons.append('Low maintenance grooming')
    elif demand >= 7:
        reasons.append('Higher grooming needs than average')
    return _clamp((10 - demand + 5) / 15, 0.2), reasons


def score_social(breed: Breed, pref: Preference) -> tuple[float, list[str]]:
    c = breed.characteristics
    busy = pref.family_size is not None and pref.family_size >= BUSY_HOUSEHOLD_SIZE
    if busy:
        level = (c.good_with_dogs * 0.2 + c.good_with_strangers * 0.3
                 + c.social * 0.3 + c.adaptable * 0.2)
    else:
        level = c.good_with_dogs * 0.3 + c.social * 0.3 + c.adaptable * 0.4

    reasons: list[str] = []
    if level >= 7:
        reasons.append('Thrives in busy family environments' if busy
                       else 'Sociable and adaptable companion')
    elif level <= 4:
        reasons.append('Prefers quieter environments with fewer people')
    return _clamp(level / 10, 0.1), reasons


@dataclass(frozen=True)
class ScoringDimension:
    """One row of the scoring table: the max points a scorer can award."""
    name: str
    weight: float
    scorer: Callable[[Breed, Preference], tuple[float, list[str]]]


# Weights sum to 100; reasons are emitted in table order.
SCORING_DIMENSIONS: tuple[ScoringDimension, ...] = (
    ScoringDimension('energyMatch', 20.0, score_energy),
    ScoringDimension('sizeMatch', 15.0, score_size),
    ScoringDimension('kidFriendliness', 15.0, score_kids),
    ScoringDimension('trainability', 15.0, score_trainability),
    ScoringDimension('spaceRequirements', 15.0, score_space),
    ScoringDimension('groomingNeeds', 10.0, score_grooming),
    ScoringDimension('socialCompatibility', 10.0, score_social),
)


# ============================================================
# Breed Scorer / Ranker
# ============================================================

@dataclass
class ScoredBreed:
    """Complete scoring result for one breed against a preference."""
    breed: Breed
    score: float = 0.0
    breakdown: dict[str, float] = field(default_factory=dict)
    match_reasons: list[str] = field(default_factory=list)


def score_breed(
    breed: Breed,
    preference: Preference,
    dimensions: tuple[ScoringDimension, ...] = SCORING_DIMENSIONS,
) -> ScoredBreed:
    """
    Score a single breed against adopter preferences.
    Pure: the same inputs always produce the same ScoredBreed.
    """
    sb = ScoredBreed(breed=breed)
    for dim in dimensions:
        fraction, reasons = dim.scorer(breed, preference)
        sb.breakdown[dim.name] = round(dim.weight * _clamp(fraction), 2)
        sb.match_reasons.extend(reasons)
    sb.score = round(sum(sb.breakdown.values()), 2)
    return sb


def rank_breeds(
    breeds: list[Breed],
    preference: Preference,
    top_k: int = 10,
) -> list[ScoredBreed]:
    """
    Score every breed and keep the best top_k. Equal scores keep their
    input order (sorted() is stable, including with reverse=True).
    """
    scored = [score_breed(b, preference) for b in breeds]
    ranked = sorted(scored, key=lambda s: s.score, reverse=True)
    return ranked[:max(0, top_k)]


# ============================================================
# Recommendation Engine
# ============================================================

class RecommendationEngine:
    """
    Main recommendation engine. Orchestrates:
      request normalization → catalog fetch → scoring → ranking →
      puppy listings → response assembly
    """

    def __init__(
        self,
        catalog: Any,
        breeder_repo: Any,
        top_k: int = 10,
        puppy_limit: int = 20,
        catalog_limit: int = 500,
    ):
        """
        Args:
            catalog: BreedCatalog
            breeder_repo: CatalogRepository (from repositories or asyncpg_repository)
        """
        self.catalog = catalog
        self.breeder_repo = breeder_repo
        self.top_k = top_k
        self.puppy_limit = puppy_limit
        self.catalog_limit = catalog_limit

    async def recommend(self, request: RecommendRequest) -> RecommendResponse:
        """Generate breed and puppy recommendations for a request."""
        start = time.monotonic()
        preference = normalize_preferences(request)
        top_k = request.top_k or self.top_k

        breeds = await self.catalog.all_breeds(limit=self.catalog_limit)
        ranked = rank_breeds(breeds, preference, top_k=top_k)

        puppies = []
        if ranked:
            breeders = await self.breeder_repo.list_breeders_with_puppies()
            puppies = build_puppy_listings(ranked, breeders, limit=self.puppy_limit)

        elapsed = int((time.monotonic() - start) * 1000)
        logger.info(
            "Scored %d breeds, returning %d breeds and %d puppies in %dms",
            len(breeds), len(ranked), len(puppies), elapsed)

        return RecommendResponse(
            breeds=[self._to_recommendation(sb) for sb in ranked],
            puppies=puppies,
            total_breeds_scored=len(breeds),
        )

    def _to_recommendation(self, sb: ScoredBreed) -> BreedRecommendation:
        """Convert a ScoredBreed to its response shape."""
        b = sb.breed
        return BreedRecommendation(
            id=b.id,
            name=b.name,
            size=b.size,
            category=b.category,
            image=b.image,
            characteristics=b.characteristics,
            score=sb.score,
            breakdown=dict(sb.breakdown),
            match_reasons=list(sb.match_reasons),
        )

"""
HomeForPup Matching — Core Pydantic Models
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ============================================================
# Enums
# ============================================================

class ActivityLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very-high"

class LivingSpace(str, Enum):
    APARTMENT = "apartment"
    HOUSE_SMALL_YARD = "house-small-yard"
    HOUSE_LARGE_YARD = "house-large-yard"
    FARM_ACREAGE = "farm-acreage"

class ExperienceLevel(str, Enum):
    FIRST_TIME = "first-time"
    SOME_EXPERIENCE = "some-experience"
    VERY_EXPERIENCED = "very-experienced"

class BreedSize(str, Enum):
    TOY = "Toy"
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"
    GIANT = "Giant"

    @property
    def key(self) -> str:
        """Lower-case form used in adopter size preferences."""
        return self.value.lower()

    @classmethod
    def normalize(cls, raw: Optional[str]) -> BreedSize:
        """Case-insensitive lookup; anything unrecognized is Medium."""
        if not raw:
            return cls.MEDIUM
        return _SIZE_LOOKUP.get(raw.strip().lower(), cls.MEDIUM)

class BreedCategory(str, Enum):
    SPORTING = "Sporting"
    HOUND = "Hound"
    WORKING = "Working"
    TERRIER = "Terrier"
    TOY = "Toy"
    NON_SPORTING = "Non-Sporting"
    HERDING = "Herding"
    MIXED = "Mixed"

    @classmethod
    def normalize(cls, raw: Optional[str]) -> BreedCategory:
        """Case-insensitive lookup; anything unrecognized is Mixed."""
        if not raw:
            return cls.MIXED
        return _CATEGORY_LOOKUP.get(raw.strip().lower(), cls.MIXED)

_SIZE_LOOKUP: dict[str, BreedSize] = {s.value.lower(): s for s in BreedSize}
_CATEGORY_LOOKUP: dict[str, BreedCategory] = {c.value.lower(): c for c in BreedCategory}

SIZE_ORDER: list[BreedSize] = [
    BreedSize.TOY, BreedSize.SMALL, BreedSize.MEDIUM, BreedSize.LARGE, BreedSize.GIANT,
]

class ActivityType(str, Enum):
    PREFERENCES_UPDATED = "preferences_updated"

class ActivityCategory(str, Enum):
    PROFILE = "profile"

# ============================================================
# Base
# ============================================================

class CamelModel(BaseModel):
    """Snake-case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# ============================================================
# Breed Catalog Models
# ============================================================

class BreedCharacteristics(CamelModel):
    energy_level: int = Field(5, ge=1, le=10)
    trainability: int = Field(5, ge=1, le=10)
    friendliness: int = Field(5, ge=1, le=10)
    grooming_needs: int = Field(5, ge=1, le=10)
    exercise_needs: int = Field(5, ge=1, le=10)
    barking: int = Field(5, ge=1, le=10)
    shedding: int = Field(5, ge=1, le=10)
    good_with_kids: int = Field(5, ge=1, le=10)
    good_with_dogs: int = Field(5, ge=1, le=10)
    good_with_cats: int = Field(5, ge=1, le=10)
    good_with_strangers: int = Field(5, ge=1, le=10)
    protective: int = Field(5, ge=1, le=10)
    playful: int = Field(5, ge=1, le=10)
    calm: int = Field(5, ge=1, le=10)
    intelligent: int = Field(5, ge=1, le=10)
    independent: int = Field(5, ge=1, le=10)
    affectionate: int = Field(5, ge=1, le=10)
    social: int = Field(5, ge=1, le=10)
    confident: int = Field(5, ge=1, le=10)
    gentle: int = Field(5, ge=1, le=10)
    patient: int = Field(5, ge=1, le=10)
    energetic: int = Field(5, ge=1, le=10)
    loyal: int = Field(5, ge=1, le=10)
    alert: int = Field(5, ge=1, le=10)
    brave: int = Field(5, ge=1, le=10)
    stubborn: int = Field(5, ge=1, le=10)
    sensitive: int = Field(5, ge=1, le=10)
    adaptable: int = Field(5, ge=1, le=10)
    vocal: int = Field(5, ge=1, le=10)
    territorial: int = Field(5, ge=1, le=10)

class BreedRecord(BaseModel):
    """Raw row from the breeds_simple table."""
    id: int
    name: str
    alt_names: list[str] = Field(default_factory=list)
    breed_group: str = "mixed"
    size_category: str = "medium"
    breed_type: str = "purebred"
    hybrid: bool = False
    cover_photo_url: Optional[str] = None
    live: bool = True
    search_terms: Optional[str] = None

class Breed(CamelModel):
    id: str
    name: str
    alt_names: list[str] = Field(default_factory=list)
    category: BreedCategory
    size: BreedSize
    breed_type: str
    image: str
    characteristics: BreedCharacteristics = Field(default_factory=BreedCharacteristics)

    # Descriptive content generated from group/size/type
    images: Optional[list[str]] = None
    overview: str = ""
    physical_traits: list[str] = Field(default_factory=list)
    temperament: list[str] = Field(default_factory=list)
    ideal_for: list[str] = Field(default_factory=list)
    exercise_needs: str = ""
    common_health_issues: list[str] = Field(default_factory=list)
    grooming_tips: str = ""
    training_tips: str = ""
    fun_facts: list[str] = Field(default_factory=list)
    breeder_count: int = 0

class BreedFilters(CamelModel):
    available_categories: list[str]
    available_sizes: list[str]
    available_breed_types: list[str]
    total_breeders: int

class BreedListResponse(CamelModel):
    breeds: list[Breed]
    count: int
    total: int
    page: int
    limit: int
    has_next_page: bool
    has_prev_page: bool
    total_pages: int
    start_index: int
    end_index: int
    filters: BreedFilters

# ============================================================
# Breeder Models
# ============================================================

class BreederRecord(BaseModel):
    """Raw row from the breeders table."""
    id: int
    business_name: str
    city: str = ""
    state: str = ""
    breeds: list[str] = Field(default_factory=list)
    available_puppies: int = 0
    pricing: Optional[str] = None
    verified: bool = False
    active: bool = True

class PuppyListing(CamelModel):
    id: str
    name: str
    breed: str
    gender: str
    age_weeks: int
    price: int
    location: str
    breeder_name: str
    breeder_verified: bool
    image: str
    match_score: float
    match_reasons: list[str] = Field(default_factory=list)

# ============================================================
# Matching Models
# ============================================================

class Preference(CamelModel):
    """
    Canonical adopter preferences. Enum-like fields hold the normalized
    string; values outside the known vocabulary are kept as given.
    """
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True)

    activity_level: Optional[str] = None
    living_space: Optional[str] = None
    family_size: Optional[int] = None
    children_ages: list[int] = Field(default_factory=list)
    experience_level: Optional[str] = None
    size: list[str] = Field(default_factory=list)

class RecommendRequest(CamelModel):
    """
    Raw adopter input as submitted by the front-end. Preference fields take
    any JSON value; normalize_preferences coerces them.
    """
    activity_level: Optional[Any] = None
    living_space: Optional[Any] = None
    family_size: Optional[Any] = None
    children_ages: Optional[Any] = None
    experience_level: Optional[Any] = None
    size: Optional[Any] = None
    top_k: Optional[int] = Field(None, ge=1, le=100)

class BreedRecommendation(CamelModel):
    id: str
    name: str
    size: BreedSize
    category: BreedCategory
    image: str
    characteristics: BreedCharacteristics
    score: float
    breakdown: dict[str, float]
    match_reasons: list[str]

class RecommendResponse(CamelModel):
    breeds: list[BreedRecommendation]
    puppies: list[PuppyListing] = Field(default_factory=list)
    total_breeds_scored: int

class SavedPreferences(CamelModel):
    user_id: str
    preferences: Preference
    updated_at: str

class PreferencesResponse(CamelModel):
    match_preferences: SavedPreferences
    message: str = "Preferences saved successfully"

class HealthResponse(BaseModel):
    status: str
    components: dict[str, dict[str, Any]]
    version: str
    uptime_seconds: int

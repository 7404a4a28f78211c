"""
Unit tests for recommendation_engine.

Tests cover:
  • Preference normalization (aliases, labels, size set)
  • Dimension scorers and the weighted breakdown
  • Ranking: determinism, stable ties, top-K, empty input
  • RecommendationEngine end-to-end over the seeded catalog
"""

import pytest

from breed_catalog import BreedCatalog
from models import Preference, RecommendRequest
from recommendation_engine import (
    SCORING_DIMENSIONS, RecommendationEngine, normalize_preferences,
    rank_breeds, score_breed,
)
from repositories import InMemoryRepository


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

class TestNormalizePreferences:
    def test_living_space_aliases(self):
        for raw, expected in [
            ("house-small", "house-small-yard"),
            ("house-medium", "house-small-yard"),
            ("house-large", "house-large-yard"),
            ("Farm/Acreage", "farm-acreage"),
            ("farm", "farm-acreage"),
            ("apartment", "apartment"),
        ]:
            pref = normalize_preferences(RecommendRequest(living_space=raw))
            assert pref.living_space == expected, raw

    def test_experience_alias(self):
        pref = normalize_preferences(RecommendRequest(experience_level="Experienced"))
        assert pref.experience_level == "very-experienced"

    def test_activity_trimmed_and_lowercased(self):
        pref = normalize_preferences(RecommendRequest(activity_level=" HIGH "))
        assert pref.activity_level == "high"

    def test_unknown_values_kept(self):
        pref = normalize_preferences(RecommendRequest(
            activity_level="extreme", living_space="treehouse"))
        assert pref.activity_level == "extreme"
        assert pref.living_space == "treehouse"

    @pytest.mark.parametrize("raw,expected", [
        ("couple", 2), ("large-family", 5), ("4", 4), (3, 3), ("lots", None),
    ])
    def test_family_size(self, raw, expected):
        assert normalize_preferences(RecommendRequest(family_size=raw)).family_size == expected

    def test_children_ages_labels_and_numbers(self):
        pref = normalize_preferences(RecommendRequest(
            children_ages=["toddlers", "7", "adults-only", -1, "teens"]))
        assert pref.children_ages == [2, 7, 14]

    def test_sizes_deduplicated_in_order(self):
        pref = normalize_preferences(RecommendRequest(size=["Large", "large", "SMALL"]))
        assert pref.size == ["large", "small"]

    def test_any_size_clears_restriction(self):
        pref = normalize_preferences(RecommendRequest(size=["small", "Any"]))
        assert pref.size == []

    def test_empty_request(self):
        assert normalize_preferences(RecommendRequest()) == Preference()

    @pytest.mark.parametrize("raw", ["inf", "-inf", "nan", "1e400", float("inf")])
    def test_non_finite_family_size_dropped(self, raw):
        assert normalize_preferences(RecommendRequest(family_size=raw)).family_size is None

    def test_non_finite_child_age_dropped(self):
        pref = normalize_preferences(RecommendRequest(children_ages=["1e400", "inf", 8]))
        assert pref.children_ages == [8]

    def test_float_values_truncate(self):
        pref = normalize_preferences(RecommendRequest(family_size=2.5, children_ages=[6.5]))
        assert pref.family_size == 2
        assert pref.children_ages == [6]

    def test_scalar_size_and_ages_wrapped(self):
        pref = normalize_preferences(RecommendRequest(size="Large", children_ages="toddlers"))
        assert pref.size == ["large"]
        assert pref.children_ages == [2]

    def test_numeric_activity_kept_as_string(self):
        pref = normalize_preferences(RecommendRequest(activity_level=3))
        assert pref.activity_level == "3"

    def test_mistyped_values_degrade(self):
        pref = normalize_preferences(RecommendRequest(
            family_size={"adults": 2}, children_ages=[None, [], "five"], size=[None]))
        assert pref.family_size is None
        assert pref.children_ages == []
        assert pref.size == []


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

class TestScoreBreed:
    def test_dimension_weights_total_100(self):
        assert sum(d.weight for d in SCORING_DIMENSIONS) == 100

    def test_golden_retriever_breakdown(self, golden_retriever, family_preference):
        sb = score_breed(golden_retriever, family_preference)
        assert sb.breakdown == {
            'energyMatch': 17.0,
            'sizeMatch': 15.0,
            'kidFriendliness': 7.5,
            'trainability': 12.0,
            'spaceRequirements': 15.0,
            'groomingNeeds': 6.67,
            'socialCompatibility': 5.0,
        }
        assert sb.score == 78.17
        assert "Great energy level for active families" in sb.match_reasons

    def test_chihuahua_breakdown(self, chihuahua, family_preference):
        sb = score_breed(chihuahua, family_preference)
        assert sb.score == 51.23
        assert sb.breakdown['energyMatch'] == 5.0
        assert sb.breakdown['sizeMatch'] == 3.0
        assert "Toy size doesn't match your preference" in sb.match_reasons

    def test_breakdown_bounded_by_weights(self, make_breed, family_preference):
        extreme = make_breed(traits={k: 10 for k in (
            'energy_level', 'grooming_needs', 'shedding', 'stubborn', 'independent')})
        sb = score_breed(extreme, family_preference)
        weights = {d.name: d.weight for d in SCORING_DIMENSIONS}
        for name, points in sb.breakdown.items():
            assert 0 <= points <= weights[name]
        assert 0 <= sb.score <= 100
        assert sb.score == pytest.approx(sum(sb.breakdown.values()), abs=0.01)

    def test_deterministic(self, golden_retriever, family_preference):
        a = score_breed(golden_retriever, family_preference)
        b = score_breed(golden_retriever, family_preference)
        assert a == b

    def test_unknown_preferences_score_neutrally(self, make_breed):
        pref = Preference(
            activity_level="extreme", living_space="treehouse",
            experience_level="wizard")
        sb = score_breed(make_breed(), pref)
        assert sb.breakdown['energyMatch'] == 20.0
        assert 'Well-balanced energy for your moderate lifestyle' in sb.match_reasons
        assert sb.score > 0

    def test_size_mismatch_does_not_exclude(self, chihuahua, golden_retriever,
                                            family_preference):
        ranked = rank_breeds([chihuahua, golden_retriever], family_preference)
        assert [s.breed.name for s in ranked] == ["Golden Retriever", "Chihuahua"]
        assert ranked[1].score > 0

    def test_no_size_preference_is_full_marks(self, chihuahua, family_preference):
        pref = family_preference.model_copy(update={'size': []})
        assert score_breed(chihuahua, pref).breakdown['sizeMatch'] == 15.0


class TestKidAwareness:
    def test_more_kid_friendly_never_scores_lower(self, make_breed, family_preference):
        scores = [
            score_breed(make_breed(traits={'good_with_kids': v}), family_preference).score
            for v in range(3, 10)
        ]
        assert scores == sorted(scores)
        assert scores[-1] > scores[0]

    def test_kid_trait_ignored_without_children(self, make_breed, family_preference):
        pref = family_preference.model_copy(update={'children_ages': []})
        low = score_breed(make_breed(traits={'good_with_kids': 2}), pref)
        high = score_breed(make_breed(traits={'good_with_kids': 10}), pref)
        assert low.score == high.score

    def test_gentleness_matters_for_young_children(self, make_breed, family_preference):
        young = family_preference.model_copy(update={'children_ages': [2]})
        older = family_preference.model_copy(update={'children_ages': [10]})
        rough = make_breed(traits={'gentle': 2})
        gentle = make_breed(traits={'gentle': 9})

        assert score_breed(gentle, young).score > score_breed(rough, young).score
        assert score_breed(gentle, older).score == score_breed(rough, older).score

    def test_young_children_reason(self, make_breed, family_preference):
        pref = family_preference.model_copy(update={'children_ages': [1, 8]})
        sb = score_breed(make_breed(traits={'good_with_kids': 9, 'gentle': 8}), pref)
        assert 'Excellent with young children — gentle and patient' in sb.match_reasons


class TestExperience:
    def test_difficult_breed_penalized_for_first_timers(self, make_breed):
        stubborn = make_breed(traits={'trainability': 4, 'stubborn': 9, 'independent': 9})
        novice = score_breed(stubborn, Preference(experience_level="first-time"))
        expert = score_breed(stubborn, Preference(experience_level="very-experienced"))
        assert novice.breakdown['trainability'] < expert.breakdown['trainability']
        assert 'May be challenging for your experience level' in novice.match_reasons


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

class TestRankBreeds:
    def test_empty_input(self, family_preference):
        assert rank_breeds([], family_preference) == []

    def test_ties_keep_input_order(self, make_breed, family_preference):
        breeds = [make_breed(1, "Zeta"), make_breed(2, "Alpha"), make_breed(3, "Mid")]
        ranked = rank_breeds(breeds, family_preference)
        assert len({s.score for s in ranked}) == 1
        assert [s.breed.name for s in ranked] == ["Zeta", "Alpha", "Mid"]

    def test_top_k(self, make_breed, family_preference):
        breeds = [make_breed(i, f"B{i}", traits={'energy_level': i}) for i in range(1, 11)]
        ranked = rank_breeds(breeds, family_preference, top_k=3)
        # B8 and B10 tie one point off the target; input order decides
        assert [s.breed.name for s in ranked] == ["B9", "B8", "B10"]

    def test_zero_top_k(self, golden_retriever, family_preference):
        assert rank_breeds([golden_retriever], family_preference, top_k=0) == []

    @pytest.mark.asyncio
    async def test_non_increasing_scores(self, seeded_repo, family_preference):
        breeds = await BreedCatalog(seeded_repo).all_breeds()
        ranked = rank_breeds(breeds, family_preference, top_k=len(breeds))
        scores = [s.score for s in ranked]
        assert scores == sorted(scores, reverse=True)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

FAMILY_REQUEST = dict(
    activityLevel="high",
    livingSpace="house-large-yard",
    familySize=4,
    childrenAges=[6, 9],
    experienceLevel="some-experience",
    size=["large"],
)


class TestRecommendationEngine:
    @pytest.mark.asyncio
    async def test_empty_catalog(self):
        repo = InMemoryRepository()
        engine = RecommendationEngine(BreedCatalog(repo), repo)
        resp = await engine.recommend(RecommendRequest(**FAMILY_REQUEST))
        assert resp.breeds == []
        assert resp.puppies == []
        assert resp.total_breeds_scored == 0

    @pytest.mark.asyncio
    async def test_seeded_catalog(self, seeded_repo):
        engine = RecommendationEngine(BreedCatalog(seeded_repo), seeded_repo)
        resp = await engine.recommend(RecommendRequest(**FAMILY_REQUEST, topK=50))

        names = [b.name for b in resp.breeds]
        assert resp.total_breeds_scored == 22
        assert len(names) == 22
        assert names.index("Golden Retriever") < names.index("Chihuahua")

        golden = resp.breeds[names.index("Golden Retriever")]
        assert golden.score == 78.17
        assert golden.id == "breed-2"

    @pytest.mark.asyncio
    async def test_default_top_k(self, seeded_repo):
        engine = RecommendationEngine(BreedCatalog(seeded_repo), seeded_repo, top_k=5)
        resp = await engine.recommend(RecommendRequest(**FAMILY_REQUEST))
        assert len(resp.breeds) == 5
        assert resp.total_breeds_scored == 22

    @pytest.mark.asyncio
    async def test_puppies_follow_breed_scores(self, seeded_repo):
        engine = RecommendationEngine(BreedCatalog(seeded_repo), seeded_repo)
        resp = await engine.recommend(RecommendRequest(**FAMILY_REQUEST, topK=50))

        assert len(resp.puppies) == 8
        assert resp.puppies[0].breeder_name == "Sunny Meadow Retrievers"
        assert resp.puppies[0].match_score == 78.17
        scores = [p.match_score for p in resp.puppies]
        assert scores == sorted(scores, reverse=True)
        assert "High Plains Herding" not in {p.breeder_name for p in resp.puppies}

    @pytest.mark.asyncio
    async def test_request_is_deterministic(self, seeded_repo):
        engine = RecommendationEngine(BreedCatalog(seeded_repo), seeded_repo)
        a = await engine.recommend(RecommendRequest(**FAMILY_REQUEST))
        b = await engine.recommend(RecommendRequest(**FAMILY_REQUEST))
        assert a == b

import pytest

from homerunn.matching import RankOptions, prune_expired_dislikes, rank
from homerunn.matching.ranking import in_cooldown, listing_signature
from homerunn.models import Listing, UserProfile


def make_listing(listing_id: str, signature: str, **flags) -> Listing:
    return Listing.model_validate({"id": listing_id, "signature": signature, **flags})


def profile_with_dislike(swipes_since: int) -> UserProfile:
    return UserProfile.model_validate(
        {
            "user_id": "user-1",
            "current_signature": "0" * 15,
            "global_swipe_count": 10 + swipes_since,
            "disliked_listings": [
                {"listing_id": "L1", "disliked_at_swipe_count": 10}
            ],
        }
    )


@pytest.mark.parametrize(
    "swipes_since, expected", [(0, True), (1, True), (49, True), (50, False), (80, False)]
)
def test_cooldown_boundary(swipes_since, expected):
    assert in_cooldown("L1", profile_with_dislike(swipes_since), 50) is expected


def test_rank_drops_listing_in_cooldown():
    listings = [make_listing("L1", "1" * 15), make_listing("L2", "2" * 15)]

    kept = rank(listings, profile_with_dislike(49))
    assert [x.id for x in kept] == ["L2"]

    kept = rank(listings, profile_with_dislike(50))
    assert [x.id for x in kept] == ["L1", "L2"]


@pytest.mark.parametrize("flag", ["bypassFiltering", "forceDisplay", "isRedoCard"])
def test_always_show_flags_skip_cooldown(flag):
    listings = [make_listing("L1", "1" * 15, **{flag: True})]
    kept = rank(listings, profile_with_dislike(3))
    assert [x.id for x in kept] == ["L1"]


def test_always_show_ids_skip_cooldown():
    listings = [make_listing("L1", "1" * 15)]
    options = RankOptions(always_show_ids=frozenset({"L1"}))
    assert [x.id for x in rank(listings, profile_with_dislike(3), options)] == ["L1"]


def test_stable_mode_preserves_input_order():
    profile = UserProfile(current_signature="3" * 15)
    listings = [
        make_listing("far", "0" * 15),
        make_listing("exact", "3" * 15),
        make_listing("near", "2" * 15),
    ]
    kept = rank(listings, profile, RankOptions(respect_stable_cards=True))
    assert [x.id for x in kept] == ["far", "exact", "near"]


def test_ranked_mode_orders_by_match_score():
    profile = UserProfile(current_signature="3" * 15)
    listings = [
        make_listing("far", "0" * 15),
        make_listing("near-a", "2" * 15),
        make_listing("exact", "3" * 15),
        make_listing("near-b", "4" * 15),
    ]
    kept = rank(listings, profile, RankOptions(respect_stable_cards=False))
    # near-a y near-b empatan: conservan su orden de llegada
    assert [x.id for x in kept] == ["exact", "near-a", "near-b", "far"]


def test_rank_without_profile_uses_zero_signature():
    listings = [make_listing("A", "2" * 15), make_listing("B", "0" * 15)]
    kept = rank(listings, None, RankOptions(respect_stable_cards=False))
    assert [x.id for x in kept] == ["B", "A"]


def test_rank_empty_batch():
    assert rank([], UserProfile.default("user-1")) == []


def test_listing_signature_prefers_valid_precomputed(sample_listing):
    precomputed = sample_listing.model_copy(update={"signature": "111111111111111"})
    assert str(listing_signature(precomputed)) == "111111111111111"


def test_listing_signature_reencodes_invalid_precomputed(sample_listing):
    broken = sample_listing.model_copy(update={"signature": "XYZ"})
    assert str(listing_signature(broken)) == "322412231010230"


def test_prune_removes_only_expired_entries():
    profile = UserProfile.model_validate(
        {
            "global_swipe_count": 100,
            "disliked_listings": [
                {"listing_id": "old", "disliked_at_swipe_count": 50},
                {"listing_id": "recent", "disliked_at_swipe_count": 51},
            ],
        }
    )
    pruned = prune_expired_dislikes(profile, 50)

    assert [e.listing_id for e in pruned.disliked_listings] == ["recent"]
    assert len(profile.disliked_listings) == 2


def test_prune_returns_same_profile_when_nothing_expired():
    profile = profile_with_dislike(10)
    assert prune_expired_dislikes(profile, 50) is profile

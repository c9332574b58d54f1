import asyncio
import time

import pytest
from tenacity import wait_fixed

from homerunn.database import ProfileRepository
from homerunn.exceptions import ProfileUnavailable
from homerunn.models import DislikedListing, UserProfile


def test_get_profile_missing_returns_none(profile_repo, fake_client):
    assert asyncio.run(profile_repo.get_profile("nobody")) is None
    assert fake_client.calls == 1


def test_set_then_get_profile(profile_repo, fake_client):
    profile = UserProfile(current_signature="322412231010230", global_swipe_count=4)

    saved = asyncio.run(profile_repo.set_profile("user-1", profile))
    loaded = asyncio.run(profile_repo.get_profile("user-1"))

    assert saved.user_id == "user-1"
    assert loaded.current_signature == "322412231010230"
    assert loaded.global_swipe_count == 4
    assert fake_client.tables["user_match_profiles"][0]["user_id"] == "user-1"


def test_set_profile_overwrites_previous_document(profile_repo, fake_client):
    asyncio.run(profile_repo.set_profile("user-1", UserProfile(global_swipe_count=1)))
    asyncio.run(profile_repo.set_profile("user-1", UserProfile(global_swipe_count=2)))

    rows = fake_client.tables["user_match_profiles"]
    assert len(rows) == 1
    assert asyncio.run(profile_repo.get_profile("user-1")).global_swipe_count == 2


def test_transient_failures_are_retried(profile_repo, fake_client):
    asyncio.run(profile_repo.set_profile("user-1", UserProfile(global_swipe_count=3)))
    fake_client.calls = 0
    fake_client.failures_left = 2

    loaded = asyncio.run(profile_repo.get_profile("user-1"))

    assert loaded.global_swipe_count == 3
    assert fake_client.calls == 3


def test_persistent_failure_raises_profile_unavailable(profile_repo, fake_client):
    fake_client.failures_left = 10

    with pytest.raises(ProfileUnavailable) as exc_info:
        asyncio.run(profile_repo.set_profile("user-1", UserProfile()))

    assert exc_info.value.user_id == "user-1"
    assert exc_info.value.operation == "set_profile"
    assert fake_client.calls == 3


def test_corrupt_document_raises_profile_unavailable(profile_repo, fake_client):
    fake_client.tables["user_match_profiles"] = [
        {"user_id": "user-1", "current_signature": "bogus", "slot_histograms": [{}] * 15}
    ]
    with pytest.raises(ProfileUnavailable):
        asyncio.run(profile_repo.get_profile("user-1"))


def test_get_or_create_profile_persists_default(profile_repo, fake_client):
    created = asyncio.run(profile_repo.get_or_create_profile("user-1"))

    assert created.user_id == "user-1"
    assert created.current_signature == "0" * 15
    assert len(fake_client.tables["user_match_profiles"]) == 1

    again = asyncio.run(profile_repo.get_or_create_profile("user-1"))
    assert again.current_signature == created.current_signature
    assert len(fake_client.tables["user_match_profiles"]) == 1


def test_save_disliked_listings_only_touches_the_list(profile_repo, fake_client):
    asyncio.run(
        profile_repo.set_profile(
            "user-1",
            UserProfile(global_swipe_count=9, liked_listings=["L7"]),
        )
    )

    asyncio.run(
        profile_repo.save_disliked_listings(
            "user-1", [DislikedListing(listing_id="L1", disliked_at_swipe_count=8)]
        )
    )

    row = fake_client.tables["user_match_profiles"][0]
    assert row["disliked_listings"] == [
        {"listing_id": "L1", "disliked_at_swipe_count": 8}
    ]
    assert row["global_swipe_count"] == 9
    assert row["liked_listings"] == ["L7"]


def test_retries_do_not_block_the_event_loop(fake_client, settings):
    repo = ProfileRepository(client=fake_client, settings=settings, retry_wait=wait_fixed(0.3))
    fake_client.failures_left = 2

    async def scenario():
        gaps = []
        done = asyncio.Event()

        async def ticker():
            last = time.monotonic()
            while not done.is_set():
                await asyncio.sleep(0.02)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        task = asyncio.create_task(ticker())
        try:
            await repo.get_profile("user-1")
        finally:
            done.set()
            await task
        return gaps

    gaps = asyncio.run(scenario())

    assert fake_client.calls == 3
    # Dos esperas de 0.3s: el ticker tiene que seguir corriendo durante ambas
    assert len(gaps) >= 10
    assert max(gaps) < 0.25

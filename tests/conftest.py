"""Fixtures compartidos: settings de test y un Supabase en memoria."""

from dataclasses import dataclass
from typing import Optional

import pytest
from tenacity import wait_none

from homerunn.config import Settings
from homerunn.database import ProfileRepository
from homerunn.models import Listing


@dataclass
class FakeResponse:
    data: list


class FakeQuery:
    """Imita el query builder de postgrest para select/eq/limit/upsert/update."""

    def __init__(self, store: "FakeSupabaseClient", table: str):
        self.store = store
        self.table = table
        self.filters: list[tuple[str, object]] = []
        self.max_rows: Optional[int] = None
        self.upsert_row: Optional[dict] = None
        self.update_values: Optional[dict] = None
        self.conflict_key: Optional[str] = None

    def select(self, columns: str = "*"):
        return self

    def eq(self, column: str, value):
        self.filters.append((column, value))
        return self

    def limit(self, count: int):
        self.max_rows = count
        return self

    def upsert(self, data: dict, on_conflict: str = ""):
        self.upsert_row = dict(data)
        self.conflict_key = on_conflict
        return self

    def update(self, data: dict):
        self.update_values = dict(data)
        return self

    def execute(self) -> FakeResponse:
        self.store.calls += 1
        if self.store.failures_left > 0:
            self.store.failures_left -= 1
            raise ConnectionError("connection reset by peer")

        rows = self.store.tables.setdefault(self.table, [])
        if self.upsert_row is not None:
            key = self.conflict_key
            rows[:] = [r for r in rows if r.get(key) != self.upsert_row.get(key)]
            rows.append(self.upsert_row)
            return FakeResponse(data=[self.upsert_row])

        matched = [
            r for r in rows if all(r.get(col) == value for col, value in self.filters)
        ]
        if self.update_values is not None:
            for row in matched:
                row.update(self.update_values)
            return FakeResponse(data=matched)
        if self.max_rows is not None:
            matched = matched[: self.max_rows]
        return FakeResponse(data=matched)


class FakeSupabaseClient:
    """Reemplazo en memoria de SupabaseClient."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.failures_left = 0
        self.calls = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="http://localhost:54321",
        supabase_key="test-key",
        store_retry_attempts=3,
        _env_file=None,
    )


@pytest.fixture
def fake_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def profile_repo(fake_client, settings) -> ProfileRepository:
    return ProfileRepository(client=fake_client, settings=settings, retry_wait=wait_none())


@pytest.fixture
def sample_listing() -> Listing:
    """Casa unifamiliar del ejemplo de referencia."""
    return Listing.model_validate(
        {
            "ListingKey": "L-250",
            "ListPrice": 250000,
            "BedroomsTotal": 3,
            "LivingArea": 1800,
            "YearBuilt": 2010,
            "PropertyType": "Residential",
            "PropertySubType": "Single Family Residence",
            "LotSizeSquareFeet": 6000,
        }
    )

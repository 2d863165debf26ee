"""Shared test fixtures."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pytest

from kcal_diary.config import Settings
from kcal_diary.containers import AppContainer
from kcal_diary.services.analysis import AnalysisClient, AnalysisService
from kcal_diary.services.diary import DiaryService
from kcal_diary.services.store import DiaryStore, KeyValueStore

TODAY = date(2026, 2, 26)
YESTERDAY = date(2026, 2, 25)

RICE_BALL_RESPONSE = json.dumps(
    {
        "total_kcal": 400,
        "items": [
            {"name": "rice ball", "kcal": 200, "emoji": "🍙"},
            {"name": "rice ball", "kcal": 200, "emoji": "🍙"},
        ],
        "ai_comment": "well done",
    },
    ensure_ascii=False,
)


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value store for tests."""

    values: dict[str, str] = field(default_factory=dict)
    writes: int = 0

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: Mapping[str, str]) -> None:
        self.values.update(values)
        self.writes += 1


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake analysis client returning a fixed output or raising."""

    output: str | None = RICE_BALL_RESPONSE
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        text: str,
        schema: dict[str, object],
    ) -> str | None:
        self.calls.append(
            {
                "model": model,
                "reasoning_effort": reasoning_effort,
                "store": store,
                "instructions": instructions,
                "text": text,
                "schema": schema,
            }
        )
        if self.error is not None:
            raise self.error
        return self.output


def make_analysis_service(client: AnalysisClient) -> AnalysisService:
    return AnalysisService(
        client=client, model="gpt-5.2", reasoning_effort="low", store=False
    )


def make_diary_service(
    kv: InMemoryKeyValueStore | None = None,
    client: AnalysisClient | None = None,
    today: date = TODAY,
) -> DiaryService:
    return DiaryService(
        store=DiaryStore(kv if kv is not None else InMemoryKeyValueStore()),
        analysis_service=make_analysis_service(client or FakeAnalysisClient()),
        today=lambda: today,
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        data_path=tmp_path / "prefs.json",
    )


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def container(
    settings: Settings,
    kv_store: InMemoryKeyValueStore,
    analysis_client: FakeAnalysisClient,
) -> AppContainer:
    diary_service = make_diary_service(kv_store, analysis_client)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=diary_service.store,
        analysis_service=diary_service.analysis_service,
        diary_service=diary_service,
        close_resources=close_resources,
    )

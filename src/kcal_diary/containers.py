"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from kcal_diary.adapters.json_file_store import JsonFileKeyValueStore
from kcal_diary.adapters.openai_analysis_client import OpenAIAnalysisClient
from kcal_diary.config import Settings, resolve_data_path, today_provider
from kcal_diary.services.analysis import AnalysisService
from kcal_diary.services.diary import DiaryService
from kcal_diary.services.store import DiaryStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: DiaryStore
    analysis_service: AnalysisService
    diary_service: DiaryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = DiaryStore(JsonFileKeyValueStore(resolve_data_path(resolved_settings)))
    openai_client = OpenAIAnalysisClient.create(resolved_settings.openai_api_key)
    analysis_service = AnalysisService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    diary_service = DiaryService(
        store=store,
        analysis_service=analysis_service,
        today=today_provider(resolved_settings.timezone),
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        analysis_service=analysis_service,
        diary_service=diary_service,
        close_resources=close_resources,
    )

"""
app/services/analysis_service.py

End-to-end analysis orchestrator for one uploaded activity file.

Wires the stages into a single run that returns a caller-owned
``AnalysisSession``:

    read_tabular_file      – CSV / Excel -> raw rows        (process_file only)
    UserActivityPipeline   – map, normalize, score, segment, sort
    PersonaAggregator      – per-segment personas with member users
    StoryService           – one user story per persona
    MetricService          – four aggregate metric cards
    InsightService         – categorised product insights

Failure contract
----------------
- Unsupported file type   -> failed session, code ``unsupported_file_type``
- Parser rejection        -> failed session, code ``parse_error``
- Zero data rows          -> failed session, code ``empty_dataset``;
                             no downstream stage runs
- Generator trouble       -> never fails the run; stages use templates

Every stage draws from one random source, so a fixed seed, clock, and
id factory reproduce a session exactly.
"""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Sequence

from app.config import (
    PipelineSettings,
    TextGenerationSettings,
    get_pipeline_settings,
    get_text_generation_settings,
)
from app.domain.user_activity import AnalysisSession, RawRow
from app.failure_codes import EMPTY_DATASET
from app.logging_utils import log_event
from app.services.file_reader import EmptyDatasetError, IngestionError, read_tabular_file
from app.services.insight_service import InsightService
from app.services.metric_service import MetricService
from app.services.story_service import StoryService
from app.services.transform_pipeline import UserActivityPipeline
from llm_synthesis.adapter import BaseTextGenerator, build_text_generator
from llm_synthesis.synthesizer import GeneratorFactory
from segmentation.personas import PersonaAggregator, PersonaSplitPolicy

logger = logging.getLogger(__name__)


def cached_generator_factory(settings: TextGenerationSettings) -> GeneratorFactory:
    """
    Wrap ``build_text_generator`` so the backend is initialised at most once.

    An initialisation failure is remembered and re-raised on every call,
    so a missing model is not reloaded for each stage.
    """
    state: dict[str, object] = {}
    lock = threading.Lock()

    def factory() -> BaseTextGenerator | None:
        with lock:
            if "error" in state:
                raise state["error"]  # type: ignore[misc]
            if "generator" not in state:
                try:
                    state["generator"] = build_text_generator(settings)
                except Exception as exc:  # noqa: BLE001
                    state["error"] = exc
                    raise
            return state["generator"]  # type: ignore[return-value]

    return factory


class AnalysisService:
    """
    Runs the full upload-to-insights pipeline.
    """

    def __init__(
        self,
        *,
        pipeline_settings: PipelineSettings | None = None,
        generator_factory: GeneratorFactory | None = None,
        max_retries: int = 1,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._settings = pipeline_settings or PipelineSettings()
        self._generator_factory = generator_factory
        self._max_retries = max_retries
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))

    def process_upload(
        self,
        rows: Sequence[RawRow],
        *,
        seed: int | None = None,
        now: datetime | None = None,
    ) -> AnalysisSession:
        """
        Analyse already-parsed rows.

        Args:
            rows: Raw rows keyed by the sheet's column labels.
            seed: Random seed for this run; falls back to the configured seed.
            now:  Reference time; defaults to the clock.

        Returns:
            A succeeded session with every derived collection, or a failed
            session with ``failure_code="empty_dataset"`` when ``rows`` is empty.
        """
        if not rows:
            log_event(logger, logging.WARNING, "analysis_failed", failure_code=EMPTY_DATASET, rows=0)
            return AnalysisSession.failed(EMPTY_DATASET)

        started = time.perf_counter()
        reference_time = now or self._clock()
        effective_seed = seed if seed is not None else self._settings.random_seed
        rng = random.Random(effective_seed)

        pipeline = UserActivityPipeline(rng=rng, clock=self._clock, id_factory=self._id_factory)
        users, field_map = pipeline.transform(rows, now=reference_time)

        personas = PersonaAggregator(
            rng=rng,
            split_policy=PersonaSplitPolicy(
                split_threshold=self._settings.persona_split_threshold,
                split_ratio=self._settings.persona_split_ratio,
            ),
            generator_factory=self._generator_factory,
            max_retries=self._max_retries,
            id_factory=self._id_factory,
        ).build_personas(users)

        stories = StoryService(
            rng=rng,
            generator_factory=self._generator_factory,
            max_retries=self._max_retries,
            id_factory=self._id_factory,
        ).build_stories(personas)

        metrics = MetricService(rng=rng, id_factory=self._id_factory).build_metrics(users)

        insights = InsightService(
            rng=rng,
            generator_factory=self._generator_factory,
            max_retries=self._max_retries,
            insight_count=self._settings.insight_count,
            id_factory=self._id_factory,
        ).build_insights(users)

        session = AnalysisSession(
            succeeded=True,
            users=tuple(users),
            personas=tuple(personas),
            stories=tuple(stories),
            metrics=tuple(metrics),
            insights=tuple(insights),
            field_map=dict(field_map.canonical_to_source),
            generated_at=reference_time,
        )
        log_event(
            logger,
            logging.INFO,
            "analysis_completed",
            users=len(session.users),
            personas=len(session.personas),
            stories=len(session.stories),
            metrics=len(session.metrics),
            insights=len(session.insights),
            seed=effective_seed,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return session

    def process_file(
        self,
        content: bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
        seed: int | None = None,
        now: datetime | None = None,
    ) -> AnalysisSession:
        """
        Parse an uploaded file and analyse its rows.

        Ingestion problems never raise; they come back as a failed session.
        """
        try:
            rows = read_tabular_file(content, filename=filename, content_type=content_type)
            if not rows:
                raise EmptyDatasetError(f"File {filename!r} contains no data rows.")
        except IngestionError as exc:
            log_event(
                logger,
                logging.WARNING,
                "analysis_failed",
                failure_code=exc.code,
                filename=filename,
                error=str(exc),
            )
            return AnalysisSession.failed(exc.code)

        return self.process_upload(rows, seed=seed, now=now)


@lru_cache(maxsize=1)
def get_analysis_service() -> AnalysisService:
    """
    Build and cache the analysis service from environment settings.
    """

    text_settings = get_text_generation_settings()
    return AnalysisService(
        pipeline_settings=get_pipeline_settings(),
        generator_factory=cached_generator_factory(text_settings),
        max_retries=text_settings.max_retries,
    )

"""Wires stores, queue and services together from settings."""

from functools import cached_property, lru_cache

from sqlalchemy.engine import Engine

from rfp_intake.config import Settings, get_settings
from rfp_intake.extraction import ExtractionServiceClient, TextExtractionEngine
from rfp_intake.ingestion import ContentHasher, LocalBlobStore, UploadService
from rfp_intake.llm.base import SemanticAnalyzer
from rfp_intake.queue import SQLAnalysisQueue
from rfp_intake.services.analysis import AnalysisService
from rfp_intake.store import SQLRecordStore, create_db_engine, init_schema
from rfp_intake.workers import AnalysisWorkerPool


class ServiceContainer:
    """Lazily built application components sharing one database engine."""

    def __init__(
        self,
        settings: Settings,
        engine: Engine | None = None,
        analyzer: SemanticAnalyzer | None = None,
        extraction_client: ExtractionServiceClient | None = None,
    ):
        self.settings = settings
        self.engine = engine or create_db_engine(settings.database_url)
        self._analyzer = analyzer
        self._extraction_client = extraction_client

    def init_schema(self) -> None:
        init_schema(self.engine)

    @cached_property
    def store(self) -> SQLRecordStore:
        return SQLRecordStore(self.engine)

    @cached_property
    def queue(self) -> SQLAnalysisQueue:
        return SQLAnalysisQueue.from_settings(self.engine, self.settings)

    @cached_property
    def blob_store(self) -> LocalBlobStore:
        return LocalBlobStore(self.settings.storage_directory)

    @cached_property
    def extraction_engine(self) -> TextExtractionEngine:
        if self._extraction_client is None:
            self._extraction_client = ExtractionServiceClient.from_settings(self.settings)
        return TextExtractionEngine(self._extraction_client)

    @cached_property
    def uploads(self) -> UploadService:
        return UploadService(
            self.store,
            self.blob_store,
            self.extraction_engine,
            self.queue,
            hasher=ContentHasher(self.settings.hash_chunk_size),
            upload_directory=self.settings.upload_directory,
            allowed_extensions=self.settings.allowed_extensions,
            allowed_mime_types=self.settings.allowed_mime_types,
            max_file_size_bytes=self.settings.max_file_size_bytes,
            initial_delay_seconds=self.settings.queue_initial_delay_seconds,
        )

    @cached_property
    def analysis(self) -> AnalysisService:
        return AnalysisService(self.store, self.queue, self.uploads)

    @cached_property
    def analyzer(self) -> SemanticAnalyzer:
        if self._analyzer is not None:
            return self._analyzer
        from rfp_intake.graph.workflow import RFPAnalysisGraph
        from rfp_intake.llm.analyzer import RFPAnalyzer

        return RFPAnalysisGraph(RFPAnalyzer(self.settings))

    @cached_property
    def workers(self) -> AnalysisWorkerPool:
        return AnalysisWorkerPool.from_settings(self.store, self.queue, self.analyzer, self.settings)

    def close(self) -> None:
        if self._extraction_client is not None:
            self._extraction_client.close()
        self.engine.dispose()


@lru_cache()
def get_container() -> ServiceContainer:
    """Get or create the process-wide service container."""
    container = ServiceContainer(get_settings())
    container.init_schema()
    return container

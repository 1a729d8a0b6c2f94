"""Tests for the SQL record store."""

import pytest

from rfp_intake.errors import DuplicateRecordError, InvalidStateTransition, RfpNotFound
from rfp_intake.models.records import (
    AnalysisResult,
    ExtractionMetadata,
    ExtractionMethod,
    RfpRecord,
    RfpStatus,
    SourceMetadata,
)
from rfp_intake.store import SQLRecordStore, create_db_engine, init_schema


@pytest.fixture
def store():
    engine = create_db_engine("sqlite://")
    init_schema(engine)
    yield SQLRecordStore(engine)
    engine.dispose()


def make_record(organization_id: str = "org-1", content_hash: str = "a" * 64, **overrides) -> RfpRecord:
    values = {
        "organization_id": organization_id,
        "title": "rfp.txt",
        "client_name": "Acme",
        "content_hash": content_hash,
        "source_metadata": SourceMetadata(
            original_file_name="rfp.txt",
            file_size=15,
            mime_type="text/plain",
            storage_ref="blob.txt",
            content_hash=content_hash,
        ),
    }
    values.update(overrides)
    return RfpRecord(**values)


class TestCreateAndRead:
    """Tests for creating and reading records."""

    def test_create_and_get(self, store):
        record = store.create_rfp(make_record())
        loaded = store.get_rfp_by_id(record.id)

        assert loaded.id == record.id
        assert loaded.status == RfpStatus.UPLOADED
        assert loaded.source_metadata.original_file_name == "rfp.txt"
        assert loaded.extraction_metadata is None
        assert loaded.analysis_result is None

    def test_get_missing(self, store):
        assert store.get_rfp_by_id("missing") is None

    def test_find_by_hash_scoped_to_organization(self, store):
        record = store.create_rfp(make_record("org-1"))

        assert store.find_by_hash("a" * 64, "org-1").id == record.id
        assert store.find_by_hash("a" * 64, "org-2") is None
        assert store.find_by_hash("b" * 64, "org-1") is None

    def test_duplicate_rejected(self, store):
        store.create_rfp(make_record("org-1"))
        with pytest.raises(DuplicateRecordError):
            store.create_rfp(make_record("org-1"))

    def test_same_hash_other_organization(self, store):
        first = store.create_rfp(make_record("org-1"))
        second = store.create_rfp(make_record("org-2"))
        assert first.id != second.id

    def test_soft_delete_frees_hash(self, store):
        record = store.create_rfp(make_record())

        assert store.delete_rfp(record.id) is True
        assert store.get_rfp_by_id(record.id) is None
        assert store.get_rfp_by_id(record.id, include_deleted=True).deleted_at is not None
        assert store.find_by_hash("a" * 64, "org-1") is None
        assert store.delete_rfp(record.id) is False

        store.create_rfp(make_record())


class TestStatusUpdates:
    """Tests for validated status changes."""

    def test_full_lifecycle(self, store):
        record = store.create_rfp(make_record())

        processing = store.update_rfp_status(record.id, RfpStatus.PROCESSING)
        assert processing.status == RfpStatus.PROCESSING

        analyzed = store.update_rfp_status(
            record.id,
            RfpStatus.ANALYZED,
            {"analysis_result": AnalysisResult(summary="Security system")},
            expected_status=RfpStatus.PROCESSING,
        )
        assert analyzed.status == RfpStatus.ANALYZED
        assert analyzed.analysis_result.summary == "Security system"
        assert analyzed.error_detail is None

    def test_error_sets_detail(self, store):
        record = store.create_rfp(make_record())
        store.update_rfp_status(record.id, RfpStatus.PROCESSING)

        failed = store.update_rfp_status(record.id, RfpStatus.ERROR, {"error_detail": "LLM provider timed out"})

        assert failed.status == RfpStatus.ERROR
        assert failed.error_detail == "LLM provider timed out"
        assert failed.analysis_result is None

    def test_invalid_transition(self, store):
        record = store.create_rfp(make_record())
        with pytest.raises(InvalidStateTransition):
            store.update_rfp_status(record.id, RfpStatus.ANALYZED, {"analysis_result": AnalysisResult()})
        assert store.get_rfp_by_id(record.id).status == RfpStatus.UPLOADED

    def test_expected_status_mismatch(self, store):
        record = store.create_rfp(make_record())
        with pytest.raises(InvalidStateTransition, match="expected status 'processing'"):
            store.update_rfp_status(record.id, RfpStatus.PROCESSING, expected_status=RfpStatus.PROCESSING)

    def test_manual_reanalysis_clears_result(self, store):
        record = store.create_rfp(make_record())
        store.update_rfp_status(record.id, RfpStatus.PROCESSING)
        store.update_rfp_status(record.id, RfpStatus.ANALYZED, {"analysis_result": AnalysisResult()})

        with pytest.raises(InvalidStateTransition):
            store.update_rfp_status(record.id, RfpStatus.PROCESSING)

        again = store.update_rfp_status(record.id, RfpStatus.PROCESSING, manual=True)
        assert again.status == RfpStatus.PROCESSING
        assert again.analysis_result is None

    def test_missing_record(self, store):
        with pytest.raises(RfpNotFound):
            store.update_rfp_status("missing", RfpStatus.PROCESSING)

    def test_immutable_fields_rejected(self, store):
        record = store.create_rfp(make_record())
        with pytest.raises(ValueError):
            store.update_rfp_status(record.id, RfpStatus.PROCESSING, {"organization_id": "org-2"})

    def test_updated_at_advances(self, store):
        record = store.create_rfp(make_record())
        updated = store.update_rfp_status(record.id, RfpStatus.PROCESSING)
        assert updated.updated_at >= record.updated_at


class TestPatch:
    """Tests for non-status field patches."""

    def test_patch_extraction(self, store):
        record = store.create_rfp(make_record())
        store.update_rfp_status(record.id, RfpStatus.PROCESSING)

        patched = store.patch_rfp(
            record.id,
            {
                "extracted_text": "Budget: $10,000",
                "extraction_metadata": ExtractionMetadata(method=ExtractionMethod.FALLBACK, word_count=2),
            },
            expected_status=RfpStatus.PROCESSING,
        )

        assert patched.extracted_text == "Budget: $10,000"
        assert patched.extraction_metadata.method == ExtractionMethod.FALLBACK
        assert patched.extraction_metadata.word_count == 2

    @pytest.mark.parametrize("field", ["status", "analysis_result", "error_detail", "content_hash"])
    def test_patch_rejects_owned_fields(self, store, field):
        record = store.create_rfp(make_record())
        with pytest.raises(ValueError):
            store.patch_rfp(record.id, {field: None})

    def test_patch_expected_status_mismatch(self, store):
        record = store.create_rfp(make_record())
        with pytest.raises(InvalidStateTransition):
            store.patch_rfp(record.id, {"extracted_text": "x"}, expected_status=RfpStatus.PROCESSING)

    def test_patch_missing(self, store):
        with pytest.raises(RfpNotFound):
            store.patch_rfp("missing", {"extracted_text": "x"})

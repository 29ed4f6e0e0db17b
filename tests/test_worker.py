"""
Tests for the analysis worker: batches, caching and the audit trail.
"""

import asyncio

import pytest

from rulegate.audit.logger import AuditLogger
from rulegate.cache.facet_cache import FacetCache
from rulegate.core.errors import UnknownProfileError
from rulegate.models.api_models import AnalyzeRequest
from rulegate.models.report_models import Verdict
from rulegate.models.source_models import Facets, UnitKind
from rulegate.workers.analysis_worker import AnalysisWorker


def _request(content, language="python", **kwargs):
    return AnalyzeRequest(content=content, language=language, **kwargs)


def test_analyze_single_unit(clean_python_source):
    worker = AnalysisWorker()
    report = worker.analyze(_request(clean_python_source, unit_id="clean"))
    assert report.unit_id == "clean"
    assert report.verdict == Verdict.APPROVE


def test_batch_preserves_request_order(clean_python_source, python_test_source, java_test_source):
    worker = AnalysisWorker()
    requests = [
        _request(python_test_source, unit_id="a"),
        _request(clean_python_source, unit_id="b"),
        _request(java_test_source, language="java", unit_id="c"),
        _request("@@ broken", unit_kind=UnitKind.DIFF, unit_id="d"),
    ]
    reports = asyncio.run(worker.analyze_batch(requests))
    assert [r.unit_id for r in reports] == ["a", "b", "c", "d"]
    assert [r.verdict for r in reports] == [
        Verdict.REQUEST_CHANGES,
        Verdict.APPROVE,
        Verdict.REQUEST_CHANGES,
        Verdict.REQUEST_CHANGES,
    ]
    # One unusable unit does not affect the others
    assert reports[3].extraction_error is not None
    assert reports[1].extraction_error is None


def test_batch_matches_sequential_analysis(python_test_source, java_test_source):
    worker = AnalysisWorker()
    requests = [
        _request(python_test_source, unit_id="p"),
        _request(java_test_source, language="java", unit_id="j"),
    ]
    batch = asyncio.run(worker.analyze_batch(requests))
    sequential = [worker.analyze(r) for r in requests]
    assert [r.to_canonical_json() for r in batch] == [r.to_canonical_json() for r in sequential]


def test_unknown_profile_fails_whole_batch(clean_python_source):
    worker = AnalysisWorker()
    requests = [
        _request(clean_python_source),
        _request(clean_python_source, profile="does-not-exist"),
    ]
    with pytest.raises(UnknownProfileError):
        asyncio.run(worker.analyze_batch(requests))


def test_unexpected_error_fails_closed(monkeypatch, clean_python_source):
    worker = AnalysisWorker()

    def explode(request, language):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(worker, "_facets", explode)
    report = worker.analyze(_request(clean_python_source, unit_id="x"))
    assert report.verdict == Verdict.REQUEST_CHANGES
    assert report.extraction_error == "internal error: RuntimeError"


def test_facets_are_cached(python_test_source):
    cache = FacetCache()
    worker = AnalysisWorker(cache=cache)
    first = worker.analyze(_request(python_test_source, unit_id="one"))
    second = worker.analyze(_request(python_test_source, unit_id="two"))
    assert cache.size == 1
    assert cache.hits == 1
    assert first.counts == second.counts


def test_cache_key_includes_data_provider_flag(python_test_source):
    cache = FacetCache()
    worker = AnalysisWorker(cache=cache)
    worker.analyze(_request(python_test_source))
    worker.analyze(_request(python_test_source, data_provider=True))
    assert cache.size == 2


def test_cache_expiry(monkeypatch):
    from rulegate.config import settings

    cache = FacetCache()
    cache.put("x = 1", "python", UnitKind.FULL_FILE, Facets())
    assert cache.get("x = 1", "python", UnitKind.FULL_FILE) is not None

    monkeypatch.setattr(settings, "cache_ttl_seconds", -1)
    assert cache.get("x = 1", "python", UnitKind.FULL_FILE) is None
    assert cache.size == 0
    assert cache.stats()["misses"] == 1


def test_audit_entries_written(tmp_path, python_test_source):
    audit = AuditLogger(log_path=str(tmp_path / "audit.jsonl"), enabled=True)
    worker = AnalysisWorker(audit=audit)
    worker.analyze(_request(python_test_source, unit_id="audited"))
    worker.analyze(_request("abc\x00", unit_id="binary"))

    entries = audit.read_recent()
    assert [e["unit_id"] for e in entries] == ["audited", "binary"]
    assert entries[0]["verdict"] == "REQUEST_CHANGES"
    assert entries[0]["blocking"] == 2
    assert entries[0]["profile"] == "default"
    assert entries[1]["extraction_failed"] is True
    assert "timestamp" in entries[0]


def test_disabled_audit_writes_nothing(tmp_path, clean_python_source):
    path = tmp_path / "audit.jsonl"
    audit = AuditLogger(log_path=str(path), enabled=False)
    AnalysisWorker(audit=audit).analyze(_request(clean_python_source))
    assert not path.exists()
    assert audit.read_recent() == []

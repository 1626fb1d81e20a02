"""
Tests: Full grading pipeline — load → evaluate → aggregate (fan-out) → finalize.

Run with:
    pytest ontology_grader/tests/test_pipeline.py -v
"""

import pytest

from ontology_grader.exceptions import DocumentParseError, ManifestError
from ontology_grader.models.enums import CurationStatus, PipelineStatus, ResultStatus
from ontology_grader.models.schemas import Manifest, RequirementDeclaration
from ontology_grader.orchestration.graph import run_batch, run_pipeline
from ontology_grader.tests.conftest import EX, FakeBackend, FakeLoader, FakeStore, declaration


class TestSampleOntology:
    """The fixture ontology exercises every status the grader can derive."""

    @pytest.fixture
    def state(self, sample_ttl, fixture_manifest_path, settings):
        return run_pipeline(
            sample_ttl,
            file_name="sample.ttl",
            manifest_location=fixture_manifest_path,
            settings=settings,
        )

    def test_pipeline_completes(self, state):
        assert state["status"] is PipelineStatus.COMPLETED
        assert state["document_iri"] == EX
        assert len(state["document_hash"]) == 64

    def test_records(self, state):
        by_query: dict[str, list[str]] = {}
        for r in state["results"]:
            by_query.setdefault(r.query_id, []).append(r.entity)

        assert by_query["q_missingLabel"] == [f"{EX}#C"]
        assert by_query["q_missingDefinition"] == [f"{EX}#C", f"{EX}#D"]
        assert by_query["q_missingComment"] == [f"{EX}#B", f"{EX}#D"]
        assert by_query["q_onlyLabel"] == [f"{EX}#D"]
        assert by_query["q_hasLicense"] == [EX]

    def test_resource_statuses(self, state):
        statuses = {r.entity: r.status for r in state["resource_reports"]}
        assert statuses == {
            f"{EX}#A": CurationStatus.PENDING_FINAL_VETTING,
            f"{EX}#B": CurationStatus.METADATA_COMPLETE,
            f"{EX}#C": CurationStatus.METADATA_INCOMPLETE,
            f"{EX}#D": CurationStatus.UNCURATED,
            EX: CurationStatus.METADATA_INCOMPLETE,
        }

    def test_document_report(self, state):
        report = state["document_report"]
        assert report.status is CurationStatus.METADATA_INCOMPLETE

        reqs = {r.id: r for r in report.requirements}
        assert list(reqs) == ["R_label", "R_definition", "R_ontology_license", "REC_comment"]
        assert reqs["R_label"].failing_entities == [f"{EX}#C"]
        assert reqs["R_definition"].failed_entity_count == 2
        assert reqs["R_ontology_license"].status is ResultStatus.FAIL
        assert reqs["R_ontology_license"].failed_entity_count == 0
        assert reqs["REC_comment"].failed_entity_count == 2

    def test_audit_trail_covers_every_node(self, state):
        nodes = {entry.node for entry in state["audit_trail"]}
        assert nodes == {
            "load_inputs", "evaluate_queries", "aggregate_resources", "aggregate_document", "finalize",
        }


class TestInjectedBackend:
    def _manifest(self) -> Manifest:
        return Manifest(
            requirements=[
                RequirementDeclaration(id="R1"),
                RequirementDeclaration(id="R2", type="recommendation"),
            ],
            queries=[
                declaration("q_r1", checksConformityTo="R1"),
                declaration("q_broken", checksConformityTo="R2"),
            ],
        )

    def test_query_failure_still_produces_reports(self, settings):
        store = FakeStore(selects={"q_r1": [{"resource": "E1"}]}, entities=["E1", "E9"])
        backend = FakeBackend(store)

        state = run_pipeline(
            "ignored", file_name="doc.ttl",
            backend=backend, loader=FakeLoader(self._manifest()), settings=settings,
        )

        assert backend.loaded == ["doc.ttl"]
        assert [r.query_id for r in state["results"]] == ["q_r1"]
        assert [(r.entity, r.status) for r in state["resource_reports"]] == [
            ("E1", CurationStatus.METADATA_INCOMPLETE),
            ("E9", CurationStatus.PENDING_FINAL_VETTING),
        ]
        r2 = state["document_report"].requirements[1]
        assert r2.status is ResultStatus.PASS

    def test_missing_document_iri_uses_sentinel(self, settings):
        store = FakeStore(asks={"q": True}, iri=None)
        manifest = Manifest(queries=[declaration("q", kind="ASK")])
        state = run_pipeline(
            "ignored", backend=FakeBackend(store), loader=FakeLoader(manifest), settings=settings,
        )
        assert state["document_iri"] == "urn:ontology:unknown"
        assert state["results"][0].entity == "urn:ontology:unknown"


class TestSetupFailures:
    def test_unreachable_manifest_aborts(self, sample_ttl, tmp_path, settings):
        with pytest.raises(ManifestError):
            run_pipeline(
                sample_ttl, file_name="sample.ttl",
                manifest_location=str(tmp_path / "missing.json"), settings=settings,
            )

    def test_unparseable_document_aborts(self, fixture_manifest_path, settings):
        with pytest.raises(DocumentParseError):
            run_pipeline(
                "@@@ not rdf", file_name="broken.ttl",
                manifest_location=fixture_manifest_path, settings=settings,
            )


class TestBatch:
    def test_independent_runs(self, sample_ttl, fixture_manifest_path):
        from ontology_grader.config import Settings

        settings = Settings(_env_file=None, max_batch_workers=2)
        states = run_batch(
            [("sample.ttl", sample_ttl), ("broken.ttl", "@@@"), ("again.ttl", sample_ttl)],
            manifest_location=fixture_manifest_path,
            settings=settings,
        )

        assert [s["status"] for s in states] == [
            PipelineStatus.COMPLETED, PipelineStatus.FAILED, PipelineStatus.COMPLETED,
        ]
        assert "broken.ttl" in states[1]["error_message"]
        assert (
            states[0]["document_report"].model_dump_json()
            == states[2]["document_report"].model_dump_json()
        )

    def test_undecodable_manifest_fails_each_document(self, tmp_path, settings):
        manifest = tmp_path / "manifest.json"
        manifest.write_bytes(b"\xff\xfe not utf-8")
        states = run_batch(
            [("a.ttl", ""), ("b.ttl", "")],
            manifest_location=str(manifest),
            settings=settings,
        )

        assert [s["status"] for s in states] == [PipelineStatus.FAILED, PipelineStatus.FAILED]
        assert [s["file_name"] for s in states] == ["a.ttl", "b.ttl"]
        assert all("manifest" in s["error_message"].lower() for s in states)

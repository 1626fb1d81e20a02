"""
Tests: status policy and the two aggregators.

Run with:
    pytest ontology_grader/tests/test_grader.py -v
"""

from ontology_grader.engine.grader import (
    UNKNOWN_DOCUMENT_IRI,
    UNKNOWN_RESOURCE_IRI,
    compute_document_report,
    compute_per_resource_curation,
    status_policy,
)
from ontology_grader.models.enums import (
    CurationStatus,
    EntityFlag,
    RequirementType,
    ResultStatus,
    Scope,
)
from ontology_grader.models.schemas import RequirementDeclaration, ResultRecord


def _req(id: str, type: str = "requirement", weight=1) -> RequirementDeclaration:
    return RequirementDeclaration(id=id, type=type, weight=weight)


def _fail(entity, requirement_id=None, query_id="q", scope=Scope.RESOURCE, flags=()) -> ResultRecord:
    return ResultRecord(
        entity=entity,
        query_id=query_id,
        requirement_id=requirement_id,
        status=ResultStatus.FAIL,
        scope=scope,
        flags=flags,
    )


REQUIREMENTS = [_req("R1"), _req("R2", "recommendation")]


class TestStatusPolicy:
    def test_no_failures_is_pending_final_vetting(self):
        assert status_policy(False, False) is CurationStatus.PENDING_FINAL_VETTING

    def test_mandatory_failure_wins_over_advisory(self):
        assert status_policy(True, True) is CurationStatus.METADATA_INCOMPLETE
        assert status_policy(True, False) is CurationStatus.METADATA_INCOMPLETE

    def test_advisory_only_is_metadata_complete(self):
        assert status_policy(False, True) is CurationStatus.METADATA_COMPLETE

    def test_uncurated_flag_overrides_everything(self):
        flags = {EntityFlag.UNCURATED: True}
        assert status_policy(True, True, flags) is CurationStatus.UNCURATED
        assert status_policy(False, False, flags) is CurationStatus.UNCURATED

    def test_reserved_flags_rank_below_failures(self):
        flags = {EntityFlag.READY_FOR_RELEASE: True}
        assert status_policy(True, False, flags) is CurationStatus.METADATA_INCOMPLETE
        assert status_policy(False, False, flags) is CurationStatus.READY_FOR_RELEASE

    def test_status_identifiers_and_labels(self):
        assert CurationStatus.METADATA_INCOMPLETE.iri == "http://purl.obolibrary.org/obo/IAO_0000123"
        assert CurationStatus.PENDING_FINAL_VETTING.label == "pending final vetting"
        assert CurationStatus.READY_FOR_RELEASE.iri.startswith("http://example.org/curation-status/")


class TestResourceAggregation:
    def test_mandatory_failure_scenario(self):
        reports = compute_per_resource_curation([_fail("E1", "R1")], REQUIREMENTS)
        assert len(reports) == 1
        e1 = reports[0]
        assert e1.entity == "E1"
        assert e1.status is CurationStatus.METADATA_INCOMPLETE
        assert e1.status_label == "metadata incomplete"
        assert e1.failed_requirements == ["R1"]
        assert e1.failed_recommendations == []

    def test_advisory_failure_only(self):
        reports = compute_per_resource_curation([_fail("E1", "R2")], REQUIREMENTS)
        assert reports[0].status is CurationStatus.METADATA_COMPLETE
        assert reports[0].failed_recommendations == ["R2"]

    def test_unlisted_requirement_counts_as_mandatory(self):
        reports = compute_per_resource_curation([_fail("E1", "R_unknown")], REQUIREMENTS)
        assert reports[0].failed_requirements == ["R_unknown"]
        assert reports[0].status is CurationStatus.METADATA_INCOMPLETE

    def test_classifier_flag_marks_uncurated_with_empty_lists(self):
        record = _fail("E2", query_id="q_onlyLabel", flags=(EntityFlag.UNCURATED,))
        reports = compute_per_resource_curation([record], REQUIREMENTS)
        assert reports[0].status is CurationStatus.UNCURATED
        assert reports[0].failed_requirements == []
        assert reports[0].failed_recommendations == []

    def test_classifier_query_id_alone_does_not_flag(self):
        # Only the record's flags drive classification
        reports = compute_per_resource_curation([_fail("E2", query_id="q_onlyLabel")], REQUIREMENTS)
        assert reports[0].status is CurationStatus.PENDING_FINAL_VETTING

    def test_passing_records_do_not_fail_anything(self):
        record = ResultRecord(entity="E1", query_id="q", requirement_id="R1", status=ResultStatus.PASS)
        reports = compute_per_resource_curation([record], REQUIREMENTS)
        assert reports[0].status is CurationStatus.PENDING_FINAL_VETTING

    def test_known_entities_get_one_report_each(self):
        reports = compute_per_resource_curation(
            [_fail("E1", "R1")], REQUIREMENTS, all_resources=["E1", "E3", "E4"]
        )
        assert [r.entity for r in reports] == ["E1", "E3", "E4"]
        e3 = reports[1]
        assert e3.status is CurationStatus.PENDING_FINAL_VETTING
        assert e3.failed_requirements == [] and e3.failed_recommendations == []

    def test_entity_less_records_group_under_sentinel(self):
        reports = compute_per_resource_curation([_fail(None, "R1")], REQUIREMENTS)
        assert reports[0].entity == UNKNOWN_RESOURCE_IRI

    def test_failure_lists_keep_first_seen_order_without_duplicates(self):
        records = [
            _fail("E1", "R9"),
            _fail("E1", "R1"),
            _fail("E1", "R9"),
            _fail("E1", "R2"),
        ]
        reports = compute_per_resource_curation(records, REQUIREMENTS)
        assert reports[0].failed_requirements == ["R9", "R1"]
        assert reports[0].failed_recommendations == ["R2"]

    def test_idempotent(self):
        records = [_fail("E1", "R1"), _fail("E2", "R2"), _fail("E3", flags=(EntityFlag.UNCURATED,))]
        first = compute_per_resource_curation(records, REQUIREMENTS, ["E4"])
        second = compute_per_resource_curation(records, REQUIREMENTS, ["E4"])
        assert [r.model_dump_json() for r in first] == [r.model_dump_json() for r in second]


class TestDocumentAggregation:
    def test_mandatory_failure_scenario(self):
        report = compute_document_report([_fail("E1", "R1")], REQUIREMENTS, "http://ex/doc")
        assert report.document_iri == "http://ex/doc"
        assert report.status is CurationStatus.METADATA_INCOMPLETE

        r1, r2 = report.requirements
        assert (r1.id, r1.status, r1.failed_entity_count, r1.failing_entities) == (
            "R1", ResultStatus.FAIL, 1, ["E1"],
        )
        assert (r2.id, r2.type, r2.status, r2.failed_entity_count) == (
            "R2", RequirementType.RECOMMENDATION, ResultStatus.PASS, 0,
        )

    def test_no_records_with_one_recommendation(self):
        report = compute_document_report([], [_req("R2", "recommendation")])
        assert report.status is CurationStatus.PENDING_FINAL_VETTING
        assert report.document_iri == UNKNOWN_DOCUMENT_IRI
        assert len(report.requirements) == 1
        assert report.requirements[0].status is ResultStatus.PASS

    def test_every_requirement_reported_once(self):
        requirements = [_req("R1"), _req("R2", "recommendation"), _req("R3", weight=5)]
        records = [_fail("E1", "R1"), _fail("E2", "R1"), _fail("E1", "R_unknown")]
        report = compute_document_report(records, requirements)
        assert [r.id for r in report.requirements] == ["R1", "R2", "R3"]
        assert report.requirements[2].weight == 5

    def test_document_scope_failures_are_not_entity_attributed(self):
        record = _fail("http://ex/doc", "R1", scope=Scope.DOCUMENT)
        report = compute_document_report([record], REQUIREMENTS)
        r1 = report.requirements[0]
        assert r1.status is ResultStatus.FAIL
        assert r1.failed_entity_count == 0
        assert report.status is CurationStatus.METADATA_INCOMPLETE

    def test_failing_entities_are_distinct(self):
        records = [_fail("E1", "R1"), _fail("E1", "R1"), _fail("E2", "R1"), _fail(None, "R1")]
        r1 = compute_document_report(records, REQUIREMENTS).requirements[0]
        assert r1.failing_entities == ["E1", "E2"]
        assert r1.failed_entity_count == 2

    def test_advisory_only_document(self):
        report = compute_document_report([_fail("E1", "R2")], REQUIREMENTS)
        assert report.status is CurationStatus.METADATA_COMPLETE

    def test_document_status_independent_of_entity_status(self):
        # The only failing entity is uncurated, yet the document is incomplete
        records = [_fail("E1", "R1", flags=(EntityFlag.UNCURATED,))]
        entity = compute_per_resource_curation(records, REQUIREMENTS)[0]
        document = compute_document_report(records, REQUIREMENTS)
        assert entity.status is CurationStatus.UNCURATED
        assert document.status is CurationStatus.METADATA_INCOMPLETE

    def test_uncurated_flag_never_applies_to_document(self):
        records = [_fail("E2", flags=(EntityFlag.UNCURATED,))]
        report = compute_document_report(records, REQUIREMENTS)
        assert report.status is CurationStatus.PENDING_FINAL_VETTING

    def test_idempotent(self):
        records = [_fail("E1", "R1"), _fail("E2", "R2")]
        first = compute_document_report(records, REQUIREMENTS, "d")
        second = compute_document_report(records, REQUIREMENTS, "d")
        assert first.model_dump_json() == second.model_dump_json()

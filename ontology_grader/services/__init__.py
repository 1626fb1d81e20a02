"""Services — ManifestLoader, export helpers."""

from ontology_grader.services.manifest_service import ManifestLoader
from ontology_grader.services.export_service import (
    document_report_to_dict,
    document_report_to_yaml,
    resource_reports_to_csv,
    results_to_csv,
    write_exports,
)

__all__ = [
    "ManifestLoader",
    "document_report_to_dict",
    "document_report_to_yaml",
    "resource_reports_to_csv",
    "results_to_csv",
    "write_exports",
]

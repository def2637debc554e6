"""
Main workflow validator.
Runs the structural and per-task rules in a fixed order.
"""
from typing import Any, Dict, List, Optional, Union

from flowcanvas.core.logging import get_logger
from flowcanvas.schemas.models import WorkflowDocument
from flowcanvas.workflow.graph_builder import WorkflowGraph
from .errors import Finding, ValidationResult
from .sync_rules import (
    validate_document_fields,
    validate_document_json,
    validate_reachability,
    validate_task_schemas,
)

logger = get_logger(__name__)


class WorkflowValidator:
    """
    Workflow validation service.
    Never mutates its inputs and never raises for an invalid workflow.
    """

    def validate(
        self,
        graph: WorkflowGraph,
        document: Optional[Union[WorkflowDocument, Dict[str, Any]]],
    ) -> ValidationResult:
        """
        Validate the live graph together with its document.

        Args:
            graph: Live workflow graph
            document: Document derived from the graph, or None if none loaded

        Returns:
            ValidationResult with ordered findings
        """
        result = ValidationResult()

        if document is None:
            result.add_error("No workflow loaded")
            return result

        if not graph.task_nodes():
            result.add_warning("Workflow has no tasks")
            return result

        validate_reachability(graph, result)
        validate_task_schemas(graph, result)
        validate_document_fields(document, result)

        logger.debug(
            f"Validation finished: {len(result.errors)} errors, {len(result.warnings)} warnings"
        )
        return result

    def validate_raw(self, workflow: Dict[str, Any]) -> ValidationResult:
        """
        Validate a raw document before import.

        Args:
            workflow: Document as parsed JSON

        Returns:
            ValidationResult
        """
        return validate_document_json(workflow)


_validator = WorkflowValidator()


def validate_workflow(
    graph: WorkflowGraph,
    document: Optional[Union[WorkflowDocument, Dict[str, Any]]],
) -> List[Finding]:
    """Ordered findings for the live graph and its document."""
    return _validator.validate(graph, document).findings

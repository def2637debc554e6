"""
Workflow validation module.
Structural, per-task and raw-document rules producing ordered findings.
"""
from .errors import (
    Finding,
    ValidationResult,
    has_errors,
    WorkflowError,
    GraphEditError,
    FunctionBuildError,
    SerializationError,
    CycleError,
    DocumentImportError,
    TaskIdCollisionError,
    DocumentCycleError,
)
from .validator import WorkflowValidator, validate_workflow
from .sync_rules import validate_document_json

__all__ = [
    "WorkflowValidator",
    "ValidationResult",
    "Finding",
    "validate_workflow",
    "validate_document_json",
    "has_errors",
    "WorkflowError",
    "GraphEditError",
    "FunctionBuildError",
    "SerializationError",
    "CycleError",
    "DocumentImportError",
    "TaskIdCollisionError",
    "DocumentCycleError",
]

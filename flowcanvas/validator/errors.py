"""
Validation findings and workflow fault types.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from flowcanvas.core.constants import Severity


# ============================================================================
# FAULTS
# ============================================================================

class WorkflowError(Exception):
    """Base workflow fault."""
    pass


class GraphEditError(WorkflowError, ValueError):
    """A graph mutation was rejected."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message)
        self.node_id = node_id


class FunctionBuildError(WorkflowError, ValueError):
    """Dialog fields could not be turned into a task function."""
    pass


class SerializationError(WorkflowError):
    """Graph could not be exported as a nested document."""
    pass


class CycleError(SerializationError):
    """A task re-enters its own ancestor path."""

    def __init__(self, message: str, node_id: str, path: Optional[List[str]] = None):
        super().__init__(message)
        self.node_id = node_id
        self.path = list(path or [])


class DocumentImportError(WorkflowError):
    """Document could not be expanded into a graph. Always fatal."""
    pass


class TaskIdCollisionError(DocumentImportError):
    """Two different tasks share one id."""

    def __init__(self, message: str, task_id: str):
        super().__init__(message)
        self.task_id = task_id


class DocumentCycleError(DocumentImportError, CycleError):
    """A task id appears inside its own subtree."""

    def __init__(self, message: str, node_id: str, path: Optional[List[str]] = None):
        CycleError.__init__(self, message, node_id, path)


# ============================================================================
# FINDINGS
# ============================================================================

class Finding(BaseModel):
    """Single validation finding"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    severity: Severity
    message: str
    node_id: Optional[str] = Field(default=None, alias="nodeId")

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ValidationResult:
    """Ordered findings collected by the validation rules."""

    def __init__(self):
        self.findings: List[Finding] = []

    @property
    def errors(self) -> List[str]:
        return [f.message for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[str]:
        return [f.message for f in self.findings if f.severity == Severity.WARNING]

    def is_valid(self) -> bool:
        """Check if validation passed (no errors)."""
        return not has_errors(self.findings)

    def add_error(self, message: str, node_id: Optional[str] = None):
        """Add an error finding."""
        self.findings.append(Finding(severity=Severity.ERROR, message=message, node_id=node_id))

    def add_warning(self, message: str, node_id: Optional[str] = None):
        """Add a warning finding."""
        self.findings.append(Finding(severity=Severity.WARNING, message=message, node_id=node_id))

    def to_dict(self) -> dict:
        """Convert to dictionary for the hosting surface."""
        return {
            "valid": self.is_valid(),
            "findings": [f.to_dict() for f in self.findings],
            "errors": self.errors,
            "warnings": self.warnings,
        }


def has_errors(findings: List[Finding]) -> bool:
    """True iff any finding is an error; warnings never block."""
    return any(f.severity == Severity.ERROR for f in findings)

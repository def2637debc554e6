"""
Synchronous validation rules.
Fast, deterministic checks for workflow correctness. Rules only read their
inputs and append findings to the result.
"""
from collections import deque
from typing import Any, Callable, Dict, List, Optional, Union

import jsonschema

from flowcanvas.core.constants import InputType
from flowcanvas.schemas import WORKFLOW_SCHEMA
from flowcanvas.schemas.models import (
    CliCommandFunction,
    CursorAgentFunction,
    CustomFunction,
    Task,
    UserInputFunction,
    WorkflowDocument,
)
from flowcanvas.workflow.graph_builder import WorkflowGraph
from .errors import ValidationResult

DocumentLike = Union[WorkflowDocument, Dict[str, Any]]

_INPUT_TYPES = {t.value for t in InputType}


def _is_blank(value: Any) -> bool:
    # Whitespace-only counts as blank, stricter than an empty-string check.
    return value is None or (isinstance(value, str) and value.strip() == "")


def _document_field(document: DocumentLike, field: str) -> Any:
    if isinstance(document, dict):
        return document.get(field)
    return getattr(document, field, None)


# ============================================================================
# STRUCTURE
# ============================================================================

def validate_reachability(graph: WorkflowGraph, result: ValidationResult) -> None:
    """Every task node must be reachable from the start node."""
    start_id = graph.start_node_id
    adj_list = graph.adjacency()

    connected = {start_id}
    queue = deque([start_id])
    while queue:
        current = queue.popleft()
        for target in adj_list.get(current, []):
            if target not in connected:
                connected.add(target)
                queue.append(target)

    for node in graph.task_nodes():
        if node.id not in connected:
            result.add_error(
                f'Task "{node.label}" is not connected to the workflow',
                node_id=node.id,
            )


def validate_document_fields(document: DocumentLike, result: ValidationResult) -> None:
    """Workflow name and id are required."""
    if _is_blank(_document_field(document, "name")):
        result.add_error("Workflow must have a name")

    if _is_blank(_document_field(document, "id")):
        result.add_error("Workflow must have an ID")


# ============================================================================
# PER-TASK SCHEMA
# ============================================================================

def _check_cli_command(task: Task, result: ValidationResult) -> None:
    if _is_blank(task.function.input.command):
        result.add_error(f'Task "{task.display_name}": command is required', node_id=task.id)


def _check_cursor_agent(task: Task, result: ValidationResult) -> None:
    if _is_blank(task.function.input.prompt):
        result.add_error(f'Task "{task.display_name}": prompt is required', node_id=task.id)


def _check_user_input(task: Task, result: ValidationResult) -> None:
    function_input = task.function.input
    if _is_blank(function_input.prompt):
        result.add_error(f'Task "{task.display_name}": prompt is required', node_id=task.id)

    if _is_blank(function_input.input_type):
        result.add_error(f'Task "{task.display_name}": input_type is required', node_id=task.id)
    elif function_input.input_type not in _INPUT_TYPES:
        result.add_warning(
            f'Task "{task.display_name}": unsupported input_type '
            f"'{function_input.input_type}'",
            node_id=task.id,
        )


def _check_custom(task: Task, result: ValidationResult) -> None:
    # Arbitrary payload; nothing is required.
    return None


TASK_RULES: Dict[type, Callable[[Task, ValidationResult], None]] = {
    CliCommandFunction: _check_cli_command,
    CursorAgentFunction: _check_cursor_agent,
    UserInputFunction: _check_user_input,
    CustomFunction: _check_custom,
}


def validate_task_schema(task: Task, result: ValidationResult) -> None:
    """Validate required fields for the task's function kind."""
    rule = TASK_RULES.get(type(task.function))
    if rule is not None:
        rule(task, result)


def validate_task_schemas(graph: WorkflowGraph, result: ValidationResult) -> None:
    """Validate every task node, connected or not."""
    for node in graph.task_nodes():
        if node.task is not None:
            validate_task_schema(node.task, result)


# ============================================================================
# RAW DOCUMENTS
# ============================================================================

def validate_document_schema(workflow: Dict[str, Any], result: ValidationResult) -> None:
    """Validate a raw document against the workflow JSON schema."""
    validator = jsonschema.Draft7Validator(WORKFLOW_SCHEMA)
    errors = sorted(
        validator.iter_errors(workflow),
        key=lambda e: ([str(p) for p in e.absolute_path], e.message),
    )
    for error in errors:
        path = "/".join(str(p) for p in error.absolute_path) or "root"
        result.add_error(f"Schema violation at '{path}': {error.message}")


def validate_unique_task_ids(workflow: Dict[str, Any], result: ValidationResult) -> None:
    """
    Different tasks must not share an id.

    Repeated ids with identical content are shared children duplicated by
    export, and are accepted.
    """
    seen: Dict[str, Dict[str, Any]] = {}
    reported = set()
    stack: List[Dict[str, Any]] = list(reversed(workflow.get("tasks") or []))

    while stack:
        task = stack.pop()
        if not isinstance(task, dict):
            continue
        task_id = task.get("id")
        content = {k: v for k, v in task.items() if k != "next_tasks"}

        if task_id in seen and seen[task_id] != content and task_id not in reported:
            reported.add(task_id)
            result.add_error(f"Duplicate task ID: '{task_id}'", node_id=task_id)
        seen.setdefault(task_id, content)

        stack.extend(reversed(task.get("next_tasks") or []))


def validate_document_json(
    workflow: Dict[str, Any],
    result: Optional[ValidationResult] = None
) -> ValidationResult:
    """Schema check followed by task id uniqueness for a raw document."""
    result = result or ValidationResult()
    if not isinstance(workflow, dict):
        result.add_error("Workflow document must be a JSON object")
        return result

    validate_document_schema(workflow, result)
    if result.is_valid():
        validate_unique_task_ids(workflow, result)
    return result

"""
Schema definitions for the workflow document.
Contains the JSON schema for raw documents and the Pydantic models.
"""
import json
from pathlib import Path

from .models import (
    NodePosition,
    CliCommandInput,
    CursorAgentInput,
    UserInputInput,
    CliCommandFunction,
    CursorAgentFunction,
    UserInputFunction,
    CustomFunction,
    TaskFunction,
    Task,
    WorkflowMetadata,
    WorkflowDocument,
)
from .messages import Message, MessagePayload

SCHEMA_DIR = Path(__file__).parent


def load_schema(schema_name: str) -> dict:
    """Load a JSON schema by name."""
    schema_path = SCHEMA_DIR / f"{schema_name}.json"
    with open(schema_path) as f:
        return json.load(f)


# Pre-load schemas for validation
WORKFLOW_SCHEMA = load_schema("workflow_schema")

__all__ = [
    "WORKFLOW_SCHEMA",
    "load_schema",
    "NodePosition",
    "CliCommandInput",
    "CursorAgentInput",
    "UserInputInput",
    "CliCommandFunction",
    "CursorAgentFunction",
    "UserInputFunction",
    "CustomFunction",
    "TaskFunction",
    "Task",
    "WorkflowMetadata",
    "WorkflowDocument",
    "Message",
    "MessagePayload",
]

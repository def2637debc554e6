"""
Core Constants and Enums
Central source of truth for node kinds, task function kinds and message types
"""
from enum import Enum


# ============================================================================
# GRAPH
# ============================================================================

START_NODE_ID = "__start__"


class NodeType(str, Enum):
    """
    Graph node kinds

    START: Synthetic workflow entry, never serialized as a task
    TASK: Node backed by a workflow task
    """
    START = "start"
    TASK = "task"


# ============================================================================
# TASK FUNCTIONS
# ============================================================================

class FunctionName(str, Enum):
    """Task function variants understood by the execution engine"""
    CLI_COMMAND = "cli_command"
    CURSOR_AGENT = "cursor_agent"
    USER_INPUT = "user_input"
    CUSTOM = "custom"


class InputType(str, Enum):
    """Value types a user_input task may request"""
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"


# ============================================================================
# VALIDATION
# ============================================================================

class Severity(str, Enum):
    """Finding severity. Only errors block export."""
    ERROR = "error"
    WARNING = "warning"


# ============================================================================
# MESSAGE CHANNEL
# ============================================================================

class MessageType(str, Enum):
    """
    Envelope types exchanged with the hosting surface

    Incoming: LOAD_WORKFLOW, GET_WORKFLOW_STATE, UPDATE_NODE, DELETE_EDGE
    Outgoing: READY, WORKFLOW_STATE, SAVE_WORKFLOW, VALIDATION_ERROR
    """
    LOAD_WORKFLOW = "LOAD_WORKFLOW"
    GET_WORKFLOW_STATE = "GET_WORKFLOW_STATE"
    UPDATE_NODE = "UPDATE_NODE"
    DELETE_EDGE = "DELETE_EDGE"
    READY = "READY"
    WORKFLOW_STATE = "WORKFLOW_STATE"
    SAVE_WORKFLOW = "SAVE_WORKFLOW"
    VALIDATION_ERROR = "VALIDATION_ERROR"

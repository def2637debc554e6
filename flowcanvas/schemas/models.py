"""
Workflow document models.

The document is the only wire format shared with storage and execution: a
tree of tasks (children nested under ``next_tasks``) plus a flat side table
of canvas positions keyed by task id. Task functions form a closed tagged
union keyed by ``function.name``.

Fields the editing dialog may leave empty default to ``""`` so that a
partially edited task still loads; the validator reports them instead.
"""
from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# POSITIONS
# ============================================================================

class NodePosition(BaseModel):
    """Top-left canvas coordinate of a node"""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


# ============================================================================
# TASK FUNCTIONS
# ============================================================================

class CliCommandInput(BaseModel):
    """Input for a shell command task"""
    model_config = ConfigDict(extra="allow")

    command: Optional[str] = ""
    args: Optional[List[str]] = None


class CursorAgentInput(BaseModel):
    """Input for an agent prompt task"""
    model_config = ConfigDict(extra="allow")

    prompt: Optional[str] = ""
    config: Optional[Dict[str, Any]] = None


class UserInputInput(BaseModel):
    """Input for a task that pauses for a value from the user"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    prompt: Optional[str] = ""
    input_type: Optional[str] = ""
    required: Optional[bool] = None
    default_value: Any = Field(default=None, alias="default")


class CliCommandFunction(BaseModel):
    name: Literal["cli_command"] = "cli_command"
    input: CliCommandInput = Field(default_factory=CliCommandInput)


class CursorAgentFunction(BaseModel):
    name: Literal["cursor_agent"] = "cursor_agent"
    input: CursorAgentInput = Field(default_factory=CursorAgentInput)


class UserInputFunction(BaseModel):
    name: Literal["user_input"] = "user_input"
    input: UserInputInput = Field(default_factory=UserInputInput)


class CustomFunction(BaseModel):
    """Arbitrary payload; no required shape"""
    name: Literal["custom"] = "custom"
    input: Dict[str, Any] = Field(default_factory=dict)


TaskFunction = Annotated[
    Union[CliCommandFunction, CursorAgentFunction, UserInputFunction, CustomFunction],
    Field(discriminator="name"),
]


# ============================================================================
# TASKS AND DOCUMENTS
# ============================================================================

class Task(BaseModel):
    """
    A single workflow task.

    ``next_tasks`` only appears in serialized documents. Inside the graph
    model children are expressed as edges and ``next_tasks`` is always None.
    Unknown keys (``status``, ``is_root``, ...) are carried through.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    function: TaskFunction
    next_tasks: Optional[List["Task"]] = None

    @property
    def display_name(self) -> str:
        """Name shown in findings; falls back to the id"""
        return self.name if self.name and self.name.strip() else self.id

    def without_children(self) -> "Task":
        """Deep copy of this task with ``next_tasks`` stripped"""
        # Strip first so the deep copy never walks the subtree.
        return self.model_copy(update={"next_tasks": None}).model_copy(deep=True)

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation; unset optional fields are omitted"""
        return self.model_dump(by_alias=True, exclude_none=True)


class WorkflowMetadata(BaseModel):
    """Visualization metadata stored beside the task tree"""
    model_config = ConfigDict(extra="allow")

    node_positions: Dict[str, NodePosition] = Field(default_factory=dict)


class WorkflowDocument(BaseModel):
    """Canonical nested workflow document"""
    model_config = ConfigDict(extra="allow")

    id: str = ""
    name: str = ""
    tasks: List[Task] = Field(default_factory=list)
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)

    def iter_tasks(self) -> Iterator[Task]:
        """Depth-first walk over every task occurrence in the tree"""
        stack = list(reversed(self.tasks))
        while stack:
            task = stack.pop()
            yield task
            if task.next_tasks:
                stack.extend(reversed(task.next_tasks))

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation of the whole document"""
        return self.model_dump(by_alias=True, exclude_none=True)


Task.model_rebuild()

"""
Editor Session
Processes message-channel envelopes from the hosting surface against one
live workflow graph. Transport and debouncing belong to the host.
"""
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from flowcanvas.core.config import Settings, get_settings
from flowcanvas.core.constants import FunctionName, MessageType, Severity
from flowcanvas.core.logging import get_logger
from flowcanvas.schemas.messages import Message, MessagePayload
from flowcanvas.schemas.models import Task, WorkflowDocument
from flowcanvas.validator import (
    CycleError,
    DocumentImportError,
    Finding,
    FunctionBuildError,
    GraphEditError,
    WorkflowValidator,
    has_errors,
)
from flowcanvas.visualization.function_builder import build_task_function
from flowcanvas.visualization.graph_editor import GraphEditor
from flowcanvas.visualization.graph_mapper import GraphMapper
from flowcanvas.workflow.graph_builder import WorkflowGraph

logger = get_logger(__name__)


class EditorSession:
    """
    Holds the graph of one editing session and answers host messages.

    Usage:
        session = EditorSession()
        replies = session.handle_message({"type": "LOAD_WORKFLOW", "payload": {"workflow": doc}})
        session.editor.add_edge(session.graph, "__start__", "task_1")
        reply = session.save()
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.graph: Optional[WorkflowGraph] = None
        self.workflow_id = ""
        self.workflow_name = ""
        self.metadata: Dict[str, Any] = {}

        self.editor = GraphEditor()
        self._mapper = GraphMapper()
        self._validator = WorkflowValidator()

        self._handlers: Dict[str, Callable[[Message], List[Message]]] = {
            MessageType.LOAD_WORKFLOW.value: self._on_load_workflow,
            MessageType.GET_WORKFLOW_STATE.value: self._on_get_workflow_state,
            MessageType.UPDATE_NODE.value: self._on_update_node,
            MessageType.DELETE_EDGE.value: self._on_delete_edge,
        }

    @property
    def is_loaded(self) -> bool:
        return self.graph is not None

    # ==================== MESSAGES ====================

    def handle_message(self, message: Union[Message, Dict[str, Any]]) -> List[Message]:
        """
        Dispatch one incoming envelope.

        Args:
            message: Envelope as a Message or its dict form

        Returns:
            Outgoing envelopes, possibly empty
        """
        if not isinstance(message, Message):
            try:
                message = Message.model_validate(message)
            except ValidationError as e:
                logger.warning(f"Dropping malformed message: {e}")
                return []

        handler = self._handlers.get(message.type)
        if handler is None:
            logger.warning(f"Ignoring unknown message type '{message.type}'")
            return []

        logger.debug(f"Handling {message.type}")
        return handler(message)

    def _on_load_workflow(self, message: Message) -> List[Message]:
        payload = message.payload or MessagePayload()
        if payload.workflow is None:
            return [_error_message("LOAD_WORKFLOW requires a workflow")]

        try:
            self.load(payload.workflow, payload.workflow_name)
        except DocumentImportError as e:
            logger.error(f"Workflow import failed: {e}")
            return [_error_message(str(e))]

        return [Message.build(MessageType.READY)]

    def _on_get_workflow_state(self, message: Message) -> List[Message]:
        if not self.is_loaded:
            return [_error_message("No workflow loaded")]
        try:
            document = self.export()
        except CycleError as e:
            return [_error_message(str(e))]
        return [Message.build(MessageType.WORKFLOW_STATE, workflow=document.to_dict())]

    def _on_update_node(self, message: Message) -> List[Message]:
        if not self.is_loaded:
            return [_error_message("No workflow loaded")]

        payload = message.payload or MessagePayload()
        node = self.graph.get_node(payload.node_id) if payload.node_id else None
        if node is None or node.task is None:
            return [_error_message(f"Task node '{payload.node_id}' not found")]

        try:
            function = _updated_function(node.task, payload)
        except FunctionBuildError as e:
            return [_error_message(str(e))]

        task = node.task.model_copy(
            update={
                "name": payload.name if payload.name is not None else node.task.name,
                "function": function,
            },
            deep=True,
        )
        self.editor.update_task(self.graph, node.id, task)
        return [self.save()]

    def _on_delete_edge(self, message: Message) -> List[Message]:
        if not self.is_loaded:
            return [_error_message("No workflow loaded")]

        edge_id = message.edge_id or (message.payload.edge_id if message.payload else None)
        try:
            self.editor.remove_edge(self.graph, edge_id)
        except GraphEditError as e:
            return [_error_message(str(e))]
        return [self.save()]

    # ==================== OPERATIONS ====================

    def load(
        self,
        workflow: Union[WorkflowDocument, Dict[str, Any]],
        workflow_name: Optional[str] = None
    ) -> WorkflowGraph:
        """
        Replace the session graph with an imported document.

        The previous graph is kept if the import fails.

        Raises:
            DocumentImportError: Import fault
        """
        graph = self._mapper.workflow_to_graph(workflow)
        document = self._mapper.document_header(workflow)

        self.graph = graph
        self.workflow_id = document.id
        self.workflow_name = workflow_name or document.name
        self.metadata = {
            k: v for k, v in document.metadata.model_dump().items()
            if k != "node_positions"
        }
        return graph

    def export(self) -> WorkflowDocument:
        """Export the session graph. Raises CycleError on cyclic graphs."""
        return self._mapper.graph_to_workflow(
            self.graph,
            self.workflow_id,
            self.workflow_name,
            self.metadata,
        )

    def validate(self) -> List[Finding]:
        """Findings for the current session state."""
        if not self.is_loaded:
            return self._validator.validate(WorkflowGraph(), None).findings

        try:
            document = self.export()
        except CycleError as e:
            document = WorkflowDocument(id=self.workflow_id, name=self.workflow_name)
            findings = self._validator.validate(self.graph, document).findings
            return findings + [Finding(severity=Severity.ERROR, message=str(e), node_id=e.node_id)]

        return self._validator.validate(self.graph, document).findings

    def save(self) -> Message:
        """
        Export and validate; produce SAVE_WORKFLOW or VALIDATION_ERROR.

        Warnings never block. Errors block only when BLOCK_SAVE_ON_ERRORS is set.
        """
        if not self.is_loaded:
            return _error_message("No workflow loaded")

        try:
            document = self.export()
        except CycleError as e:
            logger.warning(f"Save refused: {e}")
            return _error_message(str(e))

        findings = self._validator.validate(self.graph, document).findings
        if self.settings.BLOCK_SAVE_ON_ERRORS and has_errors(findings):
            errors = [f.message for f in findings if f.is_error]
            logger.info(f"Save blocked by {len(errors)} validation errors")
            return Message.build(
                MessageType.VALIDATION_ERROR,
                workflow=document.to_dict(),
                error="; ".join(errors),
            )

        return Message.build(MessageType.SAVE_WORKFLOW, workflow=document.to_dict())


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _error_message(error: str) -> Message:
    return Message.build(MessageType.VALIDATION_ERROR, error=error)


def _updated_function(task: Task, payload: MessagePayload):
    """
    Apply UPDATE_NODE fields to a task function.

    Keeping the function kind preserves fields the message does not carry;
    switching kind builds a fresh function from the message fields.
    """
    current = task.function
    function_type = payload.function_type or current.name

    if function_type != current.name:
        return build_task_function(
            function_type,
            command=payload.command,
            args=payload.args,
            prompt=payload.prompt,
        )

    if function_type == FunctionName.CUSTOM.value:
        return current.model_copy(deep=True)

    fields = type(current.input).model_fields
    updates = {
        key: value
        for key, value in (
            ("command", payload.command),
            ("args", payload.args),
            ("prompt", payload.prompt),
        )
        if value is not None and key in fields
    }
    return current.model_copy(update={"input": current.input.model_copy(update=updates)}, deep=True)

"""
Graph mapper.
Converts between the live workflow graph and the nested workflow document.

The nested document cannot express shared structure: a task with several
parents is exported once under each parent, and every copy carries the same
task id. Import folds copies that share an id back into a single node.

Both directions walk the task tree with an explicit stack, so document depth
is not limited by the interpreter's recursion limit.
"""
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple, Union

from pydantic import ValidationError

from flowcanvas.core.logging import get_logger
from flowcanvas.schemas.models import NodePosition, Task, WorkflowDocument, WorkflowMetadata
from flowcanvas.validator.errors import (
    CycleError,
    DocumentCycleError,
    DocumentImportError,
    TaskIdCollisionError,
)
from flowcanvas.visualization.layout import apply_layout, layout_missing, missing_positions
from flowcanvas.workflow.graph_builder import (
    GraphEdge,
    WorkflowGraph,
    create_graph,
    edge_id_for,
    make_task_node,
)

logger = get_logger(__name__)

TaskLike = Union[Task, Dict[str, Any]]

_EXHAUSTED = object()


class GraphMapper:
    """
    Maps workflow graphs to documents and back.
    """

    # ==================== GRAPH → DOCUMENT ====================

    def graph_to_workflow(
        self,
        graph: WorkflowGraph,
        workflow_id: Optional[str] = None,
        workflow_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> WorkflowDocument:
        """
        Export a graph as a nested workflow document.

        Every node, the start node included, gets an entry in
        ``metadata.node_positions``. Nodes without a position are placed the
        way import would place them; the graph itself is not modified.

        Args:
            graph: Live workflow graph
            workflow_id: Document id (defaults to the graph metadata)
            workflow_name: Document name (defaults to the graph metadata)
            metadata: Extra metadata keys to carry alongside node_positions

        Returns:
            WorkflowDocument

        Raises:
            CycleError: A task is reachable from itself
        """
        if workflow_id is None:
            workflow_id = graph.metadata.get("workflow_id", "")
        if workflow_name is None:
            workflow_name = graph.metadata.get("workflow_name", "")

        start_id = graph.start_node_id
        tasks = {
            node.id: node.task
            for node in graph.task_nodes()
            if node.task is not None
        }

        children: Dict[str, List[str]] = {}
        roots: List[str] = []
        for edge in graph.edges:
            if edge.source == start_id:
                if edge.target not in roots:
                    roots.append(edge.target)
            else:
                child_ids = children.setdefault(edge.source, [])
                if edge.target not in child_ids:
                    child_ids.append(edge.target)

        exported = []
        for root_id in roots:
            task = self._materialize(root_id, tasks, children)
            if task is not None:
                exported.append(task)

        placed = missing_positions(graph)
        node_positions = {}
        for node in graph.nodes:
            position = node.position if node.position is not None else placed[node.id]
            node_positions[node.id] = NodePosition(x=position["x"], y=position["y"])
        extra = {k: v for k, v in (metadata or {}).items() if k != "node_positions"}

        document = WorkflowDocument(
            id=workflow_id,
            name=workflow_name,
            tasks=exported,
            metadata=WorkflowMetadata(node_positions=node_positions, **extra),
        )

        logger.info(
            f"Exported workflow '{workflow_id}': {len(exported)} root tasks, "
            f"{len(placed)} positions filled in"
        )
        return document

    def _materialize(
        self,
        root_id: str,
        tasks: Dict[str, Task],
        children: Dict[str, List[str]]
    ) -> Optional[Task]:
        """Copy a task and rebuild its subtree from the children map."""
        if root_id not in tasks:
            logger.warning(f"Skipping edge to '{root_id}': not a task node")
            return None

        path = [root_id]
        on_path = {root_id}
        # Each frame: task id, children still to visit, copies built so far.
        frames: List[Tuple[str, Iterator[str], List[Task]]] = [
            (root_id, iter(children.get(root_id, [])), [])
        ]

        while frames:
            task_id, pending, built = frames[-1]
            child_id = next(pending, None)

            if child_id is None:
                frames.pop()
                path.pop()
                on_path.discard(task_id)
                task = tasks[task_id].model_copy(update={"next_tasks": built or None}, deep=True)
                if not frames:
                    return task
                frames[-1][2].append(task)
                continue

            if child_id not in tasks:
                logger.warning(f"Skipping edge to '{child_id}': not a task node")
                continue

            if child_id in on_path:
                cycle = path[path.index(child_id):] + [child_id]
                raise CycleError(
                    f"Cycle detected through task '{child_id}': {' -> '.join(cycle)}",
                    node_id=child_id,
                    path=cycle,
                )

            path.append(child_id)
            on_path.add(child_id)
            frames.append((child_id, iter(children.get(child_id, [])), []))

        return None

    # ==================== DOCUMENT → GRAPH ====================

    def workflow_to_graph(self, workflow: Union[WorkflowDocument, Dict[str, Any]]) -> WorkflowGraph:
        """
        Expand a workflow document into a positioned graph.

        Stored positions are kept. Without any stored position the whole graph
        is laid out; otherwise only nodes lacking a position are placed.

        Args:
            workflow: WorkflowDocument or its raw dict form

        Returns:
            WorkflowGraph

        Raises:
            DocumentImportError: Malformed document, id collision or cycle
        """
        header = self.document_header(workflow)
        roots = workflow.tasks if isinstance(workflow, WorkflowDocument) else workflow.get("tasks") or []
        if not isinstance(roots, list):
            raise DocumentImportError("Workflow 'tasks' must be a list")

        graph = create_graph(header.id, header.name)
        start_id = graph.start_node_id

        seen: Dict[str, Dict[str, Any]] = {}
        edge_keys: Set[Tuple[str, str]] = set()
        path: List[str] = []
        on_path: Set[str] = set()
        # Frame i + 1 belongs to path[i]; frame 0 is the start node.
        frames: List[Tuple[str, Iterator[TaskLike]]] = [(start_id, iter(roots))]

        while frames:
            parent_id, pending = frames[-1]
            raw = next(pending, _EXHAUSTED)
            if raw is _EXHAUSTED:
                frames.pop()
                if path:
                    on_path.discard(path.pop())
                continue

            task, child_tasks = _split_task(raw)

            if task.id == start_id:
                raise DocumentImportError(f"Task id '{start_id}' is reserved for the start node")

            if task.id in on_path:
                cycle = path[path.index(task.id):] + [task.id]
                raise DocumentCycleError(
                    f"Task '{task.id}' appears inside its own subtree: {' -> '.join(cycle)}",
                    node_id=task.id,
                    path=cycle,
                )

            content = task.to_dict()
            if task.id in seen:
                if seen[task.id] != content:
                    raise TaskIdCollisionError(f"Duplicate task ID: '{task.id}'", task_id=task.id)
            else:
                seen[task.id] = content
                graph.nodes.append(make_task_node(task))

            if (parent_id, task.id) not in edge_keys:
                edge_keys.add((parent_id, task.id))
                graph.edges.append(
                    GraphEdge(id=edge_id_for(parent_id, task.id), source=parent_id, target=task.id)
                )

            path.append(task.id)
            on_path.add(task.id)
            frames.append((task.id, iter(child_tasks)))

        stored = header.metadata.node_positions
        node_ids = {node.id for node in graph.nodes}
        for stale_id in sorted(set(stored) - node_ids):
            logger.warning(f"Ignoring stored position for unknown node '{stale_id}'")

        missing = []
        for node in graph.nodes:
            position = stored.get(node.id)
            if position is not None:
                node.position = position.to_dict()
            else:
                missing.append(node.id)

        if not stored:
            apply_layout(graph)
        elif missing:
            layout_missing(graph, missing)

        logger.info(
            f"Imported workflow '{header.id}': {len(graph.nodes) - 1} tasks, "
            f"{len(graph.edges)} edges, {len(missing)} laid out"
        )
        return graph

    def document_header(self, workflow: Union[WorkflowDocument, Dict[str, Any]]) -> WorkflowDocument:
        """
        Id, name and metadata of a document, with the task tree left out.

        Raises:
            DocumentImportError: Not a workflow object or malformed top-level fields
        """
        if isinstance(workflow, WorkflowDocument):
            return workflow.model_copy(update={"tasks": []})
        if not isinstance(workflow, dict):
            raise DocumentImportError(f"Expected a workflow object, got {type(workflow).__name__}")
        try:
            return WorkflowDocument.model_validate({**workflow, "tasks": []})
        except ValidationError as e:
            raise DocumentImportError(f"Malformed workflow document: {e}") from e


def _split_task(raw: TaskLike) -> Tuple[Task, List[TaskLike]]:
    """Validate one task occurrence on its own and return it with its children."""
    if isinstance(raw, Task):
        return raw.without_children(), list(raw.next_tasks or [])

    if not isinstance(raw, dict):
        raise DocumentImportError(f"Expected a task object, got {type(raw).__name__}")

    child_tasks = raw.get("next_tasks") or []
    if not isinstance(child_tasks, list):
        raise DocumentImportError(f"Task '{raw.get('id')}': next_tasks must be a list")

    try:
        task = Task.model_validate({k: v for k, v in raw.items() if k != "next_tasks"})
    except ValidationError as e:
        raise DocumentImportError(f"Malformed task '{raw.get('id')}': {e}") from e
    return task, child_tasks


_mapper = GraphMapper()


def export_workflow(
    graph: WorkflowGraph,
    workflow_id: Optional[str] = None,
    workflow_name: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> WorkflowDocument:
    """Graph → document. See GraphMapper.graph_to_workflow."""
    return _mapper.graph_to_workflow(graph, workflow_id, workflow_name, metadata)


def import_workflow(workflow: Union[WorkflowDocument, Dict[str, Any]]) -> WorkflowGraph:
    """Document → graph. See GraphMapper.workflow_to_graph."""
    return _mapper.workflow_to_graph(workflow)

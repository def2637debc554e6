"""
Graph editor.
Applies editing-surface actions to the live workflow graph.
"""
from typing import Any, Dict, List, Optional

from flowcanvas.core.logging import get_logger
from flowcanvas.schemas.models import Task
from flowcanvas.validator.errors import GraphEditError
from flowcanvas.workflow.graph_builder import (
    GraphEdge,
    GraphNode,
    WorkflowGraph,
    edge_id_for,
    make_task_node,
)

logger = get_logger(__name__)


class GraphEditor:
    """
    Applies node and edge edits to a workflow graph in place.

    Cycles and disconnected nodes are allowed while editing; the validator
    and serializer report them later.
    """

    def apply_node_changes(
        self,
        graph: WorkflowGraph,
        node_changes: List[Dict[str, Any]]
    ) -> WorkflowGraph:
        """
        Apply node changes from the editing surface.

        Args:
            graph: Live workflow graph
            node_changes: List of node modifications, each with a ``type`` of
                add, remove, update or move

        Returns:
            Updated graph
        """
        for change in node_changes:
            change_type = change.get("type")
            node_id = change.get("node_id")

            if change_type == "add":
                self.add_node(graph, _as_task(change["task"]), change.get("position"))
            elif change_type == "remove":
                self.remove_node(graph, node_id)
            elif change_type == "update":
                self.update_task(graph, node_id, _as_task(change["task"]))
            elif change_type == "move":
                position = change.get("position") or {}
                self.move_node(graph, node_id, position.get("x", 0), position.get("y", 0))
            else:
                raise GraphEditError(f"Unknown node change type '{change_type}'", node_id)

        return graph

    def apply_edge_changes(
        self,
        graph: WorkflowGraph,
        edge_changes: List[Dict[str, Any]]
    ) -> WorkflowGraph:
        """
        Apply edge changes from the editing surface.

        Args:
            graph: Live workflow graph
            edge_changes: List of edge modifications (add by source/target,
                remove by edge_id or source/target)

        Returns:
            Updated graph
        """
        for change in edge_changes:
            change_type = change.get("type")

            if change_type == "add":
                self.add_edge(graph, change.get("source"), change.get("target"))
            elif change_type == "remove":
                edge_id = change.get("edge_id") or edge_id_for(change.get("source"), change.get("target"))
                self.remove_edge(graph, edge_id)
            else:
                raise GraphEditError(f"Unknown edge change type '{change_type}'")

        return graph

    # ==================== NODES ====================

    def add_node(
        self,
        graph: WorkflowGraph,
        task: Task,
        position: Optional[Dict[str, float]] = None
    ) -> GraphNode:
        """Add a task node; the task id becomes the node id."""
        if graph.get_node(task.id) is not None:
            raise GraphEditError(f"Node '{task.id}' already exists", task.id)

        node = make_task_node(task, dict(position) if position else None)
        graph.nodes.append(node)
        logger.debug(f"Added node {node.id}")
        return node

    def remove_node(self, graph: WorkflowGraph, node_id: str) -> None:
        """Remove node and every edge touching it."""
        node = self._require_node(graph, node_id)
        if node.is_start:
            raise GraphEditError("The start node cannot be removed", node_id)

        graph.nodes = [n for n in graph.nodes if n.id != node_id]
        graph.edges = [
            e for e in graph.edges
            if e.source != node_id and e.target != node_id
        ]
        logger.debug(f"Removed node {node_id}")

    def move_node(self, graph: WorkflowGraph, node_id: str, x: float, y: float) -> None:
        """Reposition a node."""
        node = self._require_node(graph, node_id)
        node.position = {"x": x, "y": y}

    def update_task(self, graph: WorkflowGraph, node_id: str, task: Task) -> GraphNode:
        """Replace the task behind a task node."""
        node = self._require_node(graph, node_id)
        if node.is_start:
            raise GraphEditError("The start node has no task", node_id)
        if task.id != node_id:
            raise GraphEditError(f"Task id '{task.id}' does not match node '{node_id}'", node_id)

        node.task = task.without_children()
        return node

    # ==================== EDGES ====================

    def add_edge(self, graph: WorkflowGraph, source: str, target: str) -> GraphEdge:
        """
        Connect source to target.

        Returns the existing edge when the pair is already connected.
        """
        self._require_node(graph, source)
        target_node = self._require_node(graph, target)
        if target_node.is_start:
            raise GraphEditError("The start node cannot have incoming edges", target)

        for edge in graph.edges:
            if edge.source == source and edge.target == target:
                return edge

        edge = GraphEdge(id=edge_id_for(source, target), source=source, target=target)
        graph.edges.append(edge)
        logger.debug(f"Added edge {edge.id}")
        return edge

    def remove_edge(self, graph: WorkflowGraph, edge_id: str) -> GraphEdge:
        """Remove an edge by id."""
        edge = graph.get_edge(edge_id)
        if edge is None:
            raise GraphEditError(f"Edge '{edge_id}' not found")

        graph.edges = [e for e in graph.edges if e.id != edge_id]
        logger.debug(f"Removed edge {edge_id}")
        return edge

    def _require_node(self, graph: WorkflowGraph, node_id: Optional[str]) -> GraphNode:
        node = graph.get_node(node_id) if node_id is not None else None
        if node is None:
            raise GraphEditError(f"Node '{node_id}' not found", node_id)
        return node


def _as_task(value: Any) -> Task:
    return value if isinstance(value, Task) else Task.model_validate(value)

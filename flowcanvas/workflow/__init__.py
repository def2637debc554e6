"""
Workflow graph model.
"""
from .graph_builder import (
    GraphNode,
    GraphEdge,
    WorkflowGraph,
    create_graph,
    make_start_node,
    make_task_node,
    edge_id_for,
)

__all__ = [
    "GraphNode",
    "GraphEdge",
    "WorkflowGraph",
    "create_graph",
    "make_start_node",
    "make_task_node",
    "edge_id_for",
]

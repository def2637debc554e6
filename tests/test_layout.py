"""
Tests for the ranked layout engine.
"""
import random

from flowcanvas.core.constants import START_NODE_ID
from flowcanvas.visualization.layout import (
    NODE_HEIGHT,
    NODE_WIDTH,
    RANK_SPACING,
    START_NODE_SIZE,
    apply_layout,
    assign_ranks,
    count_crossings,
    layout_missing,
    layout_positions,
    missing_positions,
    order_ranks,
)
from flowcanvas.workflow.graph_builder import GraphEdge, WorkflowGraph, create_graph, edge_id_for


def build_graph(editor, make_cli_task, task_ids, edges):
    graph = create_graph("w1", "W")
    for task_id in task_ids:
        editor.add_node(graph, make_cli_task(task_id))
    for source, target in edges:
        editor.add_edge(graph, source, target)
    return graph


class TestRanking:

    def test_longest_path_rank(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a", "b"], [
            (START_NODE_ID, "a"), ("a", "b"), (START_NODE_ID, "b"),
        ])

        assert assign_ranks(graph) == {START_NODE_ID: 0, "a": 1, "b": 2}

    def test_unreachable_nodes_fall_back_to_rank_zero(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a", "x", "y"], [
            (START_NODE_ID, "a"), ("x", "y"),
        ])

        ranks = assign_ranks(graph)
        assert ranks["x"] == 0
        assert ranks["y"] == 0
        assert ranks["a"] == 1

    def test_cycles_terminate(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a", "b"], [
            (START_NODE_ID, "a"), ("a", "b"), ("b", "a"),
        ])

        assert assign_ranks(graph) == {START_NODE_ID: 0, "a": 1, "b": 2}

    def test_duplicate_edges_are_harmless(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a"], [(START_NODE_ID, "a")])
        graph.edges.append(GraphEdge(id="dup", source=START_NODE_ID, target="a"))

        assert assign_ranks(graph)["a"] == 1


class TestCrossingReduction:

    def test_barycenter_removes_crossing(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a", "b", "c", "d"], [
            (START_NODE_ID, "a"), (START_NODE_ID, "b"), ("a", "d"), ("b", "c"),
        ])

        layers = order_ranks(graph, assign_ranks(graph), sweeps=4)

        assert layers[0] == [START_NODE_ID]
        assert layers[1] == ["a", "b"]
        assert layers[2] == ["d", "c"]

    def test_count_crossings(self):
        successors = {"a": ["d"], "b": ["c"]}
        assert count_crossings([["a", "b"], ["c", "d"]], successors) == 1
        assert count_crossings([["a", "b"], ["d", "c"]], successors) == 0


class TestCoordinates:

    def test_single_chain(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a"], [(START_NODE_ID, "a")])

        positions = layout_positions(graph)

        assert positions[START_NODE_ID] == {"x": -START_NODE_SIZE / 2, "y": 0.0}
        assert positions["a"] == {"x": -NODE_WIDTH / 2, "y": START_NODE_SIZE + RANK_SPACING}

    def test_siblings_share_a_row(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a", "b"], [
            (START_NODE_ID, "a"), (START_NODE_ID, "b"),
        ])

        positions = layout_positions(graph)

        assert positions["a"] == {"x": -275.0, "y": 180.0}
        assert positions["b"] == {"x": 25.0, "y": 180.0}

    def test_size_hints_are_honoured(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a", "b"], [
            (START_NODE_ID, "a"), ("a", "b"),
        ])
        graph.get_node("a").height = 200

        positions = layout_positions(graph)

        assert positions["b"]["y"] == START_NODE_SIZE + RANK_SPACING + 200 + RANK_SPACING

    def test_apply_layout_overwrites_every_position(self, linear_graph):
        apply_layout(linear_graph)

        assert linear_graph.get_node(START_NODE_ID).position == {"x": -15.0, "y": 0.0}
        assert linear_graph.get_node("c").position["y"] == 180 + 2 * (NODE_HEIGHT + RANK_SPACING)

    def test_idempotent(self, diamond_graph):
        first = layout_positions(diamond_graph)
        second = layout_positions(diamond_graph)

        assert first == second

    def test_independent_of_list_order(self, diamond_graph):
        shuffled = WorkflowGraph(
            nodes=list(diamond_graph.nodes),
            edges=list(diamond_graph.edges),
        )
        rng = random.Random(7)
        rng.shuffle(shuffled.nodes)
        rng.shuffle(shuffled.edges)

        assert layout_positions(shuffled) == layout_positions(diamond_graph)

    def test_unreachable_nodes_still_positioned(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a", "x"], [(START_NODE_ID, "a")])

        positions = layout_positions(graph)

        assert set(positions) == {START_NODE_ID, "a", "x"}
        assert positions["x"]["y"] == 0.0


class TestPartialLayout:

    def test_fixed_nodes_stay_put(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a", "b"], [
            (START_NODE_ID, "a"), ("a", "b"),
        ])
        editor.move_node(graph, START_NODE_ID, 0, 0)
        editor.move_node(graph, "a", 100, 200)

        layout_missing(graph)

        assert graph.get_node(START_NODE_ID).position == {"x": 0, "y": 0}
        assert graph.get_node("a").position == {"x": 100, "y": 200}
        assert graph.get_node("b").position == {"x": -5.0, "y": 420.0}

    def test_missing_nodes_avoid_overlap(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a", "b"], [
            (START_NODE_ID, "a"), (START_NODE_ID, "b"),
        ])
        editor.move_node(graph, START_NODE_ID, -15, 0)
        editor.move_node(graph, "a", 25, 180)

        layout_missing(graph, ["b"])

        assert graph.get_node("b").position == {"x": 475.0, "y": 180.0}

    def test_missing_positions_leaves_graph_untouched(self, editor, make_cli_task):
        graph = build_graph(editor, make_cli_task, ["a", "b"], [
            (START_NODE_ID, "a"), ("a", "b"),
        ])
        editor.move_node(graph, START_NODE_ID, 0, 0)
        editor.move_node(graph, "a", 100, 200)

        positions = missing_positions(graph)

        assert positions == {"b": {"x": -5.0, "y": 420.0}}
        assert graph.get_node("b").position is None

    def test_without_fixed_nodes_runs_full_layout(self, diamond_graph):
        layout_missing(diamond_graph)

        expected = layout_positions(diamond_graph)
        assert {n.id: n.position for n in diamond_graph.nodes} == expected

    def test_edge_ids_are_canonical(self):
        assert edge_id_for("a", "b") == "edge-a-b"

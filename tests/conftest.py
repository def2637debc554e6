"""
Shared fixtures for flowcanvas tests.
"""
import pytest

from flowcanvas.core.constants import START_NODE_ID
from flowcanvas.schemas.models import Task
from flowcanvas.visualization.graph_editor import GraphEditor
from flowcanvas.workflow.graph_builder import create_graph


@pytest.fixture
def make_cli_task():
    """Factory for cli_command tasks."""
    def create(task_id, name=None, command="echo", args=None):
        function_input = {"command": command}
        if args is not None:
            function_input["args"] = args
        return Task(
            id=task_id,
            name=name if name is not None else task_id.upper(),
            function={"name": "cli_command", "input": function_input},
        )
    return create


@pytest.fixture
def make_cursor_task():
    """Factory for cursor_agent tasks."""
    def create(task_id, name=None, prompt="Refactor the module"):
        return Task(
            id=task_id,
            name=name if name is not None else task_id.upper(),
            function={"name": "cursor_agent", "input": {"prompt": prompt}},
        )
    return create


@pytest.fixture
def make_user_input_task():
    """Factory for user_input tasks."""
    def create(task_id, name=None, prompt="Version?", input_type="string"):
        return Task(
            id=task_id,
            name=name if name is not None else task_id.upper(),
            function={
                "name": "user_input",
                "input": {"prompt": prompt, "input_type": input_type, "required": True},
            },
        )
    return create


@pytest.fixture
def editor():
    return GraphEditor()


@pytest.fixture
def linear_graph(editor, make_cli_task):
    """start -> a -> b -> c, every node positioned."""
    graph = create_graph("wf_linear", "Linear Workflow")
    editor.move_node(graph, START_NODE_ID, 0, 0)
    for index, task_id in enumerate(["a", "b", "c"], start=1):
        editor.add_node(graph, make_cli_task(task_id), {"x": 10 * index, "y": 100 * index})
    editor.add_edge(graph, START_NODE_ID, "a")
    editor.add_edge(graph, "a", "b")
    editor.add_edge(graph, "b", "c")
    return graph


@pytest.fixture
def diamond_graph(editor, make_cli_task):
    """start -> a1, start -> a2, a1 -> b, a2 -> b, b -> c."""
    graph = create_graph("wf_diamond", "Diamond Workflow")
    for task_id in ["a1", "a2", "b", "c"]:
        editor.add_node(graph, make_cli_task(task_id))
    editor.add_edge(graph, START_NODE_ID, "a1")
    editor.add_edge(graph, START_NODE_ID, "a2")
    editor.add_edge(graph, "a1", "b")
    editor.add_edge(graph, "a2", "b")
    editor.add_edge(graph, "b", "c")
    return graph

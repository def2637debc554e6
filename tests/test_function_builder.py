"""
Tests for building task functions from editor fields.
"""
import pytest

from flowcanvas.schemas.models import (
    CliCommandFunction,
    CursorAgentFunction,
    CustomFunction,
    UserInputFunction,
)
from flowcanvas.validator.errors import FunctionBuildError
from flowcanvas.visualization.function_builder import build_task_function, parse_default_value


class TestParseDefaultValue:

    def test_empty_is_none(self):
        assert parse_default_value("", "string") is None

    def test_numbers(self):
        assert parse_default_value("3", "number") == 3
        assert parse_default_value("2.5", "number") == 2.5
        assert parse_default_value("abc", "number") == "abc"

    def test_non_finite_numbers_stay_text(self):
        assert parse_default_value("nan", "number") == "nan"
        assert parse_default_value("inf", "number") == "inf"
        assert parse_default_value("-Infinity", "number") == "-Infinity"

    def test_booleans(self):
        assert parse_default_value("TRUE", "boolean") is True
        assert parse_default_value("no", "boolean") is False

    def test_text_is_kept(self):
        assert parse_default_value("hello", "text") == "hello"


class TestBuildTaskFunction:

    def test_cli_command_splits_args(self):
        function = build_task_function("cli_command", command="git", args="status, --short, ,")

        assert isinstance(function, CliCommandFunction)
        assert function.input.command == "git"
        assert function.input.args == ["status", "--short"]

    def test_cli_command_without_args(self):
        function = build_task_function("cli_command", command="ls")
        assert function.model_dump(exclude_none=True) == {"name": "cli_command", "input": {"command": "ls"}}

    def test_cursor_agent_config(self):
        function = build_task_function("cursor_agent", prompt="Fix tests", config_json='{"model": "fast"}')

        assert isinstance(function, CursorAgentFunction)
        assert function.input.config == {"model": "fast"}

    def test_cursor_agent_empty_config_is_dropped(self):
        function = build_task_function("cursor_agent", prompt="Fix tests", config_json="{}")
        assert function.input.config is None

    def test_user_input_defaults(self):
        function = build_task_function("user_input", prompt="How many?", input_type="number",
                                       required=True, default_value="4")

        assert isinstance(function, UserInputFunction)
        dumped = function.model_dump(by_alias=True, exclude_none=True)
        assert dumped["input"] == {"prompt": "How many?", "input_type": "number", "default": 4}

    def test_user_input_optional_flag_kept(self):
        function = build_task_function("user_input", prompt="Name?", required=False)

        assert function.input.input_type == "string"
        assert function.input.required is False

    def test_custom_payload(self):
        function = build_task_function("custom", custom_input_json='{"anything": [1, 2]}')

        assert isinstance(function, CustomFunction)
        assert function.input == {"anything": [1, 2]}

    def test_invalid_json(self):
        with pytest.raises(FunctionBuildError):
            build_task_function("custom", custom_input_json="{not json")

    def test_non_object_json(self):
        with pytest.raises(FunctionBuildError):
            build_task_function("cursor_agent", prompt="p", config_json="[1]")

    def test_unknown_type(self):
        with pytest.raises(FunctionBuildError):
            build_task_function("http_request")

"""
Builds task functions from the flat field set submitted by the task editor.
"""
import json
import math
from typing import Any, List, Optional, Union

from flowcanvas.core.constants import FunctionName, InputType
from flowcanvas.schemas.models import (
    CliCommandFunction,
    CliCommandInput,
    CursorAgentFunction,
    CursorAgentInput,
    CustomFunction,
    UserInputFunction,
    UserInputInput,
)
from flowcanvas.validator.errors import FunctionBuildError


def parse_default_value(value: str, input_type: str) -> Any:
    """Parse a user_input default typed as text in the editor."""
    if value == "":
        return None

    if input_type == InputType.NUMBER.value:
        try:
            return int(value)
        except ValueError:
            pass
        try:
            number = float(value)
        except ValueError:
            return value
        # nan and inf have no JSON form; keep the text.
        return number if math.isfinite(number) else value

    if input_type == InputType.BOOLEAN.value:
        return value.lower() == "true"

    return value


def _split_args(args: Union[str, List[str], None]) -> Optional[List[str]]:
    if args is None:
        return None
    if isinstance(args, str):
        args = args.split(",")
    parsed = [arg.strip() for arg in args if arg and arg.strip()]
    return parsed or None


def _load_json_object(raw: Optional[str], field: str) -> dict:
    if raw is None or raw.strip() == "":
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise FunctionBuildError(f"{field} is not valid JSON: {e.msg}") from e
    if not isinstance(value, dict):
        raise FunctionBuildError(f"{field} must be a JSON object")
    return value


def build_task_function(
    function_type: str,
    command: Optional[str] = None,
    args: Union[str, List[str], None] = None,
    prompt: Optional[str] = None,
    config_json: Optional[str] = None,
    input_type: Optional[str] = None,
    required: Optional[bool] = None,
    default_value: Optional[str] = None,
    custom_input_json: Optional[str] = None,
):
    """
    Build a task function from editor fields.

    Args:
        function_type: One of cli_command, cursor_agent, user_input, custom
        command: Shell command (cli_command)
        args: Comma-separated string or list of arguments (cli_command)
        prompt: Prompt text (cursor_agent, user_input)
        config_json: JSON object text for agent config (cursor_agent)
        input_type: Requested value type (user_input), defaults to "string"
        required: Kept only when not True (user_input)
        default_value: Default typed as text (user_input)
        custom_input_json: JSON object text (custom)

    Returns:
        The matching function model

    Raises:
        FunctionBuildError: Unknown type or invalid JSON
    """
    if function_type == FunctionName.CLI_COMMAND.value:
        return CliCommandFunction(
            input=CliCommandInput(command=command or "", args=_split_args(args))
        )

    if function_type == FunctionName.CURSOR_AGENT.value:
        config = _load_json_object(config_json, "config")
        return CursorAgentFunction(
            input=CursorAgentInput(prompt=prompt or "", config=config or None)
        )

    if function_type == FunctionName.USER_INPUT.value:
        resolved_type = input_type or InputType.STRING.value
        default = parse_default_value(default_value, resolved_type) if default_value else None
        return UserInputFunction(
            input=UserInputInput(
                prompt=prompt or "",
                input_type=resolved_type,
                required=required if required is not True else None,
                default=default,
            )
        )

    if function_type == FunctionName.CUSTOM.value:
        return CustomFunction(input=_load_json_object(custom_input_json, "input"))

    raise FunctionBuildError(f"Unknown function type '{function_type}'")

"""
Tool registry: the contract layer between the planner and the browser tools.

Every call goes through ``ToolRegistry.call(name, arguments)``:
arguments are validated against the tool's pydantic model before the tool
runs, and whatever happens the planner gets a ToolResult back.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from difflib import get_close_matches
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, Union

from jsonschema.validators import validator_for
from pydantic import BaseModel, ValidationError

from webpilot.environment.browser_tools import BrowserTools, error_text
from webpilot.environment.schemas import (
    FillFormFieldsArgs,
    FindAndClickArgs,
    NoArgs,
    OpenUrlArgs,
    ScrollPageArgs,
    TakeScreenshotArgs,
)
from webpilot.environment.tool_response import FailureKind, ToolResult
from webpilot.environment.utils import generate_openai_tool_schema
from webpilot.exceptions import ToolValidationError, UnknownToolError

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Awaitable[ToolResult]]


def find_similar_tool_names(tool_name: str, available_tools: List[str], cutoff: float = 0.6) -> List[str]:
    """Find similar tool names using fuzzy matching."""
    clean_name = tool_name.replace("functions.", "").replace("tools.", "")
    return get_close_matches(clean_name, available_tools, n=3, cutoff=cutoff)


def _format_validation_errors(error: ValidationError) -> List[str]:
    messages = []
    for item in error.errors():
        path = " -> ".join(str(part) for part in item.get("loc", ()))
        messages.append(f"{path}: {item.get('msg')}" if path else item.get("msg", ""))
    return messages


@dataclass
class ToolSpec:
    """A registered tool: its handler, argument model and planner-facing schema."""
    name: str
    handler: ToolHandler
    args_model: Type[BaseModel]
    schema: Dict[str, Any]


@dataclass
class ToolCallRecord:
    """One entry in the registry's call history."""
    tool_name: str
    arguments: Any
    result: ToolResult
    duration_s: float
    timestamp: float = field(default_factory=time.time)


class ToolRegistry:
    """Named, schema-validated tools callable by an external planner."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolSpec] = {}
        self.history: List[ToolCallRecord] = []

    def register(
        self,
        name: str,
        handler: ToolHandler,
        args_model: Type[BaseModel] = NoArgs,
    ) -> ToolSpec:
        """
        Register a tool.

        Args:
            name: Tool name exposed to the planner.
            handler: Async callable taking the model's fields as keyword arguments.
            args_model: Pydantic model for the tool's arguments.

        Raises:
            ValueError: If a tool with this name is already registered.
        """
        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")

        schema = generate_openai_tool_schema(handler, name, args_model)
        parameters = schema["function"]["parameters"]
        validator_for(parameters).check_schema(parameters)

        spec = ToolSpec(name=name, handler=handler, args_model=args_model, schema=schema)
        self._tools[name] = spec
        logger.debug(f"Registered tool '{name}'")
        return spec

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def get(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None:
            raise UnknownToolError(name, available_tools=self.names)
        return spec

    def schemas(self) -> List[Dict[str, Any]]:
        """OpenAI-style function schemas for every registered tool, in registration order."""
        return [spec.schema for spec in self._tools.values()]

    def validate(self, name: str, arguments: Union[str, Dict[str, Any], None]) -> BaseModel:
        """
        Validate raw planner arguments for a tool.

        Args:
            name: Tool name.
            arguments: A dict, a JSON object string, or None/empty for no arguments.

        Returns:
            The validated argument model.

        Raises:
            UnknownToolError: If the tool is not registered.
            ToolValidationError: If the arguments do not match the tool's schema.
        """
        spec = self.get(name)

        if arguments is None or (isinstance(arguments, str) and not arguments.strip()):
            arguments = {}
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments)
            except json.JSONDecodeError as e:
                raise ToolValidationError(
                    f"Arguments for '{name}' are not valid JSON: {e}",
                    tool_name=name,
                    provided_args=arguments,
                ) from e
        if not isinstance(arguments, dict):
            raise ToolValidationError(
                f"Arguments for '{name}' must be a JSON object, got {type(arguments).__name__}",
                tool_name=name,
                provided_args=arguments,
            )

        try:
            return spec.args_model.model_validate(arguments)
        except ValidationError as e:
            errors = _format_validation_errors(e)
            raise ToolValidationError(
                f"Invalid arguments for '{name}': {'; '.join(errors)}",
                tool_name=name,
                errors=errors,
                provided_args=arguments,
            ) from e

    async def call(self, name: str, arguments: Union[str, Dict[str, Any], None] = None) -> ToolResult:
        """
        Validate and execute a tool call. Never raises.

        Args:
            name: Tool name requested by the planner.
            arguments: Raw arguments as sent by the planner.

        Returns:
            ToolResult: The tool's result, or a failure for unknown tools,
            invalid arguments and unexpected handler errors.
        """
        start_time = time.time()
        result = await self._dispatch(name, arguments)
        duration = time.time() - start_time

        self.history.append(ToolCallRecord(
            tool_name=name,
            arguments=arguments,
            result=result,
            duration_s=duration,
        ))
        logger.debug(
            f"Tool '{name}' finished in {duration:.2f}s: {result.get_metadata_str()}",
            extra={"tool_name": name},
        )
        return result

    async def _dispatch(self, name: str, arguments: Union[str, Dict[str, Any], None]) -> ToolResult:
        try:
            validated = self.validate(name, arguments)
        except UnknownToolError as e:
            similar = find_similar_tool_names(name, self.names)
            hint = f" Did you mean: {', '.join(similar)}?" if similar else f" Available tools: {', '.join(self.names)}."
            logger.warning(f"Unknown tool requested: {name}", extra={"tool_name": name})
            return ToolResult.failure(FailureKind.UNKNOWN_TOOL, f"{e.user_message}{hint}")
        except ToolValidationError as e:
            logger.warning(e.developer_message, extra={"tool_name": name})
            return ToolResult.failure(FailureKind.INVALID_INPUT, e.developer_message)

        spec = self._tools[name]
        kwargs = {field_name: getattr(validated, field_name) for field_name in type(validated).model_fields}
        try:
            return await spec.handler(**kwargs)
        except Exception as e:
            # Handlers convert their own failures; anything reaching here is a bug in a handler
            logger.error(f"Unhandled error in tool '{name}': {e}", exc_info=True, extra={"tool_name": name})
            return ToolResult.failure(FailureKind.ENGINE, f"{name} failed: {error_text(e)}")


def build_browser_registry(tools: BrowserTools) -> ToolRegistry:
    """Register the seven browser tools under their planner-facing names."""
    registry = ToolRegistry()
    registry.register("open_browser", tools.open_browser, NoArgs)
    registry.register("open_url", tools.open_url, OpenUrlArgs)
    registry.register("take_screenshot", tools.take_screenshot, TakeScreenshotArgs)
    registry.register("find_and_click", tools.find_and_click, FindAndClickArgs)
    registry.register("fill_form_fields", tools.fill_form_fields, FillFormFieldsArgs)
    registry.register("scroll_page", tools.scroll_page, ScrollPageArgs)
    registry.register("close_browser", tools.close_browser, NoArgs)
    return registry

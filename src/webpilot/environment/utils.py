import copy
import inspect
import logging
import re
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_SECTION_RE = re.compile(r"^(Args|Arguments|Parameters|Returns|Raises|Yields):$", re.IGNORECASE)
_PARAM_RE = re.compile(r"^\s*(\w+)\s*(?:\(([^)]+)\))?:\s*(.*)")


def _parse_docstring(docstring: Optional[str]) -> Dict[str, Any]:
    """
    Parses a docstring to extract the main description and parameter descriptions.
    Supports Google-style sections, e.g.:

    Args:
        param_name (param_type): Description of the parameter.
                                 Can span multiple lines.
    """
    if not docstring:
        return {"description": "", "params": {}}

    lines = docstring.replace('\r\n', '\n').strip().splitlines()

    description_lines = []
    param_descriptions: Dict[str, str] = {}
    current_param = None
    current_lines = []
    section = None

    for line in lines:
        stripped = line.strip()
        section_match = _SECTION_RE.match(stripped)
        if section_match:
            section = section_match.group(1).lower()
            continue

        if section is None:
            description_lines.append(stripped)
            continue

        if section not in ("args", "arguments", "parameters"):
            continue
        if not stripped:
            continue

        match = _PARAM_RE.match(line)
        is_continuation = line.startswith("    " * 2) and current_param is not None
        if match and not is_continuation:
            if current_param:
                param_descriptions[current_param] = " ".join(current_lines).strip()
            current_param = match.group(1)
            current_lines = [match.group(3).strip()]
        elif current_param:
            current_lines.append(stripped)

    if current_param:
        param_descriptions[current_param] = " ".join(current_lines).strip()

    # First paragraph only; later paragraphs are implementation notes
    paragraph = []
    for line in description_lines:
        if not line and paragraph:
            break
        if line:
            paragraph.append(line)
    description = " ".join(paragraph).strip()

    return {"description": description, "params": param_descriptions}


def _inline_refs(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Resolve local ``#/$defs/...`` references and drop pydantic's ``title`` keys.

    Function-calling APIs do not all accept ``$ref``; the tool schemas are
    small, so every reference is expanded in place.
    """
    schema = copy.deepcopy(schema)
    definitions = schema.pop("$defs", {})

    def _resolve(node: Any) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str) and ref.startswith("#/$defs/"):
                target = definitions[ref.split("/")[-1]]
                merged = {**target, **{k: v for k, v in node.items() if k != "$ref"}}
                return _resolve(merged)
            any_of = node.get("anyOf")
            if isinstance(any_of, list):
                # Optional[X] -> X, as the planner simply omits optional values
                non_null = [option for option in any_of if option.get("type") != "null"]
                if len(non_null) == 1:
                    rest = {k: v for k, v in node.items() if k != "anyOf"}
                    if rest.get("default", ...) is None:
                        rest.pop("default")
                    return _resolve({**non_null[0], **rest})
            return {
                key: _resolve(value)
                for key, value in node.items()
                if key != "title"
            }
        if isinstance(node, list):
            return [_resolve(item) for item in node]
        return node

    return _resolve(schema)


def generate_openai_tool_schema(
    func: Callable, func_name: str, args_model: Type[BaseModel]
) -> Dict[str, Any]:
    """
    Generates an OpenAI-compatible tool schema for a tool handler.

    The description comes from the handler's docstring; the parameters come
    from the pydantic argument model, using the camelCase aliases the
    planner sends.

    Args:
        func: The tool handler.
        func_name: The name to use for the tool in the schema.
        args_model: Pydantic model describing the tool's arguments.

    Returns:
        A dictionary representing the tool schema.
    """
    docstring_info = _parse_docstring(inspect.getdoc(func))

    parameters = _inline_refs(args_model.model_json_schema(by_alias=True))
    parameters.setdefault("type", "object")
    parameters.setdefault("properties", {})
    parameters.pop("description", None)
    if not parameters.get("required"):
        parameters.pop("required", None)

    # Fill gaps in field descriptions from the docstring's Args section
    params_by_name = {
        field.alias or name: docstring_info["params"].get(name)
        for name, field in args_model.model_fields.items()
    }
    for prop_name, prop_schema in parameters["properties"].items():
        if "description" not in prop_schema and params_by_name.get(prop_name):
            prop_schema["description"] = params_by_name[prop_name]

    if not docstring_info["description"]:
        logger.warning(f"No docstring description for tool '{func_name}'")

    return {
        "type": "function",
        "function": {
            "name": func_name,
            "description": docstring_info["description"] or f"Executes the {func_name} tool.",
            "parameters": parameters,
        },
    }

from typing import Any, Dict, List, Optional

from .types import FunctionDeclaration

# Gemini schema type tags -> JSON Schema type names
_TYPE_NAMES = {
    "STRING": "string",
    "NUMBER": "number",
    "INTEGER": "integer",
    "BOOLEAN": "boolean",
    "ARRAY": "array",
    "OBJECT": "object",
}


def _type_tag(value: Any) -> str:
    # google.genai.types.Type members are str enums; plain strings work too
    return str(getattr(value, "value", value)).upper()


def translate_schema(schema: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Convert a Gemini-style parameter schema to a plain JSON Schema.

    Copies the schema, maps the type tag to its JSON Schema name and recurses
    into `properties` and `items`. Anything else is copied as-is.

    Args:
        schema: Schema dict using Gemini type tags, or None.

    Returns:
        The translated copy, or None when `schema` is None.
    """
    if schema is None:
        return None

    translated = dict(schema)
    if translated.get("type"):
        name = _TYPE_NAMES.get(_type_tag(translated["type"]))
        if name:
            translated["type"] = name

    properties = translated.get("properties")
    if properties:
        translated["properties"] = {
            key: translate_schema(value) for key, value in properties.items()
        }
    if translated.get("items"):
        translated["items"] = translate_schema(translated["items"])

    return translated


def to_openai_tools(declarations: List[FunctionDeclaration]) -> List[Dict[str, Any]]:
    """Build the OpenAI `tools` list from provider-neutral declarations."""
    tools = []
    for decl in declarations:
        function: Dict[str, Any] = {
            "name": decl["name"],
            "description": decl.get("description", ""),
        }
        parameters = translate_schema(decl.get("parameters"))
        if parameters is not None:
            function["parameters"] = parameters
        tools.append({"type": "function", "function": function})
    return tools

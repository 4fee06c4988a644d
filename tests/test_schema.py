from google.genai import types

from agentrunner.schema import translate_schema, to_openai_tools


class TestTranslateSchema:

    def test_none_returns_none(self):
        assert translate_schema(None) is None

    def test_nested_properties_and_items(self):
        schema = {
            "type": "OBJECT",
            "properties": {
                "path": {"type": "STRING", "description": "Note path"},
                "limit": {"type": "INTEGER"},
                "score": {"type": "NUMBER"},
                "dry_run": {"type": "BOOLEAN"},
                "tags": {"type": "ARRAY", "items": {"type": "STRING"}},
                "meta": {
                    "type": "OBJECT",
                    "properties": {"author": {"type": "STRING"}},
                },
            },
            "required": ["path"],
        }

        result = translate_schema(schema)

        assert result["type"] == "object"
        assert result["required"] == ["path"]
        props = result["properties"]
        assert props["path"] == {"type": "string", "description": "Note path"}
        assert props["limit"]["type"] == "integer"
        assert props["score"]["type"] == "number"
        assert props["dry_run"]["type"] == "boolean"
        assert props["tags"] == {"type": "array", "items": {"type": "string"}}
        assert props["meta"]["properties"]["author"]["type"] == "string"

    def test_sdk_type_enum(self):
        schema = {"type": types.Type.OBJECT, "properties": {"q": {"type": types.Type.STRING}}}
        result = translate_schema(schema)
        assert result["type"] == "object"
        assert result["properties"]["q"]["type"] == "string"

    def test_input_not_modified(self):
        schema = {"type": "OBJECT", "properties": {"q": {"type": "STRING"}}}
        translate_schema(schema)
        assert schema == {"type": "OBJECT", "properties": {"q": {"type": "STRING"}}}

    def test_unrecognized_leaf_is_shallow_copy(self):
        leaf = {"type": "NULLISH", "description": "odd"}
        result = translate_schema(leaf)
        assert result == leaf
        assert result is not leaf

    def test_already_translated_is_unchanged(self):
        schema = {"type": "object", "properties": {"q": {"type": "string"}}}
        assert translate_schema(schema) == schema


class TestToOpenAITools:

    def test_wraps_declarations(self):
        tools = to_openai_tools([
            {"name": "read_note", "description": "Read", "parameters": {"type": "OBJECT"}},
            {"name": "now", "description": "Current time"},
        ])

        assert tools[0] == {
            "type": "function",
            "function": {"name": "read_note", "description": "Read", "parameters": {"type": "object"}},
        }
        assert "parameters" not in tools[1]["function"]

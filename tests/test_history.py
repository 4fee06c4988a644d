import json
from datetime import date

from agentrunner.history import build_gemini_history, build_openai_history


def conversation(n):
    msgs = []
    for i in range(n):
        msgs.append({"sender": "user", "content": f"q{i}"})
        msgs.append({"sender": "bot", "content": f"a{i}"})
    return msgs


class TestOpenAIHistory:

    def test_single_user_message(self):
        history = build_openai_history([{"sender": "user", "content": "hi"}], 5)
        assert history == [{"role": "user", "content": "hi"}]

    def test_zero_turns_is_empty(self):
        assert build_openai_history(conversation(10), 0) == []

    def test_truncates_to_last_turns(self):
        history = build_openai_history(conversation(10), 2)
        assert len(history) == 4
        assert [m["content"] for m in history] == ["q8", "a8", "q9", "a9"]

    def test_errors_are_skipped(self):
        msgs = [
            {"sender": "user", "content": "hi"},
            {"sender": "error", "content": "API quota exceeded."},
            {"sender": "user", "content": "again"},
            {"sender": "bot", "content": "hello"},
        ]
        history = build_openai_history(msgs, 5)
        assert len(history) <= 10
        assert all("quota" not in (m["content"] or "") for m in history)
        assert [m["role"] for m in history] == ["user", "user", "assistant"]

    def test_tool_calls_get_synthetic_ids(self):
        msgs = [
            {"sender": "user", "content": "find notes"},
            {
                "sender": "bot",
                "content": "Found them.",
                "tool_calls": [
                    {"name": "search", "args": {"q": "x"}, "response": {"hits": 2}},
                    {"name": "read_note", "args": {"path": "a.md"}, "response": {"content": "A"}},
                ],
            },
        ]

        history = build_openai_history(msgs, 5)

        assert history[1]["role"] == "assistant"
        assert history[1]["content"] == "Found them."
        calls = history[1]["tool_calls"]
        assert [c["id"] for c in calls] == ["call_0", "call_1"]
        assert calls[0]["function"] == {"name": "search", "arguments": json.dumps({"q": "x"})}
        assert history[2] == {"role": "tool", "tool_call_id": "call_0", "content": json.dumps({"hits": 2})}
        assert history[3] == {"role": "tool", "tool_call_id": "call_1", "content": json.dumps({"content": "A"})}

    def test_empty_text_with_tool_calls_is_none(self):
        msgs = [{"sender": "bot", "content": "", "tool_calls": [{"name": "f", "args": {}, "response": {}}]}]
        assert build_openai_history(msgs, 1)[0]["content"] is None

    def test_recorded_response_with_dates(self):
        msgs = [{"sender": "bot", "content": "", "tool_calls": [
            {"name": "stat", "args": {"day": date(2024, 5, 1)}, "response": {"modified": date(2024, 5, 2)}},
        ]}]

        history = build_openai_history(msgs, 1)

        assert "2024-05-01" in history[0]["tool_calls"][0]["function"]["arguments"]
        assert history[1]["content"] == json.dumps({"modified": "2024-05-02"})

    def test_conversation_not_modified(self):
        msgs = conversation(3)
        snapshot = [dict(m) for m in msgs]
        build_openai_history(msgs, 1)
        assert msgs == snapshot


class TestGeminiHistory:

    def test_roles(self):
        history = build_gemini_history(
            [{"sender": "user", "content": "hi"}, {"sender": "bot", "content": "hello"}], 5
        )
        assert [c.role for c in history] == ["user", "model"]
        assert history[0].parts[0].text == "hi"
        assert history[1].parts[0].text == "hello"

    def test_zero_turns_and_errors(self):
        msgs = [{"sender": "error", "content": "boom"}, {"sender": "user", "content": "hi"}]
        assert build_gemini_history(msgs, 0) == []
        assert len(build_gemini_history(msgs, 5)) == 1

    def test_tool_calls(self):
        msgs = [{
            "sender": "bot",
            "content": "Done.",
            "tool_calls": [{"name": "read_note", "args": {"path": "a.md"}, "response": "text"}],
        }]

        history = build_gemini_history(msgs, 5)

        assert [c.role for c in history] == ["model", "user", "model"]
        assert history[0].parts[0].function_call.name == "read_note"
        assert history[0].parts[0].function_call.args == {"path": "a.md"}
        assert history[1].parts[0].function_response.response == {"result": "text"}
        assert history[2].parts[0].text == "Done."

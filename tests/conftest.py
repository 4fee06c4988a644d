import pytest

from agentrunner.functions import FunctionRegistry


@pytest.fixture
def mock_env(monkeypatch):
    """Mock environment variables for settings."""
    monkeypatch.setenv("AGENT_PROVIDER", "openrouter")
    monkeypatch.setenv("AGENT_MODEL", "openai/gpt-4o-mini")
    monkeypatch.setenv("GOOGLE_API_KEY", "AIza-test-google")
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-test")
    monkeypatch.setenv("AGENT_MAX_HISTORY_TURNS", "3")


class UpdateRecorder:
    """on_update callback that keeps everything it receives."""

    def __init__(self):
        self.calls = []

    def __call__(self, text, reasoning, tool_calls):
        self.calls.append((text, reasoning, list(tool_calls)))

    @property
    def text(self):
        return "".join(c[0] for c in self.calls)

    @property
    def reasoning(self):
        return "".join(c[1] for c in self.calls)

    @property
    def tool_calls(self):
        return [tc for c in self.calls for tc in c[2]]


@pytest.fixture
def recorder():
    return UpdateRecorder()


@pytest.fixture
def registry():
    """Registry with an `echo` function that records its calls."""
    reg = FunctionRegistry()
    reg.executed = []

    def echo(**kwargs):
        reg.executed.append(kwargs)
        return {"echo": kwargs}

    reg.register(
        "echo",
        "Echo the arguments back",
        {"type": "OBJECT", "properties": {"a": {"type": "INTEGER"}}},
        echo,
    )
    return reg

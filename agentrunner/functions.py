import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from .types import FunctionCall, FunctionDeclaration

logger = logging.getLogger(__name__)


class FunctionRegistry:
    """
    Functions the agent is allowed to call.

    Handlers receive the call arguments as keyword arguments and may be
    plain functions or coroutines.
    """

    def __init__(self):
        self._declarations: Dict[str, FunctionDeclaration] = {}
        self._handlers: Dict[str, Callable[..., Any]] = {}

    @property
    def declarations(self) -> List[FunctionDeclaration]:
        """Provider-neutral declarations, in registration order."""
        return list(self._declarations.values())

    @property
    def names(self) -> List[str]:
        return list(self._declarations)

    def register(
        self,
        name: str,
        description: str,
        parameters: Optional[Dict[str, Any]],
        handler: Callable[..., Any],
    ) -> None:
        """
        Register a function.

        Args:
            name (str): Name the model uses to call the function.
            description (str): What the function does.
            parameters (dict, optional): Gemini-style schema of the arguments
                (type tags "OBJECT", "STRING", ...).
            handler (Callable): Implementation, called with the arguments as kwargs.
        """
        declaration: FunctionDeclaration = {"name": name, "description": description}
        if parameters is not None:
            declaration["parameters"] = parameters
        self._declarations[name] = declaration
        self._handlers[name] = handler

    def tool(self, description: str, parameters: Optional[Dict[str, Any]] = None, name: Optional[str] = None):
        """Decorator form of `register`."""
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(name or func.__name__, description, parameters, func)
            return func
        return decorator

    async def execute(self, call: FunctionCall) -> Dict[str, Any]:
        """
        Run a function call and return its response object.

        Failures are reported inside the response so the model can see them;
        they never abort the agent loop.

        Args:
            call (FunctionCall): {"name": ..., "args": {...}}

        Returns:
            Dict[str, Any]: The handler result (wrapped as {"result": value}
                when it is not a dict) or {"error": "..."}.
        """
        name = call.get("name", "")
        args = call.get("args") or {}

        handler = self._handlers.get(name)
        if handler is None:
            logger.warning("Model called unknown function %r", name)
            return {"error": f"Unknown function: {name}"}

        try:
            result = handler(**args)
            if asyncio.iscoroutine(result):
                result = await result
        except Exception as e:
            logger.warning("Function %r failed: %s", name, e)
            return {"error": f"Error executing function '{name}': {e}"}

        if isinstance(result, dict):
            return result
        return {"result": result}

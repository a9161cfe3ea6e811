from __future__ import annotations

from typing import Any, ClassVar, Protocol

from pydantic import BaseModel


class ToolError(RuntimeError):
    pass


class UnknownToolError(ToolError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown tool: {name}")
        self.name = name


class Tool(Protocol):
    name: ClassVar[str]
    description: ClassVar[str]
    artifact: ClassVar[str]
    invalid_arguments_message: ClassVar[str]
    Args: ClassVar[type[BaseModel]]

    def run(self, args: Any) -> BaseModel: ...

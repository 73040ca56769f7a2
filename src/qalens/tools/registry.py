"""
Tool Registry

Name -> ToolSpec mapping, filled once at startup and then frozen. The
advertised descriptor of each tool (name, description, JSON input schema)
is derived from its pydantic argument model.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Type

from pydantic import BaseModel


# handler(context, validated_args) -> payload
ToolHandler = Callable[[Any, BaseModel], Dict[str, Any]]


def _schema_for(args_model: Type[BaseModel]) -> Dict[str, Any]:
    schema = args_model.model_json_schema(by_alias=True)
    properties = {
        name: {k: v for k, v in prop.items() if k != "title"}
        for name, prop in schema.get("properties", {}).items()
    }
    return {
        "type": "object",
        "properties": properties,
        "required": list(schema.get("required", [])),
    }


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: Dict[str, Any]

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(self.input_schema.get("required", ()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool: its contract and the handler that implements it."""
    name: str
    description: str
    args_model: Type[BaseModel]
    handler: ToolHandler
    descriptor: ToolDescriptor = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "descriptor",
            ToolDescriptor(self.name, self.description, _schema_for(self.args_model)),
        )

    def required_fields(self) -> list[tuple[str, str]]:
        """(wire name, attribute name) for every required argument."""
        return [
            (info.alias or attr, attr)
            for attr, info in self.args_model.model_fields.items()
            if info.is_required()
        ]


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: Dict[str, ToolSpec] = {}
        self._frozen = False

    def register(self, spec: ToolSpec) -> ToolSpec:
        if self._frozen:
            raise RuntimeError(f"Tool registry is frozen; cannot register {spec.name}")
        if spec.name in self._tools:
            raise ValueError(f"Duplicate tool name: {spec.name}")
        self._tools[spec.name] = spec
        return spec

    def tool(self, name: str, description: str, args_model: Type[BaseModel]):
        """Decorator form of register()."""
        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register(ToolSpec(name, description, args_model, handler))
            return handler
        return decorator

    def freeze(self) -> ToolRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> ToolSpec | None:
        return self._tools.get(name)

    def list(self) -> list[ToolDescriptor]:
        return [spec.descriptor for spec in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

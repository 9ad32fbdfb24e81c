"""
Pydantic grammar for conspect diagrams.

A diagram is a set of typed nodes plus directed connections between node ids.
Node bodies are kind-specific; the client historically sent them as JSON
strings, so a string body is decoded before validation.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, List, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class NodeKind(str, Enum):
    HEADER = "Header"
    DEFINITION = "Definition"
    PROCESS_STAGES = "ProcessStages"


class Connection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str

    @property
    def edge(self) -> tuple[str, str]:
        return (self.from_, self.to)


class Node(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    kind: NodeKind = Field(validation_alias=AliasChoices("kind", "node_type"))
    x: float = 0
    y: float = 0
    body: Any = None

    @field_validator("body", mode="before")
    @classmethod
    def _decode_string_body(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                # left as-is; the kind-specific payload check rejects it
                return value
        return value


class Conspect(BaseModel):
    nodes: List[Node]
    connections: List[Connection]


class HeaderBody(BaseModel):
    header: str


class DefinitionBody(BaseModel):
    header: str
    definition: str


class Stage(BaseModel):
    id: int
    name: str


class ProcessStagesBody(BaseModel):
    header: str
    stages: List[Stage]


NodePayload = Union[HeaderBody, DefinitionBody, ProcessStagesBody]


def empty_conspect() -> dict:
    return {"nodes": [], "connections": []}

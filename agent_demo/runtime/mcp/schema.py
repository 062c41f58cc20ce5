"""
Translation of MCP tool input schemas into the JSON schema subset we hand to
the model.

MCP servers describe inputs with loosely-typed JSON schema. We parse that into
a small closed set of node types and render it back out, so that everything
the model sees is something we understood. Anything we do not understand
becomes ``AnyType`` (an unconstrained field) and is logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

logger = logging.getLogger("agent_demo.mcp")


@dataclass(frozen=True)
class StringType:
    description: Optional[str] = None
    enum: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class NumberType:
    description: Optional[str] = None


@dataclass(frozen=True)
class IntegerType:
    description: Optional[str] = None


@dataclass(frozen=True)
class BooleanType:
    description: Optional[str] = None


@dataclass(frozen=True)
class ArrayType:
    items: "SchemaType"
    description: Optional[str] = None


@dataclass(frozen=True)
class ObjectType:
    # None means "free-form object" (no declared properties).
    fields: Optional[Dict[str, "SchemaType"]] = None
    required: Tuple[str, ...] = field(default_factory=tuple)
    description: Optional[str] = None


@dataclass(frozen=True)
class AnyType:
    description: Optional[str] = None


SchemaType = Union[StringType, NumberType, IntegerType, BooleanType, ArrayType, ObjectType, AnyType]


def _description(raw: Dict[str, Any]) -> Optional[str]:
    d = raw.get("description")
    return str(d) if isinstance(d, str) and d.strip() else None


def _type_name(raw: Dict[str, Any], where: str) -> Optional[str]:
    t = raw.get("type")
    if isinstance(t, list):
        # ["string", "null"] style nullables: use the first non-null member.
        members = [x for x in t if x != "null"]
        if len(members) == 1 and isinstance(members[0], str):
            return members[0]
        logger.warning("schema at %s has union type %r; treating as any", where, t)
        return None
    return t if isinstance(t, str) else None


def parse_schema(raw: Any, where: str = "$") -> SchemaType:
    """
    Total conversion from raw JSON schema to SchemaType. Never raises.
    """
    if not isinstance(raw, dict):
        logger.warning("schema at %s is not an object (%r); treating as any", where, type(raw).__name__)
        return AnyType()

    desc = _description(raw)
    t = _type_name(raw, where)

    if t is None:
        if "properties" in raw:
            t = "object"
        else:
            logger.debug("schema at %s has no type; treating as any", where)
            return AnyType(description=desc)

    if t == "string":
        enum = raw.get("enum")
        values = tuple(str(v) for v in enum) if isinstance(enum, list) and enum else None
        return StringType(description=desc, enum=values)
    if t == "number":
        return NumberType(description=desc)
    if t == "integer":
        return IntegerType(description=desc)
    if t == "boolean":
        return BooleanType(description=desc)
    if t == "array":
        return ArrayType(items=parse_schema(raw.get("items") or {}, f"{where}[]"), description=desc)
    if t == "object":
        props = raw.get("properties")
        if not isinstance(props, dict):
            return ObjectType(fields=None, description=desc)
        fields = {str(k): parse_schema(v, f"{where}.{k}") for k, v in props.items()}
        req = raw.get("required")
        required = tuple(str(r) for r in req if str(r) in fields) if isinstance(req, list) else ()
        return ObjectType(fields=fields, required=required, description=desc)

    logger.warning("schema at %s has unsupported type %r; treating as any", where, t)
    return AnyType(description=desc)


def to_json_schema(node: SchemaType) -> Dict[str, Any]:
    out: Dict[str, Any]
    if isinstance(node, StringType):
        out = {"type": "string"}
        if node.enum:
            out["enum"] = list(node.enum)
    elif isinstance(node, NumberType):
        out = {"type": "number"}
    elif isinstance(node, IntegerType):
        out = {"type": "integer"}
    elif isinstance(node, BooleanType):
        out = {"type": "boolean"}
    elif isinstance(node, ArrayType):
        out = {"type": "array", "items": to_json_schema(node.items)}
    elif isinstance(node, ObjectType):
        out = {"type": "object"}
        if node.fields is None:
            out["additionalProperties"] = True
        else:
            out["properties"] = {k: to_json_schema(v) for k, v in node.fields.items()}
            if node.required:
                out["required"] = list(node.required)
    else:
        out = {}
    if node.description:
        out["description"] = node.description
    return out


def tool_parameters(raw: Any, tool_name: str = "") -> Dict[str, Any]:
    """
    JSON schema for a tool's parameters. Tools always take an object; a
    missing or non-object input schema becomes an empty object.
    """
    if raw is None:
        return {"type": "object", "properties": {}}
    node = parse_schema(raw, tool_name or "$")
    if not isinstance(node, ObjectType):
        logger.warning("input schema of %s is not an object; using empty parameters", tool_name or "tool")
        return {"type": "object", "properties": {}}
    schema = to_json_schema(node)
    if node.fields is not None:
        schema.setdefault("properties", {})
    return schema

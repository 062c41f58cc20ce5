from __future__ import annotations

import ast
import math
import operator
from typing import Any, Callable, Dict

# Keeps 10 ** 10 ** 10 and friends from pinning the CPU.
_MAX_EXPONENT = 10_000
# Integer results stay below the int -> str digit limit (4300 digits).
_MAX_INT_BITS = 10_000


def _check_int(value: Any) -> Any:
    if isinstance(value, int) and value.bit_length() > _MAX_INT_BITS:
        raise ValueError("Result too large")
    return value


def _power(base: Any, exp: Any) -> Any:
    """
    base ** exp, refused before computing when the result would be huge.
    """
    if abs(exp) > _MAX_EXPONENT:
        raise ValueError("Exponent too large")
    if isinstance(base, int) and isinstance(exp, int) and exp > 0 and base.bit_length() * exp > _MAX_INT_BITS:
        raise ValueError("Result too large")
    result = base ** exp
    if isinstance(result, complex):
        raise ValueError("Complex result")
    return result


_BIN_OPS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: _power,
}

_UNARY_OPS: Dict[type, Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_FUNCS: Dict[str, Callable[..., Any]] = {
    "abs": abs,
    "round": round,
    "min": min,
    "max": max,
    "pow": _power,
    "sqrt": math.sqrt,
}

_CONSTS: Dict[str, float] = {"pi": math.pi, "e": math.e}


def _eval(node: ast.AST) -> Any:
    if isinstance(node, ast.Expression):
        return _eval(node.body)
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BIN_OPS:
        return _check_int(_BIN_OPS[type(node.op)](_eval(node.left), _eval(node.right)))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval(node.operand))
    if isinstance(node, ast.Name) and node.id in _CONSTS:
        return _CONSTS[node.id]
    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in _FUNCS
        and not node.keywords
    ):
        return _check_int(_FUNCS[node.func.id](*[_eval(a) for a in node.args]))
    raise ValueError(f"Unsupported expression element: {type(node).__name__}")


def evaluate(expression: str) -> Any:
    """
    Evaluate an arithmetic expression without eval().

    Only finite real numbers come back; anything else raises
    ValueError / ArithmeticError / SyntaxError.
    """
    tree = ast.parse(str(expression or "").strip(), mode="eval")
    result = _eval(tree)
    if isinstance(result, complex) or (isinstance(result, float) and not math.isfinite(result)):
        raise ValueError("Result is not a finite real number")
    if isinstance(result, float) and result.is_integer() and abs(result) < 2**53:
        return int(result)
    return result


async def calculate(expression: str) -> dict:
    try:
        return {"result": evaluate(expression)}
    except Exception:
        return {"error": "Invalid expression"}

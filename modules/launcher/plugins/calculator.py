import ast
import math
import operator
import re
import subprocess
from typing import List

from loguru import logger

from modules.launcher.plugin_base import PluginBase
from modules.launcher.result import Result

# Pins calculation results above every ordinary match
CALCULATION_WEIGHT = 100.0

# Largest exponent and result size accepted for powers
MAX_EXPONENT = 1000
MAX_RESULT_DIGITS = 1000


class CalculatorPlugin(PluginBase):
    """
    Plugin for calculating mathematical expressions.
    """

    def __init__(self):
        super().__init__()
        self.name = "calculator"
        self.display_name = "Calculator"
        self.description = "Evaluate mathematical expressions"

        # Safe functions and constants for evaluation
        self.safe_functions = {
            "abs": abs,
            "round": round,
            "min": min,
            "max": max,
            "pow": self._power,
            "sqrt": math.sqrt,
            "sin": math.sin,
            "cos": math.cos,
            "tan": math.tan,
            "asin": math.asin,
            "acos": math.acos,
            "atan": math.atan,
            "log": math.log,
            "log10": math.log10,
            "exp": math.exp,
        }
        self.constants = {"pi": math.pi, "e": math.e}

        self.binary_operators = {
            ast.Add: operator.add,
            ast.Sub: operator.sub,
            ast.Mult: operator.mul,
            ast.Div: operator.truediv,
            ast.FloorDiv: operator.floordiv,
            ast.Mod: operator.mod,
            ast.Pow: self._power,
        }
        self.unary_operators = {ast.UAdd: operator.pos, ast.USub: operator.neg}

        # Pre-compiled regex patterns
        self.expression_pattern = re.compile(r"[\d+\-*/^()]")

    def search(self, query: str) -> List[Result]:
        """Evaluate the query, an invalid expression yields no results."""
        expression = query.strip()
        if not expression or not self.expression_pattern.search(expression):
            return []

        try:
            value = self.evaluate(expression)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return []
            formatted = f"{value:.6g}"
        except (ArithmeticError, RecursionError, SyntaxError, TypeError, ValueError):
            return []

        return [
            Result(
                title=formatted,
                subtitle=f"= {expression}",
                icon="accessories-calculator",
                action=lambda r=formatted: self._copy_to_clipboard(r),
                weight=CALCULATION_WEIGHT,
                id="calculator",
                plugin_name=self.display_name,
            )
        ]

    def evaluate(self, expression: str):
        """Evaluate an arithmetic expression without running arbitrary code."""
        # Allow '^' as power operator
        tree = ast.parse(expression.replace("^", "**"), mode="eval")
        return self._eval_node(tree.body)

    def _eval_node(self, node):
        if isinstance(node, ast.Constant) and type(node.value) in (int, float):
            return node.value
        if isinstance(node, ast.BinOp) and type(node.op) in self.binary_operators:
            left = self._eval_node(node.left)
            right = self._eval_node(node.right)
            return self.binary_operators[type(node.op)](left, right)
        if isinstance(node, ast.UnaryOp) and type(node.op) in self.unary_operators:
            return self.unary_operators[type(node.op)](self._eval_node(node.operand))
        if isinstance(node, ast.Name) and node.id in self.constants:
            return self.constants[node.id]
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Name)
            and node.func.id in self.safe_functions
            and not node.keywords
        ):
            args = [self._eval_node(arg) for arg in node.args]
            return self.safe_functions[node.func.id](*args)
        raise ValueError(f"Unsupported expression: {ast.dump(node)}")

    def _power(self, base, exponent, modulo=None):
        if modulo is not None:
            return pow(base, exponent, modulo)
        if abs(exponent) > MAX_EXPONENT:
            raise ValueError("Exponent too large")
        # Integer powers are exact, so their size must be checked up front
        if exponent > 0 and abs(base) > 1:
            if exponent * math.log10(abs(base)) > MAX_RESULT_DIGITS:
                raise OverflowError("Result too large")
        return pow(base, exponent)

    def _copy_to_clipboard(self, text: str):
        """Copy text to the clipboard and the primary selection."""
        for command in (["wl-copy"], ["wl-copy", "--primary"]):
            try:
                subprocess.run(command, input=text.encode(), check=True)
            except (OSError, subprocess.CalledProcessError) as e:
                logger.warning(f"[Calculator] Failed to copy result: {e}")
                return

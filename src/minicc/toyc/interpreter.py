"""
Toy C IR Interpreter
====================

Simulated execution of IR text. The IR is decoded into functions
(minicc.toyc.ir) and the entry function's instructions run in order
against a runtime environment of string values, producing a trace.

Entry Point
-----------
``@main`` if the module defines it; otherwise the lines outside any
``define`` block; otherwise the first function.

Instruction Semantics
---------------------
| Instruction                                 | Effect / trace line                 |
|---------------------------------------------|-------------------------------------|
| ``call i32 @scanf("%d", i32 *x)``           | x = input; ``[scanf] x = 7``        |
| ``call i32 @printf("%d", i32 x)``           | ``[printf] %d = 7``                 |
| ``%1 = call i32 @add(i32 2, i32 3)``        | %1 = 5; ``[call] add(2, 3) = 5``    |
| ``%1 = call i32 @f(i32 2)``                 | runs @f; ``[call] f(2) = 4``        |
| ``ret i32 N`` / ``ret i32 A op B``          | ``[return] Execution result: N``    |

``add``, ``sub``, ``mul``, ``div`` and ``divide`` take exactly two
arguments; division truncates toward zero. A call to a function the module
defines runs its body in a fresh frame with the arguments bound to its
parameter names; a fault inside it is traced as ``[call] f(2) = undefined``
and the caller carries on. Execution stops at the first ``ret`` or at the
first fault. When the entry code ends without a ``ret`` right after an
arithmetic call, that call's value is the result. Faults are recorded on the result as an
ExecutionError (``result.error``) and as an ``Execution error: ...`` trace
line:

- division by zero (kind ``DivisionByZero``)
- a call to a name the module does not define (``unsupported function 'f'``)
- an operand naming an unbound value
- falling off the end (``no recognizable return.``)
- user functions nested more than ``MAX_CALL_DEPTH`` calls deep

Timing
------
The wall-clock duration of the execute step is measured with
``time.perf_counter``. The complexity figures reported alongside it are
fixed labels (``O(1)`` time, ``O(n)`` space), not derived from the input.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Union

from minicc.toyc.errors import (
    CallDepthError,
    DivisionByZeroError,
    ExecutionError,
    NoReturnError,
    UndefinedValueError,
    UnsupportedFunctionError,
)
from minicc.toyc.ir import (
    BinaryExpr,
    Call,
    Const,
    Instruction,
    IRFunction,
    IRModule,
    Operand,
    PointerArg,
    Ret,
    StringArg,
    Value,
    ValueArg,
    parse_module,
)

logger = logging.getLogger(__name__)


# Static complexity labels; placeholders, not measured
TIME_COMPLEXITY = "O(1)"
SPACE_COMPLEXITY = "O(n)"

UNDEFINED = "undefined"

# Nesting limit for calls between the module's own functions
MAX_CALL_DEPTH = 100

BUILTIN_OPERATIONS = {
    "add": "+",
    "sub": "-",
    "mul": "*",
    "div": "/",
    "divide": "/",
}


def truncating_divide(dividend: int, divisor: int) -> int:
    """Integer division rounding toward zero, as C does."""
    if divisor == 0:
        raise DivisionByZeroError(dividend)
    quotient = abs(dividend) // abs(divisor)
    return quotient if (dividend >= 0) == (divisor >= 0) else -quotient


def apply_operator(op: str, left: int, right: int) -> int:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        return truncating_divide(left, right)
    raise ExecutionError(f"unknown operator '{op}'")


@dataclass
class ExecutionResult:
    """
    Outcome of one simulated execution.

    Attributes:
        trace: Trace lines in execution order
        return_value: Value of the ``ret`` reached (or of a trailing
            arithmetic call), or None
        error: The fault that stopped execution, or None
        elapsed_ms: Wall-clock duration of the execute step
        time_complexity: Static label, see module docs
        space_complexity: Static label, see module docs
    """
    trace: list[str] = field(default_factory=list)
    return_value: Optional[int] = None
    error: Optional[ExecutionError] = None
    elapsed_ms: float = 0.0
    time_complexity: str = TIME_COMPLEXITY
    space_complexity: str = SPACE_COMPLEXITY

    @property
    def success(self) -> bool:
        return self.error is None and self.return_value is not None

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error else None

    def raise_for_error(self) -> None:
        """Re-raise the recorded fault, if any."""
        if self.error is not None:
            raise self.error

    def stats_block(self) -> list[str]:
        return [
            "--- Execution Stats ---",
            f"Execution time: {self.elapsed_ms:.3f} ms",
            f"Time complexity: {self.time_complexity} (static placeholder)",
            f"Space complexity: {self.space_complexity} (static placeholder)",
        ]

    def format(self, report_timing: bool = True) -> str:
        """Render the trace, followed by the stats block when requested."""
        lines = list(self.trace)
        if report_timing:
            lines.append("")
            lines.extend(self.stats_block())
        return "\n".join(lines) + "\n"


class Interpreter:
    """
    Executes IR text.

    The runtime environment maps variable names and temporaries to string
    values. Pass a session's ``environment`` to share it with the caller,
    or let the interpreter create its own.

    Usage:
        interpreter = Interpreter()
        result = interpreter.execute(ir_text, external_input="7")
        print(result.format())
    """

    def __init__(self, environment: Optional[dict[str, str]] = None):
        self.environment = environment if environment is not None else {}
        self._input: Optional[str] = None
        self._trace: list[str] = []
        self._module: Optional[IRModule] = None
        self._depth = 0

    def execute(
        self, ir_text: str, external_input: Union[str, int, None] = None
    ) -> ExecutionResult:
        """
        Execute the entry function of some IR text.

        The environment is cleared first, so values stored by an earlier
        run are never visible to the next one.

        Args:
            ir_text: IR text (with or without the optimizer marker)
            external_input: Value stored by simulated ``scanf``

        Returns:
            ExecutionResult; program faults are recorded, never raised
        """
        self.environment.clear()
        self._input = None if external_input is None else str(external_input).strip()
        self._trace = []
        self._depth = 0
        result = ExecutionResult(trace=self._trace)

        start = time.perf_counter()
        try:
            self._module = parse_module(ir_text)
            value = self._run(self._entry(self._module))
            self._trace.append(f"[return] Execution result: {value}")
            result.return_value = value
        except ExecutionError as e:
            result.error = e
            self._trace.append(f"Execution error: {e.trace_message}")
            logger.info(f"Execution stopped: {e.kind}")
        result.elapsed_ms = (time.perf_counter() - start) * 1000.0

        return result

    # =========================================================================
    # Control
    # =========================================================================

    @staticmethod
    def _entry(module: IRModule) -> list[Instruction]:
        main = module.function("main")
        if main is not None:
            return main.body
        if any(isinstance(i, (Call, Ret)) for i in module.top_level):
            return module.top_level
        if module.functions:
            return module.functions[0].body
        return []

    def _run(self, instructions: list[Instruction]) -> int:
        """Run until ``ret``; a trailing arithmetic call supplies the result."""
        last = None
        for instruction in instructions:
            if isinstance(instruction, Call):
                value = self._call(instruction)
                last = value if instruction.callee in BUILTIN_OPERATIONS else None
            elif isinstance(instruction, Ret):
                return self._evaluate(instruction.value)
        if last is not None:
            return last
        raise NoReturnError()

    # =========================================================================
    # Calls
    # =========================================================================

    def _call(self, call: Call) -> Optional[int]:
        if call.callee == "scanf":
            count = self._scanf(call)
            self._bind_result(call, count)
            return None
        if call.callee == "printf":
            count = self._printf(call)
            self._bind_result(call, count)
            return None
        if call.callee in BUILTIN_OPERATIONS:
            return self._arithmetic(call)

        function = self._module.function(call.callee) if self._module else None
        if function is None:
            raise UnsupportedFunctionError(call.callee)
        return self._invoke(function, call)

    def _invoke(self, function: IRFunction, call: Call) -> Optional[int]:
        """
        Run a function of the module in a fresh frame.

        Arguments bind to the parameter names in order. A fault inside the
        callee is traced with an undefined result and leaves the call's
        temporary unbound; the caller keeps running.
        """
        values = [arg for arg in call.args if isinstance(arg, ValueArg)]
        if len(values) != len(call.args) or len(values) != len(function.params):
            raise ExecutionError(
                f"function '{function.name}' expects {len(function.params)} "
                f"arguments, got {len(call.args)}"
            )
        arguments = [self._resolve(arg.operand) for arg in values]
        signature = f"{function.name}({', '.join(str(a) for a in arguments)})"

        if self._depth >= MAX_CALL_DEPTH:
            raise CallDepthError(MAX_CALL_DEPTH)

        caller = self.environment
        self.environment = {
            name: str(value) for name, value in zip(function.params, arguments)
        }
        self._depth += 1
        try:
            result = self._run(function.body)
        except CallDepthError:
            raise
        except ExecutionError as e:
            logger.info(f"Call to {signature} failed: {e.kind}")
            self._trace.append(f"[call] {signature} = {UNDEFINED} ({e.trace_message})")
            return None
        finally:
            self._depth -= 1
            self.environment = caller

        self._bind_result(call, result)
        self._trace.append(f"[call] {signature} = {result}")
        return result

    def _bind_result(self, call: Call, value: int) -> None:
        if call.result:
            self.environment[call.result] = str(value)

    def _scanf(self, call: Call) -> int:
        stored = 0
        for arg in call.args:
            if not isinstance(arg, PointerArg):
                continue
            if self._input is None:
                self._trace.append(f"[scanf] {arg.name} = {UNDEFINED}")
                continue
            self.environment[arg.name] = self._input
            self._trace.append(f"[scanf] {arg.name} = {self._input}")
            stored += 1
        return stored

    def _printf(self, call: Call) -> int:
        fmt = next((arg.text for arg in call.args if isinstance(arg, StringArg)), "")
        values = [
            self._lookup(arg.operand) for arg in call.args if isinstance(arg, ValueArg)
        ]
        if values:
            self._trace.append(f"[printf] {fmt} = {', '.join(values)}")
        else:
            self._trace.append(f"[printf] {fmt}")
        return len(values)

    def _arithmetic(self, call: Call) -> int:
        values = [arg for arg in call.args if isinstance(arg, ValueArg)]
        if len(values) != 2 or len(call.args) != 2:
            raise UnsupportedFunctionError(
                call.callee,
                f"function '{call.callee}' expects 2 arguments, got {len(call.args)}",
            )

        left, right = (self._resolve(arg.operand) for arg in values)
        result = apply_operator(BUILTIN_OPERATIONS[call.callee], left, right)
        self._bind_result(call, result)
        self._trace.append(f"[call] {call.callee}({left}, {right}) = {result}")
        return result

    # =========================================================================
    # Values
    # =========================================================================

    def _lookup(self, operand: Operand) -> str:
        """Current value as text, or "undefined" if unbound."""
        if isinstance(operand, Const):
            return str(operand.value)
        return self.environment.get(operand.name, UNDEFINED)

    def _resolve(self, operand: Operand) -> int:
        if isinstance(operand, Const):
            return operand.value
        value = self.environment.get(operand.name)
        if value is None:
            raise UndefinedValueError(operand.name)
        try:
            return int(value)
        except ValueError:
            raise ExecutionError(f"value of '{operand.name}' is not an integer: '{value}'")

    def _evaluate(self, value: Value) -> int:
        if isinstance(value, BinaryExpr):
            return apply_operator(
                value.op, self._resolve(value.left), self._resolve(value.right)
            )
        return self._resolve(value)


def execute(ir_text: str, external_input: Union[str, int, None] = None) -> ExecutionResult:
    """Execute IR text with a fresh environment."""
    return Interpreter().execute(ir_text, external_input)

"""
Toy C Intermediate Representation
=================================

The IR is exchanged between stages as text, but every stage that reads it
first decodes it into the typed instruction objects defined here, so that
constant folding and execution work on real syntax instead of raw string
matching.

Text Format
-----------
One function per ``define`` block, one instruction per line::

    define i32 @main() {
      call i32 @scanf("%d", i32 *x)
      call i32 @printf("%d", i32 x)
      %1 = call i32 @add(i32 x, i32 2)
      ret i32 %1
    }

Line grammar::

    define      := 'define i32 @' NAME '(' [param (',' param)*] ') {'
    param       := 'i32' NAME
    end         := '}'
    comment     := ';' anything
    call        := [TEMP '='] 'call i32 @' NAME '(' [arg (',' arg)*] ')'
    ret         := 'ret i32' operand [op operand]
    arg         := STRING | 'i32' operand | 'i32 *' NAME
    operand     := ['-'] INTEGER | NAME | TEMP        (TEMP is %1, %2, ...)
    op          := '+' | '-' | '*' | '/'

Lines that follow none of these shapes decode to ``Unknown`` and are kept
so that text round-trips; the interpreter ignores them.

Usage
-----
>>> from minicc.toyc.ir import parse_instruction
>>> parse_instruction("ret i32 40 + 2")
Ret(value=BinaryExpr(op='+', left=Const(value=40), right=Const(value=2)))
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from minicc.toyc.errors import IRFormatError

logger = logging.getLogger(__name__)


# =============================================================================
# Operands and Expressions
# =============================================================================

@dataclass(frozen=True)
class Const:
    """Integer constant operand."""
    value: int

    def render(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Ref:
    """Reference to a named value: a variable (``x``) or temporary (``%1``)."""
    name: str

    def render(self) -> str:
        return self.name

    @property
    def is_temporary(self) -> bool:
        return self.name.startswith("%")


Operand = Union[Const, Ref]


@dataclass(frozen=True)
class BinaryExpr:
    """``left op right`` where both sides are operands."""
    op: str
    left: Operand
    right: Operand

    def render(self) -> str:
        return f"{self.left.render()} {self.op} {self.right.render()}"


Value = Union[Const, Ref, BinaryExpr]


# =============================================================================
# Call Arguments
# =============================================================================

@dataclass(frozen=True)
class StringArg:
    """String literal argument, stored without its quotes."""
    text: str

    def render(self) -> str:
        return f'"{self.text}"'


@dataclass(frozen=True)
class ValueArg:
    """``i32 <operand>`` argument."""
    operand: Operand

    def render(self) -> str:
        return f"i32 {self.operand.render()}"


@dataclass(frozen=True)
class PointerArg:
    """``i32 *<name>`` argument: the address of a variable to store into."""
    name: str

    def render(self) -> str:
        return f"i32 *{self.name}"


Argument = Union[StringArg, ValueArg, PointerArg]


# =============================================================================
# Instructions
# =============================================================================

@dataclass(frozen=True)
class Define:
    """Start of a function: ``define i32 @name(i32 a, i32 b) {``."""
    name: str
    params: tuple[str, ...] = ()

    def render(self) -> str:
        params = ", ".join(f"i32 {param}" for param in self.params)
        return f"define i32 @{self.name}({params}) {{"


@dataclass(frozen=True)
class EndFunction:
    """Closing brace of a function."""

    def render(self) -> str:
        return "}"


@dataclass(frozen=True)
class Comment:
    """``; text`` line."""
    text: str

    def render(self) -> str:
        return f"; {self.text}" if self.text else ";"


@dataclass(frozen=True)
class Call:
    """Function call, optionally binding its result to a temporary."""
    callee: str
    args: tuple[Argument, ...] = ()
    result: Optional[str] = None

    def render(self) -> str:
        args = ", ".join(arg.render() for arg in self.args)
        call = f"call i32 @{self.callee}({args})"
        if self.result:
            return f"{self.result} = {call}"
        return call


@dataclass(frozen=True)
class Ret:
    """``ret i32 <value>``."""
    value: Value

    def render(self) -> str:
        return f"ret i32 {self.value.render()}"


@dataclass(frozen=True)
class Unknown:
    """A line that is not an instruction (blank, or unrecognised)."""
    text: str
    reason: str = ""

    def render(self) -> str:
        return self.text


Instruction = Union[Define, EndFunction, Comment, Call, Ret, Unknown]


# =============================================================================
# Functions and Modules
# =============================================================================

@dataclass
class IRFunction:
    """A named function body and the names its arguments bind to."""
    name: str
    body: list[Instruction] = field(default_factory=list)
    params: tuple[str, ...] = ()

    def render(self) -> str:
        lines = [Define(self.name, self.params).render()]
        lines.extend(f"  {instruction.render()}" for instruction in self.body)
        lines.append(EndFunction().render())
        return "\n".join(lines) + "\n"


@dataclass
class IRModule:
    """
    Decoded IR text.

    Attributes:
        functions: Functions in definition order
        top_level: Instructions that appear outside any ``define`` block
    """
    functions: list[IRFunction] = field(default_factory=list)
    top_level: list[Instruction] = field(default_factory=list)

    def function(self, name: str) -> Optional[IRFunction]:
        for function in self.functions:
            if function.name == name:
                return function
        return None

    def render(self) -> str:
        parts = [f"{instruction.render()}\n" for instruction in self.top_level]
        parts.extend(function.render() for function in self.functions)
        return "".join(parts)


# =============================================================================
# Decoding
# =============================================================================

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_OPERAND = rf"-?\d+|%\d+|{_NAME}"

_DEFINE_RE = re.compile(rf"^define\s+i32\s+@({_NAME})\s*\(([^)]*)\)\s*\{{$")
_PARAM_RE = re.compile(rf"^i32\s+({_NAME})$")
_CALL_RE = re.compile(rf"^(?:(%\d+)\s*=\s*)?call\s+i32\s+@({_NAME})\s*\((.*)\)$")
_RET_RE = re.compile(r"^ret\s+i32\s+(.+)$")
_OPERAND_RE = re.compile(rf"^({_OPERAND})$")
_BINARY_RE = re.compile(rf"^({_OPERAND})\s*([-+*/])\s*({_OPERAND})$")
_STRING_ARG_RE = re.compile(r'^"([^"]*)"$')
_POINTER_ARG_RE = re.compile(rf"^i32\s*\*\s*({_NAME}|%\d+)$")
_VALUE_ARG_RE = re.compile(rf"^i32\s+({_OPERAND})$")


def parse_operand(text: str) -> Operand:
    """Decode ``42``, ``-7``, ``x`` or ``%1``."""
    text = text.strip()
    if not _OPERAND_RE.match(text):
        raise IRFormatError(text, "not an operand")
    if text.lstrip("-").isdigit():
        return Const(int(text))
    return Ref(text)


def parse_value(text: str) -> Value:
    """Decode a single operand or ``operand op operand``."""
    text = text.strip()
    if _OPERAND_RE.match(text):
        return parse_operand(text)
    match = _BINARY_RE.match(text)
    if match:
        left, op, right = match.groups()
        return BinaryExpr(op, parse_operand(left), parse_operand(right))
    raise IRFormatError(text, "not a value expression")


def _split_args(text: str) -> list[str]:
    """Split call arguments on commas that are not inside string literals."""
    args = []
    current = []
    in_string = False
    for char in text:
        if char == '"':
            in_string = not in_string
        if char == "," and not in_string:
            args.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    tail = "".join(current).strip()
    if tail or args:
        args.append(tail)
    return args


def parse_argument(text: str) -> Argument:
    match = _STRING_ARG_RE.match(text)
    if match:
        return StringArg(match.group(1))
    match = _POINTER_ARG_RE.match(text)
    if match:
        return PointerArg(match.group(1))
    match = _VALUE_ARG_RE.match(text)
    if match:
        return ValueArg(parse_operand(match.group(1)))
    raise IRFormatError(text, "not a call argument")


def parse_params(text: str) -> tuple[str, ...]:
    """Decode the ``i32 a, i32 b`` list of a ``define`` line."""
    params = []
    for param in _split_args(text):
        match = _PARAM_RE.match(param)
        if not match:
            raise IRFormatError(param, "not a parameter")
        params.append(match.group(1))
    return tuple(params)


def parse_instruction(line: str) -> Instruction:
    """
    Decode one line of IR text.

    Raises:
        IRFormatError: If the line starts like a call or return but is
            malformed. Other unrecognised lines decode to ``Unknown``.
    """
    text = line.strip()

    if not text:
        return Unknown("")
    if text.startswith(";"):
        return Comment(text[1:].strip())
    if text == "}":
        return EndFunction()

    match = _DEFINE_RE.match(text)
    if match:
        return Define(match.group(1), parse_params(match.group(2)))

    match = _CALL_RE.match(text)
    if match:
        result, callee, args = match.groups()
        arguments = tuple(parse_argument(arg) for arg in _split_args(args))
        return Call(callee, arguments, result)

    match = _RET_RE.match(text)
    if match:
        return Ret(parse_value(match.group(1)))

    if text.startswith("ret") or "call " in text:
        raise IRFormatError(text, "malformed instruction")
    return Unknown(text, "unrecognised line")


def parse_module(text: str) -> IRModule:
    """
    Decode IR text into functions and top-level instructions.

    Malformed lines are kept as ``Unknown`` (with the decode error as the
    reason) rather than aborting, matching the pipeline's best-effort policy.
    """
    module = IRModule()
    current: Optional[IRFunction] = None

    for line in text.splitlines():
        try:
            instruction = parse_instruction(line)
        except IRFormatError as e:
            logger.warning(f"Keeping undecodable IR line: {e.message}")
            instruction = Unknown(line.strip(), e.message)

        if isinstance(instruction, Define):
            current = IRFunction(instruction.name, params=instruction.params)
            module.functions.append(current)
        elif isinstance(instruction, EndFunction):
            current = None
        elif isinstance(instruction, Unknown) and not instruction.text:
            continue
        elif current is not None:
            current.body.append(instruction)
        else:
            module.top_level.append(instruction)

    return module

"""A small concrete syntax tree for CMake listfiles."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union


class CMakeNodeKinds:
    """Names of the node kinds produced by :func:`parse`."""

    SOURCE_FILE = "source_file"
    NORMAL_COMMAND = "normal_command"
    IDENTIFIER = "identifier"
    ARGUMENT_LIST = "argument_list"
    ARGUMENT = "argument"
    BRACKET_ARGUMENT = "bracket_argument"
    QUOTED_ARGUMENT = "quoted_argument"
    QUOTED_ELEMENT = "quoted_element"
    UNQUOTED_ARGUMENT = "unquoted_argument"
    VARIABLE_REF = "variable_ref"
    NORMAL_VAR = "normal_var"
    ENV_VAR = "env_var"
    CACHE_VAR = "cache_var"
    VARIABLE = "variable"
    GEN_EXP = "gen_exp"
    ESCAPE_SEQUENCE = "escape_sequence"
    LINE_COMMENT = "line_comment"
    BRACKET_COMMENT = "bracket_comment"
    BODY = "body"
    FUNCTION_DEF = "function_def"
    FUNCTION_COMMAND = "function_command"
    ENDFUNCTION_COMMAND = "endfunction_command"
    MACRO_DEF = "macro_def"
    MACRO_COMMAND = "macro_command"
    ENDMACRO_COMMAND = "endmacro_command"
    IF_CONDITION = "if_condition"
    IF_COMMAND = "if_command"
    ELSEIF_COMMAND = "elseif_command"
    ELSE_COMMAND = "else_command"
    ENDIF_COMMAND = "endif_command"
    FOREACH_LOOP = "foreach_loop"
    FOREACH_COMMAND = "foreach_command"
    ENDFOREACH_COMMAND = "endforeach_command"
    WHILE_LOOP = "while_loop"
    WHILE_COMMAND = "while_command"
    ENDWHILE_COMMAND = "endwhile_command"
    BLOCK_DEF = "block_def"
    BLOCK_COMMAND = "block_command"
    ENDBLOCK_COMMAND = "endblock_command"
    ERROR = "ERROR"


@dataclass(frozen=True, order=True)
class Point:
    """A zero-based row and column in a source text."""

    row: int
    column: int


@dataclass
class Node:
    """A syntax node covering the text from ``start`` to ``end``."""

    kind: str
    start: Point
    end: Point
    children: list[Node] = field(default_factory=list)

    def child(self, index: int) -> Optional[Node]:
        """Return the child at ``index`` or None."""
        if 0 <= index < len(self.children):
            return self.children[index]
        return None

    def child_count(self) -> int:
        return len(self.children)

    def text(self, lines: Union[str, Sequence[str]]) -> str:
        """Return the source text this node covers."""
        if isinstance(lines, str):
            lines = lines.split("\n")

        def line(row: int) -> str:
            return lines[row] if row < len(lines) else ""

        if self.start.row == self.end.row:
            return line(self.start.row)[self.start.column:self.end.column]
        parts = [line(self.start.row)[self.start.column:]]
        parts.extend(line(row) for row in range(self.start.row + 1, self.end.row))
        parts.append(line(self.end.row)[: self.end.column])
        return "\n".join(parts)


_K = CMakeNodeKinds
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_WHITESPACE = " \t\r\n"
_UNQUOTED_STOP = _WHITESPACE + '()#"'
_VARIABLE_STOP = _WHITESPACE + '}"()'
_BLOCKS = {
    "function": (_K.FUNCTION_DEF, "endfunction"),
    "macro": (_K.MACRO_DEF, "endmacro"),
    "foreach": (_K.FOREACH_LOOP, "endforeach"),
    "while": (_K.WHILE_LOOP, "endwhile"),
    "block": (_K.BLOCK_DEF, "endblock"),
    "if": (_K.IF_CONDITION, "endif"),
}


@dataclass
class _RawCommand:
    name: str
    start: Point
    keyword_end: Point
    rest: list[Node]

    def build(self, kind: str, keyword_kind: str) -> Node:
        end = self.rest[-1].end if self.rest else self.keyword_end
        keyword = Node(keyword_kind, self.start, self.keyword_end)
        return Node(kind, self.start, end, [keyword, *self.rest])


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.row = 0
        self.col = 0

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def point(self) -> Point:
        return Point(self.row, self.col)

    def advance(self, count: int = 1) -> None:
        for char in self.text[self.pos:self.pos + count]:
            if char == "\n":
                self.row += 1
                self.col = 0
            else:
                self.col += 1
        self.pos = min(len(self.text), self.pos + count)

    def token(self, kind: str, length: Optional[int] = None) -> Node:
        start = self.point()
        self.advance(len(kind) if length is None else length)
        return Node(kind, start, self.point())

    def skip(self, newlines: bool = True) -> None:
        spaces = _WHITESPACE if newlines else " \t\r"
        while self.peek() and self.peek() in spaces:
            self.advance()

    def bracket_level(self, offset: int = 0) -> Optional[int]:
        if self.peek(offset) != "[":
            return None
        index = offset + 1
        level = 0
        while self.peek(index) == "=":
            level += 1
            index += 1
        return level if self.peek(index) == "[" else None

    def bracket(self, kind: str, prefix: int) -> Node:
        start = self.point()
        level = self.bracket_level(prefix) or 0
        self.advance(prefix + level + 2)
        close = "]" + "=" * level + "]"
        found = self.text.find(close, self.pos)
        end = len(self.text) if found < 0 else found + len(close)
        self.advance(end - self.pos)
        return Node(kind, start, self.point())

    def comment(self) -> Node:
        if self.bracket_level(1) is not None:
            return self.bracket(_K.BRACKET_COMMENT, 1)
        start = self.point()
        while self.peek() and self.peek() != "\n":
            self.advance()
        return Node(_K.LINE_COMMENT, start, self.point())

    def identifier_length(self) -> int:
        match = _IDENT.match(self.text, self.pos)
        return match.end() - self.pos if match else 0

    def escape(self) -> Node:
        start = self.point()
        self.advance(2)
        return Node(_K.ESCAPE_SEQUENCE, start, self.point())

    def text_piece(self, children: list[Node]) -> None:
        char = self.peek()
        if char == "\\":
            children.append(self.escape())
            return
        if char == "$":
            reference = self.reference()
            if reference is not None:
                children.append(reference)
                return
        self.advance()

    def reference(self) -> Optional[Node]:
        if self.text.startswith("${", self.pos):
            return self.variable_ref(_K.NORMAL_VAR, ("$", "{"))
        if self.text.startswith("$ENV{", self.pos):
            return self.variable_ref(_K.ENV_VAR, ("$", "ENV", "{"))
        if self.text.startswith("$CACHE{", self.pos):
            return self.variable_ref(_K.CACHE_VAR, ("$", "CACHE", "{"))
        if self.text.startswith("$<", self.pos):
            return self.gen_exp()
        return None

    def variable_ref(self, kind: str, opening: Sequence[str]) -> Node:
        start = self.point()
        children = [self.token(part) for part in opening]
        var_start = self.point()
        parts: list[Node] = []
        while self.peek() and self.peek() not in _VARIABLE_STOP:
            self.text_piece(parts)
        if self.point() != var_start:
            children.append(Node(_K.VARIABLE, var_start, self.point(), parts))
        if self.peek() == "}":
            children.append(self.token("}"))
        inner = Node(kind, start, self.point(), children)
        return Node(_K.VARIABLE_REF, start, self.point(), [inner])

    def gen_exp(self) -> Node:
        start = self.point()
        children = [self.token("$"), self.token("<")]
        while self.peek() and self.peek() not in '>")\n':
            self.text_piece(children)
        if self.peek() == ">":
            children.append(self.token(">"))
        return Node(_K.GEN_EXP, start, self.point(), children)

    def quoted(self) -> Node:
        start = self.point()
        children = [self.token('"')]
        element_start = self.point()
        parts: list[Node] = []
        while self.peek() and self.peek() != '"':
            self.text_piece(parts)
        if self.point() != element_start:
            children.append(Node(_K.QUOTED_ELEMENT, element_start, self.point(), parts))
        if self.peek() == '"':
            children.append(self.token('"'))
        return Node(_K.QUOTED_ARGUMENT, start, self.point(), children)

    def unquoted(self) -> Node:
        start = self.point()
        children: list[Node] = []
        while self.peek() and self.peek() not in _UNQUOTED_STOP:
            self.text_piece(children)
        return Node(_K.UNQUOTED_ARGUMENT, start, self.point(), children)

    def argument(self) -> Node:
        if self.bracket_level() is not None:
            inner = self.bracket(_K.BRACKET_ARGUMENT, 0)
        elif self.peek() == '"':
            inner = self.quoted()
        else:
            inner = self.unquoted()
        return Node(_K.ARGUMENT, inner.start, inner.end, [inner])

    def arguments(self) -> list[Node]:
        items: list[Node] = []
        depth = 0
        while True:
            self.skip()
            char = self.peek()
            if not char:
                break
            if char == "(":
                items.append(self.token("("))
                depth += 1
            elif char == ")":
                if depth == 0:
                    break
                items.append(self.token(")"))
                depth -= 1
            elif char == "#":
                items.append(self.comment())
            else:
                items.append(self.argument())
        if not items:
            return []
        return [Node(_K.ARGUMENT_LIST, items[0].start, items[-1].end, items)]

    def raw_command(self) -> _RawCommand:
        start = self.point()
        length = self.identifier_length()
        name = self.text[self.pos:self.pos + length].lower()
        self.advance(length)
        keyword_end = self.point()
        rest: list[Node] = []
        self.skip(newlines=False)
        if self.peek() == "(":
            rest.append(self.token("("))
            rest.extend(self.arguments())
            if self.peek() == ")":
                rest.append(self.token(")"))
        return _RawCommand(name, start, keyword_end, rest)

    def error(self) -> Node:
        start = self.point()
        self.advance()
        while self.peek() and self.peek() not in _WHITESPACE:
            self.advance()
        return Node(_K.ERROR, start, self.point())

    def items(self, terminators: frozenset[str]) -> tuple[list[Node], Optional[_RawCommand]]:
        items: list[Node] = []
        while True:
            self.skip()
            char = self.peek()
            if not char:
                return items, None
            if char == "#":
                items.append(self.comment())
                continue
            if not self.identifier_length():
                items.append(self.error())
                continue
            raw = self.raw_command()
            if raw.name in terminators:
                return items, raw
            items.append(self.statement(raw))

    def statement(self, raw: _RawCommand) -> Node:
        block = _BLOCKS.get(raw.name)
        if block is None:
            return raw.build(_K.NORMAL_COMMAND, _K.IDENTIFIER)
        kind, closer = block
        children = [raw.build(f"{raw.name}_command", raw.name)]
        stops = frozenset({closer, "elseif", "else"} if raw.name == "if" else {closer})
        while True:
            body, terminator = self.items(stops)
            if body:
                children.append(Node(_K.BODY, body[0].start, body[-1].end, body))
            if terminator is None:
                break
            children.append(terminator.build(f"{terminator.name}_command", terminator.name))
            if terminator.name == closer:
                break
        return Node(kind, children[0].start, children[-1].end, children)


def parse(source: str) -> Node:
    """Parse CMake source text into a tree rooted at a source_file node."""
    parser = _Parser(source)
    items, _ = parser.items(frozenset())
    return Node(_K.SOURCE_FILE, Point(0, 0), parser.point(), items)
"""Helpers that locate things in a CMake syntax tree for editor features."""

from __future__ import annotations

import os
import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional, Sequence, Union

from cmakels.syntax import CMakeNodeKinds, Node, Point

_BLACK_POS_STRING = ("(", ")", "{", "}", "$")
_SPECIAL_COMMANDS = (
    "find_package",
    "target_link_libraries",
    "target_include_directories",
)
_HELP_HEADER = re.compile(r"[z-zA-z]+\n-+")


@dataclass(frozen=True)
class Position:
    """A zero-based line and character, as editors count them."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position


class PositionType(Enum):
    """What kind of thing sits at a location in a listfile."""

    VAR_OR_FUN = "var_or_fun"
    FUN_OR_MACRO_IDENTIFIER = "fun_or_macro_identifier"
    ARGUMENT_OR_LIST = "argument_or_list"
    FIND_PACKAGE = "find_package"
    FIND_PKG_CONFIG = "find_pkg_config"
    SUB_DIR = "sub_dir"
    INCLUDE = "include"
    FUN_OR_MACRO_ARGS = "fun_or_macro_args"
    UNKNOWN = "unknown"
    TARGET_INCLUDE = "target_include"
    TARGET_LINK = "target_link"
    COMMENT = "comment"


@dataclass(frozen=True)
class FindPackageSpace:
    """A component position inside ``find_package(<name> COMPONENTS ...)``."""

    name: str


_COMMAND_TYPES = {
    "find_package": PositionType.FIND_PACKAGE,
    "pkg_check_modules": PositionType.FIND_PKG_CONFIG,
    "include": PositionType.INCLUDE,
    "add_subdirectory": PositionType.SUB_DIR,
    "target_include_directories": PositionType.TARGET_INCLUDE,
    "target_link_libraries": PositionType.TARGET_LINK,
}
_COMMENTS = (CMakeNodeKinds.LINE_COMMENT, CMakeNodeKinds.BRACKET_COMMENT)


def point_to_position(point: Point) -> Position:
    return Position(point.row, point.column)


def position_to_point(position: Position) -> Point:
    return Point(position.line, position.character)


def _lines(source: Union[str, Sequence[str]]) -> Sequence[str]:
    return source.split("\n") if isinstance(source, str) else source


def _contains(location: Point, node: Node) -> bool:
    start, end = node.start, node.end
    if end.row < location.row or start.row > location.row:
        return False
    if start.row == location.row and start.column > location.column:
        return False
    if end.row == location.row and end.column < location.column:
        return False
    return True


def _on_one_line_at(location: Point, node: Node) -> bool:
    return (
        node.start.row == node.end.row
        and node.start.column <= location.column <= node.end.column
    )


def get_point_string(
    location: Point, root: Node, lines: Union[str, Sequence[str]]
) -> Optional[str]:
    """Return the text of the innermost one-line node at ``location``."""
    lines = _lines(lines)
    for child in root.children:
        if not _contains(location, child) or child.kind in _BLACK_POS_STRING:
            continue
        if child.children:
            found = get_point_string(location, child, lines)
            if found is not None and found not in _BLACK_POS_STRING:
                return found
        if _on_one_line_at(location, child):
            return child.text(lines)
    return None


def get_position_range(location: Position, root: Node) -> Optional[Range]:
    """Return the range of the innermost leaf node at ``location``."""
    point = position_to_point(location)
    for child in root.children:
        if not _contains(point, child) or child.kind in _BLACK_POS_STRING:
            continue
        if child.children:
            found = get_position_range(location, child)
            if found is not None:
                return found
        elif _on_one_line_at(point, child):
            return Range(point_to_position(child.start), point_to_position(child.end))
    return None


def contain_comment(location: Point, root: Node) -> bool:
    """Tell whether ``location`` lies inside a comment."""
    if not _contains(location, root):
        return False
    if root.kind in _COMMENTS:
        return True
    for child in root.children:
        if not _contains(location, child):
            continue
        if child.kind in _COMMENTS:
            return True
        if child.children and contain_comment(location, child):
            return True
    return False


def get_pos_type(
    location: Point, root: Node, source: str
) -> Union[PositionType, FindPackageSpace]:
    """Classify what is at ``location`` in the parsed ``source``."""
    return _pos_type(location, root, _lines(source), PositionType.UNKNOWN)


def _pos_type(
    location: Point,
    root: Node,
    lines: Sequence[str],
    input_type: PositionType,
) -> Union[PositionType, FindPackageSpace]:
    kinds = CMakeNodeKinds
    for child in root.children:
        if not _contains(location, child):
            continue
        kind = child.kind
        if kind == kinds.NORMAL_COMMAND:
            name = child.children[0].text(lines).lower()
            jumptype = _COMMAND_TYPES.get(name, PositionType.VAR_OR_FUN)
        elif kind == kinds.ARGUMENT_LIST:
            first = child.children[0]
            if (
                child.child_count() >= 2
                and not _contains(location, first)
                and input_type is PositionType.FIND_PACKAGE
                and "COMPONENTS" in child.text(lines).split()
            ):
                return FindPackageSpace(first.text(lines))
            if input_type is PositionType.FUN_OR_MACRO_ARGS and _contains(location, first):
                return PositionType.FUN_OR_MACRO_IDENTIFIER
            jumptype = PositionType.ARGUMENT_OR_LIST
        elif kind in (kinds.FUNCTION_COMMAND, kinds.MACRO_COMMAND):
            jumptype = PositionType.FUN_OR_MACRO_ARGS
        elif kind in (kinds.UNQUOTED_ARGUMENT, kinds.QUOTED_ELEMENT):
            jumptype = PositionType.ARGUMENT_OR_LIST
        elif kind == kinds.ARGUMENT:
            if input_type in (
                PositionType.FIND_PACKAGE,
                PositionType.SUB_DIR,
                PositionType.INCLUDE,
                PositionType.FIND_PKG_CONFIG,
            ):
                jumptype = input_type
            else:
                jumptype = PositionType.VAR_OR_FUN
        elif kind in _COMMENTS:
            jumptype = PositionType.COMMENT
        else:
            jumptype = PositionType.VAR_OR_FUN

        if not child.children:
            return jumptype

        if jumptype in (
            PositionType.FIND_PACKAGE,
            PositionType.SUB_DIR,
            PositionType.INCLUDE,
            PositionType.TARGET_INCLUDE,
            PositionType.TARGET_LINK,
        ):
            inner = _pos_type(location, child, lines, jumptype)
            if inner is PositionType.VAR_OR_FUN or isinstance(inner, FindPackageSpace):
                return inner
            name = get_point_string(location, root, lines)
            if name is not None and name.lower() in _SPECIAL_COMMANDS:
                return PositionType.UNKNOWN
            return jumptype
        if jumptype is PositionType.FIND_PKG_CONFIG:
            name = get_point_string(location, root, lines)
            if name is not None and name.lower() == "pkg_check_modules":
                return PositionType.UNKNOWN
            return jumptype
        if jumptype is PositionType.VAR_OR_FUN:
            current = _pos_type(location, child, lines, PositionType.VAR_OR_FUN)
            if current is not PositionType.UNKNOWN:
                return current
            continue
        return _pos_type(location, child, lines, jumptype)
    return PositionType.UNKNOWN


def parse_help_output(text: str) -> dict[str, str]:
    """Split cmake ``--help-*`` output into a name-to-description mapping."""
    keys = [match.group(0).split("\n")[0] for match in _HELP_HEADER.finditer(text)]
    contents = _HELP_HEADER.split(text)[1:]
    return dict(zip(keys, contents))


@lru_cache(maxsize=None)
def message_storage() -> dict[str, str]:
    """Collect cmake's built-in help for commands, variables and modules."""
    storage: dict[str, str] = {}
    for flag in ("--help-commands", "--help-variables", "--help-modules"):
        try:
            result = subprocess.run(["cmake", flag], capture_output=True, check=False)
        except OSError:
            continue
        storage.update(parse_help_output(result.stdout.decode("utf-8", errors="replace")))
    if os.name == "posix":
        storage["pkg_check_modules"] = "please FindPackage PkgConfig first"
    return storage
from unittest import mock

import pytest

from cmakels.syntax import Point, parse
from cmakels.treehelper import (
    FindPackageSpace,
    Position,
    PositionType,
    Range,
    contain_comment,
    get_point_string,
    get_pos_type,
    get_position_range,
    message_storage,
    parse_help_output,
    point_to_position,
    position_to_point,
)

POINT_SOURCE = """
# it is a comment
set(ABC "abcd")
set(EFT "${ABC}eft")
function(abc)
endfunction()
find_package(PkgConfig)
pkg_check_modules(zlib)
target_link_libraries(ABC PUBLIC
    ${zlib_LIBRARIES}
    ${abcd}
)
include("abcd/efg.cmake")
    """

POSTYPE_SOURCE = """
# it is a comment
set(ABC "abcd")
function(abc)
endfunction()
find_package(PkgConfig)
pkg_check_modules(zlib)
target_link_libraries(ABC PUBLIC
    ${zlib_LIBRARIES}
    ${abcd}
)
include("abcd/efg.cmake")
#[[.rst:
test, here is BRACKET_COMMENT
]]#
find_package(Qt5 COMPONENTS Core)
find_package(Qt5Core CONFIG)
macro(macro_test)
endmacro()
    """


def test_change():
    assert point_to_position(Point(10, 10)) == Position(10, 10)
    assert position_to_point(Position(10, 10)) == Point(10, 10)


def test_line_comment():
    source = 'set(A "\nA#ss" #sss)'
    root = parse(source)
    assert not contain_comment(Point(1, 1), root)
    assert contain_comment(Point(1, 8), root)


def test_point_string():
    root = parse(POINT_SOURCE)
    lines = POINT_SOURCE.split("\n")
    assert get_point_string(Point(2, 4), root, lines) == "ABC"
    assert get_point_string(Point(3, 12), root, lines) == "ABC"
    assert get_point_string(Point(3, 16), root, lines) == "${ABC}eft"


def test_position_range():
    root = parse(POINT_SOURCE)
    assert get_position_range(Position(2, 4), root) == Range(
        Position(2, 4), Position(2, 7)
    )


@pytest.mark.parametrize(
    "row, column, expected",
    [
        (1, 3, PositionType.COMMENT),
        (2, 4, PositionType.VAR_OR_FUN),
        (3, 5, PositionType.VAR_OR_FUN),
        (5, 15, PositionType.FIND_PACKAGE),
        (5, 1, PositionType.VAR_OR_FUN),
        (6, 22, PositionType.FIND_PKG_CONFIG),
        (8, 2, PositionType.TARGET_LINK),
        (8, 4, PositionType.VAR_OR_FUN),
        (9, 6, PositionType.VAR_OR_FUN),
        (11, 11, PositionType.INCLUDE),
        (13, 3, PositionType.COMMENT),
        (15, 30, FindPackageSpace("Qt5")),
        (15, 15, PositionType.FIND_PACKAGE),
        (16, 21, PositionType.FIND_PACKAGE),
        (17, 8, PositionType.FUN_OR_MACRO_IDENTIFIER),
    ],
)
def test_postype(row, column, expected):
    root = parse(POSTYPE_SOURCE)
    assert get_pos_type(Point(row, column), root, POSTYPE_SOURCE) == expected


def test_parse_help_output():
    text = "set\n---\nSets a var\nunset\n-----\nUnsets\n"
    assert parse_help_output(text) == {"set": "\nSets a var\n", "unset": "\nUnsets\n"}


def test_message_storage_reads_cmake_help():
    fake = mock.Mock(stdout=b"project\n-------\nDeclares a project\n")
    message_storage.cache_clear()
    try:
        with mock.patch("cmakels.treehelper.subprocess.run", return_value=fake):
            storage = message_storage()
        assert storage["project"] == "\nDeclares a project\n"
    finally:
        message_storage.cache_clear()


def test_message_storage_without_cmake():
    message_storage.cache_clear()
    try:
        with mock.patch(
            "cmakels.treehelper.subprocess.run", side_effect=FileNotFoundError
        ):
            storage = message_storage()
        assert set(storage) <= {"pkg_check_modules"}
    finally:
        message_storage.cache_clear()
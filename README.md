# cmakels

Building blocks for CMake language tooling. The package does three things:

- parses CMake sources into a small syntax tree;
- tells you what kind of thing sits at a cursor position;
- finds the CMake and pkg-config packages installed on the machine.

## Installation

```
pip install cmakels
```

Nothing outside the standard library is needed. Some functions call the `cmake` executable when it is on `PATH`:

- `cmakels.package.query_cmake_prefixes` runs `cmake --system-information` to read `CMAKE_SYSTEM_PREFIX_PATH`;
- `cmakels.treehelper.message_storage` runs `cmake --help-commands`, `--help-variables` and `--help-modules`.

When `cmake` cannot be run, `cmake_prefixes()` falls back to the defaults of the platform, given by `default_prefixes()`. Those defaults are:

| Platform | Default prefixes |
| --- | --- |
| Linux and BSD | `/usr/local`, `/usr` |
| macOS | `/usr/local`, `/usr`, `/opt/homebrew` |
| Windows | the Program Files directories |

A prefix from the environment is added on Windows (`MSYSTEM_PREFIX` or `CMAKE_PREFIX_PATH`) and on Android (`PREFIX`).

## Parsing

`cmakels.syntax.parse(source)` returns a `Node` rooted at a `source_file` node. Each node has:

- a `kind`, one of the names in `CMakeNodeKinds`;
- `start` and `end` `Point`s, counted from zero by row and column;
- its `children`.

`Node` has these methods:

| Method | What it does |
| --- | --- |
| `Node.child(index)` | Returns the child at `index`, or `None` when there is none. |
| `Node.child_count()` | Returns the number of children. |
| `Node.text(lines)` | Returns the source text the node covers. `lines` may be the whole source or a list of its lines. |

The parser knows about:

- commands and their argument lists;
- quoted, unquoted and bracket arguments;
- variable references (`${}`, `$ENV{}`, `$CACHE{}`) and generator expressions;
- line and bracket comments;
- `function`, `macro`, `if`, `foreach`, `while` and `block` bodies.

Text it cannot read becomes an `ERROR` node.

## Cursor analysis

```python
from cmakels.syntax import Point, parse
from cmakels.treehelper import get_point_string, get_pos_type

source = 'set(ABC "abcd")\nfind_package(Qt5 COMPONENTS Core)\n'
root = parse(source)

get_point_string(Point(0, 4), root, source.splitlines())  # "ABC"
get_pos_type(Point(0, 4), root, source)                    # PositionType.VAR_OR_FUN
get_pos_type(Point(1, 30), root, source)                   # FindPackageSpace(name="Qt5")
```

`get_pos_type` returns either a `PositionType` member or a `FindPackageSpace`. The `FindPackageSpace` case is for a component inside `find_package(<name> COMPONENTS ...)`.

The other functions in `cmakels.treehelper` are:

| Function | What it does |
| --- | --- |
| `contain_comment(location, root)` | Tells whether a point lies inside a line or bracket comment. |
| `get_position_range(location, root)` | Returns the `Range` of the leaf token under a `Position`, or `None`. |
| `point_to_position`, `position_to_point` | Convert between tree `Point`s and editor `Position`s. |
| `parse_help_output(text)` | Splits `cmake --help-*` output into a name-to-text dict. |
| `message_storage()` | Collects that help text once per process. |

On POSIX systems, `message_storage()` also adds a note for `pkg_check_modules`.

## Package helpers

`cmakels.package` holds the `CMakePackage` record. Its fields are:

- `name`;
- `packagetype`: `PackageType.DIR` or `PackageType.FILE`;
- `location`: a `Path`, with a `uri` property that gives it as a file URI;
- `version`;
- `tojump`: the listfiles, with the config file first;
- `origin`: `CMakePackageFrom.SYSTEM` or `CMakePackageFrom.VCPKG`.

The module also has helpers for file and version names:

```python
from cmakels.package import get_version, handle_config_package, split_versioned_name

handle_config_package("libaec-config.cmake")  # "libaec"
split_versioned_name("boost_atomic-1.86.0")   # ("boost_atomic", "1.86.0")
get_version("set(PACKAGE_VERSION 5.11)")      # "5.11"
```

Other helpers in `cmakels.package`:

| Function | What it does |
| --- | --- |
| `is_cmake_file` | Tells whether a name is a `.cmake` file or `CMakeLists.txt`. |
| `is_config_file` | Tells whether a name is a package config file. |
| `is_config_version_file` | Tells whether a name is a config-version file. |
| `remove_quotation` | Strips surrounding double quotes. |
| `get_available_libs(prefixes, libs)` | Returns the existing `<prefix>/<lib>/cmake` directories. |

## Finding system packages

`cmakels.systempackages.get_cmake_message()` scans the prefixes from `cmake_prefixes()`. It looks in two kinds of place:

- `<prefix>/share/*/cmake/` directories that hold a config file;
- the entries of `<prefix>/<lib>/cmake`, where `<lib>` comes from `platform_libs()`.

The result maps each package name to a `CMakePackage`. Versions are read from a `*ConfigVersion.cmake` file. For directory names like `foo-1.2`, the version is taken from the name instead.

You can also scan prefixes of your own:

```python
from cmakels.systempackages import get_cmake_message_with_prefixes, scan_packages

packages = get_cmake_message_with_prefixes(["/opt/mysdk"])
for name, package in sorted(packages.items()):
    print(name, package.version)

packages = scan_packages(["/opt/mysdk"], ["lib", "share"])
```

## vcpkg

`cmakels.vcpkg` has these functions:

| Function | What it does |
| --- | --- |
| `did_vcpkg_project(path)` | Tells whether a directory holds a `vcpkg.json`. |
| `make_vcpkg_package_search_path(search_path)` | Returns `<triplet>/share` for each known triplet directory present. |
| `get_cmake_message(prefixes, libs)` | Scans vcpkg prefixes and returns packages marked `CMakePackageFrom.VCPKG`. |

`get_cmake_message` falls back to the module lists `VCPKG_PREFIX` and `VCPKG_LIBS` when no arguments are given. Both lists are empty until you fill them.

## Combined access

`cmakels.findpackage` brings the results together:

- `FindPackageFuns` gives the system and vcpkg packages combined, as a list or as a dict keyed by name. The scans are made once per process.
- `FindPackageFuns` also lists pkg-config modules as `PkgConfig` records. `get_pkg_messages(patterns)` finds the `.pc` files; its default patterns are in `QUERY_RULES`.
- `cached_cmake_packages()` and `cached_cmake_packages_withkeys()` return the combined packages, computed once.
- `FindPackageFunsFake` serves one fixed package, `bash-completion-fake`, instead of scanning the machine. It is meant for tests.

## What it does not do

This package is a library only:

- It has no command-line program.
- It does not run a language server.
- It does not format or lint CMake files.
- It does not offer completion, hover or go-to-definition itself.

It gives the pieces such features are built from.

## Running the tests

```
pip install -e ".[test]"
pytest
```
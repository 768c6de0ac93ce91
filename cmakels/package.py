"""Package records and the helpers shared by the CMake package finders."""

from __future__ import annotations

import os
import re
import subprocess
import sys
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional, Sequence

from cmakels.syntax import CMakeNodeKinds, parse

_CMAKE_FILE = re.compile(r"^.+\.cmake\Z|CMakeLists.txt\Z")
_CONFIG_FILE = re.compile(r"Config.cmake\Z|-config.cmake\Z")
_CONFIG_VERSION_FILE = re.compile(r"ConfigVersion.cmake\Z")
_VERSIONED_NAME = re.compile(r"([a-zA-Z_0-9\-]+)-([0-9]+(\.[0-9]+)*)")

_UNIX_PLATFORMS = ("linux", "android", "freebsd", "openbsd")


class PackageType(Enum):
    """Whether a package is a directory of listfiles or a single config file."""

    DIR = "Dir"
    FILE = "File"


class CMakePackageFrom(Enum):
    """Where a package was found."""

    SYSTEM = "System"
    VCPKG = "Vcpkg"


@dataclass
class CMakePackage:
    """A CMake package that ``find_package`` can locate."""

    name: str
    packagetype: PackageType
    location: Path
    version: Optional[str] = None
    tojump: list[Path] = field(default_factory=list)
    origin: CMakePackageFrom = CMakePackageFrom.SYSTEM

    @property
    def uri(self) -> str:
        """The package location as a file URI."""
        return self.location.as_uri()


def remove_quotation(text: str) -> str:
    """Strip surrounding double quotes from ``text``."""
    return text.strip('"')


def handle_config_package(filename: str) -> Optional[str]:
    """Return the package name of a ``<name>Config.cmake`` or ``<name>-config.cmake`` file."""
    for suffix in ("-config.cmake", "Config.cmake"):
        if filename.endswith(suffix):
            return filename[: -len(suffix)]
    return None


def is_cmake_file(name: str) -> bool:
    """Tell whether ``name`` is a ``.cmake`` file or a CMakeLists.txt."""
    return _CMAKE_FILE.search(name) is not None


def is_config_file(name: str) -> bool:
    """Tell whether ``name`` is a package config file."""
    return _CONFIG_FILE.search(name) is not None


def is_config_version_file(name: str) -> bool:
    """Tell whether ``name`` is a package config-version file."""
    return _CONFIG_VERSION_FILE.search(name) is not None


def split_versioned_name(name: str) -> Optional[tuple[str, str]]:
    """Split a directory name like ``boost_atomic-1.86.0`` into name and version."""
    match = _VERSIONED_NAME.search(name)
    if match is None:
        return None
    return match.group(1), match.group(2)


def get_version(source: str) -> Optional[str]:
    """Return the value given to ``set(PACKAGE_VERSION ...)`` in a listfile."""
    lines = source.split("\n")
    root = parse(source)
    for command in root.children:
        if command.kind != CMakeNodeKinds.NORMAL_COMMAND:
            continue
        name = command.children[0].text(lines)
        if name not in ("set", "SET"):
            continue
        arguments = command.child(2)
        if arguments is None:
            return None
        identifier = arguments.child(0)
        value = arguments.child(1)
        if identifier is None or value is None:
            return None
        if identifier.start.column == identifier.end.column:
            continue
        if identifier.text(lines) == "PACKAGE_VERSION":
            return remove_quotation(value.text(lines))
    return None


def query_cmake_prefixes() -> Optional[list[str]]:
    """Ask cmake for its system prefix path, or return None if that fails."""
    try:
        result = subprocess.run(
            ["cmake", "--system-information"], capture_output=True, check=False
        )
    except OSError:
        return None
    output = result.stdout.decode("utf-8", errors="replace")
    line = next(
        (line for line in output.splitlines() if line.startswith("CMAKE_SYSTEM_PREFIX_PATH")),
        None,
    )
    if line is None or " " not in line:
        return None
    _, value = line.split(" ", 1)
    prefixes = remove_quotation(value).split(";")
    return prefixes or None


def _is_android() -> bool:
    return sys.platform == "android" or hasattr(sys, "getandroidapilevel")


def _platform_family() -> str:
    if _is_android():
        return "unix"
    if sys.platform.startswith(_UNIX_PLATFORMS):
        return "unix"
    if sys.platform == "darwin":
        return "macos"
    if sys.platform in ("win32", "cygwin"):
        return "windows"
    return "other"


def default_prefixes() -> list[str]:
    """The prefixes searched on this platform when cmake cannot be asked."""
    family = _platform_family()
    if family == "unix":
        return ["/usr/local", "/usr"]
    if family == "macos":
        return ["/usr/local", "/usr", "/opt/homebrew"]
    if family == "windows":
        return [
            "C:\\Program Files",
            "C:\\Program Files (x86)",
            "C:\\Program Files\\CMake",
        ]
    return []


def _env_prefix() -> Optional[str]:
    family = _platform_family()
    if family == "windows":
        return os.environ.get("MSYSTEM_PREFIX") or os.environ.get("CMAKE_PREFIX_PATH")
    if family == "unix" and _is_android():
        return os.environ.get("PREFIX")
    return None


@lru_cache(maxsize=None)
def _cached_prefixes() -> tuple[str, ...]:
    if _platform_family() == "other":
        return ()
    queried = query_cmake_prefixes()
    if queried is not None:
        return tuple(queried)
    prefixes = default_prefixes()
    env_prefix = _env_prefix()
    if env_prefix is not None:
        prefixes.append(env_prefix)
    return tuple(prefixes)


def cmake_prefixes() -> list[str]:
    """The install prefixes to search for packages, computed once."""
    return list(_cached_prefixes())


cmake_prefixes.cache_clear = _cached_prefixes.cache_clear  # type: ignore[attr-defined]


def get_available_libs(prefixes: Iterable[str], libs: Sequence[str]) -> list[Path]:
    """Return the existing ``<prefix>/<lib>/cmake`` directories."""
    return [
        path
        for prefix in prefixes
        for path in (Path(prefix) / lib / "cmake" for lib in libs)
        if path.exists()
    ]
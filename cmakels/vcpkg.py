"""Discovery of CMake packages installed by vcpkg."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence

from cmakels.package import (
    CMakePackage,
    CMakePackageFrom,
    PackageType,
    get_version,
    handle_config_package,
    is_cmake_file,
    is_config_file,
    is_config_version_file,
    split_versioned_name,
)
from cmakels.systempackages import scan_packages

_TRIPLETS = (
    "x64-linux",
    "x86-linux",
    "x64-windows",
    "x86-windows",
    "x64-osx",
    "arm64-osx",
)

VCPKG_PREFIX: list[str] = []
"""The vcpkg install prefixes searched by default."""

VCPKG_LIBS: list[str] = []
"""The directories below each prefix that hold package folders."""


def did_vcpkg_project(path: Path) -> bool:
    """Tell whether ``path`` is a project directory with a ``vcpkg.json``."""
    path = Path(path)
    return path.is_dir() and (path / "vcpkg.json").is_file()


def make_vcpkg_package_search_path(search_path: Path) -> list[str]:
    """Return ``<triplet>/share`` for each triplet directory under ``search_path``."""
    search_path = Path(search_path)
    return [
        os.path.join(triplet, "share")
        for triplet in _TRIPLETS
        if (search_path / triplet).is_dir()
    ]


def get_available_libs(
    prefixes: Optional[Iterable[str]] = None, libs: Optional[Sequence[str]] = None
) -> list[Path]:
    """Return the existing ``<prefix>/<lib>`` directories."""
    prefixes = VCPKG_PREFIX if prefixes is None else prefixes
    libs = VCPKG_LIBS if libs is None else libs
    return [
        path
        for prefix in prefixes
        for path in (Path(prefix) / lib for lib in libs)
        if path.exists()
    ]


def _canonical(path: Path) -> Path:
    if sys.platform in ("win32", "cygwin"):
        return Path(os.path.abspath(path))
    return Path(path).resolve()


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def _config_first(tojump: list[Path]) -> None:
    index = next((i for i, file in enumerate(tojump) if is_config_file(str(file))), None)
    if index:
        tojump[0], tojump[index] = tojump[index], tojump[0]


def _list_dir(path: Path) -> list[Path]:
    try:
        return sorted(path.iterdir())
    except OSError:
        return []


def _entry_package(entry: Path) -> Optional[CMakePackage]:
    version: Optional[str] = None
    tojump: list[Path] = []
    if entry.is_dir() and not entry.is_symlink():
        try:
            children = sorted(entry.iterdir())
        except OSError:
            return None
        for child in children:
            if not child.is_file() or child.is_symlink() or not is_cmake_file(child.name):
                continue
            filepath = _canonical(child)
            tojump.append(filepath)
            if is_config_version_file(child.name):
                content = _read_text(filepath)
                if content is not None:
                    version = get_version(content)
        packagetype = PackageType.DIR
        name = entry.name
    else:
        tojump.append(_canonical(entry))
        config_name = handle_config_package(entry.name)
        if config_name is None:
            return None
        packagetype = PackageType.FILE
        name = config_name
    _config_first(tojump)
    versioned = split_versioned_name(name)
    if versioned is not None:
        name, version = versioned
    return CMakePackage(
        name=name,
        packagetype=packagetype,
        location=entry,
        version=version,
        tojump=tojump,
        origin=CMakePackageFrom.VCPKG,
    )


def get_cmake_message(
    prefixes: Optional[Iterable[str]] = None, libs: Optional[Sequence[str]] = None
) -> dict[str, CMakePackage]:
    """Find the vcpkg packages under ``prefixes``, keyed by package name."""
    prefixes = list(VCPKG_PREFIX if prefixes is None else prefixes)
    libs = list(VCPKG_LIBS if libs is None else libs)
    packages = scan_packages(prefixes, (), CMakePackageFrom.VCPKG)
    for lib in get_available_libs(prefixes, libs):
        for entry in _list_dir(lib):
            package = _entry_package(entry)
            if package is not None:
                packages[package.name] = package
    return packages
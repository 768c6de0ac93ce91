"""Discovery of CMake packages installed under the system prefixes."""

from __future__ import annotations

import glob
import os
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence

from cmakels.package import (
    CMakePackage,
    CMakePackageFrom,
    PackageType,
    cmake_prefixes,
    get_available_libs,
    get_version,
    handle_config_package,
    is_cmake_file,
    is_config_file,
    is_config_version_file,
    split_versioned_name,
)

_COMMON_LIBS = ("lib", "lib32", "lib64", "share")
_UNIX_PLATFORMS = ("linux", "android", "freebsd", "openbsd")


def _is_windows() -> bool:
    return sys.platform in ("win32", "cygwin")


def _is_android() -> bool:
    return sys.platform == "android" or hasattr(sys, "getandroidapilevel")


def _is_unix_family() -> bool:
    return _is_android() or sys.platform.startswith(_UNIX_PLATFORMS)


def platform_libs() -> list[str]:
    """The library directories below a prefix that may hold a ``cmake`` folder."""
    libs = list(_COMMON_LIBS)
    if _is_unix_family():
        libs.append("lib/x86_64-linux-gnu")
    return libs


def get_env_prefix() -> Optional[str]:
    """An extra prefix taken from the environment on platforms that use one."""
    if _is_windows():
        prefix = os.environ.get("MSYSTEM_PREFIX")
        if prefix is not None:
            return prefix
        return os.environ.get("CMAKE_PREFIX_PATH")
    if _is_unix_family() and _is_android():
        return os.environ.get("PREFIX")
    return None


def _canonical(path: Path) -> Path:
    if _is_windows():
        return Path(os.path.abspath(path))
    return Path(path).resolve()


def _read_text(path: Path) -> Optional[str]:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def _config_first(tojump: list[Path]) -> None:
    index = next((i for i, file in enumerate(tojump) if is_config_file(str(file))), None)
    if index:
        tojump[0], tojump[index] = tojump[index], tojump[0]


def _scan_share_dirs(
    prefixes: Iterable[str], origin: CMakePackageFrom
) -> dict[str, CMakePackage]:
    packages: dict[str, CMakePackage] = {}
    for prefix in prefixes:
        pattern = os.path.join(glob.escape(prefix), "share", "*", "cmake", "")
        for directory in sorted(glob.glob(pattern)):
            files = sorted(glob.glob(os.path.join(glob.escape(directory), "*.cmake")))
            tojump: list[Path] = []
            version: Optional[str] = None
            is_package = False
            for file in files:
                tojump.append(_canonical(Path(file)))
                if is_config_file(file):
                    is_package = True
                if is_config_version_file(file):
                    content = _read_text(Path(file))
                    if content is not None:
                        version = get_version(content)
            if not is_package:
                continue
            cmake_dir = Path(directory)
            name = cmake_dir.parent.name
            if not name:
                continue
            _config_first(tojump)
            packages[name] = CMakePackage(
                name=name,
                packagetype=PackageType.DIR,
                location=cmake_dir,
                version=version,
                tojump=tojump,
                origin=origin,
            )
    return packages


def _list_dir(path: Path) -> list[Path]:
    try:
        return sorted(path.iterdir())
    except OSError:
        return []


def _is_real_dir(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()


def _is_real_file(path: Path) -> bool:
    return path.is_file() and not path.is_symlink()


def _scan_lib_dirs(
    prefixes: Iterable[str], libs: Sequence[str], origin: CMakePackageFrom
) -> dict[str, CMakePackage]:
    packages: dict[str, CMakePackage] = {}
    for lib in get_available_libs(prefixes, libs):
        for entry in _list_dir(lib):
            version: Optional[str] = None
            tojump: list[Path] = []
            if _is_real_dir(entry):
                try:
                    children = sorted(entry.iterdir())
                except OSError:
                    continue
                for child in children:
                    if not _is_real_file(child) or not is_cmake_file(child.name):
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
                    continue
                packagetype = PackageType.FILE
                name = config_name
            _config_first(tojump)
            versioned = split_versioned_name(name)
            if versioned is not None:
                name, version = versioned
            packages[name] = CMakePackage(
                name=name,
                packagetype=packagetype,
                location=entry,
                version=version,
                tojump=tojump,
                origin=origin,
            )
    return packages


def scan_packages(
    prefixes: Iterable[str],
    libs: Sequence[str],
    origin: CMakePackageFrom = CMakePackageFrom.SYSTEM,
) -> dict[str, CMakePackage]:
    """Find the packages under ``prefixes``, keyed by package name."""
    prefixes = list(prefixes)
    packages = _scan_share_dirs(prefixes, origin)
    packages.update(_scan_lib_dirs(prefixes, libs, origin))
    return packages


def get_cmake_message_with_prefixes(prefixes: Iterable[str]) -> dict[str, CMakePackage]:
    """Find the system packages under ``prefixes`` using this platform's libs."""
    return scan_packages(prefixes, platform_libs(), CMakePackageFrom.SYSTEM)


def get_cmake_message() -> dict[str, CMakePackage]:
    """Find the system packages under the prefixes cmake reports."""
    return get_cmake_message_with_prefixes(cmake_prefixes())
"""Access to the CMake and pkg-config packages known on this machine."""

from __future__ import annotations

import glob
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

from cmakels import systempackages, vcpkg
from cmakels.package import CMakePackage, CMakePackageFrom, PackageType

QUERY_RULES: list[str] = ["/usr/lib/pkgconfig/*.pc", "/usr/lib/*/pkgconfig/*.pc"]
"""Glob patterns searched for pkg-config files."""


@dataclass(frozen=True)
class PkgConfig:
    """A pkg-config module and the ``.pc`` file describing it."""

    libname: str
    path: Path


def get_pkg_messages(patterns: Optional[Iterable[str]] = None) -> dict[str, PkgConfig]:
    """Find the ``.pc`` files matched by ``patterns``, keyed by module name."""
    patterns = QUERY_RULES if patterns is None else patterns
    packages: dict[str, PkgConfig] = {}
    for pattern in patterns:
        for entry in sorted(glob.glob(pattern)):
            name = os.path.basename(entry)
            if not name.endswith(".pc"):
                continue
            libname = name[: -len(".pc")]
            packages[libname] = PkgConfig(libname=libname, path=Path(entry).absolute())
    return packages


@lru_cache(maxsize=None)
def _system_packages() -> dict[str, CMakePackage]:
    return systempackages.get_cmake_message()


@lru_cache(maxsize=None)
def _vcpkg_packages() -> dict[str, CMakePackage]:
    return vcpkg.get_cmake_message()


class FindPackageFuns:
    """Looks up the packages installed on the system and by vcpkg."""

    def get_cmake_packages(self) -> list[CMakePackage]:
        return list(_system_packages().values()) + list(_vcpkg_packages().values())

    def get_cmake_packages_withkeys(self) -> dict[str, CMakePackage]:
        packages = dict(_system_packages())
        packages.update(_vcpkg_packages())
        return packages

    def get_pkg_config_packages_withkey(self) -> dict[str, PkgConfig]:
        return get_pkg_messages()

    def get_pkg_config_packages(self) -> list[PkgConfig]:
        return list(get_pkg_messages().values())


class FindPackageFunsFake(FindPackageFuns):
    """Serves one fixed package instead of scanning the machine."""

    def fake_cmake_data(self) -> dict[str, CMakePackage]:
        if os.name == "posix":
            location = Path("/usr/share/bash-completion-fake")
            config = location / "bash_completion-fake-config.cmake"
        else:
            location = Path(r"C:\Develop\bash-completion-fake")
            config = location / "bash-completion-fake-config.cmake"
        package = CMakePackage(
            name="bash-completion-fake",
            packagetype=PackageType.DIR,
            location=location,
            version=None,
            tojump=[config],
            origin=CMakePackageFrom.SYSTEM,
        )
        return {package.name: package}

    def get_cmake_packages(self) -> list[CMakePackage]:
        return list(self.fake_cmake_data().values())

    def get_cmake_packages_withkeys(self) -> dict[str, CMakePackage]:
        return self.fake_cmake_data()


@lru_cache(maxsize=None)
def _cached_list() -> tuple[CMakePackage, ...]:
    return tuple(FindPackageFuns().get_cmake_packages())


@lru_cache(maxsize=None)
def _cached_dict() -> dict[str, CMakePackage]:
    return FindPackageFuns().get_cmake_packages_withkeys()


def cached_cmake_packages() -> list[CMakePackage]:
    """All known CMake packages, scanned once."""
    return list(_cached_list())


def cached_cmake_packages_withkeys() -> dict[str, CMakePackage]:
    """All known CMake packages keyed by name, scanned once."""
    return dict(_cached_dict())
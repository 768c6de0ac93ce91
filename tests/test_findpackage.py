import os
from pathlib import Path

from cmakels.findpackage import (
    FindPackageFuns,
    FindPackageFunsFake,
    PkgConfig,
    cached_cmake_packages,
    cached_cmake_packages_withkeys,
    get_pkg_messages,
)
from cmakels.package import CMakePackageFrom, PackageType


def test_fake_data_describes_one_package():
    data = FindPackageFunsFake().fake_cmake_data()
    assert list(data) == ["bash-completion-fake"]
    package = data["bash-completion-fake"]
    assert package.name == "bash-completion-fake"
    assert package.packagetype is PackageType.DIR
    assert package.version is None
    assert package.origin is CMakePackageFrom.SYSTEM
    assert package.tojump[0].parent == package.location


def test_fake_location_on_posix():
    package = FindPackageFunsFake().fake_cmake_data()["bash-completion-fake"]
    if os.name == "posix":
        expected = Path("/usr/share/bash-completion-fake")
    else:
        expected = Path(r"C:\Develop\bash-completion-fake")
    assert package.location == expected


def test_fake_list_matches_mapping():
    fake = FindPackageFunsFake()
    assert fake.get_cmake_packages() == list(fake.get_cmake_packages_withkeys().values())


def test_pkg_messages_from_patterns(tmp_path):
    (tmp_path / "zlib.pc").touch()
    (tmp_path / "libpng.pc").touch()
    (tmp_path / "notes.txt").touch()
    found = get_pkg_messages([str(tmp_path / "*.pc")])
    assert found == {
        "zlib": PkgConfig(libname="zlib", path=(tmp_path / "zlib.pc").absolute()),
        "libpng": PkgConfig(libname="libpng", path=(tmp_path / "libpng.pc").absolute()),
    }


def test_pkg_messages_no_match(tmp_path):
    assert get_pkg_messages([str(tmp_path / "*.pc")]) == {}


def test_pkg_config_list_matches_mapping():
    funs = FindPackageFuns()
    keyed = funs.get_pkg_config_packages_withkey()
    listed = funs.get_pkg_config_packages()
    assert sorted(p.libname for p in listed) == sorted(keyed)
    assert all(keyed[name].libname == name for name in keyed)


def test_cached_packages_are_consistent():
    listed = cached_cmake_packages()
    keyed = cached_cmake_packages_withkeys()
    assert {package.name for package in listed} == set(keyed)
    assert all(package.name == name for name, package in keyed.items())
    assert cached_cmake_packages() == listed
    assert cached_cmake_packages_withkeys() == keyed


def test_cached_mapping_copy_is_independent():
    keyed = cached_cmake_packages_withkeys()
    keyed["placeholder-package"] = None
    assert "placeholder-package" not in cached_cmake_packages_withkeys()
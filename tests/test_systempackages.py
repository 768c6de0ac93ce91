import sys
from pathlib import Path

import pytest

from cmakels.package import CMakePackage, CMakePackageFrom, PackageType
from cmakels.systempackages import (
    get_cmake_message_with_prefixes,
    get_env_prefix,
    platform_libs,
    scan_packages,
)


def _write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


@pytest.fixture
def prefix(tmp_path):
    return tmp_path.resolve()


def test_package_search(prefix):
    share_dir = prefix / "share"
    vulkan_dir = share_dir / "cmake" / "VulkanHeaders"
    vulkan_config = _write(vulkan_dir / "VulkanHeadersConfig.cmake")
    vulkan_version = _write(
        vulkan_dir / "VulkanHeadersConfigVersion.cmake",
        'set(PACKAGE_VERSION "1.3.295")\n',
    )
    ecm_dir = share_dir / "ECM" / "cmake"
    ecm_config = _write(ecm_dir / "ECMConfig.cmake")
    ecm_version = _write(ecm_dir / "ECMConfigVersion.cmake", 'set(PACKAGE_VERSION "6.5.0")\n')

    expected = {
        "VulkanHeaders": CMakePackage(
            name="VulkanHeaders",
            packagetype=PackageType.DIR,
            location=vulkan_dir,
            version="1.3.295",
            tojump=[vulkan_config, vulkan_version],
            origin=CMakePackageFrom.SYSTEM,
        ),
        "ECM": CMakePackage(
            name="ECM",
            packagetype=PackageType.DIR,
            location=ecm_dir,
            version="6.5.0",
            tojump=[ecm_config, ecm_version],
            origin=CMakePackageFrom.SYSTEM,
        ),
    }
    assert get_cmake_message_with_prefixes([str(prefix)]) == expected


def test_config_file_package(prefix):
    config = _write(prefix / "lib" / "cmake" / "foo-config.cmake")
    _write(prefix / "lib" / "cmake" / "helper.cmake")
    packages = scan_packages([str(prefix)], ["lib"])
    assert list(packages) == ["foo"]
    assert packages["foo"].packagetype is PackageType.FILE
    assert packages["foo"].tojump == [config]
    assert packages["foo"].version is None


def test_versioned_directory_name(prefix):
    directory = prefix / "lib" / "cmake" / "boost_atomic-1.86.0"
    _write(directory / "boost_atomic-config.cmake")
    packages = scan_packages([str(prefix)], ["lib"])
    assert packages["boost_atomic"].version == "1.86.0"
    assert packages["boost_atomic"].location == directory


def test_config_swapped_to_front(prefix):
    directory = prefix / "lib" / "cmake" / "Foo"
    first = _write(directory / "AAA.cmake")
    second = _write(directory / "BBB.cmake")
    config = _write(directory / "FooConfig.cmake")
    _write(directory / "notes.txt")
    packages = scan_packages([str(prefix)], ["lib"])
    assert packages["Foo"].tojump == [config, second, first]


def test_share_dir_without_config_is_skipped(prefix):
    _write(prefix / "share" / "Bar" / "cmake" / "BarTargets.cmake")
    assert scan_packages([str(prefix)], ["lib"]) == {}


def test_origin_is_recorded(prefix):
    _write(prefix / "share" / "Baz" / "cmake" / "BazConfig.cmake")
    packages = scan_packages([str(prefix)], [], CMakePackageFrom.VCPKG)
    assert packages["Baz"].origin is CMakePackageFrom.VCPKG


def test_platform_libs_linux(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    assert platform_libs() == ["lib", "lib32", "lib64", "share", "lib/x86_64-linux-gnu"]


def test_platform_libs_mac(monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")
    assert platform_libs() == ["lib", "lib32", "lib64", "share"]


def test_env_prefix_android(monkeypatch):
    monkeypatch.setattr(sys, "platform", "android")
    monkeypatch.setenv("PREFIX", "/data/data/com.termux/files/usr")
    assert get_env_prefix() == "/data/data/com.termux/files/usr"


def test_env_prefix_windows(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.delenv("MSYSTEM_PREFIX", raising=False)
    monkeypatch.setenv("CMAKE_PREFIX_PATH", "C:\\deps")
    assert get_env_prefix() == "C:\\deps"
    monkeypatch.setenv("MSYSTEM_PREFIX", "C:\\msys64\\mingw64")
    assert get_env_prefix() == "C:\\msys64\\mingw64"


def test_env_prefix_mac(monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")
    monkeypatch.setenv("PREFIX", "/somewhere")
    assert get_env_prefix() is None
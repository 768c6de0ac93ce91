"""CMake source parsing, cursor analysis and installed-package discovery."""

__version__ = "0.8.23"

__all__ = ["findpackage", "package", "syntax", "systempackages", "treehelper", "vcpkg"]
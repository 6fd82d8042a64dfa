from .client import RegistryClient
from .directory import DirectorySource
from .layout import package_dir, read_package_version, select_version
from .models import InstalledPackage
from .registry import RegistrySource
from .resolver import PackageSource, build_source

__all__ = [
    "DirectorySource",
    "InstalledPackage",
    "PackageSource",
    "RegistryClient",
    "RegistrySource",
    "build_source",
    "package_dir",
    "read_package_version",
    "select_version",
]

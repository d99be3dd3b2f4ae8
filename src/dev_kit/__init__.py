"""Safe installation of dev-kit skills into AI coding assistants."""

__version__ = "0.1.0"

# Export protocol interfaces for type hints and dependency injection
from dev_kit.protocols import (
    BundleInstaller,
    BundleValidator,
    FileSystem,
)

__all__ = [
    "__version__",
    "BundleInstaller",
    "BundleValidator",
    "FileSystem",
]

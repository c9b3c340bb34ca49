from .Filesystem import Filesystem, FileNotFoundException

__all__ = ["Filesystem", "FileNotFoundException"]

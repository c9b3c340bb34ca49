"""
File Facade
"""
from __future__ import annotations

from .Facade import Facade


class FileFacade(Facade):
    """File facade for accessing the filesystem"""

    @staticmethod
    def get_facade_accessor() -> str:
        return 'files'


# Export the facade instance
File = FileFacade()

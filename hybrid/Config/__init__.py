from .Repository import Repository

__all__ = ["Repository"]

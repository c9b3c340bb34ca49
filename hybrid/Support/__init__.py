from .Arr import Arr
from .Env import Env, env

__all__ = [
    "Arr",
    "Env",
    "env",
]

from __future__ import annotations

import json
import os
import runpy
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Union

PathLike = Union[str, Path]


class FileNotFoundException(FileNotFoundError):
    """Raised when a file the caller requires does not exist."""
    pass


class Filesystem:
    """Local filesystem access used by the bootstrap and cache layers."""

    def exists(self, path: PathLike) -> bool:
        """Determine if a file or directory exists."""
        return Path(path).exists()

    def missing(self, path: PathLike) -> bool:
        """Determine if a file or directory is missing."""
        return not self.exists(path)

    def is_file(self, path: PathLike) -> bool:
        """Determine if the given path is a file."""
        return Path(path).is_file()

    def is_directory(self, path: PathLike) -> bool:
        """Determine if the given path is a directory."""
        return Path(path).is_dir()

    def get(self, path: PathLike) -> str:
        """Get the contents of a file."""
        if not self.is_file(path):
            raise FileNotFoundException(f"File does not exist at path {path}.")

        return Path(path).read_text(encoding='utf-8')

    def get_json(self, path: PathLike) -> Any:
        """Get the decoded JSON contents of a file."""
        return json.loads(self.get(path))

    def require(self, path: PathLike) -> Dict[str, Any]:
        """Execute a Python file and return its module namespace."""
        if not self.is_file(path):
            raise FileNotFoundException(f"File does not exist at path {path}.")

        return runpy.run_path(str(path))

    def put(self, path: PathLike, contents: str) -> int:
        """Write the contents of a file."""
        return Path(path).write_text(contents, encoding='utf-8')

    def put_json(self, path: PathLike, data: Any) -> None:
        """Atomically write data as pretty-printed JSON."""
        self.replace(path, json.dumps(data, indent=4, default=str))

    def replace(self, path: PathLike, content: str) -> None:
        """Write the contents of a file, replacing it atomically if it already exists."""
        target = Path(path)
        self.ensure_directory_exists(target.parent)

        fd, temp_path = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as handle:
                handle.write(content)
            os.replace(temp_path, target)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    def delete(self, paths: Union[PathLike, List[PathLike]]) -> bool:
        """Delete the file(s) at the given path(s)."""
        items = paths if isinstance(paths, list) else [paths]
        success = True

        for item in items:
            try:
                Path(item).unlink()
            except OSError:
                success = False

        return success

    def make_directory(self, path: PathLike, mode: int = 0o755, recursive: bool = False) -> bool:
        """Create a directory."""
        Path(path).mkdir(mode=mode, parents=recursive, exist_ok=False)
        return True

    def ensure_directory_exists(self, path: PathLike, mode: int = 0o755) -> None:
        """Ensure a directory exists, creating parents as needed."""
        if not self.is_directory(path):
            Path(path).mkdir(mode=mode, parents=True, exist_ok=True)

    def files(self, directory: PathLike, pattern: str = '*') -> List[Path]:
        """Get the files directly inside a directory, sorted by name."""
        root = Path(directory)
        if not root.is_dir():
            return []
        return sorted(p for p in root.glob(pattern) if p.is_file())

    def all_files(self, directory: PathLike, pattern: str = '*') -> List[Path]:
        """Get every file below a directory, sorted by path."""
        root = Path(directory)
        if not root.is_dir():
            return []
        return sorted(p for p in root.rglob(pattern) if p.is_file())

from __future__ import annotations

import os
import shutil
import tempfile
import threading
from pathlib import Path

from .errors import FileSystemError


class FileSystem:
    """Minimal filesystem capability shared by the build pipeline and the preview server.

    Every method raises FileSystemError instead of OSError. ``list_files`` returns the
    regular files under a directory, recursively, sorted by their POSIX path.
    """

    def exists(self, path: Path) -> bool:
        raise NotImplementedError

    def is_file(self, path: Path) -> bool:
        raise NotImplementedError

    def is_dir(self, path: Path) -> bool:
        raise NotImplementedError

    def list_files(self, root: Path) -> list[Path]:
        raise NotImplementedError

    def read_bytes(self, path: Path) -> bytes:
        raise NotImplementedError

    def write_bytes(self, path: Path, data: bytes) -> None:
        raise NotImplementedError

    def mkdir(self, path: Path) -> None:
        raise NotImplementedError

    def remove_tree(self, path: Path) -> None:
        raise NotImplementedError

    def copy_file(self, src: Path, dest: Path) -> None:
        self.write_bytes(dest, self.read_bytes(src))

    def read_text(self, path: Path) -> str:
        data = self.read_bytes(path)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FileSystemError(path, f"not valid UTF-8 ({exc.reason})") from exc

    def write_text(self, path: Path, text: str) -> None:
        self.write_bytes(path, text.encode("utf-8"))


class LocalFileSystem(FileSystem):
    # Paths that cannot be stat()ed (too long, no permission) count as absent.
    def exists(self, path: Path) -> bool:
        try:
            return Path(path).exists()
        except OSError:
            return False

    def is_file(self, path: Path) -> bool:
        try:
            return Path(path).is_file()
        except OSError:
            return False

    def is_dir(self, path: Path) -> bool:
        try:
            return Path(path).is_dir()
        except OSError:
            return False

    def list_files(self, root: Path) -> list[Path]:
        root = Path(root)
        if not self.is_dir(root):
            raise FileSystemError(root, "directory not found")
        try:
            files = [path for path in root.rglob("*") if path.is_file()]
        except OSError as exc:
            raise FileSystemError(root, exc.strerror or str(exc)) from exc
        return sorted(files, key=lambda p: p.as_posix())

    def read_bytes(self, path: Path) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as exc:
            raise FileSystemError(path, exc.strerror or str(exc)) from exc

    def write_bytes(self, path: Path, data: bytes) -> None:
        path = Path(path)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise FileSystemError(path, exc.strerror or str(exc)) from exc

    def mkdir(self, path: Path) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileSystemError(path, exc.strerror or str(exc)) from exc

    def remove_tree(self, path: Path) -> None:
        path = Path(path)
        if not self.exists(path):
            return
        try:
            shutil.rmtree(path)
        except OSError as exc:
            raise FileSystemError(path, exc.strerror or str(exc)) from exc

    def copy_file(self, src: Path, dest: Path) -> None:
        try:
            shutil.copy2(src, dest)
        except OSError as exc:
            raise FileSystemError(src, exc.strerror or str(exc)) from exc


class MemoryFileSystem(FileSystem):
    """In-memory FileSystem for tests. Paths are compared by their POSIX form."""

    def __init__(self, files: dict | None = None):
        self._files: dict[str, bytes] = {}
        self._dirs: set[str] = set()
        self._lock = threading.Lock()
        for name, data in (files or {}).items():
            path = Path(name)
            self.mkdir(path.parent)
            if isinstance(data, str):
                data = data.encode("utf-8")
            self._files[path.as_posix()] = data

    @staticmethod
    def _key(path: Path) -> str:
        return Path(path).as_posix()

    def exists(self, path: Path) -> bool:
        key = self._key(path)
        return key in self._files or key in self._dirs

    def is_file(self, path: Path) -> bool:
        return self._key(path) in self._files

    def is_dir(self, path: Path) -> bool:
        return self._key(path) in self._dirs

    def list_files(self, root: Path) -> list[Path]:
        key = self._key(root)
        if key not in self._dirs:
            raise FileSystemError(Path(root), "directory not found")
        prefix = key.rstrip("/") + "/"
        with self._lock:
            names = sorted(name for name in self._files if name.startswith(prefix))
        return [Path(name) for name in names]

    def read_bytes(self, path: Path) -> bytes:
        key = self._key(path)
        if key in self._dirs:
            raise FileSystemError(Path(path), "is a directory")
        try:
            return self._files[key]
        except KeyError:
            raise FileSystemError(Path(path), "no such file") from None

    def write_bytes(self, path: Path, data: bytes) -> None:
        key = self._key(path)
        parent = self._key(Path(path).parent)
        if parent not in self._dirs:
            raise FileSystemError(Path(path), "parent directory does not exist")
        if key in self._dirs:
            raise FileSystemError(Path(path), "is a directory")
        with self._lock:
            self._files[key] = bytes(data)

    def mkdir(self, path: Path) -> None:
        path = Path(path)
        with self._lock:
            for item in [path, *path.parents]:
                key = item.as_posix()
                if key in self._files:
                    raise FileSystemError(item, "not a directory")
                self._dirs.add(key)

    def remove_tree(self, path: Path) -> None:
        key = self._key(path)
        prefix = key.rstrip("/") + "/"
        with self._lock:
            self._files = {
                name: data for name, data in self._files.items() if name != key and not name.startswith(prefix)
            }
            self._dirs = {name for name in self._dirs if name != key and not name.startswith(prefix)}

from __future__ import annotations

from pathlib import Path
from typing import Optional


class HypertextError(Exception):
    """Base class for every error a build or preview can report."""


class FileSystemError(HypertextError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class MissingTemplateKey(HypertextError):
    def __init__(self, source_path: Path):
        self.source_path = source_path
        super().__init__(f"Missing template in {source_path}")


class TemplateNotFound(HypertextError):
    def __init__(self, template_path: Path, source_path: Optional[Path] = None):
        self.template_path = template_path
        self.source_path = source_path
        message = f"Template not found: {template_path}"
        if source_path is not None:
            message += f" (referenced by {source_path})"
        super().__init__(message)


class MarkdownParseError(HypertextError):
    def __init__(self, source_path: Path, reason: str):
        self.source_path = source_path
        self.reason = reason
        super().__init__(f"Could not parse {source_path}: {reason}")


class ConfigError(HypertextError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config file {path}: {reason}")

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import markdown

from .errors import MarkdownParseError
from .fs import FileSystem

MARKDOWN_SUFFIX = ".md"
FRONT_MATTER_FENCE = "---"
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite"]
MARKDOWN_EXTENSION_CONFIGS = {"codehilite": {"guess_lang": False}}


@dataclass(frozen=True)
class SourceDocument:
    path: Path
    text: str


@dataclass(frozen=True)
class ParsedDocument:
    source_path: Path
    metadata: dict[str, str]
    body_html: str


def is_hidden(path: Path) -> bool:
    return any(part.startswith(".") for part in path.parts)


def discover_documents(fs: FileSystem, content_root: Path) -> Iterator[Path]:
    """Yield every markdown file under ``content_root`` in lexicographic path order.

    Hidden files and anything inside hidden directories are skipped. A missing
    content root raises FileSystemError immediately, before iteration starts.
    """
    files = fs.list_files(content_root)
    return (
        path
        for path in files
        if path.suffix.lower() == MARKDOWN_SUFFIX and not is_hidden(path.relative_to(content_root))
    )


def read_source(fs: FileSystem, path: Path) -> SourceDocument:
    data = fs.read_bytes(path)
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MarkdownParseError(path, f"not valid UTF-8 ({exc.reason})") from exc
    return SourceDocument(path=path, text=text.lstrip("\ufeff"))


def parse_front_matter(text: str, source_path: Path) -> tuple[dict[str, str], str]:
    lines = text.splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_FENCE:
        return {}, text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == FRONT_MATTER_FENCE:
            end = i
            break
    if end is None:
        raise MarkdownParseError(source_path, "front matter block is not closed")

    meta = {}
    for number, line in enumerate(lines[1:end], start=2):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if ":" not in line:
            raise MarkdownParseError(source_path, f"line {number}: expected 'key: value'")
        key, value = line.split(":", 1)
        key = key.strip()
        if not key:
            raise MarkdownParseError(source_path, f"line {number}: empty key")
        meta[key] = value.strip()
    body = "\n".join(lines[end + 1 :])
    return meta, body


def render_markdown(body: str, source_path: Path) -> str:
    # Markdown instances keep state between conversions, so each document gets its own.
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS, extension_configs=MARKDOWN_EXTENSION_CONFIGS)
    try:
        return md.convert(body)
    except Exception as exc:  # pragma: no cover - depends on parser
        raise MarkdownParseError(source_path, str(exc)) from exc


def process_document(source: SourceDocument) -> ParsedDocument:
    meta, body = parse_front_matter(source.text, source.path)
    return ParsedDocument(
        source_path=source.path,
        metadata=meta,
        body_html=render_markdown(body, source.path),
    )

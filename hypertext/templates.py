from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from pathlib import Path

from .content import ParsedDocument
from .errors import MissingTemplateKey, TemplateNotFound
from .fs import FileSystem

TEMPLATE_KEY = "template"
CONTENT_KEY = "content"
PLACEHOLDER_RE = re.compile(r"\{\{\s*([\w.-]+)\s*\}\}")

# Insertion-ordered; see build_context for the collision rule.
RenderContext = dict[str, str]


@dataclass(frozen=True)
class ResolvedTemplate:
    name: str
    path: Path
    contents: str


class TemplateResolver:
    """Looks up the template a document names in its ``template`` metadata key.

    Template text is read once per path and reused for later documents.
    """

    def __init__(self, fs: FileSystem, templates_root: Path):
        self.fs = fs
        self.templates_root = templates_root
        self._cache: dict[Path, str] = {}
        self._lock = threading.Lock()

    def resolve(self, document: ParsedDocument) -> ResolvedTemplate:
        name = document.metadata.get(TEMPLATE_KEY)
        if name is None:
            raise MissingTemplateKey(document.source_path)
        path = self.templates_root / name
        with self._lock:
            contents = self._cache.get(path)
        if contents is None:
            if not self.fs.is_file(path):
                raise TemplateNotFound(path, document.source_path)
            contents = self.fs.read_text(path)
            with self._lock:
                self._cache[path] = contents
        return ResolvedTemplate(name=name, path=path, contents=contents)


def build_context(document: ParsedDocument) -> RenderContext:
    """Merge a document's metadata with its rendered body.

    Metadata goes in first and ``content`` is set last, so a front matter key
    named ``content`` is always replaced by the rendered body.
    """
    context: RenderContext = {}
    for key, value in document.metadata.items():
        context[key] = value
    context[CONTENT_KEY] = document.body_html
    return context


def render_template(template: str, context: RenderContext) -> str:
    # One pass, so placeholders inside substituted values are left alone.
    def repl(match: re.Match) -> str:
        key = match.group(1)
        if key in context:
            return context[key]
        return match.group(0)

    return PLACEHOLDER_RE.sub(repl, template)

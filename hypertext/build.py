from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import SiteConfig
from .content import discover_documents, process_document, read_source
from .fs import FileSystem, LocalFileSystem
from .output import mirror_assets, output_path_for, reset_output_dir, write_page
from .templates import TemplateResolver, build_context, render_template


@dataclass(frozen=True)
class RenderedPage:
    source_path: Path
    output_path: Path
    html: str


@dataclass
class BuildResult:
    pages: list[Path] = field(default_factory=list)
    assets: list[Path] = field(default_factory=list)


def render_page(fs: FileSystem, resolver: TemplateResolver, content_dir: Path, source_path: Path) -> RenderedPage:
    document = process_document(read_source(fs, source_path))
    template = resolver.resolve(document)
    html_text = render_template(template.contents, build_context(document))
    return RenderedPage(
        source_path=source_path,
        output_path=output_path_for(source_path, content_dir),
        html=html_text,
    )


def build_site(config: SiteConfig, fs: Optional[FileSystem] = None) -> BuildResult:
    """Rebuild the whole output tree from the current sources.

    All pages are rendered before any of them is written, so the first error
    (in discovery order) aborts the build with no page files on disk.
    """
    fs = fs or LocalFileSystem()
    content_dir = config.content_dir
    output_dir = config.output_dir
    sources = list(discover_documents(fs, content_dir))

    reset_output_dir(fs, output_dir, config.root)
    result = BuildResult()
    for asset_dir in (config.static_dir, config.styles_dir):
        result.assets.extend(mirror_assets(fs, asset_dir, output_dir))

    resolver = TemplateResolver(fs, config.templates_dir)

    def render(path: Path) -> RenderedPage:
        return render_page(fs, resolver, content_dir, path)

    workers = config.workers(len(sources))
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            pages = list(executor.map(render, sources))
    else:
        pages = [render(path) for path in sources]

    for page in pages:
        write_page(fs, output_dir, page.output_path, page.html)
        result.pages.append(page.output_path)
    return result

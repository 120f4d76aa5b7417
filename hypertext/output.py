from __future__ import annotations

from pathlib import Path

from .content import MARKDOWN_SUFFIX
from .errors import FileSystemError
from .fs import FileSystem

HTML_SUFFIX = ".html"


def output_path_for(source_path: Path, content_root: Path) -> Path:
    """Map ``content/a/b.md`` to ``a/b.html``, relative to the output root."""
    rel = source_path.relative_to(content_root)
    if rel.suffix.lower() == MARKDOWN_SUFFIX:
        rel = rel.with_suffix(HTML_SUFFIX)
    return rel


def write_page(fs: FileSystem, output_dir: Path, rel_path: Path, html_text: str) -> Path:
    dest = output_dir / rel_path
    fs.mkdir(dest.parent)
    fs.write_text(dest, html_text)
    return dest


def reset_output_dir(fs: FileSystem, output_dir: Path, project_root: Path) -> None:
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if output_resolved == root_resolved:
        raise FileSystemError(output_dir, "refusing to clean project root")
    if not output_resolved.is_relative_to(root_resolved):
        raise FileSystemError(output_dir, "refusing to clean output directory outside project root")
    fs.remove_tree(output_dir)
    fs.mkdir(output_dir)


def mirror_assets(fs: FileSystem, asset_dir: Path, output_dir: Path) -> list[Path]:
    """Copy every file under ``asset_dir`` to the same relative path in ``output_dir``.

    A missing asset directory copies nothing. Existing destination files are overwritten.
    """
    if not fs.is_dir(asset_dir):
        return []
    copied = []
    for src in fs.list_files(asset_dir):
        rel = src.relative_to(asset_dir)
        dest = output_dir / rel
        fs.mkdir(dest.parent)
        fs.copy_file(src, dest)
        copied.append(rel)
    return copied

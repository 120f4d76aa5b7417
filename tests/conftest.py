from pathlib import Path

import pytest

from hypertext.config import SiteConfig

PAGE_TEMPLATE = "<html><head><title>{{ title }}</title></head><body>{{ content }}</body></html>"


def write_files(root: Path, files: dict) -> None:
    for name, data in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, bytes):
            path.write_bytes(data)
        else:
            path.write_text(data, encoding="utf-8")


@pytest.fixture
def make_site(tmp_path):
    """Lay out a project under tmp_path and return its SiteConfig."""

    def factory(files: dict, **overrides) -> SiteConfig:
        write_files(tmp_path, files)
        (tmp_path / "content").mkdir(exist_ok=True)
        return SiteConfig(root=tmp_path, **overrides)

    return factory


@pytest.fixture
def basic_files():
    return {
        "templates/page.html": PAGE_TEMPLATE,
        "content/index.md": "---\ntemplate: page.html\ntitle: Home\n---\n# Welcome\n",
        "content/about.md": "---\ntemplate: page.html\ntitle: About\n---\nAbout us.\n",
        "content/blog/first.md": "---\ntemplate: page.html\ntitle: First\n---\nHello *world*.\n",
        "static/img/logo.png": b"\x89PNG\r\n\x1a\nfake",
        "styles/site.css": "body { margin: 0; }\n",
    }

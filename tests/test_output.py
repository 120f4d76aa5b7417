"""Tests for output path mapping, page writing and asset mirroring."""

from pathlib import Path

import pytest

from hypertext.errors import FileSystemError
from hypertext.fs import LocalFileSystem, MemoryFileSystem
from hypertext.output import mirror_assets, output_path_for, reset_output_dir, write_page

CONTENT = Path("/site/content")
OUTPUT = Path("/site/public")


class TestOutputPathFor:
    def test_nested_document(self):
        assert output_path_for(CONTENT / "a/b.md", CONTENT) == Path("a/b.html")

    def test_index_document(self):
        assert output_path_for(CONTENT / "index.md", CONTENT) == Path("index.html")

    def test_uppercase_extension(self):
        assert output_path_for(CONTENT / "README.MD", CONTENT) == Path("README.html")

    def test_only_trailing_extension_changes(self):
        assert output_path_for(CONTENT / "notes.md.d/x.md", CONTENT) == Path("notes.md.d/x.html")


class TestWritePage:
    def test_creates_intermediate_directories(self):
        fs = MemoryFileSystem()
        dest = write_page(fs, OUTPUT, Path("a/b/c.html"), "<p>hi</p>")
        assert dest == OUTPUT / "a/b/c.html"
        assert fs.read_text(dest) == "<p>hi</p>"

    def test_existing_directory_is_fine(self):
        fs = MemoryFileSystem()
        write_page(fs, OUTPUT, Path("a/one.html"), "1")
        write_page(fs, OUTPUT, Path("a/two.html"), "2")
        assert fs.list_files(OUTPUT) == [OUTPUT / "a/one.html", OUTPUT / "a/two.html"]

    def test_overwrites_existing_file(self, tmp_path):
        fs = LocalFileSystem()
        write_page(fs, tmp_path, Path("x.html"), "old")
        write_page(fs, tmp_path, Path("x.html"), "new")
        assert (tmp_path / "x.html").read_text(encoding="utf-8") == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["x.html"]


class TestResetOutputDir:
    def test_removes_previous_output(self, tmp_path):
        output = tmp_path / "public"
        (output / "old").mkdir(parents=True)
        (output / "old" / "stale.html").write_text("stale")
        reset_output_dir(LocalFileSystem(), output, tmp_path)
        assert output.is_dir()
        assert list(output.iterdir()) == []

    def test_creates_missing_output(self, tmp_path):
        reset_output_dir(LocalFileSystem(), tmp_path / "public", tmp_path)
        assert (tmp_path / "public").is_dir()

    def test_refuses_project_root(self, tmp_path):
        with pytest.raises(FileSystemError):
            reset_output_dir(LocalFileSystem(), tmp_path, tmp_path)

    def test_refuses_directory_outside_project(self, tmp_path):
        project = tmp_path / "project"
        project.mkdir()
        with pytest.raises(FileSystemError):
            reset_output_dir(LocalFileSystem(), tmp_path / "elsewhere", project)


class TestMirrorAssets:
    def test_copies_tree_byte_for_byte(self):
        fs = MemoryFileSystem(
            {
                "/site/static/img/logo.png": b"\x89PNG\x00\x01",
                "/site/static/robots.txt": "User-agent: *\n",
            }
        )
        fs.mkdir(OUTPUT)
        copied = mirror_assets(fs, Path("/site/static"), OUTPUT)
        assert copied == [Path("img/logo.png"), Path("robots.txt")]
        assert fs.read_bytes(OUTPUT / "img/logo.png") == b"\x89PNG\x00\x01"
        assert fs.read_text(OUTPUT / "robots.txt") == "User-agent: *\n"

    def test_overwrites_existing_destination(self):
        fs = MemoryFileSystem({"/site/styles/site.css": "new", "/site/public/site.css": "old"})
        mirror_assets(fs, Path("/site/styles"), OUTPUT)
        assert fs.read_text(OUTPUT / "site.css") == "new"

    def test_missing_asset_directory_copies_nothing(self):
        fs = MemoryFileSystem()
        fs.mkdir(OUTPUT)
        assert mirror_assets(fs, Path("/site/static"), OUTPUT) == []

    def test_failed_copy_aborts(self):
        class BrokenFileSystem(MemoryFileSystem):
            def copy_file(self, src, dest):
                raise FileSystemError(src, "permission denied")

        fs = BrokenFileSystem({"/site/static/a.txt": "a"})
        with pytest.raises(FileSystemError):
            mirror_assets(fs, Path("/site/static"), OUTPUT)

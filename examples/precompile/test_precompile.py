"""Tests for the precompile example."""

from pathlib import Path


class TestPrecompileApp:
    def test_writes_pages(self, example_app, tmp_path: Path) -> None:
        written = example_app.build(tmp_path)
        names = sorted(p.relative_to(tmp_path).as_posix() for p in written)
        assert names == ["_layout.html", "blog/latest.html", "index.html"]

    def test_index_lists_posts(self, example_app, tmp_path: Path) -> None:
        example_app.build(tmp_path)
        index = (tmp_path / "index.html").read_text(encoding="utf-8")
        assert "<h1>Static Blog</h1>" in index
        assert '<li><a href="blog/first.html">First Post</a></li>' in index

    def test_nested_page(self, example_app, tmp_path: Path) -> None:
        example_app.build(tmp_path)
        latest = (tmp_path / "blog" / "latest.html").read_text(encoding="utf-8")
        assert "<article><h1>First Post</h1></article>" in latest

    def test_whitespace_only_output_skipped(self, example_app, tmp_path: Path) -> None:
        example_app.build(tmp_path)
        assert not (tmp_path / "_macros.txt").exists()

    def test_sources_untouched(self, example_app, example_dir: Path, tmp_path: Path) -> None:
        example_app.build(tmp_path)
        assert (example_dir / "site" / "_macros.txt").exists()

"""Tests for the file_loader example."""


class TestFileLoaderApp:
    """Verify the file_loader example renders correctly."""

    def test_home_page(self, example_app) -> None:
        out = example_app.home_output
        assert "<title>Welcome | My Site</title>" in out
        assert "<h1>Welcome</h1>" in out
        assert "template inheritance" in out

    def test_about_page_uses_default(self, example_app) -> None:
        out = example_app.about_output
        assert "<title>About Us | My Site</title>" in out
        assert "<p>Nothing to see here.</p>" in out

    def test_active_nav_item(self, example_app) -> None:
        assert '<a href="/" class="active">Home</a>' in example_app.home_output
        assert '<a href="/about" class="active">About</a>' in example_app.about_output
        assert '<a href="/about">About</a>' in example_app.home_output

    def test_no_tags_left(self, example_app) -> None:
        for out in (example_app.home_output, example_app.about_output):
            assert "{%" not in out
            assert "{{" not in out

    def test_templates_listed(self, example_app) -> None:
        names = example_app.env.loader.list_templates()
        assert "partials/nav.html" in names

    def test_loader_rooted_at_templates(self, example_app, example_dir) -> None:
        assert example_app.env.loader.roots == [example_dir / "templates"]

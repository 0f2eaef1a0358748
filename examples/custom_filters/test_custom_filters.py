"""Tests for the custom_filters example."""


class TestCustomFiltersApp:
    """Verify custom filters, tests and directives."""

    def test_directive(self, example_app) -> None:
        assert example_app.output.startswith("[Invoice #7]\n")

    def test_filters(self, example_app) -> None:
        assert "2 items" in example_app.output
        assert "- Widget A: $39.98" in example_app.output
        assert "- Widget B: $5.00" in example_app.output
        assert "Total: EUR 1,234.56" in example_app.output

    def test_custom_test(self, example_app) -> None:
        assert "Lucky invoice number!" in example_app.output
        assert "Lucky" not in example_app.template.render(number=8, items=[], total=0)

    def test_filter_functions(self, example_app) -> None:
        assert example_app.money(3) == "$3.00"
        assert example_app.pluralize(1, "a", "b") == "a"

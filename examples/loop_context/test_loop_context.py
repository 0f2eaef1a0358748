"""Tests for the loop_context example."""


class TestLoopContextApp:
    def test_rows(self, example_app) -> None:
        out = example_app.table_output
        assert '<tr class="odd"><td>1/3</td><td>alpha</td></tr>' in out
        assert '<tr class="even"><td>2/3</td><td>beta</td></tr>' in out
        assert '<td>gamma</td><td>last</td></tr>' in out

    def test_key_value_iteration(self, example_app) -> None:
        assert example_app.settings_output == "debug=true; workers=4"

    def test_empty_rows(self, example_app) -> None:
        assert example_app.table.render(rows=[]) == "<table>\n</table>"

"""Loop context -- the ``loop`` variable inside ``{% for %}``.

Shows loop.index, loop.first/last, loop.cycle and key/value iteration over
a mapping.

Run:
    python app.py
"""

from tagsplice import Environment

env = Environment()

table = env.from_string("""\
<table>
{% for row in rows %}  <tr class="{{ loop.cycle('odd', 'even') }}">\
<td>{{ loop.index }}/{{ loop.length }}</td><td>{{ row }}</td>\
{% if loop.last %}<td>last</td>{% endif %}</tr>
{% endfor %}</table>""")

settings = env.from_string(
    "{% for key, value in options %}{{ key }}={{ value }}{% if not loop.last %}; {% endif %}{% endfor %}"
)

table_output = table.render(rows=["alpha", "beta", "gamma"])
settings_output = settings.render(options={"debug": True, "workers": 4})


def main() -> None:
    print(table_output)
    print(settings_output)


if __name__ == "__main__":
    main()

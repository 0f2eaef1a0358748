"""Custom filters, tests and directives -- extending tagsplice.

Demonstrates add_filter(), add_test() and add_directive() for building
domain-specific template helpers.

Run:
    python app.py
"""

from tagsplice import Environment

env = Environment()


def money(amount: float, currency: str = "$") -> str:
    """Format amount as currency."""
    return f"{currency}{amount:,.2f}"


env.add_filter("money", money)


def pluralize(n: int, singular: str, plural: str) -> str:
    """Return singular or plural form based on count."""
    return singular if n == 1 else plural


env.add_filter("pluralize", pluralize)


def is_prime(n: int) -> bool:
    """Test if integer is prime."""
    if n < 2:
        return False
    return all(n % i != 0 for i in range(2, int(n**0.5) + 1))


env.add_test("prime", is_prime)


def stamp(rest: str, scope) -> str:
    """``{% stamp LABEL %}`` renders the label with the invoice number."""
    return f"[{rest or 'INVOICE'} #{scope.get('number', '?')}]"


env.add_directive("stamp", stamp)

template = env.from_string("""\
{% stamp Invoice %}
{{ item_count }} {{ item_count | pluralize('item', 'items') }}
{% for item in items %}- {{ item.name }}: {{ (item.price * item.qty) | money }}
{% endfor %}Total: {{ total | money('EUR ') }}
{% if number is prime %}Lucky invoice number!{% endif %}
""")

output = template.render(
    number=7,
    total=1234.56,
    item_count=2,
    items=[
        {"name": "Widget A", "price": 19.99, "qty": 2},
        {"name": "Widget B", "price": 5.00, "qty": 1},
    ],
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()

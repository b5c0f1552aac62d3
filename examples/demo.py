"""Demonstration of the hermes template engine.

Registers two variables and a custom ``multiply`` function, then renders a
template mixing built-ins, literals, variables, a missing variable and the
custom function.

Run it with:
    python examples/demo.py
"""

from collections.abc import Sequence

import hermes

# Registry with room for 10 variables
registry = hermes.Registry(10)
registry.add_variable("name", hermes.Text("liudao"))
registry.add_variable("len", hermes.Integer(10))


@registry.function()
def multiply(args: Sequence[hermes.Value]) -> hermes.Value:
    """Multiply every numeric argument, starting from 1.0. Other values are skipped."""
    product = 1.0
    for arg in args:
        match arg:
            case hermes.Integer(number) | hermes.Float(number):
                product *= number
    return hermes.Float(product)


template = '${hostname()}+"dd"+true+${name}+${invalid}+${random_str(${len})}+${multiply(1,-2.5,3)}'

if __name__ == "__main__":
    print(f"parse result is: {hermes.render(template, registry)}")  # noqa: T201

    for index, item in enumerate(hermes.evaluate(template, registry)):
        if not item.ok:
            print(f"item {index} failed: [{item.error.kind}] {item.error.message}")  # noqa: T201

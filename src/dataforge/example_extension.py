"""Example extension.

Shows how a third party packages generators as an extension. It is
published through the ``dataforge.extensions`` entry point of this
distribution:

```toml
[project.entry-points."dataforge.extensions"]
example = "dataforge.example_extension:ExampleExtension"
```
"""

import string
from typing import ClassVar, List, Tuple

from dataforge.context import GenerationContext
from dataforge.extension import DataForgeExtension
from dataforge.factory import GeneratorType
from dataforge.generator import DataGenerator


class CustomValueGenerator(DataGenerator[str]):
    """``prefix`` followed by ``length`` random uppercase letters."""

    name = "custom_value"
    supported_parameters = ("prefix", "length")

    def generate(self, context: GenerationContext) -> str:
        prefix = self._param(context, "prefix", "CUSTOM", str)
        length = self._param(context, "length", 8, int)
        rng = self._rng(context)
        return prefix + "".join(rng.choice(string.ascii_uppercase) for _ in range(max(length, 0)))


class ProductCodeGenerator(DataGenerator[str]):
    """Product codes such as ``BOOKS-00042``."""

    name = "product_code"
    supported_parameters = ("category", "id")

    CATEGORIES: ClassVar[Tuple[str, ...]] = ("Electronics", "Clothing", "Books", "Home", "Sports")

    def generate(self, context: GenerationContext) -> str:
        rng = self._rng(context)
        category = self._param(context, "category", rng.choice(self.CATEGORIES), str)
        product_id = self._param(context, "id", rng.randrange(10000), int)
        return f"{category.upper()}-{product_id:05d}"


class ExampleExtension(DataForgeExtension):
    """Example extension demonstrating entry point integration."""

    name = "example-extension"
    description = "Example extension demonstrating entry point integration"
    version = "1.0.0"
    priority = 100

    def get_generator_classes(self) -> List[GeneratorType]:
        return [CustomValueGenerator, ProductCodeGenerator]


__all__ = ["CustomValueGenerator", "ProductCodeGenerator", "ExampleExtension"]

"""Generator contract.

A generator turns a :class:`~dataforge.context.GenerationContext` into one
synthetic value. Generators are registered in a
:class:`~dataforge.factory.GeneratorFactory` under their declared ``name``.

Example:
    ```python
    from dataforge import DataGenerator, GenerationContext

    class SkuGenerator(DataGenerator[str]):
        name = "sku"
        supported_parameters = ("prefix",)

        def generate(self, context: GenerationContext) -> str:
            prefix = self._param(context, "prefix", "SKU", str)
            return f"{prefix}-{context.index:06d}"
    ```
"""

import random
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, List, Tuple, TypeVar

from dataforge.context import GenerationContext
from dataforge.exceptions import ParameterTypeError

T = TypeVar("T")


class DataGenerator(ABC, Generic[T]):
    """Abstract base class for data generators.

    Subclasses implement :meth:`generate`. ``generate`` must not touch global
    state other than the generator's own random source, and repeated calls
    with independent contexts must not leak state into each other. A
    generator that keeps counters or caches documents them and clears them
    in :meth:`reset`.

    Class attributes:
        name: Registry key. Generators without a name can only be used by
            direct construction.
        supported_parameters: Parameter names the generator reads. Purely
            informational.
        shared: When True the factory builds one instance per registration
            and hands it to every caller. Only for stateless generators.
    """

    name: ClassVar[str | None] = None
    supported_parameters: ClassVar[Tuple[str, ...]] = ()
    shared: ClassVar[bool] = False

    @abstractmethod
    def generate(self, context: GenerationContext) -> T:
        """Generate a single value.

        Args:
            context: Parameters and index for this call

        Returns:
            The generated value

        Raises:
            ParameterTypeError: If a parameter has an unusable type
        """
        ...

    def get_name(self) -> str | None:
        """Get the registry name of this generator."""
        return self.name

    def get_supported_parameters(self) -> List[str]:
        """Get the parameter names this generator understands."""
        return list(self.supported_parameters)

    def reset(self) -> None:
        """Clear per-generator counters and caches."""

    def _rng(self, context: GenerationContext) -> random.Random:
        """Pick the random source for a call.

        A seeded context wins so that output is reproducible.
        """
        if context.seed is not None:
            return context.random
        rng = self.__dict__.get("_random")
        if rng is None:
            rng = self._random = random.Random()
        return rng

    def _param(
        self,
        context: GenerationContext,
        key: str,
        default: Any,
        expected_type: type,
    ) -> Any:
        """Read a parameter and coerce it to ``expected_type``.

        Args:
            context: Generation context
            key: Parameter name
            default: Value used when the parameter is absent
            expected_type: One of ``str``, ``int``, ``float`` or ``bool``

        Returns:
            The coerced value

        Raises:
            ParameterTypeError: If the value cannot be coerced
        """
        value = context.get_parameter(key, default)
        if isinstance(value, expected_type) and not (
            expected_type is int and isinstance(value, bool)
        ):
            return value

        try:
            if expected_type is bool:
                return _to_bool(value)
            if expected_type is int and isinstance(value, float) and not value.is_integer():
                raise ValueError("non-integral float")
            return expected_type(value)
        except (TypeError, ValueError) as e:
            raise ParameterTypeError(
                f"Parameter '{key}' of generator '{self.get_name()}' expects "
                f"{expected_type.__name__}, got {type(value).__name__}",
                context={
                    "generator": self.get_name(),
                    "parameter": key,
                    "value": value,
                    "expected": expected_type.__name__,
                },
            ) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.get_name()!r})"


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1"):
            return True
        if lowered in ("false", "no", "0"):
            return False
        raise ValueError(f"not a boolean: {value!r}")
    if isinstance(value, (int, float)):
        return bool(value)
    raise TypeError(f"not a boolean: {value!r}")


__all__ = ["DataGenerator"]

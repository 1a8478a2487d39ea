"""Per-call parameter context handed to generators."""

import copy
import random
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class GenerationContext:
    """Parameters and sequence index for a single generation request.

    A context is built by the caller for each request and read by the
    generator. Parameter lookups never fail: a missing key yields the
    caller-supplied default.

    Attributes:
        index: Generation index supplied by the caller
        parameters: Parameter values by name
        seed: Optional seed; when set, ``random`` is seeded from it

    Example:
        ```python
        context = GenerationContext(parameters={"prefix": "TEST"})
        context.set_parameter("length", 5)
        context.get_parameter("prefix", "CUSTOM")
        # 'TEST'
        context.get_parameter("missing", "fallback")
        # 'fallback'
        ```
    """

    index: int = 0
    parameters: Dict[str, Any] = field(default_factory=dict)
    seed: int | None = None
    _random: random.Random | None = field(default=None, init=False, repr=False, compare=False)

    def get_parameter(self, key: str, default: Any = None) -> Any:
        """Get a parameter value, falling back to ``default``.

        A key explicitly set to ``None`` is treated as absent.

        Args:
            key: Parameter name
            default: Value returned when the parameter is not set

        Returns:
            The stored value or ``default``
        """
        value = self.parameters.get(key)
        if value is None:
            return default
        return value

    def set_parameter(self, key: str, value: Any) -> None:
        """Store or overwrite a parameter value.

        No type validation happens here; generators coerce what they read.
        """
        self.parameters[key] = value

    def has_parameter(self, key: str) -> bool:
        return self.parameters.get(key) is not None

    def get_parameters(self) -> Dict[str, Any]:
        """Get a copy of all parameters."""
        return dict(self.parameters)

    @property
    def random(self) -> random.Random:
        """Random source for this context.

        Seeded from ``seed`` when one is set, so repeated generation with the
        same seed is reproducible.
        """
        if self._random is None:
            self._random = random.Random(self.seed)
        return self._random

    def with_index(self, index: int, seed: int | None = None) -> "GenerationContext":
        """Copy this context with a different index (and optionally seed)."""
        return GenerationContext(
            index=index,
            parameters=copy.copy(self.parameters),
            seed=self.seed if seed is None else seed,
        )


__all__ = ["GenerationContext"]

"""Extension contract.

An extension bundles generator types with metadata. Third parties subclass
:class:`DataForgeExtension` and publish it through an entry point, a
settings file reference, or an explicit
:meth:`~dataforge.manager.ExtensionManager.register_extension` call.

Example:
    ```python
    from dataforge import DataForgeExtension

    class RetailExtension(DataForgeExtension):
        name = "retail"
        description = "Retail identifiers"
        version = "2.1.0"
        priority = 50

        def get_generator_classes(self):
            return [SkuGenerator, BarcodeGenerator]
    ```
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence, Tuple

from dataforge.factory import GeneratorType


class DataForgeExtension(ABC):
    """Abstract base class for extensions.

    ``name`` and ``description`` must be provided, either as class
    attributes or as properties. Metadata must stay stable for the lifetime
    of the instance.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique extension name."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description."""
        ...

    @property
    def version(self) -> str:
        """Extension version."""
        return "1.0.0"

    @property
    def priority(self) -> int:
        """Conflict priority; higher wins."""
        return 0

    @abstractmethod
    def get_generator_classes(self) -> Sequence[GeneratorType]:
        """Get the generator types this extension contributes.

        Order only affects registration order in logs; priority decides
        conflicts.
        """
        ...

    def get_name(self) -> str:
        return self.name

    def get_description(self) -> str:
        return self.description

    def get_version(self) -> str:
        return self.version

    def get_priority(self) -> int:
        return self.priority

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, version={self.version!r}, priority={self.priority})"


@dataclass(frozen=True)
class ExtensionInfo:
    """Summary of a registered extension.

    ``generator_count`` counts every generator name the extension
    contributed, including names where another extension won the slot.
    """

    name: str
    description: str
    version: str
    priority: int
    generator_count: int
    generator_names: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["generator_names"] = list(self.generator_names)
        return data

    def __str__(self) -> str:
        return (
            f"Extension{{name='{self.name}', version='{self.version}', "
            f"priority={self.priority}, generators={self.generator_count}}}"
        )


__all__ = ["DataForgeExtension", "ExtensionInfo"]

"""Extension discovery.

Discovery produces an ordered list of extension instances. How the list is
produced is up to the provider:

- :class:`StaticDiscoveryProvider`: extensions handed over explicitly
- :class:`EntryPointDiscoveryProvider`: installed packages advertising an
  entry point in the ``dataforge.extensions`` group
- :class:`ReferenceDiscoveryProvider`: ``"module.path:ClassName"`` strings,
  typically from a settings file
- :class:`CompositeDiscoveryProvider`: several providers chained in order

A provider never lets one broken extension abort the pass. Each failure is
logged, recorded in :attr:`DiscoveryProvider.failures` and skipped.

Example:
    ```python
    provider = CompositeDiscoveryProvider([
        EntryPointDiscoveryProvider(),
        ReferenceDiscoveryProvider(["myapp.forge:RetailExtension"]),
    ])
    extensions = provider.discover()
    for failure in provider.failures:
        print(failure.source, failure.error)
    ```
"""

import importlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import Any, Callable, Iterable, List, Sequence, Union

from dataforge.exceptions import DiscoveryError
from dataforge.extension import DataForgeExtension

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_POINT_GROUP = "dataforge.extensions"

ExtensionSource = Union[DataForgeExtension, type[DataForgeExtension], Callable[[], DataForgeExtension]]


@dataclass(frozen=True)
class DiscoveryFailure:
    """An extension source that could not be loaded."""

    source: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.source}: {self.error}"


class DiscoveryProvider(ABC):
    """Produces the ordered sequence of extensions to register."""

    def __init__(self) -> None:
        self._failures: List[DiscoveryFailure] = []

    @abstractmethod
    def discover(self) -> List[DataForgeExtension]:
        """Discover extensions.

        Returns:
            Extension instances in discovery order
        """
        ...

    @property
    def failures(self) -> List[DiscoveryFailure]:
        """Failures recorded by the last :meth:`discover` call."""
        return list(self._failures)

    def _record_failure(self, source: str, error: Exception) -> None:
        logger.error(f"Failed to load extension from {source}: {error}", exc_info=error)
        self._failures.append(DiscoveryFailure(source, error))

    def _materialize(self, source_name: str, source: Any) -> DataForgeExtension | None:
        """Turn an extension, class or factory into an instance.

        Failures are recorded and None is returned.
        """
        try:
            if isinstance(source, DataForgeExtension):
                extension = source
            elif callable(source):
                extension = source()
            else:
                raise DiscoveryError(
                    f"Unsupported extension source: {type(source).__name__}",
                    context={"source": source_name},
                )

            if not isinstance(extension, DataForgeExtension):
                raise DiscoveryError(
                    f"Extension source must produce a DataForgeExtension, "
                    f"got {type(extension).__name__}",
                    context={"source": source_name},
                )
            if not extension.name:
                raise DiscoveryError(
                    "Extension name cannot be empty",
                    context={"source": source_name},
                )
        except Exception as e:
            self._record_failure(source_name, e)
            return None

        return extension


class StaticDiscoveryProvider(DiscoveryProvider):
    """Discovers an explicit list of extensions.

    Sources may be extension instances, extension classes, or zero-argument
    factories. Classes and factories are instantiated on each discovery pass.
    """

    def __init__(self, sources: Iterable[ExtensionSource] | None = None):
        super().__init__()
        self._sources: List[ExtensionSource] = list(sources or [])

    def add(self, source: ExtensionSource) -> None:
        if source not in self._sources:
            self._sources.append(source)

    def remove(self, source: ExtensionSource) -> bool:
        """Remove a source; returns False if it was not present."""
        if source in self._sources:
            self._sources.remove(source)
            return True
        return False

    def discover(self) -> List[DataForgeExtension]:
        self._failures = []
        extensions = []
        for source in list(self._sources):
            extension = self._materialize(_source_name(source), source)
            if extension is not None:
                extensions.append(extension)
        return extensions

    def __len__(self) -> int:
        return len(self._sources)


class EntryPointDiscoveryProvider(DiscoveryProvider):
    """Discovers extensions advertised as package entry points.

    A distribution publishes an extension in its ``pyproject.toml``:

    ```toml
    [project.entry-points."dataforge.extensions"]
    retail = "myapp.forge:RetailExtension"
    ```
    """

    def __init__(self, group: str = DEFAULT_ENTRY_POINT_GROUP):
        super().__init__()
        self._group = group

    @property
    def group(self) -> str:
        return self._group

    def discover(self) -> List[DataForgeExtension]:
        self._failures = []
        extensions = []
        for entry_point in sorted(entry_points(group=self._group), key=lambda ep: ep.name):
            source_name = f"entry point '{entry_point.name}' ({entry_point.value})"
            try:
                source = entry_point.load()
            except Exception as e:
                self._record_failure(source_name, e)
                continue

            extension = self._materialize(source_name, source)
            if extension is not None:
                extensions.append(extension)

        logger.debug(f"Found {len(extensions)} extension(s) in entry point group '{self._group}'")
        return extensions


class ReferenceDiscoveryProvider(DiscoveryProvider):
    """Discovers extensions from ``"module.path:ClassName"`` references."""

    def __init__(self, references: Sequence[str]):
        super().__init__()
        self._references = list(references)

    @property
    def references(self) -> List[str]:
        return list(self._references)

    def discover(self) -> List[DataForgeExtension]:
        self._failures = []
        extensions = []
        for reference in self._references:
            try:
                source = resolve_reference(reference)
            except Exception as e:
                self._record_failure(reference, e)
                continue

            extension = self._materialize(reference, source)
            if extension is not None:
                extensions.append(extension)
        return extensions


class CompositeDiscoveryProvider(DiscoveryProvider):
    """Chains several providers, preserving their order."""

    def __init__(self, providers: Iterable[DiscoveryProvider]):
        super().__init__()
        self._providers = list(providers)

    @property
    def providers(self) -> List[DiscoveryProvider]:
        return list(self._providers)

    def discover(self) -> List[DataForgeExtension]:
        self._failures = []
        extensions: List[DataForgeExtension] = []
        for provider in self._providers:
            try:
                extensions.extend(provider.discover())
            except Exception as e:
                self._record_failure(type(provider).__name__, e)
                continue
            self._failures.extend(provider.failures)
        return extensions


def resolve_reference(ref: str) -> Any:
    """Resolve an object reference string.

    Supports two formats:
    - "module.path:ClassName" (preferred, explicit)
    - "module.path.ClassName" (accepted, last segment is the attribute)

    Args:
        ref: Reference string

    Returns:
        The referenced object

    Raises:
        ValueError: If the reference format is invalid or empty
        ImportError: If the module cannot be imported
        AttributeError: If the attribute is not found in the module

    Example:
        ```python
        cls = resolve_reference("dataforge.example_extension:ExampleExtension")
        ```
    """
    if not ref or not ref.strip():
        raise ValueError(
            "Empty reference. Expected format: 'module.path:ClassName' "
            "or 'module.path.ClassName'"
        )

    ref = ref.strip()

    if ":" in ref:
        module_path, _, attr_name = ref.partition(":")
    elif "." in ref:
        module_path, _, attr_name = ref.rpartition(".")
    else:
        raise ValueError(
            f"Invalid reference: '{ref}'. Expected format: 'module.path:ClassName' "
            f"or 'module.path.ClassName'."
        )

    if not module_path or not attr_name:
        raise ValueError(
            f"Invalid reference: '{ref}'. Both module path and attribute are required. "
            f"Example: 'myapp.forge:RetailExtension'"
        )

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ImportError(
            f"Cannot import module '{module_path}' from reference '{ref}': {e}. "
            f"Ensure the module is installed and the path is correct."
        ) from e

    if not hasattr(module, attr_name):
        available = [
            name for name in dir(module)
            if isinstance(getattr(module, name, None), type) and not name.startswith("_")
        ]
        available_str = ", ".join(available[:10])
        if len(available) > 10:
            available_str += f", ... ({len(available) - 10} more)"

        raise AttributeError(
            f"'{attr_name}' not found in module '{module_path}'. "
            f"Available classes: {available_str or '(none)'}"
        )

    return getattr(module, attr_name)


def _source_name(source: Any) -> str:
    if isinstance(source, DataForgeExtension):
        return f"{type(source).__qualname__} instance"
    return getattr(source, "__qualname__", None) or repr(source)


__all__ = [
    "DEFAULT_ENTRY_POINT_GROUP",
    "DiscoveryFailure",
    "DiscoveryProvider",
    "StaticDiscoveryProvider",
    "EntryPointDiscoveryProvider",
    "ReferenceDiscoveryProvider",
    "CompositeDiscoveryProvider",
    "resolve_reference",
]

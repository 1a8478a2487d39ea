"""Pluggable synthetic data generators.

This package provides:

- **Generators**: the ``DataGenerator`` contract and a ``GenerationContext``
  parameter bag
- **Factory**: ``GeneratorFactory``, a thread-safe name to generator registry
- **Extensions**: ``DataForgeExtension`` bundles of generators, discovered and
  arbitrated by priority in the ``ExtensionManager``
- **Built-ins**: a handful of generators registered in the default factory

Example:
    ```python
    from dataforge import ExtensionManager, GenerationContext, get_generator_factory

    ExtensionManager.get_instance().initialize()

    generator = get_generator_factory().create_generator("custom_value")
    context = GenerationContext(parameters={"prefix": "TEST", "length": 5})
    generator.generate(context)
    # 'TESTQWERT'
    ```
"""

from dataforge.batch import generate_batch
from dataforge.config import ForgeSettings, build_discovery_provider, load_settings
from dataforge.context import GenerationContext
from dataforge.discovery import (
    CompositeDiscoveryProvider,
    DiscoveryFailure,
    DiscoveryProvider,
    EntryPointDiscoveryProvider,
    ReferenceDiscoveryProvider,
    StaticDiscoveryProvider,
    resolve_reference,
)
from dataforge.exceptions import (
    ConfigurationError,
    DataforgeError,
    DiscoveryError,
    DuplicateRegistrationError,
    InstantiationError,
    NotFoundError,
    OperationError,
    ParameterTypeError,
    ValidationError,
)
from dataforge.extension import DataForgeExtension, ExtensionInfo
from dataforge.factory import (
    GeneratorFactory,
    get_generator_factory,
    register_builtin_generators,
    reset_generator_factory,
)
from dataforge.generator import DataGenerator
from dataforge.manager import ExtensionManager, ManagerState

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "DataforgeError",
    "NotFoundError",
    "OperationError",
    "DuplicateRegistrationError",
    "InstantiationError",
    "ValidationError",
    "ParameterTypeError",
    "ConfigurationError",
    "DiscoveryError",
    # Generators
    "GenerationContext",
    "DataGenerator",
    # Factory
    "GeneratorFactory",
    "get_generator_factory",
    "reset_generator_factory",
    "register_builtin_generators",
    # Extensions
    "DataForgeExtension",
    "ExtensionInfo",
    "ExtensionManager",
    "ManagerState",
    # Discovery
    "DiscoveryProvider",
    "DiscoveryFailure",
    "StaticDiscoveryProvider",
    "EntryPointDiscoveryProvider",
    "ReferenceDiscoveryProvider",
    "CompositeDiscoveryProvider",
    "resolve_reference",
    # Settings
    "ForgeSettings",
    "load_settings",
    "build_discovery_provider",
    # Batch
    "generate_batch",
]

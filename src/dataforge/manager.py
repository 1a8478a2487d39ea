"""Extension manager.

The manager discovers extensions, registers their generators into a
:class:`~dataforge.factory.GeneratorFactory`, and keeps the factory in line
with the set of registered extensions as extensions come and go.

Conflict resolution:
- When several extensions contribute the same generator name, the one with
  the highest priority occupies the factory slot.
- Equal priorities resolve to the contribution registered first.
- Losing contributions are still recorded against their extension, and are
  promoted when the winner is unregistered.
- An extension may claim a name already held by a built-in generator. The
  built-in is put back once no extension claims the name anymore.

Every mutation holds the manager and factory write locks for its whole
duration, so concurrent readers never see a half-applied update. The lock
order is always manager, then factory. Introspection only takes the read
lock and runs alongside other readers.

Example:
    ```python
    from dataforge import ExtensionManager, get_generator_factory

    manager = ExtensionManager.get_instance()
    manager.initialize()

    for info in manager.get_extension_info():
        print(info)

    generator = get_generator_factory().create_generator("custom_value")
    ```
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from dataforge.config import ForgeSettings, build_discovery_provider, load_settings
from dataforge.discovery import (
    CompositeDiscoveryProvider,
    DiscoveryFailure,
    DiscoveryProvider,
    StaticDiscoveryProvider,
)
from dataforge.extension import DataForgeExtension, ExtensionInfo
from dataforge.factory import GeneratorFactory, GeneratorType, get_generator_factory
from dataforge.generator import DataGenerator
from dataforge.locking import ReadWriteLock

logger = logging.getLogger(__name__)


class ManagerState(Enum):
    """Lifecycle of an extension manager."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RELOADING = "reloading"


@dataclass(frozen=True)
class _Claim:
    """One extension's contribution of one generator name."""

    extension_name: str
    priority: int
    sequence: int
    generator_type: GeneratorType


class ExtensionManager:
    """Discovers extensions and registers their generators.

    Use :meth:`get_instance` for the process-wide manager. Separate
    instances can be built for tests or embedding applications.

    Args:
        factory: Factory to register generators into (defaults to the
            process-wide factory)
        discovery: Provider producing extensions on :meth:`initialize`.
            Extensions passed to :meth:`register_extension` are always
            discovered after it.
    """

    _instance: "ExtensionManager | None" = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        factory: GeneratorFactory | None = None,
        discovery: DiscoveryProvider | None = None,
    ):
        self._factory = factory if factory is not None else get_generator_factory()
        self._manual = StaticDiscoveryProvider()
        self._discovery = CompositeDiscoveryProvider(
            [discovery, self._manual] if discovery is not None else [self._manual]
        )
        self._lock = ReadWriteLock()
        self._state = ManagerState.UNINITIALIZED
        self._sequence = itertools.count()

        self._extensions: Dict[str, DataForgeExtension] = {}
        self._contributions: Dict[str, List[str]] = {}
        self._claims: Dict[str, List[_Claim]] = {}
        self._owners: Dict[str, str] = {}
        self._displaced: Dict[str, GeneratorType] = {}
        self._failures: List[DiscoveryFailure] = []

    @classmethod
    def from_settings(
        cls,
        settings: ForgeSettings | None = None,
        factory: GeneratorFactory | None = None,
    ) -> "ExtensionManager":
        """Build a manager whose discovery follows ``settings``."""
        settings = settings or load_settings()
        return cls(factory=factory, discovery=build_discovery_provider(settings))

    # Process-wide instance

    @classmethod
    def get_instance(cls) -> "ExtensionManager":
        """Get the process-wide manager, creating it on first access.

        Concurrent first calls all observe the same instance.
        """
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls.from_settings()
                    logger.info("Created default ExtensionManager singleton")
        return cls._instance

    @classmethod
    def init_instance(
        cls,
        factory: GeneratorFactory | None = None,
        discovery: DiscoveryProvider | None = None,
    ) -> "ExtensionManager":
        """Install a configured process-wide manager.

        Call during application startup, before anything calls
        :meth:`get_instance`. A manager installed earlier is shut down
        first, so its generators leave the factory.
        """
        with cls._instance_lock:
            if cls._instance is not None:
                cls._instance.shutdown()
            cls._instance = cls(factory=factory, discovery=discovery)
            logger.info("Initialized ExtensionManager singleton")
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Shut down and drop the process-wide manager. Useful for testing.

        The factory keeps its built-ins but loses every extension generator,
        so the next manager starts from a clean slate.
        """
        with cls._instance_lock:
            if cls._instance is not None:
                cls._instance.shutdown()
            cls._instance = None

    # Lifecycle

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is ManagerState.INITIALIZED

    @property
    def factory(self) -> GeneratorFactory:
        return self._factory

    def initialize(self) -> None:
        """Discover extensions and register their generators.

        Calling this again once initialized does nothing.
        """
        with self._lock.write():
            if self._state is ManagerState.INITIALIZED:
                return
            with self._factory.locked():
                self._initialize_locked()

    def reload_extensions(self) -> None:
        """Unregister every extension, then discover and register again.

        Safe to call whether or not :meth:`initialize` ran before.
        """
        with self._lock.write(), self._factory.locked():
            logger.info("Reloading extensions...")
            self._state = ManagerState.RELOADING
            try:
                self._teardown_locked()
            finally:
                self._state = ManagerState.UNINITIALIZED
            self._initialize_locked()

    def shutdown(self) -> None:
        """Unregister every extension and return to the uninitialized state.

        Extension generators leave the factory and displaced built-ins are
        put back. Explicitly registered extensions are still remembered and
        return on the next :meth:`initialize`.
        """
        with self._lock.write(), self._factory.locked():
            self._teardown_locked()
            self._failures = []
            self._state = ManagerState.UNINITIALIZED
            logger.info("Extension manager shut down")

    def register_extension(self, extension: DataForgeExtension) -> bool:
        """Register an extension explicitly.

        The extension is remembered and registered again by
        :meth:`reload_extensions`.

        Returns:
            False if an extension with the same name is already registered
        """
        with self._lock.write(), self._factory.locked():
            registered = self._register_locked(extension)
            if registered:
                self._manual.add(extension)
            return registered

    def unregister_extension(self, name: str) -> bool:
        """Unregister an extension and its generators.

        Every generator slot the extension won is handed to the next best
        contribution, or removed when there is none. Unknown names are
        ignored.

        Returns:
            True if the extension was registered
        """
        with self._lock.write(), self._factory.locked():
            extension = self._extensions.get(name)
            removed = self._unregister_locked(name)
            if extension is not None:
                self._manual.remove(extension)
            return removed

    # Introspection

    def get_extensions(self) -> List[DataForgeExtension]:
        """Get registered extensions in registration order."""
        with self._lock.read():
            return list(self._extensions.values())

    def get_extension(self, name: str) -> DataForgeExtension | None:
        """Get a registered extension by name, or None."""
        with self._lock.read():
            return self._extensions.get(name)

    def is_extension_registered(self, name: str) -> bool:
        with self._lock.read():
            return name in self._extensions

    def get_extension_info(self) -> List[ExtensionInfo]:
        """Summarize registered extensions.

        Generator counts include contributions that lost a priority conflict.
        """
        with self._lock.read():
            return [
                ExtensionInfo(
                    name=name,
                    description=extension.description,
                    version=extension.version,
                    priority=extension.priority,
                    generator_count=len(self._contributions.get(name, [])),
                    generator_names=tuple(self._contributions.get(name, [])),
                )
                for name, extension in self._extensions.items()
            ]

    def get_custom_generators(self) -> Dict[str, GeneratorType]:
        """Get the winning extension generators by name.

        Built-in generators are not included.
        """
        with self._lock.read():
            return {
                generator_name: self._winning_claim(generator_name).generator_type
                for generator_name in self._owners
            }

    def get_generator_owner(self, generator_name: str) -> str | None:
        """Get the extension currently providing ``generator_name``."""
        with self._lock.read():
            return self._owners.get(generator_name)

    def get_discovery_failures(self) -> List[DiscoveryFailure]:
        """Failures from the last discovery pass."""
        with self._lock.read():
            return list(self._failures)

    # Internals; callers hold both locks

    def _initialize_locked(self) -> None:
        logger.info("Initializing DataForge extension manager...")
        extensions = self._discovery.discover()
        self._failures = self._discovery.failures

        registered = 0
        for extension in extensions:
            try:
                if self._register_locked(extension):
                    registered += 1
            except Exception as e:
                logger.error(f"Failed to register extension {extension!r}: {e}", exc_info=e)
                self._failures.append(DiscoveryFailure(repr(extension), e))

        self._state = ManagerState.INITIALIZED
        logger.info(f"Extension manager initialized with {registered} extensions")

    def _register_locked(self, extension: DataForgeExtension) -> bool:
        name = extension.name
        existing = self._extensions.get(name)
        if existing is extension:
            logger.debug(f"Extension already registered: {name}")
            return False
        if existing is not None:
            logger.warning(
                f"Ignoring extension {extension!r}: name '{name}' already registered by {existing!r}"
            )
            return False

        priority = int(extension.priority)
        generator_types = list(extension.get_generator_classes() or [])

        self._extensions[name] = extension
        contributed = self._contributions[name] = []

        for generator_type in generator_types:
            try:
                generator_name = resolve_generator_name(generator_type)
            except Exception as e:
                logger.error(
                    f"Failed to register generator {generator_type!r} from extension: {name}",
                    exc_info=e,
                )
                continue

            if not generator_name:
                logger.warning(
                    f"Skipping generator {generator_type!r} from extension '{name}': no name declared"
                )
                continue
            if generator_name in contributed:
                logger.warning(
                    f"Extension '{name}' contributes generator '{generator_name}' twice; keeping the first"
                )
                continue

            if generator_name not in self._claims and self._factory.is_registered(generator_name):
                self._displaced[generator_name] = self._factory.get_generator_type(generator_name)

            contributed.append(generator_name)
            self._claims.setdefault(generator_name, []).append(
                _Claim(name, priority, next(self._sequence), generator_type)
            )
            self._arbitrate(generator_name)
            logger.debug(f"Registered custom generator: {generator_name} from extension: {name}")

        logger.info(
            f"Registered extension: {name} (priority: {priority}, generators: {len(contributed)})"
        )
        return True

    def _teardown_locked(self) -> None:
        for name in reversed(list(self._extensions)):
            self._unregister_locked(name)

    def _unregister_locked(self, name: str) -> bool:
        if self._extensions.pop(name, None) is None:
            logger.debug(f"Extension not registered, nothing to unregister: {name}")
            return False

        for generator_name in self._contributions.pop(name, []):
            remaining = [
                claim for claim in self._claims.get(generator_name, [])
                if claim.extension_name != name
            ]
            if remaining:
                self._claims[generator_name] = remaining
            else:
                self._claims.pop(generator_name, None)

            if self._owners.get(generator_name) == name:
                del self._owners[generator_name]
                self._arbitrate(generator_name)

        logger.info(f"Unregistered extension: {name}")
        return True

    def _arbitrate(self, generator_name: str) -> None:
        """Put the best remaining contribution for a name into the factory."""
        claims = self._claims.get(generator_name)
        if not claims:
            self._owners.pop(generator_name, None)
            builtin = self._displaced.pop(generator_name, None)
            if builtin is not None:
                self._factory.register_generator(generator_name, builtin, override=True)
                logger.info(f"Restored built-in generator '{generator_name}'")
            elif self._factory.is_registered(generator_name):
                self._factory.unregister(generator_name)
            return

        winner = max(claims, key=lambda claim: (claim.priority, -claim.sequence))
        current = self._owners.get(generator_name)
        if current == winner.extension_name:
            if len(claims) > 1:
                logger.debug(
                    f"Generator '{generator_name}' stays with extension '{current}' "
                    f"(priority {winner.priority})"
                )
            return

        self._factory.register_generator(generator_name, winner.generator_type, override=True)
        self._owners[generator_name] = winner.extension_name

        if current is not None:
            logger.info(
                f"Generator '{generator_name}' now provided by extension "
                f"'{winner.extension_name}' (was '{current}')"
            )
        elif generator_name in self._displaced:
            logger.warning(
                f"Extension '{winner.extension_name}' overrides built-in generator '{generator_name}'"
            )

    def _winning_claim(self, generator_name: str) -> _Claim:
        owner = self._owners[generator_name]
        return next(
            claim for claim in self._claims[generator_name] if claim.extension_name == owner
        )

    def __repr__(self) -> str:
        return (
            f"ExtensionManager(state={self._state.value}, "
            f"extensions={len(self._extensions)}, generators={len(self._owners)})"
        )


def resolve_generator_name(generator_type: GeneratorType) -> str | None:
    """Get the registry name a generator type declares.

    Classes declaring a ``name`` attribute are not instantiated. Other
    classes, and factory closures, are called once and asked for
    ``get_name()``.

    Raises:
        TypeError: If ``generator_type`` is not a DataGenerator class or a
            callable returning a DataGenerator
    """
    if isinstance(generator_type, type):
        if not issubclass(generator_type, DataGenerator):
            raise TypeError(
                f"Generator class must be a subclass of DataGenerator, got {generator_type.__name__}"
            )
        declared = generator_type.name
        if isinstance(declared, str) and generator_type.get_name is DataGenerator.get_name:
            return declared
        return generator_type().get_name()

    if callable(generator_type):
        instance = generator_type()
        if not isinstance(instance, DataGenerator):
            raise TypeError(
                f"Generator factory must return a DataGenerator instance, got {type(instance).__name__}"
            )
        return instance.get_name()

    raise TypeError(f"Generator must be a class or callable, got {type(generator_type).__name__}")


__all__ = ["ExtensionManager", "ManagerState", "resolve_generator_name"]

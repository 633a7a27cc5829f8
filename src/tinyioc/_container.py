from __future__ import annotations

import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar, overload

from ._errors import NotFoundError
from ._introspection import identifier_of, is_identifier
from ._resolvers import Binding, InstanceResolver, MethodInvoker


if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._introspection import Token

    T = TypeVar("T")


logger = logging.getLogger(__name__)


class Container:
    """Minimal DI container.

    - bind identifiers to other identifiers (classes or dotted class names)
    - register live instances as singletons
    - resolve classes with constructor injection
    - invoke methods with argument injection.

    Obtain the process-wide container with ``Container.instance()``.
    """

    _instance: ClassVar[Container | None] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, *, _from_accessor: bool = False) -> None:
        if not _from_accessor:
            msg = "Container instances must be obtained via Container.instance()"
            raise RuntimeError(msg)
        # class tokens are keyed by the class object, string tokens by the string
        self._bindings: dict[object, Binding] = {}
        # dotted name -> class last registered under it
        self._classes: dict[str, type] = {}
        self._lock = threading.RLock()
        # parameters typed as Container receive the container resolving them
        self.singleton(Container, self)
        if type(self) is not Container:
            self.singleton(type(self), self)

    @classmethod
    def instance(cls) -> Container:
        """Return the process-wide container, creating it on first access."""
        current = cls.__dict__.get("_instance")
        if current is None:
            with Container._instance_lock:
                current = cls.__dict__.get("_instance")
                if current is None:
                    current = cls(_from_accessor=True)
                    cls._instance = current
                    logger.debug("Created process-wide %s", cls.__qualname__)
        return current

    @classmethod
    def _reset(cls) -> None:
        """Drop the process-wide container so the next ``instance()`` builds a fresh one."""
        with Container._instance_lock:
            cls._instance = None

    def bind(self, token: Token, target: Token) -> Container:
        """Bind ``token`` to another identifier.

        Example:
          container.bind(ConfigInterface, YAMLConfig)
          container.bind("cache", "app.cache.RedisCache")

        The target is not validated until resolution time.
        """
        if not is_identifier(target):
            msg = (
                f"bind() target must be a class or a dotted class name, got {type(target).__name__}. "
                "Use singleton() to register an instance."
            )
            raise TypeError(msg)

        self._store(token, Binding(target=target))
        logger.debug("Bound %s -> %s", identifier_of(token), identifier_of(target))
        return self

    def singleton(self, token: Token, instance: object) -> Container:
        """Bind ``token`` to a pre-built instance, returned by every resolution."""
        self._store(token, Binding(target=instance, shared=True))
        logger.debug("Bound %s -> instance of %s", identifier_of(token), type(instance).__qualname__)
        return self

    def _store(self, token: Token, binding: Binding) -> None:
        identifier = identifier_of(token)
        with self._lock:
            self._bindings[token] = binding
            if inspect.isclass(token):
                self._classes[identifier] = token

    def has(self, token: Token) -> bool:
        return self.binding(token) is not None

    def __contains__(self, token: object) -> bool:
        if not is_identifier(token):
            return False
        return self.has(token)  # type: ignore[arg-type]

    def get(self, token: Token) -> object:
        """Return the raw binding for ``token``: an identifier or an instance."""
        found = self.binding(token)
        if found is None:
            raise NotFoundError(identifier_of(token))
        return found.target

    def binding(self, token: Token) -> Binding | None:
        """Return the registry entry for ``token``.

        A class matches its own entry first, then an entry made under its
        dotted name. A dotted name matches its own entry first, then the entry
        of the class last registered under that name.
        """
        identifier = identifier_of(token)
        with self._lock:
            found = self._bindings.get(token)
            if found is not None:
                return found
            if inspect.isclass(token):
                return self._bindings.get(identifier)
            cls = self._classes.get(identifier)
            return self._bindings.get(cls) if cls is not None else None

    @overload
    def resolve(self, token: type[T], args: Mapping[str, Any] | None = ..., /, **overrides: Any) -> T: ...

    @overload
    def resolve(self, token: str, args: Mapping[str, Any] | None = ..., /, **overrides: Any) -> object: ...

    def resolve(self, token: Token, args: Mapping[str, Any] | None = None, /, **overrides: Any) -> object:
        """Resolve ``token`` to an instance.

        - A singleton binding is returned as-is.
        - Identifier bindings are followed to the class to build.
        - Constructor parameters come from ``args``/``overrides`` by name,
          then from the container by declared class type, then from defaults.
        """
        with self._lock:
            return InstanceResolver(self, token, {**(args or {}), **overrides}).resolve()

    def resolve_method(
        self,
        instance: object,
        method: str,
        args: Mapping[str, Any] | None = None,
        /,
        **overrides: Any,
    ) -> Any:
        """Call ``instance.method`` with injected arguments and return its result."""
        with self._lock:
            return MethodInvoker(self, instance, method, {**(args or {}), **overrides}).invoke()

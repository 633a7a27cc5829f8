from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from ._errors import CircularDependencyError, ReflectionError, UnsatisfiableParameterError
from ._introspection import TypeKind, describe_parameters, has_constructor, identifier_of, load_class


if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ._introspection import ParameterDescriptor, Token


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Binding:
    target: object
    shared: bool = False  # True for a live instance registered via singleton()


class Resolver(Protocol):
    """What the resolvers need from a container: raw registry lookups."""

    def binding(self, token: Token) -> Binding | None: ...


class InstanceResolver:
    """Produce an instance for a token.

    Bindings are chased until a live object (returned as-is) or an unbound
    identifier is reached. The identifier is then reflected into a class whose
    constructor arguments come from :class:`ParameterResolver`.
    """

    def __init__(
        self,
        container: Resolver,
        token: Token,
        args: Mapping[str, Any] | None = None,
        *,
        stack: list[type] | None = None,
    ) -> None:
        self._container = container
        self._token = token
        self._args = dict(args or {})
        # classes currently under construction in this resolution request
        self._stack = stack if stack is not None else []

    def resolve(self) -> object:
        token = self._token
        seen: list[Token] = [token]

        while (binding := self._container.binding(token)) is not None:
            if binding.shared:
                logger.debug("Returning singleton bound to %s", identifier_of(token))
                return binding.target

            target: Token = binding.target  # type: ignore[assignment]
            logger.debug("Following binding %s -> %s", identifier_of(token), identifier_of(target))
            token = target
            if token in seen:
                raise CircularDependencyError([identifier_of(t) for t in (*seen, token)])
            seen.append(token)

        cls = load_class(token)
        if cls in self._stack:
            raise CircularDependencyError([identifier_of(t) for t in (*self._stack, cls)])

        self._stack.append(cls)
        try:
            return self._construct(cls)
        finally:
            self._stack.pop()

    def _construct(self, cls: type) -> object:
        if not has_constructor(cls):
            logger.debug("Creating %s without running a constructor", cls.__qualname__)
            return cls.__new__(cls)

        parameters = describe_parameters(cls.__init__, owner=cls.__qualname__, skip_first=True)  # type: ignore[misc]
        if not parameters:
            logger.debug("Constructing %s", cls.__qualname__)
            return cls()

        args, kwargs = ParameterResolver(
            self._container,
            parameters,
            self._args,
            owner=cls.__qualname__,
            stack=self._stack,
        ).resolve()
        logger.debug("Constructing %s with %d argument(s)", cls.__qualname__, len(args) + len(kwargs))
        return cls(*args, **kwargs)


class ParameterResolver:
    """Resolve a parameter list into call arguments.

    Resolution precedence per parameter:
    1. explicit argument with the same name
    2. instance of the declared class type
    3. default
    4. error.
    """

    def __init__(
        self,
        container: Resolver,
        parameters: Sequence[ParameterDescriptor],
        args: Mapping[str, Any] | None = None,
        *,
        owner: str,
        stack: list[type] | None = None,
    ) -> None:
        self._container = container
        self._parameters = parameters
        self._args = dict(args or {})
        self._args.pop("self", None)  # never allow passing 'self'
        self._owner = owner
        self._stack = stack if stack is not None else []

    def resolve(self) -> tuple[list[Any], dict[str, Any]]:
        """Return ``(args, kwargs)`` in declared parameter order."""
        declared = {p.name for p in self._parameters}
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for p in self._parameters:
            if p.kind is inspect.Parameter.VAR_POSITIONAL:
                # *args are filled only by an explicit iterable of the same name
                args.extend(self._args.get(p.name, ()))
            elif p.kind is inspect.Parameter.VAR_KEYWORD:
                kwargs.update(self._args.get(p.name, {}))
                kwargs.update({k: v for k, v in self._args.items() if k not in declared})
            elif p.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[p.name] = self.resolve_parameter(p)
            else:
                args.append(self.resolve_parameter(p))

        return args, kwargs

    def resolve_parameter(self, p: ParameterDescriptor) -> Any:
        if p.name in self._args:
            return self._args[p.name]

        if p.type_kind is TypeKind.CLASS:
            # recursive resolution never inherits the caller's explicit arguments
            return InstanceResolver(self._container, p.annotation, stack=self._stack).resolve()

        if p.has_default:
            return p.default

        raise UnsatisfiableParameterError(self._owner, p.name, p.describe_annotation())


class MethodInvoker:
    """Call a method on an instance with container-resolved arguments."""

    def __init__(
        self,
        container: Resolver,
        instance: object,
        method: str,
        args: Mapping[str, Any] | None = None,
    ) -> None:
        self._container = container
        self._instance = instance
        self._method = method
        self._args = dict(args or {})

    def invoke(self) -> Any:
        owner = f"{type(self._instance).__qualname__}.{self._method}"
        try:
            inspect.getattr_static(type(self._instance), self._method)
        except AttributeError as exc:
            msg = f"Method {owner}() does not exist"
            raise ReflectionError(msg) from exc

        method = getattr(self._instance, self._method)
        if not callable(method):
            msg = f"{owner} is not a method"
            raise ReflectionError(msg)

        parameters = describe_parameters(method, owner=owner)
        args, kwargs = ParameterResolver(self._container, parameters, self._args, owner=owner).resolve()
        logger.debug("Invoking %s", owner)
        return method(*args, **kwargs)

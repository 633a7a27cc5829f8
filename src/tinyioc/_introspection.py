from __future__ import annotations

import builtins
import importlib
import inspect
import logging
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin, get_type_hints

from ._errors import ReflectionError


if TYPE_CHECKING:
    from collections.abc import Callable

    Token = type | str


logger = logging.getLogger(__name__)

_UNION_TYPES: tuple[Any, ...] = (Union, types.UnionType)


class TypeKind(Enum):
    ABSENT = "absent"
    PRIMITIVE = "primitive"
    CLASS = "class"


@dataclass(frozen=True)
class ParameterDescriptor:
    """One parameter of a constructor or method, as seen by the resolvers."""

    name: str
    kind: inspect._ParameterKind
    type_kind: TypeKind
    annotation: Any = inspect.Parameter.empty
    default: Any = inspect.Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty

    def describe_annotation(self) -> str:
        if self.annotation is inspect.Parameter.empty:
            return "no-annotation"
        return getattr(self.annotation, "__name__", repr(self.annotation))


def identifier_of(token: Token) -> str:
    """Normalize a class or string token to its registry identifier.

    Classes map to ``"<module>.<qualname>"`` so that a class and its dotted
    name address the same binding.
    """
    if isinstance(token, str):
        return token
    if inspect.isclass(token):
        return f"{token.__module__}.{token.__qualname__}"
    msg = f"Identifier must be a class or a string, got {type(token).__name__}"
    raise TypeError(msg)


def is_identifier(value: object) -> bool:
    return isinstance(value, str) or inspect.isclass(value)


def load_class(token: Token) -> type:
    """Turn a token into a constructible class.

    Strings are imported by dotted path; a name without dots is looked up
    in ``builtins``.
    """
    cls = token if inspect.isclass(token) else _import_dotted(token)

    if not inspect.isclass(cls):
        msg = f"Identifier {token!r} does not name a class (got {type(cls).__name__})"
        raise ReflectionError(msg)

    if is_protocol(cls) or inspect.isabstract(cls):
        msg = f"{cls.__qualname__} is abstract and cannot be instantiated; bind it to a concrete class"
        raise ReflectionError(msg)

    return cls


def _import_dotted(path: str) -> object:
    if "<locals>" in path:
        msg = f"Cannot import local class {path!r}; bind the class object instead of its name"
        raise ReflectionError(msg)

    parts = path.split(".")
    if len(parts) == 1:
        try:
            return getattr(builtins, path)
        except AttributeError as exc:
            msg = f"Class {path!r} does not exist"
            raise ReflectionError(msg) from exc

    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            target: object = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            # A missing parent package means we should try a shorter prefix;
            # anything else is a broken import inside the module.
            if exc.name and (module_name == exc.name or module_name.startswith(exc.name + ".")):
                continue
            raise

        for attr in parts[split:]:
            try:
                target = getattr(target, attr)
            except AttributeError as exc:
                msg = f"Class {path!r} does not exist: {module_name!r} has no attribute {attr!r}"
                raise ReflectionError(msg) from exc
        return target

    msg = f"Class {path!r} does not exist: no importable module in path"
    raise ReflectionError(msg)


def has_constructor(cls: type) -> bool:
    return cls.__init__ is not object.__init__  # type: ignore[misc]


def describe_parameters(func: Callable[..., Any], *, owner: str, skip_first: bool = False) -> list[ParameterDescriptor]:
    """Build descriptors for ``func``'s parameters, in declared order.

    ``skip_first`` drops the receiver of an unbound ``__init__``.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError) as exc:
        msg = f"Cannot introspect the signature of {owner}: {exc}"
        raise ReflectionError(msg) from exc

    params = list(sig.parameters.values())
    if skip_first and params:
        params = params[1:]

    hints = _get_type_hints(func, owner)

    descriptors = []
    for p in params:
        annotation = hints.get(p.name, p.annotation)
        descriptors.append(
            ParameterDescriptor(
                name=p.name,
                kind=p.kind,
                type_kind=_classify(annotation),
                annotation=_unwrap_optional(annotation),
                default=p.default,
            )
        )
    return descriptors


def _get_type_hints(func: Callable[..., Any], owner: str) -> dict[str, Any]:
    target = getattr(func, "__func__", func)
    try:
        return get_type_hints(target)
    except TypeError:
        return {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s type hints; treating them as untyped", exc.name, owner)
        return {}


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in _UNION_TYPES:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _classify(annotation: Any) -> TypeKind:
    if annotation is inspect.Parameter.empty or isinstance(annotation, str):
        # Unevaluated forward references carry no usable type.
        return TypeKind.ABSENT

    annotation = _unwrap_optional(annotation)
    if annotation is Any or get_origin(annotation) is not None:
        return TypeKind.PRIMITIVE
    if inspect.isclass(annotation) and getattr(annotation, "__module__", "") != "builtins":
        return TypeKind.CLASS
    return TypeKind.PRIMITIVE


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: type) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: type) -> bool:
        """Detect whether 'tp' is itself a typing.Protocol (not merely an implementation)."""
        return inspect.isclass(tp) and bool(getattr(tp, "_is_protocol", False))

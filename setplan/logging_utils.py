from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Sequence, TypeVar, cast

import numpy as np

from .model import PlanSet, Rect, Rule

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 120
_repr.maxlist = 6
_repr.maxtuple = 6
_repr.maxdict = 6


def _summarize(value: Any, *, max_items: int = 4) -> str:
    """Compact rendering of engine values for DEBUG traces."""

    if isinstance(value, np.ndarray):
        if value.size == 0:
            return f"ndarray(shape={value.shape})"
        return (
            f"ndarray(shape={value.shape}, dtype={value.dtype}, "
            f"min={float(value.min()):.6g}, max={float(value.max()):.6g})"
        )
    if isinstance(value, PlanSet):
        cut = f" cuts={len(value.cutouts)}" if value.cutouts else ""
        return (
            f"PlanSet({value.id!r} @({value.x:.1f},{value.y:.1f}) "
            f"{value.width:g}x{value.height:g} rot={int(value.rotation)}{cut})"
        )
    if isinstance(value, Rule):
        partner = f"->{value.set_b!r}" if value.set_b is not None else ""
        return f"Rule({value.id!r} {value.type.value} {value.set_a!r}{partner})"
    if isinstance(value, Rect):
        return f"Rect({value.x:g},{value.y:g},{value.w:g},{value.h:g})"
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [_summarize(item) for item in list(value)[:max_items]]
        if len(value) > max_items:
            items.append(f"... ({len(value)} total)")
        open_br, close_br = ("(", ")") if isinstance(value, tuple) else ("[", "]")
        return open_br + ", ".join(items) + close_br
    return _repr.repr(value)


def _format_arguments(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = [_summarize(arg) for arg in args]
    parts.extend(f"{key}={_summarize(value)}" for key, value in kwargs.items())
    return ", ".join(parts) if parts else "no-args"


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Return a decorator that emits DEBUG logs on entry and exit."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func

        qualname = name or getattr(func, "__qualname__", func.__name__)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("Entering %s (%s)", qualname, _format_arguments(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("Exception in %s", qualname)
                raise
            if log_result:
                logger.debug("Exiting %s -> %s", qualname, _summarize(result))
            else:
                logger.debug("Exiting %s", qualname)
            return result

        setattr(wrapper, "_debug_logging_wrapped", True)
        return cast(F, wrapper)

    return decorator


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
) -> None:
    """Wrap the public module-level functions of ``namespace`` with DEBUG tracing."""

    module_name = namespace.get("__name__")
    logger = logger or logging.getLogger(module_name or __name__)
    skip_set = set(skip or ())

    for attr_name, value in list(namespace.items()):
        if attr_name in skip_set or attr_name.startswith("_"):
            continue
        if inspect.isfunction(value) and value.__module__ == module_name:
            namespace[attr_name] = debug_log_call(logger, name=attr_name)(value)

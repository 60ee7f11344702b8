"""
Column-name inference for ``select``.

The column list for a target type comes from the parameter names of its
widest constructor. Results are memoized for the life of the process in a
single cache guarded by one lock, including the negative result for types
that have no parameterized constructor.

Constructors considered, in order:

1. column lists registered with ``register_columns``
2. ``__init__``
3. ``__new__``
4. classmethods marked with ``@column_constructor``, in definition order

Ties on parameter count go to the first candidate in that order.
"""
import inspect
import logging
import math
import threading
from collections.abc import Callable

import cachetools
from dbhelpers.exceptions import ColumnInferenceError, ValidationError

logger = logging.getLogger(__name__)

__all__ = [
    'column_constructor',
    'register_columns',
    'infer_columns',
    'column_factory',
    'add_column_names',
    'clear_column_cache',
]

# Marker stored for types with no usable constructor
UNRESOLVABLE = object()

_PARAMETER_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
    )

_lock = threading.Lock()
_select_columns = cachetools.Cache(maxsize=math.inf)
_registered: dict[type, tuple[str, ...]] = {}
_factories: dict[type, Callable | None] = {}


def column_constructor(func: Callable) -> classmethod:
    """Mark a classmethod as an alternate constructor for column inference.

    Usage:
        class Trade:
            @column_constructor
            def from_row(cls, trade_id, symbol, qty):
                ...
    """
    if isinstance(func, classmethod):
        func = func.__func__
    func.__column_constructor__ = True
    return classmethod(func)


def register_columns(cls: type, *names: str) -> None:
    """Declare a column list for ``cls`` without relying on its signatures.

    Raises ValidationError if columns for ``cls`` were already inferred.
    """
    if not names:
        raise ValidationError(f'No column names given for {cls.__qualname__}')
    with _lock:
        if cls in _select_columns:
            raise ValidationError(f'Columns for {cls.__qualname__} were already inferred')
        _registered[cls] = tuple(names)
    logger.debug(f'Registered columns for {cls.__qualname__}: {names}')


def _parameter_names(func: Callable, bound: bool) -> list[str] | None:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    params = list(sig.parameters.values())
    if bound and params and params[0].kind in _PARAMETER_KINDS[:2]:
        params = params[1:]
    return [p.name for p in params if p.kind in _PARAMETER_KINDS]


def _keyword_factory(cls: type, names: tuple[str, ...]) -> Callable:
    def build(*values):
        return cls(**dict(zip(names, values)))
    return build


def constructor_signatures(cls: type) -> list[tuple[list[str], Callable]]:
    """Parameter names and row factory of every constructor ``cls`` declares.

    Each factory takes the row values positionally, in the order of its names.
    """
    candidates = []
    if cls in _registered:
        names = _registered[cls]
        candidates.append((list(names), _keyword_factory(cls, names)))

    for name in ('__init__', '__new__'):
        member = inspect.getattr_static(cls, name, None)
        if member is None or member in (object.__init__, object.__new__):
            continue
        if isinstance(member, staticmethod | classmethod):
            member = member.__func__
        names = _parameter_names(member, bound=True)
        if names is not None:
            candidates.append((names, cls))

    seen = set()
    for klass in cls.__mro__:
        for attr, member in vars(klass).items():
            if attr in seen:
                continue
            seen.add(attr)
            if not isinstance(member, classmethod):
                continue
            if getattr(member.__func__, '__column_constructor__', False):
                names = _parameter_names(member.__func__, bound=True) or []
                candidates.append((names, getattr(cls, attr)))
    return candidates


def _build_entry(cls: type) -> tuple[str | object, Callable | None]:
    widest, factory = max(constructor_signatures(cls), key=lambda c: len(c[0]),
                          default=([], None))
    if not widest:
        return UNRESOLVABLE, None
    return 'SELECT ' + ', '.join(f'"{name}"' for name in widest) + ' ', factory


def infer_columns(cls: type) -> str:
    """Return the ``SELECT "a", "b" `` fragment for ``cls``.

    Raises ColumnInferenceError when ``cls`` has no parameterized constructor,
    on this and every later call for the same type.
    """
    with _lock:
        fragment = _select_columns.get(cls)
        if fragment is None:
            logger.debug(f'Column cache miss for {cls.__qualname__}')
            fragment, factory = _build_entry(cls)
            _select_columns[cls] = fragment
            _factories[cls] = factory
        else:
            logger.debug(f'Column cache hit for {cls.__qualname__}')
    if fragment is UNRESOLVABLE:
        raise ColumnInferenceError(cls)
    return fragment


def column_factory(cls: type) -> Callable:
    """Constructor whose parameter names produced the columns of ``cls``.

    Call it with a row's values in column order. Raises ColumnInferenceError
    like ``infer_columns``.
    """
    infer_columns(cls)
    with _lock:
        return _factories[cls]


def add_column_names(cls: type, sql: str) -> str:
    """Prepend the inferred ``SELECT`` column list for ``cls`` to ``sql``."""
    return infer_columns(cls) + sql


def clear_column_cache() -> None:
    """Forget every inferred and registered column list."""
    with _lock:
        _select_columns.clear()
        _factories.clear()
        _registered.clear()

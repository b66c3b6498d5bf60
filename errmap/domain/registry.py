import logging
from collections import deque
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Type

from errmap.domain.errors import ConfigError
from errmap.utils import kind_name

logger = logging.getLogger(__name__)

BodyBuilder = Callable[[BaseException], Optional[Mapping[str, Any]]]

DEFAULT_STATUS_CODE = 500
DEFAULT_CODE = 'internal_error'
DEFAULT_TITLE = 'Internal error'


@dataclass(frozen=True)
class HandlerRegistration:
    kind: Type[BaseException]
    status_code: int
    code: str
    title: str
    body: Optional[BodyBuilder] = None
    order: int = -1

    @property
    def is_default(self) -> bool:
        return self.order < 0


def _validate_status(status_code) -> int:
    if isinstance(status_code, bool) or not isinstance(status_code, int):
        raise ConfigError(f'status_code must be an int, got {status_code!r}')
    if not 100 <= status_code <= 599:
        raise ConfigError(f'status_code {status_code} is outside 100..599')
    return status_code


def _default_code(kind: Type[BaseException]) -> str:
    code = getattr(kind, 'code', None)
    if isinstance(code, str) and code:
        return code
    return kind_name(kind)


def _inheritance_distance(kind: type, ancestor: type) -> Optional[int]:
    """Shortest path from ``kind`` up to ``ancestor`` through ``__bases__``."""
    queue = deque([(kind, 0)])
    visited = {kind}
    while queue:
        current, depth = queue.popleft()
        if current is ancestor:
            return depth
        for base in current.__bases__:
            if base not in visited:
                visited.add(base)
                queue.append((base, depth + 1))
    return None


def _known_subclasses(kinds) -> Iterator[type]:
    """Every subclass of ``kinds`` that exists right now, depth first."""
    stack = list(kinds)
    seen = set(stack)
    while stack:
        current = stack.pop()
        for sub in type.__subclasses__(current):
            if sub not in seen:
                seen.add(sub)
                stack.append(sub)
                yield sub


class HandlerRegistry:
    """
    Immutable kind -> handler table.

    Built once by ``RegistryBuilder`` before requests are served and only
    read afterwards, so it can be shared between threads and tasks
    without locking. Registered kinds and every subclass of them that
    exists at build time are resolved up front; exception classes
    created later are resolved on lookup without being cached.
    """

    __slots__ = ('_registrations', '_exact', '_table', '_default')

    def __init__(
        self,
        registrations: Tuple[HandlerRegistration, ...],
        default: HandlerRegistration,
    ) -> None:
        exact: Dict[type, HandlerRegistration] = {}
        for reg in registrations:
            exact.setdefault(reg.kind, reg)
        self._registrations = tuple(registrations)
        self._default = default
        self._exact = MappingProxyType(exact)

        table = dict(exact)
        for kind in _known_subclasses(exact):
            table.setdefault(kind, self._nearest(kind))
        self._table = MappingProxyType(table)

    @property
    def registrations(self) -> Tuple[HandlerRegistration, ...]:
        return self._registrations

    @property
    def default(self) -> HandlerRegistration:
        return self._default

    def kinds(self) -> List[Type[BaseException]]:
        return [reg.kind for reg in self]

    def __contains__(self, kind) -> bool:
        return kind in self._exact

    def __len__(self) -> int:
        return len(self._registrations)

    def __iter__(self) -> Iterator[HandlerRegistration]:
        return iter(self._registrations)

    def resolve(self, kind: type) -> HandlerRegistration:
        """
        Most specific registered handler for ``kind``.

        Exact registrations win. Otherwise the registered ancestor with the
        shortest inheritance distance is used, ties going to the one
        registered first. Kinds with no registered ancestor get the default.
        """
        hit = self._table.get(kind)
        if hit is not None:
            return hit
        if not isinstance(kind, type):
            return self._default
        return self._nearest(kind)

    def _nearest(self, kind: type) -> HandlerRegistration:
        best: Optional[HandlerRegistration] = None
        best_distance = None
        for reg in self._registrations:
            if not issubclass(kind, reg.kind):
                continue
            distance = _inheritance_distance(kind, reg.kind)
            if distance is None:
                # virtual subclass (ABC.register); rank it after real ancestors
                distance = len(kind.__mro__)
            if best is None or distance < best_distance:
                best, best_distance = reg, distance
        return best or self._default


class RegistryBuilder:
    """Collects handler registrations at startup and freezes them with ``build()``."""

    def __init__(self) -> None:
        self._registrations: List[HandlerRegistration] = []
        self._default = HandlerRegistration(
            kind=BaseException,
            status_code=DEFAULT_STATUS_CODE,
            code=DEFAULT_CODE,
            title=DEFAULT_TITLE,
        )

    def register(
        self,
        kind: Type[BaseException],
        status_code: int,
        *,
        code: Optional[str] = None,
        title: Optional[str] = None,
        body: Optional[BodyBuilder] = None,
    ) -> 'RegistryBuilder':
        if not (isinstance(kind, type) and issubclass(kind, BaseException)):
            raise ConfigError(f'{kind!r} is not an exception class')
        _validate_status(status_code)
        if body is not None and not callable(body):
            raise ConfigError(f'body builder for {kind_name(kind)} is not callable')

        if any(reg.kind is kind for reg in self._registrations):
            logger.warning(
                'Handler for %s already registered; keeping the first one',
                kind_name(kind),
            )
            return self

        self._registrations.append(
            HandlerRegistration(
                kind=kind,
                status_code=status_code,
                code=code or _default_code(kind),
                title=(title or kind_name(kind)).strip(),
                body=body,
                order=len(self._registrations),
            )
        )
        return self

    def set_default(
        self,
        status_code: int = DEFAULT_STATUS_CODE,
        *,
        code: str = DEFAULT_CODE,
        title: str = DEFAULT_TITLE,
    ) -> 'RegistryBuilder':
        _validate_status(status_code)
        if not code or not title:
            raise ConfigError('default handler needs a non-empty code and title')
        self._default = HandlerRegistration(
            kind=BaseException,
            status_code=status_code,
            code=code,
            title=title,
        )
        return self

    def build(self) -> HandlerRegistry:
        return HandlerRegistry(tuple(self._registrations), self._default)

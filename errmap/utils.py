from typing import List, Type

MAX_CAUSE_DEPTH = 10


def kind_name(kind: Type[BaseException]) -> str:
    return getattr(kind, '__qualname__', None) or getattr(kind, '__name__', repr(kind))


def condition_message(exc: BaseException) -> str:
    """
    Return the human-readable message of an error condition.

    Domain errors carry an explicit ``message``; anything else falls back
    to ``str(exc)``. A broken ``__str__`` yields an empty string instead
    of propagating.
    """
    message = getattr(exc, 'message', None)
    if isinstance(message, str):
        return message.strip()
    try:
        return str(exc).strip()
    except Exception:
        return ''


def _next_cause(exc: BaseException):
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def cause_chain(exc: BaseException, limit: int = MAX_CAUSE_DEPTH) -> List[str]:
    """
    Describe the chained causes of ``exc`` (not including ``exc`` itself).

    Example:
        NotFoundError('post 42') raised from KeyError(42)
        -> ["KeyError: 42"]
    """
    chain: List[str] = []
    seen = {id(exc)}
    current = _next_cause(exc)
    while current is not None and id(current) not in seen and len(chain) < limit:
        seen.add(id(current))
        chain.append(f'{kind_name(type(current))}: {condition_message(current)}')
        current = _next_cause(current)
    return chain

from functools import lru_cache

from errmap.factories import make_translator
from errmap.services.translator import ErrorTranslator


@lru_cache(maxsize=1)
def get_translator() -> ErrorTranslator:
    # built once per process, read-only afterwards
    return make_translator()


def reset_translator_cache() -> None:
    get_translator.cache_clear()

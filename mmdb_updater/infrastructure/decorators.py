"""
Infrastructure-specific decorators, providing cross-cutting concerns like
translating third-party exceptions into the updater's error taxonomy.
"""

import functools
import logging
from typing import Tuple, Type, Union

from ..application.exceptions import UpdaterError

logger = logging.getLogger(__name__)

_ExceptionTypes = Union[Type[BaseException], Tuple[Type[BaseException], ...]]


def translate_errors(
    stage: str, error_cls: Type[UpdaterError], catch: _ExceptionTypes
):
    """
    Re-raise ``catch`` exceptions from an async callable as ``error_cls``,
    labelled with ``stage`` and chained to the original.
    """

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except catch as e:
                logger.debug(
                    f"{fn.__name__} failed while {stage}: "
                    f"{type(e).__name__}"
                )
                raise error_cls(str(e) or type(e).__name__, stage=stage) from e

        return wrapper

    return decorator

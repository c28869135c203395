"""
Workflow boundary - translate collaborator failures into domain errors.

Every public workflow operation is wrapped so that only IdentityError
subclasses leave the domain. Store timeouts become ServiceUnavailable;
anything else unexpected is logged with its traceback and surfaces as a
detail-free InternalError.
"""

import functools
import logging
from collections.abc import Callable
from typing import ParamSpec, TypeVar

from .exceptions import IdentityError, InternalError, ServiceUnavailable, StoreUnavailable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def workflow_boundary(operation: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorate a workflow entry point.

    Args:
        operation: Name used in log lines for this workflow
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return func(*args, **kwargs)
            except IdentityError:
                raise
            except StoreUnavailable as exc:
                logger.error("%s: store unavailable: %s", operation, exc)
                raise ServiceUnavailable(operation) from None
            except Exception:
                logger.exception("%s: unexpected collaborator failure", operation)
                raise InternalError(operation) from None

        return wrapper

    return decorator

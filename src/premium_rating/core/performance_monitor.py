# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Performance monitoring decorator for rating stages."""

import time
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from beartype import beartype

from .config import DEFAULT_SLOW_STAGE_THRESHOLD_MS
from .logging_utils import get_logger

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)


def _stage_threshold(args: tuple[Any, ...], max_duration_ms: float | None) -> float:
    if max_duration_ms is not None:
        return max_duration_ms
    owner = args[0] if args else None
    return float(
        getattr(owner, "slow_stage_threshold_ms", DEFAULT_SLOW_STAGE_THRESHOLD_MS)
    )


@beartype
def performance_monitor(
    operation_name: str,
    max_duration_ms: float | None = None,
    log_slow_operations: bool = True,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to time a synchronous rating stage.

    Successful calls are logged at DEBUG with their duration; calls slower
    than the threshold are logged at WARNING. Failures are logged at DEBUG
    and re-raised unchanged; reporting them is left to the caller.

    Args:
        operation_name: Name of the operation for monitoring
        max_duration_ms: Alert threshold in milliseconds. When omitted, the
            ``slow_stage_threshold_ms`` attribute of the decorated method's
            instance is used, falling back to the package default
        log_slow_operations: Whether to log slow operations
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            start_time = time.perf_counter()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.debug(
                    "%s failed after %.3fms: %s", operation_name, duration_ms, e
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            threshold = _stage_threshold(args, max_duration_ms)
            if log_slow_operations and duration_ms > threshold:
                logger.warning(
                    "PERFORMANCE WARNING: %s took %.2fms (threshold: %sms)",
                    operation_name,
                    duration_ms,
                    threshold,
                )
            else:
                logger.debug("%s completed in %.3fms", operation_name, duration_ms)

            return result

        return sync_wrapper

    return decorator

"""Cleanup phase: return the shared context to its empty state."""

from __future__ import annotations

import logging

from core.domain.context import SharedContext
from core.domain.models import CheckResult

logger = logging.getLogger(__name__)

CLEANUP_CHECK_NAME = "Cleanup shared context"


def cleanup(context: SharedContext) -> CheckResult:
    """Remove every shared context entry, whatever the iteration's outcome.

    Idempotent: clearing an already empty context is a no-op. The returned
    result always passes.
    """

    stale = len(context)
    context.clear()
    logger.debug("Cleared %d shared context entries", stale)
    return CheckResult(name=CLEANUP_CHECK_NAME, passed=True)

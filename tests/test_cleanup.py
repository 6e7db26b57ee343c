"""Unit tests for the Cleanup phase."""

from core.domain.context import CONTEXT_KEYS
from core.services.arrange import build_request
from core.services.cleanup import CLEANUP_CHECK_NAME, cleanup


def test_cleanup_empties_context(make_record, context):
    build_request(make_record(), context)
    assert len(context) == len(CONTEXT_KEYS)

    result = cleanup(context)

    assert result.passed
    assert result.name == CLEANUP_CHECK_NAME
    assert context.is_empty()


def test_cleanup_is_idempotent(context):
    first = cleanup(context)
    second = cleanup(context)
    assert first.passed and second.passed
    assert context.is_empty()


def test_cleanup_after_partial_context(context):
    context.set("expectedName", "Paris")
    cleanup(context)
    assert all(key not in context for key in CONTEXT_KEYS)

"""Structured logging helpers (PII-safe)."""

from typing import Any
from uuid import UUID


def build_log_context(
    *,
    user_id: UUID | str | None = None,
    actor_kind: str | None = None,
    case_id: UUID | str | None = None,
    document_id: UUID | str | None = None,
    action: str | None = None,
) -> dict[str, Any]:
    """Return a PII-safe log context dict (ids only, never names or filenames)."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = str(user_id)
    if actor_kind:
        context["actor_kind"] = actor_kind
    if case_id:
        context["case_id"] = str(case_id)
    if document_id:
        context["document_id"] = str(document_id)
    if action:
        context["action"] = action
    return context

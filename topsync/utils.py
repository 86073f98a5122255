from __future__ import annotations

# NOTE:
# Keep this module dependency-light (no discord import).
# Shared by the synchronizer and the Top.gg publisher.


def truncate(s: str, limit: int = 1500) -> str:
    if not s:
        return ""
    if len(s) <= limit:
        return s
    return s[: max(0, limit - 3)] + "..."


def describe_error(exc: BaseException) -> str:
    """
    Human-readable one-liner for an exception (used in logs and in
    message-based checks such as "Entry Point" / "already exists").
    """
    text = str(exc).strip()
    return text or exc.__class__.__name__


__all__ = ["truncate", "describe_error"]

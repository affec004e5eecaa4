"""Exception types shared across quhua."""

from __future__ import annotations


class QuhuaError(Exception):
    """Base exception for quhua errors."""


class BuildFailure(QuhuaError):
    """Raised when the hierarchy cannot be built.

    Only resource exhaustion and an explicit duplicate-rejection policy
    fail a build. Malformed data (orphans, level gaps) never does.
    Callers must not query a partially built tree.
    """


class DuplicateCodeError(BuildFailure):
    """Raised when two records share a code under the reject policy.

    Attributes:
        codes: Every code that occurs more than once, sorted.
    """

    def __init__(self, codes: list[str]) -> None:
        self.codes = codes
        preview = ", ".join(codes[:5])
        more = f" (+{len(codes) - 5} more)" if len(codes) > 5 else ""
        super().__init__(f"Duplicate region codes: {preview}{more}")


class HierarchyCycleError(QuhuaError):
    """Raised when a parent chain loops back on itself.

    Attributes:
        code: Code of the node at which the walk started.
    """

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Parent chain of {code} contains a cycle")

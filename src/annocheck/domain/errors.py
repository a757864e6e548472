from __future__ import annotations

"""
Error Taxonomy.

FixtureError and its subclasses abort the whole group. AssertionFailure
fails a single case and always carries a structured Diagnostic.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from annocheck.domain.verification_models import Diagnostic


class AnnocheckError(Exception):
    """Base class for every error raised by annocheck."""


class FixtureError(AnnocheckError):
    """Malformed fixture or group configuration. Fatal for the group."""


class EngineLoadError(FixtureError):
    """The analysis engine factory could not be imported or invoked."""


class SettleError(FixtureError):
    """The analysis engine reported an error while settling."""


class EngineError(FixtureError):
    """The analysis engine failed while registering a file or answering a query."""


class SessionStateError(AnnocheckError):
    """An operation was attempted in the wrong session lifecycle state."""


class AssertionFailure(AnnocheckError):
    """A directive did not hold. Fails only the enclosing case."""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic

    def __str__(self) -> str:
        return self.diagnostic.render()


class LookupFailure(AssertionFailure):
    """A definition directive named a path the snapshot does not contain."""

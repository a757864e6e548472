from __future__ import annotations

"""
Analysis Session Lifecycle.

Wraps one AnalysisEngine instance for the lifetime of one test group and
enforces the loading protocol:

    IDLE --register_cases--> FILES_REGISTERED --settle--> SETTLED
         --begin_verification--> VERIFYING --finish--> DONE

A settle issued while IDLE is the initial drain (it resolves eagerly loaded
files) and leaves the session IDLE. Queries are only accepted once the
session is SETTLED, and no file may be registered after that point.
"""

import logging
import threading
from concurrent.futures import Future, InvalidStateError
from concurrent.futures import TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Sequence

from annocheck.core.engine.protocol import (
    AnalysisEngine,
    InferredType,
    InferredValue,
    SourceProvider,
)
from annocheck.domain.definition_models import GraphBinding, GraphRoot
from annocheck.domain.errors import AnnocheckError, EngineError, SessionStateError, SettleError
from annocheck.domain.syntax_models import SourceFile

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    FILES_REGISTERED = "files_registered"
    SETTLED = "settled"
    VERIFYING = "verifying"
    DONE = "done"


_QUERYABLE = (SessionState.SETTLED, SessionState.VERIFYING)


class AnalysisSession:
    """
    Explicitly owned analysis session for a single test group.

    Mutation (registration, settlement) is strictly sequential. Once the
    session is settled, every query method is a pure read and may be called
    from several verification threads.
    """

    def __init__(
            self,
            engine: AnalysisEngine,
            source_provider: SourceProvider,
            *,
            name: str = "",
            settle_timeout: Optional[float] = None,
    ) -> None:
        """
        Args:
            engine: The engine instance owned by this session.
            source_provider: Resolves registered names to source text.
            name: Group name, used in log messages.
            settle_timeout: Seconds to wait for a settle callback (None waits forever).
        """
        self._engine = engine
        self._source_provider = source_provider
        self._name = name
        self._settle_timeout = settle_timeout
        self._state = SessionState.IDLE
        self._eager: List[str] = []
        self._cases: List[str] = []
        self._settle_count = 0
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def settle_count(self) -> int:
        return self._settle_count

    @property
    def cases(self) -> List[str]:
        return list(self._cases)

    def preload(self, names: Sequence[str]) -> None:
        """Register eagerly loaded files ahead of the initial drain."""
        self._require(SessionState.IDLE, action="preload files")
        if self._settle_count:
            raise SessionStateError("Eager files must be registered before the initial settle.")
        for name in names:
            logger.debug(f"[{self._name}] Eager load: {name}")
            self._register(name)
            self._eager.append(name)

    def register_cases(self, names: Sequence[str]) -> None:
        """Register every case file of the group, in the given order."""
        self._require(SessionState.IDLE, action="register case files")
        for name in names:
            self._register(name)
            self._cases.append(name)
        self._state = SessionState.FILES_REGISTERED
        logger.debug(f"[{self._name}] Registered {len(self._cases)} case files.")

    def settle(self) -> None:
        """
        Block until the engine has resolved all pending work.

        Raises:
            SettleError: The engine reported an error, raised while settling,
                         or did not call back within the timeout.
        """
        self._require(SessionState.IDLE, SessionState.FILES_REGISTERED, action="settle")

        done: Future = Future()

        def _on_settled(err: Optional[BaseException]) -> None:
            try:
                if err is not None:
                    done.set_exception(err)
                else:
                    done.set_result(None)
            except InvalidStateError:
                logger.warning(f"[{self._name}] Engine invoked the settle callback more than once.")

        try:
            self._engine.settle(_on_settled)
            done.result(timeout=self._settle_timeout)
        except FutureTimeoutError:
            raise SettleError(
                f"Analysis engine did not settle within {self._settle_timeout}s"
            ) from None
        except Exception as e:
            raise SettleError(f"Analysis engine failed to settle: {e}") from e

        self._settle_count += 1
        if self._state is SessionState.FILES_REGISTERED:
            self._state = SessionState.SETTLED
        logger.debug(f"[{self._name}] Settle #{self._settle_count} complete ({self._state.value}).")

    def begin_verification(self) -> None:
        self._require(SessionState.SETTLED, action="begin verification")
        self._state = SessionState.VERIFYING

    def finish(self) -> None:
        self._require(SessionState.SETTLED, SessionState.VERIFYING, action="finish")
        self._state = SessionState.DONE

    def close(self) -> None:
        """Release the engine. The session cannot be used afterwards."""
        closer = getattr(self._engine, "close", None)
        if callable(closer):
            try:
                closer()
            except Exception as e:
                logger.warning(f"[{self._name}] Engine failed to close: {e}")
        self._state = SessionState.DONE

    # -------------------------------------------------------------------------
    # QUERIES (settled sessions only)
    # -------------------------------------------------------------------------

    def source_file(self, name: str) -> SourceFile:
        self._require(*_QUERYABLE, action="read files")
        return self._call(f"read '{name}'", lambda: self._engine.get_file(name))

    def find_expression_around(self, source: SourceFile, start: int, end: int) -> Optional[Any]:
        self._require(*_QUERYABLE, action="query expressions")
        return self._call("find an expression", lambda: self._engine.find_expression_around(source, start, end))

    def expression_type(self, expression: Any) -> Optional[InferredValue]:
        self._require(*_QUERYABLE, action="infer types")
        return self._call("infer a type", lambda: self._engine.expression_type(expression))

    def all_properties(self, inferred: InferredType) -> List[str]:
        self._require(*_QUERYABLE, action="enumerate properties")
        return self._call("enumerate properties", lambda: list(self._engine.all_properties(inferred)))

    def definition_graph(self, source: SourceFile) -> Iterable[GraphRoot]:
        self._require(*_QUERYABLE, action="inspect definitions")
        return self._call("build the definition graph", lambda: list(self._engine.definition_graph(source)))

    def binding_members(self, value: object) -> Iterable[GraphBinding]:
        self._require(*_QUERYABLE, action="inspect definitions")
        return self._call("list binding members", lambda: list(self._engine.binding_members(value)))

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _require(self, *states: SessionState, action: str) -> None:
        with self._lock:
            current = self._state
        if current not in states:
            allowed = ", ".join(s.value for s in states)
            raise SessionStateError(
                f"Cannot {action} while session is '{current.value}' (requires: {allowed})"
            )

    def _register(self, name: str) -> None:
        try:
            self._engine.register_file(name, self._source_provider)
        except AnnocheckError:
            raise
        except Exception as e:
            raise EngineError(f"Analysis engine failed to register '{name}': {e}") from e

    def _call(self, action: str, query: Callable[[], Any]) -> Any:
        """Run an engine query, reporting engine crashes as EngineError."""
        try:
            return query()
        except AnnocheckError:
            raise
        except Exception as e:
            raise EngineError(f"Analysis engine failed to {action}: {e}") from e

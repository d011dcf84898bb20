from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple

from ..core.exceptions import PartialWriteFailure

logger = logging.getLogger(__name__)

Undo = Callable[[], Any]


class WriteJournal:
    """Undo log for a sequence of single-key writes.

    Each step runs through `run`, which records how to reverse it. If the block
    raises after at least one step completed, the recorded undos run newest
    first and PartialWriteFailure replaces the original error (kept as the
    cause). A failure before any step completed propagates unchanged.

    Usage:

        with WriteJournal("employee.create", record_id) as journal:
            journal.run("put employee", put_fn, undo=delete_fn)
    """

    def __init__(self, operation: str, record_id: Optional[str] = None):
        self.operation = operation
        self.record_id = record_id
        self._steps: List[Tuple[str, Optional[Undo]]] = []

    @property
    def completed(self) -> List[str]:
        return [name for name, _ in self._steps]

    def run(self, step: str, action: Callable[[], Any], undo: Optional[Undo] = None) -> Any:
        """Run one step. An action returning False changed nothing and is not recorded."""
        result = action()
        if result is not False:
            self._steps.append((step, undo))
        return result

    def __enter__(self) -> "WriteJournal":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None or not isinstance(exc, Exception) or not self._steps:
            return False

        completed = self.completed
        errors = self._rollback()
        if errors:
            logger.error(
                "%s for %s left partially applied; %d undo step(s) failed: %s",
                self.operation,
                self.record_id,
                len(errors),
                "; ".join(str(e) for e in errors),
            )
        else:
            logger.warning("%s for %s rolled back after: %s", self.operation, self.record_id, exc)

        raise PartialWriteFailure(
            operation=self.operation,
            record_id=self.record_id,
            completed=completed,
            compensation_errors=errors,
        ) from exc

    def _rollback(self) -> List[Exception]:
        errors: List[Exception] = []
        for name, undo in reversed(self._steps):
            if undo is None:
                continue
            try:
                undo()
            except Exception as undo_exc:
                logger.error("Undo of %r failed: %s", name, undo_exc)
                errors.append(undo_exc)
        self._steps.clear()
        return errors

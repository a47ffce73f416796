# render_scheduler.py
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

log = logging.getLogger(__name__)

DETAIL = "detail"
BASE = "base"
KINDS = (BASE, DETAIL)


@dataclass(frozen=True)
class RenderTicket:
    kind: str
    generation: int


class RenderScheduler:
    """
    At most one outstanding render job per kind, run from the host loop.

    `loop` only needs the tkinter timer API: after(ms, fn) -> id and
    after_cancel(id). schedule() never runs a job synchronously; repeated
    calls while a job of that kind is queued collapse into it.

    Each schedule() call bumps the kind's generation. A job's ticket is
    current only while no newer schedule()/cancel() of the same kind has
    happened, which is what callers check before committing a result.
    """

    def __init__(self, loop, dispatch: Callable[[RenderTicket], None], delay_ms: int = 0):
        self._loop = loop
        self._dispatch = dispatch
        self._delay_ms = int(delay_ms)
        self._after_ids: Dict[str, Optional[str]] = {k: None for k in KINDS}
        self._generation: Dict[str, int] = {k: 0 for k in KINDS}
        self.dispatch_count = 0

    def _check_kind(self, kind: str):
        if kind not in self._generation:
            raise ValueError(f"Unknown render kind: {kind!r}")

    def is_pending(self, kind: str) -> bool:
        self._check_kind(kind)
        return self._after_ids[kind] is not None

    def generation(self, kind: str) -> int:
        self._check_kind(kind)
        return self._generation[kind]

    def schedule(self, kind: str) -> bool:
        """Queue a job of `kind`. Returns False when it joined a pending one."""
        self._check_kind(kind)
        self._generation[kind] += 1
        if self._after_ids[kind] is not None:
            return False
        self._after_ids[kind] = self._loop.after(self._delay_ms, lambda: self._fire(kind))
        log.debug("scheduled %s render (gen %d)", kind, self._generation[kind])
        return True

    def cancel(self, kind: Optional[str] = None):
        kinds = KINDS if kind is None else (kind,)
        for k in kinds:
            self._check_kind(k)
            after_id = self._after_ids[k]
            if after_id is not None:
                try:
                    self._loop.after_cancel(after_id)
                except Exception:
                    log.debug("after_cancel failed for %s job", k, exc_info=True)
                self._after_ids[k] = None
            # invalidates any in-flight result too
            self._generation[k] += 1

    def is_current(self, ticket: RenderTicket) -> bool:
        return self._generation.get(ticket.kind) == ticket.generation

    def _fire(self, kind: str):
        self._after_ids[kind] = None
        ticket = RenderTicket(kind, self._generation[kind])
        self.dispatch_count += 1
        log.debug("dispatching %s render (gen %d)", kind, ticket.generation)
        self._dispatch(ticket)

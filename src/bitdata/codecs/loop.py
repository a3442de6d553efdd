from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .base import ListDecoder, target_name
from .bitcursor import BitCursor
from ..errors import OutOfRange

_logger = logging.getLogger(__name__)


class Loop(ListDecoder):
    """
    Elements decoded until ``clause`` rejects one or the source runs out.

    Every element is first decoded on a scratch cursor. The trial is kept,
    and the scratch position committed, only when ``clause(trial)`` is true.
    A rejected trial, a trial that hits the end of the source, and a trial
    that consumes no bits all end the list and leave the cursor where the
    trial started. ``clause=None`` accepts every element.
    """

    def __init__(self, element: Any, clause: Optional[Callable[[Any], bool]] = None):
        super().__init__(element)
        self.clause = clause

    def __repr__(self) -> str:
        return f"Loop({target_name(self.element)})"

    def fill(self, values: list, cur: BitCursor) -> None:
        from ..dispatch import decode
        while True:
            checkpoint = cur.tell()
            scratch = cur.fork()
            try:
                trial = decode(self.element, scratch)
            except OutOfRange as exc:
                _logger.debug("loop ended at %d: %s", checkpoint, exc)
                return
            if self.clause is not None and not self.clause(trial):
                _logger.debug("loop ended at %d: clause rejected %r", checkpoint, trial)
                return
            if scratch.tell() == checkpoint:
                _logger.debug("loop ended at %d: element consumed no bits", checkpoint)
                return
            values.append(trial)
            cur.seek(scratch.tell())

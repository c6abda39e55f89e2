from __future__ import annotations

from typing import Optional, Protocol

from .model import SharedCode


class SharedCodeRepository(Protocol):
    def get(self, code: str) -> Optional[SharedCode]:
        raise NotImplementedError

    def try_create(self, shared: SharedCode) -> bool:
        """Store a new code; False when the code is already taken."""

        raise NotImplementedError

"""Collision-free object identifiers for one conversion run."""

import uuid
from typing import Callable, Optional, Set


def _uuid_token() -> str:
    return uuid.uuid4().hex


class IdAllocator:
    """Issue `<kind>_<token>` ids, retrying on collision within this allocator."""

    def __init__(self, token_factory: Optional[Callable[[], str]] = None):
        self.token_factory = token_factory or _uuid_token
        self.issued: Set[str] = set()

    def allocate(self, kind: str) -> str:
        while True:
            object_id = f"{kind}_{self.token_factory()}"
            if object_id not in self.issued:
                self.issued.add(object_id)
                return object_id

    def slide(self) -> str:
        return self.allocate("slide")

    def table(self) -> str:
        return self.allocate("table")

    def image(self) -> str:
        return self.allocate("image")

    def __len__(self) -> int:
        return len(self.issued)

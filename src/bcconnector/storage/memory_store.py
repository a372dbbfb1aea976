"""In-memory secure store for tests and ephemeral sessions"""

from typing import Dict, Optional, Tuple

from .interface import ISecureStore


class InMemorySecureStore(ISecureStore):
    """Process-local store; nothing survives a restart"""

    def __init__(self, service: str = "BCConnector"):
        self.service = service
        self._values: Dict[Tuple[str, str], str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get((self.service, key))

    def set(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self.delete(key)
            return
        self._values[(self.service, key)] = value

    def delete(self, key: str) -> None:
        self._values.pop((self.service, key), None)

    def keys(self) -> list[str]:
        return sorted(k for s, k in self._values if s == self.service)

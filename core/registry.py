"""
Host registry.

Keeps the registered host adapters in registration order and resolves the
host ids given on the command line. Order matters: operations over several
hosts run, and log, in the order the ids were requested.
"""

from typing import Dict, List, Optional, Sequence

from core.errors import UnknownIdentifierError


class HostRegistry:
    """Registry of host adapters keyed by host id."""

    def __init__(self):
        self._adapters: Dict[str, object] = {}

    def register(self, adapter):
        """Register an adapter; a second adapter for the same id is rejected."""
        if adapter.id in self._adapters:
            raise ValueError(f"Host '{adapter.id}' already registered")
        self._adapters[adapter.id] = adapter

    def unregister(self, host_id: str):
        self._adapters.pop(host_id, None)

    def get_adapter(self, host_id: str):
        return self._adapters.get(host_id)

    def list_hosts(self) -> List[str]:
        return list(self._adapters)

    def resolve(self, host_ids: Optional[Sequence[str]] = None) -> List:
        """
        Adapters for `host_ids` in the given order (all hosts when empty).

        Raises:
            UnknownIdentifierError: listing every unknown id and the valid set
        """
        if not host_ids:
            return list(self._adapters.values())
        missing = [h for h in host_ids if h not in self._adapters]
        if missing:
            raise UnknownIdentifierError('host', missing, self.list_hosts())
        resolved = []
        for host_id in host_ids:
            adapter = self._adapters[host_id]
            if adapter not in resolved:
                resolved.append(adapter)
        return resolved

    def resolve_one(self, host_id: str):
        return self.resolve([host_id])[0]

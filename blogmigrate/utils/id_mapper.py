"""
Source-to-target identifier mapping.
"""
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional


class IDMapper(Mapping):
    """
    Maps identifiers from one store's id space to another's.

    Entries are added with :meth:`record` by the phase that builds the
    mapping; consumers get the read-only ``Mapping`` interface. Keys and
    values are kept as strings so ids of any type compare consistently.
    """

    def __init__(self, initial: Optional[Mapping[Any, Any]] = None):
        self._ids: Dict[str, str] = {}
        if initial:
            for source_id, target_id in initial.items():
                self.record(source_id, target_id)

    def record(self, source_id: Any, target_id: Any) -> None:
        """
        Record that ``source_id`` now lives at ``target_id``.

        Raises:
            ValueError: If either id is empty
        """
        if source_id is None or str(source_id) == "":
            raise ValueError("Source id is required")
        if target_id is None or str(target_id) == "":
            raise ValueError(f"Target id is required for source id {source_id}")
        self._ids[str(source_id)] = str(target_id)

    def __getitem__(self, source_id: Any) -> str:
        return self._ids[str(source_id)]

    def __contains__(self, source_id: object) -> bool:
        return source_id is not None and str(source_id) in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"IDMapper({self._ids!r})"

"""Hosts and guests attached to the current rundown."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from rundown_editor.errors import TalentError
from rundown_editor.models import Talent, TalentBuckets, TalentRole

logger = logging.getLogger(__name__)

# hosts and guests together
MAX_PEOPLE = 4


class TalentRoster:
    """Two ordered buckets (hosts, guests) with a shared size limit.

    Args:
        on_change: Called with a short reason string after each mutation.
    """

    def __init__(self, on_change: Optional[Callable[[str], None]] = None) -> None:
        self._buckets: Dict[TalentRole, List[Talent]] = {
            TalentRole.HOST: [],
            TalentRole.GUEST: [],
        }
        self.on_change = on_change

    @property
    def hosts(self) -> List[Talent]:
        return list(self._buckets[TalentRole.HOST])

    @property
    def guests(self) -> List[Talent]:
        return list(self._buckets[TalentRole.GUEST])

    def __len__(self) -> int:
        return sum(len(b) for b in self._buckets.values())

    def _bucket(self, role: Union[TalentRole, str]) -> List[Talent]:
        try:
            return self._buckets[TalentRole(role)]
        except ValueError:
            raise TalentError(f"Unknown talent role: {role!r}") from None

    def _check_index(self, bucket: List[Talent], index: int) -> None:
        if not 0 <= index < len(bucket):
            raise TalentError(f"No talent at position {index}")

    def load(self, buckets: Union[TalentBuckets, Dict[str, Any], None]) -> None:
        """Replace both buckets; does not notify."""
        if buckets is None:
            buckets = TalentBuckets()
        elif not isinstance(buckets, TalentBuckets):
            buckets = TalentBuckets.model_validate(buckets)
        self._buckets[TalentRole.HOST] = [
            t.model_copy(update={"role": TalentRole.HOST}) for t in buckets.hosts
        ]
        self._buckets[TalentRole.GUEST] = [
            t.model_copy(update={"role": TalentRole.GUEST}) for t in buckets.guests
        ]
        if len(self) > MAX_PEOPLE:
            logger.warning("Loaded roster has %d people (limit %d)", len(self), MAX_PEOPLE)

    def clear(self) -> None:
        for bucket in self._buckets.values():
            bucket.clear()

    def add(self, role: Union[TalentRole, str], name: str, notes: str = "") -> Talent:
        bucket = self._bucket(role)
        name = (name or "").strip()
        if not name:
            raise TalentError("Talent name is required")
        if len(self) >= MAX_PEOPLE:
            raise TalentError(f"A rundown can have at most {MAX_PEOPLE} hosts and guests")
        person = Talent(name=name, role=TalentRole(role), notes=notes)
        bucket.append(person)
        self._notify("talent-add")
        return person

    def remove(self, role: Union[TalentRole, str], index: int) -> Talent:
        bucket = self._bucket(role)
        self._check_index(bucket, index)
        person = bucket.pop(index)
        self._notify("talent-remove")
        return person

    def rename(self, role: Union[TalentRole, str], index: int, name: str) -> Talent:
        bucket = self._bucket(role)
        self._check_index(bucket, index)
        name = (name or "").strip()
        if not name:
            raise TalentError("Talent name is required")
        bucket[index] = bucket[index].model_copy(update={"name": name})
        self._notify("talent-rename")
        return bucket[index]

    def move(self, role: Union[TalentRole, str], from_index: int, to_index: int) -> None:
        bucket = self._bucket(role)
        self._check_index(bucket, from_index)
        self._check_index(bucket, to_index)
        if from_index == to_index:
            return
        bucket.insert(to_index, bucket.pop(from_index))
        self._notify("talent-move")

    def to_payload(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "hosts": [t.model_dump(mode="json", exclude_none=True) for t in self.hosts],
            "guests": [t.model_dump(mode="json", exclude_none=True) for t in self.guests],
        }

    def _notify(self, reason: str) -> None:
        if self.on_change is not None:
            self.on_change(reason)

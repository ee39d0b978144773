"""A set of interned strings with a bucketed dump."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TextIO

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_MASK64 = (1 << 64) - 1


def _hash(text: str) -> int:
    value = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        value = ((value ^ byte) * _FNV_PRIME) & _MASK64
    return value


class StringSet:
    """Stores each distinct string once and hands back the stored copy."""

    max_load_factor = 0.5

    def __init__(self) -> None:
        self._strings: dict[str, str] = {}
        self._bucket_count = 1

    def intern(self, text: str) -> str:
        stored = self._strings.setdefault(text, text)
        while len(self._strings) > self._bucket_count * self.max_load_factor:
            self._bucket_count = self._bucket_count * 2 + 1
        return stored

    def __len__(self) -> int:
        return len(self._strings)

    def __contains__(self, text: object) -> bool:
        return text in self._strings

    def __iter__(self) -> Iterator[str]:
        return iter(self._strings)

    @property
    def bucket_count(self) -> int:
        return self._bucket_count

    @property
    def load_factor(self) -> float:
        return len(self._strings) / self._bucket_count

    def _buckets(self) -> dict[int, list[str]]:
        buckets: dict[int, list[str]] = {}
        for text in self._strings.values():
            buckets.setdefault(_hash(text) % self._bucket_count, []).append(text)
        return buckets

    def dump(self, out: TextIO) -> None:
        """Write every string, grouped by bucket, then table statistics."""
        buckets = self._buckets()
        max_bucket_size = 0
        for index in sorted(buckets):
            entries = buckets[index]
            max_bucket_size = max(max_bucket_size, len(entries))
            for position, text in enumerate(entries):
                if position == 0:
                    out.write(f"string_set[{index:4d}]: ")
                else:
                    out.write(f"          {'':4s}   ")
                out.write(f'{_hash(text):22d} {id(text):#x}->"{text}"\n')
        out.write(f"load_factor = {self.load_factor:.3f}\n")
        out.write(f"bucket_count = {self._bucket_count}\n")
        out.write(f"max_bucket_size = {max_bucket_size}\n")
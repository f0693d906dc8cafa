"""
blockcpp Compiler — Name Registry
=================================
Maps the names a user typed into blocks onto identifiers that are legal in the
generated source and do not collide with reserved words or with each other.

    registry = NameRegistry(RESERVED_WORDS)
    registry.get_name("for", NameCategory.VARIABLE)     # → "for2"
    registry.get_name("For", NameCategory.VARIABLE)     # → "for2" (case-insensitive)
    registry.get_distinct_name("for", NameCategory.PROCEDURE)  # → "for3"

A registry lives for one generation pass; `reset()` forgets every decision
but keeps the reserved words.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, Set
from urllib.parse import quote

from blockcpp.core.Types import NameCategory

# Punctuation quote() leaves alone; _NON_WORD replaces it afterwards.
_URI_SAFE = ";,/?:@&=+$!*'()#"
_NON_WORD = re.compile(r"[^\w]", re.ASCII)


class NameRegistry:

    def __init__(self, reserved_words: Iterable[str] = (), variable_prefix: str = ""):
        self.variable_prefix = variable_prefix
        self._reserved: Set[str] = set()
        self.add_reserved_words(reserved_words)
        self._db: Dict[str, str] = {}
        self._db_reverse: Set[str] = set()

    def add_reserved_words(self, words: Iterable[str]) -> None:
        for word in words:
            word = word.strip()
            if word:
                self._reserved.add(word)

    def is_reserved(self, name: str) -> bool:
        return name in self._reserved

    def reset(self) -> None:
        self._db = {}
        self._db_reverse = set()

    def _prefix_for(self, category: NameCategory) -> str:
        return self.variable_prefix if category is NameCategory.VARIABLE else ""

    def get_name(self, name: str, category: NameCategory) -> str:
        """Return the emitted identifier for `name`, allocating one on first use."""
        key = f"{name.lower()}_{category.value}"
        prefix = self._prefix_for(category)
        if key in self._db:
            return prefix + self._db[key]
        safe = self.get_distinct_name(name, category)
        self._db[key] = safe[len(prefix):]
        return safe

    def get_distinct_name(self, name: str, category: NameCategory) -> str:
        """Allocate a fresh identifier that has never been handed out by this registry."""
        base = self.safe_name(name)
        candidate = base
        i = 1
        while candidate in self._db_reverse or candidate in self._reserved:
            i += 1
            candidate = f"{base}{i}"
        self._db_reverse.add(candidate)
        return self._prefix_for(category) + candidate

    @staticmethod
    def safe_name(name: str) -> str:
        """Turn arbitrary text into a legal identifier, e.g. 'my var!' → 'my_var_'."""
        if not name:
            return "unnamed"
        name = quote(name.replace(" ", "_"), safe=_URI_SAFE)
        name = _NON_WORD.sub("_", name)
        if name[0].isdigit():
            name = "my_" + name
        return name

    @staticmethod
    def equals(name1: str, name2: str) -> bool:
        return name1.lower() == name2.lower()

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

BLOCK_SIZE = 4096

CMD_ERASE = "erase"
CMD_NEW = "new"
CMD_ZERO = "zero"
KNOWN_CMDS = frozenset({CMD_ERASE, CMD_NEW, CMD_ZERO})

@dataclass(frozen=True)
class BlockRange:
    """Half-open [begin, end) run of block indices in the output image."""
    begin: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.begin

    @property
    def byte_offset(self) -> int:
        return self.begin * BLOCK_SIZE

    @property
    def byte_length(self) -> int:
        return self.size * BLOCK_SIZE

class CommandSet:
    """Ranges grouped by command kind; kinds iterate alphabetically,
    ranges keep the order they had in the manifest."""

    def __init__(self) -> None:
        self._by_kind: Dict[str, List[BlockRange]] = {}

    def add(self, kind: str, rng: BlockRange) -> None:
        self._by_kind.setdefault(kind, []).append(rng)

    def kinds(self) -> List[str]:
        return sorted(self._by_kind)

    def ranges(self, kind: str) -> List[BlockRange]:
        return list(self._by_kind.get(kind, ()))

    def __iter__(self) -> Iterator[Tuple[str, BlockRange]]:
        for kind in self.kinds():
            for rng in self._by_kind[kind]:
                yield kind, rng

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_kind.values())

    def max_end(self) -> int:
        return max((r.end for _, r in self), default=0)

@dataclass
class TransferList:
    version: int
    total_blocks: int
    stash_entries: Optional[int] = None
    stash_max_blocks: Optional[int] = None
    commands: CommandSet = field(default_factory=CommandSet)

    def max_end(self) -> int:
        return self.commands.max_end()

    def image_size(self) -> int:
        return self.max_end() * BLOCK_SIZE

    def new_blocks(self) -> int:
        return sum(r.size for r in self.commands.ranges(CMD_NEW))

    def count(self) -> int:
        return len(self.commands)

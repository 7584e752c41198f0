# engine.py

import itertools
import logging
import random
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

PROCESS = "process"
FREE = "free"
FREE_LABEL = "Free"


@dataclass(frozen=True)
class Block:
    """A contiguous range of the simulated address space."""
    id: int
    size: int
    kind: str = FREE
    label: str = FREE_LABEL
    requested_size: Optional[int] = None

    @property
    def is_free(self) -> bool:
        return self.kind == FREE

    @property
    def is_process(self) -> bool:
        return self.kind == PROCESS

    @property
    def internal_fragmentation(self) -> int:
        if not self.is_process:
            return 0
        return self.size - self.requested_size

    def __repr__(self):
        if self.is_free:
            return f"[F|{self.size}]"
        return f"[{self.label}|{self.size}]"


def free_block(block_id: int, size: int) -> Block:
    return Block(block_id, size)


class IdGenerator:
    """Hands out unique, increasing block ids. Never resets within a session."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def __call__(self) -> int:
        return next(self._counter)


@dataclass
class SimulationConfig:
    total_size: int = 100
    fragment_probability: float = 0.3
    fragment_slack: int = 10      # block must exceed the request by more than this
    max_fragment: int = 5
    max_deficit: int = 5          # actual usage is up to max_deficit - 1 below the request
    seed: Optional[int] = None


@dataclass(frozen=True)
class MemoryState:
    """
    The memory map plus the swap store, replaced as one value per operation.

    Attributes:
        total_size (int): Fixed capacity in MB
        blocks (Tuple[Block, ...]): Memory map in address order
        swapped (Tuple[Block, ...]): Swapped-out processes in insertion order
        next_process (int): Number used for the next ``P<n>`` label
    """
    total_size: int
    blocks: Tuple[Block, ...]
    swapped: Tuple[Block, ...] = ()
    next_process: int = 1

    @classmethod
    def initial(cls, total_size: int, ids: IdGenerator) -> "MemoryState":
        assert total_size > 0
        return cls(total_size, (free_block(ids(), total_size),))


def check_state(state: MemoryState) -> MemoryState:
    """Assert the partition invariants; return the state for chaining."""
    assert all(b.size > 0 for b in state.blocks), state.blocks
    assert sum(b.size for b in state.blocks) == state.total_size, state.blocks
    for b in state.blocks + state.swapped:
        if b.is_process:
            assert 0 < b.requested_size <= b.size, b
    assert all(b.is_process for b in state.swapped)
    resident = {b.id for b in state.blocks}
    assert not any(p.id in resident for p in state.swapped)
    return state


# -----------------------------
# Placement helpers
# -----------------------------
def first_fit(blocks, size: int) -> Optional[int]:
    for i, block in enumerate(blocks):
        if block.is_free and block.size >= size:
            return i
    return None


def _place(blocks, index: int, process: Block, ids: IdGenerator) -> Tuple[Block, ...]:
    # process takes the head of the free block, any leftover stays free behind it
    target = blocks[index]
    placed = [process]
    remainder = target.size - process.size
    if remainder > 0:
        placed.append(free_block(ids(), remainder))
    return tuple(blocks[:index]) + tuple(placed) + tuple(blocks[index + 1:])


def _to_free(block: Block) -> Block:
    return replace(block, kind=FREE, label=FREE_LABEL, requested_size=None)


# -----------------------------
# Operations
# -----------------------------
def allocate(state: MemoryState, size: int, ids: IdGenerator,
             rng: random.Random, config: Optional[SimulationConfig] = None) -> MemoryState:
    """
    First-fit allocation of a new process of ``size`` MB.

    The new block reserves ``size`` MB but only uses a slightly smaller
    amount (internal fragmentation). Occasionally a small free fragment is
    left in front of it (external fragmentation). Adjacent free blocks are
    never merged here.

    Returns the input state unchanged if ``size`` is out of range or no free
    block is large enough.
    """
    config = config or SimulationConfig()
    if size <= 0 or size > state.total_size:
        return state

    index = first_fit(state.blocks, size)
    if index is None:
        return state

    target = state.blocks[index]
    actual = max(size - rng.randrange(config.max_deficit), 1)
    process = Block(ids(), size, PROCESS, f"P{state.next_process}", actual)

    blocks = list(state.blocks)
    if rng.random() < config.fragment_probability and target.size > size + config.fragment_slack:
        fragment = rng.randint(1, config.max_fragment)
        remainder = target.size - size - fragment
        carved = [free_block(ids(), fragment), process]
        if remainder > 0:
            carved.append(free_block(ids(), remainder))
        blocks[index:index + 1] = carved
        logger.debug("fragment of %d MB injected before %s", fragment, process.label)
    else:
        blocks = list(_place(blocks, index, process, ids))

    return check_state(replace(state, blocks=tuple(blocks), next_process=state.next_process + 1))


def is_compact(blocks) -> bool:
    free = [i for i, b in enumerate(blocks) if b.is_free]
    return not free or free == [len(blocks) - 1]


def compact(state: MemoryState, ids: IdGenerator) -> MemoryState:
    """Move every process to the front and merge all free space into one trailing block."""
    if is_compact(state.blocks):
        return state

    processes = tuple(b for b in state.blocks if b.is_process)
    total_free = state.total_size - sum(p.size for p in processes)
    blocks = processes
    if total_free > 0:
        blocks += (free_block(ids(), total_free),)
    return check_state(replace(state, blocks=blocks))


def swap_out(state: MemoryState, ids: IdGenerator) -> MemoryState:
    """Evict the last resident process; its address range becomes free in place."""
    victims = [i for i, b in enumerate(state.blocks) if b.is_process]
    if not victims:
        return state

    index = victims[-1]
    victim = state.blocks[index]
    blocks = list(state.blocks)
    blocks[index] = _to_free(victim)

    swapped = state.swapped
    evicted = replace(victim, id=ids())
    if all(p.id != evicted.id for p in swapped):
        swapped += (evicted,)
    return check_state(replace(state, blocks=tuple(blocks), swapped=swapped))


def swap_in(state: MemoryState, process_id: int, ids: IdGenerator) -> MemoryState:
    """Bring a swapped process back into the first free block that fits it."""
    process = next((p for p in state.swapped if p.id == process_id), None)
    if process is None:
        return state

    index = first_fit(state.blocks, process.size)
    if index is None:
        return state

    blocks = _place(state.blocks, index, replace(process, id=ids()), ids)
    swapped = tuple(p for p in state.swapped if p.id != process_id)
    return check_state(replace(state, blocks=blocks, swapped=swapped))


def relocate(state: MemoryState, ids: IdGenerator, rng: random.Random) -> MemoryState:
    """Move a random process into a random other free block that can hold it."""
    processes = [b for b in state.blocks if b.is_process]
    if not processes:
        return state

    source = rng.choice(processes)
    candidates = [b for b in state.blocks
                  if b.is_free and b.size >= source.size and b.id != source.id]
    if not candidates:
        return state
    destination = rng.choice(candidates)

    blocks = []
    for block in state.blocks:
        if block.id == source.id:
            blocks.append(_to_free(block))
        elif block.id == destination.id:
            blocks.extend(_place((block,), 0, replace(source, id=ids()), ids))
        else:
            blocks.append(block)
    return check_state(replace(state, blocks=tuple(blocks)))


def metrics(state: MemoryState, threshold: int) -> Dict[str, float]:
    """
    Usage and fragmentation figures for display.

    ``threshold`` is the allocation size currently selected by the user:
    free blocks smaller than it count as external fragmentation.
    """
    used = sum(b.size for b in state.blocks if b.is_process)
    free_sizes = [b.size for b in state.blocks if b.is_free]
    return {
        "total": state.total_size,
        "used": used,
        "free": state.total_size - used,
        "external_fragmentation": sum(s for s in free_sizes if s < threshold),
        "internal_fragmentation": sum(b.internal_fragmentation for b in state.blocks),
        "largest_free": max(free_sizes) if free_sizes else 0,
        "utilization": round(used / state.total_size, 4),
    }


# -----------------------------
# Stateful facade for the UI
# -----------------------------
class MemoryEngine:
    """
    Holds the current MemoryState for one simulation session.

    Every action computes the whole next state before publishing it, so the
    UI never sees a half-updated map. Each action returns True if the state
    changed and False if the request could not be satisfied.
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 ids: Optional[IdGenerator] = None, rng: Optional[random.Random] = None):
        self.config = config or SimulationConfig()
        self.ids = ids or IdGenerator()
        self.rng = rng or random.Random(self.config.seed)
        self.event_log: List[str] = []
        self.reset()

    def reset(self):
        self.state = MemoryState.initial(self.config.total_size, self.ids)
        self.event_log.append(f"Memory reset: {self.config.total_size} MB free")

    def _commit(self, new_state: MemoryState) -> bool:
        changed = new_state is not self.state
        self.state = new_state
        return changed

    def allocate(self, size: int) -> bool:
        label = f"P{self.state.next_process}"
        new_state = allocate(self.state, size, self.ids, self.rng, self.config)
        if not self._commit(new_state):
            if size <= 0 or size > self.state.total_size:
                self.event_log.append(f"Allocation of {size} MB rejected: size out of range")
            else:
                self.event_log.append(f"Allocation of {size} MB failed: no free block large enough")
            return False
        process = next(b for b in new_state.blocks if b.label == label)
        self.event_log.append(
            f"Allocated {label} ({size} MB, uses {process.requested_size} MB)")
        return True

    def compact(self) -> bool:
        if not self._commit(compact(self.state, self.ids)):
            self.event_log.append("Compaction skipped: memory already compact")
            return False
        self.event_log.append("Compacted memory: free space merged at the end")
        return True

    def swap_out(self) -> bool:
        if not self._commit(swap_out(self.state, self.ids)):
            self.event_log.append("Swap out skipped: no resident process")
            return False
        self.event_log.append(f"Swapped out {self.state.swapped[-1].label}")
        return True

    def swap_in(self, process_id: int) -> bool:
        process = next((p for p in self.state.swapped if p.id == process_id), None)
        if not self._commit(swap_in(self.state, process_id, self.ids)):
            name = process.label if process else f"#{process_id}"
            self.event_log.append(f"Restore of {name} failed: no free block large enough")
            return False
        self.event_log.append(f"Restored {process.label} ({process.size} MB)")
        return True

    def relocate(self) -> bool:
        before = {b.id for b in self.state.blocks}
        if not self._commit(relocate(self.state, self.ids, self.rng)):
            self.event_log.append("Relocation skipped: no process or no other free block fits")
            return False
        moved = next(b for b in self.state.blocks if b.is_process and b.id not in before)
        self.event_log.append(f"Relocated {moved.label} to a new free block")
        return True

    def get_state(self) -> Tuple[Block, ...]:
        return self.state.blocks

    def get_swapped(self) -> Tuple[Block, ...]:
        return self.state.swapped

    def get_fragmentation_metrics(self, threshold: int) -> Dict[str, float]:
        return metrics(self.state, threshold)

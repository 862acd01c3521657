"""In-process simulated block-DAG network.

A SimNode mines blocks on top of its current tips and relays every block
it accepts to its peers. Because nodes mine concurrently, a node can
receive a block before one of its parents; such blocks wait in an orphan
pool until the missing parents arrive. Once every generate() call has
returned, every node connected (directly or transitively) to a miner has
accepted all of that miner's blocks, so per-node views agree.

Locking: each node has one lock guarding its block store. Relaying to
peers happens outside the lock, so two nodes relaying to each other can
never deadlock.
"""

from __future__ import annotations

import hashlib
import random
import time
from collections import deque
from collections.abc import Sequence
from threading import Lock

import structlog

from dagdemo.contracts import BlockHash
from dagdemo.core.config import SimNetSettings
from dagdemo.core.dag import DagNode

logger = structlog.get_logger(__name__)

_GENESIS_SEED = b"dagdemo simnet genesis"


def genesis_block() -> DagNode:
    """The genesis block every simulated node starts from."""
    return DagNode(block_hash=BlockHash(hashlib.sha256(_GENESIS_SEED).hexdigest()))


def _block_hash(miner: int, nonce: int, parents: Sequence[BlockHash]) -> BlockHash:
    payload = f"{miner}:{nonce}:{','.join(parents)}".encode()
    return BlockHash(hashlib.sha256(payload).hexdigest())


class SimNodeError(RuntimeError):
    """Raised when a torn-down simulated node is used."""

    pass


class SimNode:
    """One simulated node with its own partial view of the DAG."""

    def __init__(
        self,
        index: int,
        genesis: DagNode,
        *,
        rng: random.Random,
        max_parents: int = 3,
        block_interval_ms: int = 0,
    ) -> None:
        self.index = index
        self._rng = rng
        self._max_parents = max_parents
        self._block_interval_s = block_interval_ms / 1000

        self._lock = Lock()
        self._blocks: dict[BlockHash, DagNode] = {genesis.block_hash: genesis}
        self._tips: set[BlockHash] = {genesis.block_hash}
        # orphan hash -> block, and missing parent -> orphans waiting on it
        self._orphans: dict[BlockHash, DagNode] = {}
        self._waiting: dict[BlockHash, set[BlockHash]] = {}
        self._peers: list[SimNode] = []
        self._nonce = 0
        self._torn_down = False

    def __repr__(self) -> str:
        return f"SimNode(index={self.index}, blocks={len(self._blocks)}, peers={len(self._peers)})"

    @property
    def peers(self) -> tuple[SimNode, ...]:
        with self._lock:
            return tuple(self._peers)

    @property
    def orphan_count(self) -> int:
        with self._lock:
            return len(self._orphans)

    def _check_alive(self) -> None:
        if self._torn_down:
            raise SimNodeError(f"node {self.index} has been torn down")

    def connect(self, peer: SimNode) -> None:
        """Link this node and peer symmetrically. Linking an existing peer is a no-op."""
        if peer is self:
            raise SimNodeError(f"node {self.index} cannot connect to itself")
        with self._lock:
            self._check_alive()
            if peer not in self._peers:
                self._peers.append(peer)
        with peer._lock:
            peer._check_alive()
            if self not in peer._peers:
                peer._peers.append(self)
        logger.debug("Peers connected", node=self.index, peer=peer.index)

    def generate(self, count: int) -> list[BlockHash]:
        """Mine count blocks on top of the current tips, relaying each one."""
        if count < 0:
            raise ValueError(f"block count must be >= 0, got {count}")

        mined: list[BlockHash] = []
        for _ in range(count):
            with self._lock:
                self._check_alive()
                tips = sorted(self._tips)
                if len(tips) > self._max_parents:
                    tips = sorted(self._rng.sample(tips, self._max_parents))
                self._nonce += 1
                block = DagNode(
                    block_hash=_block_hash(self.index, self._nonce, tips),
                    parents=tuple(tips),
                )
                self._accept_locked(block)
                peers = list(self._peers)

            self._relay(block, peers, sender=None)
            mined.append(block.block_hash)
            if self._block_interval_s:
                time.sleep(self._block_interval_s)

        logger.debug("Blocks mined", node=self.index, count=len(mined))
        return mined

    def receive(self, block: DagNode, sender: SimNode | None = None) -> None:
        """Accept a block from a peer, holding it as an orphan if parents are missing."""
        with self._lock:
            if self._torn_down:
                # A stopped node simply stops listening
                return
            if block.block_hash in self._blocks or block.block_hash in self._orphans:
                return

            missing = [p for p in block.parents if p not in self._blocks]
            if missing:
                self._orphans[block.block_hash] = block
                for parent in missing:
                    self._waiting.setdefault(parent, set()).add(block.block_hash)
                return

            accepted = self._connect_locked(block)
            peers = list(self._peers)

        # The sender already has block; unblocked orphans go to everyone
        self._relay(accepted[0], peers, sender=sender)
        for connected in accepted[1:]:
            self._relay(connected, peers, sender=None)

    def _accept_locked(self, block: DagNode) -> None:
        self._blocks[block.block_hash] = block
        self._tips.difference_update(block.parents)
        self._tips.add(block.block_hash)

    def _connect_locked(self, block: DagNode) -> list[DagNode]:
        """Accept block and every orphan it unblocks, in acceptance order."""
        accepted: list[DagNode] = []
        queue: deque[DagNode] = deque([block])
        while queue:
            current = queue.popleft()
            self._accept_locked(current)
            accepted.append(current)
            for orphan_hash in sorted(self._waiting.pop(current.block_hash, ())):
                orphan = self._orphans[orphan_hash]
                if all(p in self._blocks for p in orphan.parents):
                    del self._orphans[orphan_hash]
                    queue.append(orphan)
        return accepted

    def _relay(self, block: DagNode, peers: Sequence[SimNode], sender: SimNode | None) -> None:
        for peer in peers:
            if peer is not sender:
                peer.receive(block, sender=self)

    def dag_view(self) -> tuple[DagNode, ...]:
        """Every block this node has accepted (orphans excluded)."""
        with self._lock:
            self._check_alive()
            return tuple(self._blocks.values())

    def teardown(self) -> None:
        """Stop the node. A second teardown raises SimNodeError."""
        with self._lock:
            self._check_alive()
            self._torn_down = True
            self._peers.clear()
            self._blocks.clear()
            self._tips.clear()
            self._orphans.clear()
            self._waiting.clear()
        logger.debug("Node stopped", node=self.index)


class SimNetHarnessFactory:
    """Creates SimNodes that share one genesis block.

    Usage:
        factory = SimNetHarnessFactory(SimNetSettings(seed=7))
        node = factory.create(0)
    """

    def __init__(self, settings: SimNetSettings | None = None) -> None:
        self._settings = settings or SimNetSettings()
        self._genesis = genesis_block()
        self._seed = self._settings.seed if self._settings.seed is not None else random.SystemRandom().randrange(2**32)

    @property
    def seed(self) -> int:
        return self._seed

    def create(self, index: int) -> SimNode:
        return SimNode(
            index,
            self._genesis,
            rng=random.Random(f"{self._seed}:{index}"),
            max_parents=self._settings.max_parents,
            block_interval_ms=self._settings.block_interval_ms,
        )

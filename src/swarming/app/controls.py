from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Mapping, Set

from pygame.math import Vector2

from ..sim.core.field import Falloff
from ..sim.core.swarm import Swarm

logger = logging.getLogger(__name__)


class Command(str, Enum):
    RESET = "reset"
    ADD_ATTRACTOR = "add_attractor"
    ADD_REPULSOR = "add_repulsor"
    ADD_PREDATOR = "add_predator"
    ADD_AGENT = "add_agent"


KEY_BINDINGS: Dict[str, Command] = {
    "r": Command.RESET,
    "k": Command.ADD_ATTRACTOR,
    "l": Command.ADD_REPULSOR,
    "p": Command.ADD_PREDATOR,
    "b": Command.ADD_AGENT,
}


class SwarmControls:
    """Translates host input events into swarm mutations.

    Keys fire once per press and re-arm on release. Holding the pointer
    down drags the pointer field around; shift turns it repulsive.
    """

    def __init__(self, swarm: Swarm, bindings: Mapping[str, Command] | None = None):
        self.swarm = swarm
        self.bindings: Dict[str, Command] = dict(KEY_BINDINGS if bindings is None else bindings)
        self.pointer = Vector2()
        self.pointer_held = False
        self.shift = False
        self._held_keys: Set[str] = set()

    def key_down(self, key: str) -> Command | None:
        key = key.lower()
        if key in self._held_keys:
            return None
        self._held_keys.add(key)
        command = self.bindings.get(key)
        if command is not None:
            self.execute(command)
        return command

    def key_up(self, key: str) -> None:
        self._held_keys.discard(key.lower())

    def execute(self, command: Command) -> None:
        swarm = self.swarm
        config = swarm.config
        rng = swarm.rng
        if command is Command.RESET:
            swarm.reset()
            self.pointer_held = False
        elif command is Command.ADD_ATTRACTOR or command is Command.ADD_REPULSOR:
            emitters = config.emitters
            repels = command is Command.ADD_REPULSOR
            strength_range = emitters.repulsor_strength if repels else emitters.attractor_strength
            swarm.add_field(
                self.pointer,
                strength=rng.next_range(*strength_range),
                radius=rng.next_range(*emitters.radius),
                falloff=Falloff.parse(emitters.falloff),
                repels=repels,
            )
        elif command is Command.ADD_PREDATOR:
            arena = swarm.arena_size
            swarm.add_predator(rng.next_point(arena.x, arena.y))
        elif command is Command.ADD_AGENT:
            jitter = rng.next_jitter(config.agents.spawn_jitter)
            swarm.add_agent(self.pointer + jitter)
        else:
            raise ValueError(f"Unknown command: {command!r}")
        logger.debug("Executed %s", command.value)

    def pointer_down(self, position: Vector2, shift: bool = False) -> None:
        self.pointer = Vector2(position)
        self.pointer_held = True
        self.shift = shift
        self._sync_pointer()

    def pointer_move(self, position: Vector2) -> None:
        self.pointer = Vector2(position)
        if self.pointer_held:
            self._sync_pointer()

    def pointer_up(self) -> None:
        self.pointer_held = False
        self._sync_pointer()

    def set_shift(self, pressed: bool) -> None:
        self.shift = pressed
        if self.pointer_held:
            self._sync_pointer()

    def _sync_pointer(self) -> None:
        self.swarm.set_pointer_field(self.pointer, repels=self.shift, active=self.pointer_held)

"""Per-invocation context for script commands and triggered scripts.

``ScriptEntryData`` carries the player and NPC a script runs on behalf of.
``ScriptEntry`` is one command invocation: the command name, its raw
(already tag-resolved) argument tokens, the linked entry data and the
script line it came from.  Both are created per invocation and discarded
afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from script_bridge.config import config
from script_bridge.errors import ScriptLocation
from script_bridge.values import ParseContext
from script_bridge.world.model import Entity, WorldHost

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScriptEntryData:
    """The player and NPC linked to a running script.

    Attributes:
        player: Linked player, if any
        npc: Linked NPC, if any
    """

    player: Entity | None = None
    npc: Entity | None = None

    @classmethod
    def from_entity(cls, entity: Entity | None) -> ScriptEntryData:
        """Link *entity* as the player or NPC, whichever it is."""
        if entity is None:
            return cls()
        if entity.is_npc:
            return cls(npc=entity)
        if entity.is_player:
            return cls(player=entity)
        return cls()


@dataclass(frozen=True)
class ScriptEntry:
    """One command invocation.

    Attributes:
        command: Command name as written in the script
        arguments: Raw argument tokens, tag-resolved, quotes removed
        entry_data: Linked player and NPC
        host: Host lookup surface for resolving object references
        location: Script and line the command was written on
        debug: Whether the owning script has debug output enabled
    """

    command: str
    arguments: tuple[str, ...] = ()
    entry_data: ScriptEntryData = field(default_factory=ScriptEntryData)
    host: WorldHost | None = None
    location: ScriptLocation = field(default_factory=lambda: ScriptLocation("<direct>"))
    debug: bool = True

    @property
    def player(self) -> Entity | None:
        return self.entry_data.player

    @property
    def npc(self) -> Entity | None:
        return self.entry_data.npc

    def parse_context(self) -> ParseContext:
        return ParseContext(host=self.host)

    def echo_debug(self, message: str) -> None:
        """Report a debug line for this invocation, if debug output is on."""
        if self.debug and config.debug.echo:
            logger.debug("[%s] %s: %s", self.location, self.command, message)

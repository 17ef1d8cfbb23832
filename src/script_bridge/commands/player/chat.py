"""``chat``: make an NPC (or any entity) talk.

Usage::

    - chat "Hello there!"
    - chat targets:<[bob]>|<[alice]> "Welcome, both of you."
    - chat talkers:<[guard]> no_target range:10 "Halt!"

Targets default to the linked player and talkers to the linked NPC.  Each
talker says the line to the targets; online players within ``range`` who
are not addressed overhear it.  ``no_target`` speaks to nobody in
particular.  Without ``range`` the configured bystander range applies.
"""

from __future__ import annotations

from script_bridge.commands.base import AbstractCommand
from script_bridge.commands.binder import BoundArguments
from script_bridge.commands.signature import DEFAULT_NULL, SignatureBuilder
from script_bridge.config import config
from script_bridge.entry import ScriptEntry
from script_bridge.errors import InvalidArgumentsRuntimeError
from script_bridge.values import EntityRef
from script_bridge.world.speech import SpeechContext, SpeechController

#: Sentinel ``range`` meaning "use the configured bystander range".
CONFIGURED_RANGE = -1.0


class ChatCommand(AbstractCommand):
    """Say a line from one or more talkers to one or more targets."""

    signature = (
        SignatureBuilder("chat")
        .syntax(
            "chat [<text>] (no_target/targets:<entity>|...) "
            "(talkers:<entity>|...) (range:<#.#>)"
        )
        .arguments(required=1, maximum=4)
        .tolerate_extras()
        .linear("message")
        .prefixed("talkers", EntityRef, many=True, default=DEFAULT_NULL, synonyms=("talker",))
        .prefixed(
            "targets", EntityRef, many=True, default=DEFAULT_NULL, synonyms=("target", "t")
        )
        .flag("no_target")
        .prefixed("range", float, default="-1", synonyms=("r",))
        .build()
    )

    def run(self, entry: ScriptEntry, args: BoundArguments) -> None:
        message: str = args["message"]
        targets: list[EntityRef] | None = args["targets"]
        talkers: list[EntityRef] | None = args["talkers"]
        chat_range: float = args["range"]

        if targets is None:
            if args["no_target"]:
                targets = []
            else:
                player = entry.player
                if player is None:
                    raise InvalidArgumentsRuntimeError("Missing targets!")
                if not player.online:
                    entry.echo_debug("Player is not online, skipping.")
                    return
                targets = [EntityRef(player)]

        if talkers is None:
            npc = entry.npc
            if npc is None:
                raise InvalidArgumentsRuntimeError("Missing talker!")
            if not npc.spawned:
                entry.echo_debug("Chat Talker is not spawned! Cannot talk.")
                return
            talkers = [EntityRef(npc)]

        if chat_range == CONFIGURED_RANGE:
            chat_range = config.chat.bystanders_range

        context = SpeechContext(message=message, chat_range=chat_range)
        for target in targets:
            if target.entity is not None:
                context.add_recipient(target.entity)

        for talker in talkers:
            if not talker.is_spawned():
                entry.echo_debug("Chat Talker is not spawned! Cannot talk.")
                continue
            context.talker = talker.entity
            SpeechController(talker.entity, entry.host, config.chat).speak(context)

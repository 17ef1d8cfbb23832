"""Speech delivery for talking entities.

The chat command builds a :class:`SpeechContext` and hands it to a
:class:`SpeechController` bound to the talker.  The controller formats the
line once for the addressed targets and once for bystanders, then delivers
both through :meth:`Entity.send_message`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from script_bridge.config import ChatSettings
from script_bridge.world.model import Entity, WorldHost

logger = logging.getLogger(__name__)


@dataclass
class SpeechContext:
    """One utterance waiting to be spoken.

    Attributes:
        message: The spoken text
        chat_range: Radius in which bystanders overhear; ``0`` for nobody
        recipients: Entities being addressed directly
        talker: The entity currently speaking (set per talker)
    """

    message: str
    chat_range: float
    recipients: list[Entity] = field(default_factory=list)
    talker: Entity | None = None

    def add_recipient(self, entity: Entity) -> None:
        if entity not in self.recipients:
            self.recipients.append(entity)

    def has_recipients(self) -> bool:
        return bool(self.recipients)


class SpeechController:
    """Makes one entity say things to the entities around it."""

    def __init__(self, talker: Entity, host: WorldHost | None, settings: ChatSettings) -> None:
        self._talker = talker
        self._host = host
        self._settings = settings

    def speak(self, context: SpeechContext) -> list[Entity]:
        """Deliver *context* to its recipients and bystanders.

        Returns:
            Every entity that received a line, recipients first.
        """
        talker_name = self._talker.name
        heard: list[Entity] = []

        if context.has_recipients():
            to_target = self._settings.to_target_format.format(
                talker=talker_name, target="you", message=context.message
            )
            for recipient in context.recipients:
                recipient.send_message(to_target)
                heard.append(recipient)
            target_names = ", ".join(r.name for r in context.recipients)
            overheard = self._settings.to_bystanders_format.format(
                talker=talker_name, target=target_names, message=context.message
            )
        else:
            overheard = self._settings.no_target_format.format(
                talker=talker_name, target="", message=context.message
            )

        for bystander in self._bystanders(context):
            bystander.send_message(overheard)
            heard.append(bystander)

        logger.debug("%s spoke to %d entities: %s", talker_name, len(heard), context.message)
        return heard

    def _bystanders(self, context: SpeechContext) -> list[Entity]:
        """Online players within range that are neither talker nor recipient."""
        origin = self._talker.location
        if context.chat_range <= 0 or origin is None or self._host is None:
            return []
        return [
            entity
            for entity in self._host.entities_near(origin, context.chat_range)
            if entity.is_player
            and entity.online
            and entity is not self._talker
            and entity not in context.recipients
        ]

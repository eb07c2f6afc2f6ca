"""EventPublisher sending the ``reservation_event`` Django signal after commit."""

import logging

from django.db import transaction

from reservations.signals import reservation_event
from reservations.stores.interfaces import EventPublisher

logger = logging.getLogger(__name__)


class SignalEventPublisher(EventPublisher):
    """Publishes once the surrounding transaction commits.

    Outside a transaction ``on_commit`` runs the callback immediately; after
    a rollback the event is discarded.
    """

    def __init__(self, using: str | None = None) -> None:
        self._using = using

    def publish(self, topic: str, payload: dict) -> None:
        transaction.on_commit(lambda: self._send(topic, payload), using=self._using)

    def _send(self, topic: str, payload: dict) -> None:
        responses = reservation_event.send_robust(sender=self.__class__, topic=topic, payload=payload)
        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.error(
                    "Receiver %r failed handling %s",
                    receiver,
                    topic,
                    exc_info=(type(response), response, response.__traceback__),
                )

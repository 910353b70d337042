# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Observer registration for store operation events.

Each DocumentDynamoDBService owns its own EventEmitter, so independently
configured services never share subscribers.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, List

from dyndocs.models import OperationEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[OperationEvent], None]


class EventEmitter:
    """
    Minimal publish/subscribe channel.

    Handlers are called synchronously in registration order. A handler that
    raises is logged and skipped; it never affects the operation that
    produced the event or the other handlers.
    """

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)

    def on(self, event_name: str, handler: EventHandler) -> EventHandler:
        """
        Register a handler for an event name.

        Args:
            event_name: Name of the event, e.g. "dynamodb"
            handler: Callable invoked with each OperationEvent

        Returns:
            The handler, so it can be used as a decorator
        """
        if not callable(handler):
            raise TypeError("Event handler must be callable")
        self._handlers[event_name].append(handler)
        return handler

    def off(self, event_name: str, handler: EventHandler) -> bool:
        """Unregister a handler. Returns False if it was not registered."""
        handlers = self._handlers.get(event_name, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def listeners(self, event_name: str) -> List[EventHandler]:
        return list(self._handlers.get(event_name, []))

    def emit(self, event_name: str, event: OperationEvent) -> int:
        """
        Publish an event to every handler registered for event_name.

        Returns:
            Number of handlers that completed without raising
        """
        delivered = 0
        for handler in self.listeners(event_name):
            try:
                handler(event)
                delivered += 1
            except Exception:
                logger.exception(
                    f"Event handler {handler!r} failed for {event_name} event {event.category.value}"
                )
        return delivered

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Host bridge for the Timeline Editors application.

Editor windows talk to the host that owns the timeline data through named
channels only: request/response calls (invoke), fire-and-forget messages
(send) and notifications pushed by the host (receive). Channels outside the
allow-lists below are refused.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

from timeline_editors.errors import ChannelNotAllowed, TransportFailure

logger = logging.getLogger(__name__)


INVOKE_CHANNELS = frozenset({
    'get-relationship-editor-data',
    'get-character-relationships-between',
    'create-character-relationship',
    'update-character-relationship',
    'refresh-character-manager',
    'get-item',
    'add-timeline-item',
    'update-timeline-item',
})

SEND_CHANNELS = frozenset({
    'story-search',
    'item-editor-closing',
})

RECEIVE_CHANNELS = frozenset({
    'character-created',
    'character-updated',
    'story-search-results',
})


class HostBridge:
    """Named-channel connection between an editor window and the host.

    The host side registers one handler per invoke/send channel with
    handle() and pushes notifications with publish(). The editor side only
    uses invoke(), send() and receive().
    """

    def __init__(self):
        """Initialize an empty bridge."""
        self._handlers: Dict[str, Callable[..., Any]] = {}
        self._listeners: Dict[str, List[Callable[..., None]]] = defaultdict(list)

    # Host side

    def handle(self, channel: str, handler: Callable[..., Any]) -> None:
        """Register the host handler for an invoke or send channel.

        Args:
            channel: Channel name
            handler: Callable receiving the call arguments
        """
        if channel not in INVOKE_CHANNELS and channel not in SEND_CHANNELS:
            raise ChannelNotAllowed(channel)
        self._handlers[channel] = handler

    def publish(self, channel: str, *args: Any) -> None:
        """Push a notification to every listener of a channel.

        A listener that raises is logged and the others still run.

        Args:
            channel: Notification channel
            *args: Notification payload
        """
        logger.debug(f"publish on {channel} to {len(self._listeners[channel])} listener(s)")
        for callback in list(self._listeners[channel]):
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Listener for {channel} failed: {e}", exc_info=True)

    # Editor side

    def invoke(self, channel: str, *args: Any) -> Any:
        """Call a host handler and return its reply.

        Args:
            channel: Invoke channel
            *args: Call arguments

        Returns:
            The handler's reply

        Raises:
            ChannelNotAllowed: If the channel is not an invoke channel
            TransportFailure: If no handler is registered or the handler raised
        """
        if channel not in INVOKE_CHANNELS:
            raise ChannelNotAllowed(channel)

        logger.debug(f"invoke called with channel: {channel} and args: {args}")
        handler = self._handlers.get(channel)
        if handler is None:
            raise TransportFailure(f"No handler registered for {channel}")

        try:
            return handler(*args)
        except TransportFailure:
            raise
        except Exception as e:
            raise TransportFailure(str(e)) from e

    def send(self, channel: str, *args: Any) -> None:
        """Send a fire-and-forget message to the host.

        Args:
            channel: Send channel
            *args: Message arguments
        """
        if channel not in SEND_CHANNELS:
            logger.warning(f"Ignoring send on channel not allowed: {channel}")
            return

        logger.debug(f"send called with channel: {channel} and args: {args}")
        handler = self._handlers.get(channel)
        if handler is None:
            logger.warning(f"No handler registered for {channel}")
            return

        try:
            handler(*args)
        except Exception as e:
            logger.error(f"Handler for {channel} failed: {e}", exc_info=True)

    def receive(self, channel: str, callback: Callable[..., None]) -> Callable[[], None]:
        """Subscribe to a host notification.

        Args:
            channel: Notification channel
            callback: Called with the notification payload

        Returns:
            A function that removes the subscription
        """
        if channel not in RECEIVE_CHANNELS:
            logger.warning(f"Ignoring subscription to channel not allowed: {channel}")
            return lambda: None

        logger.debug(f"receive called with channel: {channel}")
        self._listeners[channel].append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners[channel]:
                self._listeners[channel].remove(callback)

        return unsubscribe

"""Bridge and view doubles that record what the controllers do."""

from typing import Any, Callable, Dict, List, Tuple

from timeline_editors.errors import TransportFailure


class FakeBridge:
    """Stands in for HostBridge with canned replies per invoke channel.

    A reply may be a value, a callable taking the call arguments, or an
    exception instance to raise.
    """

    def __init__(self, replies: Dict[str, Any] = None):
        self.replies: Dict[str, Any] = dict(replies or {})
        self.invoked: List[Tuple[str, tuple]] = []
        self.sent: List[Tuple[str, tuple]] = []
        self.listeners: Dict[str, List[Callable[..., None]]] = {}

    def invoke(self, channel: str, *args: Any) -> Any:
        self.invoked.append((channel, args))
        if channel not in self.replies:
            raise TransportFailure(f"No handler registered for {channel}")
        reply = self.replies[channel]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(*args)
        return reply

    def send(self, channel: str, *args: Any) -> None:
        self.sent.append((channel, args))

    def receive(self, channel: str, callback: Callable[..., None]) -> Callable[[], None]:
        self.listeners.setdefault(channel, []).append(callback)

        def unsubscribe() -> None:
            if callback in self.listeners.get(channel, []):
                self.listeners[channel].remove(callback)

        return unsubscribe

    def emit(self, channel: str, *args: Any) -> None:
        for callback in list(self.listeners.get(channel, [])):
            callback(*args)

    def calls_to(self, channel: str) -> List[tuple]:
        return [args for name, args in self.invoked if name == channel]


class RecordingItemView:
    """Item editor view that keeps the last value of each render call."""

    def __init__(self):
        self.form = None
        self.position = None
        self.pictures = None
        self.tags = None
        self.suggestions = None
        self.render_count = 0

    def render_form(self, form) -> None:
        self.form = form
        self.render_count += 1

    def render_position(self, year: int, subtick: int, max_subtick: int) -> None:
        self.position = (year, subtick, max_subtick)

    def render_pictures(self, pictures) -> None:
        self.pictures = list(pictures)

    def render_tags(self, tags) -> None:
        self.tags = list(tags)

    def render_story_suggestions(self, titles) -> None:
        self.suggestions = list(titles)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Item editor controller for the Timeline Editors application.

This module keeps the state of the timeline item editor window (the item
being edited, its position, its pictures) and turns user actions into host
calls. Views bind to it and are re-rendered from its state.
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from timeline_editors.errors import MissingTitleError, TransportFailure, ViewNotBoundError
from timeline_editors.ipc import HostBridge
from timeline_editors.models.item import (
    DEFAULT_GRANULARITY, ItemFormState, Picture, StoryRef, generate_story_id
)
from timeline_editors.utils.pictures import encode_picture

logger = logging.getLogger(__name__)


class ItemEditorView(Protocol):
    """What the controller needs from the window it drives."""

    def render_form(self, form: ItemFormState) -> None: ...

    def render_position(self, year: int, subtick: int, max_subtick: int) -> None: ...

    def render_pictures(self, pictures: List[Picture]) -> None: ...

    def render_tags(self, tags: List[str]) -> None: ...

    def render_story_suggestions(self, titles: List[str]) -> None: ...


class ItemEditorController:
    """Drives one timeline item editor window."""

    def __init__(self, bridge: HostBridge,
                 picture_encoder: Callable[[str], Picture] = encode_picture,
                 default_granularity: int = DEFAULT_GRANULARITY):
        """Initialize the controller.

        Args:
            bridge: Connection to the host
            picture_encoder: Turns a file path into an embeddable Picture
            default_granularity: Subticks per year when none is given
        """
        self.bridge = bridge
        self.picture_encoder = picture_encoder
        self.view: Optional[ItemEditorView] = None

        self.current_item: Optional[Dict[str, Any]] = None
        self.year = 0
        self.subtick = 0
        self.granularity = max(1, default_granularity)
        self.pictures: List[Picture] = []
        self.form = ItemFormState()
        self.story_suggestions: List[str] = []
        self._pending_query: Optional[str] = None

        self._unsubscribe = self.bridge.receive('story-search-results', self.on_story_search_results)

    @property
    def is_edit(self) -> bool:
        return self.current_item is not None

    @property
    def max_subtick(self) -> int:
        return max(0, self.granularity - 1)

    def bind_view(self, view: ItemEditorView) -> None:
        """Attach the window that renders this controller's state."""
        self.view = view

    def _require_view(self) -> ItemEditorView:
        if self.view is None:
            raise ViewNotBoundError("Item editor view is not bound")
        return self.view

    def refresh_view(self) -> None:
        """Re-render every part of the bound view from the current state.

        Raises:
            ViewNotBoundError: If no view is bound
        """
        view = self._require_view()
        view.render_form(self.form)
        view.render_position(self.year, self.subtick, self.max_subtick)
        view.render_tags(self.form.tags)
        view.render_pictures(self.pictures)

    def set_item(self, item: Optional[Dict[str, Any]], granularity: Optional[int] = None) -> bool:
        """Replace all editor state with an item from the host.

        A stored subtick beyond the granularity widens the granularity; the
        item keeps its position.

        Args:
            item: Timeline item dictionary, or None to start a new item
            granularity: Number of subticks per year, if known

        Returns:
            True if the view was refreshed, False if no view is bound
        """
        self.current_item = item
        self.form = ItemFormState.from_item(item or {})
        if granularity is not None and granularity > 0:
            self.granularity = granularity
        self.year = self.form.year
        self.subtick = max(0, self.form.subtick)
        self.granularity = max(self.granularity, self.subtick + 1)
        self.pictures = [Picture.from_payload(pic) for pic in (item or {}).get('pictures') or []]
        self.story_suggestions = []

        try:
            self.refresh_view()
        except ViewNotBoundError as e:
            logger.error(f"Could not show item: {e}")
            return False
        return True

    def load_item(self, item_id: Any, granularity: Optional[int] = None) -> bool:
        """Fetch an item from the host and edit it.

        Args:
            item_id: ID of the item to edit
            granularity: Number of subticks per year, if known

        Returns:
            True if the item was loaded and shown
        """
        try:
            item = self.bridge.invoke('get-item', item_id)
        except TransportFailure as e:
            logger.error(f"Error loading item {item_id}: {e}")
            return False

        if not item:
            logger.error(f"No item data received for item {item_id}")
            return False
        return self.set_item(item, granularity)

    def set_position(self, year: int, subtick: int, granularity: Optional[int] = None) -> bool:
        """Set the position a new item will be created at.

        Args:
            year: Year of the item
            subtick: Subdivision of the year
            granularity: Number of subticks per year, if known

        Returns:
            True if the view was refreshed, False if no view is bound
        """
        if granularity is not None and granularity > 0:
            self.granularity = granularity

        self.year = int(year)
        self.subtick = max(0, min(int(subtick), self.max_subtick))
        self.form = replace(self.form, year=self.year, subtick=self.subtick)

        try:
            self._require_view().render_position(self.year, self.subtick, self.max_subtick)
        except ViewNotBoundError as e:
            logger.error(f"Could not show position: {e}")
            return False
        return True

    def update_form(self, form: ItemFormState) -> None:
        """Take over the values the user typed into the form."""
        self.form = form
        self.year = form.year
        self.subtick = max(0, min(form.subtick, self.max_subtick))

    # Pictures

    def _render_pictures(self) -> None:
        if self.view is None:
            logger.error("Could not render pictures: item editor view is not bound")
            return
        self.view.render_pictures(self.pictures)

    def add_pictures(self, paths: Iterable[str]) -> int:
        """Read picture files and attach them to the item.

        Files that cannot be read are logged and skipped.

        Args:
            paths: Paths of the selected files

        Returns:
            Number of pictures added
        """
        added = 0
        for path in paths:
            try:
                self.pictures.append(self.picture_encoder(path))
                added += 1
            except (OSError, ValueError) as e:
                logger.warning(f"Could not read picture {path}: {e}")
        self._render_pictures()
        return added

    def remove_picture(self, index: int) -> bool:
        """Detach the picture at an index.

        Args:
            index: Position in the picture list

        Returns:
            True if a picture was removed
        """
        if not 0 <= index < len(self.pictures):
            logger.warning(f"No picture at index {index}")
            return False
        del self.pictures[index]
        self._render_pictures()
        return True

    # Tags

    def add_tag(self, text: str) -> bool:
        """Add a tag unless it is blank or already present."""
        tag = text.strip()
        if not tag or tag in self.form.tags:
            return False
        self.form.tags.append(tag)
        if self.view is not None:
            self.view.render_tags(self.form.tags)
        return True

    def remove_tag(self, tag: str) -> bool:
        if tag not in self.form.tags:
            return False
        self.form.tags.remove(tag)
        if self.view is not None:
            self.view.render_tags(self.form.tags)
        return True

    # Story references

    def add_story_ref(self, story_title: str = "", story_id: str = "") -> StoryRef:
        ref = StoryRef(story_title=story_title, story_id=story_id)
        self.form.story_refs.append(ref)
        return ref

    def remove_story_ref(self, index: int) -> bool:
        if not 0 <= index < len(self.form.story_refs):
            return False
        del self.form.story_refs[index]
        return True

    def collect_story_refs(self) -> List[StoryRef]:
        """Get the story references that have a title.

        References without an id get a generated one, which is kept so the
        window shows it too.
        """
        refs = []
        for ref in self.form.story_refs:
            title = ref.story_title.strip()
            if not title:
                continue
            if not ref.story_id.strip():
                ref.story_id = generate_story_id()
            refs.append(StoryRef(story_title=title, story_id=ref.story_id.strip()))
        return refs

    # Story search

    def handle_story_input(self, text: str) -> None:
        """Look up the story the user is typing.

        Args:
            text: Current content of the story field
        """
        self.form.story = text
        if not text.strip():
            self._pending_query = None
            self.form.story_id = ""
            self.story_suggestions = []
            if self.view is not None:
                self.view.render_story_suggestions([])
            return
        self._pending_query = text.strip()
        self.bridge.send('story-search', self._pending_query)

    def on_story_search_results(self, stories: Optional[List[Dict[str, Any]]]) -> None:
        """Resolve the story id from the host's search results.

        The results channel is shared by every editor on the bridge, so
        results are only taken while this editor has a query pending and
        when every title contains that query.

        Args:
            stories: Matching stories, each with 'id' and 'title'
        """
        stories = stories or []
        query = (self._pending_query or "").casefold()
        if not query or any(query not in (story.get('title') or '').casefold() for story in stories):
            logger.debug(f"Ignoring story search results for another query: {stories}")
            return
        self._pending_query = None
        self.story_suggestions = [story.get('title') or '' for story in stories]

        wanted = self.form.story.strip().casefold()
        match = next(
            (story for story in stories if (story.get('title') or '').strip().casefold() == wanted),
            None
        )
        self.form.story_id = str(match['id']) if match and wanted else ""
        logger.debug(f"Story '{self.form.story}' resolved to id '{self.form.story_id}'")

        if self.view is not None:
            self.view.render_story_suggestions(self.story_suggestions)

    # Save / cancel

    def collect_payload(self) -> Dict[str, Any]:
        """Flatten the editor state into the dictionary sent to the host."""
        form = self.form
        story_refs = self.collect_story_refs()
        story, story_id = form.story.strip(), form.story_id
        if not story and story_refs:
            story, story_id = story_refs[0].story_title, story_refs[0].story_id

        payload = {
            'title': form.title.strip(),
            'description': form.description,
            'content': form.content,
            'tags': list(form.tags),
            'pictures': [
                {'picture': pic.picture, 'title': f"Image {index + 1}", 'description': pic.description}
                for index, pic in enumerate(self.pictures)
            ],
            'book_title': form.book_title,
            'chapter': form.chapter,
            'page': form.page,
            'year': self.year,
            'subtick': self.subtick,
            'story': story,
            'story_id': story_id,
            'story_refs': [{'story_title': ref.story_title, 'story_id': ref.story_id} for ref in story_refs],
        }
        if self.is_edit:
            payload['id'] = self.current_item.get('id')
        return payload

    def save(self, form: Optional[ItemFormState] = None) -> bool:
        """Send the item to the host.

        Args:
            form: Latest form values from the window, if any

        Returns:
            True when the host acknowledged the save

        Raises:
            MissingTitleError: If the item has no title
            TransportFailure: If the host rejected the save
        """
        if form is not None:
            self.update_form(form)

        payload = self.collect_payload()
        if not payload['title']:
            raise MissingTitleError()

        channel = 'update-timeline-item' if self.is_edit else 'add-timeline-item'
        result = self.bridge.invoke(channel, payload)
        if not result or not result.get('success'):
            raise TransportFailure((result or {}).get('error') or 'Failed to save item')

        logger.info(f"Saved timeline item '{payload['title']}'")
        self.close()
        return True

    def cancel(self) -> None:
        """Close without saving; unsaved edits are dropped without asking."""
        self.close()

    def close(self) -> None:
        """Tell the host the window is closing and drop subscriptions."""
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None
        self.bridge.send('item-editor-closing', {'isEdit': self.is_edit})

"""Turn selections on the active surface into chunk-creation requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.offsets import full_line_text
from ..core.paths import PathResolver
from ..core.transforms import host_to_canonical
from ..editor.surface import Surface
from ..store import actions
from ..store.actions import ChunkCreationRequest
from ..store.adapter import StoreAdapter

__all__ = ["ChunkExtractor"]

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ChunkExtractor:
    """Build chunk definitions from a surface's selections.

    Chunks always cover whole lines: from the start of a selection's first
    line to the end of its last line.
    """

    resolver: PathResolver

    def extract(self, surface: Surface) -> list[ChunkCreationRequest]:
        """Return one request per selection, or nothing if the path does not resolve."""

        path = self.resolver.resolve(surface.file_identifier)
        if path is None:
            return []
        text = surface.text
        requests: list[ChunkCreationRequest] = []
        for selection in surface.selections:
            start, end = selection.start, selection.end
            requests.append(
                ChunkCreationRequest(
                    path=path,
                    line=host_to_canonical(start).line,
                    text=full_line_text(text, start.line, end.line),
                )
            )
        return requests

    def add_snippet(
        self,
        surface: Surface,
        adapter: StoreAdapter | None,
        *,
        index: int = 0,
    ) -> list[ChunkCreationRequest]:
        """Dispatch a ``create_snippet`` for the surface's selections.

        When the store does not track the file yet, its full contents are
        uploaded first so later edits have a baseline. The check asks the
        store rather than remembering uploads locally.
        """

        if adapter is None:
            return []
        requests = self.extract(surface)
        if not requests:
            return []
        path = requests[0].path
        state = adapter.get_state()
        if state is None or not state.is_path_active(path):
            _LOGGER.debug("Uploading %s before creating a snippet", path)
            adapter.dispatch(actions.upload_file_contents(path, surface.text))
        adapter.dispatch(actions.create_snippet(index, *requests))
        _LOGGER.info("Requested snippet at index %d with %d chunk(s) from %s", index, len(requests), path)
        return requests

"""
Grid Mask Annotator - Session Manager
-------------------------------------
Holds the single editing session served by the app: the loaded sample root,
the folder cursor, the current sample and the current EditorState.

The editor state itself is immutable; this object only swaps the reference
under a lock, since Flask may handle requests on several threads.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

from backend import editor
from backend.editor import EditorState
from backend.errors import MaskPayloadError, MaskStoreError
from backend.grid import cells_from_mask
from backend.mask_store import MaskStore
from backend.rasterizer import mask_png, read_mask
from backend.samples import Sample, SampleNavigator, list_sample_folders, load_sample

logger = logging.getLogger(__name__)


class SessionManager:

    def __init__(self, mask_store: MaskStore, interpolate: bool = False):
        self.mask_store = mask_store
        self._lock = threading.Lock()
        self._default_state = EditorState(interpolate=interpolate)
        self.reset_session()

    def reset_session(self) -> None:
        with self._lock:
            self._root: Optional[str] = None
            self._navigator = SampleNavigator([])
            self._sample: Optional[Sample] = None
            self._state = self._default_state
            self._annotated = False

    # ------------------------------------------------------
    # Samples
    # ------------------------------------------------------
    def load_root(self, root: str) -> Dict[str, Any]:
        """Scan root for sample folders and select the first one."""
        folders = list_sample_folders(root)
        with self._lock:
            self._root = root
            self._navigator = SampleNavigator(folders)
            self._state = editor.reset(self._state)
            self._sample = None
            self._annotated = False
            if folders:
                self._open_current()
        return self.snapshot()

    def _open_current(self) -> None:
        # caller holds the lock
        name = self._navigator.current
        self._sample = load_sample(self._root, name)
        self._state = editor.reset(self._state)
        self._annotated = self.mask_store.exists(name)
        logger.info("Opened sample %s (annotated=%s)", name, self._annotated)

    def _require_samples(self) -> None:
        if not len(self._navigator):
            raise LookupError("No sample folders loaded")

    def next_sample(self) -> Dict[str, Any]:
        with self._lock:
            self._require_samples()
            self._navigator.next()
            self._open_current()
        return self.snapshot()

    def previous_sample(self) -> Dict[str, Any]:
        with self._lock:
            self._require_samples()
            self._navigator.previous()
            self._open_current()
        return self.snapshot()

    def select_sample(self, folder_name: str) -> Dict[str, Any]:
        with self._lock:
            self._navigator.select(folder_name)
            self._open_current()
        return self.snapshot()

    @property
    def current_sample(self) -> Optional[Sample]:
        return self._sample

    # ------------------------------------------------------
    # Editor
    # ------------------------------------------------------
    @property
    def state(self) -> EditorState:
        return self._state

    def apply(self, handler: Callable[..., EditorState], *args, **kwargs) -> EditorState:
        """Run an editor handler against the current state and keep its result."""
        with self._lock:
            self._state = handler(self._state, *args, **kwargs)
            return self._state

    def save_current(self) -> Dict[str, Any]:
        """
        Rasterize the current cells, write them for the current sample and
        re-check the store. The check only runs after a successful write.
        """
        with self._lock:
            sample = self._sample
            state = self._state
        if sample is None:
            raise LookupError("No sample selected")
        png = mask_png(state.cells, state.grid_size[0], state.grid_size[1])
        try:
            self.mask_store.save(sample.folder_name, png)
        except MaskStoreError:
            logger.exception("Saving mask for sample %s failed", sample.folder_name)
            raise
        exists = self.mask_store.exists(sample.folder_name)
        with self._lock:
            if self._sample is sample:
                self._annotated = exists
        return {"folderName": sample.folder_name, "exists": exists, "cellCount": len(state.cells)}

    def reload_current(self) -> EditorState:
        """Replace the current cells with the mask saved for the current sample."""
        with self._lock:
            sample = self._sample
        if sample is None:
            raise LookupError("No sample selected")
        data = self.mask_store.load(sample.folder_name)
        try:
            cells = cells_from_mask(read_mask(data))
        except ValueError as e:
            raise MaskPayloadError(str(e)) from e
        return self.apply(editor.load_cells, cells)

    # ------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------
    def get(self, key: str, default: Any = None) -> Any:
        return self.snapshot().get(key, default)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            sample = self._sample
            return {
                "root": self._root,
                "folders": list(self._navigator.folders),
                "currentIndex": self._navigator.index if len(self._navigator) else None,
                "currentFolder": self._navigator.current,
                "sample": sample.to_dict() if sample else None,
                "annotated": self._annotated,
                "editor": editor.to_dict(self._state, include_cells=False),
            }

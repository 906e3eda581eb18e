"""
Source watcher for live updates

Tracks modification times of the previewed document, the stylesheet
sources and the plugin files. The watcher never runs on its own: the
server calls poll() whenever a client asks for events, so a reload always
finishes before the next scan starts.

Event kinds:
    file-changed    the document changed (client reloads)
    file-deleted    the document disappeared (client alerts)
    style-changed   a stylesheet source changed (client swaps styles in place)
    plugin-changed  a plugin source changed (client reloads)
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional

from .log import LOG

FILE_CHANGED = "file-changed"
FILE_DELETED = "file-deleted"
STYLE_CHANGED = "style-changed"
PLUGIN_CHANGED = "plugin-changed"

DOCUMENT = "document"
STYLES = "styles"
PLUGIN = "plugin"

# Category -> event kind for a changed file
CHANGE_EVENTS = {
    DOCUMENT: FILE_CHANGED,
    STYLES: STYLE_CHANGED,
    PLUGIN: PLUGIN_CHANGED,
}

MAX_EVENTS = 100


@dataclass
class WatchEvent:
    """One live-update notification"""
    seq: int
    kind: str
    files: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    detail: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'seq': self.seq,
            'type': self.kind,
            'files': self.files,
            'file': self.files[0] if self.files else None,
            'timestamp': self.timestamp,
            **self.detail,
        }


class SourceWatcher:
    """
    mtime-polling watcher with a bounded, sequence-numbered event log

    Attributes:
        paths: Category -> watched files
        events: Recent events, oldest first
        seq: Sequence number of the newest event (0 before any)
    """

    def __init__(self) -> None:
        self.paths: Dict[str, List[Path]] = {DOCUMENT: [], STYLES: [], PLUGIN: []}
        self._mtimes: Dict[Path, float] = {}
        self._callbacks: Dict[str, List[Callable[[List[Path]], Optional[Dict[str, Any]]]]] = {
            DOCUMENT: [],
            STYLES: [],
            PLUGIN: [],
        }
        self.events: Deque[WatchEvent] = deque(maxlen=MAX_EVENTS)
        self.seq = 0

    def _get_mtime(self, path: Path) -> float:
        """Modification time of a file, 0 if it does not exist"""
        try:
            return path.stat().st_mtime
        except OSError:
            return 0

    def watch(self, category: str, paths: Iterable[Path]) -> None:
        """Replace the watched files of a category and record their current mtimes"""
        self.paths[category] = [Path(p) for p in paths]
        for path in self.paths[category]:
            self._mtimes[path] = self._get_mtime(path)
        LOG(f"Watching {len(self.paths[category])} {category} file(s)", level=3)

    def on_change(self, category: str, callback: Callable[[List[Path]], Optional[Dict[str, Any]]]) -> None:
        """
        Register a callback run before a category's event is recorded

        The callback receives the changed paths; a dict it returns is merged
        into the event.
        """
        self._callbacks[category].append(callback)

    def event_push(self, kind: str, files: List[Path], detail: Optional[Dict[str, Any]] = None) -> WatchEvent:
        self.seq += 1
        event = WatchEvent(seq=self.seq, kind=kind, files=[str(f) for f in files], detail=detail or {})
        self.events.append(event)
        LOG(f"{kind}: {', '.join(p.name for p in files)}", level=1)
        return event

    def poll(self) -> List[WatchEvent]:
        """
        Compare every watched file against its recorded mtime

        Returns:
            Events produced by this scan, in category order
        """
        produced: List[WatchEvent] = []

        for category in (DOCUMENT, STYLES, PLUGIN):
            changed: List[Path] = []
            deleted: List[Path] = []
            for path in self.paths[category]:
                previous = self._mtimes.get(path, 0)
                current = self._get_mtime(path)
                if current == previous:
                    continue
                self._mtimes[path] = current
                if current == 0:
                    deleted.append(path)
                else:
                    changed.append(path)

            if category == DOCUMENT and deleted:
                produced.append(self.event_push(FILE_DELETED, deleted))

            touched = changed if category == DOCUMENT else changed + deleted
            if not touched:
                continue

            detail: Dict[str, Any] = {}
            for callback in self._callbacks[category]:
                extra = callback(touched)
                if extra:
                    detail.update(extra)
            produced.append(self.event_push(CHANGE_EVENTS[category], touched, detail))

        return produced

    def events_since(self, after: int) -> List[WatchEvent]:
        """Events with a sequence number greater than after"""
        return [event for event in self.events if event.seq > after]

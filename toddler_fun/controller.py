# toddler_fun/controller.py
"""Client-side state: cached catalog, displayed activity, completion counts.

The server's completion counter is authoritative. The local map is a
persisted mirror of it keyed by activity id, refreshed from every catalog
fetch and from every recorded completion.
"""
import enum
import json
import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"


class ViewState(str, enum.Enum):
    NO_ACTIVITY = "no-activity-loaded"
    DISPLAYED = "activity-displayed"
    LOADING = "loading"


class CompletionStore:
    """Completion counts per activity id, saved as a JSON file."""

    def __init__(self, path):
        self.path = Path(path)
        self.counts: Dict[str, int] = {}

    def load(self):
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raw = {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable completion file {self.path}: {e}")
            raw = {}
        if not isinstance(raw, dict):
            raw = {}
        self.counts = {str(k): int(v) for k, v in raw.items() if isinstance(v, int) and v >= 0}
        return self.counts

    def save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.counts, indent=2, sort_keys=True), encoding="utf-8")

    def get(self, activity_id):
        return self.counts.get(str(activity_id), 0)

    def set(self, activity_id, count):
        self.counts[str(activity_id)] = count

    def replace(self, counts):
        self.counts = {str(k): v for k, v in counts.items()}


class ActivityController:
    def __init__(self, client, completions, rng=None):
        self.client = client
        self.completions = completions
        self.rng = rng or random.Random()
        self.activities: List[Dict[str, Any]] = []
        self.current: Optional[Dict[str, Any]] = None
        self._loading = False

    @property
    def state(self) -> ViewState:
        if self._loading:
            return ViewState.LOADING
        if self.current is None:
            return ViewState.NO_ACTIVITY
        return ViewState.DISPLAYED

    def load(self):
        self.completions.load()
        return self.refresh()

    def refresh(self):
        '''Re-fetch the whole catalog and mirror its counters locally.'''
        self._loading = True
        try:
            self.activities = self.client.list_activities()
        finally:
            self._loading = False
        self.completions.replace({a["id"]: a.get("completionCount", 0) for a in self.activities})
        self.completions.save()
        return self.activities

    def _find(self, activity_id):
        return next((a for a in self.activities if a["id"] == str(activity_id)), None)

    def pick_another(self):
        # Consecutive picks may repeat
        activities = self.activities or self.refresh()
        if not activities:
            self.current = None
            return None
        self.current = activities[self.rng.randrange(len(activities))]
        return self.current

    def mark_done(self):
        if self.current is None:
            raise RuntimeError("No activity is displayed")
        updated = self.client.record_completion(self.current["id"])
        count = updated["completionCount"]
        self.completions.set(updated["id"], count)
        self.completions.save()
        self.current = updated
        logger.info(f"Marked {updated['title']!r} done ({count} total)")
        return count

    def add_activity(self, category: str, title: str, description: str):
        created = self.client.create_activity(category, title, description)
        self.refresh()
        self.current = self._find(created["id"]) or created
        return self.current

    def edit_activity(self, activity_id, **fields):
        self.client.update_activity(activity_id, **fields)
        self.refresh()
        edited = self._find(activity_id)
        if self.current is not None and self.current["id"] == str(activity_id):
            self.current = edited
        return edited

    def delete_activity(self, activity_id):
        self.client.delete_activity(activity_id)
        self.refresh()
        if self.current is not None and self.current["id"] == str(activity_id):
            self.current = None

    def categories(self):
        seen = dict.fromkeys(a["category"] for a in self.activities)
        return [ALL_CATEGORIES, *seen]

    def stats(self, category: Optional[str] = None):
        """Activities with their completion counts, most done first.

        Ties are ordered by title. ``category`` of None or "All" means every
        category.
        """
        rows = [
            {**a, "completionCount": self.completions.get(a["id"])}
            for a in self.activities
            if category in (None, ALL_CATEGORIES) or a["category"] == category
        ]
        rows.sort(key=lambda r: (-r["completionCount"], r["title"]))
        return rows

    def total_completions(self, category: Optional[str] = None):
        return sum(r["completionCount"] for r in self.stats(category))

"""Story export storage.

Responsibilities:
- Persist mirrored stories as deterministic JSON files under an output root.
- Offer lookups used to classify sync writes as created or updated.
"""

from __future__ import annotations

import json
from pathlib import Path

from ..models.datatypes import Story, SyncSummary
from ..content.slug import slugify_story_slug

STORIES_DIR = Path("stories")
SUMMARY_FILENAME = Path("sync_summary.json")


class StoryStore:
    """Filesystem-backed store of exported story records."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root output directory."""

        self.root = root

    def story_path(self, slug: str, wordpress_id: int | None = None) -> Path:
        """Return the relative path of the JSON record for `slug`.

        Slugs that reduce to nothing fall back to `story-<wordpress_id>`.
        """

        fallback = "story" if wordpress_id is None else f"story-{wordpress_id}"
        return STORIES_DIR / f"{slugify_story_slug(slug, fallback=fallback)}.json"

    def exists(self, relative_path: Path) -> bool:
        """Return whether the given record exists."""

        return (self.root / relative_path).exists()

    def save_json(self, relative_path: Path, payload: dict[str, object]) -> Path:
        """Save JSON-serializable payload and return final path."""

        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        return path

    def save_story(self, story: Story) -> bool:
        """Write one story record and return `True` when it was newly created."""

        relative_path = self.story_path(story.slug, story.wordpress_id)
        created = not self.exists(relative_path)
        self.save_json(relative_path, story.to_dict())
        return created

    def load_story_payload(
        self, slug: str, wordpress_id: int | None = None
    ) -> dict[str, object]:
        """Load one exported story record as a mapping."""

        path = self.root / self.story_path(slug, wordpress_id)
        return json.loads(path.read_text(encoding="utf-8"))

    def save_summary(self, summary: SyncSummary) -> Path:
        """Write the sync summary next to the exported stories."""

        return self.save_json(SUMMARY_FILENAME, summary.to_dict())

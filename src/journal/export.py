"""Journal export functionality."""

import json
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import frontmatter

from .models import JournalEntry, utcnow
from .storage import EntryStore


def _slug(text: str) -> str:
    slug = re.sub(r"[^a-z0-9-]", "", text.lower().replace(" ", "-"))
    return slug[:50] or "entry"


class JournalExporter:
    """Export one owner's entries to JSON or markdown files."""

    def __init__(self, store: EntryStore):
        self.store = store

    def export_json(self, owner_id: str, output_path: Path, days: Optional[int] = None) -> int:
        """Export entries to a single JSON document.

        Returns:
            Number of entries exported
        """
        entries = self._get_entries(owner_id, days)

        export_data = {
            "exported_at": utcnow().isoformat(),
            "owner_id": owner_id,
            "count": len(entries),
            "entries": [e.to_dict() for e in entries],
        }

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(export_data, f, indent=2, default=str)

        return len(entries)

    def export_markdown(self, owner_id: str, output_dir: Path, days: Optional[int] = None) -> int:
        """Write one markdown file with YAML frontmatter per entry.

        Returns:
            Number of files written
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        entries = self._get_entries(owner_id, days)
        for entry in entries:
            post = self._to_post(entry)
            name = f"{entry.created_at:%Y-%m-%d}_{_slug(entry.title)}_{entry.id[:6]}.md"
            with open(output_dir / name, "w") as f:
                f.write(frontmatter.dumps(post))

        return len(entries)

    @staticmethod
    def _to_post(entry: JournalEntry) -> frontmatter.Post:
        post = frontmatter.Post(entry.content)
        post["id"] = entry.id
        post["title"] = entry.title
        post["created"] = entry.created_at.isoformat()
        post["mood"] = entry.mood
        post["mood_intensity"] = entry.mood_intensity
        post["tags"] = entry.tags
        post["important"] = entry.is_important
        post["resolved"] = entry.is_resolved
        if entry.analysis.processed:
            post["distortions"] = [d.type for d in entry.analysis.distortions]
            post["sentiment"] = entry.analysis.overall_sentiment
            post["themes"] = entry.analysis.key_themes
        return post

    def _get_entries(self, owner_id: str, days: Optional[int]) -> list[JournalEntry]:
        since: Optional[datetime] = None
        if days:
            since = utcnow() - timedelta(days=days)
        return list(self.store.iter_entries(owner_id, since=since))

"""Snapshot export operations for NotesToSelf."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from notestoself.codecs import record_to_dict
from notestoself.types import format_datetime

logger = logging.getLogger(__name__)


class ExportMixin:
    """Export operations for NotesToSelf."""

    def export_snapshot(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Build the snapshot envelope for every collection."""
        snapshot: Dict[str, Any] = {
            key: [record_to_dict(r) for r in store.records]
            for key, store in self._snapshot_stores().items()
        }
        snapshot["exportDate"] = format_datetime(now or datetime.now(timezone.utc))
        snapshot["appVersion"] = self.app_version
        return snapshot

    def export_json(self, now: Optional[datetime] = None) -> str:
        """Snapshot as pretty-printed JSON with sorted keys."""
        return json.dumps(self.export_snapshot(now), indent=2, sort_keys=True, ensure_ascii=False)

    def dump_markdown(self) -> str:
        """Human-readable dump of every collection."""
        lines = [f"# Notes to self ({self.namespace})"]
        lines.append(f"_Exported at {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}_")
        lines.append("")

        sections = [
            ("Notes", self.notes),
            ("Reminders", self.reminders),
            ("People", self.people),
        ]
        for title, store in sections:
            if store.records:
                lines.append(f"## {title}")
                for r in store.records:
                    lines.append(f"- {r.text}")
                lines.append("")

        if self.cbt.records:
            lines.append("## CBT entries")
            for e in self.cbt.records:
                lines.append(f"### {e.date.strftime('%Y-%m-%d')}: {e.situation}")
                names = ", ".join(f"{d.emoji} {d.title}" for d in self.cbt.distortions_for(e))
                if names:
                    lines.append(f"*{names}*")
                if e.challenge:
                    lines.append(f"**Challenge:** {e.challenge}")
                if e.alternative:
                    lines.append(f"**Alternative:** {e.alternative}")
                if e.notes:
                    lines.append(f"**Notes:** {e.notes}")
                lines.append("")

        if self.todos.records:
            lines.append("## Todos")
            for t in self.todos.records:
                lines.append(f"- [{'x' if t.is_completed else ' '}] {t.text}")
            lines.append("")

        return "\n".join(lines)

    def write_export(self, path: str, format: Optional[str] = None) -> str:
        """Write an export to ``path`` and return its content.

        Format follows the extension (``.md``/``.markdown`` for markdown)
        unless given explicitly; JSON is the default.
        """
        if format is None:
            format = "markdown" if path.endswith((".md", ".markdown")) else "json"
        content = self.dump_markdown() if format == "markdown" else self.export_json()

        export_path = Path(path).expanduser()
        export_path.parent.mkdir(parents=True, exist_ok=True)
        export_path.write_text(content, encoding="utf-8")
        logger.info(f"Exported {self.stats()['total']} records to {export_path}")
        return content

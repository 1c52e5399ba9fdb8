"""logrotate policy for the maintenance job logs."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

LOGROTATE_FILE = "vm-maintenance"


@dataclass
class LogrotatePolicy:
    frequency: str = "weekly"
    rotate: int = 4
    compress: bool = True
    missingok: bool = True
    notifempty: bool = True

    def directives(self):
        yield self.frequency
        yield f"rotate {self.rotate}"
        if self.compress:
            yield "compress"
        if self.missingok:
            yield "missingok"
        if self.notifempty:
            yield "notifempty"

    def render(self, log_files: Iterable[Path]) -> str:
        """One stanza per log file."""
        stanzas = []
        for log_file in log_files:
            body = "\n".join(f"    {d}" for d in self.directives())
            stanzas.append(f"{log_file} {{\n{body}\n}}\n")
        return "\n".join(stanzas)

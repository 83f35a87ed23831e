import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from md_io import DEFAULT_TITLE

DEFAULT_DOCUMENT = "notes.md"
DEFAULT_LOG = "nodetree.log"


@dataclass(frozen=True)
class Settings:
    document_path: Path
    log_path: Optional[Path]
    title: str = DEFAULT_TITLE

    @classmethod
    def from_env(
        cls,
        argv: Sequence[str] = (),
        environ: Optional[dict[str, str]] = None,
    ) -> "Settings":
        """Build settings from ``NODETREE_*`` variables; ``argv[0]`` overrides the document path."""
        env = os.environ if environ is None else environ
        document = argv[0] if argv else env.get("NODETREE_FILE") or DEFAULT_DOCUMENT
        log_value = env.get("NODETREE_LOG", DEFAULT_LOG)
        return cls(
            document_path=Path(document).expanduser(),
            log_path=Path(log_value).expanduser() if log_value else None,
            title=env.get("NODETREE_TITLE") or DEFAULT_TITLE,
        )

import dataclasses
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

RONDO_DIR = Path.home() / ".rondo"
DB_PATH = RONDO_DIR / "rondo.db"
CONFIG_PATH = RONDO_DIR / "config.json"
BACKUP_DIR = RONDO_DIR / "backups"
EXPORT_DIR = RONDO_DIR / "exports"
LOG_PATH = RONDO_DIR / "rondo.log"

DEFAULT_PANEL_RATIO = 0.4
MIN_PANEL_RATIO = 0.2
MAX_PANEL_RATIO = 0.8


def clamp_ratio(ratio: float) -> float:
    """Zero means unset; anything else is clamped to the allowed panel range."""
    if ratio == 0:
        return DEFAULT_PANEL_RATIO
    return round(min(max(ratio, MIN_PANEL_RATIO), MAX_PANEL_RATIO), 2)


@dataclasses.dataclass
class Config:
    panel_ratio: float = DEFAULT_PANEL_RATIO

    def validate(self) -> None:
        self.panel_ratio = clamp_ratio(self.panel_ratio)


def load(path: Path | None = None) -> Config:
    """Load config from disk. A missing or unreadable file yields defaults."""
    path = path if path else CONFIG_PATH
    cfg = Config()
    if not path.exists():
        return cfg
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        logger.warning("ignoring unreadable config %s: %s", path, e)
        return cfg
    if isinstance(data, dict):
        ratio = data.get("panel_ratio")
        if isinstance(ratio, (int, float)) and not isinstance(ratio, bool):
            cfg.panel_ratio = float(ratio)
    cfg.validate()
    return cfg


def save(cfg: Config, path: Path | None = None) -> None:
    """Persist config to disk."""
    path = path if path else CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(dataclasses.asdict(cfg), indent=2) + "\n")

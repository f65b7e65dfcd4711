"""Configuration management for PhishGuard."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .utils.domains import canonicalize_domain

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Application configuration loaded from environment."""

    # Reputation API (optional; without it verdicts are local-only)
    virustotal_api_key: str = ""
    vt_max_requests: int = 4  # Free tier: 4 req/min, 500/day
    vt_window_seconds: float = 60.0
    vt_poll_delay_seconds: float = 5.0
    vt_timeout_seconds: float = 15.0

    # Verdict cache
    cache_ttl_hours: float = 24.0
    cache_sweep_interval_minutes: float = 60.0

    # HTTP API
    api_host: str = "127.0.0.1"
    api_port: int = 8090

    log_level: str = "INFO"

    # Paths
    data_dir: Path = field(default_factory=lambda: Path("./data"))
    config_dir: Path = field(default_factory=lambda: Path("./config"))

    # Loaded lists (substring match on the host)
    whitelist: list[str] = field(default_factory=list)
    blacklist: list[str] = field(default_factory=list)

    def __post_init__(self):
        """Normalize paths and load list files."""
        self.data_dir = Path(self.data_dir)
        self.config_dir = Path(self.config_dir)
        self._load_lists()

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_hours * 3600

    @property
    def database_path(self) -> Path:
        return self.data_dir / "phishguard.db"

    def _load_lists(self):
        """Merge whitelist/blacklist files from the config dir into the lists."""
        for name in ("whitelist", "blacklist"):
            path = self.config_dir / f"{name}.txt"
            current = list(getattr(self, name))
            if path.exists():
                current.extend(sorted(self._load_list_file(path)))
            entries = [canonicalize_domain(item) or item.lower() for item in current if item]
            setattr(self, name, list(dict.fromkeys(entries)))

    @staticmethod
    def _load_list_file(path: Path) -> set[str]:
        """Load a list file, ignoring comments and empty lines."""
        items = set()
        with open(path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#"):
                    items.add(line.lower())
        return items


def _load_heuristics(config_dir: Path) -> dict:
    """Load overrides from config/heuristics.yaml (optional)."""
    path = Path(config_dir or ".") / "heuristics.yaml"
    if not path.exists():
        return {}

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        logger.warning("Failed to parse heuristics.yaml: %s", exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring heuristics.yaml: expected a mapping")
        return {}

    def _number(section: dict, key: str):
        value = section.get(key)
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric %s in heuristics.yaml: %r", key, value)
            return None

    reputation_cfg = data.get("reputation") or {}
    cache_cfg = data.get("cache") or {}
    lists_cfg = data.get("lists") or {}

    overrides = {
        "vt_max_requests": _number(reputation_cfg, "max_requests"),
        "vt_window_seconds": _number(reputation_cfg, "window_seconds"),
        "vt_poll_delay_seconds": _number(reputation_cfg, "poll_delay_seconds"),
        "cache_ttl_hours": _number(cache_cfg, "ttl_hours"),
        "cache_sweep_interval_minutes": _number(cache_cfg, "sweep_interval_minutes"),
        "whitelist": [str(d) for d in lists_cfg.get("whitelist") or []],
        "blacklist": [str(d) for d in lists_cfg.get("blacklist") or []],
    }
    if overrides["vt_max_requests"] is not None:
        overrides["vt_max_requests"] = int(overrides["vt_max_requests"])
    return {k: v for k, v in overrides.items() if v not in (None, [])}


def _split_domains(value: str) -> list[str]:
    return [d.strip().lower() for d in (value or "").split(",") if d.strip()]


def load_config() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    config_dir = Path(os.getenv("CONFIG_DIR", "./config"))
    heuristics = _load_heuristics(config_dir)

    def env_number(name: str, key: str, default: str, cast=float):
        raw = os.getenv(name)
        if raw is not None and raw.strip():
            return cast(raw)
        return cast(heuristics.get(key, default))

    return Config(
        virustotal_api_key=os.getenv("VIRUSTOTAL_API_KEY", "").strip(),
        vt_max_requests=env_number("VT_MAX_REQUESTS", "vt_max_requests", "4", int),
        vt_window_seconds=env_number("VT_WINDOW_SECONDS", "vt_window_seconds", "60"),
        vt_poll_delay_seconds=env_number("VT_POLL_DELAY_SECONDS", "vt_poll_delay_seconds", "5"),
        vt_timeout_seconds=float(os.getenv("VT_TIMEOUT_SECONDS", "15")),
        cache_ttl_hours=env_number("CACHE_TTL_HOURS", "cache_ttl_hours", "24"),
        cache_sweep_interval_minutes=env_number(
            "CACHE_SWEEP_INTERVAL_MINUTES", "cache_sweep_interval_minutes", "60"
        ),
        api_host=os.getenv("API_HOST", "127.0.0.1"),
        api_port=int(os.getenv("API_PORT", "8090")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        data_dir=Path(os.getenv("DATA_DIR", "./data")),
        config_dir=config_dir,
        whitelist=heuristics.get("whitelist", []) + _split_domains(os.getenv("WHITELIST", "")),
        blacklist=heuristics.get("blacklist", []) + _split_domains(os.getenv("BLACKLIST", "")),
    )


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of error messages."""
    errors: list[str] = []
    if config.vt_max_requests < 1:
        errors.append("VT_MAX_REQUESTS must be at least 1")
    if config.vt_window_seconds <= 0:
        errors.append("VT_WINDOW_SECONDS must be positive")
    if config.vt_poll_delay_seconds < 0:
        errors.append("VT_POLL_DELAY_SECONDS must not be negative")
    if config.cache_ttl_hours <= 0:
        errors.append("CACHE_TTL_HOURS must be positive")
    if not 0 < config.api_port < 65536:
        errors.append("API_PORT must be between 1 and 65535")

    if not config.virustotal_api_key:
        # Classification still works, using local heuristics only.
        logger.info("No VIRUSTOTAL_API_KEY configured; remote reputation lookups disabled")

    return errors

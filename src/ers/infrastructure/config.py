"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from ers.domain.exceptions import ValidationError
from ers.domain.model.date_range import PREP_BUFFER_DAYS, RETURN_BUFFER_DAYS, BufferPolicy

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"
STORE_FILE = "ers.json"


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    prep_buffer_days: int = PREP_BUFFER_DAYS
    return_buffer_days: int = RETURN_BUFFER_DAYS
    log_level: str = "INFO"
    system_user: str = "system"

    @property
    def store_path(self) -> Path:
        return self.data_dir / STORE_FILE

    @property
    def buffer_policy(self) -> BufferPolicy:
        return BufferPolicy(self.prep_buffer_days, self.return_buffer_days)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``ERS_*`` variables, falling back to defaults."""
        env = os.environ if env is None else env
        data_dir = env.get("ERS_DATA_DIR")
        return cls(
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
            prep_buffer_days=_int_setting(env, "ERS_PREP_BUFFER_DAYS", PREP_BUFFER_DAYS),
            return_buffer_days=_int_setting(env, "ERS_RETURN_BUFFER_DAYS", RETURN_BUFFER_DAYS),
            log_level=env.get("ERS_LOG_LEVEL", "INFO").upper(),
            system_user=env.get("ERS_SYSTEM_USER") or "system",
        )

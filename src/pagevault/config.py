"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


# CI variables read at the command line edge only
RUN_ID_ENV = "GITHUB_RUN_ID"
CI_OUTPUT_ENV = "GITHUB_OUTPUT"


@dataclass(slots=True)
class AppConfig:
    archive_root: Path = Path("archive")
    docs_root: Path = Path("docs")
    log_dir: Path = Path("logs")
    run_id: Optional[str] = None
    ci_output_path: Optional[Path] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "AppConfig":
        """Build a config from CI environment variables plus explicit overrides.

        Overrides that are ``None`` keep the default.
        """
        env = os.environ if environ is None else environ
        config = cls(
            run_id=env.get(RUN_ID_ENV) or None,
            ci_output_path=Path(env[CI_OUTPUT_ENV]) if env.get(CI_OUTPUT_ENV) else None,
        )
        for name, value in overrides.items():
            if value is not None:
                setattr(config, name, value)
        return config

    @staticmethod
    def resolve(path: Path, base_dir: Path | None = None) -> Path:
        if Path(path).is_absolute() or base_dir is None:
            return Path(path)
        return base_dir / path

"""Load analysis engine settings from a TOML file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
import tomllib

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "analysis.toml"


@dataclass(frozen=True)
class ProviderSettings:
    base_url: str = "https://www.robotevents.com/api/v2"
    per_page: int = 250
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class WorkerSettings:
    season_id: int = 197
    cooldown_seconds: float = 2.0
    rate_limit_backoff_seconds: float = 60.0


@dataclass(frozen=True)
class AnalysisConfig:
    """Provider and worker settings for one deployment."""

    file_path: Path | None
    provider: ProviderSettings
    worker: WorkerSettings


def default_analysis_config() -> AnalysisConfig:
    return AnalysisConfig(file_path=None, provider=ProviderSettings(), worker=WorkerSettings())


def load_analysis_config(file_path: Path = DEFAULT_CONFIG_PATH) -> AnalysisConfig:
    """Load and validate one analysis TOML config file."""
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    if not file_path.is_file():
        raise IsADirectoryError(f"Config path is not a file: {file_path}")

    with file_path.open("rb") as file:
        raw = tomllib.load(file)
    return _parse_analysis_config(raw, file_path)


def _parse_analysis_config(raw: dict[str, Any], file_path: Path) -> AnalysisConfig:
    provider_raw = raw.get("provider", {})
    worker_raw = raw.get("worker", {})
    defaults = default_analysis_config()

    base_url = str(provider_raw.get("base_url", defaults.provider.base_url)).strip().rstrip("/")
    if not base_url:
        raise ValueError(f"{file_path}: [provider].base_url must not be empty")

    provider = ProviderSettings(
        base_url=base_url,
        per_page=int(provider_raw.get("per_page", defaults.provider.per_page)),
        timeout_seconds=float(
            provider_raw.get("timeout_seconds", defaults.provider.timeout_seconds)
        ),
    )
    worker = WorkerSettings(
        season_id=int(worker_raw.get("season_id", defaults.worker.season_id)),
        cooldown_seconds=float(worker_raw.get("cooldown_seconds", defaults.worker.cooldown_seconds)),
        rate_limit_backoff_seconds=float(
            worker_raw.get(
                "rate_limit_backoff_seconds",
                defaults.worker.rate_limit_backoff_seconds,
            )
        ),
    )
    _validate(file_path=file_path, provider=provider, worker=worker)

    return AnalysisConfig(file_path=file_path, provider=provider, worker=worker)


def _validate(*, file_path: Path, provider: ProviderSettings, worker: WorkerSettings) -> None:
    if provider.per_page <= 0 or provider.per_page > 250:
        raise ValueError(f"{file_path}: [provider].per_page must be between 1 and 250")
    if provider.timeout_seconds <= 0.0:
        raise ValueError(f"{file_path}: [provider].timeout_seconds must be > 0")
    if worker.season_id <= 0:
        raise ValueError(f"{file_path}: [worker].season_id must be > 0")
    if worker.cooldown_seconds < 0.0:
        raise ValueError(f"{file_path}: [worker].cooldown_seconds must be >= 0")
    if worker.rate_limit_backoff_seconds < 0.0:
        raise ValueError(f"{file_path}: [worker].rate_limit_backoff_seconds must be >= 0")


__all__ = [
    "AnalysisConfig",
    "DEFAULT_CONFIG_PATH",
    "ProviderSettings",
    "WorkerSettings",
    "default_analysis_config",
    "load_analysis_config",
]

"""Project-scoped configuration in .merge-chain.yaml."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from merge_chain.errors import ConfigError

CONFIG_FILENAME = ".merge-chain.yaml"
DEFAULT_REMOTE = "origin"
DEFAULT_STATE_FILE = ".merge_chain_state.json"


@dataclass(slots=True)
class ChainConfig:
    """Settings read from the repository's .merge-chain.yaml."""

    remote: str = DEFAULT_REMOTE
    state_file: str = DEFAULT_STATE_FILE

    def to_dict(self) -> dict[str, str]:
        return {"remote": self.remote, "state_file": self.state_file}

    @classmethod
    def from_dict(cls, data: dict[str, object] | None) -> "ChainConfig":
        if not isinstance(data, dict):
            return cls()

        config = cls()
        for key in ("remote", "state_file"):
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"'{key}' in {CONFIG_FILENAME} must be a non-empty string")
            setattr(config, key, value.strip())

        if Path(config.state_file).name != config.state_file:
            raise ConfigError(f"'state_file' in {CONFIG_FILENAME} must be a bare file name")
        return config


def config_path(repo_root: Path) -> Path:
    return repo_root / CONFIG_FILENAME


def load_config(repo_root: Path) -> ChainConfig:
    """Load configuration, falling back to defaults when the file is absent."""
    path = config_path(repo_root)
    if not path.exists():
        return ChainConfig()

    yaml = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle)
    except YAMLError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc

    if payload is not None and not isinstance(payload, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return ChainConfig.from_dict(payload)

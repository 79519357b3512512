from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

from . import _util


__all__ = [
    "CONFIG_ENV",
    "DEFAULT_CONFIG_FILENAME",
    "PgContainerConfig",
]


_LOGGER = _logging.getLogger(__name__)

CONFIG_ENV = "PGCONTAINER_CONFIG"
DEFAULT_CONFIG_FILENAME = "pgcontainer.yml"


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class PgContainerConfig:
    # Container used by the restore tool when none is given
    default_container: str = "base-setup-postgres-1"
    image_hint: str = "postgres"

    db_username: str = "postgres"
    maintenance_db: str = "postgres"

    staging_root: str = "/"
    poll_interval: float = 10.0
    on_error_stop: bool = False

    docker_executable: str = "docker"
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise ValueError(
                f"Invalid config poll_interval! Expected > 0, got {self.poll_interval!r}"
            )

    def replace(self, **changes: _typing.Any) -> _typing.Self:
        changes = {k: v for k, v in changes.items() if v is not None}
        return _dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, config: _typing.Mapping[str, _typing.Any]) -> _typing.Self:
        """Create a config from a mapping (e.g. a parsed YAML file).

        >>> PgContainerConfig.from_dict({"poll_interval": "2", "on_error_stop": "yes"})
        PgContainerConfig(default_container='base-setup-postgres-1', image_hint='postgres', db_username='postgres', maintenance_db='postgres', staging_root='/', poll_interval=2.0, on_error_stop=True, docker_executable='docker', log_level='WARNING')
        """
        known = {f.name for f in _dataclasses.fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ValueError(f"Unknown config key(s): {', '.join(unknown)}")

        kwargs: dict[str, _typing.Any] = {}
        for key, value in config.items():
            if value is None:
                continue
            if key == "poll_interval":
                kwargs[key] = float(value)
            elif key == "on_error_stop":
                kwargs[key] = _util.to_bool(key, value)
            else:
                kwargs[key] = str(value)
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: str | _pathlib.Path | None = None) -> _typing.Self:
        """Read the config from the YAML file *path*.

        Without *path* the file named in env ``PGCONTAINER_CONFIG`` is
        used, then ``pgcontainer.yml`` in the current directory. If
        neither exists the built-in defaults are returned.
        """
        import yaml as _yaml

        if path is None:
            _LOGGER.debug("[config] Check if env %s is set", CONFIG_ENV)
            if (path_from_env := _os.environ.get(CONFIG_ENV)) is not None:
                _LOGGER.info("[config] Use env %s=%s", CONFIG_ENV, path_from_env)
                path = path_from_env
            elif _pathlib.Path(DEFAULT_CONFIG_FILENAME).is_file():
                path = DEFAULT_CONFIG_FILENAME
            else:
                _LOGGER.debug("[config] No config file, using defaults")
                return cls()
        _LOGGER.info("[config] Read config file %s", path)
        path = _pathlib.Path(path)
        with open(path, "r", encoding="utf-8") as f:
            config = _yaml.safe_load(f)
        if config is None:
            config = {}
        elif not isinstance(config, dict):
            raise ValueError(f"Invalid config file {path}: expected a mapping")
        return cls.from_dict(config)

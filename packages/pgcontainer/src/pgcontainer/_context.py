from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

from . import _config


if _typing.TYPE_CHECKING:
    import argparse as _argparse

    from . import _console, _docker


__all__ = [
    "PgContainerContext",
]


_LOGGER = _logging.getLogger(__name__)


class PgContainerContext:
    """Context (config, logging, console, docker client) of a tool execution."""

    _config: _config.PgContainerConfig
    _logger: _logging.Logger | _logging.LoggerAdapter
    _parsed_args: _argparse.Namespace | None = None
    _docker: _docker.DockerCli | None = None
    _reporter: _console.Reporter | None = None

    def __init__(
        self,
        config: _config.PgContainerConfig | _pathlib.Path | str | None = None,
        *,
        setup_logging: bool = True,
        log_level: int | str | None = None,
        parse_arguments: bool = True,
        argument_parser: _argparse.ArgumentParser | None = None,
        argv: list[str] | None = None,
        docker: _docker.DockerCli | None = None,
        reporter: _console.Reporter | None = None,
        logger: _logging.Logger | _logging.LoggerAdapter | None = None,
    ) -> None:
        """Initialize this context.

        Args:
          config: The config as a config object or filename. Overrides
            ``--config`` given on the command line.
          setup_logging: Configure console logging if `True`.
          log_level: Console logging level. Overrides ``--log-level``
            and the config.
          parse_arguments: Parse command line arguments if `True`.
          argument_parser: Custom argument parser to use as a starting
            point before adding the common arguments.
          argv: The argument vector (including the program name) to
            parse if *parse_arguments* is `True`.
          docker: Docker client to use instead of the ``docker`` CLI
            from the config.
          reporter: Console reporter for operator output.

        >>> ctx = PgContainerContext(_config.PgContainerConfig(poll_interval=1.5),
        ...                          setup_logging=False, parse_arguments=False)
        >>> ctx.config.poll_interval
        1.5
        """
        from . import _util

        if logger is None:
            self._logger = _util.PrefixLoggerAdapter(_LOGGER, prefix="[ctx]")
        else:
            self._logger = logger

        if parse_arguments:
            self.parse_arguments(argument_parser=argument_parser, argv=argv)

        if config is None and self._parsed_args is not None:
            config = self._parsed_args.config
        if config is None:
            config = _config.PgContainerConfig.from_file()
        elif not isinstance(config, _config.PgContainerConfig):
            config = _config.PgContainerConfig.from_file(config)
        self._config = config

        if setup_logging:
            if log_level is None and self._parsed_args is not None:
                log_level = self._parsed_args.log_level
            if log_level is None:
                log_level = self._config.log_level
            self.configure_logging(log_level)
            if self._parsed_args is not None and self._parsed_args.log_file:
                self.configure_log_file(self._parsed_args.log_file)

        self._docker = docker
        self._reporter = reporter

    @staticmethod
    def configure_logging(log_level: int | str | None) -> None:
        from . import _util

        log_level = _util.to_log_level(log_level, default=_logging.WARNING)
        stream_handler = _logging.StreamHandler()
        stream_handler.setLevel(log_level)
        _logging.basicConfig(
            level=_logging.DEBUG,
            format="%(asctime)s %(levelname)-1s %(message)s",
            handlers=[stream_handler],
        )

    def configure_log_file(
        self, filename: str | _pathlib.Path, level: int | str | None = None
    ) -> _logging.Handler:
        from . import _util

        _LOGGER.info("[ctx] Writing log file %s", filename)
        return _util.configure_file_logging(filename, level=level)

    def add_common_argument_parser_arguments(
        self, p: _argparse.ArgumentParser, /
    ) -> None:
        p.add_argument(
            "--config",
            metavar="<path>",
            help=f"YAML config file (default: env {_config.CONFIG_ENV} or ./{_config.DEFAULT_CONFIG_FILENAME})",
        )
        p.add_argument(
            "--log-level",
            metavar="<level>",
            help="Console log level, e.g. DEBUG or INFO (default: WARNING)",
        )
        p.add_argument(
            "--log-file",
            metavar="<path>",
            help="Also write a full (DEBUG) log to <path>",
        )

    def parse_arguments(
        self,
        *,
        argument_parser: _argparse.ArgumentParser | None = None,
        argv: list[str] | None = None,
    ) -> _argparse.Namespace:
        import argparse as _argparse
        import copy as _copy
        import sys as _sys

        if argv is None:
            argv = _sys.argv
        if argument_parser:
            p = _copy.deepcopy(argument_parser)
        else:
            p = _argparse.ArgumentParser()

        self.add_common_argument_parser_arguments(p)

        self._parsed_args = p.parse_intermixed_args(argv[1:])
        return self._parsed_args

    @property
    def parsed_args(self) -> _argparse.Namespace:
        if self._parsed_args is None:
            err_msg = "Command line have not been parsed"
            self._logger.error(err_msg)
            raise RuntimeError(err_msg)
        else:
            return self._parsed_args

    @property
    def config(self) -> _config.PgContainerConfig:
        return self._config

    @config.setter
    def config(self, value: _config.PgContainerConfig) -> None:
        self._config = value

    @property
    def docker(self) -> _docker.DockerCli:
        if self._docker is None:
            from . import _docker

            self._docker = _docker.DockerCli(self._config.docker_executable)
        return self._docker

    @property
    def reporter(self) -> _console.Reporter:
        if self._reporter is None:
            from . import _console

            self._reporter = _console.Reporter()
        return self._reporter

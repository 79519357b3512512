import logging as _logging
import pathlib as _pathlib
import subprocess as _subprocess

import pytest


_SELFDIR = _pathlib.Path(__file__).parent.resolve()
_DATA_DIR = _SELFDIR / "data"

DB1 = "pgcontainer-tests-db1"
DB2 = "pgcontainer-tests-db2"


@pytest.fixture(scope="session")
def docker_compose_project_name() -> str:
    return "pgcontainer-tests"


@pytest.fixture(scope="session")
def docker_compose_file(pytestconfig):
    _logging.debug("pytestconfig.rootdir: %s", pytestconfig.rootdir)
    return str(_SELFDIR / "docker-compose.yml")


def _is_ready(container: str) -> bool:
    proc = _subprocess.run(
        ["docker", "exec", container, "pg_isready", "-U", "postgres"],
        capture_output=True,
    )
    return proc.returncode == 0


@pytest.fixture(scope="session")
def postgres_containers(docker_services) -> tuple[str, str]:
    for container in (DB1, DB2):
        docker_services.wait_until_responsive(
            check=lambda c=container: _is_ready(c), timeout=60.0, pause=0.5
        )
    return DB1, DB2


@pytest.fixture
def data_dir() -> _pathlib.Path:
    return _DATA_DIR


@pytest.fixture
def tool_env(tmp_path) -> dict[str, str]:
    config = tmp_path / "pgcontainer.yml"
    config.write_text(f"default_container: {DB1}\npoll_interval: 0.5\n", encoding="utf-8")
    return {"PGCONTAINER_CONFIG": str(config)}


@pytest.fixture
def run_tool(postgres_containers, tool_env):
    from pytest_pgcontainer import run_tool

    def run(tool, *args, **kwargs):
        kwargs.setdefault("env_update", tool_env)
        return run_tool(tool, *args, **kwargs)

    return run

from __future__ import annotations

import re as _re
import subprocess as _subprocess
import threading as _threading

import pytest
from pgcontainer import ContainerRef, DockerCli, DockerCommandError, Reporter
from pgcontainer._config import CONFIG_ENV


_DEFAULT_DB_SIZE = 7_500_000


class FakeProcess:
    """Stands in for the ``subprocess.Popen`` of a restore.

    The process exits with *returncode* once *finished* is set.
    """

    def __init__(
        self,
        returncode: int = 0,
        *,
        finished: _threading.Event | None = None,
        interrupt: bool = False,
    ) -> None:
        if finished is None:
            finished = _threading.Event()
            finished.set()
        self.finished = finished
        self.interrupt = interrupt
        self.final_returncode = returncode
        self.returncode: int | None = None
        self.terminated = False
        self.args: list[str] = []

    def wait(self, timeout: float | None = None) -> int:
        if self.returncode is not None:
            return self.returncode
        if self.terminated:
            self.returncode = -15
            return self.returncode
        if self.interrupt:
            self.interrupt = False
            raise KeyboardInterrupt
        if self.finished.wait(timeout):
            self.returncode = self.final_returncode
            return self.returncode
        raise _subprocess.TimeoutExpired(self.args, timeout)

    def poll(self) -> int | None:
        return self.returncode

    def terminate(self) -> None:
        self.terminated = True


class FakeDocker(DockerCli):
    """A ``docker`` CLI simulating containers, files and databases in memory."""

    def __init__(self) -> None:
        super().__init__("docker")
        self.containers: list[ContainerRef] = []
        self.running: set[str] = set()
        self.files: dict[str, set[str]] = {}
        self.databases: dict[str, dict[str, int]] = {}
        self.calls: list[list[str]] = []
        self.failures: dict[str, tuple[int, str]] = {}
        self.query_exit_code = 0
        self.process = FakeProcess()
        self.popen_calls: list[list[str]] = []

    def add_container(
        self, name: str, *, image: str = "postgres:16", status: str = "Up 5 minutes"
    ) -> ContainerRef:
        idx = len(self.containers) + 1
        container = ContainerRef(
            id=(f"{idx}f" * 32)[:64], name=name, image=image, status=status
        )
        self.containers.append(container)
        self.running.add(container.id)
        self.files[container.id] = set()
        self.databases[container.id] = {"postgres": 8_000_000}
        return container

    def new_process(
        self,
        returncode: int = 0,
        *,
        finished: _threading.Event | None = None,
        interrupt: bool = False,
    ) -> FakeProcess:
        self.process = FakeProcess(returncode, finished=finished, interrupt=interrupt)
        return self.process

    def stop(self, container: ContainerRef) -> None:
        self.running.discard(container.id)

    def fail(self, op: str, returncode: int = 1, stderr: str = "") -> None:
        self.failures[op] = (returncode, stderr or f"simulated {op} failure")

    def commands(self, name: str) -> list[list[str]]:
        return [c for c in self.calls if c and c[0] == name]

    def sql_statements(self) -> list[str]:
        return [c[c.index("-c") + 1] for c in self.calls if "-c" in c]

    # -- DockerCli interface --------------------------------------------------

    def run(self, args, *, check=True, capture_output=True):
        args = list(args)
        self.calls.append(args)
        returncode, stdout, stderr = self._dispatch(args)
        cmd = [self.executable, *args]
        if check and returncode != 0:
            raise DockerCommandError(cmd, returncode, stderr)
        return _subprocess.CompletedProcess(cmd, returncode, stdout, stderr)

    def popen(self, args, **kwargs):
        args = list(args)
        self.calls.append(args)
        self.popen_calls.append(args)
        self.process.args = [self.executable, *args]
        return self.process

    # -- simulation -----------------------------------------------------------

    def _dispatch(self, args: list[str]) -> tuple[int, str, str]:
        if args[0] == "ps":
            lines = [
                f"{c.id}\t{c.name}\t{c.image}\t{c.status}\n"
                for c in self.containers
                if c.id in self.running
            ]
            return 0, "".join(lines), ""
        elif args[0] == "cp":
            container_id, _, path = args[2].partition(":")
            if container_id not in self.running:
                return 1, "", f"Error: No such container: {container_id}"
            if failure := self._failure("cp"):
                return failure
            self.files[container_id].add(path)
            return 0, "", ""
        elif args[0] == "exec":
            i = 1
            while args[i] == "-e":
                i += 2
            container_id, cmd = args[i], args[i + 1 :]
            if container_id not in self.running:
                return 1, "", f"Error: No such container: {container_id}"
            return self._exec(container_id, cmd)
        raise AssertionError(f"Unexpected docker command {args!r}")

    def _failure(self, op: str) -> tuple[int, str, str] | None:
        if op in self.failures:
            returncode, stderr = self.failures[op]
            return returncode, "", stderr
        return None

    def _exec(self, container_id: str, cmd: list[str]) -> tuple[int, str, str]:
        dbs = self.databases[container_id]
        if cmd[0] == "rm":
            if failure := self._failure("rm"):
                return failure
            path = cmd[1]
            if path not in self.files[container_id]:
                return 1, "", f"rm: cannot remove '{path}': No such file or directory"
            self.files[container_id].remove(path)
            return 0, "", ""

        assert cmd[0] == "psql", cmd
        sql = cmd[cmd.index("-c") + 1]
        if m := _re.fullmatch(r"SELECT 1 FROM pg_database WHERE datname = '(.*)';", sql):
            if failure := self._failure("exists"):
                return failure
            return 0, ("1\n" if m.group(1) in dbs else ""), ""
        elif m := _re.fullmatch(r'DROP DATABASE IF EXISTS "(.*)";', sql):
            if failure := self._failure("drop"):
                return failure
            dbs.pop(m.group(1), None)
            return 0, "DROP DATABASE\n", ""
        elif m := _re.fullmatch(r'CREATE DATABASE "(.*)";', sql):
            if failure := self._failure("create"):
                return failure
            if m.group(1) in dbs:
                return 1, "", f'ERROR:  database "{m.group(1)}" already exists'
            dbs[m.group(1)] = _DEFAULT_DB_SIZE
            return 0, "CREATE DATABASE\n", ""
        elif m := _re.fullmatch(r"SELECT pg_database_size\('(.*)'\);", sql):
            if failure := self._failure("size"):
                return failure
            if m.group(1) not in dbs:
                return 1, "", f'ERROR:  database "{m.group(1)}" does not exist'
            return 0, f"{dbs[m.group(1)]}\n", ""
        elif sql.startswith("SELECT datname FROM pg_database"):
            if failure := self._failure("list"):
                return failure
            return 0, "".join(f"{name}\n" for name in sorted(dbs)), ""
        elif sql.startswith("SELECT pg_terminate_backend"):
            if failure := self._failure("terminate"):
                return failure
            return 0, "", ""
        return self.query_exit_code, "", ""


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def docker() -> FakeDocker:
    return FakeDocker()


@pytest.fixture
def reporter() -> Reporter:
    return Reporter()


@pytest.fixture
def backup_file(tmp_path):
    path = tmp_path / "qa-order-service.sql"
    path.write_text(
        "CREATE TABLE t(x int);\nINSERT INTO t VALUES (1),(2),(3);\n", encoding="utf-8"
    )
    return path

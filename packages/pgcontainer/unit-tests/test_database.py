import pytest
from pgcontainer import (
    ContainerPsql,
    CreateFailedError,
    DropFailedError,
    DropResult,
    create_database,
    drop_database,
    reset_database,
)


@pytest.fixture
def container(docker):
    return docker.add_container("db")


@pytest.fixture
def psql(docker, container):
    return ContainerPsql(docker, container)


class Test_drop_database:
    def test_absent(self, docker, psql):
        assert drop_database(psql, "testdb") == DropResult.ABSENT
        assert not any(s.startswith("DROP") for s in docker.sql_statements())

    def test_dropped(self, docker, container, psql):
        docker.databases[container.id]["testdb"] = 1
        assert drop_database(psql, "testdb") == DropResult.DROPPED
        assert "testdb" not in docker.databases[container.id]
        assert 'DROP DATABASE IF EXISTS "testdb";' in docker.sql_statements()

    def test_drop_failure_is_not_swallowed(self, docker, container, psql):
        docker.databases[container.id]["testdb"] = 1
        docker.fail("drop", stderr='database "testdb" is being accessed by other users')
        with pytest.raises(DropFailedError, match="being accessed by other users"):
            drop_database(psql, "testdb")

    def test_terminate_other_clients(self, docker, container, psql):
        docker.databases[container.id]["testdb"] = 1
        drop_database(psql, "testdb", terminate_other_clients=True)
        statements = docker.sql_statements()
        terminate = [s for s in statements if "pg_terminate_backend" in s]
        assert len(terminate) == 1
        assert "datname = 'testdb'" in terminate[0]
        assert statements.index(terminate[0]) < statements.index(
            'DROP DATABASE IF EXISTS "testdb";'
        )

    def test_existence_check_failure(self, docker, psql):
        docker.fail("exists")
        with pytest.raises(DropFailedError):
            drop_database(psql, "testdb")

    def test_quotes_names(self, docker, container, psql):
        docker.databases[container.id]["it's"] = 1
        drop_database(psql, "it's")
        assert "SELECT 1 FROM pg_database WHERE datname = 'it''s';" in docker.sql_statements()


class Test_create_database:
    def test_create(self, docker, container, psql):
        create_database(psql, "testdb")
        assert "testdb" in docker.databases[container.id]

    def test_failure(self, docker, psql):
        docker.fail("create", stderr="permission denied to create database")
        with pytest.raises(CreateFailedError, match="permission denied") as exc_info:
            create_database(psql, "testdb")
        assert exc_info.value.stage == "create"


class Test_reset_database:
    def test_is_idempotent(self, docker, container, psql):
        assert reset_database(psql, "testdb") == DropResult.ABSENT
        docker.databases[container.id]["testdb"] = 123
        assert reset_database(psql, "testdb") == DropResult.DROPPED
        assert docker.databases[container.id]["testdb"] != 123

    def test_recovers_after_crash_between_drop_and_create(self, docker, container, psql):
        docker.databases[container.id]["testdb"] = 1
        docker.fail("create")
        with pytest.raises(CreateFailedError):
            reset_database(psql, "testdb")
        assert "testdb" not in docker.databases[container.id]

        del docker.failures["create"]
        assert reset_database(psql, "testdb") == DropResult.ABSENT
        assert "testdb" in docker.databases[container.id]

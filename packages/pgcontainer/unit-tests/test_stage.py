import pytest
from pgcontainer import (
    ArtifactFormat,
    BackupArtifact,
    CleanupFailedError,
    NotFoundError,
    TransferError,
    cleanup,
    remove_staged_artifact,
    stage,
)


class Test_stage:
    def test_copies_to_root_under_basename(self, docker, backup_file):
        db = docker.add_container("db")
        artifact = stage(docker, backup_file, db)
        assert artifact.remote_staged_path == "/qa-order-service.sql"
        assert artifact.local_path == backup_file.resolve()
        assert artifact.format == ArtifactFormat.PLAIN
        assert "/qa-order-service.sql" in docker.files[db.id]
        assert docker.commands("cp") == [
            ["cp", str(backup_file), f"{db.id}:/qa-order-service.sql"]
        ]

    def test_custom_staging_root(self, docker, backup_file):
        db = docker.add_container("db")
        artifact = stage(docker, backup_file, db, staging_root="/tmp")
        assert artifact.remote_staged_path == "/tmp/qa-order-service.sql"

    def test_overwrites_previous_stage(self, docker, backup_file):
        db = docker.add_container("db")
        stage(docker, backup_file, db)
        stage(docker, backup_file, db)
        assert docker.files[db.id] == {"/qa-order-service.sql"}

    def test_detects_custom_format(self, docker, tmp_path):
        dump = tmp_path / "prod.dump"
        dump.write_bytes(b"PGDMP\x01\x0e\x00")
        db = docker.add_container("db")
        assert stage(docker, dump, db).format == ArtifactFormat.CUSTOM

    def test_missing_local_file(self, docker, tmp_path):
        db = docker.add_container("db")
        with pytest.raises(NotFoundError, match="Backup file not found") as exc_info:
            stage(docker, tmp_path / "missing.sql", db)
        assert exc_info.value.stage == "stage"
        assert docker.commands("cp") == []

    def test_container_not_running(self, docker, backup_file):
        db = docker.add_container("db")
        docker.stop(db)
        with pytest.raises(NotFoundError, match="not running"):
            stage(docker, backup_file, db)

    def test_copy_failure(self, docker, backup_file):
        db = docker.add_container("db")
        docker.fail("cp", stderr="no space left on device")
        with pytest.raises(TransferError, match="no space left on device"):
            stage(docker, backup_file, db)


class Test_cleanup:
    @pytest.fixture
    def staged(self, docker, backup_file):
        db = docker.add_container("db")
        return db, stage(docker, backup_file, db)

    def test_removes_artifact(self, docker, staged):
        db, artifact = staged
        assert cleanup(docker, db, artifact) is True
        assert docker.files[db.id] == set()

    def test_failure_is_swallowed(self, docker, staged, caplog):
        db, artifact = staged
        docker.stop(db)
        assert cleanup(docker, db, artifact) is False
        assert "Could not remove /qa-order-service.sql" in caplog.text

    def test_remove_staged_artifact_raises(self, docker, staged):
        db, artifact = staged
        docker.fail("rm")
        with pytest.raises(CleanupFailedError) as exc_info:
            remove_staged_artifact(docker, db, artifact)
        assert exc_info.value.stage == "cleanup"


def test_remote_path_for():
    assert BackupArtifact.remote_path_for("/x/y/backup.sql") == "/backup.sql"
    assert BackupArtifact.remote_path_for("backup.sql", "") == "/backup.sql"

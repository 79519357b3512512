from __future__ import annotations

from ._cli import (
    list_containers_main as list_containers_main,
    query_main as query_main,
    restore_main as restore_main,
)
from ._config import PgContainerConfig as PgContainerConfig
from ._console import Reporter as Reporter
from ._context import PgContainerContext as PgContainerContext
from ._database import (
    create_database as create_database,
    drop_database as drop_database,
    reset_database as reset_database,
    terminate_backends as terminate_backends,
)
from ._docker import (
    ContainerRef as ContainerRef,
    DockerCli as DockerCli,
)
from ._errors import (
    AmbiguousError as AmbiguousError,
    CleanupFailedError as CleanupFailedError,
    CreateFailedError as CreateFailedError,
    DockerCommandError as DockerCommandError,
    DockerUnavailableError as DockerUnavailableError,
    DropFailedError as DropFailedError,
    NotFoundError as NotFoundError,
    PgContainerError as PgContainerError,
    RestoreCancelledError as RestoreCancelledError,
    RestoreFailedError as RestoreFailedError,
    TransferError as TransferError,
)
from ._listing import list_containers as list_containers
from ._locate import (
    filter_containers as filter_containers,
    list_running_containers as list_running_containers,
    locate as locate,
    locate_explicit as locate_explicit,
)
from ._psql import ContainerPsql as ContainerPsql
from ._query import run_query as run_query
from ._restore import RestoreExecutor as RestoreExecutor
from ._restore_backup import restore_backup as restore_backup
from ._stage import (
    cleanup as cleanup,
    remove_staged_artifact as remove_staged_artifact,
    stage as stage,
)
from ._types import (
    ArtifactFormat as ArtifactFormat,
    BackupArtifact as BackupArtifact,
    DropResult as DropResult,
    RestoreOutcome as RestoreOutcome,
    RestoreProgress as RestoreProgress,
    RestoreStatus as RestoreStatus,
)


__version__ = "0.1.0"

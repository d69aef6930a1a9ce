import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

RemoteT = TypeVar("RemoteT")
LocalT = TypeVar("LocalT")


class CreateSaga(Generic[RemoteT, LocalT]):
    """
    Two-step create across Drive and the metadata store, with one compensation.

    1. create_remote() makes the Drive object. If it fails nothing exists yet and the
       error propagates unchanged.
    2. create_local(remote) inserts the store row. If it fails, compensate(remote) is
       attempted exactly once to delete the Drive object, then the insert error is
       re-raised. A failing compensation is logged and not retried.

    A saga instance runs once.
    """

    def __init__(
        self,
        description: str,
        create_remote: Callable[[], RemoteT],
        create_local: Callable[[RemoteT], LocalT],
        compensate: Callable[[RemoteT], None],
    ):
        self.description = description
        self.create_remote = create_remote
        self.create_local = create_local
        self.compensate = compensate
        self.remote: Optional[RemoteT] = None
        self.compensation_attempted = False
        self.compensation_failed = False
        self._ran = False

    def run(self) -> LocalT:
        if self._ran:
            raise RuntimeError(f"Saga '{self.description}' has already run")
        self._ran = True

        self.remote = self.create_remote()
        try:
            return self.create_local(self.remote)
        except Exception:
            logger.error(f"Store insert failed for {self.description}; removing the Drive object")
            self._compensate()
            raise

    def _compensate(self) -> None:
        self.compensation_attempted = True
        try:
            self.compensate(self.remote)
            logger.info(f"Cleaned up Drive object after failed {self.description}")
        except Exception as e:
            self.compensation_failed = True
            logger.error(f"Failed to clean up Drive object after failed {self.description}: {e}")

from typing import IO, Optional

from pcfdev.errors import InvalidStateError
from pcfdev.models import StartOpts
from pcfdev.vm.base import VM

GUIDANCE = "PCF Dev is in an invalid state. Please run 'pcfdev destroy'"


class Invalid(VM):
    """
    The VM could not be classified.

    ``reason`` says which lookup failed (missing IP, unknown address, stale
    directory, ...). Every operation refuses with the same guidance; the
    reason travels on the raised InvalidStateError.
    """

    def __init__(self, *args, reason: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.reason = reason

    def _refuse(self):
        raise InvalidStateError(GUIDANCE, reason=self.reason or None)

    def start(self, opts: StartOpts) -> str:
        self._refuse()

    def stop(self) -> str:
        self._refuse()

    def suspend(self) -> str:
        self._refuse()

    def resume(self) -> str:
        self._refuse()

    def status(self) -> str:
        return GUIDANCE

    def destroy(self) -> str:
        self._refuse()

    def provision(self, stdout: Optional[IO[str]] = None, stderr: Optional[IO[str]] = None) -> str:
        self._refuse()

    def verify_start_opts(self, opts: StartOpts) -> None:
        self._refuse()

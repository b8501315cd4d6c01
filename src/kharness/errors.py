from __future__ import annotations


class HarnessError(Exception):
    pass


class UsageError(HarnessError):
    """A required file or argument is missing; raised before anything runs."""


class Terminated(HarnessError):
    def __init__(self, signum: int) -> None:
        super().__init__(f"terminated by signal {signum}")
        self.signum = signum

    @property
    def exit_code(self) -> int:
        return 128 + self.signum

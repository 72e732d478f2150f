"""
errors.py

Responsibility: The exception hierarchy shared by every bootstrap step.

`cli.main` maps `UserAbort` to exit code 0 and any other `BootstrapError`
to exit code 1. Module-specific errors (rendering, git, GitHub) subclass
`BootstrapError` in their own modules.
"""

from __future__ import annotations


class BootstrapError(RuntimeError):
    pass


class ValidationError(BootstrapError):
    """Bad or missing invocation parameter, or an invalid menu selection."""


class PrerequisiteError(BootstrapError):
    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing host dependencies: {' '.join(self.missing)}")


class CredentialError(BootstrapError):
    pass


class SettingsError(BootstrapError):
    pass


class CommandError(BootstrapError):
    def __init__(self, cmd: list[str], returncode: int, output: str = "") -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.output = output
        msg = f"Command failed ({returncode}): {' '.join(cmd)}"
        if output.strip():
            msg += f"\n\n{output.rstrip()}"
        super().__init__(msg)


class UserAbort(BootstrapError):
    """The operator chose "exit" from a conflict menu."""

"""
Schemas & Errors
File: verification.py

Purpose: Standard result format for tree integrity checks.
Used by StandardMerkleTree.validate() and the CLI `show --check` command.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# Severity levels for checks
CheckSeverity = Literal["info", "warn", "error"]


class CheckResult(BaseModel):
    """
    Result of a single verification check.

    Checks are atomic verification steps that can pass or fail.
    """

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(
        ...,
        description="Unique identifier for this check",
        min_length=1,
    )
    ok: bool = Field(
        ...,
        description="Whether the check passed",
    )
    severity: CheckSeverity = Field(
        ...,
        description="Severity level of this check",
    )
    message: str = Field(
        ...,
        description="Human-readable message describing the result",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional details about the check",
    )

    @property
    def is_error(self) -> bool:
        """Check if this is an error-level failure."""
        return not self.ok and self.severity == "error"

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a passed check result."""
        return cls(
            check_id=check_id,
            ok=True,
            severity="info",
            message=message,
            details=details or {},
        )

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a failed check result."""
        return cls(
            check_id=check_id,
            ok=False,
            severity="error",
            message=message,
            details=details or {},
        )


class VerificationResult(BaseModel):
    """
    Complete result of a verification process.

    Collects individual checks so a caller can report every inconsistency
    in a tree rather than only the first one.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool = Field(
        ...,
        description="Overall verification success",
    )
    checks: list[CheckResult] = Field(
        default_factory=list,
        description="Individual check results",
    )

    def get_failed_checks(self) -> list[CheckResult]:
        """Get all failed checks."""
        return [check for check in self.checks if not check.ok]

    def get_error_messages(self) -> list[str]:
        """Get all error messages."""
        return [check.message for check in self.checks if check.is_error]

    @classmethod
    def success(cls, checks: list[CheckResult] | None = None) -> "VerificationResult":
        """Create a successful verification result."""
        return cls(ok=True, checks=checks or [])

    def add_check(self, check: CheckResult) -> None:
        """Add a check result."""
        self.checks.append(check)
        if not check.ok:
            self.ok = False

"""
Fatal provisioning errors.

A ``ProvisionError`` means a hard precondition is unmet and the run
must stop. Advisory problems are logged as warnings instead and never
raise.
"""

from __future__ import annotations


class ProvisionError(Exception):
    """Raised when a step cannot satisfy its postcondition."""

    def __init__(self, step: str, message: str, hint: str = ""):
        self.step = step
        self.message = message
        self.hint = hint
        super().__init__(f"[{step}] {message}")

    def to_dict(self) -> dict:
        data = {"step": self.step, "message": self.message}
        if self.hint:
            data["hint"] = self.hint
        return data

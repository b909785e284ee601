"""Caller identity passed from the HTTP layer into services."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """An authenticated caller.

    Attributes:
        subject: External user identifier (token 'sub' claim)
        org_id: External organization the caller is acting for. Workspaces
            are bound to organizations, so a caller without one can reach
            no workspace.
    """

    subject: str
    org_id: Optional[str] = None

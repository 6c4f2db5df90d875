"""Pydantic models for the end-to-end harness."""

from .account import Account, AccountList
from .environment import Defaults, Operator, Vars

__all__ = ["Account", "AccountList", "Defaults", "Operator", "Vars"]

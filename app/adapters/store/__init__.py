"""Signup store adapters - abstract over the persistence backend."""

from app.adapters.store.base import AbstractSignupStore, InsertOutcome
from app.adapters.store.factory import create_signup_store
from app.adapters.store.in_memory import InMemorySignupStore

__all__ = [
    "AbstractSignupStore",
    "InMemorySignupStore",
    "InsertOutcome",
    "create_signup_store",
]

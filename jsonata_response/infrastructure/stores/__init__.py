"""In-memory host adapters."""

from .memory import CallbackNetworkSender, InMemoryRequestStore, InMemoryResponseStore

__all__ = ['CallbackNetworkSender', 'InMemoryRequestStore', 'InMemoryResponseStore']

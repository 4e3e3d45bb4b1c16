"""Sequential dispatch of dial-out requests across selected targets."""

from .service import BatchDispatcher, BatchInProgressError, DispatchBatch

__all__ = ["BatchDispatcher", "BatchInProgressError", "DispatchBatch"]

"""
Exceptions raised by the dataset synchronization pipeline.
"""


class CatalogSyncError(Exception):
    """Base class for sync pipeline errors."""


class AcquisitionError(CatalogSyncError):
    """Raw dataset bytes could not be obtained from the network or the local copy."""


class EmptyDatasetError(CatalogSyncError):
    """The source has no header or no data rows."""


class RowNormalizationError(CatalogSyncError):
    """A single row could not be tokenized or normalized.

    Collected into the parse result, never propagated out of the parser.
    """


class SyncInProgressError(CatalogSyncError):
    """Another sync holds the distributed lock."""


class PersistenceError(CatalogSyncError):
    """The relational store rejected a read or write during a sync."""

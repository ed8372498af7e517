"""Error types shared by the data, routing and API layers."""

from __future__ import annotations


class DataFetchError(RuntimeError):
    """The container source could not be read (network, timeout or bad payload)."""


class RouteComputationError(RuntimeError):
    """Route planning or metrics failed unexpectedly."""


class SegmentResolutionFailure(RuntimeError):
    """A single road segment could not be resolved by the directions provider."""


class ProviderDisabledError(SegmentResolutionFailure):
    """The directions provider refused access; no further segments should be requested."""

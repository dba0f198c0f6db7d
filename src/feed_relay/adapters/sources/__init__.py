"""Feed source adapters."""

from feed_relay.adapters.sources.miniflux_source import MinifluxSource

__all__ = ["MinifluxSource"]

"""Language model adapters."""

from feed_relay.adapters.llm.model_client import ModelClient

__all__ = ["ModelClient"]

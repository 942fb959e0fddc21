"""Key-value store benchmark toolkit: configuration, key sets, index structures, request encodings and handlers."""

__version__ = "0.1.0"

__all__ = [
    "barrier",
    "clusterhash",
    "config",
    "dataset",
    "drtmr_client",
    "drtmr_server",
    "keys",
    "ludo_slot",
    "lru_cache",
    "packed_data",
    "platform",
    "statics",
]
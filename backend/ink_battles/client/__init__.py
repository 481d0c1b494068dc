"""Client side of the analysis stream protocol."""

from .config_store import InMemoryKeyValueStore, JsonFileKeyValueStore, ModelConfigStore
from .http_client import AnalysisClient, AnalysisRequestError
from .reducer import StreamListener, StreamReducer, StreamStatus, merge_result

__all__ = [
    "AnalysisClient",
    "AnalysisRequestError",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "ModelConfigStore",
    "StreamListener",
    "StreamReducer",
    "StreamStatus",
    "merge_result",
]

from .api_client import MemoApiClient, MemoGateway
from .detail import DetailMode, MemoDetailController, MemoDraft
from .store import MemoStore

__all__ = [
    "DetailMode",
    "MemoApiClient",
    "MemoDetailController",
    "MemoDraft",
    "MemoGateway",
    "MemoStore",
]

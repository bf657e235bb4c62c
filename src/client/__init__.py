from src.client.api_client import ApiResult, SupportApiClient
from src.client.blacklist import BlacklistPhase, BlacklistWorkflow
from src.client.resolution import DetailResolver, Resolution, ResolutionState
from src.client.review import ReviewState, ReviewWorkflow

__all__ = [
    "ApiResult",
    "BlacklistPhase",
    "BlacklistWorkflow",
    "DetailResolver",
    "Resolution",
    "ResolutionState",
    "ReviewState",
    "ReviewWorkflow",
    "SupportApiClient",
]

from .api import ApiClient, ApiError, clamp_scores
from .cache import QueryCache
from .optimistic import CandidateActivation, BatchResult
from .freshness import FreshnessStrategy, IntervalPoll, PushInvalidate

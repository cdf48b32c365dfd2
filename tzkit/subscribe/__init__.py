from .filters import Filter, evaluate_filter
from .polling import PollingSubscribeProvider
from .subscription import Subscription

__all__ = ["Filter", "evaluate_filter", "PollingSubscribeProvider", "Subscription"]

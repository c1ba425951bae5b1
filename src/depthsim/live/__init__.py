from .session import DelayedBookProvider, FeedSession, FeedSubscription, SubscriptionToken

__all__ = ["DelayedBookProvider", "FeedSession", "FeedSubscription", "SubscriptionToken"]

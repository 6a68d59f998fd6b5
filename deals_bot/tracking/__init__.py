from .interaction_tracker import InteractionTracker, SearchOutcome

__all__ = ["InteractionTracker", "SearchOutcome"]

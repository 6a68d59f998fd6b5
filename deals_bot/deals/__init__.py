from .today import DealsDelivery, discount_percent, send_todays_deals

__all__ = ["DealsDelivery", "discount_percent", "send_todays_deals"]

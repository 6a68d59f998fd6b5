"""
Deals Bot: поиск товаров, сделки дня и рассылки в Telegram
"""

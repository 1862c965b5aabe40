"""
WooCommerce Profit Tracker.
"""

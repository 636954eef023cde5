"""Inbound Shopify webhook handling.

Receives orders webhooks, verifies their HMAC over the raw body, and adds
each order total to the sales-donated counter.
"""

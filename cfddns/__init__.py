"""Detect IP addresses, update DNS records and WAF lists, and summarise the outcome."""

__version__ = "0.1.0"
__all__ = ["messages", "signals", "updater"]
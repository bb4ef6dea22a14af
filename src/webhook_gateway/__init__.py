"""GitCode webhook gateway.

This package receives GitCode webhook deliveries and authenticates them
before they are handed to downstream dispatch:
- Method, User-Agent, Content-Type and event header validation
- Single-read body capture
- HMAC-SHA256 signature verification
- Prometheus metrics for authentication outcomes
- A GitCode REST client for pull request follow-up calls
"""

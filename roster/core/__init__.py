"""
Core utilities shared across the Roster API.

Configuration, password/token security and the request rate limiter live
here so routers and services never read os.environ or touch crypto libraries
directly.
"""

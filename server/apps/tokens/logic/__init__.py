"""Business logic layer for tokens app.

- Token lifecycle: issue, reuse, validate, invalidate, sweep
- Resolution of a request's bearer token into the acting user
"""

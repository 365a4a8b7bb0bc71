"""
Unit tests for the request lifecycle layer.

Test individual components in isolation:
- Retry reasons (policy flags per reason)
- Retry strategies (best-effort backoff, fail-fast, custom calculators)
- Retry orchestrator (always-retry override, strategy delegation, attempt log)
- Request and RequestBehaviour models
- Timeouts (defaults, overrides, admin fallback)
- Transport error classification and senders (fake clock)
"""

"""
Integration tests for the request lifecycle layer.

Drive requests end-to-end through the senders against scripted fake
transports: request factory -> sender -> classification -> orchestrator ->
backoff -> resend, sync and async.
"""

"""
Pings backend: request handlers for the senior check-in app and the family
dashboard, served through FastAPI or an API Gateway proxy adapter.
"""

"""
Application wiring: lifespan, middlewares, CORS, exception handlers and
dependency providers.
"""

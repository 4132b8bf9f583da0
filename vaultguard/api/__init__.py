"""API layer: FastAPI routes, dependencies and error handlers.

Routes are thin: they parse the request, call one service and serialize
the result.
"""

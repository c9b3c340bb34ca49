from .Lifespan import create_fastapi_app, lifespan, resolve

__all__ = ["create_fastapi_app", "lifespan", "resolve"]

"""Django project package; exposes the Celery app when celery is installed."""

from importlib.util import find_spec

__all__: tuple[str, ...] = ()

if find_spec("celery") is not None:
    from .celery import app as celery_app

    __all__ = ("celery_app",)

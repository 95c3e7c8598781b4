# Import all models to ensure they are registered with SQLAlchemy
from . import appointment, holiday, service, staff

__all__ = ["appointment", "holiday", "service", "staff"]

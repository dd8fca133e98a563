from .app import create_app
from .behaviors import Behaviors
from .routes import ROUTES, Dispatcher, Route

__all__ = ["Behaviors", "Dispatcher", "ROUTES", "Route", "create_app"]

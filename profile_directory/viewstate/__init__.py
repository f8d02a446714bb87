"""View-state engine and map selection bridge."""

from profile_directory.viewstate.engine import ProfileViewEngine
from profile_directory.viewstate.map_bridge import MapSelectionBridge
from profile_directory.viewstate.models import MapView, ViewSnapshot

__all__ = ["ProfileViewEngine", "MapSelectionBridge", "MapView", "ViewSnapshot"]

"""Live aggregate state, its canonical shape, and the mutation layer."""

from selfmonitor.core.state.defaults import build_default_state
from selfmonitor.core.state.schemas import COLLECTIONS, AppState
from selfmonitor.core.state.services import StateService

__all__ = ["AppState", "COLLECTIONS", "StateService", "build_default_state"]

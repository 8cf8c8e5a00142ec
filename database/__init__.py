from .db import (
    DBBase,
    DBBaseClass,
    build_engine,
    build_session_factory,
    init_models,
    time_now,
)
from .utils import session_scope

__all__ = [
    "DBBase",
    "DBBaseClass",
    "build_engine",
    "build_session_factory",
    "init_models",
    "time_now",
    "session_scope",
]

# (c) Copyright Datacraft, 2026
from .base import Base
from .engine import get_engine, make_engine

__all__ = ["Base", "get_engine", "make_engine"]

"""Pydantic schemas for request/response validation."""

from .availability import *  # noqa: F403
from .common import *  # noqa: F403
from .health import *  # noqa: F403
from .review import *  # noqa: F403
from .tour import *  # noqa: F403
from .vendor import *  # noqa: F403

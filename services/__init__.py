"""
Seekr services package.
Contains background services that live for the whole launcher process.
"""

from .instance import (
    ClosePolicy,
    CoordinatorState,
    InstanceCoordinator,
    Role,
    send_show_signal,
)

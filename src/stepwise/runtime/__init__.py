"""Runtime helpers - logging and tracing layers that sit around steps."""

from stepwise.runtime.observe import log_effect, logged, traced

__all__ = [
    "logged",
    "log_effect",
    "traced",
]

"""Container runtime access."""

from flexdisco.runtime.client import DockerRuntime, RuntimeClientError

__all__ = [
    "DockerRuntime",
    "RuntimeClientError",
]

class JadwaError(Exception):
    """Base exception class for the Jadwa AI orchestration layer."""
    pass

class ConfigError(JadwaError):
    """Raised when there is an error in a configuration file or the backend registry."""
    pass

class BackendError(JadwaError):
    """Raised when a remote generation backend fails or answers with an unexpected shape.

    Adapters convert it to degraded content; it never reaches callers of the orchestrator.
    """
    def __init__(self, backend_id: str, message: str):
        super().__init__(f"{backend_id}: {message}")
        self.backend_id = backend_id

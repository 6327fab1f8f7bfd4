from ._cpu_backend import CPUBackend, CPUBackendConfig

__all__ = [CPUBackend.__name__, CPUBackendConfig.__name__]

"""ciprov - CI toolchain provisioning."""

__version__ = "0.1.0"

from importlib import metadata

try:
    RESTFLOW_VERSION = metadata.version("restflow")
except metadata.PackageNotFoundError:
    # Local run without installation
    RESTFLOW_VERSION = "dev"

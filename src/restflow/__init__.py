from __future__ import annotations

from restflow import environment, flows, reporting
from restflow.config import RestflowConfig as Config
from restflow.core.version import RESTFLOW_VERSION
from restflow.flows import (
    Flow,
    FlowExecutor,
    FlowResult,
    FlowStep,
    HttpRequest,
    HttpResponse,
    StepResult,
    parse_flow,
    parse_flow_file,
)
from restflow.transport import HttpClient

__version__ = RESTFLOW_VERSION

__all__ = [
    "__version__",
    # Core data structures
    "Config",
    "Flow",
    "FlowStep",
    "HttpRequest",
    "HttpResponse",
    "StepResult",
    "FlowResult",
    # Execution
    "FlowExecutor",
    "HttpClient",
    "parse_flow",
    "parse_flow_file",
    # Namespaces
    "environment",
    "flows",
    "reporting",
]

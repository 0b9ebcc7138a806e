"""Flow Execution Module for Restflow.

This module provides:
- Parsing of ``.flow`` files into steps
- Placeholder resolution with built-in dynamic values
- Value extraction and assertions on HTTP responses
- Sequential execution with captures flowing into later steps
"""

from __future__ import annotations

from restflow.flows.models import (
    AssertDirective,
    CaptureDirective,
    ConsoleDirective,
    Directive,
    DirectiveResult,
    ExecutionContext,
    Flow,
    FlowResult,
    FlowStep,
    HttpMethod,
    HttpRequest,
    HttpResponse,
    StepResult,
)
from restflow.flows.errors import (
    AssertionEvaluationError,
    ExpressionParseError,
    FlowError,
    FlowExecutionError,
    FlowParseError,
    HttpError,
    ValueExtractionError,
    VariableError,
)
from restflow.flows.expressions import ComparisonOperator, ExpressionParser, ParsedAssertion
from restflow.flows.extractor import ValueExtractor, extract_jsonpath, parse_body
from restflow.flows.evaluator import AssertionEvaluator, AssertionResult
from restflow.flows.variables import (
    BUILTIN_VARIABLES,
    VariableResolver,
    create_execution_context,
    extract_variables,
    has_variables,
    resolve_template,
    validate_variables,
)
from restflow.flows.parser import FlowParser, ParseResult, parse_flow, parse_flow_file
from restflow.flows.executor import FlowExecutor, execute_flow_from_string, execute_flow_with_environment

__all__ = [
    # Models
    "Flow",
    "FlowStep",
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "Directive",
    "CaptureDirective",
    "AssertDirective",
    "ConsoleDirective",
    "ExecutionContext",
    "DirectiveResult",
    "StepResult",
    "FlowResult",
    # Core components
    "ExpressionParser",
    "ParsedAssertion",
    "ComparisonOperator",
    "ValueExtractor",
    "AssertionEvaluator",
    "AssertionResult",
    "VariableResolver",
    "FlowParser",
    "ParseResult",
    "FlowExecutor",
    # Functions
    "BUILTIN_VARIABLES",
    "create_execution_context",
    "extract_jsonpath",
    "extract_variables",
    "has_variables",
    "parse_body",
    "parse_flow",
    "parse_flow_file",
    "resolve_template",
    "validate_variables",
    "execute_flow_from_string",
    "execute_flow_with_environment",
    # Errors
    "FlowError",
    "FlowParseError",
    "ExpressionParseError",
    "ValueExtractionError",
    "AssertionEvaluationError",
    "VariableError",
    "HttpError",
    "FlowExecutionError",
]

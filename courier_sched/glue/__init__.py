"""Glue helpers exposed for CLI and integration harnesses."""

from .io import (
    load_config,
    load_packages,
    load_text_input,
    load_vehicles,
    parse_cli_input,
    validate_inputs,
)
from .pipeline import (
    assemble_problem,
    build_arg_parser,
    build_params,
    export_plan,
    load_and_run,
    main,
    plan_deliveries,
    run_pipeline,
)

__all__ = [
    "assemble_problem",
    "build_arg_parser",
    "build_params",
    "export_plan",
    "load_and_run",
    "load_config",
    "load_packages",
    "load_text_input",
    "load_vehicles",
    "main",
    "parse_cli_input",
    "plan_deliveries",
    "run_pipeline",
    "validate_inputs",
]

# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Command line entry point.

Usage::

    dataverse-gen init
    dataverse-gen -u https://myorg.crm.dynamics.com
    dataverse-gen -u https://myorg.crm.dynamics.com -t <tenant> -a <app id> -s <secret>
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from azure.core.credentials import TokenCredential
from azure.identity import ClientSecretCredential, InteractiveBrowserCredential

from . import __version__
from .common.constants import CONFIG_FILE_NAME
from .core.config import GeneratorConfig, load_config, save_config
from .core.errors import DataverseGenError
from .generation.code_writer import FileSystemCodeWriter
from .generation.generator import TypeScriptGenerator
from .generation.templates import TypeScriptTemplateProvider
from .schema.model import SchemaModel
from .services.metadata_service import DataverseMetadataService

logger = logging.getLogger(__name__)

COMMAND_GENERATE = "generate"
COMMAND_INIT = "init"
COMMAND_HELP = "help"


def configure_logging(verbose: bool = False) -> None:
    """Send ``dataverse_gen`` log records to stderr, at DEBUG when ``verbose`` is set."""
    package_logger = logging.getLogger("dataverse_gen")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s" if not verbose else "%(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dataverse-gen",
        description="Generate TypeScript types from Dataverse metadata",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Add a .dataverse-gen.json config file to the project
  dataverse-gen init

  # Generate using an interactive browser sign-in
  dataverse-gen -u https://myorg.crm.dynamics.com

  # Generate using an application user
  dataverse-gen -u https://myorg.crm.dynamics.com -t <tenant id> -a <app id> -s <secret>
        """,
    )
    parser.add_argument(
        "command",
        nargs="?",
        default=COMMAND_GENERATE,
        choices=[COMMAND_GENERATE, COMMAND_INIT, COMMAND_HELP],
        help="Command to run (default: generate)",
    )
    parser.add_argument("-u", "--url", dest="url", help="Environment URL, e.g. https://myorg.crm.dynamics.com")
    parser.add_argument("-t", "--tenant-id", dest="tenant_id", help="Tenant id when connecting as an application user")
    parser.add_argument("-a", "--application-id", dest="application_id", help="Application id of the application user")
    parser.add_argument("-s", "--client-secret", dest="client_secret", help="Client secret of the application user")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_credential(args: argparse.Namespace) -> TokenCredential:
    """Client secret credential when tenant, application and secret are all given; browser sign-in otherwise."""
    if args.tenant_id and args.application_id and args.client_secret:
        return ClientSecretCredential(args.tenant_id, args.application_id, args.client_secret)
    return InteractiveBrowserCredential()


def init(project_dir: Path) -> Path:
    config_path = project_dir / CONFIG_FILE_NAME
    print(f"Initialising project with: {config_path}")
    return save_config(GeneratorConfig.default(), config_path)


async def generate(args: argparse.Namespace, project_dir: Path) -> List[str]:
    """
    Run a full generation against the environment in ``args.url``.

    :return: Files written, relative to the output root.
    :rtype: list[str]
    """
    config = load_config(project_dir / CONFIG_FILE_NAME)
    service = DataverseMetadataService(args.url, build_credential(args), cache_dir=project_dir)
    try:
        model = SchemaModel(service, config)
        await model.generate()
    finally:
        service.close()
    code_writer = FileSystemCodeWriter(config.output.output_root, project_dir)
    return TypeScriptGenerator(model, code_writer, TypeScriptTemplateProvider(), config).generate()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the ``dataverse-gen`` command.

    :return: Process exit code.
    :rtype: int
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    project_dir = Path.cwd()

    if args.command == COMMAND_HELP:
        parser.print_help()
        return 0
    if args.command == COMMAND_INIT:
        init(project_dir)
        return 0
    if not args.url:
        print("[ERR] The environment url is required: dataverse-gen -u https://myorg.crm.dynamics.com", file=sys.stderr)
        return 2

    logger.info("dataverse-gen v%s", __version__)
    logger.info("Current Project: %s", project_dir)
    try:
        written = asyncio.run(generate(args, project_dir))
    except Exception as ex:
        _print_error(ex)
        logger.debug("Generation failed", exc_info=True)
        return 1
    print(f"[OK] Generated {len(written)} file(s)")
    return 0


def _print_error(ex: BaseException) -> None:
    print(f"[ERR] {ex}", file=sys.stderr)
    cause = ex.__cause__ or ex.__context__
    if cause is not None:
        print(f"      Cause: {cause}", file=sys.stderr)
    if isinstance(ex, DataverseGenError) and ex.subcode:
        print(f"      Code: {ex.code} ({ex.subcode})", file=sys.stderr)


__all__ = ["build_credential", "build_parser", "configure_logging", "generate", "init", "main"]

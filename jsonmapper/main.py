"""
Command-line interface for inspecting configured object mappers.

Lists the available mapper modules and shows how the mapper for a
serializer identifier is built from a configuration file.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

from .config import load_config
from .core.exceptions import ConfigurationError, JsonMapperError
from .core.loader import ModuleLoader
from .core.module_registry import register_builtin_modules
from .core.provider import ObjectMapperProvider
from .mapper.features import EncodingFormat


def configure_logging(debug: bool = False, verbose: bool = False) -> None:
    """Configure application logging.

    Args:
        debug: Enable debug-level logging if True.
        verbose: Enable info-level logging if True.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbose:
        level = logging.INFO
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    else:
        level = logging.WARNING
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stderr,
        force=True,  # Override existing configuration
    )


def show_available_modules() -> NoReturn:
    """Print the registered mapper modules and exit."""
    registry = register_builtin_modules()
    available_names = registry.get_available_names()

    print("Available Mapper Modules:")
    print("=" * 50)

    if not available_names:
        print("No modules registered.")
        sys.exit(0)

    for module_name in available_names:
        info = registry.get_module_info(module_name)
        print(f"  {module_name:<16} - {info['description']}")
        print(f"  {'':<16}   {info['class']}")

    sys.exit(0)


def run_describe(
    config_file: Path | None,
    serializer_identifier: int,
    encoding: EncodingFormat,
    debug: bool = False,
    verbose: bool = False,
) -> NoReturn:
    """Build the mapper for an identifier and print its configuration as JSON.

    Raises:
        SystemExit: Always exits (0 on success, 1 for configuration errors,
            2 for other mapper errors, 3 for file system errors).
    """
    configure_logging(debug, verbose)
    logger = logging.getLogger(__name__)

    try:
        config = load_config(config_file)
        provider = ObjectMapperProvider(
            config=config, loader=ModuleLoader(register_builtin_modules())
        )
        mapper = provider.get_or_create(serializer_identifier, encoding)

        info = mapper.get_mapper_info()
        info["serializer_identifier"] = serializer_identifier
        print(json.dumps(info, indent=2))
        sys.exit(0)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except JsonMapperError as e:
        logger.error(f"Mapper error: {e}")
        sys.exit(2)
    except OSError as e:
        logger.error(f"File system error: {e}")
        sys.exit(3)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Argument list; sys.argv[1:] when None.

    Returns:
        Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        prog="jsonmapper",
        description="Inspect object mappers built from jsonmapper configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the mapper built for identifier 33 from a config file
  jsonmapper --config application.yaml --identifier 33

  # Same, with the YAML encoding and debug output
  jsonmapper --config application.yaml --identifier 33 --encoding yaml --debug

  # List available modules
  jsonmapper --list-modules
        """,
    )
    parser.add_argument(
        "--list-modules",
        action="store_true",
        help="List available mapper modules and exit",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="YAML or JSON configuration file (reference configuration if omitted)",
    )
    parser.add_argument(
        "-i",
        "--identifier",
        type=int,
        help="Serializer identifier to build the mapper for",
    )
    parser.add_argument(
        "-e",
        "--encoding",
        choices=[e.value for e in EncodingFormat],
        default=EncodingFormat.JSON.value,
        help="Encoding format of the mapper (default: json)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging for detailed output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    if not args.list_modules and args.identifier is None:
        parser.error("Must specify --identifier N or use --list-modules")

    return args


def main(argv: list[str] | None = None) -> NoReturn:
    args = parse_arguments(argv)
    if args.list_modules:
        show_available_modules()
    run_describe(
        args.config,
        args.identifier,
        EncodingFormat(args.encoding),
        args.debug,
        args.verbose,
    )


if __name__ == "__main__":
    main()

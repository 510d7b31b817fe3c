"""Argument parsing for the meshctl CLI."""

import argparse

SUBCOMMANDS = ("list", "view", "search", "import")

MODEL_EXAMPLES = """\
examples:
  # To view total of available models
  meshctl model --count

  # To view list of models
  meshctl model list

  # To view a specific model
  meshctl model view [model-name]

  # To search for a specific model
  meshctl model search [model-name]

  # To import a model from a file or URL
  meshctl model import -f [file | URL]
"""


def add_global_arguments(parser: argparse.ArgumentParser, suppress_defaults: bool = False) -> None:
    """Add the flags accepted both before and after the ``model`` command.

    With ``suppress_defaults`` an absent flag leaves the value parsed by the
    root parser in place.
    """
    flag_default = argparse.SUPPRESS if suppress_defaults else False
    path_default = argparse.SUPPRESS if suppress_defaults else None
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=flag_default,
        help="Enable verbose output"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=flag_default,
        help="Enable debug logging and write a debug log file"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=path_default,
        metavar="PATH",
        help="Path to the meshctl context file (default: MESHCTL_CONFIG_PATH or ~/.meshery/config.yaml)"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser.

    The ``model`` parser only knows ``--count`` and the subcommand name; the
    subcommand's own arguments are left unparsed so the prerequisites can be
    checked before they are validated.
    """
    parser = argparse.ArgumentParser(
        prog="meshctl",
        description="Command line client for a Meshery server",
    )
    add_global_arguments(parser)

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    model = commands.add_parser(
        "model",
        add_help=False,
        help="View list of models and detail of models",
        description="View list of models and detailed information of a specific model",
        epilog=MODEL_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    model.add_argument(
        "-h", "--help",
        action="store_true",
        help="Show this help message, or the subcommand's help when one is given"
    )
    model.add_argument(
        "--count",
        action="store_true",
        help="(optional) Get the number of models in total"
    )
    add_global_arguments(model, suppress_defaults=True)
    model.add_argument(
        "subcommand",
        nargs="?",
        metavar="SUBCOMMAND",
        help=f"One of: {', '.join(SUBCOMMANDS)}"
    )
    model.set_defaults(model_parser=model)
    return parser


def build_subcommand_parser(name: str) -> argparse.ArgumentParser:
    """Parser for the arguments of one ``model`` subcommand."""
    prog = f"meshctl model {name}"
    if name == "list":
        parser = argparse.ArgumentParser(prog=prog, description="List registered models")
        parser.add_argument(
            "-p", "--page",
            type=int,
            default=None,
            help="(optional) List next set of models with --page (default = 1)"
        )
    elif name == "view":
        parser = argparse.ArgumentParser(prog=prog, description="View a model")
        parser.add_argument(
            "name",
            nargs="?",
            metavar="model-name",
            help="Name of the model to view"
        )
        parser.add_argument(
            "-o", "--output-format",
            type=str,
            default="yaml",
            help="(optional) format to display in [json|yaml]"
        )
    elif name == "search":
        parser = argparse.ArgumentParser(prog=prog, description="Search registered models")
        parser.add_argument(
            "query",
            nargs="*",
            metavar="query-text",
            help="Text to search model names for"
        )
    elif name == "import":
        parser = argparse.ArgumentParser(prog=prog, description="Import a model into the registry")
        parser.add_argument(
            "-f", "--file",
            type=str,
            default=None,
            metavar="FILE_OR_URL",
            help="Path or http(s) URL of the model definition to import"
        )
        parser.add_argument(
            "--register",
            action=argparse.BooleanOptionalAction,
            default=True,
            help="Register the imported model with the registry"
        )
    else:
        raise ValueError(f"unknown model subcommand: {name}")
    return parser

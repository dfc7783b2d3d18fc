"""CLI interface for loading and clearing search engine fixtures."""

import logging
from typing import Any, Callable, Optional

import click

from .config import config
from .data_files import load_data_file
from .exceptions import DataFileError, EsFixturesConfigError, EsFixturesError
from .loader import FixtureLoader, bootstrap
from .models import SyncOptions
from .output import OutputFormatter

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}


def configure_logging(level_name: str) -> None:
    """Configure logging for the CLI.

    "trace" additionally enables request-level logging of httpx.
    """
    level = LOG_LEVELS.get(level_name, logging.INFO)
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("esfixtures").setLevel(level)
    if level_name == "trace":
        logging.getLogger("httpx").setLevel(logging.DEBUG)
        logging.getLogger("httpcore").setLevel(logging.DEBUG)


def _read_documents(data_file: str) -> list[Any]:
    data = load_data_file(data_file)
    if not isinstance(data, list):
        raise DataFileError(f"{data_file} must contain a list of documents")
    return data


def _read_object(data_file: str) -> dict[str, Any]:
    data = load_data_file(data_file)
    if not isinstance(data, dict):
        raise DataFileError(f"{data_file} must contain a JSON object")
    return data


def _read_optional(data_file: Optional[str]) -> Optional[dict[str, Any]]:
    if not data_file:
        return None
    return _read_object(data_file)


def _run(
    ctx: Any,
    command: str,
    index: Optional[str],
    doc_type: Optional[str],
    operation: Callable[[FixtureLoader], Any],
) -> None:
    """Run an operation on a loader and report the outcome.

    Exits with status 1 on any esfixtures error.
    """
    out: OutputFormatter = ctx.obj["out"]
    try:
        with bootstrap(index, doc_type, host=ctx.obj["host"]) as loader:
            result = operation(loader)
    except EsFixturesError as e:
        out.error(f"Error happened: {e}")
        ctx.exit(1)

    if out.json_output and result is not None:
        out.output_json(result.to_dict() if hasattr(result, "to_dict") else result)
    elif getattr(result, "errors", False):
        out.warning(
            f"{len(result.failed_items)} of {len(result.items)} item(s) failed"
        )
    out.success(f"{command} executed correctly.")


@click.group()
@click.option(
    "--host",
    "-H",
    default=None,
    help="Search engine host (default: localhost:9200 or ESFIXTURES_HOST)",
)
@click.option(
    "--log",
    "-l",
    "log_level",
    type=click.Choice(list(LOG_LEVELS)),
    default=None,
    help="Log level (default: info or ESFIXTURES_LOG)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output results in JSON format")
@click.version_option(package_name="esfixtures")
@click.pass_context
def main(
    ctx: Any,
    host: Optional[str],
    log_level: Optional[str],
    quiet: bool,
    json: bool,
) -> None:
    """esfix - Load and clear fixture documents in Elasticsearch/OpenSearch.

    Data files can be .json, .ndjson or .jsonl.
    """
    ctx.ensure_object(dict)
    out = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["out"] = out
    try:
        ctx.obj["host"] = host or config.host
        log_level = log_level or config.log_level
    except EsFixturesConfigError as e:
        out.error(f"Error happened: {e}")
        ctx.exit(1)
    configure_logging(log_level)


@main.command()
@click.argument("host")
@click.pass_context
def init(ctx: Any, host: str) -> None:
    """Save HOST as the default search engine host.

    The connection is checked first. The host is stored in
    ~/.config/esfixtures/config and used when --host is not given.
    """
    out: OutputFormatter = ctx.obj["out"]
    try:
        if config.is_configured():
            out.info(f"Replacing configured host {config.host}")
        out.info(f"Checking connection to {host}...")
        with bootstrap(host=host) as loader:
            version = loader.client.get_server_version()
        config.save_host(host)
    except EsFixturesError as e:
        out.error(f"Error happened: {e}")
        ctx.exit(1)

    out.print_summary(
        "Initialization Complete",
        [
            ("Host", host),
            ("Server", f"{version.distribution} {version.number}"),
            ("Config file", str(config.get_config_path())),
        ],
    )


@main.command("load")
@click.argument("index")
@click.argument("doc_type", metavar="TYPE")
@click.argument("data_file")
@click.option(
    "--incremental", "-i", is_flag=True, help="Assign ids 1..N in document order"
)
@click.option(
    "--refresh", "-r", is_flag=True, help="Make the documents visible immediately"
)
@click.pass_context
def load_cmd(
    ctx: Any,
    index: str,
    doc_type: str,
    data_file: str,
    incremental: bool,
    refresh: bool,
) -> None:
    """Index documents.

    By default documents get a random id set by the server. A document's
    '_id' field is used as its id instead (not combined with -i).
    """
    options = SyncOptions(incremental=incremental, refresh=refresh)
    _run(
        ctx,
        "load",
        index,
        doc_type,
        lambda loader: loader.load(_read_documents(data_file), options),
    )


@main.command("clear")
@click.argument("index")
@click.argument("doc_type", metavar="[TYPE]", required=False)
@click.option(
    "--refresh", "-r", is_flag=True, help="Make the deletes visible immediately"
)
@click.pass_context
def clear_cmd(ctx: Any, index: str, doc_type: Optional[str], refresh: bool) -> None:
    """Delete all the documents of an index.

    If TYPE is given, only the documents of that type are deleted.
    """
    options = SyncOptions(refresh=refresh)
    _run(ctx, "clear", index, doc_type, lambda loader: loader.clear(options))


@main.command("clearAndLoad")
@click.argument("index")
@click.argument("doc_type", metavar="TYPE")
@click.argument("data_file")
@click.option(
    "--incremental", "-i", is_flag=True, help="Assign ids 1..N in document order"
)
@click.option(
    "--refresh", "-r", is_flag=True, help="Make the changes visible immediately"
)
@click.pass_context
def clear_and_load_cmd(
    ctx: Any,
    index: str,
    doc_type: str,
    data_file: str,
    incremental: bool,
    refresh: bool,
) -> None:
    """Run 'clear' and then 'load'.

    Not atomic: if loading fails, the index is left empty.
    """
    options = SyncOptions(incremental=incremental, refresh=refresh)
    # The data file is read before clearing, a bad file leaves the index untouched
    _run(
        ctx,
        "clearAndLoad",
        index,
        doc_type,
        lambda loader: loader.clear_and_load(_read_documents(data_file), options),
    )


@main.command("bulk")
@click.argument("args", metavar="[INDEX] [TYPE] DATA_FILE", nargs=-1, required=True)
@click.option(
    "--refresh", "-r", is_flag=True, help="Make the changes visible immediately"
)
@click.pass_context
def bulk_cmd(ctx: Any, args: tuple[str, ...], refresh: bool) -> None:
    """Perform bulk index/delete operations.

    INDEX and TYPE are the defaults for actions that do not name their own.
    DATA_FILE holds the action/payload entries of the bulk format.
    """
    if len(args) > 3:
        raise click.UsageError("bulk takes at most INDEX, TYPE and DATA_FILE")
    *scope, data_file = args
    index = scope[0] if len(scope) > 0 else None
    doc_type = scope[1] if len(scope) > 1 else None
    options = SyncOptions(refresh=refresh)
    _run(
        ctx,
        "bulk",
        index,
        doc_type,
        lambda loader: loader.bulk(_read_documents(data_file), options),
    )


@main.command("createIndex")
@click.argument("index")
@click.argument("data_file", required=False)
@click.option(
    "--force", "-f", is_flag=True, help="Delete the index first if it exists"
)
@click.pass_context
def create_index_cmd(
    ctx: Any, index: str, data_file: Optional[str], force: bool
) -> None:
    """Create an index.

    DATA_FILE may specify 'settings' and 'mappings' for the new index.
    """
    options = SyncOptions(force=force)
    _run(
        ctx,
        "createIndex",
        index,
        None,
        lambda loader: loader.create_index(_read_optional(data_file), options),
    )


@main.command("recreateIndex")
@click.argument("index")
@click.argument("data_file", required=False)
@click.pass_context
def recreate_index_cmd(ctx: Any, index: str, data_file: Optional[str]) -> None:
    """Create an index, deleting it first only if it exists."""
    _run(
        ctx,
        "recreateIndex",
        index,
        None,
        lambda loader: loader.recreate_index(_read_optional(data_file)),
    )


@main.command("addMapping")
@click.argument("index")
@click.argument("doc_type", metavar="TYPE")
@click.argument("data_file")
@click.pass_context
def add_mapping_cmd(ctx: Any, index: str, doc_type: str, data_file: str) -> None:
    """Add a mapping to a type. The index must exist."""
    _run(
        ctx,
        "addMapping",
        index,
        doc_type,
        lambda loader: loader.add_mapping(_read_object(data_file)),
    )


@main.command("info")
@click.pass_context
def info_cmd(ctx: Any) -> None:
    """Check the connection and show the server version."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with bootstrap(host=ctx.obj["host"]) as loader:
            data = loader.info()
    except EsFixturesError as e:
        out.error(f"Error happened: {e}")
        ctx.exit(1)

    version = data.get("version") or {}
    out.print_summary(
        "Server",
        [
            ("Host", ctx.obj["host"]),
            ("Cluster", data.get("cluster_name", "")),
            ("Distribution", version.get("distribution", "elasticsearch")),
            ("Version", version.get("number", "")),
        ],
    )


if __name__ == "__main__":
    main()

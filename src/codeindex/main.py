import typer

from codeindex import __version__
from codeindex.logging_config import logger, setup_logging
from codeindex.cli import index, retrieval, utils
from codeindex.cli.config import CLIConfig

app = typer.Typer(no_args_is_help=True)


# Global CLI callback for flags that apply to all commands
@app.callback()
def global_options(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug logging on the console."
    ),
):
    """
    codeindex: a SQLite symbol index for source trees.
    """
    if verbose:
        setup_logging(level=CLIConfig.VERBOSE_LOG_LEVEL, force=True)
        logger.debug("Verbose logging enabled")


# Register commands
app.command(name="index")(index.index)
app.command(name="search")(retrieval.search)
app.command(name="export")(retrieval.export)
app.command(name="stats")(utils.stats)
app.command(name="verify")(utils.verify)


@app.command()
def version():
    """
    Prints the current version of codeindex.
    """
    typer.echo(f"codeindex v{__version__}")


if __name__ == "__main__":
    app()

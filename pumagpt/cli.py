"""Command line interface: build the article index, inspect it, run the service."""

import click

from .config import ConfigError, ServerConfig
from .logging_utils import configure_logging
from .rag.config import RAGConfig


@click.group()
@click.option("--env-prefix", default="", help="Prefix for environment variables (e.g. PUMA_).")
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level on the console.")
@click.option("--base-url", default=None, help="Site to crawl (defaults to the configured site).")
@click.pass_context
def main(ctx, env_prefix, verbose, base_url):
    """PumaGPT: questions answered from a site's articles."""
    try:
        config = ServerConfig.from_env(env_prefix)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    configure_logging(config, verbose=verbose)

    ctx.obj = {
        "config": config,
        "rag_config": RAGConfig(base_url=base_url) if base_url else RAGConfig(),
        "verbose": verbose,
    }


@main.command()
@click.option("--no-progress", is_flag=True, help="Hide progress bars.")
@click.pass_context
def index(ctx, no_progress):
    """Crawl the site and upload every article to the collection."""
    from .rag.indexer import ArticleIndexer

    rag_config = ctx.obj["rag_config"]
    if no_progress:
        rag_config.show_progress = False

    indexer = ArticleIndexer(ctx.obj["config"], rag_config)
    articles = indexer.crawl_and_index()

    click.echo(f"Uploaded {len(articles)} articles")
    click.echo(f"{indexer.count()} points in database")


@main.command()
@click.pass_context
def count(ctx):
    """Print the exact number of indexed articles."""
    from .rag.vectorstore import QdrantCollection

    click.echo(QdrantCollection(ctx.obj["config"], ctx.obj["rag_config"]).count())


@main.command()
@click.argument("query")
@click.pass_context
def search(ctx, query):
    """Show which articles a question retrieves."""
    from .rag.retrieval import QueryPlanner

    plan = QueryPlanner(ctx.obj["config"], ctx.obj["rag_config"]).plan([query])

    click.echo(f"Predicted answer:\n{plan.predicted_answer}\n")
    for rank, result in enumerate(plan.results, 1):
        click.echo(f"{rank}. [{result.score:.4f}] {result.article.title}")


@main.command()
@click.option("--host", default=None, help="Host to bind (defaults to HOST or 127.0.0.1).")
@click.option("--port", type=int, default=None, help="Port to listen on (defaults to PORT or 8000).")
@click.option("--debug", is_flag=True, help="Run Flask in debug mode.")
@click.option("--skip-health-check", is_flag=True, help="Start without checking the backends.")
@click.pass_context
def serve(ctx, host, port, debug, skip_health_check):
    """Run the question answering service."""
    from .server import PumaServer

    server = PumaServer(ctx.obj["config"], ctx.obj["rag_config"], verbose=ctx.obj["verbose"])
    server.run(port=port, host=host, debug=debug, health_check=not skip_health_check)


if __name__ == "__main__":
    main()

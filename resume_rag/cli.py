"""Command-line entry point: build and query the résumé index."""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from resume_rag.config import AppConfig, load_config
from resume_rag.errors import ResumeRagError
from resume_rag.ingestion.builder import IndexBuilder
from resume_rag.ingestion.reader import DocumentReader
from resume_rag.models.search import SearchOptions
from resume_rag.retrieval.engine import SearchEngine
from resume_rag.storage.index_store import save_index

console = Console()


@click.group()
@click.option("--config", "-c", "config_path", default="config.yaml", help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """Résumé RAG - build a keyword index of a résumé and search it."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _get_config(ctx) -> AppConfig:
    return load_config(ctx.obj.get("config_path"))


def _load_engine(config: AppConfig) -> SearchEngine:
    try:
        return SearchEngine.from_file(config.storage.index_path, config)
    except ResumeRagError as exc:
        console.print(f"[red]Cannot load index: {exc}[/]")
        raise SystemExit(1) from exc


@cli.command()
@click.option("--documents-dir", default=None, help="Directory holding the résumé")
@click.option("--output", "-o", default=None, help="Index output path")
@click.pass_context
def build(ctx, documents_dir, output):
    """Build the index from the résumé in the documents directory."""
    config = _get_config(ctx)
    documents_dir = Path(documents_dir or config.storage.documents_dir)
    output = Path(output or config.storage.index_path)

    try:
        resume_path = DocumentReader().find_resume(documents_dir)
        console.print(f"[blue]Indexing {resume_path.name}...[/]")
        index = IndexBuilder(config).build(resume_path)
        save_index(index, output)
    except ResumeRagError as exc:
        console.print(f"[red]Index build failed: {exc}[/]")
        raise SystemExit(1) from exc

    table = Table(title="Chunks")
    table.add_column("#", style="dim", width=3)
    table.add_column("Type", style="cyan")
    table.add_column("Title")
    table.add_column("Words", justify="right", style="green")
    for i, chunk in enumerate(index.chunks, start=1):
        table.add_row(str(i), chunk.type, chunk.title[:40], str(chunk.word_count))
    console.print(table)

    console.print(f"[green]✓ Index written to {output}[/]")
    console.print(f"  Chunks: {index.total_chunks}")
    console.print(f"  Dimensions: {index.embedding_dimensions}")


@cli.command()
@click.argument("query")
@click.option("--top-k", "-k", type=int, default=None, help="Number of results")
@click.option("--min-similarity", type=float, default=None, help="Similarity threshold")
@click.option("--expand", is_flag=True, help="Also search abbreviation expansions")
@click.option("--no-boost", is_flag=True, help="Rank by raw cosine similarity")
@click.pass_context
def search(ctx, query, top_k, min_similarity, expand, no_boost):
    """Search the index."""
    engine = _load_engine(_get_config(ctx))
    options = SearchOptions(
        top_k=top_k, min_similarity=min_similarity, boost_sections=not no_boost
    )

    try:
        if expand:
            response = engine.search_with_expansion(query, options)
            console.print(f"[dim]Variants: {', '.join(response.expanded_queries)}[/]")
        else:
            response = engine.search(query, options)
    except ResumeRagError as exc:
        console.print(f"[red]Search failed: {exc}[/]")
        raise SystemExit(1) from exc

    if not response.has_results:
        console.print("[yellow]No results found.[/]")
        return

    table = Table(title=f"Results for '{query}'")
    table.add_column("#", style="dim", width=3)
    table.add_column("Type", style="cyan")
    table.add_column("Title")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Preview", max_width=60)
    for source in response.sources:
        table.add_row(
            str(source.index), source.type, source.title, f"{source.similarity}%", source.preview
        )
    console.print(table)
    console.print("\n[bold]Context[/]")
    console.print(response.context, markup=False)


@cli.command()
@click.pass_context
def stats(ctx):
    """Show index statistics."""
    engine = _load_engine(_get_config(ctx))
    info = engine.index_stats()

    console.print(f"[bold]Built at:[/] {info['build_at']}")
    console.print(f"  Documents: {info['total_documents']}")
    console.print(f"  Chunks: {info['total_chunks']}")
    console.print(f"  Dimensions: {info['embedding_dimensions']}")
    for document in info["documents"]:
        console.print(
            f"  {document['filename']}: {document['chunksCount']} chunks "
            f"({', '.join(document['sections'])})"
        )

"""Command-line interface for kernel feature extraction."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

app = typer.Typer(
    name="kernelfeatures",
    help="Compute ML features for contraction problems and candidate kernels.",
    no_args_is_help=True,
)

console = Console()


@app.command()
def extract(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Path to extraction configuration YAML file.",
            exists=True,
            dir_okay=False,
        ),
    ],
    problems: Annotated[
        Path,
        typer.Option(
            "--problems",
            "-p",
            help="CSV of GEMM problems with columns m, n, k and optional batch.",
            exists=True,
            dir_okay=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path for the feature matrix CSV.",
        ),
    ] = None,
) -> None:
    """Evaluate the configured feature layout for every problem in a table."""
    import pandas as pd
    import yaml
    from pandera.errors import SchemaError, SchemaErrors

    from kernelfeatures.config.loader import build_feature_vector, load_config
    from kernelfeatures.features import FeatureContractError
    from kernelfeatures.schemas import feature_matrix_schema, problems_from_frame
    from kernelfeatures.utils.logging import configure_logging, log_context

    configure_logging()
    console.print(f"[blue]Loading configuration from {config}[/blue]")
    try:
        extraction_config = load_config(config)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    configure_logging(
        level=extraction_config.logging.level,
        json_output=extraction_config.logging.json_output,
    )

    if output is None:
        output = problems.with_name(f"{problems.stem}_features.csv")

    with log_context(project=extraction_config.project):
        try:
            vector = build_feature_vector(extraction_config)
            problem_list = problems_from_frame(pd.read_csv(problems))
            matrix = vector.evaluate_many(problem_list)
            matrix = feature_matrix_schema(vector.names).validate(matrix)
        except (ValueError, FeatureContractError, SchemaError, SchemaErrors) as e:
            console.print(f"[red]Extraction failed: {escape(str(e))}[/red]")
            raise typer.Exit(code=1) from e
        except IndexError as e:
            message = escape(str(e))
            console.print(f"[red]Feature index out of range: {message}[/red]")
            raise typer.Exit(code=1) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    matrix.to_csv(output, index=False)

    console.print()
    table = Table(title=f"Feature Extraction ({extraction_config.project})")
    table.add_column("Feature", style="cyan")
    table.add_column("Min", style="green", justify="right")
    table.add_column("Max", style="green", justify="right")
    for name in matrix.columns:
        column = matrix[name]
        min_value = f"{column.min():.4g}" if len(column) else "-"
        max_value = f"{column.max():.4g}" if len(column) else "-"
        table.add_row(name, min_value, max_value)
    console.print(table)
    console.print(f"\n[green]Saved {len(matrix)} rows to: {output}[/green]")


@app.command()
def kinds() -> None:
    """List the registered feature kinds."""
    from kernelfeatures.features import get_feature_kind, list_feature_kinds

    table = Table(title="Feature Kinds")
    table.add_column("Type", style="cyan")
    table.add_column("Configured by", style="green")
    table.add_column("Description")

    for tag in list_feature_kinds():
        kind = get_feature_kind(tag)
        mode = "index" if kind.HAS_INDEX else "value"
        summary = (kind.__doc__ or "").strip().split("\n")[0]
        table.add_row(tag, mode, summary)

    console.print(table)


if __name__ == "__main__":
    app()

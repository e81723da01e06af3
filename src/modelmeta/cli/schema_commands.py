"""Schema inspection commands."""

from __future__ import annotations

import importlib
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from modelmeta.registry import SchemaRegistry, get_default_registry
from modelmeta.schema import ModelSchema

console = Console()

schema_app = typer.Typer(
    name="schema",
    help="Compiled model schema operations",
    no_args_is_help=True,
)


def load_schemas(target: str, registry: SchemaRegistry | None = None) -> list[ModelSchema]:
    """
    Import ``module[:ClassName]`` and return the model schemas it declares.

    Raises
    ------
    typer.BadParameter
        If the module cannot be imported or the class has no schema
    """
    if registry is None:
        registry = get_default_registry()
    module_name, _, class_name = target.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import {module_name}: {e}") from e

    if class_name:
        schema = registry.get_model_schema(getattr(module, class_name, None), name=class_name)
        if schema is None:
            raise typer.BadParameter(f"No model schema registered for {target}")
        return [schema]
    schemas = [schema for schema in registry.model_schemas if schema.model.__module__ == module_name]
    if not schemas:
        raise typer.BadParameter(f"No model schemas declared in {module_name}")
    return schemas


@schema_app.command(name="show")
def show_schema(
    target: Annotated[str, typer.Argument(help="module or module:ClassName")],
) -> None:
    """
    Display the compiled attributes of one or more models.
    """
    for schema in load_schemas(target):
        table = Table(title=f"{schema.class_name} ({schema.collection_name})")
        table.add_column("Attribute", style="cyan")
        table.add_column("Kind", style="magenta")
        table.add_column("Type")
        table.add_column("Required", justify="center")
        table.add_column("Read only", justify="center")
        table.add_column("Details", style="dim")

        for name, attribute_schema in schema.attribute_schemas.items():
            fragment = attribute_schema.compiled
            details = ""
            if fragment.ref is not None:
                details = f"-> {fragment.ref}"
            elif fragment.enum is not None:
                details = ", ".join(repr(value) for value in fragment.enum)
            elif fragment.members is not None:
                details = ", ".join(fragment.members)
            table.add_row(
                name,
                fragment.kind.value,
                fragment.type.__name__,
                "✓" if attribute_schema.required else "",
                "✓" if attribute_schema.read_only else "",
                details,
            )
        console.print(table)


@schema_app.command(name="export")
def export_schema(
    target: Annotated[str, typer.Argument(help="module or module:ClassName")],
    indent: Annotated[int, typer.Option("--indent", help="JSON indentation")] = 2,
) -> None:
    """
    Export compiled model schemas as JSON.
    """
    from modelmeta.schemas import ModelSchemaResponse

    for schema in load_schemas(target):
        response = ModelSchemaResponse.from_schema(schema)
        typer.echo(response.model_dump_json(indent=indent))


@schema_app.command(name="ddl")
def schema_ddl(
    target: Annotated[str, typer.Argument(help="module or module:ClassName")],
    dialect: Annotated[
        str,
        typer.Option("--dialect", "-d", help="SQLAlchemy dialect name"),
    ] = "sqlite",
    id_field: Annotated[
        Optional[str],
        typer.Option("--id-field", help="Primary key column (default from settings)"),
    ] = None,
) -> None:
    """
    Print CREATE TABLE statements for the selected models.

    Tables for every registered model are built so references between
    models render as foreign keys.
    """
    from sqlalchemy import MetaData
    from sqlalchemy.dialects import registry as dialect_registry
    from sqlalchemy.exc import NoSuchModuleError
    from sqlalchemy.schema import CreateTable

    from modelmeta.config import ModelMetaSettings

    settings = ModelMetaSettings.from_env()
    registry = get_default_registry()
    selected = {schema.collection_name for schema in load_schemas(target, registry)}

    try:
        engine_dialect = dialect_registry.load(dialect)()
    except NoSuchModuleError as e:
        console.print(f"[bold red]Error:[/bold red] Unknown dialect {dialect}: {e}")
        raise typer.Exit(code=1)

    metadata = MetaData()
    for schema in registry.model_schemas:
        schema.to_table(
            metadata,
            registry,
            id_field=id_field or settings.id_field,
            reference_key_length=settings.reference_key_length,
        )
    for table in metadata.sorted_tables:
        if table.name in selected:
            typer.echo(f"{str(CreateTable(table).compile(dialect=engine_dialect)).strip()};\n")

"""CLI interface for store files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from console.config import resolve_config, save_config
from envelope.errors import StoreError
from store.repository import DocumentStore
from store.schemas import StoreConfig

app = typer.Typer(help="jsonvault document store CLI")


def _fail(message: str) -> NoReturn:
    typer.secho(f"❌ {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _echo_json(value: Any) -> None:
    typer.echo(json.dumps(value, indent=2, ensure_ascii=False))


def _parse_object(text: str, what: str) -> dict[str, Any]:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        _fail(f"{what} is not valid JSON: {e}")
    if not isinstance(value, dict):
        _fail(f"{what} must be a JSON object")
    return value


def _parse_where(clauses: list[str]) -> dict[str, Any]:
    query: dict[str, Any] = {}
    for clause in clauses:
        key, separator, raw = clause.partition("=")
        if not separator or not key:
            _fail(f"Invalid --where clause {clause!r}; expected key=value")
        try:
            query[key] = json.loads(raw)
        except json.JSONDecodeError:
            query[key] = raw
    return query


def _resolve(ctx: typer.Context) -> StoreConfig:
    options: dict[str, Any] = ctx.obj or {}
    try:
        return resolve_config(options.get("config_path"), options.get("overrides"))
    except FileNotFoundError as e:
        _fail(str(e))
    except ValueError as e:
        _fail(f"Invalid config: {e}")


def _open(ctx: typer.Context, path: Path, config: StoreConfig | None = None) -> DocumentStore:
    try:
        return DocumentStore(path, config if config is not None else _resolve(ctx))
    except StoreError as e:
        _fail(f"Cannot open {path}: {e}")


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML store config"),
    password: Optional[str] = typer.Option(
        None, help="Store password (defaults to $JSONVAULT_PASSWORD)"
    ),
    iterations: Optional[int] = typer.Option(None, help="PBKDF2 iteration count"),
    digest: Optional[str] = typer.Option(None, help="PBKDF2 digest, e.g. sha256"),
    algorithm: Optional[str] = typer.Option(None, help="Cipher, e.g. aes-256-gcm"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Manage a single-file, optionally encrypted JSON document store."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {
        "config_path": config_path,
        "overrides": {
            "password": password,
            "iterations": iterations,
            "digest": digest,
            "algorithm": algorithm,
        },
    }


@app.command()
def init(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Store file"),
) -> None:
    """Create the store file if it does not exist yet."""
    existed = path.exists()
    store = _open(ctx, path)
    mode = "encrypted" if store.config.encrypted else "plain"
    if existed:
        typer.secho(f"Store already exists: {store.path} ({mode})", fg=typer.colors.YELLOW)
    else:
        typer.secho(f"✅ Created {mode} store: {store.path}", fg=typer.colors.GREEN)


@app.command()
def insert(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Store file"),
    document: str = typer.Argument(..., help="Document as a JSON object"),
) -> None:
    """Insert a document and print it with its assigned id."""
    payload = _parse_object(document, "Document")
    store = _open(ctx, path)
    try:
        _echo_json(store.insert(payload))
    except StoreError as e:
        _fail(f"Insert failed: {e}")


@app.command()
def find(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Store file"),
    where: list[str] = typer.Option([], "--where", "-w", help="Field filter key=value"),
    query: Optional[str] = typer.Option(None, help="Query as a JSON object"),
) -> None:
    """Print documents matching all given fields (all documents by default)."""
    criteria = _parse_object(query, "Query") if query else {}
    criteria.update(_parse_where(where))
    store = _open(ctx, path)
    try:
        _echo_json(store.find(criteria))
    except StoreError as e:
        _fail(f"Find failed: {e}")


@app.command()
def update(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Store file"),
    document_id: int = typer.Argument(..., help="Document id"),
    updates: str = typer.Argument(..., help="Fields to merge, as a JSON object"),
) -> None:
    """Merge fields into a document; its id never changes."""
    payload = _parse_object(updates, "Updates")
    store = _open(ctx, path)
    try:
        _echo_json(store.update(document_id, payload))
    except StoreError as e:
        _fail(f"Update failed: {e}")


@app.command()
def delete(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Store file"),
    document_id: int = typer.Argument(..., help="Document id"),
) -> None:
    """Delete a document by id."""
    store = _open(ctx, path)
    try:
        removed = store.delete(document_id)
    except StoreError as e:
        _fail(f"Delete failed: {e}")
    if not removed:
        _fail(f"No document with id {document_id}")
    typer.secho(f"✅ Deleted document {document_id}", fg=typer.colors.GREEN)


@app.command("change-password")
def change_password(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Store file"),
    old_password: str = typer.Option(
        ...,
        "--old",
        prompt="Current password",
        hide_input=True,
        help="Current password; pass --old \"\" to encrypt a plain store",
    ),
    new_password: str = typer.Option(
        ...,
        "--new",
        prompt="New password",
        hide_input=True,
        confirmation_prompt=True,
        help="New password",
    ),
) -> None:
    """Re-encrypt the whole store under a new password."""
    if not path.exists():
        _fail(f"Store not found: {path}")
    store = _open(ctx, path, _resolve(ctx).with_password(old_password or None))
    try:
        store.change_password(old_password or None, new_password)
    except StoreError as e:
        _fail(str(e))
    except ValueError as e:
        _fail(f"Invalid new password: {e}")
    typer.secho("✅ Password changed", fg=typer.colors.GREEN)


@app.command("show-config")
def show_config(ctx: typer.Context) -> None:
    """Print the effective configuration (without the password)."""
    _echo_json(_resolve(ctx).describe())


@app.command("save-config")
def save_config_command(
    ctx: typer.Context,
    output: Path = typer.Argument(..., help="YAML file to write"),
) -> None:
    """Write the effective configuration to YAML (the password is never saved)."""
    save_config(_resolve(ctx), output)
    typer.secho(f"✅ Config saved: {output}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()

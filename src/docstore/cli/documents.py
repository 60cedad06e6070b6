"""docstore put/get/count/delete/load/export — document read and write commands."""

from __future__ import annotations

import json
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError

from docstore import codec
from docstore.cli import _exitcodes as ec
from docstore.cli._filters import parse_cli_filters
from docstore.cli._models import DocumentInput, parse_slot_assignments
from docstore.cli._output import dump_documents, print_error, print_object, print_table
from docstore.cli._storage import open_store
from docstore.errors import CodecError, DocumentConflictError
from docstore.params import QueryParams
from docstore.record import DocumentRecord
from docstore.store import Store
from docstore.where import Predicate

_FILTER_HELP = "FIELD OP VALUE_JSON, e.g. 'si0 eq \"h\"' (repeatable, AND-combined)"

# SQLite needs a LIMIT before OFFSET
_NO_LIMIT = 2**63 - 1


def _filters_or_exit(filter_args: list[str] | None) -> Predicate | None:
    try:
        return parse_cli_filters(filter_args)
    except (ValueError, json.JSONDecodeError) as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)


def _open_or_exit() -> Store:
    try:
        return open_store()
    except Exception as e:
        print_error(f"Cannot open store: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)


def _record_view(record: DocumentRecord) -> dict[str, Any]:
    """Record as a dict with the payload decoded and empty slots dropped."""
    try:
        view = record.to_dict(decode=True)
    except CodecError:
        view = record.to_dict()
    return {k: v for k, v in view.items() if v is not None or k in ("pk", "rev", "data")}


def _report_conflict(e: DocumentConflictError, json_mode: bool) -> None:
    print_error(str(e))
    print_object(_record_view(e.record), json_mode=json_mode)
    raise typer.Exit(ec.CONFLICT)


def put_cmd(
    pk: str = typer.Argument(..., help="Primary key"),
    rev: int = typer.Argument(..., help="Revision; must exceed the stored revision"),
    data: Optional[str] = typer.Option(None, "--data", help="JSON payload"),
    si: Optional[list[str]] = typer.Option(None, "--si", help="SLOT=VALUE string index"),
    ni: Optional[list[str]] = typer.Option(None, "--ni", help="SLOT=VALUE integer index"),
) -> None:
    """Write one document."""
    from docstore.cli import state

    try:
        doc = DocumentInput(
            pk=pk,
            rev=rev,
            data=json.loads(data) if data is not None else None,
            si=parse_slot_assignments(si),
            ni=parse_slot_assignments(ni),
        )
    except (ValueError, ValidationError) as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    store = _open_or_exit()
    try:
        store.put([doc.to_record()])
        print_object({"pk": pk, "rev": rev, "status": "written"}, json_mode=state.json_output)
    except DocumentConflictError as e:
        _report_conflict(e, state.json_output)
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        store.close()


def load_cmd(
    path: str = typer.Argument(..., help="JSON or YAML file holding a list of documents"),
) -> None:
    """Write a batch of documents atomically: all of them or none."""
    from docstore.cli import state

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        if not isinstance(raw, list):
            raise ValueError("load file must contain a list of documents")
        docs = [DocumentInput.model_validate(item) for item in raw]
    except (OSError, yaml.YAMLError, ValueError, ValidationError) as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    store = _open_or_exit()
    try:
        store.put([d.to_record() for d in docs])
        print_object({"written": len(docs)}, json_mode=state.json_output)
    except DocumentConflictError as e:
        _report_conflict(e, state.json_output)
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        store.close()


def get_cmd(
    filter_args: Optional[list[str]] = typer.Option(None, "--filter", help=_FILTER_HELP),
    order_by: Optional[list[str]] = typer.Option(None, "--order-by", help="Sort column"),
    desc: bool = typer.Option(False, "--desc", help="Sort descending"),
    limit: Optional[int] = typer.Option(None, "--limit", help="Max results"),
    offset: Optional[int] = typer.Option(None, "--offset", help="Skip first N results"),
) -> None:
    """Read documents."""
    from docstore.cli import state

    predicate = _filters_or_exit(filter_args)
    try:
        params = QueryParams().where(predicate)
        for field in order_by or []:
            params = params.order_by(field, ascending=not desc)
        if limit is not None:
            params = params.limit(limit, offset)
        elif offset is not None:
            params = params.limit(_NO_LIMIT, offset)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    store = _open_or_exit()
    try:
        records = store.get([params])[0]
        views = [_record_view(r) for r in records]
        if state.json_output:
            print_object(views, json_mode=True)
        else:
            print_table(
                ["pk", "rev", "data"],
                [[r.pk, r.rev, r.data] for r in records],
            )
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        store.close()


def count_cmd(
    filter_args: Optional[list[str]] = typer.Option(None, "--filter", help=_FILTER_HELP),
) -> None:
    """Count documents."""
    from docstore.cli import state

    predicate = _filters_or_exit(filter_args)
    store = _open_or_exit()
    try:
        result = store.get([QueryParams().where(predicate).count()])[0][0]
        print_object({"count": result.count}, json_mode=state.json_output)
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        store.close()


def delete_cmd(
    filter_args: Optional[list[str]] = typer.Option(None, "--filter", help=_FILTER_HELP),
    delete_all: bool = typer.Option(False, "--all", help="Delete every document"),
) -> None:
    """Delete documents matching the filters."""
    from docstore.cli import state

    predicate = _filters_or_exit(filter_args)
    if predicate is None and not delete_all:
        print_error("Refusing to delete every document without --all")
        raise typer.Exit(ec.USAGE_ERROR)
    if predicate is not None and delete_all:
        print_error("--all cannot be combined with --filter")
        raise typer.Exit(ec.USAGE_ERROR)

    store = _open_or_exit()
    try:
        deleted = store.delete(predicate)
        print_object({"deleted": deleted}, json_mode=state.json_output)
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        store.close()


def export_cmd(
    fmt: str = typer.Option("json", "--format", help="Output format: json or yaml"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write to file"),
) -> None:
    """Export every document, ordered by primary key."""
    if fmt not in ("json", "yaml"):
        print_error(f"Unsupported format '{fmt}' (expected json or yaml)")
        raise typer.Exit(ec.USAGE_ERROR)

    store = _open_or_exit()
    try:
        records = store.get([QueryParams().order_by("pk")])[0]
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        store.close()

    docs: list[dict[str, Any]] = []
    for r in records:
        doc: dict[str, Any] = {"pk": r.pk, "rev": r.rev}
        try:
            doc["data"] = codec.decode(r.data) if r.data else None
        except CodecError:
            doc["data"] = r.data
        si = {i: v for i, v in enumerate(r.string_index) if v is not None}
        ni = {i: v for i, v in enumerate(r.int_index) if v is not None}
        if si:
            doc["si"] = si
        if ni:
            doc["ni"] = ni
        docs.append(doc)

    text = dump_documents(docs, fmt)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        return
    print(text)

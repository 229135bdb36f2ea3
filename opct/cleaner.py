"""Redaction of sensitive data inside result archives (tar.gz)."""

from __future__ import annotations

import copy
import gzip
import io
import json
import logging
import tarfile
import zlib
from typing import Any, BinaryIO

logger = logging.getLogger(__name__)

# Hard-coded JSON patches applied to archive members, indexed by member path.
PATCHES: dict[str, str] = {
    "resources/cluster/machineconfiguration.openshift.io_v1_controllerconfigs.json": """[
        {
            "op": "replace",
            "path": "/items/0/spec/internalRegistryPullSecret",
            "value": "REDACTED"
        }
    ]""",
}


class CleanerError(Exception):
    """Raised when an archive cannot be scanned or patched."""


class _PatchError(ValueError):
    """A JSON patch operation does not apply to the document."""


def scan_patch_tar_gzip(stream: BinaryIO) -> bytes:
    """Read a tar.gz stream and return it re-packed with the known patches applied.

    Nested ``.tar.gz`` members are scanned recursively.
    """
    logger.debug("Scanning the artifact for patches...")
    output = io.BytesIO()
    with gzip.GzipFile(fileobj=stream, mode="rb") as source:
        try:
            source.peek(1)
        except (OSError, EOFError, zlib.error) as exc:
            raise CleanerError(f"unable to open gzip file: {exc}") from exc
        try:
            with tarfile.open(fileobj=source, mode="r|") as reader, gzip.GzipFile(
                fileobj=output, mode="wb"
            ) as compressed, tarfile.open(fileobj=compressed, mode="w") as writer:
                for member in reader:
                    _copy_member(reader, writer, member)
        except (tarfile.TarError, OSError, EOFError, zlib.error) as exc:
            raise CleanerError(f"unable to process file in archive: {exc}") from exc
    return output.getvalue()


def _read_member(reader: tarfile.TarFile, member: tarfile.TarInfo) -> bytes:
    handle = reader.extractfile(member)
    return handle.read() if handle is not None else b""


def _write_member(writer: tarfile.TarFile, member: tarfile.TarInfo, data: bytes) -> None:
    info = copy.copy(member)
    info.size = len(data)
    info.pax_headers = {k: v for k, v in member.pax_headers.items() if k != "size"}
    writer.addfile(info, io.BytesIO(data))


def _copy_member(reader: tarfile.TarFile, writer: tarfile.TarFile, member: tarfile.TarInfo) -> None:
    name = member.name
    if name in PATCHES:
        logger.debug("Patch pattern matched for: %s", name)
        if not name.endswith(".json"):
            logger.debug("unknown extension, skipping patch for file %s", name)
            return
        data = _read_member(reader, member)
        try:
            patched = apply_json_patch(name, data)
        except CleanerError as exc:
            logger.error("unable to apply patch to file %s: %s", name, exc)
            raise CleanerError(f"unable to apply patch to file {name}: {exc}") from exc
        logger.debug("Patched %d bytes", len(patched))
        _write_member(writer, member, patched)
    elif name.endswith(".tar.gz"):
        logger.debug("Scanning tarball archive: %s", name)
        try:
            nested = scan_patch_tar_gzip(io.BytesIO(_read_member(reader, member)))
        except CleanerError as exc:
            raise CleanerError(f"unable to apply patch to file {name}: {exc}") from exc
        _write_member(writer, member, nested)
    elif member.isfile():
        _write_member(writer, member, _read_member(reader, member))
    else:
        writer.addfile(copy.copy(member))


def apply_json_patch(filepath: str, data: bytes | str) -> bytes:
    """Apply the hard-coded patch registered for ``filepath`` to the JSON ``data``."""
    try:
        operations = json.loads(PATCHES.get(filepath, ""))
        if not isinstance(operations, list):
            raise ValueError("patch is not a list of operations")
    except ValueError as exc:
        raise CleanerError(f"decoding patch: {exc}") from exc

    try:
        document = json.loads(data)
        for operation in operations:
            document = _apply_operation(document, operation)
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise CleanerError(f"applying patch: {exc}") from exc

    return json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _parse_pointer(pointer: Any) -> list[str]:
    if not isinstance(pointer, str):
        raise _PatchError(f"invalid JSON pointer: {pointer!r}")
    if pointer == "":
        return []
    if not pointer.startswith("/"):
        raise _PatchError(f"invalid JSON pointer: {pointer!r}")
    return [token.replace("~1", "/").replace("~0", "~") for token in pointer[1:].split("/")]


def _array_index(token: str, length: int, allow_end: bool = False) -> int:
    if allow_end and token == "-":
        return length
    if not token.isdigit() or not token.isascii() or (len(token) > 1 and token[0] == "0"):
        raise _PatchError(f"invalid array index: {token!r}")
    index = int(token)
    if index > length or (index == length and not allow_end):
        raise _PatchError(f"array index out of range: {index}")
    return index


def _child(container: Any, token: str) -> Any:
    if isinstance(container, dict):
        if token not in container:
            raise _PatchError(f"doc is missing key: {token!r}")
        return container[token]
    if isinstance(container, list):
        return container[_array_index(token, len(container))]
    raise _PatchError(f"cannot traverse into scalar at {token!r}")


def _walk(document: Any, tokens: list[str]) -> Any:
    for token in tokens:
        document = _child(document, token)
    return document


def _add(document: Any, tokens: list[str], value: Any) -> Any:
    if not tokens:
        return value
    parent, key = _walk(document, tokens[:-1]), tokens[-1]
    if isinstance(parent, dict):
        parent[key] = value
    elif isinstance(parent, list):
        parent.insert(_array_index(key, len(parent), allow_end=True), value)
    else:
        raise _PatchError("add operation does not apply: parent is not a container")
    return document


def _remove(document: Any, tokens: list[str]) -> Any:
    if not tokens:
        raise _PatchError("remove operation does not apply to the document root")
    parent, key = _walk(document, tokens[:-1]), tokens[-1]
    if isinstance(parent, dict):
        if key not in parent:
            raise _PatchError(f"remove operation does not apply: doc is missing key {key!r}")
        return parent.pop(key)
    if isinstance(parent, list):
        return parent.pop(_array_index(key, len(parent)))
    raise _PatchError("remove operation does not apply: parent is not a container")


def _replace(document: Any, tokens: list[str], value: Any) -> Any:
    if not tokens:
        return value
    parent, key = _walk(document, tokens[:-1]), tokens[-1]
    if isinstance(parent, dict):
        if key not in parent:
            raise _PatchError(f"replace operation does not apply: doc is missing key {key!r}")
        parent[key] = value
    elif isinstance(parent, list):
        parent[_array_index(key, len(parent))] = value
    else:
        raise _PatchError("replace operation does not apply: parent is not a container")
    return document


def _value(operation: dict[str, Any]) -> Any:
    if "value" not in operation:
        raise _PatchError(f"operation {operation.get('op')!r} is missing 'value'")
    return operation["value"]


def _apply_operation(document: Any, operation: Any) -> Any:
    if not isinstance(operation, dict):
        raise _PatchError("patch operation is not an object")
    kind = operation.get("op")
    tokens = _parse_pointer(operation.get("path"))

    if kind == "add":
        return _add(document, tokens, _value(operation))
    if kind == "remove":
        _remove(document, tokens)
        return document
    if kind == "replace":
        return _replace(document, tokens, _value(operation))
    if kind == "test":
        if _walk(document, tokens) != _value(operation):
            raise _PatchError(f"test operation failed at {operation.get('path')!r}")
        return document
    if kind in ("move", "copy"):
        source = _parse_pointer(operation.get("from"))
        if kind == "move":
            if len(tokens) > len(source) and tokens[: len(source)] == source:
                raise _PatchError("move operation cannot move a value into its own child")
            value = _remove(document, source)
        else:
            value = copy.deepcopy(_walk(document, source))
        return _add(document, tokens, value)
    raise _PatchError(f"unexpected patch operation: {kind!r}")
"""
Bucket manifests - YAML documents holding bucket desired state.

A manifest file may hold several YAML documents; documents of other kinds
are kept untouched when the file is written back, and Bucket documents only
have their facet keys under spec.forProvider replaced.
"""

import copy
import logging
from pathlib import Path
from typing import Any

import yaml

from bucketctl.sync.errors import ManifestError
from bucketctl.sync.models import Bucket

logger = logging.getLogger(__name__)

BUCKET_KIND = "Bucket"

# forProvider keys owned by the facet controllers
FACET_KEYS = ("loggingConfiguration", "serverSideEncryptionConfiguration")


def _read_documents(path: Path) -> list[Any]:
    try:
        with path.open(encoding="utf-8") as f:
            return [doc for doc in yaml.safe_load_all(f) if doc is not None]
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest not found: {path}") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in {path}: {e}") from e


def _is_bucket(doc: Any) -> bool:
    return isinstance(doc, dict) and doc.get("kind") == BUCKET_KIND


def load_manifest(path: str | Path) -> list[Bucket]:
    """Load every Bucket document from a manifest file.

    Args:
        path: Manifest file path

    Returns:
        Buckets in document order

    Raises:
        ManifestError: File missing, invalid YAML or malformed Bucket
    """
    path = Path(path)
    buckets = []
    for index, doc in enumerate(_read_documents(path)):
        if not _is_bucket(doc):
            continue
        try:
            buckets.append(Bucket.from_dict(doc))
        except (KeyError, TypeError, AttributeError) as e:
            raise ManifestError(f"Malformed Bucket document #{index} in {path}: {e!r}") from e
    logger.debug(f"Loaded {len(buckets)} bucket(s) from {path}")
    return buckets


def _merge_bucket(doc: dict[str, Any], bucket: Bucket) -> dict[str, Any]:
    """Write the facet desired state of bucket into a copy of its document.

    Everything outside the managed facet keys is kept as written.
    """
    merged = copy.deepcopy(doc)
    spec = merged.get("spec") or {}
    merged["spec"] = spec
    for_provider = spec.get("forProvider") or {}
    spec["forProvider"] = for_provider

    rendered = bucket.spec.for_provider.to_dict()
    for key in FACET_KEYS:
        if key in rendered:
            for_provider[key] = rendered[key]
        else:
            for_provider.pop(key, None)
    return merged


def dump_manifest(buckets: list[Bucket], path: str | Path) -> None:
    """Write the facet state of buckets back into a manifest file.

    Bucket documents are matched by name and only their facet keys are
    replaced; unmatched and non-Bucket documents are preserved. Buckets
    without a document are appended. A missing file is created with the
    buckets only.
    """
    path = Path(path)
    docs = _read_documents(path) if path.exists() else []

    pending = {}
    for bucket in buckets:
        pending.setdefault(bucket.name, bucket)

    output = []
    for doc in docs:
        name = (doc.get("metadata") or {}).get("name") if _is_bucket(doc) else None
        bucket = pending.pop(name, None) if name is not None else None
        output.append(_merge_bucket(doc, bucket) if bucket is not None else doc)
    output.extend(bucket.to_dict() for bucket in pending.values())

    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump_all(output, f, sort_keys=False, default_flow_style=False)
    logger.debug(f"Wrote {len(buckets)} bucket(s) to {path}")

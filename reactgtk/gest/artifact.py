"""Load built test artifacts and remove them afterwards."""

import asyncio
import importlib.util
import logging
import uuid
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from reactgtk.gest.errors import LoadError
from reactgtk.gest.models.test_tree import Suite
from reactgtk.gest.models.test_unit import TestUnitInfo

logger = logging.getLogger(__name__)


def load_test_tree(artifact_path: str) -> Suite:
    """Import a bundle artifact and return the root suite it exports as ``default``.

    The root is either a ``Suite`` or a mapping tagged ``kind: "suite"`` that
    validates against the ``Suite`` schema.

    Raises:
        LoadError: If the artifact cannot be imported or is not a test

    """
    module_name = f"_gest_bundle_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(module_name, artifact_path)
    if spec is None or spec.loader is None:
        raise LoadError(f"Cannot import {artifact_path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except (Exception, SystemExit) as e:
        raise LoadError(f"Failed to import {artifact_path}: {e}") from e

    root = getattr(module, "default", None)
    if isinstance(root, Suite):
        return root

    if isinstance(root, Mapping) and root.get("kind") == "suite":
        try:
            return Suite.model_validate(root)
        except ValidationError as e:
            raise LoadError(f"Not a test: {artifact_path}: {e}") from e

    raise LoadError(f"Not a test: {artifact_path}")


async def delete_file(path: str) -> bool:
    """Delete ``path``, logging instead of raising when it fails."""
    try:
        await asyncio.to_thread(Path(path).unlink)
    except OSError as e:
        logger.warning(f"Failed to delete file: {path}: {e}")
        return False
    return True


async def delete_artifacts(info: TestUnitInfo) -> None:
    """Remove the bundle and source map of a unit."""
    await delete_file(info.bundle_artifact_path)
    await delete_file(info.source_map_path)

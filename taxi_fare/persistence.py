"""Versioned on-disk container for fitted transformer chains.

The model file is a zip archive::

    manifest.json           format name, version, stage count, stage params
    stages/<i>/<artifact>   text artifacts of stage i (e.g. booster dump)
"""

from __future__ import annotations

import json
import logging
import os
import zipfile
from typing import Any

from lightgbm.basic import LightGBMError

from taxi_fare.errors import FileAccessError, SerializationError
from taxi_fare.transforms import TRANSFORMERS, TransformerChain

logger = logging.getLogger("TaxiFare")

FORMAT_NAME = "taxi-fare-model"
FORMAT_VERSION = 1
MANIFEST = "manifest.json"


def save_model(model: TransformerChain, path: str) -> None:
    """Write ``model`` to ``path``, replacing any existing file."""
    stages: list[dict[str, Any]] = []
    artifacts: dict[str, str] = {}
    for i, stage in enumerate(model.stages):
        stage_artifacts = stage.get_artifacts()
        stages.append({
            "kind": stage.kind,
            "params": stage.get_params(),
            "artifacts": sorted(stage_artifacts),
        })
        for name, text in stage_artifacts.items():
            artifacts[f"stages/{i}/{name}"] = text

    manifest = {
        "format": FORMAT_NAME,
        "format_version": FORMAT_VERSION,
        "stage_count": len(stages),
        "stages": stages,
    }

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as f:
        with zipfile.ZipFile(f, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(MANIFEST, json.dumps(manifest, indent=2))
            for name, text in artifacts.items():
                archive.writestr(name, text)
    logger.info("Saved %d stages to %s", len(stages), path)


def load_model(path: str) -> TransformerChain:
    """Read a chain written by :func:`save_model`.

    Raises:
        FileAccessError: ``path`` does not exist or cannot be opened.
        SerializationError: The file is not a valid model container.
    """
    try:
        f = open(path, "rb")
    except OSError as exc:
        raise FileAccessError(f"Cannot open model file {path}: {exc}") from exc

    with f:
        try:
            with zipfile.ZipFile(f) as archive:
                manifest = json.loads(archive.read(MANIFEST))
                _check_manifest(manifest, path)
                stages = []
                for i, entry in enumerate(manifest["stages"]):
                    artifacts = {
                        name: archive.read(f"stages/{i}/{name}").decode("utf-8")
                        for name in entry["artifacts"]
                    }
                    stages.append(_build_stage(entry, artifacts, path))
        except zipfile.BadZipFile as exc:
            raise SerializationError(f"{path} is not a model archive: {exc}") from exc
        except KeyError as exc:
            raise SerializationError(f"{path} is missing entry {exc}") from exc
        except (ValueError, TypeError) as exc:
            raise SerializationError(f"{path} has a malformed manifest: {exc}") from exc

    logger.info("Loaded %d stages from %s", len(stages), path)
    return TransformerChain(tuple(stages))


def _check_manifest(manifest: Any, path: str) -> None:
    if not isinstance(manifest, dict) or manifest.get("format") != FORMAT_NAME:
        raise SerializationError(f"{path} is not a {FORMAT_NAME} file")
    version = manifest.get("format_version")
    if version != FORMAT_VERSION:
        raise SerializationError(
            f"{path} has format version {version}, expected {FORMAT_VERSION}"
        )
    if manifest.get("stage_count") != len(manifest.get("stages", [])):
        raise SerializationError(
            f"{path} declares {manifest.get('stage_count')} stages "
            f"but lists {len(manifest.get('stages', []))}"
        )


def _build_stage(entry: dict[str, Any], artifacts: dict[str, str], path: str):
    kind = entry["kind"]
    cls = TRANSFORMERS.get(kind)
    if cls is None:
        raise SerializationError(f"{path} contains unknown stage kind {kind!r}")
    try:
        return cls.from_params(entry["params"], artifacts)
    except LightGBMError as exc:
        raise SerializationError(f"{path}: cannot restore {kind} stage: {exc}") from exc

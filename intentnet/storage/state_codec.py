# intentnet/storage/state_codec.py
"""
Classifier state <-> persistence-neutral records

The record is a plain mapping of JSON-compatible values:

    {
        "settings": {...},            # camelCase options, callables removed
        "weightsIndex": [{...}, ...], # per feature: {perceptronId: weight}
        "perceptrons": [{"name", "id", "bias", "weights"?, "changes"?}],
        "encoder": {...}              # optional
    }
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
from loguru import logger

from intentnet.config.settings import NeuralSettings
from intentnet.encoding.encoder import Encoder, FeatureEncoding
from intentnet.ml_engine.models.perceptron import (
    Perceptron,
    PerceptronEnsemble,
    SparseWeightIndex,
)
from intentnet.utils.validation import MalformedState, validate_state


@dataclass
class DecodedState:
    """Everything restored from a record"""

    options: dict[str, Any]
    ensemble: PerceptronEnsemble
    encoder: FeatureEncoding | None = None


class StateCodec:
    """
    Serializes a trained ensemble and restores it.

    Example:
        >>> record = StateCodec.serialize(ensemble, settings, encoder)
        >>> state = StateCodec.deserialize(record)
        >>> state.ensemble.sparse_index is not None
        True
    """

    @staticmethod
    def serialize(
        ensemble: PerceptronEnsemble,
        settings: NeuralSettings,
        encoder: FeatureEncoding | None = None,
        save_changes: bool = False,
        save_encoder: bool = True,
    ) -> dict[str, Any]:
        """
        Build the persisted record.

        Args:
            ensemble: Trained ensemble
            settings: Settings to persist
            encoder: Encoder whose vocabularies are persisted
            save_changes: Include momentum buffers (when still retained)
            save_encoder: Include the encoder

        Returns:
            JSON-compatible record

        Raises:
            MalformedState: If the ensemble has no weights index
        """
        index = ensemble.sparse_index
        if index is None:
            raise MalformedState("Cannot serialize a classifier without a weights index")

        perceptrons = []
        for perceptron in ensemble.perceptrons:
            item: dict[str, Any] = {
                "name": perceptron.name,
                "id": perceptron.id,
                "bias": float(perceptron.bias),
            }
            if perceptron.weights is not None:
                item["weights"] = perceptron.weights.tolist()
            if save_changes and perceptron.changes is not None:
                item["changes"] = perceptron.changes.tolist()
            perceptrons.append(item)

        record: dict[str, Any] = {
            "settings": settings.to_options(),
            "weightsIndex": index.to_records(),
            "perceptrons": perceptrons,
        }
        if save_encoder and encoder is not None:
            record["encoder"] = encoder.to_json()
        return record

    @staticmethod
    def deserialize(record: Any, encoder: FeatureEncoding | None = None) -> DecodedState:
        """
        Restore an ensemble (and encoder, when present) from a record.

        Args:
            record: Record produced by ``serialize``
            encoder: Encoder to load the persisted vocabularies into (a
                default Encoder when omitted)

        Dense weights come back when the record carries them, together with
        momentum buffers (zeroed when not saved) so training can resume.

        Raises:
            MalformedState: If required fields are missing or inconsistent
        """
        record = validate_state(record)
        records = record.get("weightsIndex", record.get("weightsDict"))
        num_features = len(records)

        ensemble = PerceptronEnsemble()
        ensemble.num_features = num_features

        items = sorted(record["perceptrons"], key=lambda item: int(item["id"]))
        for position, item in enumerate(items):
            if int(item["id"]) != position:
                raise MalformedState(f"Perceptron ids must run from 0, found {item['id']}")

            perceptron = Perceptron(
                id=position, name=item["name"], bias=float(item.get("bias", 0.0))
            )
            if item.get("weights") is not None:
                perceptron.weights = StateCodec._dense(item["weights"], num_features, "weights")
                perceptron.changes = (
                    StateCodec._dense(item["changes"], num_features, "changes")
                    if item.get("changes") is not None
                    else np.zeros(num_features, dtype=np.float32)
                )
            ensemble.perceptrons.append(perceptron)
            ensemble.perceptron_by_name[perceptron.name] = perceptron

        try:
            ensemble.sparse_index = SparseWeightIndex.from_records(records)
        except (TypeError, ValueError, AttributeError) as e:
            raise MalformedState(f"Invalid weights index: {e}") from e

        if record.get("encoder") is None:
            encoder = None
        else:
            encoder = (encoder or Encoder()).from_json(record["encoder"])

        logger.debug(
            f"Decoded classifier state: {ensemble.num_perceptrons} perceptrons, "
            f"{num_features} features, dense={ensemble.has_dense_weights}"
        )
        return DecodedState(
            options=dict(record.get("settings") or {}), ensemble=ensemble, encoder=encoder
        )

    @staticmethod
    def _dense(values: list, num_features: int, field: str) -> np.ndarray:
        array = np.asarray(values, dtype=np.float32)
        if array.shape != (num_features,):
            raise MalformedState(
                f"Perceptron {field} has {array.size} values, expected {num_features}"
            )
        return array


def save(record: dict[str, Any], path: str | Path) -> str:
    """
    Write a record as JSON

    Returns:
        Path where the record was saved
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(record, f)

    logger.info(f"Classifier saved to {path}")
    return str(path)


def load(path: str | Path) -> dict[str, Any]:
    """
    Read a record written by ``save``

    Raises:
        MalformedState: If the file is not valid JSON
    """
    path = Path(path)
    with open(path, "r") as f:
        try:
            record = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedState(f"{path} is not a valid classifier file: {e}") from e

    logger.info(f"Classifier loaded from {path}")
    return record

import json
from enum import Enum

import numpy as np


class PersistenceError(Exception):
    """Raised when a saved network cannot be read back."""


class Activation(Enum):
    SIGMOID = "sigmoid"
    RELU = "relu"
    TANH = "tanh"
    IDENTITY = "identity"

    def apply(self, x):
        if self is Activation.SIGMOID:
            return 1.0 / (1.0 + np.exp(-x))
        if self is Activation.RELU:
            return np.maximum(x, 0.0)
        if self is Activation.TANH:
            return np.tanh(x)
        return x


def _perturb(values, rate, magnitude, rng):
    # each entry independently, with probability `rate`, moves by U(-magnitude, magnitude)
    mask = rng.random(values.shape) < rate
    change = rng.uniform(-magnitude, magnitude, values.shape)
    return values + np.where(mask, change, 0.0)


class Layer:
    """Fully connected layer: row i of `weights` plus `biases[i]` is neuron i."""

    def __init__(self, weights, biases, activation):
        self.weights = np.array(weights, dtype=float)
        self.biases = np.array(biases, dtype=float)
        self.activation = Activation(activation)
        if self.weights.ndim != 2:
            raise ValueError(f"weights must be a matrix, got shape {self.weights.shape}")
        if self.biases.shape != (self.weights.shape[0],):
            raise ValueError(
                f"{self.weights.shape[0]} neurons but {self.biases.size} biases")

    @classmethod
    def random(cls, input_size, output_size, activation, rng):
        # weights and biases start in [0, 1)
        return cls(rng.random((output_size, input_size)), rng.random(output_size), activation)

    @property
    def input_size(self):
        return self.weights.shape[1]

    @property
    def output_size(self):
        return self.weights.shape[0]

    def forward(self, inputs):
        inputs = np.asarray(inputs, dtype=float)
        if inputs.shape != (self.input_size,):
            raise ValueError(f"expected {self.input_size} inputs, got {inputs.shape}")
        return self.activation.apply(self.weights @ inputs + self.biases)

    def mutate(self, rate, magnitude, rng):
        self.weights = _perturb(self.weights, rate, magnitude, rng)
        self.biases = _perturb(self.biases, rate, magnitude, rng)


class NeuralNetwork:
    def __init__(self, layers):
        self.layers = list(layers)
        if not self.layers:
            raise ValueError("a network needs at least one layer")
        for prev, nxt in zip(self.layers, self.layers[1:]):
            if prev.output_size != nxt.input_size:
                raise ValueError(
                    f"layer width mismatch: {prev.output_size} outputs feed {nxt.input_size} inputs")

    @classmethod
    def create(cls, layer_sizes, activations, rng=None):
        """Random network with `len(layer_sizes) - 1` layers.

        `layer_sizes[0]` is the input width; `activations[i]` applies to the
        layer that maps `layer_sizes[i]` to `layer_sizes[i + 1]`.
        """
        if len(layer_sizes) != len(activations) + 1:
            raise ValueError(
                f"{len(layer_sizes)} layer sizes need {len(layer_sizes) - 1} activations, "
                f"got {len(activations)}")
        if any(size <= 0 for size in layer_sizes):
            raise ValueError(f"layer sizes must be positive: {list(layer_sizes)}")
        rng = rng if rng is not None else np.random.default_rng()
        return cls(
            Layer.random(n_in, n_out, act, rng)
            for n_in, n_out, act in zip(layer_sizes, layer_sizes[1:], activations)
        )

    @property
    def input_size(self):
        return self.layers[0].input_size

    @property
    def output_size(self):
        return self.layers[-1].output_size

    def forward(self, inputs):
        output = np.asarray(inputs, dtype=float)
        for layer in self.layers:
            output = layer.forward(output)
        return output

    def mutate(self, rate, magnitude, rng=None):
        rng = rng if rng is not None else np.random.default_rng()
        for layer in self.layers:
            layer.mutate(rate, magnitude, rng)

    # --- persistence ---
    def to_record(self):
        return {
            "layers": [
                {
                    "neurons": [
                        {"weights": row.tolist(), "bias": float(bias)}
                        for row, bias in zip(layer.weights, layer.biases)
                    ],
                    "activation": layer.activation.value,
                }
                for layer in self.layers
            ]
        }

    @classmethod
    def from_record(cls, record):
        try:
            layers = []
            for layer in record["layers"]:
                neurons = layer["neurons"]
                if not neurons:
                    raise ValueError("layer without neurons")
                widths = {len(n["weights"]) for n in neurons}
                if len(widths) != 1:
                    raise ValueError(f"neurons of one layer disagree on width: {sorted(widths)}")
                layers.append(Layer(
                    [n["weights"] for n in neurons],
                    [n["bias"] for n in neurons],
                    layer["activation"],
                ))
            return cls(layers)
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"malformed network record: {e}") from e

    def save(self, path):
        with open(path, "w") as f:
            json.dump(self.to_record(), f)

    @classmethod
    def load(cls, path):
        try:
            with open(path) as f:
                record = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"could not read network from {path}: {e}") from e
        return cls.from_record(record)

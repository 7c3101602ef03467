"""
Input validation utilities and exceptions for DAG layout algorithms.

Provides centralized validation functions for links, canvas size, weights
and other layout parameters, and the exception taxonomy raised by the
layout pipeline. Validation is eager: configuration is checked before any
expensive step runs.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Optional, Sequence


class ValidationError(ValueError):
    """Base exception for layout validation errors."""

    pass


class ConfigurationError(ValidationError):
    """Raised when a layout option is out of range or unknown."""

    pass


class InvalidCanvasSizeError(ConfigurationError):
    """Raised when canvas dimensions are invalid."""

    pass


class InvalidLinkError(ValidationError):
    """Raised when a link references invalid nodes or duplicates another link."""

    pass


class CycleError(ValidationError):
    """
    Raised when the input graph contains a cycle.

    Attributes:
        path: Nodes along the cycle; the first and last entries are the same
            node and every consecutive pair is a link of the input.
    """

    def __init__(self, path: Sequence[Any]) -> None:
        self.path = list(path)
        rendered = " -> ".join(repr(_label(node)) for node in self.path)
        super().__init__(f"graph contained a cycle: {rendered}")


class SolverInfeasibleError(ConfigurationError):
    """
    Raised when an optimization step cannot satisfy its constraints.

    Attributes:
        layer: Layer index where the violation was detected, if known
        pair: The pair of horizontally adjacent nodes involved, if known
    """

    def __init__(
        self,
        message: str,
        layer: Optional[int] = None,
        pair: Optional[tuple[Any, Any]] = None,
    ) -> None:
        self.layer = layer
        self.pair = pair
        if layer is not None:
            message = f"{message} (layer {layer}"
            if pair is not None:
                message += f", nodes {_label(pair[0])!r} and {_label(pair[1])!r}"
            message += ")"
        super().__init__(message)


class InternalInvariantError(RuntimeError):
    """Raised when an internal invariant is violated. Indicates a defect."""

    pass


def validate_canvas_size(size: Sequence[float]) -> tuple[float, float]:
    """
    Validate canvas size dimensions.

    Args:
        size: [width, height] sequence

    Returns:
        Validated (width, height) tuple

    Raises:
        InvalidCanvasSizeError: If dimensions are invalid
    """
    if len(size) < 2:
        raise InvalidCanvasSizeError(
            f"Canvas size must have 2 elements [width, height], got {len(size)}"
        )

    width, height = float(size[0]), float(size[1])

    if not width > 0 or math.isinf(width):
        raise InvalidCanvasSizeError(f"Canvas width must be positive, got {width}")
    if not height > 0 or math.isinf(height):
        raise InvalidCanvasSizeError(f"Canvas height must be positive, got {height}")

    return width, height


def validate_link_indices(
    links: Sequence[Any],
    node_count: int,
    strict: bool = True,
) -> list[tuple[int, str]]:
    """
    Validate that all link source/target indices are within bounds.

    Args:
        links: Sequence of dicts or objects with source/target indices
        node_count: Number of nodes in the graph
        strict: If True, raises on invalid. If False, returns list of issues.

    Returns:
        List of (link_index, issue_description) tuples

    Raises:
        InvalidLinkError: If strict=True and invalid links found
    """
    issues: list[tuple[int, str]] = []

    for i, link in enumerate(links):
        src = _get_index(link, "source")
        tgt = _get_index(link, "target")

        if src is None:
            issues.append((i, f"Link {i}: source is None"))
        elif src < 0 or src >= node_count:
            issues.append((i, f"Link {i}: source index {src} out of bounds [0, {node_count})"))

        if tgt is None:
            issues.append((i, f"Link {i}: target is None"))
        elif tgt < 0 or tgt >= node_count:
            issues.append((i, f"Link {i}: target index {tgt} out of bounds [0, {node_count})"))

    if strict and issues:
        msg = "Invalid link indices:\n" + "\n".join(issue[1] for issue in issues)
        raise InvalidLinkError(msg)

    return issues


def validate_iterations(iterations: int) -> int:
    """
    Validate iteration count is positive.

    Args:
        iterations: Number of iterations

    Returns:
        Validated iteration count

    Raises:
        ConfigurationError: If iterations is not an integer or is < 1
    """
    if isinstance(iterations, bool) or not isinstance(iterations, numbers.Integral) or iterations < 1:
        raise ConfigurationError(f"iterations must be a positive integer, got {iterations}")
    return int(iterations)


def validate_weight(weight: float) -> float:
    """
    Validate the curvature/closeness trade-off weight.

    Minimizing curvature alone is under-constrained, so a weight of exactly 1
    is rejected.

    Args:
        weight: Weight value

    Returns:
        Validated weight as float

    Raises:
        ConfigurationError: If weight not in [0, 1)
    """
    if not isinstance(weight, numbers.Real):
        raise ConfigurationError(f"weight must be in [0, 1), but was {weight!r}")
    weight = float(weight)
    if not 0 <= weight < 1:
        raise ConfigurationError(f"weight must be in [0, 1), but was {weight}")
    return weight


def validate_non_negative(value: float, name: str) -> float:
    """
    Validate that a size-like option is finite and non-negative.

    Raises:
        ConfigurationError: If value is negative or not finite
    """
    if not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a non-negative number, got {value!r}")
    value = float(value)
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError(f"{name} must be a non-negative number, got {value}")
    return value


def validate_choice(value: str, choices: Sequence[str], name: str) -> str:
    """
    Validate that an option names one of the supported choices.

    Raises:
        ConfigurationError: If value is not among choices
    """
    if value not in choices:
        raise ConfigurationError(f"{name} must be one of {sorted(choices)}, got {value!r}")
    return value


def _label(node: Any) -> Any:
    """Render a node by its payload when it has one."""
    data = getattr(node, "data", None)
    return node if data is None else data


def _get_index(obj: Any, attr: str) -> Optional[int]:
    """Extract index from a dict, a (source, target) pair, or an object."""
    if isinstance(obj, dict):
        val = obj.get(attr)
    elif isinstance(obj, (tuple, list)) and len(obj) == 2:
        val = obj[0] if attr == "source" else obj[1]
    else:
        val = getattr(obj, attr, None)

    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, int):
        return val
    return None


__all__ = [
    "ValidationError",
    "ConfigurationError",
    "InvalidCanvasSizeError",
    "InvalidLinkError",
    "CycleError",
    "SolverInfeasibleError",
    "InternalInvariantError",
    "validate_canvas_size",
    "validate_link_indices",
    "validate_iterations",
    "validate_weight",
    "validate_non_negative",
    "validate_choice",
]

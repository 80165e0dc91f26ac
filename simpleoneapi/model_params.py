"""Per-model parameter ranges and clamping of request parameters into them."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ADJUSTMENT = 0.01


class UnsupportedModelError(ValueError):
    """The model has no known parameter ranges."""


@dataclass(frozen=True)
class Range:
    min: float
    max: float


@dataclass(frozen=True)
class ModelParams:
    temperature_range: Range
    top_p_range: Range
    max_tokens: int = 0


_GLM_RANGE = Range(0.0, 1.0)

_MODEL_PARAMS: dict[str, ModelParams] = {
    name: ModelParams(_GLM_RANGE, _GLM_RANGE, 4095)
    for name in ("glm-4-0520", "glm-4", "glm-4-air", "glm-4-airx", "glm-4-flash", "glm-3-turbo")
}
_MODEL_PARAMS["glm-4v"] = ModelParams(Range(0.0, 1.0), Range(0.0, 1.0), 1024)


def get_model_params(model_name: str) -> ModelParams:
    """Return the parameter ranges of a model, or raise UnsupportedModelError."""
    try:
        return _MODEL_PARAMS[model_name]
    except KeyError:
        raise UnsupportedModelError("unsupported model") from None


def _adjust(value: float, bounds: Range) -> float:
    value = max(value, 0.0)
    if value < bounds.min:
        return bounds.min + ADJUSTMENT
    if value >= bounds.max:
        return bounds.max - ADJUSTMENT
    return value


def adjust_params_to_range(
    model_name: str, temperature: float, top_p: float, max_tokens: int
) -> tuple[float, float, int]:
    """Clamp temperature, top_p and max_tokens into the model's accepted ranges."""
    params = get_model_params(model_name)
    temperature = _adjust(temperature, params.temperature_range)
    top_p = _adjust(top_p, params.top_p_range)
    max_tokens = min(max(max_tokens, 0), params.max_tokens)
    logger.debug(
        "adjusted_temperature=%s adjusted_topP=%s adjusted_maxTokens=%s",
        temperature, top_p, max_tokens,
    )
    return temperature, top_p, max_tokens
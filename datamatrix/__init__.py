"""Role-aware, weighted feature access over exemplar-by-dimension arrays."""
from __future__ import annotations

from datamatrix.codecs import CODEC_REGISTRY, Codec, codec_for, register_codec
from datamatrix.config import DataMatrixConfig, build_data_matrix
from datamatrix.errors import (
    ConfigurationError,
    DataMatrixError,
    DegenerateDistributionError,
    OutOfRangeError,
    UninitializedError,
    UnsupportedFormatError,
)
from datamatrix.extractor import Borrowed, FeatureVectorExtractor, Owned
from datamatrix.matrix import DataMatrix
from datamatrix.pipeline import ConversionOp, ConversionPipeline, build_pipeline
from datamatrix.roles import AxisRole, Layout, derive_layout
from datamatrix.samplers import CumulativeWeight, WeightedSampler, build_sampler, search_cumulative
from datamatrix.utils.rng import philox_rng

__all__ = [
    # Layout
    "AxisRole",
    "Layout",
    "derive_layout",
    # Codecs / conversion
    "CODEC_REGISTRY",
    "Codec",
    "codec_for",
    "register_codec",
    "ConversionOp",
    "ConversionPipeline",
    "build_pipeline",
    # Extraction
    "Borrowed",
    "FeatureVectorExtractor",
    "Owned",
    # Sampling
    "CumulativeWeight",
    "WeightedSampler",
    "build_sampler",
    "search_cumulative",
    "philox_rng",
    # Facade
    "DataMatrix",
    "DataMatrixConfig",
    "build_data_matrix",
    # Errors
    "DataMatrixError",
    "ConfigurationError",
    "UnsupportedFormatError",
    "OutOfRangeError",
    "DegenerateDistributionError",
    "UninitializedError",
]

"""
Persistence for surface map snapshots.

A snapshot is stored as a compressed .npz holding every grid, plus a JSON
metadata file holding the scalar values (ranges, area-wide types, scales).
to_arrays and from_arrays are the pure encode/decode pair; SurfaceMapStore
adds the file layout on top.
"""

import json
import logging
import time
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np

from src.climate.classifier import ClassificationGrids, ClimateClassification
from src.climate.precipitation import SeasonalGrid, SeasonalPrecipitation
from src.climate.types import BiomeType, ClimateType, EcologyType, HumidityType
from src.config import SURFACE_CACHE
from src.surface.hydrology import HydrologyMaps
from src.surface.ranges import FloatRange, FreezeIntervalGrid, RangeGrid, readonly_array
from src.surface.surface_map import SurfaceMapSet

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def to_arrays(surface: SurfaceMapSet) -> Tuple[Dict[str, np.ndarray], Dict]:
    """
    Encode a surface as named arrays and JSON-serializable metadata.

    Returns:
        Tuple of (arrays, metadata)
    """
    classification = surface.classification
    arrays = {
        "elevation": surface.elevation,
        "climate": classification.grids.climate,
        "humidity": classification.grids.humidity,
        "biome": classification.grids.biome,
        "ecology": classification.grids.ecology,
        "total_precipitation": classification.total_precipitation,
        "total_snowfall": classification.total_snowfall,
        "sea_ice_start": classification.sea_ice.start,
        "sea_ice_finish": classification.sea_ice.finish,
        "snow_cover_start": classification.snow_cover.start,
        "snow_cover_finish": classification.snow_cover.finish,
        "temperature_min": surface.temperature_ranges.minimum,
        "temperature_avg": surface.temperature_ranges.average,
        "temperature_max": surface.temperature_ranges.maximum,
        "season_precipitation": np.stack([s.precipitation for s in surface.seasons]),
        "season_snowfall": np.stack([s.snowfall for s in surface.seasons]),
        "depth": surface.hydrology.depth,
        "flow": surface.hydrology.flow,
    }
    metadata = {
        "format_version": FORMAT_VERSION,
        "shape": list(surface.shape),
        "season_count": surface.precipitation.count,
        "max_elevation": surface.max_elevation,
        "max_precipitation": surface.max_precipitation,
        "snow_to_rain_ratio": surface.snow_to_rain_ratio,
        "average_elevation": surface.average_elevation,
        "max_flow": surface.hydrology.max_flow,
        "temperature_range": list(classification.temperature_range.as_tuple()),
        "precipitation_range": list(classification.precipitation_range.as_tuple()),
        "snowfall_range": list(classification.snowfall_range.as_tuple()),
        "climate": int(classification.climate),
        "humidity": int(classification.humidity),
        "biome": int(classification.biome),
        "ecology": int(classification.ecology),
    }
    return arrays, metadata


def from_arrays(arrays: Dict[str, np.ndarray], metadata: Dict) -> SurfaceMapSet:
    """
    Decode a surface from the output of to_arrays.

    Raises:
        KeyError: If an array or metadata entry is missing
        ValueError: If the format version is not supported
    """
    version = metadata.get("format_version")
    if version != FORMAT_VERSION:
        raise ValueError(f"Unsupported surface format version: {version}")

    classification = ClimateClassification(
        grids=ClassificationGrids(
            climate=readonly_array(arrays["climate"], dtype=np.int32),
            humidity=readonly_array(arrays["humidity"], dtype=np.int32),
            biome=readonly_array(arrays["biome"], dtype=np.int32),
            ecology=readonly_array(arrays["ecology"], dtype=np.int32),
        ),
        total_precipitation=readonly_array(arrays["total_precipitation"]),
        total_snowfall=readonly_array(arrays["total_snowfall"]),
        sea_ice=FreezeIntervalGrid(arrays["sea_ice_start"], arrays["sea_ice_finish"]),
        snow_cover=FreezeIntervalGrid(
            arrays["snow_cover_start"], arrays["snow_cover_finish"]
        ),
        temperature_range=FloatRange(*metadata["temperature_range"]),
        precipitation_range=FloatRange(*metadata["precipitation_range"]),
        snowfall_range=FloatRange(*metadata["snowfall_range"]),
        climate=ClimateType(metadata["climate"]),
        humidity=HumidityType(metadata["humidity"]),
        biome=BiomeType(metadata["biome"]),
        ecology=EcologyType(metadata["ecology"]),
    )

    seasons = SeasonalPrecipitation(
        [
            SeasonalGrid(precipitation, snowfall)
            for precipitation, snowfall in zip(
                arrays["season_precipitation"], arrays["season_snowfall"]
            )
        ]
    )

    return SurfaceMapSet(
        arrays["elevation"],
        classification,
        seasons,
        RangeGrid(
            arrays["temperature_min"],
            arrays["temperature_max"],
            arrays["temperature_avg"],
        ),
        hydrology=HydrologyMaps(
            depth=readonly_array(arrays["depth"]),
            flow=readonly_array(arrays["flow"]),
            max_flow=float(metadata["max_flow"]),
        ),
        max_elevation=metadata["max_elevation"],
        max_precipitation=metadata["max_precipitation"],
        snow_to_rain_ratio=metadata["snow_to_rain_ratio"],
        average_elevation=metadata["average_elevation"],
    )


class SurfaceMapStore:
    """
    Saves and loads surface snapshots by name.

    Each snapshot is two files in cache_dir: ``{name}.npz`` and
    ``{name}_meta.json``.

    Attributes:
        cache_dir: Directory where snapshot files are stored
    """

    def __init__(self, cache_dir: Optional[Path] = None):
        """
        Initialize the store.

        Args:
            cache_dir: Directory for snapshot files (default: config.SURFACE_CACHE)
        """
        self.cache_dir = Path(cache_dir) if cache_dir is not None else SURFACE_CACHE
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Surface store initialized at: {self.cache_dir}")

    def get_path(self, name: str) -> Path:
        return self.cache_dir / f"{name}.npz"

    def get_metadata_path(self, name: str) -> Path:
        return self.cache_dir / f"{name}_meta.json"

    def exists(self, name: str) -> bool:
        return self.get_path(name).exists() and self.get_metadata_path(name).exists()

    def save(self, surface: SurfaceMapSet, name: str) -> Tuple[Path, Path]:
        """
        Write a surface snapshot.

        Returns:
            Tuple of (array_file_path, metadata_file_path)
        """
        path = self.get_path(name)
        metadata_path = self.get_metadata_path(name)

        start_time = time.time()
        arrays, metadata = to_arrays(surface)
        np.savez_compressed(path, **arrays)

        metadata["save_time"] = time.time()
        with open(metadata_path, "w") as f:
            json.dump(metadata, f, indent=2)

        elapsed = time.time() - start_time
        logger.info(f"Saved surface '{name}' to {path.name} ({elapsed:.2f}s)")
        return path, metadata_path

    def load(self, name: str) -> Optional[SurfaceMapSet]:
        """
        Read a surface snapshot.

        Returns:
            SurfaceMapSet, or None if no snapshot with this name exists
        """
        if not self.exists(name):
            logger.debug(f"No stored surface named '{name}'")
            return None

        with open(self.get_metadata_path(name)) as f:
            metadata = json.load(f)
        with np.load(self.get_path(name)) as data:
            arrays = {key: data[key] for key in data.files}

        surface = from_arrays(arrays, metadata)
        logger.info(f"Loaded surface '{name}' with shape {surface.shape}")
        return surface

    def delete(self, name: str) -> int:
        """
        Remove a stored snapshot.

        Returns:
            Number of files deleted
        """
        deleted = 0
        for path in (self.get_path(name), self.get_metadata_path(name)):
            if path.exists():
                path.unlink()
                deleted += 1
        logger.debug(f"Deleted {deleted} files for surface '{name}'")
        return deleted

"""
Render the layers of a stored surface snapshot to image files.

Usage:
    python -m src.surface.render_layers earth
    python -m src.surface.render_layers earth --layers biome water --hill-shading
    python -m src.surface.render_layers earth --layers temperature --time 0.25
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from src.config import DEFAULT_IMAGE_FORMAT, OUTPUT_DIR
from src.surface.hill_shading import HillShadingOptions
from src.surface.storage import SurfaceMapStore
from src.surface.surface_map import SurfaceMapSet
from src.utils.helpers import setup_logging

logger = logging.getLogger(__name__)

LAYERS = ("elevation", "water", "biome", "precipitation", "temperature")


def render_layers(
    surface: SurfaceMapSet,
    name: str,
    output_dir: Path,
    layers: Sequence[str] = LAYERS,
    hill_shading: Optional[HillShadingOptions] = None,
    proportion_of_year: Optional[float] = None,
    image_format: str = DEFAULT_IMAGE_FORMAT,
) -> List[Path]:
    """
    Write one image per layer as ``{name}_{layer}.{ext}`` in output_dir.

    Returns:
        Paths of the written images, in layer order
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    suffix = "" if proportion_of_year is None else f"_t{proportion_of_year:.2f}"

    paths = []
    for layer in layers:
        image = surface.to_image(layer, hill_shading, proportion_of_year)
        path = output_dir / f"{name}_{layer}{suffix}.{image_format.lower()}"
        image.save(path, format=image_format)
        logger.info(f"Wrote {layer} layer to {path}")
        paths.append(path)
    return paths


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Render layers of a stored surface map snapshot",
    )
    parser.add_argument("name", help="Name of the stored snapshot")
    parser.add_argument(
        "--cache-dir", type=Path, default=None, help="Snapshot directory (default: data/cache/surface)"
    )
    parser.add_argument(
        "--output-dir", type=Path, default=OUTPUT_DIR, help="Where to write images"
    )
    parser.add_argument(
        "--layers", nargs="+", choices=LAYERS, default=list(LAYERS), help="Layers to render"
    )
    parser.add_argument(
        "--hill-shading", action="store_true", help="Shade land by slope"
    )
    parser.add_argument(
        "--time",
        type=float,
        default=None,
        help="Proportion of the year for precipitation and temperature (default: annual)",
    )
    parser.add_argument("--log-file", default=None, help="Also write DEBUG logs here")
    args = parser.parse_args(argv)

    setup_logging("src", log_file=args.log_file)

    surface = SurfaceMapStore(args.cache_dir).load(args.name)
    if surface is None:
        logger.error(f"No stored surface named '{args.name}'")
        return 1

    hill_shading = HillShadingOptions() if args.hill_shading else None
    render_layers(
        surface,
        args.name,
        args.output_dir,
        layers=args.layers,
        hill_shading=hill_shading,
        proportion_of_year=args.time,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

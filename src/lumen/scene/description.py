"""Scene descriptions: shape lists to and from JSON-compatible dictionaries.

A description has two keys:

    {
        "materials": {"white": {"color": [1, 1, 1], "emission": [0, 0, 0]}, ...},
        "shapes": [
            {"type": "plane", "center": [...], "normal": [...], "material": "white"},
            {"type": "sphere", "center": [...], "radius": 1.0, "material": "white"},
        ],
    }

Materials are referenced by name, so shapes that share a material instance
before export share one instance again after import. Unnamed materials get
generated names (``material_0``, ``material_1``, ...).

Example:
    >>> from lumen.scene.cornell_box import create_cornell_box_scene
    >>> shapes, camera = create_cornell_box_scene()
    >>> data = scene_to_dict(shapes)
    >>> restored = scene_from_dict(data)
    >>> len(restored) == len(shapes)
    True
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from lumen.geometry import Plane, Shape, Sphere
from lumen.materials import Material

logger = logging.getLogger(__name__)


def _vec3(value: Any, what: str) -> tuple[float, float, float]:
    """Convert a JSON list to a 3-tuple of floats."""
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"{what} must be a list of 3 numbers, got {value!r}")
    return (float(value[0]), float(value[1]), float(value[2]))


def scene_to_dict(shapes: Sequence[Shape]) -> dict[str, Any]:
    """Export a shape list to a dictionary (for JSON serialization).

    Args:
        shapes: The shapes to export, in order.

    Returns:
        A dictionary with ``materials`` and ``shapes`` keys.

    Raises:
        ValueError: If two different materials carry the same name.
    """
    names: dict[int, str] = {}
    materials: dict[str, dict[str, list[float]]] = {}

    for shape in shapes:
        material = shape.material
        if id(material) in names:
            continue
        name = material.name or f"material_{len(names)}"
        if name in materials:
            raise ValueError(f"Duplicate material name {name!r} for different materials")
        names[id(material)] = name
        materials[name] = material.to_dict()

    exported: list[dict[str, Any]] = []
    for shape in shapes:
        entry: dict[str, Any] = {"center": list(shape.center)}
        if isinstance(shape, Plane):
            entry["type"] = "plane"
            entry["normal"] = list(shape.normal)
        else:
            entry["type"] = "sphere"
            entry["radius"] = shape.radius
        entry["material"] = names[id(shape.material)]
        exported.append(entry)

    return {"materials": materials, "shapes": exported}


def scene_from_dict(data: dict[str, Any]) -> list[Shape]:
    """Build a shape list from a dictionary.

    Args:
        data: Dictionary with ``materials`` and ``shapes`` keys.

    Returns:
        The shapes, in the order they are listed.

    Raises:
        ValueError: If a shape has an unknown type, references an unknown
            material, or carries invalid geometry or material values.
    """
    materials: dict[str, Material] = {}
    for name, params in data.get("materials", {}).items():
        materials[name] = Material(
            color=_vec3(params.get("color"), f"Material {name!r} color"),
            emission=_vec3(params.get("emission", [0.0, 0.0, 0.0]), f"Material {name!r} emission"),
            name=name,
        )

    shapes: list[Shape] = []
    for index, entry in enumerate(data.get("shapes", [])):
        material_name = entry.get("material")
        if material_name not in materials:
            raise ValueError(f"Shape {index} references unknown material {material_name!r}")
        material = materials[material_name]

        shape_type = entry.get("type")
        if shape_type == "plane":
            shapes.append(
                Plane(
                    center=_vec3(entry.get("center"), f"Shape {index} center"),
                    normal=_vec3(entry.get("normal"), f"Shape {index} normal"),
                    material=material,
                )
            )
        elif shape_type == "sphere":
            shapes.append(
                Sphere(
                    center=_vec3(entry.get("center"), f"Shape {index} center"),
                    radius=float(entry.get("radius", 0.0)),
                    material=material,
                )
            )
        else:
            raise ValueError(f"Shape {index} has unknown type {shape_type!r}")

    logger.debug("Loaded %d shapes with %d materials", len(shapes), len(materials))
    return shapes


def save_scene(shapes: Sequence[Shape], path: str | Path) -> None:
    """Write a shape list to a JSON file."""
    path = Path(path)
    path.write_text(json.dumps(scene_to_dict(shapes), indent=2))
    logger.info("Saved scene description to %s", path)


def load_scene(path: str | Path) -> list[Shape]:
    """Read a shape list from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or describes an invalid scene.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid scene description in {path}: {e}") from e
    return scene_from_dict(data)

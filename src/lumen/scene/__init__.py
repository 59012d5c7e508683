"""Scene module for shape storage and ray-scene queries.

Components:
    scene: Device-resident shape and material tables, nearest-hit query
    description: Shape lists to and from JSON-compatible dictionaries
    cornell_box: The reference Cornell box scene and camera
"""

from .cornell_box import CornellBoxParams, create_cornell_box_scene
from .description import load_scene, save_scene, scene_from_dict, scene_to_dict
from .scene import Intersection, Scene, SceneHitRecord

__all__ = [
    "Scene",
    "SceneHitRecord",
    "Intersection",
    "scene_to_dict",
    "scene_from_dict",
    "save_scene",
    "load_scene",
    "CornellBoxParams",
    "create_cornell_box_scene",
]

"""
Voxel Timelapse Renderer: ray-traced day/night timelapses of a small voxel scene.
"""

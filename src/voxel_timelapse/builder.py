"""
Default material table and the house/tree/torch/puddle scene layout.
"""
from voxel_timelapse.materials import Material, MaterialTable
from voxel_timelapse.scene import Scene, Voxel, WaterPlane

WATER_HEIGHT = 0.05
PUDDLE_BOUNDS = (1.0, 4.5, 14.0, 17.0)


def default_materials():
    return MaterialTable([
        Material("grass", albedo=[0.36, 0.62, 0.28], specular=0.03, texture="grass.png", uv_scale=8.0),
        Material("dirt", albedo=[0.55, 0.44, 0.36], specular=0.02, texture="dirt.png", uv_scale=4.0),
        Material("stone", albedo=[0.62, 0.62, 0.64], specular=0.06, texture="stone.png", uv_scale=3.0),
        Material("planks", albedo=[0.80, 0.62, 0.42], specular=0.05, texture="planks.png", uv_scale=2.5),
        Material("dark_wood", albedo=[0.35, 0.25, 0.18], specular=0.04, texture="planks.png", uv_scale=2.5),
        Material("roof", albedo=[0.78, 0.36, 0.30], specular=0.04, texture="roof.png", uv_scale=2.0),
        Material("glass", albedo=[0.85, 0.90, 0.95], specular=0.6, shininess=64.0,
                 reflection=0.25, texture="glass.png"),
        Material("water", albedo=[0.20, 0.38, 0.80], specular=0.5, shininess=64.0,
                 reflection=0.4, texture="water.png", uv_scale=6.0, animated_uv=True),
        Material("torch", albedo=[1.00, 0.85, 0.45], specular=0.0, emissive=[1.0, 0.65, 0.30]),
        Material("leaves", albedo=[0.30, 0.58, 0.25], specular=0.02, texture="leaves.png", uv_scale=2.0),
    ])


def _house(ids):
    """8x8 plank house with a door, glass windows and a stepped roof."""
    x0, x1, z0, z1 = 4, 11, 4, 11
    wall_top = 3
    door = {(7, 0), (8, 0), (7, 1), (8, 1)}
    voxels = []

    for j in range(wall_top + 1):
        for x in range(x0, x1 + 1):
            for z in range(z0, z1 + 1):
                on_x_edge = x in (x0, x1)
                on_z_edge = z in (z0, z1)
                if not (on_x_edge or on_z_edge):
                    continue
                if z == z1 and (x, j) in door:
                    continue
                if on_x_edge and on_z_edge:
                    material = ids["dark_wood"]
                elif j == 2 and (on_x_edge and z in (7, 8) or z == z0 and x in (6, 9)):
                    material = ids["glass"]
                else:
                    material = ids["planks"]
                voxels.append(Voxel(x, j, z, material))

    # Stepped roof: hollow rings, each ring covers the hole of the one below
    for level in range(5):
        lo, hi = x0 - 1 + level, x1 + 1 - level
        j = wall_top + 1 + level
        for x in range(lo, hi + 1):
            for z in range(lo, hi + 1):
                if lo < x < hi and lo < z < hi and hi - lo > 1:
                    continue
                voxels.append(Voxel(x, j, z, ids["roof"]))
    return voxels


def _tree(ids, x=15, z=8):
    voxels = [Voxel(x, j, z, ids["dark_wood"]) for j in range(4)]
    for j in (4, 5):
        for dx in (-1, 0, 1):
            for dz in (-1, 0, 1):
                voxels.append(Voxel(x + dx, j, z + dz, ids["leaves"]))
    for dx, dz in ((0, 0), (1, 0), (-1, 0), (0, 1), (0, -1)):
        voxels.append(Voxel(x + dx, 6, z + dz, ids["leaves"]))
    return voxels


def _torches(ids):
    # One on a post by the path, one hung on the front wall beside the door
    return [
        Voxel(6, 0, 14, ids["dark_wood"]),
        Voxel(6, 1, 14, ids["torch"]),
        Voxel(9, 2, 12, ids["torch"]),
    ]


def _terrain(ids):
    """Small stone and dirt mound behind the house."""
    voxels = []
    for x in range(-2, 2):
        for z in range(-1, 3):
            material = ids["stone"] if (x + z) % 3 == 0 else ids["dirt"]
            voxels.append(Voxel(x, 0, z, material))
    for x in range(-1, 1):
        for z in range(0, 2):
            voxels.append(Voxel(x, 1, z, ids["stone"]))
    return voxels


def build_house_scene(materials=None):
    """
    Build the timelapse scene: grass ground plane, terrain mound, house,
    tree, two torches and a reflective puddle.
    """
    materials = materials if materials is not None else default_materials()
    ids = {m.name: materials.id_of(m.name) for m in materials}

    voxels = _terrain(ids) + _house(ids) + _tree(ids) + _torches(ids)
    water = WaterPlane(height=WATER_HEIGHT, bounds=PUDDLE_BOUNDS, material=ids["water"])
    return Scene(materials, voxels, ground_material=ids["grass"], ground_height=0.0, water=water)

"""Procedural city grammar.

City -> Block (per lot) -> Building (1-4 per block) -> Stack (one per
floor, recursive) -> Roof. Terminals are facade, roof and park templates.
If the root carries a HeightMap, lots below the water level stay empty.
"""

from __future__ import annotations

from shapegrammar.core.models import Quaternion, Vector3
from shapegrammar.core.scene import Template, TemplateLibrary
from shapegrammar.grammar.shape import Shape
from shapegrammar.terrain.heightmap import HeightMap

FLOOR_HEIGHT = 3.0
BUILDING_OFFSET = 2.5

# Building footprint corners within a block, as multiples of BUILDING_OFFSET.
_LOT_SLOTS: tuple[tuple[int, int], ...] = ((-1, -1), (1, -1), (-1, 1), (1, 1))

GROUND_FLOOR_TEMPLATES = ("door_wall", "shop_wall")
UPPER_FLOOR_TEMPLATES = ("wall", "window_wall", "balcony_wall")
ROOF_TEMPLATES = ("roof_flat", "roof_pointed", "roof_garden")


def _facade(template_id: str, name: str) -> Template:
    # Four sides of a 2x2 footprint.
    sides = (
        Template(f"{template_id}_north", "North", offset=Vector3(0.0, 0.0, 1.0)),
        Template(f"{template_id}_east", "East", offset=Vector3(1.0, 0.0, 0.0)),
        Template(f"{template_id}_south", "South", offset=Vector3(0.0, 0.0, -1.0)),
        Template(f"{template_id}_west", "West", offset=Vector3(-1.0, 0.0, 0.0)),
    )
    return Template(template_id, name, parts=sides, tags=("facade",))


def city_templates() -> TemplateLibrary:
    """Terminal templates used by the city grammar."""
    library = TemplateLibrary()
    library.register(_facade("door_wall", "Door Wall"))
    library.register(_facade("shop_wall", "Shop Front"))
    library.register(_facade("wall", "Wall"))
    library.register(_facade("window_wall", "Window Wall"))
    library.register(_facade("balcony_wall", "Balcony Wall"))
    library.register(Template("roof_flat", "Flat Roof", tags=("roof",)))
    library.register(Template("roof_pointed", "Pointed Roof", tags=("roof",)))
    library.register(Template(
        "roof_garden", "Roof Garden", tags=("roof",),
        parts=(Template("tree", "Tree", offset=Vector3(0.5, 0.0, 0.5)),),
    ))
    library.register(Template(
        "park", "Park", tags=("ground",),
        parts=(
            Template("tree", "Tree", offset=Vector3(-2.0, 0.0, 1.0)),
            Template("tree", "Tree", offset=Vector3(2.0, 0.0, -1.0)),
            Template("bench", "Bench"),
        ),
    ))
    return library


class City(Shape):
    """Start symbol: a grid of lots."""

    def __init__(
        self,
        blocks_x: int = 4,
        blocks_y: int = 4,
        block_size: float = 12.0,
        max_floors: int = 6,
        empty_lot_chance: float = 0.15,
        water_level: float = 0.3,
    ) -> None:
        super().__init__()
        self.blocks_x = blocks_x
        self.blocks_y = blocks_y
        self.block_size = block_size
        self.max_floors = max_floors
        self.empty_lot_chance = empty_lot_chance
        self.water_level = water_level

    def expand(self) -> None:
        heightmap = self.root.get_component(HeightMap)
        for bx in range(self.blocks_x):
            for by in range(self.blocks_y):
                if heightmap is not None:
                    h = heightmap.sample((bx + 0.5) / self.blocks_x, (by + 0.5) / self.blocks_y)
                    if h < self.water_level:
                        continue
                pos = Vector3(bx * self.block_size, 0.0, by * self.block_size)
                if self.random_float() < self.empty_lot_chance:
                    self.spawn_prefab("park", pos)
                    continue
                self.create_symbol(Block, f"Block_{bx}_{by}", pos, max_floors=self.max_floors)


class Block(Shape):
    def __init__(self, max_floors: int = 6) -> None:
        super().__init__()
        self.max_floors = max_floors

    def expand(self) -> None:
        count = self.random_int(1, len(_LOT_SLOTS) + 1)
        for i in range(count):
            sx, sz = _LOT_SLOTS[i]
            rotation = Quaternion.from_euler(y=90.0 * self.random_int(4))
            self.create_symbol(
                Building, f"Building_{i}",
                Vector3(sx * BUILDING_OFFSET, 0.0, sz * BUILDING_OFFSET), rotation,
                floors=self.random_int(1, self.max_floors + 1),
            )


class Building(Shape):
    def __init__(self, floors: int = 1) -> None:
        super().__init__()
        self.floors = floors

    def expand(self) -> None:
        self.create_symbol(Stack, "Stack", floors=self.floors, ground=True)


class Stack(Shape):
    """One floor of facade, then the rest of the stack (or the roof) above it."""

    def __init__(self, floors: int = 1, ground: bool = False) -> None:
        super().__init__()
        self.floors = floors
        self.ground = ground

    def expand(self) -> None:
        choices = GROUND_FLOOR_TEMPLATES if self.ground else UPPER_FLOOR_TEMPLATES
        self.spawn_prefab(self.select_random(choices))

        above = Vector3(0.0, FLOOR_HEIGHT, 0.0)
        if self.floors > 1:
            self.create_symbol(Stack, "Stack", above, floors=self.floors - 1)
        else:
            self.create_symbol(Roof, "Roof", above)


class Roof(Shape):
    def expand(self) -> None:
        self.spawn_prefab(self.select_random(ROOF_TEMPLATES))

"""
Host -- Reference host object model read by the serialization engine.

Responsibility:
    Defines the externally-owned object model that the engine serializes:
    identity-bearing HostObjects, SceneNodes with their attached Components,
    the built-in components the special-case handlers target (Transform,
    Camera, UIDocument, Renderer, MeshFilter), the fixed-layout math structs
    the host exposes, and the SerializeField marker.

Architecture position:
    Kernel -- data source only.  The engine reads these objects and never
    mutates them.  Host integrations subclass HostObject / Component /
    Behaviour / MonoBehaviour; the ancestry walks in scene_engines stop at
    these roots.

Invariants enforced:
    - Every HostObject carries a stable instance id for its lifetime.
    - Math structs are frozen value objects.

Failure modes:
    - HostStateError from members that only have meaning inside a rendered
      frame (camera matrices, pixel rects).  The engine must never touch them.
    - Renderer.material / MeshFilter.mesh instantiate per-object copies as a
      side effect, exactly like the host they model.
"""

from __future__ import annotations

import itertools
import math
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import TypeVar

_instance_ids = itertools.count(1)
_instance_id_lock = threading.Lock()


def _next_instance_id() -> int:
    with _instance_id_lock:
        return next(_instance_ids)


class HostStateError(RuntimeError):
    """Raised by host members that are only valid inside a live frame."""


class SerializeField:
    """
    Marker that opts a non-public field into serialization.

    Used through ``typing.Annotated``::

        class Mover(MonoBehaviour):
            _speed: Annotated[float, SerializeField] = 2.0
    """


# =============================================================================
# Math structs
# =============================================================================


@dataclass(frozen=True, slots=True)
class Vector2:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True, slots=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    @property
    def normalized(self) -> Vector3:
        """Unit vector; a Vector3 again, so naive reflection never bottoms out."""
        mag = self.magnitude
        if mag < 1e-5:
            return Vector3()
        return Vector3(self.x / mag, self.y / mag, self.z / mag)

    def scale(self, other: Vector3) -> Vector3:
        return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)


@dataclass(frozen=True, slots=True)
class Vector4:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0


@dataclass(frozen=True, slots=True)
class Quaternion:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @classmethod
    def euler(cls, x: float, y: float, z: float) -> Quaternion:
        """Rotation from euler angles in degrees (applied Z, then X, then Y)."""
        hx, hy, hz = (math.radians(a) * 0.5 for a in (x, y, z))
        cx, sx = math.cos(hx), math.sin(hx)
        cy, sy = math.cos(hy), math.sin(hy)
        cz, sz = math.cos(hz), math.sin(hz)
        return cls(
            x=cy * sx * cz + sy * cx * sz,
            y=sy * cx * cz - cy * sx * sz,
            z=cy * cx * sz - sy * sx * cz,
            w=cy * cx * cz + sy * sx * sz,
        )

    def rotation_matrix(self) -> tuple[float, ...]:
        """Row-major 3x3 rotation matrix."""
        x, y, z, w = self.x, self.y, self.z, self.w
        return (
            1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y),
            2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x),
            2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y),
        )

    def rotate(self, v: Vector3) -> Vector3:
        m = self.rotation_matrix()
        return Vector3(
            m[0] * v.x + m[1] * v.y + m[2] * v.z,
            m[3] * v.x + m[4] * v.y + m[5] * v.z,
            m[6] * v.x + m[7] * v.y + m[8] * v.z,
        )


@dataclass(frozen=True, slots=True)
class Color:
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 1.0


@dataclass(frozen=True, slots=True)
class Rect:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True, slots=True)
class Bounds:
    center: Vector3 = Vector3()
    size: Vector3 = Vector3()

    @property
    def extents(self) -> Vector3:
        return Vector3(self.size.x / 2, self.size.y / 2, self.size.z / 2)


_IDENTITY_4X4 = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)


@dataclass(frozen=True, slots=True)
class Matrix4x4:
    """Row-major 4x4 matrix."""

    values: tuple[float, ...] = _IDENTITY_4X4

    def __post_init__(self) -> None:
        if len(self.values) != 16:
            raise ValueError(f"Matrix4x4 needs 16 values, got {len(self.values)}")

    def __getitem__(self, index: tuple[int, int]) -> float:
        row, col = index
        return self.values[row * 4 + col]

    @property
    def transpose(self) -> Matrix4x4:
        return Matrix4x4(tuple(self[c, r] for r in range(4) for c in range(4)))

    @classmethod
    def trs(cls, t: Vector3, r: Quaternion, s: Vector3) -> Matrix4x4:
        m = r.rotation_matrix()
        return cls((
            m[0] * s.x, m[1] * s.y, m[2] * s.z, t.x,
            m[3] * s.x, m[4] * s.y, m[5] * s.z, t.y,
            m[6] * s.x, m[7] * s.y, m[8] * s.z, t.z,
            0.0, 0.0, 0.0, 1.0,
        ))


# =============================================================================
# Host enums
# =============================================================================


class RenderingPath(IntEnum):
    USE_PLAYER_SETTINGS = -1
    VERTEX_LIT = 0
    FORWARD = 1
    DEFERRED_LIGHTING = 2
    DEFERRED_SHADING = 3


class CameraClearFlags(IntEnum):
    SKYBOX = 1
    SOLID_COLOR = 2
    DEPTH = 3
    NOTHING = 4


class OpaqueSortMode(IntEnum):
    DEFAULT = 0
    FRONT_TO_BACK = 1
    NO_DISTANCE_SORT = 2


class TransparencySortMode(IntEnum):
    DEFAULT = 0
    PERSPECTIVE = 1
    ORTHOGRAPHIC = 2
    CUSTOM_AXIS = 3


# =============================================================================
# Objects
# =============================================================================


class HostObject:
    """Identity-bearing object owned by the host (the engine's object handle)."""

    def __init__(self, name: str = "", *, instance_id: int | None = None) -> None:
        self._name = name
        self._instance_id = (
            instance_id if instance_id is not None else _next_instance_id()
        )

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    def get_instance_id(self) -> int:
        return self._instance_id

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"instance_id={self._instance_id})"
        )


class Material(HostObject):
    pass


class Mesh(HostObject):
    pass


class PanelSettings(HostObject):
    pass


class VisualTreeAsset(HostObject):
    pass


C = TypeVar("C", bound="Component")


class SceneNode(HostObject):
    """A node in the scene graph; owns a Transform and any attached components."""

    def __init__(
        self,
        name: str = "GameObject",
        *,
        tag: str = "Untagged",
        layer: int = 0,
        active: bool = True,
        is_static: bool = False,
        scene_path: str = "",
        instance_id: int | None = None,
    ) -> None:
        super().__init__(name, instance_id=instance_id)
        self.tag = tag
        self.layer = layer
        self.active_self = active
        self.is_static = is_static
        self.scene_path = scene_path
        self._components: list[Component] = []
        self._transform = self.add_component(Transform)

    @property
    def transform(self) -> Transform:
        return self._transform

    @property
    def active_in_hierarchy(self) -> bool:
        current: Transform | None = self._transform
        while current is not None:
            node = current.game_object
            if node is not None and not node.active_self:
                return False
            current = current.parent
        return True

    def set_active(self, value: bool) -> None:
        self.active_self = value

    def add_component(self, component_type: type[C], **kwargs: object) -> C:
        component = component_type(**kwargs)
        component._attach(self)
        self._components.append(component)
        return component

    def get_components(self) -> list[Component]:
        return list(self._components)

    def get_component(self, component_type: type[C]) -> C | None:
        for component in self._components:
            if isinstance(component, component_type):
                return component
        return None


class Component(HostObject):
    """Base for everything attachable to a SceneNode."""

    def __init__(self, name: str = "", *, instance_id: int | None = None) -> None:
        super().__init__(name, instance_id=instance_id)
        self._game_object: SceneNode | None = None

    def _attach(self, node: SceneNode) -> None:
        self._game_object = node

    @property
    def name(self) -> str:
        if self._game_object is not None:
            return self._game_object.name
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value
        if self._game_object is not None:
            self._game_object.name = value

    @property
    def game_object(self) -> SceneNode | None:
        return self._game_object

    @property
    def transform(self) -> Transform | None:
        if self._game_object is None:
            return None
        return self._game_object.transform

    @property
    def tag(self) -> str:
        if self._game_object is None:
            return "Untagged"
        return self._game_object.tag


class Behaviour(Component):
    """A component that can be enabled and disabled."""

    enabled: bool = True

    @property
    def is_active_and_enabled(self) -> bool:
        node = self.game_object
        return self.enabled and (node is None or node.active_in_hierarchy)


class MonoBehaviour(Behaviour):
    """Root of user-authored behaviour scripts; member discovery stops here."""


class Transform(Component):
    """Position, rotation and scale of a node, plus its place in the hierarchy."""

    position: Vector3 = Vector3()
    local_position: Vector3 = Vector3()
    euler_angles: Vector3 = Vector3()
    local_euler_angles: Vector3 = Vector3()
    local_scale: Vector3 = Vector3(1.0, 1.0, 1.0)

    def __init__(self, name: str = "", *, instance_id: int | None = None) -> None:
        super().__init__(name, instance_id=instance_id)
        self._parent: Transform | None = None
        self._children: list[Transform] = []

    @property
    def parent(self) -> Transform | None:
        return self._parent

    def set_parent(self, parent: Transform | None) -> None:
        if self._parent is not None:
            self._parent._children.remove(self)
        self._parent = parent
        if parent is not None:
            parent._children.append(self)

    @property
    def root(self) -> Transform:
        current = self
        while current._parent is not None:
            current = current._parent
        return current

    @property
    def child_count(self) -> int:
        return len(self._children)

    def get_child(self, index: int) -> Transform:
        return self._children[index]

    @property
    def rotation(self) -> Quaternion:
        e = self.euler_angles
        return Quaternion.euler(e.x, e.y, e.z)

    @property
    def local_rotation(self) -> Quaternion:
        e = self.local_euler_angles
        return Quaternion.euler(e.x, e.y, e.z)

    @property
    def right(self) -> Vector3:
        return self.rotation.rotate(Vector3(1.0, 0.0, 0.0))

    @property
    def up(self) -> Vector3:
        return self.rotation.rotate(Vector3(0.0, 1.0, 0.0))

    @property
    def forward(self) -> Vector3:
        return self.rotation.rotate(Vector3(0.0, 0.0, 1.0))

    @property
    def lossy_scale(self) -> Vector3:
        scale = self.local_scale
        current = self._parent
        while current is not None:
            scale = scale.scale(current.local_scale)
            current = current._parent
        return scale

    @property
    def local_to_world_matrix(self) -> Matrix4x4:
        return Matrix4x4.trs(self.position, self.rotation, self.lossy_scale)


class Camera(Behaviour):
    near_clip_plane: float = 0.3
    far_clip_plane: float = 1000.0
    field_of_view: float = 60.0
    rendering_path: RenderingPath = RenderingPath.USE_PLAYER_SETTINGS
    allow_hdr: bool = True
    allow_msaa: bool = True
    allow_dynamic_resolution: bool = False
    force_into_render_texture: bool = False
    orthographic_size: float = 5.0
    orthographic: bool = False
    opaque_sort_mode: OpaqueSortMode = OpaqueSortMode.DEFAULT
    transparency_sort_mode: TransparencySortMode = TransparencySortMode.DEFAULT
    depth: float = -1.0
    culling_mask: int = -1
    event_mask: int = -1
    background_color: Color = Color(0.19, 0.3, 0.47, 0.0)
    clear_flags: CameraClearFlags = CameraClearFlags.SKYBOX
    stereo_separation: float = 0.022
    stereo_convergence: float = 10.0
    rect: Rect = Rect(0.0, 0.0, 1.0, 1.0)

    def __init__(
        self,
        name: str = "",
        *,
        pixel_width: int = 1920,
        pixel_height: int = 1080,
        instance_id: int | None = None,
    ) -> None:
        super().__init__(name, instance_id=instance_id)
        self._pixel_width = pixel_width
        self._pixel_height = pixel_height

    @property
    def aspect(self) -> float:
        return self._pixel_width / self._pixel_height

    @property
    def actual_rendering_path(self) -> RenderingPath:
        if self.rendering_path == RenderingPath.USE_PLAYER_SETTINGS:
            return RenderingPath.FORWARD
        return self.rendering_path

    @property
    def stereo_enabled(self) -> bool:
        return False

    @property
    def pixel_rect(self) -> Rect:
        raise HostStateError("pixel_rect is only valid during a rendered frame")

    @property
    def projection_matrix(self) -> Matrix4x4:
        raise HostStateError("projection_matrix is only valid during a rendered frame")

    @property
    def world_to_camera_matrix(self) -> Matrix4x4:
        raise HostStateError(
            "world_to_camera_matrix is only valid during a rendered frame"
        )


class Renderer(Component):
    """Renders with shared materials; reading ``material`` instantiates a copy."""

    enabled: bool = True

    def __init__(
        self,
        name: str = "",
        *,
        shared_materials: list[Material] | None = None,
        instance_id: int | None = None,
    ) -> None:
        super().__init__(name, instance_id=instance_id)
        self._shared_materials = list(shared_materials or [])
        self._instanced: list[Material] | None = None
        self._instantiation_count = 0

    @property
    def shared_material(self) -> Material | None:
        return self._shared_materials[0] if self._shared_materials else None

    @property
    def shared_materials(self) -> list[Material]:
        return list(self._shared_materials)

    @property
    def materials(self) -> list[Material]:
        if self._instanced is None:
            self._instanced = [
                Material(f"{m.name} (Instance)") for m in self._shared_materials
            ]
            self._instantiation_count += len(self._instanced)
        return list(self._instanced)

    @property
    def material(self) -> Material | None:
        instanced = self.materials
        return instanced[0] if instanced else None

    def instantiation_count(self) -> int:
        return self._instantiation_count


class MeshFilter(Component):
    """Holds a shared mesh; reading ``mesh`` instantiates a copy."""

    def __init__(
        self,
        name: str = "",
        *,
        shared_mesh: Mesh | None = None,
        instance_id: int | None = None,
    ) -> None:
        super().__init__(name, instance_id=instance_id)
        self._shared_mesh = shared_mesh
        self._instanced: Mesh | None = None

    @property
    def shared_mesh(self) -> Mesh | None:
        return self._shared_mesh

    @property
    def mesh(self) -> Mesh | None:
        if self._instanced is None and self._shared_mesh is not None:
            self._instanced = Mesh(f"{self._shared_mesh.name} Instance")
        return self._instanced

    def is_instantiated(self) -> bool:
        return self._instanced is not None


class VisualElement:
    """Node of a UI visual tree; parent and children reference each other."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.parent: VisualElement | None = None
        self.children: list[VisualElement] = []

    def add(self, child: VisualElement) -> VisualElement:
        child.parent = self
        self.children.append(child)
        return child

    @property
    def hierarchy(self) -> VisualElement:
        return self


class UIDocument(MonoBehaviour):
    panel_settings: PanelSettings | None = None
    visual_tree_asset: VisualTreeAsset | None = None
    sorting_order: float = 0.0
    parent_ui: UIDocument | None = None

    def __init__(self, name: str = "", *, instance_id: int | None = None) -> None:
        super().__init__(name, instance_id=instance_id)
        self._root_visual_element: VisualElement | None = None

    @property
    def root_visual_element(self) -> VisualElement:
        if self._root_visual_element is None:
            root = VisualElement("root")
            container = root.add(VisualElement("container"))
            container.add(VisualElement("label"))
            self._root_visual_element = root
        return self._root_visual_element


class AssetDatabase:
    """Maps host objects to project asset paths ("" when not an asset)."""

    def __init__(self) -> None:
        self._paths: dict[int, str] = {}
        self._lock = threading.Lock()

    def register(self, obj: HostObject, path: str) -> None:
        with self._lock:
            self._paths[obj.get_instance_id()] = path

    def get_asset_path(self, obj: HostObject) -> str:
        return self._paths.get(obj.get_instance_id(), "")

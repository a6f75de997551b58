"""
Stand-ins for a networking library and for user scripts built on it.

The library types declare ``__module__ = "Fusion"`` so the default
vocabulary classifies them exactly like the real library.  Annotations are
evaluated eagerly here (no postponed evaluation) because the "Fusion"
module does not exist to resolve string annotations against.
"""

from enum import IntEnum
from typing import Annotated, ClassVar

from scene_kernel.host import (
    Camera,
    Material,
    MonoBehaviour,
    SerializeField,
    Transform,
)

FUSION = "Fusion"


class _Exploding:
    """Descriptor whose read always raises, like an unspawned network field."""

    def __init__(self, message):
        self.message = message

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        raise RuntimeError(self.message)


# =============================================================================
# Networking library
# =============================================================================


class SimulationBehaviour(MonoBehaviour):
    __module__ = FUSION

    @property
    def runner(self):
        raise RuntimeError("Runner is only available during a simulation")


class NetworkBehaviour(SimulationBehaviour):
    __module__ = FUSION

    _network_state_ptr: int = 0
    replicate_to_all: bool = True

    @property
    def object(self):
        raise RuntimeError("NetworkBehaviour is not spawned")


class NetworkObject(MonoBehaviour):
    __module__ = FUSION


class NetworkBool:
    __module__ = FUSION

    def __init__(self, value):
        self._value = bool(value)

    def __bool__(self):
        return self._value


class NetworkObjectGuid:
    __module__ = FUSION

    def __init__(self, raw_guid_value):
        self.raw_guid_value = raw_guid_value


class NetworkTypeIdKind(IntEnum):
    __module__ = FUSION

    Invalid = 0
    Prefab = 1
    SceneObject = 2


class NetworkPrefabId:
    __module__ = FUSION

    def __init__(self, index):
        self.index = index

    def __str__(self):
        return f"[Index:{self.index}]"


class NetworkObjectTypeId:
    __module__ = FUSION

    def __init__(self, kind, prefab_index=0):
        self.kind = kind
        self._prefab = NetworkPrefabId(prefab_index)

    @property
    def is_valid(self):
        return self.kind != NetworkTypeIdKind.Invalid

    @property
    def is_prefab(self):
        return self.kind == NetworkTypeIdKind.Prefab

    @property
    def as_prefab_id(self):
        if not self.is_prefab:
            raise ValueError("type id is not a prefab")
        return self._prefab


class NetworkId:
    __module__ = FUSION

    def __init__(self, raw):
        self.raw = raw

    @property
    def is_valid(self):
        return self.raw != 0


class PlayerRef:
    __module__ = FUSION

    def __init__(self, raw):
        self.raw = raw

    @property
    def player_id(self):
        return self.raw - 1

    @property
    def is_real_player(self):
        return self.raw > 0


class Tick:
    __module__ = FUSION

    def __init__(self, raw):
        self.raw = raw


class NetworkString:
    __module__ = FUSION

    def __init__(self, value):
        self.value = value


class Opaque:
    """A library value with no recognizable shape."""

    __module__ = FUSION

    def __init__(self):
        self._blob = object()


class SimulationModes(IntEnum):
    __module__ = FUSION

    Server = 1
    Host = 2
    Client = 4


# =============================================================================
# User scripts
# =============================================================================


class PlayerController(NetworkBehaviour):
    speed: float = 5.0
    nickname: str = "player"
    target: NetworkObject = None
    owner: PlayerRef = None
    ready: NetworkBool = None
    mode: SimulationModes = SimulationModes.Host
    _secret: int = 7
    _tuned: Annotated[float, SerializeField] = 0.5
    allies: list[NetworkObject] = None
    blob: object = None
    type_id: NetworkObjectTypeId = None


class FaultyController(NetworkBehaviour):
    broken: int = _Exploding("not spawned")
    ghost: NetworkId = _Exploding("despawned")
    empty_target: NetworkObject = None
    payload: Opaque = None
    unconvertible: object = None


class Inventory(MonoBehaviour):
    capacity: int = 10
    items: list = None
    _serialized_notes: Annotated[str, SerializeField] = "notes"
    _cache_token: int = 42
    __hidden: int = 1
    registry_size: ClassVar[int] = 3
    owner_ref: NetworkObject = None

    @property
    def total_weight(self) -> float:
        return self.capacity * 1.5

    @property
    def broken_view(self) -> int:
        raise RuntimeError("view not bound")

    @property
    def _private_view(self) -> int:
        return 0


class DerivedInventory(Inventory):
    capacity: int = 20
    bonus_slots: int = 2

    @property
    def label(self) -> str:
        return f"{self.capacity}+{self.bonus_slots}"


class SlottedScript(MonoBehaviour):
    __slots__ = ("charge",)


class RectTransform(Transform):
    pass


class FancyCamera(Camera):
    pass


class DestroyedMaterial(Material):
    """A material whose native object is gone; reading its name raises."""

    @property
    def name(self):
        raise RuntimeError("the object has been destroyed")

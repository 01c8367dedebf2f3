"""FFT shapes and configurations, with their bits-per-word capacity."""

from __future__ import annotations

import enum
import logging
import math
import re
import struct
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class FFTSpecError(ValueError):
    """An FFT specification that cannot be understood or matched."""


class CarryKind(enum.IntEnum):
    CARRY_32 = 0
    CARRY_64 = 1
    CARRY_AUTO = 2


_K = 1024
_M = _K * _K
_U32_MAX = 2**32 - 1

_NUMBER_PREFIX = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# Measured maximum bits-per-word for each shape, one value per variant.
_BPW = {
    "256:2:256": (19.521, 19.521, 19.651, 19.651),
    "256:3:256": (19.362, 19.363, 19.321, 19.392),
    "256:4:256": (19.238, 19.249, 19.342, 19.366),
    "256:2:512": (19.150, 19.150, 19.287, 19.287),
    "512:2:256": (19.150, 19.150, 19.285, 19.285),
    "256:5:256": (19.094, 19.149, 19.207, 19.268),
    "256:6:256": (19.057, 19.114, 19.052, 19.127),
    "256:3:512": (19.052, 19.058, 19.115, 19.127),
    "512:3:256": (19.053, 19.054, 19.098, 19.104),
    "256:7:256": (18.990, 19.047, 18.995, 19.055),
    "1K:2:256": (18.991, 18.991, 19.133, 19.133),
    "256:8:256": (18.910, 18.975, 18.996, 19.118),
    "256:4:512": (18.877, 18.901, 19.011, 19.038),
    "256:2:1K": (18.971, 18.971, 19.135, 19.135),
    "512:4:256": (18.875, 18.899, 19.015, 19.036),
    "512:2:512": (18.796, 18.796, 18.944, 18.944),
    "256:9:256": (18.844, 18.962, 18.852, 18.968),
    "256:10:256": (18.777, 18.887, 18.890, 19.025),
    "256:5:512": (18.729, 18.768, 18.867, 18.930),
    "512:5:256": (18.721, 18.758, 18.859, 18.926),
    "256:11:256": (18.721, 18.888, 18.814, 18.993),
    "1K:3:256": (18.830, 18.827, 18.849, 18.869),
    "256:12:256": (18.729, 18.834, 18.753, 18.842),
    "256:6:512": (18.741, 18.795, 18.797, 18.844),
    "256:3:1K": (18.831, 18.827, 18.855, 18.860),
    "512:6:256": (18.756, 18.777, 18.786, 18.842),
    "512:3:512": (18.716, 18.723, 18.799, 18.812),
    "256:13:256": (18.672, 18.773, 18.760, 18.914),
    "256:14:256": (18.639, 18.795, 18.669, 18.747),
    "256:7:512": (18.685, 18.730, 18.705, 18.767),
    "512:7:256": (18.670, 18.734, 18.697, 18.768),
    "256:15:256": (18.610, 18.753, 18.656, 18.815),
    "256:16:256": (18.552, 18.665, 18.656, 18.835),
    "1K:4:256": (18.694, 18.711, 18.816, 18.843),
    "1K:2:512": (18.627, 18.627, 18.765, 18.765),
    "256:8:512": (18.558, 18.620, 18.658, 18.740),
    "256:4:1K": (18.682, 18.696, 18.814, 18.839),
    "512:8:256": (18.570, 18.606, 18.643, 18.725),
    "512:4:512": (18.510, 18.539, 18.647, 18.670),
    "512:2:1K": (18.617, 18.617, 18.756, 18.756),
    "256:9:512": (18.550, 18.637, 18.590, 18.693),
    "512:9:256": (18.554, 18.647, 18.592, 18.672),
    "1K:5:256": (18.549, 18.591, 18.676, 18.735),
    "256:10:512": (18.458, 18.523, 18.537, 18.654),
    "256:5:1K": (18.537, 18.590, 18.676, 18.726),
    "512:10:256": (18.473, 18.530, 18.550, 18.652),
    "512:5:512": (18.408, 18.377, 18.523, 18.550),
    "256:11:512": (18.409, 18.514, 18.481, 18.636),
    "512:11:256": (18.402, 18.519, 18.479, 18.638),
    "1K:6:256": (18.515, 18.568, 18.542, 18.560),
    "1K:3:512": (18.520, 18.522, 18.582, 18.595),
    "256:12:512": (18.457, 18.543, 18.474, 18.584),
    "256:6:1K": (18.521, 18.568, 18.554, 18.592),
    "512:12:256": (18.447, 18.545, 18.479, 18.572),
    "512:6:512": (18.416, 18.435, 18.489, 18.550),
    "512:3:1K": (18.516, 18.515, 18.571, 18.584),
    "256:13:512": (18.328, 18.413, 18.453, 18.548),
    "512:13:256": (18.326, 18.419, 18.440, 18.536),
    "1K:7:256": (18.448, 18.508, 18.481, 18.531),
    "256:14:512": (18.342, 18.507, 18.399, 18.519),
    "256:7:1K": (18.453, 18.501, 18.464, 18.522),
    "512:14:256": (18.310, 18.504, 18.379, 18.531),
    "512:7:512": (18.336, 18.375, 18.426, 18.480),
    "256:15:512": (18.287, 18.404, 18.377, 18.516),
    "512:15:256": (18.292, 18.417, 18.365, 18.522),
    "512:16:256": (18.282, 18.367, 18.300, 18.507),
    "1K:8:256": (18.360, 18.438, 18.470, 18.574),
    "1K:4:512": (18.330, 18.373, 18.479, 18.503),
    "1K:2:1K": (18.440, 18.440, 18.581, 18.581),
    "256:8:1K": (18.349, 18.419, 18.470, 18.577),
    "512:8:512": (18.196, 18.253, 18.316, 18.393),
    "512:4:1K": (18.319, 18.337, 18.468, 18.499),
    "4K:2:256": (18.285, 18.285, 18.461, 18.461),
    "1K:9:256": (18.313, 18.425, 18.331, 18.455),
    "256:9:1K": (18.323, 18.412, 18.348, 18.450),
    "512:9:512": (18.208, 18.275, 18.300, 18.404),
    "1K:10:256": (18.241, 18.326, 18.359, 18.493),
    "1K:5:512": (18.189, 18.231, 18.334, 18.372),
    "256:10:1K": (18.230, 18.323, 18.323, 18.486),
    "512:10:512": (18.103, 18.128, 18.193, 18.292),
    "512:5:1K": (18.203, 18.218, 18.312, 18.360),
    "1K:11:256": (18.189, 18.332, 18.264, 18.461),
    "256:11:1K": (18.194, 18.326, 18.262, 18.449),
    "512:11:512": (18.081, 18.165, 18.179, 18.300),
    "1K:12:256": (18.202, 18.312, 18.218, 18.330),
    "1K:6:512": (18.219, 18.252, 18.271, 18.311),
    "1K:3:1K": (18.287, 18.297, 18.328, 18.334),
    "256:12:1K": (18.206, 18.314, 18.221, 18.315),
    "512:12:512": (18.120, 18.177, 18.187, 18.279),
    "512:6:1K": (18.207, 18.255, 18.273, 18.313),
    "4K:3:256": (18.208, 18.206, 18.315, 18.311),
    "1K:13:256": (18.154, 18.232, 18.238, 18.383),
    "256:13:1K": (18.165, 18.228, 18.241, 18.375),
    "512:13:512": (18.017, 18.071, 18.121, 18.216),
    "1K:14:256": (18.118, 18.249, 18.140, 18.265),
    "1K:7:512": (18.162, 18.208, 18.186, 18.244),
    "256:14:1K": (18.134, 18.244, 18.150, 18.216),
    "512:14:512": (18.027, 18.123, 18.122, 18.229),
    "512:7:1K": (18.151, 18.205, 18.198, 18.252),
    "1K:15:256": (18.099, 18.220, 18.137, 18.274),
    "1K:16:256": (18.025, 18.128, 18.120, 18.286),
    "256:15:1K": (18.104, 18.209, 18.152, 18.277),
    "512:15:512": (17.973, 18.074, 18.075, 18.183),
    "1K:8:512": (18.015, 18.090, 18.148, 18.222),
    "1K:4:1K": (18.161, 18.180, 18.249, 18.302),
    "512:8:1K": (18.029, 18.077, 18.136, 18.212),
    "4K:4:256": (18.043, 18.061, 18.189, 18.200),
    "4K:2:512": (18.002, 18.002, 18.118, 18.118),
    "1K:9:512": (18.027, 18.118, 18.065, 18.165),
    "512:9:1K": (18.016, 18.104, 18.083, 18.170),
    "1K:10:512": (17.909, 17.978, 18.022, 18.122),
    "1K:5:1K": (18.011, 18.055, 18.133, 18.213),
    "512:10:1K": (17.905, 17.972, 18.024, 18.112),
    "4K:5:256": (17.914, 17.915, 18.018, 18.080),
    "1K:11:512": (17.873, 17.998, 17.962, 18.128),
    "512:11:1K": (17.871, 17.973, 17.977, 18.114),
    "1K:12:512": (17.929, 18.017, 17.961, 18.060),
    "1K:6:1K": (17.992, 18.040, 18.003, 18.056),
    "512:12:1K": (17.929, 18.013, 17.963, 18.057),
    "4K:6:256": (17.922, 17.954, 17.995, 18.056),
    "4K:3:512": (17.864, 17.868, 18.005, 18.005),
    "1K:13:512": (17.806, 17.883, 17.932, 18.020),
    "512:13:1K": (17.797, 17.883, 17.934, 18.013),
    "1K:14:512": (17.815, 17.958, 17.882, 18.002),
    "1K:7:1K": (17.925, 17.973, 17.947, 18.005),
    "512:14:1K": (17.822, 17.952, 17.868, 18.003),
    "4K:7:256": (17.846, 17.897, 17.931, 18.002),
    "1K:15:512": (17.763, 17.884, 17.860, 17.996),
    "512:15:1K": (17.773, 17.884, 17.863, 17.996),
    "512:16:1K": (17.675, 17.820, 17.787, 17.976),
    "1K:8:1K": (17.806, 17.881, 17.932, 18.043),
    "4K:8:256": (17.715, 17.744, 17.821, 17.897),
    "4K:4:512": (17.678, 17.699, 17.819, 17.840),
    "4K:2:1K": (17.765, 17.765, 17.941, 17.941),
    "1K:9:1K": (17.792, 17.892, 17.831, 17.941),
    "4K:9:256": (17.721, 17.789, 17.810, 17.889),
    "1K:10:1K": (17.699, 17.788, 17.797, 17.951),
    "4K:10:256": (17.599, 17.679, 17.710, 17.786),
    "4K:5:512": (17.560, 17.597, 17.694, 17.716),
    "1K:11:1K": (17.669, 17.776, 17.732, 17.927),
    "4K:11:256": (17.564, 17.678, 17.671, 17.811),
    "1K:12:1K": (17.691, 17.772, 17.713, 17.800),
    "4K:12:256": (17.603, 17.694, 17.687, 17.788),
    "4K:6:512": (17.561, 17.613, 17.696, 17.736),
    "4K:3:1K": (17.674, 17.678, 17.766, 17.778),
    "1K:13:1K": (17.613, 17.688, 17.716, 17.836),
    "4K:13:256": (17.515, 17.583, 17.624, 17.685),
    "1K:14:1K": (17.596, 17.716, 17.626, 17.741),
    "4K:14:256": (17.505, 17.636, 17.579, 17.713),
    "4K:7:512": (17.528, 17.547, 17.631, 17.683),
    "1K:15:1K": (17.566, 17.672, 17.624, 17.747),
    "1K:16:1K": (17.472, 17.617, 17.573, 17.755),
    "4K:15:256": (17.478, 17.566, 17.569, 17.693),
    "4K:16:256": (17.450, 17.538, 17.519, 17.652),
    "4K:8:512": (17.385, 17.424, 17.497, 17.555),
    "4K:4:1K": (17.494, 17.526, 17.626, 17.646),
    "4K:9:512": (17.400, 17.465, 17.500, 17.591),
    "4K:10:512": (17.263, 17.350, 17.374, 17.473),
    "4K:5:1K": (17.365, 17.398, 17.499, 17.534),
    "4K:11:512": (17.245, 17.323, 17.366, 17.473),
    "4K:12:512": (17.279, 17.341, 17.400, 17.488),
    "4K:6:1K": (17.369, 17.416, 17.466, 17.519),
    "4K:13:512": (17.161, 17.236, 17.287, 17.352),
    "4K:14:512": (17.180, 17.264, 17.296, 17.431),
    "4K:7:1K": (17.302, 17.355, 17.391, 17.445),
    "4K:15:512": (17.141, 17.228, 17.255, 17.376),
    "4K:8:1K": (17.174, 17.178, 17.292, 17.360),
    "4K:9:1K": (17.185, 17.259, 17.280, 17.361),
    "4K:10:1K": (17.091, 17.150, 17.185, 17.227),
    "4K:11:1K": (17.070, 17.144, 17.154, 17.260),
    "4K:12:1K": (17.099, 17.158, 17.180, 17.250),
    "4K:13:1K": (16.988, 17.039, 17.107, 17.156),
    "4K:14:1K": (17.023, 17.107, 17.094, 17.205),
    "4K:15:1K": (16.949, 17.050, 17.072, 17.164),
}


def _as_float32(x: float) -> float:
    return struct.unpack("f", struct.pack("f", x))[0]


def number_k(n: int) -> str:
    """Format ``n`` with a K or M suffix when it is a multiple of 1024 or 1024*1024."""
    if n % _M == 0:
        return f"{n // _M}M"
    if n >= _M and (n * 100) % _M == 0:
        return "%.2fM" % _as_float32(n / _M)
    if n >= _K:
        return "%gK" % _as_float32(n / _K)
    return str(n)


def parse_int(s: str) -> int:
    """Parse a number with an optional K (x1024) or M (x1024*1024) suffix."""
    if not s:
        raise FFTSpecError("empty number in FFT spec")
    last = s[-1]
    multiple = _K if last in "kK" else _M if last in "mM" else 1
    match = _NUMBER_PREFIX.match(s)
    value = float(match.group()) if match else 0.0
    return int(value * multiple)


@dataclass
class FFTShape:
    """An FFT of ``width * middle * height * 2`` words."""

    MIN_BPW = 3.0

    width: int = 1
    middle: int = 1
    height: int = 1
    bpw: tuple[float, float, float, float] | None = field(default=None, init=False, compare=False)

    def __post_init__(self) -> None:
        if not (self.width and self.middle and self.height):
            raise FFTSpecError(f"invalid FFT shape {self.width}:{self.middle}:{self.height}")
        if self.width == 1 and self.middle == 1 and self.height == 1:
            return
        s = self.spec()
        known = _BPW.get(s)
        if known is not None:
            self.bpw = known
        elif self.height > self.width:
            self.bpw = FFTShape(self.height, self.middle, self.width).bpw
        else:
            d = 0.275 * (math.log2(self.size()) - math.log2(256 * 13 * 1024 * 2))
            self.bpw = (18.1 - d, 18.2 - d, 18.2 - d, 18.3 - d)
            logger.info(
                "BPW info for %s not found, defaults={%.2f, %.2f, %.2f, %.2f}", s, *self.bpw
            )

    @classmethod
    def from_spec(cls, spec: str) -> "FFTShape":
        """Build a shape from ``width:middle:height``, e.g. ``1K:13:256``."""
        parts = spec.split(":")
        if not spec or len(parts) != 3:
            raise FFTSpecError(f"FFT shape spec must be width:middle:height, got '{spec}'")
        return cls(*(parse_int(p) for p in parts))

    @classmethod
    def all_shapes(cls, size_from: int = 0, size_to: int = _U32_MAX) -> list["FFTShape"]:
        """All supported shapes whose size lies in [size_from, size_to], in preference order."""
        shapes = [
            cls(width, middle, height)
            for width in (256, 512, 1024, 4096)
            for height in (256, 512, 1024)
            if not (width == 256 and height == 1024)
            for middle in range(2, 17)
            if size_from <= width * height * middle * 2 <= size_to
        ]
        shapes.sort(key=lambda s: (s.size(), s.width != 1024, s.width, s.height))
        return shapes

    @classmethod
    def multi_spec(cls, spec: str) -> list["FFTShape"]:
        """Shapes named by a spec: a shape, a size, a size range, or a comma list of those."""
        if not spec:
            return cls.all_shapes()
        result: list[FFTShape] = []
        for part in spec.split(","):
            pieces = part.split(":")
            if len(pieces) == 3:
                result.append(cls(*(parse_int(p) for p in pieces)))
                continue
            if len(pieces) != 1:
                raise FFTSpecError(f"Invalid FFT spec '{part}'")
            bounds = part.split("-")
            if len(bounds) > 2:
                raise FFTSpecError(f"Invalid FFT spec '{part}'")
            size_from = parse_int(bounds[0])
            size_to = parse_int(bounds[1]) if len(bounds) == 2 else size_from
            shapes = cls.all_shapes(size_from, size_to)
            if not shapes:
                logger.warning("Could not find a FFT config for '%s'", part)
                raise FFTSpecError(f"Invalid FFT spec '{part}'")
            result.extend(shapes)
        return result

    def size(self) -> int:
        return self.width * self.height * self.middle * 2

    def n_w(self) -> int:
        return 4 if self.width in (1024, 256) else 8

    def n_h(self) -> int:
        return 4 if self.height in (1024, 256) else 8

    def max_bpw(self) -> float:
        if self.bpw is None:
            raise FFTSpecError("uninitialised FFT shape has no BPW")
        return max(self.bpw)

    def spec(self) -> str:
        return f"{number_k(self.width)}:{number_k(self.middle)}:{number_k(self.height)}"

    def carry32_bpw(self) -> float:
        """Highest bits-per-word at which 32-bit carries are safe."""
        return 18.35 + 0.5 * (math.log2(13 * 1024 * 512) - math.log2(self.size()))

    def needs_large_carry(self, e: int) -> bool:
        return e / self.size() > self.carry32_bpw()


@dataclass
class FFTConfig:
    """A shape together with a variant and a carry kind."""

    N_VARIANT = 4

    shape: FFTShape
    variant: int = 3
    carry: CarryKind = CarryKind.CARRY_AUTO

    def __post_init__(self) -> None:
        if not 0 <= self.variant < self.N_VARIANT:
            raise FFTSpecError(f"FFT variant must be below {self.N_VARIANT}, got {self.variant}")
        self.carry = CarryKind(self.carry)

    @classmethod
    def from_spec(cls, spec: str) -> "FFTConfig":
        """Parse ``size``, ``w:m:h``, ``w:m:h:variant`` or ``w:m:h:variant:carry``."""
        parts = spec.split(":")
        if len(parts) == 1:
            return cls(FFTShape.multi_spec(spec)[0], 3, CarryKind.CARRY_AUTO)
        if len(parts) == 3:
            return cls(FFTShape.from_spec(spec), 3, CarryKind.CARRY_AUTO)
        if len(parts) == 4:
            return cls(FFTShape.from_spec(":".join(parts[:3])), parse_int(parts[3]), CarryKind.CARRY_AUTO)
        if len(parts) == 5:
            c = parse_int(parts[4])
            if c not in (0, 1):
                raise FFTSpecError(f"FFT carry must be 0 or 1, got '{parts[4]}'")
            carry = CarryKind.CARRY_32 if c == 0 else CarryKind.CARRY_64
            return cls(FFTShape.from_spec(":".join(parts[:3])), parse_int(parts[3]), carry)
        raise FFTSpecError(f"Invalid FFT spec '{spec}'")

    def spec(self) -> str:
        s = f"{self.shape.spec()}:{self.variant}"
        if self.carry == CarryKind.CARRY_AUTO:
            return s
        return s + (":0" if self.carry == CarryKind.CARRY_32 else ":1")

    def size(self) -> int:
        return self.shape.size()

    def max_bpw(self) -> float:
        if self.shape.bpw is None:
            raise FFTSpecError("uninitialised FFT shape has no BPW")
        b = self.shape.bpw[self.variant]
        return min(self.shape.carry32_bpw(), b) if self.carry == CarryKind.CARRY_32 else b

    def max_exp(self) -> int:
        return int(self.max_bpw() * self.shape.size())
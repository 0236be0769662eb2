from importlib.metadata import distribution

from . import config  # noqa: F401
from .annotation import (  # noqa: F401
    apply_av,
    clipping_av,
    complexity_av,
    default_av,
    meanstd_av,
)
from .core import diagonal_batches, e2p, mass, p2e, z_norm  # noqa: F401
from .discords import discords  # noqa: F401
from .errors import (  # noqa: F401
    DegenerateSeries,
    InvalidInput,
    InvalidK,
    InvalidLength,
    InvalidRadius,
    InvalidWindow,
    IOFailure,
    LengthMismatch,
)
from .floss import fluss, segment  # noqa: F401
from .matrixprofile import MatrixProfile  # noqa: F401
from .motifs import MotifGroup, motifs  # noqa: F401
from .mparray import mparray  # noqa: F401
from .mpdist import mpdist  # noqa: F401
from .mpx import mpx  # noqa: F401
from .stamp import stamp  # noqa: F401
from .stmp import stmp  # noqa: F401
from .stomp import stomp  # noqa: F401
from .stompi import stompi  # noqa: F401

try:
    _dist = distribution("tsprofile")
except ModuleNotFoundError:  # pragma: no cover
    __version__ = "Please install this project with setup.py"
else:  # pragma: no cover
    __version__ = _dist.version

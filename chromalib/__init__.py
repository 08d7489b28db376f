__title__ = 'chromalib'
__version__ = '0.1.0'
__description__ = 'Colour-space conversions, spectral locus and tristimulus integration for colorimetry visualizations'
__author__ = 'chromalib developers'
__build__ = 0
__license__ = 'MIT'
__copyright__ = 'Copyright 2024 chromalib developers'

from .errors import *
from .utils import *
from .ref_spectra import *
from .conversions import *
from .locus import *
from .tristimulus import *
from .color_system import *

import sys
from pathlib import Path

# tests import the package as `src.kernelforge`
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Ensure 'backend/' is on sys.path so 'import tutorly' works without
# installing the package, whichever directory pytest is started from.
from pathlib import Path
import sys

_BACKEND_ROOT = Path(__file__).resolve().parent
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

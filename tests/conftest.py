import sys
import pathlib

sys.path.append(str(pathlib.Path(__file__).parent))
root_dir = pathlib.Path(__file__).resolve().parents[1]
# Ensure the src package is importable
if str(root_dir / "src") not in sys.path:
    sys.path.append(str(root_dir / "src"))

from fixtures.feeds import store, ladder_book  # noqa: E402, F401
